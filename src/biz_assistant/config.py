"""Configuration models for the assistant."""

from __future__ import annotations

from pydantic import BaseModel, Field


class SearchConfig(BaseModel):
    """Configures candidate fetching and answer rendering."""

    default_limit: int = Field(default=50, ge=1)
    max_display_results: int = Field(default=10, ge=1)
    record_separator: str = Field(default="\n\n", min_length=1)


class StoreConfig(BaseModel):
    """Field names used to scope records by tenant and owner."""

    tenant_field: str = Field(default="companyName", min_length=1)
    owner_field: str = Field(default="userId", min_length=1)
    users_collection: str = Field(default="users", min_length=1)
    id_field: str = Field(default="id", min_length=1)


class AssistantConfig(BaseModel):
    """Top-level configuration passed to the orchestrator."""

    search: SearchConfig = Field(default_factory=SearchConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
