"""Immutable domain metadata catalog built on Pydantic v2 models."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, model_validator

from biz_assistant.types import IntentKind


class CatalogError(ValueError):
    """Raised when a catalog definition is inconsistent."""


class ScopeMode(str, Enum):
    BY_TENANT = "by-tenant"
    BY_OWNER = "by-owner"
    NONE = "none"
    SHARED_WITH = "shared-with"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class SearchableField(_Frozen):
    """A record field the assistant may match against, with its display names."""

    name: str = Field(min_length=1)
    display_names: tuple[str, ...] = Field(min_length=1)


class FieldMapping(_Frozen):
    """Maps display labels to a stored key (section name or enum value)."""

    canonical_key: str = Field(min_length=1)
    display_names: tuple[str, ...] = Field(min_length=1)


class DomainDescriptor(_Frozen):
    """Search descriptor attached to a menu item.

    `sections_field` names the nested mapping holding document sections. When
    it is unset, `field_mappings` translate labels of `status_field` values
    instead of naming sections.
    """

    collection: str = Field(min_length=1)
    extra_collections: tuple[str, ...] = ()
    scope: ScopeMode = ScopeMode.BY_TENANT
    shared_field: str | None = None
    limit: int | None = Field(default=None, ge=1)
    title_fields: tuple[str, ...] = ("title", "name", "text")
    sections_field: str | None = None
    status_field: str = "status"
    sort_field: str | None = "updatedAt"
    searchable_fields: tuple[SearchableField, ...] = ()
    field_mappings: tuple[FieldMapping, ...] = ()

    @model_validator(mode="after")
    def _check_scope_and_mappings(self) -> "DomainDescriptor":
        if self.scope is ScopeMode.SHARED_WITH:
            raise CatalogError(
                f"Collection {self.collection!r}: shared-with is not a descriptor scope; "
                "set shared_field instead"
            )
        owners: dict[str, str] = {}
        for mapping in self.field_mappings:
            for name in mapping.display_names:
                key = name.lower()
                owner = owners.setdefault(key, mapping.canonical_key)
                if owner != mapping.canonical_key:
                    raise CatalogError(
                        f"Display name {name!r} maps to both {owner!r} and "
                        f"{mapping.canonical_key!r} in collection {self.collection!r}"
                    )
        return self

    @property
    def collections(self) -> tuple[str, ...]:
        return (self.collection, *self.extra_collections)

    @property
    def is_searchable(self) -> bool:
        return bool(self.searchable_fields)


class MenuItem(_Frozen):
    """A navigable page of the application, optionally searchable."""

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    href: str
    category: str = "other"
    description: str = ""
    intent: IntentKind | None = None
    priority: int = 100
    search: DomainDescriptor | None = None


class PageOperation(_Frozen):
    id: str
    label: str
    description: str = ""


class PageContext(_Frozen):
    """What a page is for and what the user can do there."""

    page: IntentKind
    label: str
    description: str
    url: str
    keywords: tuple[str, ...] = ()
    operations: tuple[PageOperation, ...] = ()


class DomainCatalog(_Frozen):
    """Read-only registry of menu items and page contexts."""

    menu_items: tuple[MenuItem, ...]
    pages: tuple[PageContext, ...] = ()
    document_menu_id: str
    category_names: dict[str, str] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_document_menu(self) -> "DomainCatalog":
        ids = [item.id for item in self.menu_items]
        if len(ids) != len(set(ids)):
            raise CatalogError("Menu item ids must be unique")
        if self.document_menu_id not in ids:
            raise CatalogError(f"Unknown document menu id: {self.document_menu_id}")
        return self

    def ordered_menu_items(self) -> list[MenuItem]:
        """Menu items by ascending priority; ties keep declaration order."""
        return sorted(self.menu_items, key=lambda item: item.priority)

    def list_domain_descriptors(self) -> list[tuple[MenuItem, DomainDescriptor]]:
        return [
            (item, item.search)
            for item in self.ordered_menu_items()
            if item.search is not None
        ]

    def get_menu(self, menu_id: str | None) -> MenuItem | None:
        if menu_id is None:
            return None
        for item in self.menu_items:
            if item.id == menu_id:
                return item
        return None

    @property
    def document_menu(self) -> MenuItem:
        menu = self.get_menu(self.document_menu_id)
        if menu is None:
            raise CatalogError(f"Unknown document menu id: {self.document_menu_id}")
        return menu

    def menu_for_intent(self, kind: IntentKind) -> MenuItem | None:
        """First searchable menu bound to `kind`, in catalog order."""
        if kind is IntentKind.DOCUMENT:
            return self.document_menu
        for item in self.ordered_menu_items():
            if item.intent is kind and item.search is not None:
                return item
        return None

    def get_page_context(self, kind: IntentKind) -> PageContext | None:
        for page in self.pages:
            if page.page is kind:
                return page
        return None

    def display_names(self) -> list[str]:
        return [item.name for item in self.ordered_menu_items()]


def load_catalog(path: str | Path) -> DomainCatalog:
    """Load a catalog from a JSON file."""

    file_path = Path(path)
    try:
        return DomainCatalog.model_validate_json(file_path.read_text(encoding="utf-8"))
    except ValueError as exc:
        raise CatalogError(f"Invalid catalog file {file_path}: {exc}") from exc
