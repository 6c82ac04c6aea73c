"""Business assistant package."""

from .config import AssistantConfig, SearchConfig, StoreConfig

__all__ = ["AssistantConfig", "SearchConfig", "StoreConfig"]
