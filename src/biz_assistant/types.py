"""Shared domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class IntentKind(str, Enum):
    """Business domains a free-text question can be about."""

    CUSTOMER = "customer"
    SALES = "sales"
    PROGRESS = "progress"
    MEETING = "meeting"
    TODO = "todo"
    EVENT = "event"
    DOCUMENT = "document"
    PDCA = "pdca"
    UNKNOWN = "unknown"


class ActionVerb(str, Enum):
    CREATE = "create"
    CHECK = "check"
    UPDATE = "update"
    DELETE = "delete"


class ActionDomain(str, Enum):
    """Targets of write operations; broader than `IntentKind`."""

    INVOICE = "invoice"
    TODO = "todo"
    CUSTOMER = "customer"
    CONTRACT = "contract"
    DOCUMENT = "document"


@dataclass(frozen=True, slots=True)
class Intent:
    """Classifier decision for one query."""

    kind: IntentKind
    bound_menu_id: str | None = None

    @property
    def is_unknown(self) -> bool:
        return self.kind is IntentKind.UNKNOWN


@dataclass(frozen=True, slots=True)
class ActionRequest:
    """A detected create/check/update/delete request."""

    verb: ActionVerb
    domain: ActionDomain
    entities: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class SectionFilter:
    canonical_key: str
    display_name: str


@dataclass(slots=True)
class StructuredQuery:
    """Structured form of a query against one domain descriptor."""

    free_keywords: list[str] = field(default_factory=list)
    field_queries: dict[str, list[str]] = field(default_factory=dict)
    section_filter: SectionFilter | None = None
    title_filter: str | None = None


@dataclass(slots=True)
class CandidateRecord:
    """A record fetched from the document store."""

    id: str
    data: dict[str, Any]

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)


@dataclass(slots=True)
class ContextResult:
    """Output of the search path for one bound domain."""

    domain: IntentKind
    records: list[CandidateRecord]
    formatted: str
    page_url: str | None = None


@dataclass(slots=True)
class FetchTrace:
    """Trace record for one store sub-fetch."""

    collection: str
    scope_mode: str
    record_count: int
    latency_ms: float
    error: str | None = None


@dataclass(slots=True)
class ToolTrace:
    """Trace record for one exported tool call; argument values are not kept."""

    name: str
    argument_names: list[str]
    output_preview: str
    latency_ms: float


@dataclass(slots=True)
class AssistantAnswer:
    """Inbound operation result: always carries a non-empty response text."""

    response_text: str
    intent_tag: str
    page_url: str | None = None
    resolution: str = ""
    fetch_traces: list[FetchTrace] = field(default_factory=list)
