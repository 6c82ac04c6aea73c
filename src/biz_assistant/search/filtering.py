"""Result filtering under ordered match policies, plus deterministic ordering."""

from __future__ import annotations

import json
from datetime import date, datetime
from typing import Any

from biz_assistant.catalog.models import DomainDescriptor
from biz_assistant.search.formatter import display_title, section_text, stringify_value
from biz_assistant.search.query_builder import is_general_listing, normalize
from biz_assistant.types import CandidateRecord, StructuredQuery


class ResultFilter:
    """Applies a `StructuredQuery` to candidate records.

    Policies, first applicable decides:
    1. general listing phrase: include everything
    2. title filter: records whose title does not match are excluded outright
    3. section filter: non-empty section content (exclusive when a title is set)
    4. field queries found in the corresponding field value
    5. status label in the raw query equal to the record status
    6. free keyword found in the serialized record
    7. title match alone, when no section/field constraints exist
    """

    def __init__(self, descriptor: DomainDescriptor) -> None:
        self.descriptor = descriptor

    def filter(
        self,
        records: list[CandidateRecord],
        query: StructuredQuery,
        raw_query: str,
    ) -> list[CandidateRecord]:
        if is_general_listing(raw_query):
            return list(records)
        lowered = normalize(raw_query)
        return [record for record in records if self._include(record, query, lowered)]

    def _include(
        self, record: CandidateRecord, query: StructuredQuery, lowered: str
    ) -> bool:
        if query.title_filter and not self._title_matches(record, query.title_filter):
            return False

        if query.section_filter is not None:
            matched = bool(
                section_text(record, self.descriptor, query.section_filter.canonical_key)
            )
            if query.title_filter:
                return matched
            if matched:
                return True

        if self._field_query_matches(record, query):
            return True

        if self._status_matches(record, lowered):
            return True

        if self._keyword_matches(record, query):
            return True

        return bool(
            query.title_filter
            and query.section_filter is None
            and not query.field_queries
        )

    def _title_matches(self, record: CandidateRecord, title_filter: str) -> bool:
        title = display_title(record, self.descriptor).lower()
        wanted = title_filter.lower()
        if not title:
            return False
        return title == wanted or wanted in title or title in wanted

    def _field_query_matches(self, record: CandidateRecord, query: StructuredQuery) -> bool:
        for field_name, needles in query.field_queries.items():
            value = stringify_value(record.get(field_name)).lower()
            if value and any(needle.lower() in value for needle in needles):
                return True
        return False

    def _status_matches(self, record: CandidateRecord, lowered: str) -> bool:
        # Mappings name sections, not status labels, when sections are configured.
        if self.descriptor.sections_field is not None:
            return False
        status = record.get(self.descriptor.status_field)
        if not isinstance(status, str):
            return False
        for mapping in self.descriptor.field_mappings:
            if any(name.lower() in lowered for name in mapping.display_names):
                return status.lower() == mapping.canonical_key.lower()
        return False

    def _keyword_matches(self, record: CandidateRecord, query: StructuredQuery) -> bool:
        if not query.free_keywords:
            return False
        serialized = json.dumps(record.data, ensure_ascii=False, default=str).lower()
        return any(keyword.lower() in serialized for keyword in query.free_keywords)


def sort_records(
    records: list[CandidateRecord], sort_field: str | None
) -> list[CandidateRecord]:
    """Newest first by `sort_field`; missing values last; ties keep input order."""

    if not sort_field:
        return list(records)
    dated = [(record, _sort_key(record.get(sort_field))) for record in records]
    present = [item for item in dated if item[1] is not None]
    missing = [record for record, key in dated if key is None]
    present.sort(key=lambda item: item[1], reverse=True)
    return [record for record, _ in present] + missing


def _sort_key(value: Any) -> str | None:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return f"{value:020.6f}"
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None
