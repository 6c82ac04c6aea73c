"""Builds a `StructuredQuery` from free text and a domain descriptor.

Structured slots (title, section, per-field hits) are extracted first; the
remaining text becomes free keywords for full-text fallback matching.
"""

from __future__ import annotations

import logging
import re

from biz_assistant.catalog.models import DomainDescriptor, FieldMapping
from biz_assistant.types import SectionFilter, StructuredQuery

logger = logging.getLogger(__name__)

GENERAL_LISTING_PHRASES: tuple[str, ...] = (
    "一覧",
    "全部",
    "すべて",
    "全て",
    "全件",
    "list",
    "everything",
    "show all",
)

_ASK_SUFFIX = r"(?:について|を教えて|が知りたい|を知りたい|とは|は[？?])"

# "<title>の<section>について教えて"
TITLE_SECTION_PATTERN = re.compile(r"^\s*(.+?)の(.+?)" + _ASK_SUFFIX)
# "<subject>について教えて"
SUBJECT_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^\s*(.+?)" + _ASK_SUFFIX),
    re.compile(r"^\s*(.+?)の(?:概要|内容)"),
)

_STOP_PHRASES: tuple[str, ...] = (
    "について",
    "を教えて",
    "教えて",
    "ください",
    "とは",
    "の",
    "を",
    "は",
    "が",
)
_PUNCTUATION = re.compile(r"[、。！？!?「」]")


def normalize(text: str) -> str:
    return (text or "").strip().lower()


def is_general_listing(query: str) -> bool:
    lowered = normalize(query)
    return any(phrase in lowered for phrase in GENERAL_LISTING_PHRASES)


def tokenize(text: str) -> list[str]:
    """Whitespace tokens (length > 1) after removing particles and punctuation."""

    cleaned = _PUNCTUATION.sub(" ", normalize(text))
    for phrase in _STOP_PHRASES:
        cleaned = cleaned.replace(phrase, " ")
    return [token for token in cleaned.split() if len(token) > 1]


def extract_title_and_section(query: str) -> tuple[str | None, str | None]:
    """Return `(subject, section)`; at most one pattern fires."""

    match = TITLE_SECTION_PATTERN.search(query)
    if match:
        return match.group(1).strip() or None, match.group(2).strip() or None
    for pattern in SUBJECT_PATTERNS:
        match = pattern.search(query)
        if match:
            return match.group(1).strip() or None, None
    return None, None


def resolve_section(name: str, mappings: tuple[FieldMapping, ...]) -> SectionFilter | None:
    """First mapping whose display name contains or is contained in `name`."""

    lowered = normalize(name)
    if not lowered:
        return None
    for mapping in mappings:
        for display_name in mapping.display_names:
            candidate = display_name.lower()
            if candidate in lowered or lowered in candidate:
                return SectionFilter(mapping.canonical_key, display_name)
    return None


def scan_mappings(text: str, mappings: tuple[FieldMapping, ...]) -> FieldMapping | None:
    """First mapping with a display name occurring in `text`."""

    lowered = normalize(text)
    for mapping in mappings:
        if any(name.lower() in lowered for name in mapping.display_names):
            return mapping
    return None


class QueryBuilder:
    """Turns raw text into a structured query for one domain."""

    def __init__(self, menu_display_names: list[str] | tuple[str, ...]) -> None:
        self._menu_names = [name.lower() for name in menu_display_names if name]

    def build(self, query: str, descriptor: DomainDescriptor) -> StructuredQuery:
        structured = StructuredQuery()
        lowered = normalize(query)

        subject, section_name = extract_title_and_section(query)
        if subject and self._is_menu_name(subject):
            logger.debug("Dropping subject %r: matches a menu display name", subject)
            subject = None
        structured.title_filter = subject

        if descriptor.sections_field is not None:
            if section_name:
                structured.section_filter = resolve_section(
                    section_name, descriptor.field_mappings
                )
            elif not is_general_listing(query):
                mapping = scan_mappings(lowered, descriptor.field_mappings)
                if mapping is not None:
                    hit = next(
                        name for name in mapping.display_names if name.lower() in lowered
                    )
                    structured.section_filter = SectionFilter(mapping.canonical_key, hit)

        field_text = lowered.replace(subject.lower(), " ") if subject else lowered
        for field in descriptor.searchable_fields:
            hits = [name for name in field.display_names if name.lower() in field_text]
            if hits:
                structured.field_queries[field.name] = hits

        tokens = tokenize(query)
        if subject:
            title_tokens = set(tokenize(subject)) | {subject.lower()}
            tokens = [
                token
                for token in tokens
                if not any(token in t or t in token for t in title_tokens)
            ]
            tokens.append(subject.lower())
        structured.free_keywords = _dedupe(tokens)
        return structured

    def _is_menu_name(self, subject: str) -> bool:
        lowered = subject.lower()
        return any(
            lowered == name or lowered in name or name in lowered
            for name in self._menu_names
        )


def _dedupe(items: list[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            out.append(item)
    return out
