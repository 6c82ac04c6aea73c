"""Renders matched records into a single text answer."""

from __future__ import annotations

from typing import Any

from biz_assistant.catalog.models import DomainDescriptor
from biz_assistant.config import SearchConfig
from biz_assistant.types import CandidateRecord, SectionFilter, StructuredQuery

BULLET = "• "


def stringify_section(value: Any) -> str:
    """Section text: strings as-is, lists as bullets, anything else empty.

    List items may be plain strings or `{title, content}` objects (question /
    answer pairs are accepted under those keys too); a blank half is omitted.
    """

    if isinstance(value, str):
        return value.strip()
    if not isinstance(value, (list, tuple)):
        return ""

    lines: list[str] = []
    for item in value:
        if isinstance(item, str):
            if item.strip():
                lines.append(f"{BULLET}{item.strip()}")
        elif isinstance(item, dict):
            title = _text(item.get("title") or item.get("question"))
            content = _text(item.get("content") or item.get("answer"))
            if title and content:
                lines.append(f"{BULLET}{title}\n  {content}")
            elif title or content:
                lines.append(f"{BULLET}{title or content}")
    return "\n".join(lines)


def stringify_value(value: Any) -> str:
    """Plain field value for listings."""

    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (list, tuple)):
        parts = [stringify_value(item) if not isinstance(item, dict) else _join_dict(item) for item in value]
        return "、".join(part for part in parts if part)
    if isinstance(value, dict):
        return _join_dict(value)
    return str(value).strip()


def section_text(record: CandidateRecord, descriptor: DomainDescriptor, key: str) -> str:
    if descriptor.sections_field is None:
        return ""
    sections = record.get(descriptor.sections_field)
    if not isinstance(sections, dict):
        return ""
    value = sections.get(key)
    if value is None:
        return ""
    return stringify_section(value)


def display_title(record: CandidateRecord, descriptor: DomainDescriptor) -> str:
    for field_name in descriptor.title_fields:
        value = stringify_value(record.get(field_name))
        if value:
            return value
    return ""


def not_found_message(domain_label: str) -> str:
    return (
        f"{domain_label}で該当するデータが見つかりませんでした。"
        "キーワードを変えて、もう一度お試しください。"
    )


class ResponseFormatter:
    """Formats records for a domain, honoring section and display limits."""

    def __init__(self, config: SearchConfig | None = None) -> None:
        self.config = config or SearchConfig()

    def format(
        self,
        records: list[CandidateRecord],
        descriptor: DomainDescriptor,
        domain_label: str,
        query: StructuredQuery,
        *,
        page_url: str | None = None,
    ) -> str:
        blocks = self.render_blocks(records, descriptor, query)
        if not blocks:
            return not_found_message(domain_label)
        return self.join_blocks(blocks, domain_label, query, page_url=page_url)

    def render_blocks(
        self,
        records: list[CandidateRecord],
        descriptor: DomainDescriptor,
        query: StructuredQuery,
    ) -> list[str]:
        """One text block per record that has something to show."""

        if query.section_filter is not None:
            return self._section_blocks(records, descriptor, query.section_filter)
        return self._field_blocks(records, descriptor)

    def join_blocks(
        self,
        blocks: list[str],
        domain_label: str,
        query: StructuredQuery,
        *,
        page_url: str | None = None,
    ) -> str:
        if query.section_filter is not None:
            header_label = f"{domain_label}の「{query.section_filter.display_name}」"
        else:
            header_label = domain_label

        shown = blocks[: self.config.max_display_results]
        lines = [f"{header_label}が{len(blocks)}件見つかりました。", ""]
        lines.append(self.config.record_separator.join(shown))
        hidden = len(blocks) - len(shown)
        if hidden > 0:
            lines.extend(["", f"（他{hidden}件）"])
        if page_url:
            lines.extend(["", f"→ 詳細はこちら: {page_url}"])
        return "\n".join(lines)

    def _section_blocks(
        self,
        records: list[CandidateRecord],
        descriptor: DomainDescriptor,
        section: SectionFilter,
    ) -> list[str]:
        blocks: list[str] = []
        for record in records:
            content = section_text(record, descriptor, section.canonical_key)
            if not content:
                continue
            title = display_title(record, descriptor)
            heading = f"【{title}】{section.display_name}" if title else section.display_name
            blocks.append(f"{heading}\n{content}")
        return blocks

    def _field_blocks(
        self, records: list[CandidateRecord], descriptor: DomainDescriptor
    ) -> list[str]:
        blocks: list[str] = []
        for record in records:
            lines: list[str] = []
            title = display_title(record, descriptor)
            if title:
                lines.append(f"【{title}】")
            for field in descriptor.searchable_fields:
                value = stringify_value(record.get(field.name))
                if not value or value == title:
                    continue
                lines.append(f"{field.display_names[0]}: {value}")
            if lines:
                blocks.append("\n".join(lines))
        return blocks


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _join_dict(value: dict[str, Any]) -> str:
    parts = [stringify_value(item) for item in value.values() if not isinstance(item, dict)]
    return " ".join(part for part in parts if part)
