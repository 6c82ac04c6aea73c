from biz_assistant.catalog.defaults import default_catalog
from biz_assistant.catalog.models import DomainDescriptor
from biz_assistant.config import SearchConfig
from biz_assistant.search.formatter import (
    ResponseFormatter,
    display_title,
    not_found_message,
    stringify_section,
    stringify_value,
)
from biz_assistant.types import CandidateRecord, SectionFilter, StructuredQuery


def _descriptor(menu_id: str) -> DomainDescriptor:
    menu = default_catalog().get_menu(menu_id)
    assert menu is not None and menu.search is not None
    return menu.search


def test_stringify_section_shapes() -> None:
    assert stringify_section("  月額 9,800円 ") == "月額 9,800円"
    assert stringify_section(["月額", " ", "年額"]) == "• 月額\n• 年額"
    assert stringify_section([{"title": "自動応答", "content": "24時間対応"}]) == "• 自動応答\n  24時間対応"
    assert stringify_section([{"question": "解約は？", "answer": ""}]) == "• 解約は？"
    assert stringify_section({"unexpected": "shape"}) == ""
    assert stringify_section(42) == ""


def test_stringify_value_and_title() -> None:
    descriptor = _descriptor("todo")
    record = CandidateRecord("t1", {"text": "", "title": "見積送付"})

    assert stringify_value(["a", 3, None]) == "a、3"
    assert stringify_value(True) == ""
    assert display_title(record, descriptor) == "見積送付"


def test_section_mode_renders_only_the_requested_section() -> None:
    records = [
        CandidateRecord(
            "c1",
            {"title": "Signal.", "sections": {"pricing": ["月額 9,800円"], "overview": "営業支援"}},
        )
    ]
    query = StructuredQuery(section_filter=SectionFilter("pricing", "料金"), title_filter="Signal.")

    text = ResponseFormatter().format(
        records, _descriptor("contract-management"), "契約書管理", query, page_url="/admin/contracts"
    )

    assert text.splitlines()[0] == "契約書管理の「料金」が1件見つかりました。"
    assert "【Signal.】料金\n• 月額 9,800円" in text
    assert "営業支援" not in text
    assert text.endswith("→ 詳細はこちら: /admin/contracts")


def test_field_mode_lists_labelled_fields_and_truncates() -> None:
    records = [
        CandidateRecord(f"u{i}", {"name": f"顧客{i}", "company": f"会社{i}", "email": ""})
        for i in range(3)
    ]
    formatter = ResponseFormatter(SearchConfig(max_display_results=2))

    text = formatter.format(records, _descriptor("customer-management"), "顧客管理", StructuredQuery())

    assert text.startswith("顧客管理が3件見つかりました。")
    assert "【顧客0】\n会社名: 会社0" in text
    assert "顧客2" not in text
    assert "（他1件）" in text
    assert "メールアドレス" not in text


def test_empty_input_and_empty_blocks_give_not_found() -> None:
    formatter = ResponseFormatter()
    descriptor = _descriptor("contract-management")
    query = StructuredQuery(section_filter=SectionFilter("pricing", "料金"))
    blank = [CandidateRecord("c1", {"title": "Signal.", "sections": {"pricing": ""}})]

    assert formatter.format([], descriptor, "契約書管理", query) == not_found_message("契約書管理")
    assert formatter.format(blank, descriptor, "契約書管理", query) == not_found_message("契約書管理")
