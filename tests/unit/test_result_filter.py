from biz_assistant.catalog.defaults import default_catalog
from biz_assistant.catalog.models import DomainDescriptor
from biz_assistant.search.filtering import ResultFilter, sort_records
from biz_assistant.types import CandidateRecord, SectionFilter, StructuredQuery


def _descriptor(menu_id: str) -> DomainDescriptor:
    menu = default_catalog().get_menu(menu_id)
    assert menu is not None and menu.search is not None
    return menu.search


def _contracts() -> list[CandidateRecord]:
    return [
        CandidateRecord("c1", {"title": "Signal.", "sections": {"pricing": "月額 9,800円", "overview": "営業支援"}}),
        CandidateRecord("c2", {"title": "Signal. Lite", "sections": {"pricing": ["  "], "overview": "軽量版"}}),
        CandidateRecord("c3", {"title": "Beacon", "sections": {"pricing": "月額 5,000円"}}),
    ]


def test_general_listing_includes_everything() -> None:
    records = _contracts()
    stray = StructuredQuery(free_keywords=["存在しない"], title_filter="Nothing")

    result = ResultFilter(_descriptor("contract-management")).filter(records, stray, "契約書一覧")

    assert [record.id for record in result] == ["c1", "c2", "c3"]


def test_title_and_section_filter_excludes_empty_sections() -> None:
    query = StructuredQuery(
        free_keywords=["料金", "signal."],
        section_filter=SectionFilter("pricing", "料金"),
        title_filter="Signal.",
    )

    result = ResultFilter(_descriptor("contract-management")).filter(
        _contracts(), query, "Signal.の料金について教えて"
    )

    assert [record.id for record in result] == ["c1"]


def test_section_without_title_falls_through_to_keywords() -> None:
    query = StructuredQuery(free_keywords=["軽量版"], section_filter=SectionFilter("pricing", "料金"))

    result = ResultFilter(_descriptor("contract-management")).filter(_contracts(), query, "軽量版の料金")

    assert [record.id for record in result] == ["c1", "c2", "c3"]


def test_title_alone_matches_when_no_other_constraints() -> None:
    query = StructuredQuery(free_keywords=["beacon"], title_filter="Beacon")

    result = ResultFilter(_descriptor("contract-management")).filter(_contracts(), query, "Beaconについて")

    assert [record.id for record in result] == ["c3"]


def test_field_queries_match_field_values() -> None:
    records = [
        CandidateRecord("t1", {"text": "見積送付", "dueDate": "期限は金曜"}),
        CandidateRecord("t2", {"text": "請求確認", "dueDate": "2024-06-01"}),
    ]
    query = StructuredQuery(field_queries={"dueDate": ["期限"]})

    result = ResultFilter(_descriptor("todo")).filter(records, query, "期限のあるタスク")

    assert [record.id for record in result] == ["t1"]


def test_status_label_matches_first_mapping() -> None:
    records = [
        CandidateRecord("a", {"name": "青木商店", "status": "active"}),
        CandidateRecord("b", {"name": "馬場工業", "status": "inactive"}),
    ]

    # "アクティブ" is contained in "非アクティブ"; the earlier mapping decides.
    result = ResultFilter(_descriptor("customer-management")).filter(
        records, StructuredQuery(), "非アクティブな顧客"
    )

    assert [record.id for record in result] == ["b"]


def test_free_keywords_search_serialized_record() -> None:
    records = [
        CandidateRecord("m1", {"title": "定例", "notes": "Signal.の価格改定を議論"}),
        CandidateRecord("m2", {"title": "採用", "notes": "面接日程"}),
    ]
    query = StructuredQuery(free_keywords=["価格改定"])

    result = ResultFilter(_descriptor("meeting-notes")).filter(records, query, "価格改定")

    assert [record.id for record in result] == ["m1"]


def test_sort_records_newest_first_with_missing_last() -> None:
    records = [
        CandidateRecord("old", {"updatedAt": "2024-01-01"}),
        CandidateRecord("none", {}),
        CandidateRecord("new", {"updatedAt": "2024-03-01"}),
        CandidateRecord("tie", {"updatedAt": "2024-01-01"}),
    ]

    ordered = sort_records(records, "updatedAt")

    assert [record.id for record in ordered] == ["new", "old", "tie", "none"]


def test_section_labels_are_not_compared_with_status() -> None:
    records = [CandidateRecord("c1", {"title": "Signal.", "status": "pricing"})]

    result = ResultFilter(_descriptor("contract-management")).filter(
        records, StructuredQuery(), "料金"
    )

    assert result == []
