from biz_assistant.catalog.defaults import default_catalog
from biz_assistant.catalog.models import (
    DomainCatalog,
    DomainDescriptor,
    MenuItem,
    SearchableField,
)
from biz_assistant.routing.intent import IntentClassifier
from biz_assistant.types import IntentKind


def _synthetic_catalog(first_priority: int, second_priority: int) -> DomainCatalog:
    shared_field = SearchableField(name="owner", display_names=("担当者",))
    return DomainCatalog(
        menu_items=(
            MenuItem(id="docs", name="文書", href="/docs", intent=IntentKind.DOCUMENT),
            MenuItem(
                id="alpha",
                name="アルファ",
                href="/alpha",
                intent=IntentKind.SALES,
                priority=first_priority,
                search=DomainDescriptor(collection="alpha", searchable_fields=(shared_field,)),
            ),
            MenuItem(
                id="beta",
                name="ベータ",
                href="/beta",
                intent=IntentKind.CUSTOMER,
                priority=second_priority,
                search=DomainDescriptor(collection="beta", searchable_fields=(shared_field,)),
            ),
            MenuItem(
                id="broken",
                name="在庫ビュー",
                href="/stock",
                intent=IntentKind.EVENT,
                search=DomainDescriptor(collection="stock"),
            ),
        ),
        document_menu_id="docs",
    )


def test_empty_and_help_queries_are_unknown() -> None:
    classifier = IntentClassifier(default_catalog())

    assert classifier.classify("").is_unknown
    assert classifier.classify("   ").is_unknown
    assert classifier.classify("使い方を教えて").is_unknown
    assert classifier.classify("顧客管理の操作方法").is_unknown


def test_document_domain_gets_first_refusal() -> None:
    classifier = IntentClassifier(default_catalog())

    intent = classifier.classify("顧客との契約書一覧を見たい")

    assert intent.kind is IntentKind.DOCUMENT
    assert intent.bound_menu_id == "contract-management"


def test_section_labels_do_not_trigger_document_binding() -> None:
    classifier = IntentClassifier(default_catalog())

    # "料金" is a contract section label, not a searchable field name.
    assert classifier.classify("料金").is_unknown


def test_tied_scores_resolve_to_catalog_order() -> None:
    classifier = IntentClassifier(default_catalog())

    # "顧客名" is a field of both customers and sales opportunities.
    results = {classifier.classify("顧客名で探して").bound_menu_id for _ in range(5)}

    assert results == {"customer-management"}


def test_tie_break_follows_explicit_priority() -> None:
    alpha_first = IntentClassifier(_synthetic_catalog(first_priority=1, second_priority=2))
    beta_first = IntentClassifier(_synthetic_catalog(first_priority=2, second_priority=1))

    assert alpha_first.classify("担当者を調べたい").bound_menu_id == "alpha"
    assert beta_first.classify("担当者を調べたい").bound_menu_id == "beta"


def test_descriptor_without_fields_is_unmatchable() -> None:
    classifier = IntentClassifier(_synthetic_catalog(1, 2))

    assert classifier.classify("在庫ビュー").is_unknown


def test_binding_to_menu_without_intent_is_discarded() -> None:
    classifier = IntentClassifier(default_catalog())

    assert classifier.classify("テンプレート名を教えて").is_unknown


def test_higher_score_wins_over_catalog_order() -> None:
    classifier = IntentClassifier(default_catalog())

    intent = classifier.classify("議事録管理の要約")

    assert intent.kind is IntentKind.MEETING
    assert intent.bound_menu_id == "meeting-notes"


def test_keyword_fallback_binds_document_page() -> None:
    classifier = IntentClassifier(default_catalog())

    intent = classifier.classify("Signal.の料金について教えて")

    assert intent.kind is IntentKind.DOCUMENT
    assert intent.bound_menu_id == "contract-management"


def test_keyword_fallback_binds_first_searchable_menu() -> None:
    classifier = IntentClassifier(default_catalog())

    intent = classifier.classify("今週のスケジュール")

    assert intent.kind is IntentKind.EVENT
    assert intent.bound_menu_id == "calendar"
