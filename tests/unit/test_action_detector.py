from biz_assistant.routing.actions import (
    ACTION_TEMPLATES,
    ActionDetector,
    action_page_url,
    extract_entities,
    render_action_response,
)
from biz_assistant.types import ActionDomain, ActionRequest, ActionVerb


def test_every_verb_domain_pair_has_a_template() -> None:
    for verb in ActionVerb:
        for domain in ActionDomain:
            assert (verb, domain) in ACTION_TEMPLATES


def test_create_invoice_with_customer_name() -> None:
    action = ActionDetector().detect("山田様に請求書を作成して")

    assert action is not None
    assert action.verb is ActionVerb.CREATE
    assert action.domain is ActionDomain.INVOICE
    assert action.entities == {"customerName": "山田"}

    message = render_action_response(action)
    assert message.startswith("山田様の請求書を作成するには")
    assert message.endswith("→ 請求書管理: /admin/invoice")
    assert action_page_url(action) == "/admin/invoice"


def test_task_name_extracted_from_add_request() -> None:
    action = ActionDetector().detect("資料の準備をタスクに追加して")

    assert action is not None
    assert action.verb is ActionVerb.CREATE
    assert action.domain is ActionDomain.TODO
    assert action.entities["taskName"] == "資料の準備"
    assert "「資料の準備」のタスクを追加するには" in render_action_response(action)


def test_quoted_task_name_wins() -> None:
    assert extract_entities("「週報の提出」をタスクに登録して") == {"taskName": "週報の提出"}


def test_verb_tiers_are_checked_in_order() -> None:
    detector = ActionDetector()

    delete = detector.detect("古い契約書を削除して")
    update = detector.detect("顧客の住所を変更したい")
    check = detector.detect("請求書の状況を確認して")

    assert delete is not None and delete.verb is ActionVerb.DELETE
    assert delete.domain is ActionDomain.CONTRACT
    assert update is not None and update.verb is ActionVerb.UPDATE
    assert update.domain is ActionDomain.CUSTOMER
    assert check is not None and check.verb is ActionVerb.CHECK


def test_retrieval_questions_are_not_actions() -> None:
    detector = ActionDetector()

    assert detector.detect("契約書一覧を見たい") is None
    assert detector.detect("タスクを教えて") is None
    assert detector.detect("") is None


def test_verb_without_domain_is_not_an_action() -> None:
    assert ActionDetector().detect("設定を変更して") is None


def test_templates_render_without_entities() -> None:
    action = ActionRequest(verb=ActionVerb.CHECK, domain=ActionDomain.DOCUMENT)

    message = render_action_response(action)

    assert message.startswith("ドキュメントは")
    assert "{" not in message


def test_english_verbs_match_whole_words_only() -> None:
    detector = ActionDetector()

    assert detector.detect("credit invoice") is None
    assert detector.detect("checkout todo") is None

    action = detector.detect("add invoice")
    assert action is not None and action.verb is ActionVerb.CREATE
    edit = detector.detect("edit customer")
    assert edit is not None and edit.verb is ActionVerb.UPDATE


def test_subject_equal_to_a_verb_is_rejected() -> None:
    assert "taskName" not in extract_entities("作成を追加して")
