"""Write-operation detection and deep-link action responses."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from biz_assistant.types import ActionDomain, ActionRequest, ActionVerb

logger = logging.getLogger(__name__)

# Tiers are checked in order; "教えて" / "見せて" style retrieval verbs are
# intentionally absent so ordinary questions fall through to search.
VERB_TIERS: tuple[tuple[ActionVerb, tuple[str, ...]], ...] = (
    (
        ActionVerb.CREATE,
        ("作成して", "作成したい", "作って", "追加して", "追加したい", "登録して", "登録したい", "新規作成", "create", "add"),
    ),
    (
        ActionVerb.CHECK,
        ("確認して", "確認したい", "チェックして", "check"),
    ),
    (
        ActionVerb.UPDATE,
        ("更新して", "更新したい", "変更して", "変更したい", "編集して", "編集したい", "update", "edit"),
    ),
    (
        ActionVerb.DELETE,
        ("削除して", "削除したい", "消して", "消したい", "delete", "remove"),
    ),
)

DOMAIN_KEYWORDS: tuple[tuple[ActionDomain, tuple[str, ...]], ...] = (
    (ActionDomain.INVOICE, ("請求書", "請求", "インボイス", "invoice")),
    (ActionDomain.TODO, ("todo", "タスク", "やること", "やる事", "task")),
    (ActionDomain.CUSTOMER, ("顧客", "お客様", "クライアント", "customer", "client")),
    (ActionDomain.CONTRACT, ("契約書", "契約", "contract")),
    (ActionDomain.DOCUMENT, ("ドキュメント", "文書", "資料", "document")),
)

_NAME = r"([^\s、。,を]+?)"

CUSTOMER_NAME_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(_NAME + r"(?:様|さん)に"),
    re.compile(_NAME + r"(?:様|さん)への"),
    re.compile(_NAME + r"(?:様|さん)の"),
    re.compile(_NAME + r"への"),
)

TASK_NAME_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"「(.+?)」"),
    re.compile(r"(.+?)という(?:タスク|todo|TODO)"),
    re.compile(r"(.+?)を(?:タスク|todo|TODO)に(?:追加|登録)"),
    re.compile(r"(.+?)を(?:作成|追加|登録)"),
    re.compile(r"(.+?)の(?:追加|作成|登録)"),
)

VERB_TOKENS: frozenset[str] = frozenset(
    {"作成", "追加", "登録", "確認", "更新", "変更", "編集", "削除", "新規作成"}
)
_SUBJECT_STOPWORDS: frozenset[str] = VERB_TOKENS | frozenset(
    keyword for _, keywords in DOMAIN_KEYWORDS for keyword in keywords
)


@dataclass(frozen=True, slots=True)
class ActionTarget:
    label: str
    url: str


ACTION_TARGETS: dict[ActionDomain, ActionTarget] = {
    ActionDomain.INVOICE: ActionTarget("請求書管理", "/admin/invoice"),
    ActionDomain.TODO: ActionTarget("TODOリスト", "/todo"),
    ActionDomain.CUSTOMER: ActionTarget("顧客管理", "/customers"),
    ActionDomain.CONTRACT: ActionTarget("契約書管理", "/admin/contracts"),
    ActionDomain.DOCUMENT: ActionTarget("ドキュメント管理", "/documents"),
}

ACTION_TEMPLATES: dict[tuple[ActionVerb, ActionDomain], str] = {
    (ActionVerb.CREATE, ActionDomain.INVOICE): "{customer}請求書を作成するには、{page}ページで「新規作成」を押して宛先と明細を入力してください。",
    (ActionVerb.CHECK, ActionDomain.INVOICE): "{customer}請求書の状況は{page}ページの一覧で確認できます。",
    (ActionVerb.UPDATE, ActionDomain.INVOICE): "{customer}請求書を修正するには、{page}ページで対象の請求書を開き「編集」を押してください。",
    (ActionVerb.DELETE, ActionDomain.INVOICE): "{customer}請求書を削除するには、{page}ページで対象の請求書を選び「削除」を押してください。",
    (ActionVerb.CREATE, ActionDomain.TODO): "{task}タスクを追加するには、{page}ページの入力欄に内容を入れて「追加」を押してください。",
    (ActionVerb.CHECK, ActionDomain.TODO): "{task}タスクの状況は{page}ページで確認できます。",
    (ActionVerb.UPDATE, ActionDomain.TODO): "{task}タスクを変更するには、{page}ページで対象のタスクを編集してください。",
    (ActionVerb.DELETE, ActionDomain.TODO): "{task}タスクを削除するには、{page}ページで対象のタスクの削除ボタンを押してください。",
    (ActionVerb.CREATE, ActionDomain.CUSTOMER): "{customer}顧客情報を登録するには、{page}ページで「新規登録」を押してください。",
    (ActionVerb.CHECK, ActionDomain.CUSTOMER): "{customer}顧客情報は{page}ページで確認できます。",
    (ActionVerb.UPDATE, ActionDomain.CUSTOMER): "{customer}顧客情報を更新するには、{page}ページで対象の顧客を開き「編集」を押してください。",
    (ActionVerb.DELETE, ActionDomain.CUSTOMER): "{customer}顧客情報を削除するには、{page}ページで対象の顧客を選び「削除」を押してください。",
    (ActionVerb.CREATE, ActionDomain.CONTRACT): "{customer}契約書を登録するには、{page}ページで「新規作成」からファイルをアップロードしてください。",
    (ActionVerb.CHECK, ActionDomain.CONTRACT): "{customer}契約書は{page}ページで確認できます。",
    (ActionVerb.UPDATE, ActionDomain.CONTRACT): "{customer}契約書を更新するには、{page}ページで対象の契約書を開き「編集」を押してください。",
    (ActionVerb.DELETE, ActionDomain.CONTRACT): "{customer}契約書を削除するには、{page}ページで対象の契約書を選び「削除」を押してください。",
    (ActionVerb.CREATE, ActionDomain.DOCUMENT): "{task}ドキュメントを追加するには、{page}ページで「アップロード」を押してください。",
    (ActionVerb.CHECK, ActionDomain.DOCUMENT): "{task}ドキュメントは{page}ページで確認できます。",
    (ActionVerb.UPDATE, ActionDomain.DOCUMENT): "{task}ドキュメントを差し替えるには、{page}ページで対象の文書を開き「編集」を押してください。",
    (ActionVerb.DELETE, ActionDomain.DOCUMENT): "{task}ドキュメントを削除するには、{page}ページで対象の文書を選び「削除」を押してください。",
}


class ActionDetector:
    """Detects requests to perform a write operation."""

    def detect(self, query: str) -> ActionRequest | None:
        lowered = (query or "").lower()
        if not lowered.strip():
            return None

        verb = _detect_verb(lowered)
        if verb is None:
            return None
        domain = _detect_domain(lowered)
        if domain is None:
            return None

        entities = extract_entities(query)
        logger.debug("Detected action %s/%s entities=%s", verb.value, domain.value, sorted(entities))
        return ActionRequest(verb=verb, domain=domain, entities=entities)


def _detect_verb(lowered: str) -> ActionVerb | None:
    for verb, phrases in VERB_TIERS:
        if any(_has_phrase(lowered, phrase) for phrase in phrases):
            return verb
    return None


def _has_phrase(lowered: str, phrase: str) -> bool:
    # English verbs must stand alone ("edit" is not in "credit").
    if phrase.isascii():
        return re.search(rf"(?<![a-z]){re.escape(phrase)}(?![a-z])", lowered) is not None
    return phrase in lowered


def _detect_domain(lowered: str) -> ActionDomain | None:
    for domain, keywords in DOMAIN_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return domain
    return None


def extract_entities(query: str) -> dict[str, str]:
    """Pull a customer name and a task subject out of the original-case text."""

    entities: dict[str, str] = {}
    remainder = query

    for pattern in CUSTOMER_NAME_PATTERNS:
        match = pattern.search(query)
        if match is None:
            continue
        name = _clean_subject(match.group(1))
        if name:
            entities["customerName"] = name
            remainder = query.replace(match.group(0), " ", 1)
            break

    for pattern in TASK_NAME_PATTERNS:
        match = pattern.search(remainder)
        if match is None:
            continue
        subject = _clean_subject(match.group(1))
        if subject:
            entities["taskName"] = subject
            break

    return entities


def _clean_subject(raw: str) -> str | None:
    subject = raw.strip(" 　、。,")
    if not subject or subject.lower() in _SUBJECT_STOPWORDS:
        return None
    return subject


def render_action_response(action: ActionRequest) -> str:
    """Render the deep-link message for an action; pure string formatting."""

    target = ACTION_TARGETS[action.domain]
    template = ACTION_TEMPLATES[(action.verb, action.domain)]
    customer = action.entities.get("customerName")
    task = action.entities.get("taskName")
    message = template.format(
        page=target.label,
        customer=f"{customer}様の" if customer else "",
        task=f"「{task}」の" if task else "",
    )
    return f"{message}\n\n→ {target.label}: {target.url}"


def action_page_url(action: ActionRequest) -> str:
    return ACTION_TARGETS[action.domain].url
