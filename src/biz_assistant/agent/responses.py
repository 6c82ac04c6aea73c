"""Fixed and catalog-derived fallback responses."""

from __future__ import annotations

from biz_assistant.catalog.models import DomainCatalog, MenuItem, PageContext
from biz_assistant.search.formatter import not_found_message

FAQ_TRIGGERS: tuple[str, ...] = ("よくある質問", "faq", "q&a", "質問集")

FINAL_FALLBACK_MESSAGE = (
    "申し訳ございません。ただいま回答を作成できませんでした。"
    "時間をおいて、もう一度お試しください。"
)

FAQ_MESSAGE = """よくある質問

• データはどこまで検索できますか？
  ログイン中のアカウントと同じ会社のデータ、またはご自身が登録・共有されたデータが対象です。

• 契約書の特定の項目だけを知りたいときは？
  「Signal.の料金について教えて」のように「<契約書名>の<項目>について」と質問してください。

• タスクや請求書を作成できますか？
  「<内容>をタスクに追加して」のように依頼すると、操作するページをご案内します。

• 一覧を見たいときは？
  「顧客一覧を見たい」「契約書一覧」のように「一覧」を含めて質問してください。"""


def is_faq_request(query: str) -> bool:
    lowered = query.lower()
    return any(trigger in lowered for trigger in FAQ_TRIGGERS)


def faq_response() -> str:
    return FAQ_MESSAGE


def help_response(catalog: DomainCatalog) -> str:
    """Usage examples grouped by menu category."""

    grouped: dict[str, list[MenuItem]] = {}
    for item in catalog.ordered_menu_items():
        if item.search is None or item.intent is None:
            continue
        grouped.setdefault(item.category, []).append(item)

    lines = ["AIアシスタントの使い方", "", "次のように質問できます。"]
    for category, items in grouped.items():
        lines.append("")
        lines.append(f"【{catalog.category_names.get(category, category)}】")
        for item in items:
            lines.append(f"• 「{item.name}の一覧を見たい」")
            fields = item.search.searchable_fields if item.search else ()
            if fields:
                lines.append(f"• 「{fields[0].display_names[0]}で{item.name}を探して」")
    lines.extend(
        [
            "",
            "【操作の依頼】",
            "• 「山田様に請求書を作成して」",
            "• 「資料の準備をタスクに追加して」",
        ]
    )
    return "\n".join(lines)


def generic_response(catalog: DomainCatalog) -> str:
    """Capability listing drawn from page contexts."""

    lines = ["次のような情報についてお答えできます。"]
    for page in catalog.pages:
        operations = "、".join(op.label for op in page.operations[:3])
        lines.append("")
        lines.append(f"• {page.label}: {page.description}")
        if operations:
            lines.append(f"  できること: {operations}")
    lines.extend(["", "「使い方」と入力すると質問の例を表示します。"])
    return "\n".join(lines)


def domain_no_result_response(page: PageContext | None, domain_label: str) -> str:
    lines = [not_found_message(domain_label)]
    if page is not None:
        lines.extend(["", page.description])
        if page.operations:
            lines.append("このページでできること:")
            lines.extend(f"• {op.label}" for op in page.operations)
        lines.extend(["", f"→ {page.label}: {page.url}"])
    return "\n".join(lines)


def unformatted_results_response(count: int, domain_label: str, url: str | None) -> str:
    message = f"{domain_label}で{count}件のデータが見つかりましたが、内容を表示できませんでした。"
    if url:
        message += f"\n→ {url} で直接ご確認ください。"
    return message
