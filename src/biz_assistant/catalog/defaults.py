"""Built-in catalog for the business-management application."""

from __future__ import annotations

from functools import lru_cache

from biz_assistant.catalog.models import (
    DomainCatalog,
    DomainDescriptor,
    FieldMapping,
    MenuItem,
    PageContext,
    PageOperation,
    ScopeMode,
    SearchableField,
)
from biz_assistant.types import IntentKind

CATEGORY_NAMES: dict[str, str] = {
    "sales": "営業管理",
    "customer": "顧客管理",
    "inventory": "在庫・発注管理",
    "finance": "財務管理",
    "pdca": "PDCA管理",
    "document": "ドキュメント管理",
    "project": "プロジェクト管理",
    "analytics": "分析・レポート",
    "other": "その他",
}


def _field(name: str, *display_names: str) -> SearchableField:
    return SearchableField(name=name, display_names=display_names)


def _mapping(key: str, *display_names: str) -> FieldMapping:
    return FieldMapping(canonical_key=key, display_names=display_names)


_CONTRACT_SEARCH = DomainDescriptor(
    collection="manualDocuments",
    scope=ScopeMode.BY_OWNER,
    title_fields=("title", "name"),
    sections_field="sections",
    sort_field="lastUpdated",
    searchable_fields=(
        _field("title", "契約書名", "書類名", "文書名"),
        _field("description", "契約書の説明", "文書の説明"),
        _field("type", "文書種別", "契約種別"),
    ),
    field_mappings=(
        _mapping("overview", "概要", "サービス内容"),
        _mapping("features", "機能", "特徴"),
        _mapping("pricing", "料金", "価格", "費用", "コスト", "プラン"),
        _mapping("procedures", "手順", "流れ", "導入方法"),
        _mapping("faq", "よくある質問", "faq", "q&a"),
        _mapping("support", "サポート", "問い合わせ先"),
    ),
)

_CUSTOMER_SEARCH = DomainDescriptor(
    collection="customers",
    scope=ScopeMode.BY_TENANT,
    title_fields=("name", "company"),
    sort_field="createdAt",
    searchable_fields=(
        _field("name", "顧客名", "お客様名"),
        _field("company", "会社名", "企業名"),
        _field("email", "メールアドレス", "メール"),
        _field("phone", "電話番号"),
        _field("notes", "顧客メモ"),
    ),
    field_mappings=(
        _mapping("inactive", "非アクティブ", "休眠"),
        _mapping("active", "アクティブ", "取引中"),
        _mapping("prospect", "見込み客"),
    ),
)

_SALES_SEARCH = DomainDescriptor(
    collection="salesOpportunities",
    scope=ScopeMode.BY_TENANT,
    title_fields=("title", "customerName"),
    searchable_fields=(
        _field("title", "案件名"),
        _field("customerName", "顧客名"),
        _field("customerCompany", "顧客会社"),
        _field("description", "案件概要"),
        _field("estimatedValue", "見積金額"),
        _field("probability", "成約確率"),
    ),
    field_mappings=(
        _mapping("prospecting", "開拓中"),
        _mapping("qualification", "評価中"),
        _mapping("proposal", "提案中"),
        _mapping("negotiation", "交渉中"),
        _mapping("closed_won", "成約", "受注済み"),
        _mapping("closed_lost", "失注"),
    ),
)

_PROGRESS_SEARCH = DomainDescriptor(
    collection="progressNotes",
    scope=ScopeMode.BY_OWNER,
    sort_field="date",
    searchable_fields=(
        _field("title", "メモタイトル"),
        _field("content", "メモ内容"),
        _field("caseTitle", "関連案件"),
        _field("nextActions", "次アクション"),
        _field("risks", "リスク", "懸念"),
    ),
)

_MEETING_SEARCH = DomainDescriptor(
    collection="meetingNotes",
    scope=ScopeMode.BY_TENANT,
    sort_field="meetingDate",
    searchable_fields=(
        _field("title", "議題"),
        _field("location", "会議室"),
        _field("notes", "議事内容"),
        _field("summary", "要約"),
        _field("actionItems", "アクション項目"),
    ),
)

_TODO_SEARCH = DomainDescriptor(
    collection="todos",
    scope=ScopeMode.BY_OWNER,
    shared_field="sharedWith",
    title_fields=("text", "title"),
    searchable_fields=(
        _field("text", "タスク名", "やること"),
        _field("description", "タスクの説明"),
        _field("priority", "優先度"),
        _field("dueDate", "期限", "締め切り"),
    ),
    field_mappings=(
        _mapping("todo", "未着手"),
        _mapping("in-progress", "進行中", "対応中"),
        _mapping("shared", "共有"),
    ),
)

_EVENT_SEARCH = DomainDescriptor(
    collection="events",
    scope=ScopeMode.BY_TENANT,
    sort_field="date",
    searchable_fields=(
        _field("title", "イベント名", "予定名"),
        _field("location", "開催場所"),
        _field("description", "予定の詳細"),
        _field("date", "開催日"),
    ),
)

_PDCA_SEARCH = DomainDescriptor(
    collection="pdcaPlan",
    extra_collections=("pdcaDo", "pdcaCheck", "pdcaAction"),
    scope=ScopeMode.BY_OWNER,
    searchable_fields=(
        _field("title", "計画名", "施策名"),
        _field("goal", "目標"),
        _field("kpi", "kpi"),
        _field("result", "実績"),
        _field("improvement", "改善策"),
    ),
)

_TEMPLATE_SEARCH = DomainDescriptor(
    collection="templates",
    scope=ScopeMode.BY_TENANT,
    searchable_fields=(_field("name", "テンプレート名"),),
)


MENU_ITEMS: tuple[MenuItem, ...] = (
    MenuItem(
        id="contract-management",
        name="契約書管理",
        href="/admin/contracts",
        category="document",
        description="契約書・サービス資料の管理",
        intent=IntentKind.DOCUMENT,
        priority=10,
        search=_CONTRACT_SEARCH,
    ),
    MenuItem(
        id="customer-management",
        name="顧客管理",
        href="/customers",
        category="customer",
        description="顧客情報の管理",
        intent=IntentKind.CUSTOMER,
        priority=20,
        search=_CUSTOMER_SEARCH,
    ),
    MenuItem(
        id="sales-opportunities",
        name="営業案件管理",
        href="/sales/opportunities",
        category="sales",
        description="営業案件の進捗・成約管理",
        intent=IntentKind.SALES,
        priority=30,
        search=_SALES_SEARCH,
    ),
    MenuItem(
        id="progress-notes",
        name="進捗メモ",
        href="/sales/progress-notes",
        category="sales",
        description="営業案件の進捗記録",
        intent=IntentKind.PROGRESS,
        priority=40,
        search=_PROGRESS_SEARCH,
    ),
    MenuItem(
        id="meeting-notes",
        name="議事録管理",
        href="/meeting-notes",
        category="document",
        description="会議議事録・打ち合わせ記録",
        intent=IntentKind.MEETING,
        priority=50,
        search=_MEETING_SEARCH,
    ),
    MenuItem(
        id="todo",
        name="TODOリスト",
        href="/todo",
        category="project",
        description="タスクの作成と進捗管理",
        intent=IntentKind.TODO,
        priority=60,
        search=_TODO_SEARCH,
    ),
    MenuItem(
        id="calendar",
        name="カレンダー",
        href="/calendar",
        category="other",
        description="スケジュール管理",
        intent=IntentKind.EVENT,
        priority=70,
        search=_EVENT_SEARCH,
    ),
    MenuItem(
        id="pdca-plan",
        name="計画管理",
        href="/pdca/plan",
        category="pdca",
        description="営業計画・目標設定",
        intent=IntentKind.PDCA,
        priority=80,
        search=_PDCA_SEARCH,
    ),
    MenuItem(
        id="pdca-do",
        name="実行管理",
        href="/pdca/do",
        category="pdca",
        description="活動記録・タスク管理",
        intent=IntentKind.PDCA,
        priority=81,
    ),
    MenuItem(
        id="pdca-check",
        name="評価管理",
        href="/pdca/check",
        category="pdca",
        description="実績分析・KPI管理",
        intent=IntentKind.PDCA,
        priority=82,
    ),
    MenuItem(
        id="pdca-action",
        name="改善管理",
        href="/pdca/action",
        category="pdca",
        description="改善アクション・次期計画",
        intent=IntentKind.PDCA,
        priority=83,
    ),
    MenuItem(
        id="template-management",
        name="テンプレート管理",
        href="/templates",
        category="document",
        description="文書テンプレートの作成と管理",
        priority=90,
        search=_TEMPLATE_SEARCH,
    ),
    MenuItem(
        id="document-management",
        name="ドキュメント管理",
        href="/documents",
        category="document",
        description="文書の保管・共有・検索",
        intent=IntentKind.DOCUMENT,
        priority=91,
    ),
    MenuItem(
        id="inventory-management",
        name="在庫管理",
        href="/inventory",
        category="inventory",
        description="在庫の管理と追跡",
        priority=100,
    ),
    MenuItem(
        id="purchase-management",
        name="発注管理",
        href="/purchases",
        category="inventory",
        description="発注情報の管理",
        priority=101,
    ),
    MenuItem(
        id="sales-quotes",
        name="見積管理",
        href="/sales/quotes",
        category="finance",
        description="見積書の作成と管理",
        priority=110,
    ),
    MenuItem(
        id="sales-orders",
        name="受注管理",
        href="/sales/orders",
        category="finance",
        description="受注情報の管理",
        priority=111,
    ),
    MenuItem(
        id="billing-management",
        name="請求管理",
        href="/billing",
        category="finance",
        description="請求書の作成と管理",
        priority=112,
    ),
    MenuItem(
        id="expense-management",
        name="経費管理",
        href="/expenses",
        category="finance",
        description="経費の記録と管理",
        priority=113,
    ),
    MenuItem(
        id="reports",
        name="レポート",
        href="/reports",
        category="analytics",
        description="各種レポートの生成",
        priority=120,
    ),
)


def _op(op_id: str, label: str, description: str = "") -> PageOperation:
    return PageOperation(id=op_id, label=label, description=description)


PAGES: tuple[PageContext, ...] = (
    PageContext(
        page=IntentKind.CUSTOMER,
        label="顧客管理",
        description="顧客管理ページ。顧客情報の登録・編集・検索ができます。",
        url="/customers",
        keywords=("顧客", "お客様", "クライアント", "customer", "client"),
        operations=(
            _op("list", "顧客一覧を見る", "登録されている顧客の一覧を表示します"),
            _op("search", "顧客を検索する", "顧客名・会社名・メールアドレスで検索します"),
            _op("view", "顧客詳細を見る", "特定の顧客の詳細情報を表示します"),
            _op("update-status", "ステータスを変更する", "顧客のステータスを変更します"),
        ),
    ),
    PageContext(
        page=IntentKind.SALES,
        label="営業案件管理",
        description="営業案件管理ページ。営業案件の作成・進捗管理・成約管理ができます。",
        url="/sales/opportunities",
        keywords=("案件", "営業", "セールス", "商談", "sales", "opportunity"),
        operations=(
            _op("list", "営業案件一覧を見る"),
            _op("search", "案件を検索する", "案件名・顧客名で検索します"),
            _op("view", "案件詳細を見る"),
            _op("update-status", "ステータスを更新する"),
        ),
    ),
    PageContext(
        page=IntentKind.PROGRESS,
        label="進捗メモ",
        description="進捗メモ管理ページ。営業案件の進捗を記録・管理できます。",
        url="/sales/progress-notes",
        keywords=("進捗", "メモ", "プログレス", "progress", "note"),
        operations=(
            _op("list", "進捗メモ一覧を見る"),
            _op("search", "進捗メモを検索する", "タイトル・内容で検索します"),
            _op("filter-by-case", "案件で絞り込む"),
        ),
    ),
    PageContext(
        page=IntentKind.MEETING,
        label="議事録管理",
        description="議事録管理ページ。会議の議事録を記録・検索・管理できます。",
        url="/meeting-notes",
        keywords=("議事録", "会議", "ミーティング", "打ち合わせ", "meeting"),
        operations=(
            _op("list", "議事録一覧を見る"),
            _op("search", "議事録を検索する", "議題・備考で検索します"),
            _op("filter-by-date", "日付で絞り込む"),
        ),
    ),
    PageContext(
        page=IntentKind.TODO,
        label="TODOリスト",
        description="タスク管理ページ。タスクの作成・進捗管理・完了処理ができます。",
        url="/todo",
        keywords=("タスク", "todo", "やること", "やる事", "task"),
        operations=(
            _op("list", "タスク一覧を見る"),
            _op("search", "タスクを検索する", "タスク名・説明で検索します"),
            _op("update-status", "ステータスを更新する"),
            _op("filter-by-priority", "優先度で絞り込む"),
        ),
    ),
    PageContext(
        page=IntentKind.EVENT,
        label="カレンダー",
        description="カレンダー・予定管理ページ。イベントの作成・検索・管理ができます。",
        url="/calendar",
        keywords=("予定", "イベント", "カレンダー", "スケジュール", "event", "calendar", "schedule"),
        operations=(
            _op("list", "予定一覧を見る"),
            _op("search", "予定を検索する", "イベント名・説明で検索します"),
            _op("filter-by-date", "日付で絞り込む"),
        ),
    ),
    PageContext(
        page=IntentKind.DOCUMENT,
        label="契約書管理",
        description="社内ドキュメント管理ページ。社内文書・マニュアル・契約書などを管理できます。",
        url="/admin/contracts",
        keywords=("文書", "ドキュメント", "資料", "document", "manual", "マニュアル", "手順書", "signal"),
        operations=(
            _op("list", "ドキュメント一覧を見る"),
            _op("search", "ドキュメントを検索する", "タイトル・内容で検索します"),
            _op("view", "ドキュメント詳細を見る"),
        ),
    ),
    PageContext(
        page=IntentKind.PDCA,
        label="PDCA管理",
        description="PDCA管理ページ。営業計画・実行記録・評価・改善アクションを管理できます。",
        url="/pdca/plan",
        keywords=("pdca", "計画", "改善"),
        operations=(
            _op("list", "計画一覧を見る"),
            _op("check", "実績を評価する"),
            _op("action", "改善アクションを登録する"),
        ),
    ),
)


@lru_cache
def default_catalog() -> DomainCatalog:
    """Return the application's built-in catalog."""
    return DomainCatalog(
        menu_items=MENU_ITEMS,
        pages=PAGES,
        document_menu_id="contract-management",
        category_names=CATEGORY_NAMES,
    )
