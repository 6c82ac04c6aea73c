import asyncio

from biz_assistant.catalog.defaults import default_catalog
from biz_assistant.catalog.models import DomainDescriptor, ScopeMode
from biz_assistant.search.store import InMemoryRecordStore, ScopedFetcher, StoreError
from biz_assistant.types import CandidateRecord, FetchTrace


class FlakyStore(InMemoryRecordStore):
    def __init__(self, failing: set[str]) -> None:
        super().__init__()
        self.failing = failing

    async def find_by_scope(
        self,
        collection: str,
        scope_mode: ScopeMode,
        scope_value: str | None,
        limit: int,
        *,
        field: str | None = None,
        order_by: str | None = None,
    ) -> list[CandidateRecord]:
        if collection in self.failing:
            raise StoreError(f"{collection} unavailable")
        return await super().find_by_scope(
            collection, scope_mode, scope_value, limit, field=field, order_by=order_by
        )

    async def get_record(self, collection: str, record_id: str) -> CandidateRecord | None:
        if collection in self.failing:
            raise StoreError(f"{collection} unavailable")
        return await super().get_record(collection, record_id)


def _descriptor(menu_id: str) -> DomainDescriptor:
    menu = default_catalog().get_menu(menu_id)
    assert menu is not None and menu.search is not None
    return menu.search


def test_tenant_scope_resolved_from_users_collection() -> None:
    store = InMemoryRecordStore()
    store.add("users", [{"id": "u1", "companyName": "Acme"}])
    store.add(
        "customers",
        [
            {"id": "a", "name": "青木商店", "companyName": "Acme", "createdAt": "2024-01-01"},
            {"id": "b", "name": "馬場工業", "companyName": "Other", "createdAt": "2024-02-01"},
            {"id": "c", "name": "千葉物産", "companyName": "Acme", "createdAt": "2024-03-01"},
        ],
    )

    records = asyncio.run(ScopedFetcher(store).fetch(_descriptor("customer-management"), "u1"))

    assert [record.id for record in records] == ["c", "a"]


def test_tenant_scope_falls_back_to_owner() -> None:
    store = InMemoryRecordStore()
    store.add(
        "customers",
        [
            {"id": "a", "name": "青木商店", "userId": "u9"},
            {"id": "b", "name": "馬場工業", "userId": "u1"},
        ],
    )

    records = asyncio.run(ScopedFetcher(store).fetch(_descriptor("customer-management"), "u9"))

    assert [record.id for record in records] == ["a"]


def test_shared_records_are_merged_without_duplicates() -> None:
    store = InMemoryRecordStore()
    store.add(
        "todos",
        [
            {"id": "own", "text": "見積送付", "userId": "u1", "updatedAt": "2024-01-02"},
            {"id": "both", "text": "定例準備", "userId": "u1", "sharedWith": ["u1"], "updatedAt": "2024-01-03"},
            {"id": "shared", "text": "請求確認", "userId": "u2", "sharedWith": ["u1", "u3"], "updatedAt": "2024-01-01"},
            {"id": "hidden", "text": "採用面接", "userId": "u2", "updatedAt": "2024-01-05"},
        ],
    )
    traces: list[FetchTrace] = []

    records = asyncio.run(
        ScopedFetcher(store).fetch(_descriptor("todo"), "u1", observer=traces.append)
    )

    assert [record.id for record in records] == ["both", "own", "shared"]
    assert [trace.scope_mode for trace in traces] == ["by-owner", "shared-with"]


def test_failing_sub_fetch_contributes_nothing() -> None:
    store = FlakyStore({"pdcaDo", "users"})
    for collection in ("pdcaPlan", "pdcaDo", "pdcaCheck"):
        store.add(collection, [{"id": f"{collection}-1", "title": collection, "userId": "u1"}])
    traces: list[FetchTrace] = []

    records = asyncio.run(
        ScopedFetcher(store).fetch(_descriptor("pdca-plan"), "u1", observer=traces.append)
    )

    assert sorted(record.id for record in records) == ["pdcaCheck-1", "pdcaPlan-1"]
    assert [trace.collection for trace in traces] == ["pdcaPlan", "pdcaDo", "pdcaCheck", "pdcaAction"]
    errors = {trace.collection: trace.error for trace in traces if trace.error}
    assert list(errors) == ["pdcaDo"]
    assert "StoreError" in errors["pdcaDo"]


def test_descriptor_limit_caps_each_sub_fetch() -> None:
    store = InMemoryRecordStore()
    store.add("notes", [{"id": str(i), "userId": "u1"} for i in range(5)])
    descriptor = DomainDescriptor(collection="notes", scope=ScopeMode.BY_OWNER, limit=2)

    records = asyncio.run(ScopedFetcher(store).fetch(descriptor, "u1"))

    assert len(records) == 2


def test_limit_keeps_the_newest_records() -> None:
    store = InMemoryRecordStore()
    store.add(
        "notes",
        [
            {"id": "a", "userId": "u1", "date": "2024-01-01"},
            {"id": "c", "userId": "u1", "date": "2024-12-01"},
            {"id": "b", "userId": "u1", "date": "2024-02-01"},
        ],
    )
    descriptor = DomainDescriptor(
        collection="notes", scope=ScopeMode.BY_OWNER, limit=2, sort_field="date"
    )

    records = asyncio.run(ScopedFetcher(store).fetch(descriptor, "u1"))

    assert [record.id for record in records] == ["c", "b"]
