"""Document store interfaces, adapters, and the scoped candidate fetcher."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any, Protocol

from biz_assistant.catalog.models import DomainDescriptor, ScopeMode
from biz_assistant.config import SearchConfig, StoreConfig
from biz_assistant.obs.metrics import Timer
from biz_assistant.search.filtering import sort_records
from biz_assistant.types import CandidateRecord, FetchTrace

logger = logging.getLogger(__name__)


class StoreError(RuntimeError):
    """Raised by store adapters when a query cannot be served."""


class RecordStore(Protocol):
    """Minimal read-only document store contract."""

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
        """Return up to `limit` records visible under the given scope.

        `field` names the membership field for `ScopeMode.SHARED_WITH`. When
        `order_by` is set, records are ordered newest first by that field
        before the limit applies.
        """

    async def get_record(self, collection: str, record_id: str) -> CandidateRecord | None:
        """Return one record by id, or None."""


class InMemoryRecordStore:
    """Deterministic store used for tests and local prototyping."""

    def __init__(self, config: StoreConfig | None = None) -> None:
        self.config = config or StoreConfig()
        self._collections: dict[str, dict[str, CandidateRecord]] = {}

    def add(self, collection: str, records: list[dict[str, Any]]) -> None:
        bucket = self._collections.setdefault(collection, {})
        for raw in records:
            data = dict(raw)
            record_id = str(data.pop(self.config.id_field, "") or f"{collection}-{len(bucket)}")
            bucket[record_id] = CandidateRecord(id=record_id, data=data)

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
        records = list(self._collections.get(collection, {}).values())
        matched = [
            record
            for record in records
            if _in_scope(record, scope_mode, scope_value, field, self.config)
        ]
        if order_by:
            matched = sort_records(matched, order_by)
        return matched[:limit]

    async def get_record(self, collection: str, record_id: str) -> CandidateRecord | None:
        return self._collections.get(collection, {}).get(record_id)


class FirestoreRecordStore:
    """Firestore adapter built on `google-cloud-firestore`'s async client.

    Keeps the same contract as `InMemoryRecordStore` so it can be swapped in
    production without touching the search pipeline.
    """

    def __init__(self, client: Any | None = None, config: StoreConfig | None = None) -> None:
        try:
            from google.cloud import firestore
            from google.cloud.firestore_v1.base_query import FieldFilter
        except Exception as exc:  # pragma: no cover - import path is environment-dependent
            raise RuntimeError(
                "Firestore dependencies are not available. Install google-cloud-firestore."
            ) from exc

        self.config = config or StoreConfig()
        self._field_filter = FieldFilter
        self._descending = firestore.Query.DESCENDING
        self._client = client or firestore.AsyncClient()

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
        query: Any = self._client.collection(collection)
        if scope_mode is ScopeMode.BY_TENANT:
            query = query.where(filter=self._field_filter(self.config.tenant_field, "==", scope_value))
        elif scope_mode is ScopeMode.BY_OWNER:
            query = query.where(filter=self._field_filter(self.config.owner_field, "==", scope_value))
        elif scope_mode is ScopeMode.SHARED_WITH:
            if not field:
                raise StoreError("shared-with scope requires a membership field")
            query = query.where(filter=self._field_filter(field, "array_contains", scope_value))
        if order_by:
            query = query.order_by(order_by, direction=self._descending)
        query = query.limit(limit)

        records: list[CandidateRecord] = []
        try:
            async for snapshot in query.stream():
                records.append(CandidateRecord(id=snapshot.id, data=snapshot.to_dict() or {}))
        except Exception as exc:
            raise StoreError(f"Query on {collection} failed: {exc}") from exc
        return records

    async def get_record(self, collection: str, record_id: str) -> CandidateRecord | None:
        try:
            snapshot = await self._client.collection(collection).document(record_id).get()
        except Exception as exc:
            raise StoreError(f"Lookup {collection}/{record_id} failed: {exc}") from exc
        if not snapshot.exists:
            return None
        return CandidateRecord(id=snapshot.id, data=snapshot.to_dict() or {})


FetchObserver = Callable[[FetchTrace], None]


class ScopedFetcher:
    """Fetches a domain's candidates for one caller.

    Sub-fetches (one per collection, plus a shared-with-me query when the
    descriptor names a `shared_field`) run concurrently. A failing sub-fetch
    contributes zero candidates. Results are merged by record id in sub-fetch
    declaration order, then sorted by the descriptor's `sort_field`.
    """

    def __init__(
        self,
        store: RecordStore,
        *,
        search_config: SearchConfig | None = None,
        store_config: StoreConfig | None = None,
    ) -> None:
        self.store = store
        self.search_config = search_config or SearchConfig()
        self.store_config = store_config or StoreConfig()

    async def fetch(
        self,
        descriptor: DomainDescriptor,
        caller_id: str,
        *,
        observer: FetchObserver | None = None,
    ) -> list[CandidateRecord]:
        scope_mode, scope_value = await self._resolve_scope(descriptor.scope, caller_id)
        limit = descriptor.limit or self.search_config.default_limit

        plans: list[tuple[str, ScopeMode, str | None, str | None]] = []
        for collection in descriptor.collections:
            plans.append((collection, scope_mode, scope_value, None))
            if descriptor.shared_field:
                plans.append((collection, ScopeMode.SHARED_WITH, caller_id, descriptor.shared_field))

        batches = await asyncio.gather(
            *(
                self._fetch_one(
                    *plan, limit=limit, order_by=descriptor.sort_field, observer=observer
                )
                for plan in plans
            )
        )

        merged: dict[str, CandidateRecord] = {}
        for batch in batches:
            for record in batch:
                merged.setdefault(record.id, record)
        return sort_records(list(merged.values()), descriptor.sort_field)

    async def _resolve_scope(
        self, scope: ScopeMode, caller_id: str
    ) -> tuple[ScopeMode, str | None]:
        if scope is ScopeMode.NONE:
            return ScopeMode.NONE, None
        if scope is ScopeMode.BY_TENANT:
            tenant = await self._lookup_tenant(caller_id)
            if tenant:
                return ScopeMode.BY_TENANT, tenant
            logger.debug("Caller has no tenant; falling back to owner scope")
        return ScopeMode.BY_OWNER, caller_id

    async def _lookup_tenant(self, caller_id: str) -> str | None:
        try:
            user = await self.store.get_record(self.store_config.users_collection, caller_id)
        except Exception:
            logger.warning("Tenant lookup failed; using owner scope", exc_info=True)
            return None
        if user is None:
            return None
        tenant = user.get(self.store_config.tenant_field)
        return tenant if isinstance(tenant, str) and tenant.strip() else None

    async def _fetch_one(
        self,
        collection: str,
        scope_mode: ScopeMode,
        scope_value: str | None,
        field: str | None,
        *,
        limit: int,
        order_by: str | None,
        observer: FetchObserver | None,
    ) -> list[CandidateRecord]:
        error: str | None = None
        records: list[CandidateRecord] = []
        with Timer() as timer:
            try:
                records = await self.store.find_by_scope(
                    collection, scope_mode, scope_value, limit, field=field, order_by=order_by
                )
            except Exception as exc:
                error = f"{type(exc).__name__}: {exc}"
                logger.warning(
                    "Store fetch failed for %s (%s); continuing without it",
                    collection,
                    scope_mode.value,
                    exc_info=True,
                )
        if observer is not None:
            observer(
                FetchTrace(
                    collection=collection,
                    scope_mode=scope_mode.value,
                    record_count=len(records),
                    latency_ms=timer.elapsed_ms,
                    error=error,
                )
            )
        return records


def _in_scope(
    record: CandidateRecord,
    scope_mode: ScopeMode,
    scope_value: str | None,
    field: str | None,
    config: StoreConfig,
) -> bool:
    if scope_mode is ScopeMode.NONE:
        return True
    if scope_mode is ScopeMode.BY_TENANT:
        return record.get(config.tenant_field) == scope_value
    if scope_mode is ScopeMode.BY_OWNER:
        return record.get(config.owner_field) == scope_value
    if not field:
        return False
    value = record.get(field)
    if isinstance(value, (list, tuple)):
        return scope_value in value
    return value == scope_value
