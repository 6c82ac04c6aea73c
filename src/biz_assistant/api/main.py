"""FastAPI entrypoint forwarding question text and caller identity to the assistant."""

from __future__ import annotations

import logging
import os
from typing import Any

from fastapi import FastAPI
from pydantic import BaseModel, Field

from biz_assistant.agent.orchestrator import AssistantOrchestrator
from biz_assistant.agent.registry import ToolRegistry
from biz_assistant.agent.tools import register_assistant_tools
from biz_assistant.catalog.defaults import default_catalog
from biz_assistant.catalog.models import DomainCatalog, load_catalog
from biz_assistant.config import AssistantConfig
from biz_assistant.obs.log_config import configure_logging
from biz_assistant.obs.metrics import MetricsStore
from biz_assistant.search.store import FirestoreRecordStore, InMemoryRecordStore, RecordStore

logger = logging.getLogger(__name__)


def _load_catalog() -> DomainCatalog:
    path = os.getenv("BIZ_ASSISTANT_CATALOG_PATH")
    if not path:
        return default_catalog()
    logger.info("Loading catalog from %s", path)
    return load_catalog(path)


def _create_store(config: AssistantConfig) -> RecordStore:
    backend = os.getenv("BIZ_ASSISTANT_STORE", "memory").lower()
    if backend == "firestore":
        return FirestoreRecordStore(config=config.store)
    return InMemoryRecordStore(config.store)


class AnswerRequest(BaseModel):
    query: str = Field(min_length=1)
    caller_id: str = Field(min_length=1)


configure_logging()

app = FastAPI(title="Business Assistant", version="0.1.0")

_config = AssistantConfig()
_catalog = _load_catalog()
_store = _create_store(_config)
_metrics = MetricsStore()
_orchestrator = AssistantOrchestrator(
    catalog=_catalog,
    store=_store,
    config=_config,
    metrics=_metrics,
)
_registry = ToolRegistry()
register_assistant_tools(_registry, _orchestrator)


@app.get("/health")
def health() -> dict[str, Any]:
    return {
        "status": "ok",
        "store": type(_store).__name__,
        "domains": len(_catalog.list_domain_descriptors()),
        "tools": [spec.name for spec in _registry.specs()],
    }


@app.post("/assistant/answer")
async def answer(request: AnswerRequest) -> dict[str, Any]:
    result = await _orchestrator.answer(request.query, request.caller_id)
    return {
        "response_text": result.response_text,
        "intent_tag": result.intent_tag,
        "page_url": result.page_url,
        "resolution": result.resolution,
    }


@app.get("/catalog/domains")
def catalog_domains() -> dict[str, Any]:
    return {
        "items": [
            {
                "menu_id": menu.id,
                "name": menu.name,
                "intent": menu.intent.value if menu.intent is not None else None,
                "collections": list(descriptor.collections),
                "scope": descriptor.scope.value,
                "priority": menu.priority,
            }
            for menu, descriptor in _catalog.list_domain_descriptors()
        ]
    }


@app.get("/metrics")
def metrics() -> dict[str, Any]:
    return _metrics.summary()
