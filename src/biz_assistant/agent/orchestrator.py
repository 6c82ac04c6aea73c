"""Response orchestrator: action detection, domain search, and fallbacks.

`answer()` never raises and always returns a non-empty response text. Each
stage reports its outcome explicitly; failures are logged and the next state
in the fallback chain is tried.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from biz_assistant.agent import responses
from biz_assistant.catalog.models import DomainCatalog, MenuItem
from biz_assistant.config import AssistantConfig
from biz_assistant.obs.metrics import MetricsStore, Timer
from biz_assistant.routing.actions import ActionDetector, action_page_url, render_action_response
from biz_assistant.routing.intent import IntentClassifier, is_help_request
from biz_assistant.search.filtering import ResultFilter
from biz_assistant.search.formatter import ResponseFormatter
from biz_assistant.search.query_builder import QueryBuilder
from biz_assistant.search.store import RecordStore, ScopedFetcher
from biz_assistant.types import (
    ActionRequest,
    AssistantAnswer,
    CandidateRecord,
    ContextResult,
    FetchTrace,
    Intent,
    IntentKind,
)

logger = logging.getLogger(__name__)

ACTION_INTENT_TAG = "action"


class ResolutionState(str, Enum):
    """Terminal states of the orchestrator, in priority order."""

    ACTION_MATCHED = "action_matched"
    DOMAIN_RESULT_FORMATTED = "domain_result_formatted"
    DOMAIN_RESULT_EMPTY_BUT_HAS_ITEMS = "domain_result_empty_but_has_items"
    UNKNOWN_FAQ = "unknown_faq"
    UNKNOWN_HELP = "unknown_help"
    UNKNOWN_GENERIC = "unknown_generic"
    DOMAIN_NO_RESULT = "domain_no_result"
    FINAL_FALLBACK = "final_fallback"


class OutcomeStatus(str, Enum):
    FORMATTED = "formatted"
    UNFORMATTED = "unformatted"
    NO_RESULT = "no_result"
    ERROR = "error"


@dataclass(slots=True)
class SearchOutcome:
    """Result of the search path for one bound domain."""

    status: OutcomeStatus
    menu: MenuItem | None = None
    context: ContextResult | None = None
    error: str | None = None


class AssistantOrchestrator:
    """Answers free-text questions against the business catalog and store."""

    def __init__(
        self,
        *,
        catalog: DomainCatalog,
        store: RecordStore,
        config: AssistantConfig | None = None,
        metrics: MetricsStore | None = None,
    ) -> None:
        self.catalog = catalog
        self.config = config or AssistantConfig()
        self.metrics = metrics
        self.action_detector = ActionDetector()
        self.classifier = IntentClassifier(catalog)
        self.query_builder = QueryBuilder(catalog.display_names())
        self.formatter = ResponseFormatter(self.config.search)
        self.fetcher = ScopedFetcher(
            store,
            search_config=self.config.search,
            store_config=self.config.store,
        )

    async def answer(self, query: str, caller_id: str) -> AssistantAnswer:
        """Run one request through the full pipeline."""

        traces: list[FetchTrace] = []
        with Timer() as timer:
            try:
                result = await self._resolve(query or "", caller_id, traces)
            except Exception:
                logger.exception("Assistant pipeline failed; using final fallback")
                result = _final_fallback()
        return self._finish(result, traces, timer.elapsed_ms)

    async def answer_for_domain(
        self, kind: IntentKind, query: str, caller_id: str
    ) -> AssistantAnswer:
        """Run only the search path for an explicitly chosen domain."""

        traces: list[FetchTrace] = []
        with Timer() as timer:
            try:
                menu = self.catalog.menu_for_intent(kind)
                intent = Intent(kind, menu.id if menu is not None else None)
                outcome = await self.search(intent, query or "", caller_id, traces)
                result = self._domain_response(intent, outcome)
            except Exception:
                logger.exception("Domain search failed; using final fallback")
                result = _final_fallback()
        return self._finish(result, traces, timer.elapsed_ms)

    async def search(
        self,
        intent: Intent,
        query: str,
        caller_id: str,
        traces: list[FetchTrace] | None = None,
    ) -> SearchOutcome:
        menu = self.catalog.get_menu(intent.bound_menu_id)
        if menu is None or menu.search is None:
            return SearchOutcome(OutcomeStatus.NO_RESULT, menu)
        descriptor = menu.search
        observer = traces.append if traces is not None else None

        try:
            records = await self.fetcher.fetch(descriptor, caller_id, observer=observer)
            structured = self.query_builder.build(query, descriptor)
            matched = ResultFilter(descriptor).filter(records, structured, query)
        except Exception as exc:
            logger.error("Search stage failed for %s", menu.id, exc_info=True)
            return SearchOutcome(OutcomeStatus.ERROR, menu, error=str(exc))

        if not matched:
            return SearchOutcome(OutcomeStatus.NO_RESULT, menu)

        label = self._domain_label(intent.kind, menu)
        try:
            blocks = self.formatter.render_blocks(matched, descriptor, structured)
            if not blocks:
                # Matched records with nothing to show, e.g. the requested
                # section is absent from every one of them.
                return SearchOutcome(OutcomeStatus.NO_RESULT, menu)
            formatted = self.formatter.join_blocks(
                blocks, label, structured, page_url=menu.href
            )
        except Exception:
            logger.error("Formatter bug while rendering %d records", len(matched), exc_info=True)
            formatted = ""

        context = ContextResult(
            domain=intent.kind,
            records=matched,
            formatted=formatted,
            page_url=menu.href,
        )
        status = OutcomeStatus.FORMATTED if formatted.strip() else OutcomeStatus.UNFORMATTED
        return SearchOutcome(status, menu, context)

    async def _resolve(
        self, query: str, caller_id: str, traces: list[FetchTrace]
    ) -> AssistantAnswer:
        action = self._detect_action(query)
        if action is not None:
            try:
                return AssistantAnswer(
                    response_text=render_action_response(action),
                    intent_tag=ACTION_INTENT_TAG,
                    page_url=action_page_url(action),
                    resolution=ResolutionState.ACTION_MATCHED.value,
                )
            except Exception:
                logger.error("Action response rendering failed", exc_info=True)

        intent = self._classify(query)
        if intent.is_unknown:
            return self._unknown_response(query)

        outcome = await self.search(intent, query, caller_id, traces)
        return self._domain_response(intent, outcome)

    def _detect_action(self, query: str) -> ActionRequest | None:
        try:
            return self.action_detector.detect(query)
        except Exception:
            logger.error("Action detection failed", exc_info=True)
            return None

    def _classify(self, query: str) -> Intent:
        try:
            return self.classifier.classify(query)
        except Exception:
            logger.error("Intent classification failed", exc_info=True)
            return Intent(IntentKind.UNKNOWN)

    def _unknown_response(self, query: str) -> AssistantAnswer:
        stages: tuple[tuple[ResolutionState, Callable[[str], bool], Callable[[], str]], ...] = (
            (ResolutionState.UNKNOWN_FAQ, responses.is_faq_request, responses.faq_response),
            (
                ResolutionState.UNKNOWN_HELP,
                is_help_request,
                lambda: responses.help_response(self.catalog),
            ),
            (
                ResolutionState.UNKNOWN_GENERIC,
                lambda _: True,
                lambda: responses.generic_response(self.catalog),
            ),
        )
        for state, applies, build in stages:
            try:
                if not applies(query):
                    continue
                text = build()
            except Exception:
                logger.error("Fallback stage %s failed", state.value, exc_info=True)
                continue
            if text.strip():
                return AssistantAnswer(
                    response_text=text,
                    intent_tag=IntentKind.UNKNOWN.value,
                    resolution=state.value,
                )
        return _final_fallback()

    def _domain_response(self, intent: Intent, outcome: SearchOutcome) -> AssistantAnswer:
        menu = outcome.menu
        label = self._domain_label(intent.kind, menu)

        if outcome.context is not None:
            records, formatted, page_url = _coerce_context(outcome.context)
            if formatted.strip():
                return AssistantAnswer(
                    response_text=formatted,
                    intent_tag=intent.kind.value,
                    page_url=page_url,
                    resolution=ResolutionState.DOMAIN_RESULT_FORMATTED.value,
                )
            if records:
                logger.error(
                    "Formatter bug: %d records for %s produced no text", len(records), label
                )
                try:
                    return AssistantAnswer(
                        response_text=responses.unformatted_results_response(
                            len(records), label, page_url
                        ),
                        intent_tag=intent.kind.value,
                        page_url=page_url,
                        resolution=ResolutionState.DOMAIN_RESULT_EMPTY_BUT_HAS_ITEMS.value,
                    )
                except Exception:
                    logger.error("Item-count message failed", exc_info=True)

        if outcome.status is OutcomeStatus.ERROR:
            logger.warning("Answering %s without search results: %s", label, outcome.error)

        try:
            page = self.catalog.get_page_context(intent.kind)
            page_url = page.url if page is not None else (menu.href if menu else None)
            return AssistantAnswer(
                response_text=responses.domain_no_result_response(page, label),
                intent_tag=intent.kind.value,
                page_url=page_url,
                resolution=ResolutionState.DOMAIN_NO_RESULT.value,
            )
        except Exception:
            logger.error("Domain no-result message failed", exc_info=True)
        return _final_fallback()

    def _domain_label(self, kind: IntentKind, menu: MenuItem | None) -> str:
        page = self.catalog.get_page_context(kind)
        if page is not None:
            return page.label
        if menu is not None:
            return menu.name
        return kind.value

    def _finish(
        self, result: AssistantAnswer, traces: list[FetchTrace], latency_ms: float
    ) -> AssistantAnswer:
        if not isinstance(result.response_text, str) or not result.response_text.strip():
            logger.error("Empty response produced (%s); using final fallback", result.resolution)
            result = _final_fallback()
        result.fetch_traces = traces
        if self.metrics is not None:
            try:
                self.metrics.record(result, latency_ms)
            except Exception:
                logger.warning("Failed to record request metrics", exc_info=True)
        return result


def _coerce_context(context: ContextResult) -> tuple[list[CandidateRecord], str, str | None]:
    records = list(context.records or [])
    formatted = context.formatted if isinstance(context.formatted, str) else ""
    page_url = context.page_url if isinstance(context.page_url, str) else None
    return records, formatted, page_url


def _final_fallback() -> AssistantAnswer:
    return AssistantAnswer(
        response_text=responses.FINAL_FALLBACK_MESSAGE,
        intent_tag=IntentKind.UNKNOWN.value,
        resolution=ResolutionState.FINAL_FALLBACK.value,
    )
