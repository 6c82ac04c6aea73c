"""Heuristic intent classifier over the domain catalog.

Classification order:
1. Generic "how do I use this" phrasing resolves to `unknown`.
2. The document/contract domain gets first refusal (fixed keywords or any of
   its searchable-field display names).
3. Remaining searchable domains are scored; highest score wins, ties go to
   the earlier catalog entry.
4. A coarse keyword table over page contexts is the last resort.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from biz_assistant.catalog.models import DomainCatalog, DomainDescriptor, MenuItem
from biz_assistant.types import Intent, IntentKind

logger = logging.getLogger(__name__)

HELP_PHRASES: tuple[str, ...] = (
    "使い方",
    "使いかた",
    "ヘルプ",
    "何ができる",
    "なにができる",
    "できることを教えて",
    "操作方法",
    "how to use",
    "help",
)

DOCUMENT_KEYWORDS: tuple[str, ...] = ("契約書", "契約", "規約", "contract")

# Domains consulted by the keyword fallback, in order.
FALLBACK_ORDER: tuple[IntentKind, ...] = (
    IntentKind.CUSTOMER,
    IntentKind.SALES,
    IntentKind.PROGRESS,
    IntentKind.MEETING,
    IntentKind.TODO,
    IntentKind.EVENT,
    IntentKind.DOCUMENT,
)

EXACT_NAME_SCORE = 100
NAME_SUBSTRING_SCORE = 50
DESCRIPTION_SCORE = 30


@dataclass(frozen=True, slots=True)
class DomainScore:
    menu: MenuItem
    score: int


def is_help_request(query: str) -> bool:
    lowered = query.lower()
    return any(phrase in lowered for phrase in HELP_PHRASES)


class IntentClassifier:
    """Maps a raw query to an `Intent` using a catalog passed in at construction."""

    def __init__(self, catalog: DomainCatalog) -> None:
        self.catalog = catalog

    def classify(self, query: str) -> Intent:
        lowered = (query or "").strip().lower()
        if not lowered:
            return Intent(IntentKind.UNKNOWN)

        if is_help_request(lowered):
            logger.debug("Help phrasing detected; leaving intent unknown")
            return Intent(IntentKind.UNKNOWN)

        document_menu = self.catalog.document_menu
        if self._matches_document(lowered, document_menu):
            return Intent(IntentKind.DOCUMENT, document_menu.id)

        best = self._best_scored(lowered)
        if best is not None:
            kind = best.menu.intent or IntentKind.UNKNOWN
            if kind is not IntentKind.UNKNOWN:
                logger.debug("Bound %s with score %d", best.menu.id, best.score)
                return Intent(kind, best.menu.id)
            logger.debug("Discarding binding to %s: no intent tag", best.menu.id)

        return self._fallback(lowered)

    def score_domains(self, lowered: str) -> list[DomainScore]:
        """Score every searchable non-document domain; zero scores are dropped."""

        scores: list[DomainScore] = []
        for menu, descriptor in self.catalog.list_domain_descriptors():
            if menu.id == self.catalog.document_menu_id:
                continue
            if not descriptor.is_searchable:
                continue
            score = _score(lowered, menu, descriptor)
            if score > 0:
                scores.append(DomainScore(menu=menu, score=score))
        return scores

    def _best_scored(self, lowered: str) -> DomainScore | None:
        best: DomainScore | None = None
        for candidate in self.score_domains(lowered):
            # Strict comparison keeps the earliest entry on ties.
            if best is None or candidate.score > best.score:
                best = candidate
        return best

    def _matches_document(self, lowered: str, menu: MenuItem) -> bool:
        if any(keyword in lowered for keyword in DOCUMENT_KEYWORDS):
            return True
        descriptor = menu.search
        if descriptor is None:
            return False
        # Field-mapping display names are reserved for in-domain section
        # filtering and deliberately not consulted here.
        return any(
            name.lower() in lowered
            for field in descriptor.searchable_fields
            for name in field.display_names
        )

    def _fallback(self, lowered: str) -> Intent:
        for kind in FALLBACK_ORDER:
            page = self.catalog.get_page_context(kind)
            if page is None:
                continue
            if not any(keyword.lower() in lowered for keyword in page.keywords):
                continue
            if kind is IntentKind.DOCUMENT:
                return Intent(kind, self.catalog.document_menu_id)
            menu = self.catalog.menu_for_intent(kind)
            return Intent(kind, menu.id if menu is not None else None)
        return Intent(IntentKind.UNKNOWN)


def _score(lowered: str, menu: MenuItem, descriptor: DomainDescriptor) -> int:
    score = 0
    name = menu.name.lower()
    if name == lowered:
        score += EXACT_NAME_SCORE
    elif name in lowered:
        score += NAME_SUBSTRING_SCORE
    if menu.description and menu.description.lower() in lowered:
        score += DESCRIPTION_SCORE
    for field in descriptor.searchable_fields:
        for display_name in field.display_names:
            keyword = display_name.lower()
            if keyword in lowered:
                score += len(keyword)
    return score
