"""Request timing and aggregate metrics.

Only counters and latencies are kept; query and response text are never
stored.
"""

from __future__ import annotations

import time
import uuid
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone

from biz_assistant.types import AssistantAnswer


@dataclass(slots=True)
class RequestRecord:
    request_id: str
    timestamp_utc: str
    intent_tag: str
    resolution: str
    latency_ms: float
    fetch_count: int
    fetch_errors: int


class MetricsStore:
    """In-memory aggregate metrics for API-level observability."""

    def __init__(self, max_records: int = 1000) -> None:
        self._max_records = max_records
        self._records: list[RequestRecord] = []

    def record(self, answer: AssistantAnswer, latency_ms: float) -> RequestRecord:
        entry = RequestRecord(
            request_id=str(uuid.uuid4()),
            timestamp_utc=datetime.now(timezone.utc).isoformat(),
            intent_tag=answer.intent_tag,
            resolution=answer.resolution,
            latency_ms=latency_ms,
            fetch_count=len(answer.fetch_traces),
            fetch_errors=sum(1 for trace in answer.fetch_traces if trace.error),
        )
        self._records.append(entry)
        if len(self._records) > self._max_records:
            del self._records[: len(self._records) - self._max_records]
        return entry

    def list_recent(self, limit: int = 20) -> list[RequestRecord]:
        return self._records[-limit:]

    def summary(self) -> dict[str, object]:
        """Aggregate core metrics for dashboard display."""
        records = list(self._records)
        total = len(records)
        if total == 0:
            return {
                "total_requests": 0,
                "avg_latency_ms": 0.0,
                "p95_latency_ms": 0.0,
                "fetch_errors": 0,
                "by_intent": {},
                "by_resolution": {},
            }

        latencies = sorted(record.latency_ms for record in records)
        p95_index = max(0, int((len(latencies) * 0.95) - 1))
        return {
            "total_requests": total,
            "avg_latency_ms": sum(latencies) / total,
            "p95_latency_ms": latencies[p95_index],
            "fetch_errors": sum(record.fetch_errors for record in records),
            "by_intent": dict(Counter(record.intent_tag for record in records)),
            "by_resolution": dict(Counter(record.resolution for record in records)),
        }


class Timer:
    """Simple context timer used by the orchestrator and fetcher."""

    def __init__(self) -> None:
        self._start = 0.0
        self.elapsed_ms = 0.0

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.elapsed_ms = (time.perf_counter() - self._start) * 1000.0
