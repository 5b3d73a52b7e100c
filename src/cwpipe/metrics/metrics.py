"""
Async metrics collection for cwpipe sessions.

Implements a small set of Prometheus-compatible counters describing writer
activity: batches and records submitted, sequence-token renewals, terminal
submission failures, and how writer sessions were established.

Design goals:
- No global state; collectors use an isolated registry
- Safe no-op exporters when disabled, with in-memory counters kept for tests
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

from prometheus_client import CollectorRegistry, Counter


@dataclass
class SessionMetrics:
    """Captured runtime metrics for quick assertions in tests."""

    batches_submitted: int = 0
    records_submitted: int = 0
    token_renewals: int = 0
    submission_failures: int = 0
    streams_created: int = 0
    streams_bootstrapped: int = 0


class MetricsCollector:
    """Group-scoped async metrics collector."""

    def __init__(self, *, enabled: bool = False) -> None:
        self._enabled = bool(enabled)
        self._lock = asyncio.Lock()
        self._state = SessionMetrics()

        self._c_batches: Any | None = None
        self._c_records: Any | None = None
        self._c_renewals: Any | None = None
        self._c_failures: Any | None = None
        self._c_sessions: Any | None = None
        self._registry: CollectorRegistry | None = None

        if self._enabled:
            self._registry = CollectorRegistry()
            self._c_batches = Counter(
                "cwpipe_batches_submitted_total",
                "Total number of batches appended to log streams",
                ["stream"],
                registry=self._registry,
            )
            self._c_records = Counter(
                "cwpipe_records_submitted_total",
                "Total number of log records appended to log streams",
                ["stream"],
                registry=self._registry,
            )
            self._c_renewals = Counter(
                "cwpipe_sequence_token_renewals_total",
                "Stale sequence tokens replaced by the service's expected token",
                ["stream"],
                registry=self._registry,
            )
            self._c_failures = Counter(
                "cwpipe_submission_failures_total",
                "Terminal batch submission failures",
                ["stream"],
                registry=self._registry,
            )
            self._c_sessions = Counter(
                "cwpipe_writer_sessions_total",
                "Writer sessions opened, by how the stream was established",
                ["mode"],
                registry=self._registry,
            )

    @property
    def is_enabled(self) -> bool:
        return self._enabled

    @property
    def registry(self) -> CollectorRegistry | None:
        """Expose the isolated Prometheus registry when enabled."""
        return self._registry

    async def record_batch_submitted(self, stream: str, records: int) -> None:
        async with self._lock:
            self._state.batches_submitted += 1
            self._state.records_submitted += records
        if self._c_batches is not None and self._c_records is not None:
            self._c_batches.labels(stream=stream).inc()
            self._c_records.labels(stream=stream).inc(records)

    async def record_token_renewal(self, stream: str) -> None:
        async with self._lock:
            self._state.token_renewals += 1
        if self._c_renewals is not None:
            self._c_renewals.labels(stream=stream).inc()

    async def record_submission_failure(self, stream: str) -> None:
        async with self._lock:
            self._state.submission_failures += 1
        if self._c_failures is not None:
            self._c_failures.labels(stream=stream).inc()

    async def record_session_opened(self, *, bootstrapped: bool) -> None:
        async with self._lock:
            if bootstrapped:
                self._state.streams_bootstrapped += 1
            else:
                self._state.streams_created += 1
        if self._c_sessions is not None:
            mode = "bootstrapped" if bootstrapped else "created"
            self._c_sessions.labels(mode=mode).inc()

    async def snapshot(self) -> SessionMetrics:
        async with self._lock:
            return SessionMetrics(**vars(self._state))
