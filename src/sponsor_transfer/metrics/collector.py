"""Metrics collector — Prometheus counters and histograms for transfers.

- ``sponsor_transfer_attempts_total`` counter-vec (outcome)
- ``sponsor_transfer_attempt_duration_seconds`` histogram
- ``sponsor_transfer_setup_transactions_total`` counter
- ``sponsor_transfer_signer_request_duration_seconds`` histogram-vec (party)
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import TYPE_CHECKING

from prometheus_client import CollectorRegistry, Counter, Histogram

if TYPE_CHECKING:
    from collections.abc import Iterator

_PREFIX = "sponsor_transfer"

OUTCOME_CONFIRMED = "confirmed"


class MetricsCollector:
    """Low-level Prometheus collector that owns the registry.

    Use :class:`TransferMetrics` for the high-level tracking interface.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self._registry = registry or CollectorRegistry()

    @property
    def registry(self) -> CollectorRegistry:
        """Return the underlying Prometheus registry."""
        return self._registry

    def histogram(self, name: str, doc: str, labels: tuple[str, ...] = ()) -> Histogram:
        """Register and return a Histogram."""
        return Histogram(name, doc, labels, registry=self._registry)

    def counter(self, name: str, doc: str, labels: tuple[str, ...] = ()) -> Counter:
        """Register and return a Counter."""
        return Counter(name, doc, labels, registry=self._registry)


class TransferMetrics:
    """High-level metrics for sponsored transfer attempts."""

    def __init__(self, collector: MetricsCollector | None = None) -> None:
        self._collector = collector or MetricsCollector()

        self._attempts = self._collector.counter(
            f"{_PREFIX}_attempts",
            "Transfer attempts by terminal outcome",
            ("outcome",),
        )
        self._duration = self._collector.histogram(
            f"{_PREFIX}_attempt_duration_seconds",
            "Duration of transfer attempts",
        )
        self._setup = self._collector.counter(
            f"{_PREFIX}_setup_transactions",
            "Sponsor-funded token account creations submitted",
        )
        self._signer = self._collector.histogram(
            f"{_PREFIX}_signer_request_duration_seconds",
            "Duration of external signer round trips",
            ("party",),
        )

    @property
    def registry(self) -> CollectorRegistry:
        """Return the underlying Prometheus registry."""
        return self._collector.registry

    def record_outcome(self, outcome: str) -> None:
        """Count one finished attempt under *outcome* (an error code or ``confirmed``)."""
        self._attempts.labels(outcome=outcome).inc()

    def record_setup(self) -> None:
        self._setup.inc()

    def observe_signer(self, party: str, seconds: float) -> None:
        self._signer.labels(party=party).observe(seconds)

    @contextmanager
    def track_attempt(self) -> Iterator[None]:
        """Track the duration of a whole transfer attempt."""
        start = time.monotonic()
        try:
            yield
        finally:
            self._duration.observe(time.monotonic() - start)
