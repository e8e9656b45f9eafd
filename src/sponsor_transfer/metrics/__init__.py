"""Metrics — Prometheus metrics collection and exposure."""

from __future__ import annotations

from sponsor_transfer.metrics.collector import MetricsCollector, TransferMetrics

__all__ = ["MetricsCollector", "TransferMetrics"]
