"""Prometheus exporter — gateway operation counters and session state.

Operation outcomes are counted as they happen; the connected gauge is
refreshed on each scrape from the session store.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Iterator

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, generate_latest

from errors import GatewayError
from session_store import SessionStore

# Dedicated registry so we don't mix with prometheus_client default metrics
_registry = CollectorRegistry()

_operations = Counter(
    "elastiko_operations_total",
    "Gateway operations by outcome (ok or error kind)",
    ["operation", "outcome"],
    registry=_registry,
)
_operation_seconds = Histogram(
    "elastiko_operation_seconds",
    "Wall time of gateway operations, including the cluster round trip",
    ["operation"],
    registry=_registry,
)
_connected = Gauge(
    "elastiko_connected",
    "1 while a cluster session is active, else 0",
    registry=_registry,
)


@contextmanager
def track(operation: str) -> Iterator[None]:
    """Count one operation's outcome and time it."""
    started = time.perf_counter()
    try:
        yield
    except GatewayError as exc:
        _operations.labels(operation=operation, outcome=exc.kind).inc()
        raise
    else:
        _operations.labels(operation=operation, outcome="ok").inc()
    finally:
        _operation_seconds.labels(operation=operation).observe(time.perf_counter() - started)


def operation_count(operation: str, outcome: str) -> float:
    value = _registry.get_sample_value(
        "elastiko_operations_total", {"operation": operation, "outcome": outcome}
    )
    return value or 0.0


def collect_and_generate(session: SessionStore) -> bytes:
    """Refresh scrape-time gauges, return Prometheus text format."""
    _connected.set(1 if session.get() is not None else 0)
    return generate_latest(_registry)
