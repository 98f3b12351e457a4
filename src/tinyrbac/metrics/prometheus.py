from __future__ import annotations

from typing import Any, Dict, Optional

from tinyrbac.core.ports import MetricsSink

try:
    from prometheus_client import Counter  # type: ignore
except Exception:  # pragma: no cover
    Counter = None  # type: ignore


class PrometheusMetrics(MetricsSink):
    """Prometheus-based MetricsSink.

    Exposes:
      - tinyrbac_checks_total{decision="allow|deny|error"}

    Pass a custom ``registry`` to keep several sinks apart (e.g. in tests).
    """

    _counter: Optional[Any]

    def __init__(self, registry: Any | None = None) -> None:
        self._counter = None

        if Counter is None:  # pragma: no cover
            return

        kwargs: Dict[str, Any] = {}
        if registry is not None:
            kwargs["registry"] = registry
        self._counter = Counter(
            "tinyrbac_checks_total",
            "Total tinyrbac access checks by outcome.",
            labelnames=("decision",),
            **kwargs,
        )

    def inc(self, name: str, labels: Dict[str, str] | None = None) -> None:
        """Increment the checks counter.

        *name* is accepted to satisfy MetricsSink; this sink only has one counter.
        """
        if self._counter is None:  # pragma: no cover
            return
        decision = (labels or {}).get("decision", "unknown")
        try:
            self._counter.labels(decision=decision).inc()
        except Exception:  # pragma: no cover
            # never raise from metrics path
            pass


__all__ = ["PrometheusMetrics"]
