"""Metrics hook protocol and no-op default implementation.

notepress emits counters and timings at a handful of points in the publish
workflow.  By default a :class:`NoopMetricsHook` is used; callers can pass
any object satisfying :class:`MetricsHook` as ``NotepressConfig.metrics``
to route them to StatsD, Prometheus, Datadog and so on.

Emitted metric names:

* ``notepress.requests_total``           -- counter, tagged by method/status
* ``notepress.request_duration_ms``      -- timing
* ``notepress.upload_success_total``     -- counter
* ``notepress.upload_failure_total``     -- counter
* ``notepress.taxonomy_failure_total``   -- counter
* ``notepress.publish_total``            -- counter, tagged by outcome
* ``notepress.publish_duration_ms``      -- timing
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class MetricsHook(Protocol):
    """Protocol that any metrics backend must satisfy.

    All methods accept an optional *tags* dict of string keys and values.
    """

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Increment a counter metric."""
        ...

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Record a duration in milliseconds."""
        ...

    def gauge(
        self,
        name: str,
        value: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Set a gauge metric to an absolute value."""
        ...


class NoopMetricsHook:
    """Default metrics implementation that discards every data point."""

    __slots__ = ()

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass

    def gauge(
        self,
        name: str,
        value: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass


def resolve_metrics(hook: object | None) -> MetricsHook:
    """Return *hook* or a :class:`NoopMetricsHook` when it is ``None``."""
    return hook if hook is not None else NoopMetricsHook()  # type: ignore[return-value]
