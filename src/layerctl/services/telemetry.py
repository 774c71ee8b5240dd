"""Pipeline timing for ``--verbose`` runs.

A service operation decorated with :func:`traced` opens a root :class:`Span`;
each pipeline phase (scan, load, resolve, detect_conflicts, ...) opens a
child with :func:`trace_span`. The finished tree lands in
``ServiceResult.meta["telemetry"]``. With telemetry off, both helpers cost
one ContextVar lookup and record nothing.
"""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Generator, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, ParamSpec, TypeVar

import structlog

from layerctl.services.result import ServiceResult

log = structlog.get_logger("layerctl.telemetry")

_enabled: ContextVar[bool] = ContextVar("layerctl_telemetry_enabled", default=False)
_current_span: ContextVar[Span | None] = ContextVar("layerctl_current_span", default=None)


@dataclass
class Span:
    """One timed pipeline phase and the phases nested inside it."""

    name: str
    parent: Span | None = None
    children: list[Span] = field(default_factory=list)
    annotations: dict[str, Any] = field(default_factory=dict)
    started: float = field(default_factory=time.perf_counter)
    finished: float | None = None

    @property
    def duration_ms(self) -> float:
        if self.finished is None:
            return 0.0
        return (self.finished - self.started) * 1000

    def end(self) -> None:
        self.finished = time.perf_counter()

    def annotate(self, key: str, value: Any) -> None:
        self.annotations[key] = value

    def child(self, name: str) -> Span:
        span = Span(name=name, parent=self)
        self.children.append(span)
        return span

    def walk(self) -> Iterator[Span]:
        """Yield this span and every descendant, depth first."""
        yield self
        for c in self.children:
            yield from c.walk()

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name, "duration_ms": round(self.duration_ms, 2)}
        if self.annotations:
            out["annotations"] = dict(self.annotations)
        if self.children:
            out["children"] = [c.to_dict() for c in self.children]
        return out


@contextmanager
def _activate(span: Span) -> Generator[Span]:
    token = _current_span.set(span)
    try:
        yield span
    finally:
        span.end()
        _current_span.reset(token)


@contextmanager
def trace_span(name: str) -> Generator[Span | None]:
    """Time a phase inside the active operation.

    Yields None when telemetry is off or no operation span is open, so
    callers guard annotations with ``if span:``.
    """
    parent = _current_span.get() if _enabled.get() else None
    if parent is None:
        yield None
        return
    with _activate(parent.child(name)) as span:
        yield span


_P = ParamSpec("_P")
_R = TypeVar("_R")


def traced(func: Callable[_P, _R]) -> Callable[_P, _R]:  # noqa: UP047
    """Open a root span around a service operation.

    A returned :class:`ServiceResult` gets the span tree under
    ``meta["telemetry"]``; any existing meta keys are kept.
    """

    @functools.wraps(func)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _R:
        if not _enabled.get():
            return func(*args, **kwargs)

        root = Span(name=func.__qualname__)
        ok = False
        try:
            with _activate(root):
                result = func(*args, **kwargs)
            ok = not isinstance(result, ServiceResult) or result.ok
        finally:
            log.debug(
                "operation.timed",
                operation=root.name,
                duration_ms=round(root.duration_ms, 2),
                phases=[s.name for s in root.walk()][1:],
                ok=ok,
            )

        if isinstance(result, ServiceResult):
            meta = {**(result.meta or {}), "telemetry": root.to_dict()}
            return result.model_copy(update={"meta": meta})  # type: ignore[return-value]
        return result

    return wrapper


def enable_telemetry() -> None:
    """Turn on span recording (``--verbose``)."""
    _enabled.set(True)


def disable_telemetry() -> None:
    _enabled.set(False)


def get_current_span() -> Span | None:
    """The innermost open span, for annotating from inside a phase."""
    return _current_span.get() if _enabled.get() else None
