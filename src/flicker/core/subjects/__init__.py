from __future__ import annotations

from typing import overload

from flicker.core.subjects.base import SubjectBase
from flicker.core.subjects.layers import LayersTraceSubject
from flicker.core.subjects.windowmanager import WindowManagerTraceSubject
from flicker.core.trace.layers import LayersTrace
from flicker.core.trace.windowmanager import WindowManagerTrace


@overload
def assert_that(trace: LayersTrace) -> LayersTraceSubject: ...


@overload
def assert_that(trace: WindowManagerTrace) -> WindowManagerTraceSubject: ...


def assert_that(trace: LayersTrace | WindowManagerTrace) -> LayersTraceSubject | WindowManagerTraceSubject:
    """Entry point: wrap a trace in the subject matching its type."""
    if isinstance(trace, LayersTrace):
        return LayersTraceSubject(trace)
    if isinstance(trace, WindowManagerTrace):
        return WindowManagerTraceSubject(trace)
    raise TypeError(f"No subject for trace type {type(trace).__name__}")


__all__ = [
    "LayersTraceSubject",
    "SubjectBase",
    "WindowManagerTraceSubject",
    "assert_that",
]
