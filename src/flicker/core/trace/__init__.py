from flicker.core.trace.base import Trace, load_document
from flicker.core.trace.io import AnyTrace, read_trace, write_trace
from flicker.core.trace.layers import Layer, LayersTrace, LayerTraceEntry
from flicker.core.trace.windowmanager import WindowManagerTrace, WindowManagerTraceEntry, WindowState

__all__ = [
    "AnyTrace",
    "Layer",
    "LayerTraceEntry",
    "LayersTrace",
    "Trace",
    "WindowManagerTrace",
    "WindowManagerTraceEntry",
    "WindowState",
    "load_document",
    "read_trace",
    "write_trace",
]
