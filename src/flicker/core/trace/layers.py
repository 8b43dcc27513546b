"""Layers trace: per-timestamp snapshots of the compositor layer tree."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from flicker.core.assertions.result import AssertionResult
from flicker.core.constants import TRACE_KIND_LAYERS
from flicker.core.errors import TraceParseError
from flicker.core.geometry import Rect, Region
from flicker.core.trace.base import (
    Trace,
    TraceData,
    entry_list,
    load_document,
    optional_bool,
    optional_int,
    require_int,
    require_str,
)

logger = logging.getLogger(__name__)

NO_PARENT = -1


@dataclass(slots=True)
class Layer:
    id: int
    name: str
    parent: int = NO_PARENT
    z: int = 0
    hidden: bool = False
    alpha: float = 1.0
    visible_region: Region = field(default_factory=Region)
    bounds: Rect = field(default_factory=lambda: Rect(0, 0, 0, 0))

    @property
    def is_root(self) -> bool:
        return self.parent == NO_PARENT

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "parent": self.parent,
            "z": self.z,
            "hidden": self.hidden,
            "alpha": self.alpha,
            "visible_region": self.visible_region.to_list(),
            "bounds": self.bounds.to_list(),
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Layer:
        context = "Layer"
        layer_id = require_int(raw, "id", context=context)
        name = require_str(raw, "name", context=context)
        alpha = raw.get("alpha", 1.0)
        if isinstance(alpha, bool) or not isinstance(alpha, int | float):
            raise TraceParseError(f"Layer {name!r} requires numeric `alpha`")
        try:
            visible_region = Region.from_value(raw.get("visible_region"))
            bounds = Rect.from_value(raw.get("bounds", [0, 0, 0, 0]))
        except ValueError as exc:
            raise TraceParseError(f"Layer {name!r} has invalid geometry: {exc}") from exc
        return cls(
            id=layer_id,
            name=name,
            parent=optional_int(raw, "parent", NO_PARENT, context=context),
            z=optional_int(raw, "z", 0, context=context),
            hidden=optional_bool(raw, "hidden", False, context=context),
            alpha=float(alpha),
            visible_region=visible_region,
            bounds=bounds,
        )


@dataclass(slots=True)
class LayerTraceEntry:
    timestamp: int
    layers: list[Layer] = field(default_factory=list)

    def _by_id(self) -> dict[int, Layer]:
        return {layer.id: layer for layer in self.layers}

    def _matching(self, layer_name: str) -> list[Layer]:
        return [layer for layer in self.layers if layer_name in layer.name]

    def hidden_ancestors(self) -> dict[int, Layer | None]:
        """Map each layer id to its nearest hidden ancestor, resolved in one pass."""
        by_id = self._by_id()
        resolved: dict[int, Layer | None] = {}
        for layer in self.layers:
            chain: list[Layer] = []
            on_chain: set[int] = set()
            current: Layer | None = layer
            while current is not None and current.id not in resolved and current.id not in on_chain:
                chain.append(current)
                on_chain.add(current.id)
                current = by_id.get(current.parent)
            inherited = resolved.get(current.id) if current is not None else None
            for node in reversed(chain):
                parent = by_id.get(node.parent)
                if parent is not None and parent.hidden:
                    inherited = parent
                resolved[node.id] = inherited
        return resolved

    def invisible_reason(self, layer: Layer, hidden_ancestors: dict[int, Layer | None] | None = None) -> str | None:
        if layer.hidden:
            return f"{layer.name} is hidden"
        if hidden_ancestors is None:
            hidden_ancestors = self.hidden_ancestors()
        ancestor = hidden_ancestors.get(layer.id)
        if ancestor is not None:
            return f"{layer.name} is hidden by parent {ancestor.name}"
        if layer.alpha <= 0:
            return f"{layer.name} has 0 alpha"
        if layer.visible_region.is_empty():
            return f"{layer.name} has empty visible region"
        return None

    @property
    def visible_layers(self) -> list[Layer]:
        hidden_ancestors = self.hidden_ancestors()
        return [layer for layer in self.layers if self.invisible_reason(layer, hidden_ancestors) is None]

    def visible_region(self, layer_name: str = "") -> Region:
        """Union of the visible regions of the visible layers whose name matches."""
        region = Region()
        for layer in self.visible_layers:
            if layer_name in layer.name:
                region = region.union(layer.visible_region)
        return region

    def exists(self, layer_name: str) -> AssertionResult:
        assertion_name = "exists"
        found = self._matching(layer_name)
        if not found:
            return AssertionResult.failing(assertion_name, self.timestamp, f"{layer_name} cannot be found")
        return AssertionResult.passing(assertion_name, self.timestamp, f"{found[0].name} exists")

    def is_visible(self, layer_name: str) -> AssertionResult:
        assertion_name = "isVisible"
        found = self._matching(layer_name)
        if not found:
            return AssertionResult.failing(assertion_name, self.timestamp, f"{layer_name} cannot be found")
        hidden_ancestors = self.hidden_ancestors()
        reasons: list[str] = []
        for layer in found:
            reason = self.invisible_reason(layer, hidden_ancestors)
            if reason is None:
                return AssertionResult.passing(assertion_name, self.timestamp, f"{layer.name} is visible")
            reasons.append(reason)
        return AssertionResult.failing(assertion_name, self.timestamp, "\n".join(reasons))

    def covers_at_least_region(self, region: Region, layer_name: str = "") -> AssertionResult:
        assertion_name = "coversAtLeastRegion"
        uncovered = region.subtract(self.visible_region(layer_name))
        if uncovered.is_empty():
            return AssertionResult.passing(assertion_name, self.timestamp, f"{region} is covered")
        return AssertionResult.failing(
            assertion_name,
            self.timestamp,
            f"Region to test: {region}\nUncovered region: {uncovered}",
        )

    def covers_at_most_region(self, region: Region, layer_name: str = "") -> AssertionResult:
        assertion_name = "coversAtMostRegion"
        out_of_bounds = self.visible_region(layer_name).subtract(region)
        if out_of_bounds.is_empty():
            return AssertionResult.passing(assertion_name, self.timestamp, f"Visible layers are inside {region}")
        return AssertionResult.failing(
            assertion_name,
            self.timestamp,
            f"Region to test: {region}\nOut-of-bounds region: {out_of_bounds}",
        )

    def has_visible_region(self, layer_name: str, expected: Region) -> AssertionResult:
        assertion_name = "hasVisibleRegion"
        if not self._matching(layer_name):
            return AssertionResult.failing(assertion_name, self.timestamp, f"{layer_name} cannot be found")
        actual = self.visible_region(layer_name)
        if actual == expected:
            return AssertionResult.passing(assertion_name, self.timestamp, f"{layer_name} visible region is {actual}")
        return AssertionResult.failing(
            assertion_name,
            self.timestamp,
            f"{layer_name} visible region: {actual}, expected {expected}",
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "layers": [layer.to_dict() for layer in self.layers],
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> LayerTraceEntry:
        timestamp = require_int(raw, "timestamp", context="Layers entry")
        layers_raw = raw.get("layers", [])
        if not isinstance(layers_raw, list) or not all(isinstance(item, dict) for item in layers_raw):
            raise TraceParseError(f"Layers entry {timestamp} requires list of objects `layers`")
        layers = [Layer.from_dict(item) for item in layers_raw]
        ids = [layer.id for layer in layers]
        if len(ids) != len(set(ids)):
            raise TraceParseError(f"Layers entry {timestamp} has duplicate layer ids")
        return cls(timestamp=timestamp, layers=layers)


@dataclass(slots=True)
class LayersTrace(Trace[LayerTraceEntry]):
    trace_name = "LayersTrace"

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": TRACE_KIND_LAYERS,
            "entries": [entry.to_dict() for entry in self.entries],
        }

    @classmethod
    def parse_from(
        cls,
        data: TraceData,
        *,
        source: str | None = None,
        source_checksum: str | None = None,
    ) -> LayersTrace:
        raw = load_document(data)
        entries = [LayerTraceEntry.from_dict(item) for item in entry_list(raw)]
        logger.debug("Parsed layers trace with %d entries", len(entries))
        return cls(entries=entries, source=source, source_checksum=source_checksum)


__all__ = [
    "Layer",
    "LayerTraceEntry",
    "LayersTrace",
    "NO_PARENT",
]
