from __future__ import annotations

from flicker.core.geometry import Rect, Region
from flicker.core.subjects.base import SubjectBase
from flicker.core.trace.layers import LayersTrace, LayerTraceEntry


class LayersTraceSubject(SubjectBase[LayerTraceEntry]):
    """Fluent assertions over a :class:`LayersTrace`."""

    def __init__(self, trace: LayersTrace) -> None:
        super().__init__(trace)

    def covers_at_least_region(self, region: Rect | Region, layer_name: str = "") -> LayersTraceSubject:
        expected = Region.from_value(region)
        return self.add_assertion(
            f"coversAtLeastRegion({expected}, {layer_name})",
            lambda entry: entry.covers_at_least_region(expected, layer_name),
        )

    def covers_at_most_region(self, region: Rect | Region, layer_name: str = "") -> LayersTraceSubject:
        expected = Region.from_value(region)
        return self.add_assertion(
            f"coversAtMostRegion({expected}, {layer_name})",
            lambda entry: entry.covers_at_most_region(expected, layer_name),
        )

    def has_visible_region(self, layer_name: str, region: Rect | Region) -> LayersTraceSubject:
        expected = Region.from_value(region)
        return self.add_assertion(
            f"hasVisibleRegion({layer_name}, {expected})",
            lambda entry: entry.has_visible_region(layer_name, expected),
        )

    def has_layer(self, layer_name: str) -> LayersTraceSubject:
        return self.add_assertion(f"hasLayer({layer_name})", lambda entry: entry.exists(layer_name))

    def has_not_layer(self, layer_name: str) -> LayersTraceSubject:
        return self.add_assertion(f"hasNotLayer({layer_name})", lambda entry: entry.exists(layer_name).negate())

    def shows_layer(self, layer_name: str) -> LayersTraceSubject:
        return self.add_assertion(f"showsLayer({layer_name})", lambda entry: entry.is_visible(layer_name))

    def hides_layer(self, layer_name: str) -> LayersTraceSubject:
        return self.add_assertion(f"hidesLayer({layer_name})", lambda entry: entry.is_visible(layer_name).negate())

    def replace_visible_layer(self, previous_layer_name: str, current_layer_name: str) -> LayersTraceSubject:
        return self.hides_layer(previous_layer_name).and_().shows_layer(current_layer_name)


__all__ = ["LayersTraceSubject"]
