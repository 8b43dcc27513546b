"""Integer rectangles and pixel regions.

A ``Region`` is stored in canonical banded form: a sorted list of horizontal
bands ``(top, bottom, spans)`` where ``spans`` are disjoint, sorted
``(left, right)`` intervals.  Vertically adjacent bands with identical spans
are merged, so two regions covering the same pixels always compare equal and
render identically.

The textual form mirrors Skia's region dump (``SkRegion((l,t,r,b)...)``),
which is what trace failure messages quote.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any

Span = tuple[int, int]
Band = tuple[int, int, tuple[Span, ...]]


@dataclass(slots=True, frozen=True)
class Rect:
    left: int
    top: int
    right: int
    bottom: int

    @property
    def width(self) -> int:
        return self.right - self.left

    @property
    def height(self) -> int:
        return self.bottom - self.top

    def is_empty(self) -> bool:
        return self.right <= self.left or self.bottom <= self.top

    def to_list(self) -> list[int]:
        return [self.left, self.top, self.right, self.bottom]

    @classmethod
    def from_value(cls, raw: Any) -> Rect:
        if isinstance(raw, Rect):
            return raw
        if isinstance(raw, dict):
            raw = [raw.get("left", 0), raw.get("top", 0), raw.get("right", 0), raw.get("bottom", 0)]
        if not isinstance(raw, list | tuple) or len(raw) != 4:
            raise ValueError(f"Rect requires [left, top, right, bottom], got: {raw!r}")
        if not all(isinstance(value, int) and not isinstance(value, bool) for value in raw):
            raise ValueError(f"Rect requires integer coordinates, got: {raw!r}")
        left, top, right, bottom = raw
        return cls(left=left, top=top, right=right, bottom=bottom)

    def __str__(self) -> str:
        return f"({self.left},{self.top},{self.right},{self.bottom})"


def _spans_at(bands: Sequence[Band], y: int) -> tuple[Span, ...]:
    for top, bottom, spans in bands:
        if top <= y < bottom:
            return spans
        if top > y:
            break
    return ()


def _covered(spans: tuple[Span, ...], x: int) -> bool:
    return any(left <= x < right for left, right in spans)


def _combine_spans(
    first: tuple[Span, ...],
    second: tuple[Span, ...],
    op: Callable[[bool, bool], bool],
) -> tuple[Span, ...]:
    xs = sorted({x for span in (*first, *second) for x in span})
    result: list[Span] = []
    for x0, x1 in zip(xs, xs[1:]):
        if not op(_covered(first, x0), _covered(second, x0)):
            continue
        if result and result[-1][1] == x0:
            result[-1] = (result[-1][0], x1)
        else:
            result.append((x0, x1))
    return tuple(result)


def _combine(
    first: Sequence[Band],
    second: Sequence[Band],
    op: Callable[[bool, bool], bool],
) -> tuple[Band, ...]:
    ys = sorted({y for top, bottom, _ in (*first, *second) for y in (top, bottom)})
    bands: list[Band] = []
    for y0, y1 in zip(ys, ys[1:]):
        spans = _combine_spans(_spans_at(first, y0), _spans_at(second, y0), op)
        if not spans:
            continue
        if bands and bands[-1][1] == y0 and bands[-1][2] == spans:
            bands[-1] = (bands[-1][0], y1, spans)
        else:
            bands.append((y0, y1, spans))
    return tuple(bands)


class Region:
    """Set of integer pixels built from rectangles."""

    __slots__ = ("_bands",)

    def __init__(self, left: int = 0, top: int = 0, right: int = 0, bottom: int = 0) -> None:
        if right <= left or bottom <= top:
            self._bands: tuple[Band, ...] = ()
        else:
            self._bands = ((top, bottom, ((left, right),)),)

    @classmethod
    def _from_bands(cls, bands: tuple[Band, ...]) -> Region:
        region = cls()
        region._bands = bands
        return region

    @classmethod
    def from_rect(cls, rect: Rect) -> Region:
        return cls(rect.left, rect.top, rect.right, rect.bottom)

    @classmethod
    def from_rects(cls, rects: Iterable[Rect]) -> Region:
        region = cls()
        for rect in rects:
            region = region.union(cls.from_rect(rect))
        return region

    @classmethod
    def from_value(cls, raw: Any) -> Region:
        """Build a region from a rect, a ``[l, t, r, b]`` list or a list of those."""
        if isinstance(raw, Region):
            return raw
        if isinstance(raw, Rect | dict):
            return cls.from_rect(Rect.from_value(raw))
        if raw is None:
            return cls()
        if isinstance(raw, list | tuple) and raw and all(isinstance(item, int) for item in raw):
            return cls.from_rect(Rect.from_value(raw))
        if isinstance(raw, list | tuple):
            return cls.from_rects(Rect.from_value(item) for item in raw)
        raise ValueError(f"Region requires a rect or a list of rects, got: {raw!r}")

    def union(self, other: Region) -> Region:
        return Region._from_bands(_combine(self._bands, other._bands, lambda a, b: a or b))

    def intersect(self, other: Region) -> Region:
        return Region._from_bands(_combine(self._bands, other._bands, lambda a, b: a and b))

    def subtract(self, other: Region) -> Region:
        return Region._from_bands(_combine(self._bands, other._bands, lambda a, b: a and not b))

    __or__ = union
    __and__ = intersect
    __sub__ = subtract

    def is_empty(self) -> bool:
        return not self._bands

    def contains_region(self, other: Region) -> bool:
        return other.subtract(self).is_empty()

    @property
    def rects(self) -> list[Rect]:
        return [
            Rect(left=left, top=top, right=right, bottom=bottom)
            for top, bottom, spans in self._bands
            for left, right in spans
        ]

    @property
    def bounds(self) -> Rect:
        if not self._bands:
            return Rect(0, 0, 0, 0)
        lefts = [spans[0][0] for _, _, spans in self._bands]
        rights = [spans[-1][1] for _, _, spans in self._bands]
        return Rect(min(lefts), self._bands[0][0], max(rights), self._bands[-1][1])

    def to_list(self) -> list[list[int]]:
        return [rect.to_list() for rect in self.rects]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Region):
            return NotImplemented
        return self._bands == other._bands

    def __hash__(self) -> int:
        return hash(self._bands)

    def __str__(self) -> str:
        return "SkRegion(" + "".join(str(rect) for rect in self.rects) + ")"

    __repr__ = __str__


__all__ = ["Rect", "Region"]
