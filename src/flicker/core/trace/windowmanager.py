"""Window manager trace: per-timestamp snapshots of the window hierarchy.

Windows of an entry are listed in z-order, top-most first.  Each window has a
kind locating it relative to the app windows: ``above_app`` (status bar,
navigation bar, overlays), ``ime`` (input method, also counted as above the
apps), ``app`` and ``below_app`` (wallpaper).

Title matching is by substring, so ``"chrome"`` matches
``"com.android.chrome/com.google.android.apps.chrome.Main"``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Literal

from flicker.core.assertions.result import AssertionResult
from flicker.core.constants import (
    TRACE_KIND_WINDOW_MANAGER,
    WINDOW_KIND_ABOVE_APP,
    WINDOW_KIND_APP,
    WINDOW_KIND_BELOW_APP,
    WINDOW_KIND_IME,
    WINDOW_KINDS,
)
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

WindowKind = Literal["above_app", "app", "below_app", "ime"]


@dataclass(slots=True)
class WindowState:
    title: str
    kind: WindowKind
    visible: bool
    frame: Rect
    layer: int = 0
    token: str = ""

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "title": self.title,
            "kind": self.kind,
            "visible": self.visible,
            "frame": self.frame.to_list(),
            "layer": self.layer,
        }
        if self.token:
            payload["token"] = self.token
        return payload

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> WindowState:
        context = "Window"
        title = require_str(raw, "title", context=context)
        kind = raw.get("kind", WINDOW_KIND_APP)
        if not isinstance(kind, str) or kind not in WINDOW_KINDS:
            raise TraceParseError(f"Window {title!r} has unsupported kind: {kind!r}")
        try:
            frame = Rect.from_value(raw.get("frame", [0, 0, 0, 0]))
        except ValueError as exc:
            raise TraceParseError(f"Window {title!r} has invalid frame: {exc}") from exc
        return cls(
            title=title,
            kind=kind,
            visible=optional_bool(raw, "visible", False, context=context),
            frame=frame,
            layer=optional_int(raw, "layer", 0, context=f"Window {title!r}"),
            token=str(raw.get("token", "")),
        )


def _matching(windows: list[WindowState], title: str) -> list[WindowState]:
    return [window for window in windows if title in window.title]


@dataclass(slots=True)
class WindowManagerTraceEntry:
    timestamp: int
    windows: list[WindowState] = field(default_factory=list)
    focused_app: str = ""
    focused_window: str = ""

    @property
    def visible_windows(self) -> list[WindowState]:
        return [window for window in self.windows if window.visible]

    @property
    def app_windows(self) -> list[WindowState]:
        return [window for window in self.windows if window.kind == WINDOW_KIND_APP]

    @property
    def above_app_windows(self) -> list[WindowState]:
        return [window for window in self.windows if window.kind in (WINDOW_KIND_ABOVE_APP, WINDOW_KIND_IME)]

    @property
    def below_app_windows(self) -> list[WindowState]:
        return [window for window in self.windows if window.kind == WINDOW_KIND_BELOW_APP]

    @property
    def ime_windows(self) -> list[WindowState]:
        return [window for window in self.windows if window.kind == WINDOW_KIND_IME]

    @property
    def non_app_windows(self) -> list[WindowState]:
        return [window for window in self.windows if window.kind != WINDOW_KIND_APP]

    @property
    def top_visible_app_window(self) -> WindowState | None:
        for window in self.app_windows:
            if window.visible:
                return window
        return None

    def _is_window_visible(
        self,
        assertion_name: str,
        window_title: str,
        windows: list[WindowState],
    ) -> AssertionResult:
        if not windows:
            return AssertionResult.failing(assertion_name, self.timestamp, "No windows found")
        found = _matching(windows, window_title)
        if not found:
            return AssertionResult.failing(assertion_name, self.timestamp, f"{window_title} cannot be found")
        if not found[0].visible:
            return AssertionResult.failing(assertion_name, self.timestamp, f"{window_title} is invisible")
        return AssertionResult.passing(assertion_name, self.timestamp, f"{found[0].title} is visible")

    def is_above_app_window(self, window_title: str) -> AssertionResult:
        return self._is_window_visible("isAboveAppWindow", window_title, self.above_app_windows)

    def is_below_app_window(self, window_title: str) -> AssertionResult:
        return self._is_window_visible("isBelowAppWindow", window_title, self.below_app_windows)

    def is_ime_window(self, window_title: str) -> AssertionResult:
        return self._is_window_visible("isImeWindow", window_title, self.ime_windows)

    def is_app_window_visible(self, window_title: str) -> AssertionResult:
        return self._is_window_visible("isAppWindowVisible", window_title, self.app_windows)

    def is_window_visible(self, window_title: str) -> AssertionResult:
        return self._is_window_visible("isWindowVisible", window_title, self.windows)

    def has_non_app_window(self, window_title: str) -> AssertionResult:
        above = self.is_above_app_window(window_title)
        if above.passed():
            result = above
        else:
            below = self.is_below_app_window(window_title)
            # Report the list the window was actually found in.
            found_below = bool(_matching(self.below_app_windows, window_title))
            result = below if below.passed() or found_below else above
        return AssertionResult(
            reason=result.reason,
            assertion_name="hasNonAppWindow",
            timestamp=self.timestamp,
            success=result.success,
        )

    def is_visible_app_window_on_top(self, window_title: str) -> AssertionResult:
        assertion_name = "isAppWindowOnTop"
        top = self.top_visible_app_window
        if top is None:
            return AssertionResult.failing(assertion_name, self.timestamp, "No visible app windows found")
        if window_title in top.title:
            return AssertionResult.passing(assertion_name, self.timestamp, f"{top.title} is on top")
        return AssertionResult.failing(assertion_name, self.timestamp, f"wanted={window_title} found={top.title}")

    def has_focus(self, window_title: str) -> AssertionResult:
        assertion_name = "hasFocus"
        if window_title in self.focused_window:
            return AssertionResult.passing(assertion_name, self.timestamp, f"{self.focused_window} has focus")
        return AssertionResult.failing(
            assertion_name, self.timestamp, f"wanted={window_title} found={self.focused_window}"
        )

    def window_region(self, window_title: str) -> Region:
        """Union of the frames of the visible windows whose title matches."""
        visible = [window for window in _matching(self.windows, window_title) if window.visible]
        return Region.from_rects(window.frame for window in visible)

    def covers_at_least_region(self, window_title: str, region: Region) -> AssertionResult:
        assertion_name = "coversAtLeastRegion"
        uncovered = region.subtract(self.window_region(window_title))
        if uncovered.is_empty():
            return AssertionResult.passing(assertion_name, self.timestamp, f"{window_title} covers {region}")
        return AssertionResult.failing(
            assertion_name,
            self.timestamp,
            f"Region to test: {region}\nUncovered region: {uncovered}",
        )

    def covers_at_most_region(self, window_title: str, region: Region) -> AssertionResult:
        assertion_name = "coversAtMostRegion"
        out_of_bounds = self.window_region(window_title).subtract(region)
        if out_of_bounds.is_empty():
            return AssertionResult.passing(assertion_name, self.timestamp, f"{window_title} is inside {region}")
        return AssertionResult.failing(
            assertion_name,
            self.timestamp,
            f"Region to test: {region}\nOut-of-bounds region: {out_of_bounds}",
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "focused_app": self.focused_app,
            "focused_window": self.focused_window,
            "windows": [window.to_dict() for window in self.windows],
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> WindowManagerTraceEntry:
        timestamp = require_int(raw, "timestamp", context="Window manager entry")
        windows_raw = raw.get("windows", [])
        if not isinstance(windows_raw, list) or not all(isinstance(item, dict) for item in windows_raw):
            raise TraceParseError(f"Window manager entry {timestamp} requires list of objects `windows`")
        return cls(
            timestamp=timestamp,
            windows=[WindowState.from_dict(item) for item in windows_raw],
            focused_app=str(raw.get("focused_app", "")),
            focused_window=str(raw.get("focused_window", "")),
        )


@dataclass(slots=True)
class WindowManagerTrace(Trace[WindowManagerTraceEntry]):
    trace_name = "WindowManagerTrace"

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": TRACE_KIND_WINDOW_MANAGER,
            "entries": [entry.to_dict() for entry in self.entries],
        }

    @classmethod
    def parse_from(
        cls,
        data: TraceData,
        *,
        source: str | None = None,
        source_checksum: str | None = None,
    ) -> WindowManagerTrace:
        raw = load_document(data)
        entries = [WindowManagerTraceEntry.from_dict(item) for item in entry_list(raw)]
        logger.debug("Parsed window manager trace with %d entries", len(entries))
        return cls(entries=entries, source=source, source_checksum=source_checksum)

    @classmethod
    def parse_from_dump(
        cls,
        data: TraceData,
        *,
        source: str | None = None,
        source_checksum: str | None = None,
    ) -> WindowManagerTrace:
        """Parse a single-snapshot dump into a trace with one entry."""
        raw = load_document(data)
        snapshot = dict(raw)
        snapshot.setdefault("timestamp", 0)
        entry = WindowManagerTraceEntry.from_dict(snapshot)
        return cls(entries=[entry], source=source, source_checksum=source_checksum)


__all__ = [
    "WindowKind",
    "WindowManagerTrace",
    "WindowManagerTraceEntry",
    "WindowState",
]
