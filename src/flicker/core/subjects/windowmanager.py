from __future__ import annotations

from flicker.core.geometry import Rect, Region
from flicker.core.subjects.base import SubjectBase
from flicker.core.trace.windowmanager import WindowManagerTrace, WindowManagerTraceEntry


class WindowManagerTraceSubject(SubjectBase[WindowManagerTraceEntry]):
    """Fluent assertions over a :class:`WindowManagerTrace`."""

    def __init__(self, trace: WindowManagerTrace) -> None:
        super().__init__(trace)

    def shows_above_app_window(self, window_title: str) -> WindowManagerTraceSubject:
        return self.add_assertion(
            f"showsAboveAppWindow({window_title})",
            lambda entry: entry.is_above_app_window(window_title),
        )

    def hides_above_app_window(self, window_title: str) -> WindowManagerTraceSubject:
        return self.add_assertion(
            f"hidesAboveAppWindow({window_title})",
            lambda entry: entry.is_above_app_window(window_title).negate(),
        )

    def shows_below_app_window(self, window_title: str) -> WindowManagerTraceSubject:
        return self.add_assertion(
            f"showsBelowAppWindow({window_title})",
            lambda entry: entry.is_below_app_window(window_title),
        )

    def hides_below_app_window(self, window_title: str) -> WindowManagerTraceSubject:
        return self.add_assertion(
            f"hidesBelowAppWindow({window_title})",
            lambda entry: entry.is_below_app_window(window_title).negate(),
        )

    def shows_ime_window(self, window_title: str) -> WindowManagerTraceSubject:
        return self.add_assertion(
            f"showsImeWindow({window_title})",
            lambda entry: entry.is_ime_window(window_title),
        )

    def hides_ime_window(self, window_title: str) -> WindowManagerTraceSubject:
        return self.add_assertion(
            f"hidesImeWindow({window_title})",
            lambda entry: entry.is_ime_window(window_title).negate(),
        )

    def shows_app_window(self, window_title: str) -> WindowManagerTraceSubject:
        return self.add_assertion(
            f"showsAppWindow({window_title})",
            lambda entry: entry.is_app_window_visible(window_title),
        )

    def hides_app_window(self, window_title: str) -> WindowManagerTraceSubject:
        return self.add_assertion(
            f"hidesAppWindow({window_title})",
            lambda entry: entry.is_app_window_visible(window_title).negate(),
        )

    def shows_app_window_on_top(self, window_title: str) -> WindowManagerTraceSubject:
        return self.add_assertion(
            f"showsAppWindowOnTop({window_title})",
            lambda entry: entry.is_visible_app_window_on_top(window_title),
        )

    def hides_app_window_on_top(self, window_title: str) -> WindowManagerTraceSubject:
        return self.add_assertion(
            f"hidesAppWindowOnTop({window_title})",
            lambda entry: entry.is_visible_app_window_on_top(window_title).negate(),
        )

    def replace_app_window_on_top(self, previous_title: str, current_title: str) -> WindowManagerTraceSubject:
        return self.hides_app_window_on_top(previous_title).and_().shows_app_window_on_top(current_title)

    def has_focus(self, window_title: str) -> WindowManagerTraceSubject:
        return self.add_assertion(f"hasFocus({window_title})", lambda entry: entry.has_focus(window_title))

    def covers_at_least_region(self, window_title: str, region: Rect | Region) -> WindowManagerTraceSubject:
        expected = Region.from_value(region)
        return self.add_assertion(
            f"coversAtLeastRegion({window_title}, {expected})",
            lambda entry: entry.covers_at_least_region(window_title, expected),
        )

    def covers_at_most_region(self, window_title: str, region: Rect | Region) -> WindowManagerTraceSubject:
        expected = Region.from_value(region)
        return self.add_assertion(
            f"coversAtMostRegion({window_title}, {expected})",
            lambda entry: entry.covers_at_most_region(window_title, expected),
        )


__all__ = ["WindowManagerTraceSubject"]
