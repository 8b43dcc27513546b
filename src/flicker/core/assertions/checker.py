"""Assertion-set state machine evaluated over an ordered list of trace entries.

An ``AssertionsChecker`` holds an ordered list of assertion sets.  Each set is
a ``CompoundAssertion``: a conjunction of named predicates over one entry.
How the sets are applied depends on the checker option:

- ``NONE``: every set must hold on every entry.
- ``CHECK_FIRST_ENTRY`` / ``CHECK_LAST_ENTRY``: every set must hold on the
  first (last) entry only.
- ``CHECK_CHANGING_ASSERTIONS``: the sets must hold one after the other.  Set
  ``i`` holds on a contiguous run of entries, then set ``i + 1`` takes over on
  the first entry where set ``i`` stops holding, and so on until the last set
  holds through the end of the trace.

With ``skip_until_first_assertion`` the leading entries on which the first set
does not hold are ignored.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, Protocol, TypeVar

from flicker.core.assertions.result import AssertionResult

logger = logging.getLogger(__name__)


class TraceEntry(Protocol):
    @property
    def timestamp(self) -> int: ...


E = TypeVar("E", bound=TraceEntry)

TraceAssertion = Callable[[E], AssertionResult]


class AssertionOption(Enum):
    NONE = "NONE"
    CHECK_FIRST_ENTRY = "CHECK_FIRST_ENTRY"
    CHECK_LAST_ENTRY = "CHECK_LAST_ENTRY"
    CHECK_CHANGING_ASSERTIONS = "CHECK_CHANGING_ASSERTIONS"


@dataclass(slots=True)
class NamedAssertion(Generic[E]):
    assertion: TraceAssertion[E]
    name: str

    def __call__(self, entry: E) -> AssertionResult:
        return self.assertion(entry)

    def __str__(self) -> str:
        return self.name


@dataclass(slots=True)
class CompoundAssertion(Generic[E]):
    """Conjunction of named assertions; fails with the first failing member."""

    assertions: list[NamedAssertion[E]] = field(default_factory=list)

    def add(self, assertion: TraceAssertion[E], name: str) -> None:
        self.assertions.append(NamedAssertion(assertion=assertion, name=name))

    @property
    def name(self) -> str:
        return " and ".join(assertion.name for assertion in self.assertions)

    def __call__(self, entry: E) -> AssertionResult:
        for assertion in self.assertions:
            result = assertion(entry)
            if result.failed():
                return result
        return AssertionResult.passing(self.name, entry.timestamp)

    def __str__(self) -> str:
        return self.name


class AssertionsChecker(Generic[E]):
    def __init__(self) -> None:
        self._assertions: list[CompoundAssertion[E]] = []
        self._option = AssertionOption.NONE
        self._skip_until_first_assertion = False
        self._range: tuple[int, int] | None = None

    @property
    def assertions(self) -> list[CompoundAssertion[E]]:
        return list(self._assertions)

    @property
    def option(self) -> AssertionOption:
        return self._option

    def add(self, assertion: TraceAssertion[E], name: str) -> None:
        compound: CompoundAssertion[E] = CompoundAssertion()
        compound.add(assertion, name)
        self._assertions.append(compound)

    def append(self, assertion: TraceAssertion[E], name: str) -> None:
        if not self._assertions:
            self.add(assertion, name)
            return
        self._assertions[-1].add(assertion, name)

    def filter_by_range(self, start_time: int, end_time: int) -> None:
        if end_time < start_time:
            raise ValueError(f"Invalid range: end {end_time} is before start {start_time}")
        self._range = (start_time, end_time)

    def _set_option(self, option: AssertionOption) -> None:
        if self._option is not AssertionOption.NONE and option is not self._option:
            raise ValueError(f"Cannot use {self._option.value} option with {option.value} option.")
        self._option = option

    def check_first_entry(self) -> None:
        self._set_option(AssertionOption.CHECK_FIRST_ENTRY)

    def check_last_entry(self) -> None:
        self._set_option(AssertionOption.CHECK_LAST_ENTRY)

    def check_changing_assertions(self) -> None:
        self._set_option(AssertionOption.CHECK_CHANGING_ASSERTIONS)

    def skip_until_first_assertion(self) -> None:
        self._skip_until_first_assertion = True

    def test(self, entries: Sequence[E]) -> list[AssertionResult]:
        """Evaluate all assertion sets and return the failures (empty on success)."""
        if not self._assertions:
            return []

        filtered = list(entries)
        if self._range is not None:
            start, end = self._range
            filtered = [entry for entry in filtered if start <= entry.timestamp <= end]
            logger.debug("Range [%d, %d] kept %d of %d entries", start, end, len(filtered), len(entries))

        if self._option is AssertionOption.CHECK_FIRST_ENTRY:
            return self._assert_entry(filtered, 0)
        if self._option is AssertionOption.CHECK_LAST_ENTRY:
            return self._assert_entry(filtered, -1)

        if self._skip_until_first_assertion:
            filtered, failure = self._skip_leading_entries(filtered)
            if failure is not None:
                return [failure]

        if self._option is AssertionOption.CHECK_CHANGING_ASSERTIONS:
            return self._assert_changes(filtered)
        return self._assert_all(filtered)

    def _skip_leading_entries(self, entries: list[E]) -> tuple[list[E], AssertionResult | None]:
        first = self._assertions[0]
        first_result: AssertionResult | None = None
        for index, entry in enumerate(entries):
            result = first(entry)
            if result.passed():
                logger.debug("Skipped %d leading entries until %s passed", index, first.name)
                return entries[index:], None
            if first_result is None:
                first_result = result

        if first_result is None:
            return [], AssertionResult.failing(first.name, 0, "Trace is empty")
        return [], AssertionResult.failing(first.name, first_result.timestamp, first_result.reason)

    def _assert_entry(self, entries: list[E], index: int) -> list[AssertionResult]:
        if not entries:
            return [AssertionResult.failing(self._assertions[0].name, 0, "Trace is empty")]
        entry = entries[index]
        return [result for result in (assertion(entry) for assertion in self._assertions) if result.failed()]

    def _assert_all(self, entries: list[E]) -> list[AssertionResult]:
        failures: list[AssertionResult] = []
        for entry in entries:
            for assertion in self._assertions:
                result = assertion(entry)
                if result.failed():
                    failures.append(result)
        return failures

    def _assert_changes(self, entries: list[E]) -> list[AssertionResult]:
        failures: list[AssertionResult] = []
        entry_index = 0
        assertion_index = 0
        last_passed_assertion_index = -1

        while assertion_index < len(self._assertions) and entry_index < len(entries):
            entry = entries[entry_index]
            result = self._assertions[assertion_index](entry)
            if result.passed():
                last_passed_assertion_index = assertion_index
                entry_index += 1
                continue

            if last_passed_assertion_index != assertion_index:
                failures.append(result)
                break

            assertion_index += 1
            logger.debug("Assertion set %d became false at %d", assertion_index - 1, entry.timestamp)
            if assertion_index == len(self._assertions):
                failures.append(result)
                break

        if last_passed_assertion_index == -1 and not failures:
            first = self._assertions[0]
            timestamp = entries[0].timestamp if entries else 0
            failures.append(AssertionResult.failing(first.name, timestamp, "Assertion never passed"))

        if not failures and assertion_index != len(self._assertions) - 1:
            names = [assertion.name for assertion in self._assertions]
            reason = (
                "Not all assertions passed.\n"
                f"Assertion {names[assertion_index]} never became false\n"
                f"\tPassed assertions: {','.join(names[:assertion_index])}\n"
                f"\tUnused assertions: {','.join(names[assertion_index + 1:])}"
            )
            timestamp = entries[-1].timestamp if entries else 0
            failures.append(AssertionResult.failing(names[assertion_index], timestamp, reason))

        return failures


__all__ = [
    "AssertionOption",
    "AssertionsChecker",
    "CompoundAssertion",
    "NamedAssertion",
    "TraceAssertion",
    "TraceEntry",
]
