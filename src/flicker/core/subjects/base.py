"""Fluent trace subjects.

A subject wraps one trace and collects assertions through chained calls::

    assert_that(trace).shows_layer("A").then().hides_layer("A").for_all_entries()

``then()`` closes the current assertion set and switches the checker to
changing-assertions mode, ``and_()`` keeps appending to the current set.
Nothing is evaluated until a terminal call (``for_all_entries``,
``for_range``, ``in_the_beginning`` or ``at_the_end``).
"""

from __future__ import annotations

import logging
from typing import Generic, NoReturn, TypeVar

from flicker.core.assertions.checker import AssertionsChecker, TraceAssertion, TraceEntry
from flicker.core.assertions.result import AssertionResult
from flicker.core.errors import TraceAssertionError
from flicker.core.trace.base import Trace

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=TraceEntry)
S = TypeVar("S", bound="SubjectBase")


class SubjectBase(Generic[E]):
    def __init__(self, trace: Trace[E]) -> None:
        self.trace = trace
        self.assertions_checker: AssertionsChecker[E] = AssertionsChecker()
        self.new_assertion = True

    @property
    def trace_name(self) -> str:
        return self.trace.trace_name

    def add_assertion(self: S, name: str, assertion: TraceAssertion[E]) -> S:
        if self.new_assertion:
            self.assertions_checker.add(assertion, name)
        else:
            self.assertions_checker.append(assertion, name)
        return self

    def then(self: S) -> S:
        """Signal that the last assertion set is complete.

        The next assertion added starts a new set, which is only checked
        after the previous set stops holding: ``check_a().then().check_b()``.
        """
        self.new_assertion = True
        self.assertions_checker.check_changing_assertions()
        return self

    def and_(self: S) -> S:
        """Signal that the last assertion set is not complete.

        The next assertions are appended to the current set, which then only
        holds when all of them hold: ``check_a().and_().check_b()``.
        """
        self.new_assertion = False
        return self

    def skip_until_first_assertion(self: S) -> S:
        """Ignore the leading entries of the trace until the first assertion passes."""
        self.assertions_checker.skip_until_first_assertion()
        return self

    def fail_with_message(self, message: str) -> NoReturn:
        raise TraceAssertionError(message)

    def __call__(self: S, name: str, assertion: TraceAssertion[E]) -> S:
        return self.add_assertion(name, assertion)

    def for_all_entries(self) -> None:
        self._test()

    def for_range(self, start_time: int, end_time: int) -> None:
        self.assertions_checker.filter_by_range(start_time, end_time)
        self._test()

    def in_the_beginning(self) -> None:
        if not self.trace.entries:
            self.fail_with_message("No entries found.")
        self.assertions_checker.check_first_entry()
        self._test()

    def at_the_end(self) -> None:
        if not self.trace.entries:
            self.fail_with_message("No entries found.")
        self.assertions_checker.check_last_entry()
        self._test()

    def failures(self) -> list[AssertionResult]:
        return self.assertions_checker.test(self.trace.entries)

    def _test(self) -> None:
        failures = self.failures()
        if not failures:
            return
        logger.debug("%s assertions failed: %d failure(s)", self.trace_name, len(failures))
        failure_logs = "\n".join(str(failure) for failure in failures)
        trace_path = ""
        if self.trace.has_source():
            trace_path = (
                f"{self.trace_name} can be found in: {self.trace.source}\n"
                f"Checksum: {self.trace.source_checksum}\n"
            )
        raise TraceAssertionError(trace_path + failure_logs, failures)


__all__ = ["SubjectBase"]
