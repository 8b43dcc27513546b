from __future__ import annotations

from dataclasses import dataclass

import pytest

from flicker.core.assertions import AssertionOption, AssertionResult, AssertionsChecker


@dataclass(slots=True)
class SimpleEntry:
    timestamp: int
    value: int


def _entries(*values: int) -> list[SimpleEntry]:
    return [SimpleEntry(timestamp=index, value=value) for index, value in enumerate(values)]


def _is(expected: int):
    def assertion(entry: SimpleEntry) -> AssertionResult:
        if entry.value == expected:
            return AssertionResult.passing(f"is{expected}", entry.timestamp)
        return AssertionResult.failing(f"is{expected}", entry.timestamp, f"{entry.value} != {expected}")

    return assertion


def _checker(*values: int) -> AssertionsChecker[SimpleEntry]:
    checker: AssertionsChecker[SimpleEntry] = AssertionsChecker()
    for value in values:
        checker.add(_is(value), f"is{value}")
    return checker


def test_empty_checker_passes() -> None:
    assert _checker().test(_entries(1, 2, 3)) == []


def test_assert_all_collects_every_failing_entry() -> None:
    failures = _checker(1).test(_entries(1, 2, 1, 3))
    assert [failure.timestamp for failure in failures] == [1, 3]
    assert all(failure.assertion_name == "is1" for failure in failures)


def test_assert_first_and_last_entry() -> None:
    first = _checker(1)
    first.check_first_entry()
    assert first.test(_entries(1, 2, 2)) == []

    last = _checker(1)
    last.check_last_entry()
    failures = last.test(_entries(1, 2, 2))
    assert len(failures) == 1
    assert failures[0].timestamp == 2


def test_first_entry_of_empty_trace_fails() -> None:
    checker = _checker(1)
    checker.check_first_entry()
    failures = checker.test([])
    assert len(failures) == 1
    assert failures[0].reason == "Trace is empty"


def test_last_entry_of_empty_trace_fails() -> None:
    checker = _checker(1, 2)
    checker.check_last_entry()
    failures = checker.test([])
    assert len(failures) == 1
    assert failures[0].assertion_name == "is1"
    assert failures[0].reason == "Trace is empty"
    assert failures[0].timestamp == 0


def test_last_entry_after_range_filter_removes_everything_fails() -> None:
    checker = _checker(1)
    checker.filter_by_range(10, 20)
    checker.check_last_entry()
    failures = checker.test(_entries(1, 1))
    assert [failure.reason for failure in failures] == ["Trace is empty"]


def test_conflicting_options_are_rejected() -> None:
    checker = _checker(1)
    checker.check_changing_assertions()
    checker.check_changing_assertions()
    assert checker.option is AssertionOption.CHECK_CHANGING_ASSERTIONS
    with pytest.raises(ValueError, match="Cannot use CHECK_CHANGING_ASSERTIONS option with CHECK_FIRST_ENTRY option."):
        checker.check_first_entry()


def test_changing_assertions_pass_in_order() -> None:
    checker = _checker(1, 2, 3)
    checker.check_changing_assertions()
    assert checker.test(_entries(1, 1, 2, 3, 3)) == []


def test_changing_assertions_fail_when_order_is_broken() -> None:
    checker = _checker(1, 2)
    checker.check_changing_assertions()
    failures = checker.test(_entries(1, 3, 2))
    assert len(failures) == 1
    assert failures[0].assertion_name == "is2"
    assert failures[0].timestamp == 1


def test_changing_assertions_fail_when_last_set_stops_holding() -> None:
    checker = _checker(1, 2)
    checker.check_changing_assertions()
    failures = checker.test(_entries(1, 2, 1))
    assert len(failures) == 1
    assert failures[0].assertion_name == "is2"
    assert failures[0].timestamp == 2


def test_changing_assertions_fail_when_first_set_never_holds() -> None:
    checker = _checker(1, 2)
    checker.check_changing_assertions()
    failures = checker.test(_entries(2, 2))
    assert len(failures) == 1
    assert failures[0].assertion_name == "is1"
    assert failures[0].timestamp == 0


def test_changing_assertions_report_unused_sets() -> None:
    checker = _checker(1, 2, 3)
    checker.check_changing_assertions()
    failures = checker.test(_entries(1, 1, 2))
    assert len(failures) == 1
    reason = failures[0].reason
    assert reason.startswith("Not all assertions passed.")
    assert "Assertion is2 never became false" in reason
    assert "Passed assertions: is1" in reason
    assert "Unused assertions: is3" in reason


def test_changing_assertions_on_empty_trace_never_pass() -> None:
    checker = _checker(1, 2)
    checker.check_changing_assertions()
    failures = checker.test([])
    assert [failure.reason for failure in failures] == ["Assertion never passed"]


def test_skip_until_first_assertion_ignores_leading_entries() -> None:
    strict = _checker(1, 2)
    strict.check_changing_assertions()
    assert len(strict.test(_entries(0, 0, 1, 2))) == 1

    skipping = _checker(1, 2)
    skipping.check_changing_assertions()
    skipping.skip_until_first_assertion()
    assert skipping.test(_entries(0, 0, 1, 2)) == []


def test_skip_until_first_assertion_reports_first_set_when_never_passing() -> None:
    checker = _checker(1, 2)
    checker.check_changing_assertions()
    checker.skip_until_first_assertion()
    failures = checker.test(_entries(0, 5, 7))
    assert len(failures) == 1
    assert failures[0].assertion_name == "is1"
    assert failures[0].reason == "0 != 1"


def test_skip_until_first_assertion_applies_to_all_entries_mode() -> None:
    checker = _checker(1)
    checker.skip_until_first_assertion()
    assert checker.test(_entries(0, 1, 1)) == []


def test_append_builds_conjunctive_set() -> None:
    checker: AssertionsChecker[SimpleEntry] = AssertionsChecker()
    checker.add(_is(1), "is1")
    checker.append(lambda entry: AssertionResult.passing("positive", entry.timestamp), "positive")
    assert len(checker.assertions) == 1
    assert checker.assertions[0].name == "is1 and positive"

    failures = checker.test(_entries(1, 2))
    assert len(failures) == 1
    assert failures[0].assertion_name == "is1"


def test_compound_assertion_reports_first_failing_member() -> None:
    checker: AssertionsChecker[SimpleEntry] = AssertionsChecker()
    checker.add(_is(1), "is1")
    checker.append(_is(2), "is2")
    failures = checker.test(_entries(2))
    assert [failure.assertion_name for failure in failures] == ["is1"]


def test_filter_by_range_limits_entries() -> None:
    checker = _checker(1)
    checker.filter_by_range(1, 2)
    assert checker.test(_entries(0, 1, 1, 0)) == []


def test_filter_by_range_rejects_inverted_range() -> None:
    with pytest.raises(ValueError, match="Invalid range"):
        _checker(1).filter_by_range(5, 1)
