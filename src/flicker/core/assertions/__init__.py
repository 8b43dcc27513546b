from flicker.core.assertions.checker import (
    AssertionOption,
    AssertionsChecker,
    CompoundAssertion,
    NamedAssertion,
    TraceAssertion,
    TraceEntry,
)
from flicker.core.assertions.result import AssertionResult, pretty_timestamp

__all__ = [
    "AssertionOption",
    "AssertionResult",
    "AssertionsChecker",
    "CompoundAssertion",
    "NamedAssertion",
    "TraceAssertion",
    "TraceEntry",
    "pretty_timestamp",
]
