from __future__ import annotations

import hashlib
import json
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from flicker.core.assertions.checker import TraceEntry
from flicker.core.constants import TRACE_SCHEMA_VERSION
from flicker.core.errors import EntryNotFoundError, TraceParseError

E = TypeVar("E", bound=TraceEntry)

TraceData = bytes | str | dict[str, Any]


@dataclass(slots=True)
class Trace(Generic[E]):
    entries: list[E] = field(default_factory=list)
    source: str | None = None
    source_checksum: str | None = None

    trace_name = "Trace"

    def has_source(self) -> bool:
        return bool(self.source)

    def get_entry(self, timestamp: int) -> E:
        for entry in self.entries:
            if entry.timestamp == timestamp:
                return entry
        raise EntryNotFoundError(timestamp)

    @property
    def first_timestamp(self) -> int | None:
        return self.entries[0].timestamp if self.entries else None

    @property
    def last_timestamp(self) -> int | None:
        return self.entries[-1].timestamp if self.entries else None

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[E]:
        return iter(self.entries)


def sha256_of_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def load_document(data: TraceData) -> dict[str, Any]:
    if isinstance(data, dict):
        raw: Any = data
    else:
        try:
            text = data.decode("utf-8") if isinstance(data, bytes) else data
            raw = json.loads(text)
        except UnicodeDecodeError as exc:
            raise TraceParseError(f"Trace is not valid UTF-8: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise TraceParseError(f"Trace is not valid JSON: {exc}") from exc

    if not isinstance(raw, dict):
        raise TraceParseError("Trace document must be an object")

    schema_version = str(raw.get("schema_version", TRACE_SCHEMA_VERSION))
    if schema_version != TRACE_SCHEMA_VERSION:
        raise TraceParseError(
            f"Unsupported trace schema_version '{schema_version}'. Expected '{TRACE_SCHEMA_VERSION}'."
        )
    return raw


def entry_list(raw: dict[str, Any]) -> list[dict[str, Any]]:
    entries = raw.get("entries")
    if not isinstance(entries, list):
        raise TraceParseError("Trace requires list field `entries`")
    for index, item in enumerate(entries):
        if not isinstance(item, dict):
            raise TraceParseError(f"Trace entry {index} must be an object")
    return entries


def require_int(raw: dict[str, Any], key: str, *, context: str) -> int:
    value = raw.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise TraceParseError(f"{context} requires integer `{key}`, got: {value!r}")
    return value


def require_str(raw: dict[str, Any], key: str, *, context: str) -> str:
    value = raw.get(key)
    if not isinstance(value, str):
        raise TraceParseError(f"{context} requires string `{key}`, got: {value!r}")
    return value


def optional_int(raw: dict[str, Any], key: str, default: int, *, context: str) -> int:
    value = raw.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise TraceParseError(f"{context} field `{key}` must be an integer, got: {value!r}")
    return value


def optional_bool(raw: dict[str, Any], key: str, default: bool, *, context: str) -> bool:
    value = raw.get(key, default)
    if not isinstance(value, bool):
        raise TraceParseError(f"{context} field `{key}` must be a boolean")
    return value


__all__ = [
    "Trace",
    "TraceData",
    "entry_list",
    "load_document",
    "optional_bool",
    "optional_int",
    "require_int",
    "require_str",
    "sha256_of_bytes",
]
