"""Check specs: YAML files describing which assertions to run on which trace.

A ``*.flicker.yaml`` file names a trace and lists assertion sets.  Each set is
either a single step or a list of steps; steps of one set are combined with
``and_()`` and consecutive sets with ``then()``.  A step is a one-key mapping
from a subject method to its arguments::

    name: open-chrome
    trace: traces/wm_trace.json
    at: all
    assertions:
      - shows_app_window_on_top: launcher
      - - hides_app_window_on_top: launcher
        - shows_app_window: chrome

Specs may ``extends`` another spec file; mappings are deep-merged and the
extending file wins.
"""

from __future__ import annotations

import glob
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

import yaml

from flicker.core.constants import (
    CHECK_AT_ALL,
    CHECK_AT_RANGE,
    CHECK_AT_VALUES,
    CHECK_SPEC_SUFFIX,
    TRACE_KIND_LAYERS,
    TRACE_KIND_WINDOW_MANAGER,
    TRACE_KINDS,
)
from flicker.core.geometry import Region

_MAX_EXTENDS_DEPTH = 10

CheckAt = Literal["all", "start", "end", "range"]

# Parameter kinds of a step argument.
_TEXT = "text"
_REGION = "region"


@dataclass(slots=True, frozen=True)
class StepParam:
    name: str
    kind: str
    required: bool = True


_WINDOW_TITLE = (StepParam("window_title", _TEXT),)
_LAYER_NAME = (StepParam("layer_name", _TEXT),)

WINDOW_MANAGER_SIGNATURES: dict[str, tuple[StepParam, ...]] = {
    "shows_above_app_window": _WINDOW_TITLE,
    "hides_above_app_window": _WINDOW_TITLE,
    "shows_below_app_window": _WINDOW_TITLE,
    "hides_below_app_window": _WINDOW_TITLE,
    "shows_ime_window": _WINDOW_TITLE,
    "hides_ime_window": _WINDOW_TITLE,
    "shows_app_window": _WINDOW_TITLE,
    "hides_app_window": _WINDOW_TITLE,
    "shows_app_window_on_top": _WINDOW_TITLE,
    "hides_app_window_on_top": _WINDOW_TITLE,
    "replace_app_window_on_top": (StepParam("previous_title", _TEXT), StepParam("current_title", _TEXT)),
    "has_focus": _WINDOW_TITLE,
    "covers_at_least_region": (StepParam("window_title", _TEXT), StepParam("region", _REGION)),
    "covers_at_most_region": (StepParam("window_title", _TEXT), StepParam("region", _REGION)),
}

LAYERS_SIGNATURES: dict[str, tuple[StepParam, ...]] = {
    "covers_at_least_region": (StepParam("region", _REGION), StepParam("layer_name", _TEXT, required=False)),
    "covers_at_most_region": (StepParam("region", _REGION), StepParam("layer_name", _TEXT, required=False)),
    "has_visible_region": (StepParam("layer_name", _TEXT), StepParam("region", _REGION)),
    "has_layer": _LAYER_NAME,
    "has_not_layer": _LAYER_NAME,
    "shows_layer": _LAYER_NAME,
    "hides_layer": _LAYER_NAME,
    "replace_visible_layer": (
        StepParam("previous_layer_name", _TEXT),
        StepParam("current_layer_name", _TEXT),
    ),
}

SIGNATURES_BY_KIND = {
    TRACE_KIND_WINDOW_MANAGER: WINDOW_MANAGER_SIGNATURES,
    TRACE_KIND_LAYERS: LAYERS_SIGNATURES,
}

WINDOW_MANAGER_STEPS = frozenset(WINDOW_MANAGER_SIGNATURES)
LAYERS_STEPS = frozenset(LAYERS_SIGNATURES)

STEPS_BY_KIND = {
    TRACE_KIND_WINDOW_MANAGER: WINDOW_MANAGER_STEPS,
    TRACE_KIND_LAYERS: LAYERS_STEPS,
}


@dataclass(slots=True)
class AssertionStep:
    method: str
    args: list[Any] = field(default_factory=list)
    kwargs: dict[str, Any] = field(default_factory=dict)

    def describe(self) -> str:
        rendered = [repr(arg) for arg in self.args]
        rendered.extend(f"{key}={value!r}" for key, value in sorted(self.kwargs.items()))
        return f"{self.method}({', '.join(rendered)})"


@dataclass(slots=True)
class CheckSpec:
    name: str
    trace: str
    source_path: Path
    assertion_sets: list[list[AssertionStep]] = field(default_factory=list)
    kind: str | None = None
    at: CheckAt = "all"
    range_start: int | None = None
    range_end: int | None = None
    skip_until_first_assertion: bool = False
    dump: bool = False

    def resolved_trace_path(self) -> Path:
        path = Path(self.trace)
        if path.is_absolute():
            return path
        return (self.source_path.parent / path).resolve()


def _load_yaml(path: Path) -> dict[str, Any]:
    try:
        loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"Spec file is not valid YAML: {path}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Spec file must be a mapping: {path}")
    return loaded


def deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Deterministic deep-merge: dicts merge recursively, lists/scalars override."""
    merged = dict(base)
    for key in sorted(overlay):
        val = overlay[key]
        if key in merged and isinstance(merged[key], dict) and isinstance(val, dict):
            merged[key] = deep_merge(merged[key], val)
        else:
            merged[key] = val
    return merged


def _resolve_extends(data: dict[str, Any], source_path: Path, depth: int = 0) -> dict[str, Any]:
    extends_raw = data.pop("extends", None)
    if extends_raw is None:
        return data
    if depth >= _MAX_EXTENDS_DEPTH:
        raise ValueError(f"Spec extends depth exceeded {_MAX_EXTENDS_DEPTH}: circular reference?")
    if not isinstance(extends_raw, str) or not extends_raw:
        raise ValueError(f"{source_path}: `extends` must be a path string")

    extends_path = Path(extends_raw)
    if not extends_path.is_absolute():
        extends_path = (source_path.parent / extends_path).resolve()
    if not extends_path.exists():
        raise ValueError(f"extends target not found: {extends_path}")

    base_data = _load_yaml(extends_path)
    base_data = _resolve_extends(base_data, extends_path, depth + 1)
    return deep_merge(base_data, data)


def _check_param(param: StepParam, value: Any) -> str | None:
    if param.kind == _TEXT:
        if not isinstance(value, str):
            return f"`{param.name}` must be a string, got: {value!r}"
        return None
    if value is None:
        return f"`{param.name}` must be a rect or a list of rects, got: None"
    try:
        Region.from_value(value)
    except (TypeError, ValueError) as exc:
        return f"`{param.name}` is not a region: {exc}"
    return None


def _bind_step(step: AssertionStep, params: tuple[StepParam, ...]) -> str | None:
    """Match a step's arguments against a signature; return the problem, if any."""
    names = [param.name for param in params]
    if len(step.args) > len(params):
        return f"takes at most {len(params)} argument(s), got {len(step.args)}"
    bound = dict(zip(names, step.args))
    for key, value in step.kwargs.items():
        if key not in names:
            return f"unexpected argument `{key}`"
        if key in bound:
            return f"argument `{key}` given twice"
        bound[key] = value
    for param in params:
        if param.name not in bound:
            if param.required:
                return f"missing argument `{param.name}`"
            continue
        problem = _check_param(param, bound[param.name])
        if problem is not None:
            return problem
    return None


def _parse_step(raw: Any, *, kind: str | None, location: str) -> AssertionStep:
    if isinstance(raw, str):
        method, value = raw, None
    elif isinstance(raw, dict) and len(raw) == 1:
        method, value = next(iter(raw.items()))
    else:
        raise ValueError(f"{location}: step must be a method name or a single-key mapping, got: {raw!r}")

    method = str(method)
    kinds = [kind] if kind is not None else sorted(TRACE_KINDS)
    signatures = [SIGNATURES_BY_KIND[name][method] for name in kinds if method in SIGNATURES_BY_KIND[name]]
    if not signatures:
        raise ValueError(f"{location}: unknown assertion '{method}'")

    if value is None:
        step = AssertionStep(method=method)
    elif isinstance(value, dict):
        step = AssertionStep(method=method, kwargs={str(key): val for key, val in value.items()})
    elif isinstance(value, list):
        step = AssertionStep(method=method, args=list(value))
    else:
        step = AssertionStep(method=method, args=[value])

    # Without a declared kind the step only has to fit one of the candidate signatures.
    problems = [_bind_step(step, params) for params in signatures]
    if all(problem is not None for problem in problems):
        raise ValueError(f"{location}: {method} {problems[0]}")
    return step


def _parse_assertion_sets(raw: Any, *, kind: str | None) -> list[list[AssertionStep]]:
    if not isinstance(raw, list) or not raw:
        raise ValueError("assertions must be a non-empty list")

    sets: list[list[AssertionStep]] = []
    for set_index, item in enumerate(raw):
        location = f"assertions[{set_index}]"
        if isinstance(item, list):
            if not item:
                raise ValueError(f"{location}: assertion set must not be empty")
            steps = [
                _parse_step(step, kind=kind, location=f"{location}[{step_index}]")
                for step_index, step in enumerate(item)
            ]
        else:
            steps = [_parse_step(item, kind=kind, location=location)]
        sets.append(steps)
    return sets


def _optional_int(raw: Any, *, field_name: str) -> int | None:
    if raw is None:
        return None
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise ValueError(f"{field_name} must be an integer")
    return raw


def parse_spec(data: dict[str, Any], *, source_path: Path) -> CheckSpec:
    name = data.get("name") or source_path.name.split(".")[0]
    trace = data.get("trace")
    if not isinstance(trace, str) or not trace:
        raise ValueError(f"{source_path}: `trace` must be a non-empty string")

    kind = data.get("kind")
    if kind is not None and (not isinstance(kind, str) or kind not in TRACE_KINDS):
        raise ValueError(f"{source_path}: unsupported kind {kind!r}")

    at = data.get("at", CHECK_AT_ALL)
    if at not in CHECK_AT_VALUES:
        raise ValueError(f"{source_path}: `at` must be one of {', '.join(CHECK_AT_VALUES)}")

    range_raw = data.get("range") or {}
    if not isinstance(range_raw, dict):
        raise ValueError(f"{source_path}: `range` must be a mapping")
    range_start = _optional_int(range_raw.get("start"), field_name="range.start")
    range_end = _optional_int(range_raw.get("end"), field_name="range.end")
    if at == CHECK_AT_RANGE and (range_start is None or range_end is None):
        raise ValueError(f"{source_path}: `at: range` requires range.start and range.end")

    try:
        assertion_sets = _parse_assertion_sets(data.get("assertions"), kind=kind)
    except ValueError as exc:
        raise ValueError(f"{source_path}: {exc}") from exc
    if len(assertion_sets) > 1 and at not in (CHECK_AT_ALL, CHECK_AT_RANGE):
        raise ValueError(f"{source_path}: chained assertion sets cannot be checked at '{at}'")

    return CheckSpec(
        name=str(name),
        trace=trace,
        source_path=source_path,
        assertion_sets=assertion_sets,
        kind=kind,
        at=at,
        range_start=range_start,
        range_end=range_end,
        skip_until_first_assertion=bool(data.get("skip_until_first_assertion", False)),
        dump=bool(data.get("dump", False)),
    )


def load_spec(path: Path) -> CheckSpec:
    data = _load_yaml(path)
    data = _resolve_extends(data, path.resolve())
    return parse_spec(data, source_path=path.resolve())


def _resolve_targets(targets: list[str], cwd: Path) -> list[Path]:
    resolved: list[Path] = []
    for target in targets:
        candidate = Path(target)
        if not candidate.is_absolute():
            candidate = cwd / candidate
        if candidate.is_file():
            resolved.append(candidate.resolve())
            continue
        if candidate.is_dir():
            resolved.extend(path.resolve() for path in candidate.rglob(f"*{CHECK_SPEC_SUFFIX}"))
            continue
        matches = [Path(path).resolve() for path in glob.glob(str(candidate), recursive=True)]
        resolved.extend(path for path in matches if path.is_file())
    deduped = sorted(set(resolved), key=lambda value: str(value))
    if not deduped:
        joined = ", ".join(targets)
        raise ValueError(f"No spec files matched targets: {joined}")
    return deduped


def load_specs(targets: list[str], cwd: Path | None = None) -> list[CheckSpec]:
    root = cwd or Path.cwd()
    paths = _resolve_targets(targets, root)
    return [load_spec(path) for path in paths]


__all__ = [
    "LAYERS_SIGNATURES",
    "LAYERS_STEPS",
    "SIGNATURES_BY_KIND",
    "STEPS_BY_KIND",
    "WINDOW_MANAGER_SIGNATURES",
    "WINDOW_MANAGER_STEPS",
    "AssertionStep",
    "CheckSpec",
    "StepParam",
    "deep_merge",
    "load_spec",
    "load_specs",
    "parse_spec",
]
