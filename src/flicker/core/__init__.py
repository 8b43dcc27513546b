"""Geometry, trace models, the assertion checker and the fluent subjects.

This package holds all evaluation logic: region arithmetic, trace parsing,
per-entry predicates, the assertion-set state machine and the fluent subjects
built on it.  It has **no** dependency on typer or any CLI framework.
"""
from __future__ import annotations
