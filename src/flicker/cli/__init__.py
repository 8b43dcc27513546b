"""Command line entry point; `app` is imported lazily so `flicker.core` stays typer-free."""
from __future__ import annotations


def __getattr__(name: str) -> object:
    if name == "app":
        from flicker.cli.commands import app
        return app
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["app"]
