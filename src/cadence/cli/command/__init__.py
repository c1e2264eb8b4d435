from __future__ import annotations

# Command implementations for the cadence CLI.
# Each command module exposes a `run(...)` function that performs the action
# and prints to the console. Typer wrappers in cadence.cli.app delegate here.

__all__ = [
    "init",
    "month",
    "convert",
    "override",
    "skip",
    "clear",
    "stop",
    "delete",
    "promote",
    "demote",
    "templates",
    "add_template",
    "add_transaction",
    "reconcile",
    "budget",
]
