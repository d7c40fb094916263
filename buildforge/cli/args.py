from __future__ import annotations

import argparse

from buildforge.config import FailPolicy

# command -> (root task, default fail policy)
RUN_COMMANDS: dict[str, tuple[str, FailPolicy]] = {
    "format": ("format", FailPolicy.CONTINUE),
    "lint": ("lint", FailPolicy.CONTINUE),
    "build": ("build", FailPolicy.FAIL_FAST),
}

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

_HELP = {
    "format": "Apply the code formatter",
    "lint": "Run all linting checks",
    "build": "Check formatting, lint and test",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="buildforge")

    parser.add_argument(
        "--config",
        default=None,
        help="Path to a task config file (default: built-in registry)",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="Log level (default: $BUILDFORGE_LOG_LEVEL or WARNING)",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        required=True,
    )

    for command in RUN_COMMANDS:
        sub = subparsers.add_parser(command, help=_HELP[command])
        sub.add_argument(
            "--fail-policy",
            choices=[p.value for p in FailPolicy],
            default=None,
            help="Stop at the first failure or keep running independent tasks",
        )
        sub.add_argument(
            "--task",
            default=None,
            help="Run only this task and its dependencies",
        )

    # list
    subparsers.add_parser("list", help="List tasks")

    # graph
    subparsers.add_parser("graph", help="Show dependency graph")

    return parser
