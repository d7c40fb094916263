"""Built-in task registry.

The layout follows the usual check pipeline of a project: a formatter that
can apply or verify, style checks over sources and tests, a rule-based
analyser, a bug finder and the test runner. ``format``, ``lint`` and
``build`` are lifecycle tasks that only group their dependencies.
"""

from __future__ import annotations

from .types import ProjectConfig, TaskConfig


def default_tasks(src: str = "src", tests: str = "tests") -> list[TaskConfig]:
    return [
        TaskConfig(
            "format-apply",
            f"ruff format {src} {tests}",
            [],
            description="Apply the code formatter",
        ),
        TaskConfig(
            "format-check",
            f"ruff format --check {src} {tests}",
            [],
            description="Verify formatting without touching files",
        ),
        TaskConfig(
            "style-main",
            f"ruff check {src}",
            [],
            description="Style checks on main sources",
        ),
        TaskConfig(
            "style-test",
            f"ruff check {tests}",
            [],
            description="Style checks on test sources",
        ),
        TaskConfig(
            "rules-main",
            f"pylint {src}",
            [],
            description="Rule-based static analysis",
        ),
        TaskConfig(
            "bugs-main",
            f"mypy {src}",
            [],
            description="Bug finder / type analysis",
        ),
        TaskConfig(
            "test",
            "pytest",
            [],
            description="Run the test suite",
        ),
        TaskConfig(
            "format",
            None,
            ["format-apply"],
            description="Format all source code",
        ),
        TaskConfig(
            "lint",
            None,
            ["style-main", "style-test", "rules-main", "bugs-main"],
            description="Run all linting checks",
        ),
        TaskConfig(
            "build",
            None,
            ["format-check", "lint", "test"],
            description="Check formatting, lint and test",
        ),
    ]


def default_project(src: str = "src", tests: str = "tests") -> ProjectConfig:
    return ProjectConfig(tasks={t.id: t for t in default_tasks(src, tests)})
