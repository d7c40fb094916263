from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable

from buildforge.config import FailPolicy
from buildforge.report import Result


class GraphError(Exception):
    def __init__(self, *args: object) -> None:
        super().__init__(*args)


class DuplicateTaskError(GraphError):
    def __init__(self, name: str):
        super().__init__(f"Task already registered: {name}")
        self.name = name


class UnknownDependencyError(GraphError):
    def __init__(self, task: str, missing: str):
        super().__init__(f"Task '{task}' has unknown dependency '{missing}'")
        self.task = task
        self.missing = missing


class UnknownTaskError(GraphError):
    def __init__(self, name: str):
        super().__init__(f"Unknown task: {name}")
        self.name = name


class CycleError(GraphError):
    def __init__(self, path: list[str]):
        super().__init__("Cycle detected: " + " -> ".join(path))
        self.path = path


@dataclass(frozen=True)
class Task:
    """A node of the build graph.

    ``action`` is None for lifecycle tasks that only group their
    dependencies. ``fail_policy`` overrides the run policy when this task
    fails.
    """

    name: str
    action: Callable[[], Result] | None = None
    dependencies: tuple[str, ...] = ()
    fail_policy: FailPolicy | None = None
    description: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "dependencies", _dedupe(self.dependencies))


def _dedupe(names: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(names))
