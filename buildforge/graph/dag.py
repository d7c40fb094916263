from __future__ import annotations

from enum import Enum, auto
from typing import Iterable, Iterator

from buildforge.config.types import ProjectConfig
from buildforge.tools import CommandTool

from .types import (
    CycleError,
    DuplicateTaskError,
    GraphError,
    Task,
    UnknownDependencyError,
    UnknownTaskError,
)


class _Visit(Enum):
    UNVISITED = auto()
    VISITING = auto()
    VISITED = auto()


class TaskGraph:
    """Registry of tasks and their dependency edges.

    Tasks are registered once; the first successful ``validate`` seals the
    graph. Every ordering breaks ties by registration order so that build
    logs are reproducible.
    """

    def __init__(self, tasks: Iterable[Task] = ()) -> None:
        self._tasks: dict[str, Task] = {}
        self._index: dict[str, int] = {}
        self._sealed = False
        for task in tasks:
            self.register(task)

    @classmethod
    def from_project(cls, project: ProjectConfig) -> TaskGraph:
        graph = cls()
        for cfg in project:
            action = CommandTool.from_config(cfg).run if cfg.command else None
            graph.register(
                Task(
                    cfg.id,
                    action,
                    tuple(cfg.deps),
                    cfg.fail_policy,
                    cfg.description,
                )
            )
        graph.validate()
        return graph

    def __contains__(self, name: object) -> bool:
        return name in self._tasks

    def __iter__(self) -> Iterator[Task]:
        return iter(self._tasks.values())

    def __len__(self) -> int:
        return len(self._tasks)

    def register(self, task: Task) -> None:
        if self._sealed:
            raise GraphError(f"Cannot register '{task.name}': graph already validated")
        if task.name in self._tasks:
            raise DuplicateTaskError(task.name)

        self._index[task.name] = len(self._tasks)
        self._tasks[task.name] = task

    def get(self, name: str) -> Task:
        if name not in self._tasks:
            raise UnknownTaskError(name)
        return self._tasks[name]

    def task_names(self) -> list[str]:
        return list(self._tasks)

    def dependencies_of(self, name: str) -> tuple[str, ...]:
        return self._sorted_deps(self.get(name))

    def validate(self) -> None:
        for task in self._tasks.values():
            for dep in task.dependencies:
                if dep not in self._tasks:
                    raise UnknownDependencyError(task.name, dep)

        self._toposort(self._tasks.keys())
        self._sealed = True

    def topological_order(self) -> list[str]:
        if not self._sealed:
            self.validate()
        return self._toposort(self._tasks.keys())

    def subgraph_order(self, target: str) -> list[str]:
        if target not in self._tasks:
            raise UnknownTaskError(target)
        if not self._sealed:
            self.validate()

        needed: set[str] = set()
        worklist: list[str] = [target]

        while worklist:
            name = worklist.pop()
            if name in needed:
                continue
            needed.add(name)
            worklist.extend(self._tasks[name].dependencies)

        return self._toposort(needed)

    def _sorted_deps(self, task: Task) -> tuple[str, ...]:
        return tuple(sorted(task.dependencies, key=self._index.__getitem__))

    def _toposort(self, universe: Iterable[str]) -> list[str]:
        names = sorted(universe, key=self._index.__getitem__)
        state = {name: _Visit.UNVISITED for name in names}
        out: list[str] = []
        stack: list[str] = []
        pos: dict[str, int] = {}

        def enter(name: str) -> Iterator[str]:
            state[name] = _Visit.VISITING
            pos[name] = len(stack)
            stack.append(name)
            return iter(self._sorted_deps(self._tasks[name]))

        # explicit frame stack, chains can be deeper than the recursion limit
        for root in names:
            if state[root] != _Visit.UNVISITED:
                continue

            frames = [enter(root)]
            while frames:
                dep = next(frames[-1], None)
                if dep is None:
                    frames.pop()
                    name = stack.pop()
                    pos.pop(name)
                    state[name] = _Visit.VISITED
                    out.append(name)
                    continue

                if dep not in state or state[dep] == _Visit.VISITED:
                    continue
                if state[dep] == _Visit.VISITING:
                    raise CycleError(stack[pos[dep] :] + [dep])

                frames.append(enter(dep))

        return out
