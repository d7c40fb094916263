from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping

from buildforge.report import Result


class Tool(ABC):
    """Something a task can run: a formatter, an analyser, a test runner.

    The scheduler only ever calls ``run``; tools are free to shell out or
    do the work in-process.
    """

    def __init__(self, name: str) -> None:
        self.name = name

    @abstractmethod
    def configure(self, options: Mapping[str, Any]) -> None: ...

    @abstractmethod
    def run(self) -> Result: ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"
