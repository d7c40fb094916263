from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TaskStatus(Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class Result:
    task_name: str
    status: TaskStatus
    message: str | None = None
    duration_s: float = 0.0
    exit_code: int | None = None
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.status is TaskStatus.SUCCESS


@dataclass(frozen=True)
class Report:
    results: tuple[Result, ...]
    interrupted: bool = False

    @property
    def order(self) -> list[str]:
        return [r.task_name for r in self.results]

    @property
    def exit_code(self) -> int:
        return 0 if all(r.ok for r in self.results) else 1

    @property
    def succeeded(self) -> list[str]:
        return self._names(TaskStatus.SUCCESS)

    @property
    def failed(self) -> list[str]:
        return self._names(TaskStatus.FAILURE)

    @property
    def skipped(self) -> list[str]:
        return self._names(TaskStatus.SKIPPED)

    def get(self, task_name: str) -> Result:
        for result in self.results:
            if result.task_name == task_name:
                return result
        raise KeyError(task_name)

    def _names(self, status: TaskStatus) -> list[str]:
        return [r.task_name for r in self.results if r.status is status]
