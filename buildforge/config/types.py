from dataclasses import dataclass, field
from enum import Enum


class FailPolicy(Enum):
    FAIL_FAST = "fail-fast"
    CONTINUE = "continue"

    @classmethod
    def parse(cls, value: str) -> "FailPolicy":
        try:
            return cls(value.strip().lower())
        except ValueError:
            choices = ", ".join(p.value for p in cls)
            raise ConfigError(
                f"Unknown fail policy: {value!r}, expected one of: {choices}"
            ) from None


@dataclass
class TaskConfig:
    id: str
    command: str | None
    deps: list[str]
    env: dict[str, str] = field(default_factory=dict)
    working_dir: str | None = None
    timeout_s: float | None = None
    description: str = ""
    fail_policy: FailPolicy | None = None


@dataclass
class ProjectConfig:
    """Tasks keyed by id, iterated in declaration order."""

    tasks: dict[str, TaskConfig]

    def __iter__(self):
        for task_id in self.tasks:
            yield self.tasks[task_id]

    def __len__(self):
        return len(self.tasks)

    def has_task(self, id: str) -> bool:
        return id in self.tasks

    def get_task(self, id: str) -> TaskConfig:
        if not self.has_task(id):
            raise KeyError(id)

        return self.tasks[id]

    def tasks_ids(self) -> list[str]:
        return list(self.tasks.keys())


class ConfigError(Exception):
    def __init__(self, *args: object) -> None:
        super().__init__(*args)


class UnsupportedConfigFormatError(ConfigError):
    def __init__(self, *args: object) -> None:
        super().__init__(*args)
