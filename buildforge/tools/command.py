from __future__ import annotations

import shlex
from typing import Any, Mapping, Sequence

from buildforge.config import ConfigError, TaskConfig
from buildforge.report import Result, TaskStatus

from .base import Tool
from .process import execute

_OPTIONS = {"command", "args", "env", "working_dir", "timeout_s"}


class CommandTool(Tool):
    """A tool backed by an external process; non-zero exit means failure."""

    def __init__(
        self,
        name: str,
        command: str | Sequence[str],
        *,
        env: Mapping[str, str] | None = None,
        working_dir: str | None = None,
        timeout_s: float | None = None,
    ) -> None:
        super().__init__(name)
        self.command: str | list[str] = (
            command if isinstance(command, str) else list(command)
        )
        self.env: dict[str, str] = dict(env or {})
        self.working_dir = working_dir
        self.timeout_s = timeout_s

    @classmethod
    def from_config(cls, task: TaskConfig) -> CommandTool:
        if task.command is None:
            raise ConfigError(f"{task.id}: no command to run")

        return cls(
            task.id,
            task.command,
            env=task.env,
            working_dir=task.working_dir,
            timeout_s=task.timeout_s,
        )

    def configure(self, options: Mapping[str, Any]) -> None:
        unknown = sorted(set(options) - _OPTIONS)
        if unknown:
            raise ConfigError(f"{self.name}: unknown tool options: {', '.join(unknown)}")

        # validate everything before touching the tool
        command = options.get("command", self.command)
        if isinstance(command, str):
            if not command.strip():
                raise ConfigError(f"{self.name}: command is empty")
        elif not _is_str_sequence(command) or not command:
            raise ConfigError(f"{self.name}: command should be a string or a list of strings")

        args = options.get("args", [])
        if not _is_str_sequence(args):
            raise ConfigError(f"{self.name}: args should be a list of strings")

        env = options.get("env", {})
        if not isinstance(env, Mapping) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in env.items()
        ):
            raise ConfigError(f"{self.name}: env should map strings to strings")

        working_dir = options.get("working_dir", self.working_dir)
        if working_dir is not None and not isinstance(working_dir, str):
            raise ConfigError(f"{self.name}: working_dir should be a string")

        timeout_s = options.get("timeout_s", self.timeout_s)
        if timeout_s is not None:
            # bool is an int subclass
            if isinstance(timeout_s, bool) or not isinstance(timeout_s, (int, float)):
                raise ConfigError(f"{self.name}: timeout_s should be a number")
            if timeout_s <= 0:
                raise ConfigError(f"{self.name}: timeout_s must be positive")

        self.command = command if isinstance(command, str) else list(command)
        if args:
            if isinstance(self.command, str):
                self.command = " ".join([self.command, shlex.join(args)])
            else:
                self.command = [*self.command, *args]
        self.env.update(env)
        self.working_dir = working_dir
        self.timeout_s = None if timeout_s is None else float(timeout_s)

    def run(self) -> Result:
        proc = execute(self.command, self.working_dir, self.env, self.timeout_s)

        if proc.exit_code == 0:
            status, message = TaskStatus.SUCCESS, None
        else:
            status, message = TaskStatus.FAILURE, f"exit code {proc.exit_code}"

        return Result(
            self.name,
            status,
            message,
            exit_code=proc.exit_code,
            stdout=proc.stdout,
            stderr=proc.stderr,
        )


def _is_str_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value)
