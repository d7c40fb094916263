from dataclasses import dataclass


@dataclass(frozen=True)
class ProcessResult:
    exit_code: int
    stdout: str
    stderr: str


class TaskExecutionFailure(Exception):
    def __init__(self, *args: object) -> None:
        super().__init__(*args)


class TaskTimeoutError(TaskExecutionFailure):
    def __init__(self, command: str, timeout_s: float) -> None:
        super().__init__(f"'{command}' timed out after {timeout_s:g}s")
        self.command = command
        self.timeout_s = timeout_s
