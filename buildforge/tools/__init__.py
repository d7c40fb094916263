from .base import Tool
from .command import CommandTool
from .process import execute
from .types import ProcessResult, TaskExecutionFailure, TaskTimeoutError

__all__ = [
    "Tool",
    "CommandTool",
    "execute",
    "ProcessResult",
    "TaskExecutionFailure",
    "TaskTimeoutError",
]
