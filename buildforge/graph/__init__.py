from .dag import TaskGraph
from .types import (
    CycleError,
    DuplicateTaskError,
    GraphError,
    Task,
    UnknownDependencyError,
    UnknownTaskError,
)

__all__ = [
    "TaskGraph",
    "Task",
    "GraphError",
    "CycleError",
    "DuplicateTaskError",
    "UnknownDependencyError",
    "UnknownTaskError",
]
