from .aggregator import aggregate, render_failures, render_summary
from .types import Report, Result, TaskStatus

__all__ = [
    "aggregate",
    "render_summary",
    "render_failures",
    "Report",
    "Result",
    "TaskStatus",
]
