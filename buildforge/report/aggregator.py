from __future__ import annotations

from typing import Iterable

from .types import Report, Result, TaskStatus

_PREFIX = {
    TaskStatus.SUCCESS: "OK",
    TaskStatus.FAILURE: "FAIL",
    TaskStatus.SKIPPED: "SKIP",
}


def aggregate(results: Iterable[Result], *, interrupted: bool = False) -> Report:
    return Report(tuple(results), interrupted=interrupted)


def render_summary(report: Report) -> str:
    """One line per task in execution order, then the overall verdict."""
    lines = [_render_line(r) for r in report.results]

    counts = (
        f"{len(report.succeeded)} succeeded, "
        f"{len(report.failed)} failed, "
        f"{len(report.skipped)} skipped"
    )
    if report.interrupted:
        lines.append(f"BUILD INTERRUPTED ({counts})")
    elif report.exit_code == 0:
        lines.append(f"BUILD SUCCESSFUL ({counts})")
    else:
        lines.append(f"BUILD FAILED ({counts})")

    return "\n".join(lines)


def render_failures(report: Report) -> str:
    """Captured output of every failed task, empty if nothing failed."""
    blocks: list[str] = []
    for result in report.results:
        if result.status is not TaskStatus.FAILURE:
            continue

        block = [f"--- {result.task_name}: {result.message or 'failed'}"]
        if result.stdout.strip():
            block.append(result.stdout.rstrip())
        if result.stderr.strip():
            block.append(result.stderr.rstrip())
        blocks.append("\n".join(block))

    return "\n".join(blocks)


def _render_line(result: Result) -> str:
    prefix = _PREFIX[result.status]
    if result.status is TaskStatus.SKIPPED:
        line = f"{prefix} {result.task_name}"
        return f"{line} ({result.message})" if result.message else line

    line = f"{prefix} {result.task_name}, {result.duration_s:.3f}s"
    if result.exit_code is not None:
        line += f", exit code = {result.exit_code}"
    if result.status is TaskStatus.FAILURE and result.exit_code is None:
        line += f" ({result.message or 'failed'})"
    return line
