from __future__ import annotations

import threading
import time
from dataclasses import replace

from buildforge.config import FailPolicy
from buildforge.graph import Task, TaskGraph, UnknownTaskError
from buildforge.logging import get_logger
from buildforge.report import Result, TaskStatus

from .types import RunOutcome

log = get_logger("buildforge.executor")


class Scheduler:
    """Runs tasks one at a time in the order it is given.

    A task whose dependency failed or was skipped never runs. After a
    failure, ``fail-fast`` skips everything not yet started while
    ``continue`` keeps going with independent tasks. A task's own
    fail_policy takes precedence over the run policy.
    """

    def __init__(self, graph: TaskGraph):
        self.graph = graph

    def run(
        self,
        order: list[str],
        fail_policy: FailPolicy = FailPolicy.FAIL_FAST,
        *,
        cancel: threading.Event | None = None,
    ) -> RunOutcome:
        results: list[Result] = []
        blocked: set[str] = set()
        interrupted = False
        stop_reason: str | None = None

        for name in order:
            task = self._task(name)

            if cancel is not None and cancel.is_set():
                log.warning("Run cancelled before '%s'", name)
                interrupted = True
                stop_reason = "interrupted"
                break

            start: float | None = None
            try:
                bad_dep = next((d for d in task.dependencies if d in blocked), None)
                if bad_dep is not None:
                    blocked.add(name)
                    results.append(
                        Result(
                            name,
                            TaskStatus.SKIPPED,
                            f"dependency '{bad_dep}' did not succeed",
                        )
                    )
                    log.debug("Skipped '%s': dependency '%s' did not succeed", name, bad_dep)
                    continue

                log.info("Running '%s'", name)
                start = time.monotonic()
                result = self._execute(task)
                result = replace(
                    result, task_name=name, duration_s=time.monotonic() - start
                )
                if not result.ok:
                    blocked.add(name)
                results.append(result)

                if result.ok:
                    log.info("'%s' succeeded in %.3fs", name, result.duration_s)
                    continue

                log.warning("'%s' failed: %s", name, result.message)
                if (task.fail_policy or fail_policy) is FailPolicy.FAIL_FAST:
                    stop_reason = f"stopped after '{name}' failed"
                    break

            except KeyboardInterrupt:
                log.warning("Interrupted at '%s'", name)
                recorded = bool(results) and results[-1].task_name == name
                if start is not None and not recorded:
                    blocked.add(name)
                    results.append(
                        Result(
                            name,
                            TaskStatus.FAILURE,
                            "interrupted",
                            duration_s=time.monotonic() - start,
                        )
                    )
                interrupted = True
                stop_reason = "interrupted"
                break

        if stop_reason is not None:
            done = {r.task_name for r in results}
            for name in order:
                if name not in done:
                    results.append(Result(name, TaskStatus.SKIPPED, stop_reason))

        return RunOutcome(tuple(results), interrupted)

    def run_all(
        self,
        fail_policy: FailPolicy = FailPolicy.FAIL_FAST,
        *,
        cancel: threading.Event | None = None,
    ) -> RunOutcome:
        order = self.graph.topological_order()
        return self.run(order, fail_policy, cancel=cancel)

    def run_target(
        self,
        target: str,
        fail_policy: FailPolicy = FailPolicy.FAIL_FAST,
        *,
        cancel: threading.Event | None = None,
    ) -> RunOutcome:
        order = self.graph.subgraph_order(target)
        return self.run(order, fail_policy, cancel=cancel)

    def _task(self, name: str) -> Task:
        try:
            return self.graph.get(name)
        except UnknownTaskError as exc:
            raise AssertionError(f"'{name}' is not in the validated graph") from exc

    def _execute(self, task: Task) -> Result:
        if task.action is None:
            return Result(task.name, TaskStatus.SUCCESS)

        try:
            result = task.action()
        except Exception as exc:
            return Result(
                task.name, TaskStatus.FAILURE, f"{type(exc).__name__}: {exc}"
            )

        if not isinstance(result, Result):
            return Result(
                task.name,
                TaskStatus.FAILURE,
                f"action returned {type(result).__name__}, expected Result",
            )
        return result
