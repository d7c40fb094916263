# tests/test_scheduler.py
from __future__ import annotations

import sys
import threading
from pathlib import Path

from buildforge.config.types import FailPolicy, ProjectConfig, TaskConfig
from buildforge.executor.scheduler import Scheduler
from buildforge.graph.dag import TaskGraph
from buildforge.graph.types import Task
from buildforge.report import Result, TaskStatus


def _py(cmd: str) -> str:
    """
    Build a shell command that runs `python -c "<cmd>"` using the current interpreter.
    """
    exe = str(Path(sys.executable))
    return f'"{exe}" -c "{cmd}"'


def _project(tasks: dict[str, dict]) -> ProjectConfig:
    built: dict[str, TaskConfig] = {}
    for tid, fields in tasks.items():
        built[tid] = TaskConfig(
            id=tid,
            command=fields.get("command"),
            deps=list(fields.get("deps", [])),
            env=dict(fields.get("env", {})),
            working_dir=fields.get("working_dir"),
            timeout_s=fields.get("timeout_s"),
            fail_policy=fields.get("fail_policy"),
        )
    return ProjectConfig(tasks=built)


class _Recorder:
    """In-process actions that log their name and succeed or fail on demand."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    def ok(self, name: str):
        def action() -> Result:
            self.calls.append(name)
            return Result(name, TaskStatus.SUCCESS)

        return action

    def fail(self, name: str):
        def action() -> Result:
            self.calls.append(name)
            return Result(name, TaskStatus.FAILURE, "boom")

        return action


def _abc_graph(rec: _Recorder) -> TaskGraph:
    return TaskGraph(
        [
            Task("A", rec.fail("A")),
            Task("B", rec.ok("B"), ("A",)),
            Task("C", rec.ok("C"), ("A",)),
        ]
    )


def _statuses(outcome) -> dict[str, TaskStatus]:
    return {r.task_name: r.status for r in outcome.results}


def test_fail_fast_skips_everything_after_failure():
    rec = _Recorder()
    graph = _abc_graph(rec)

    outcome = Scheduler(graph).run_all(FailPolicy.FAIL_FAST)

    assert rec.calls == ["A"]
    assert [r.task_name for r in outcome.results] == ["A", "B", "C"]
    assert _statuses(outcome) == {
        "A": TaskStatus.FAILURE,
        "B": TaskStatus.SKIPPED,
        "C": TaskStatus.SKIPPED,
    }
    assert outcome.interrupted is False


def test_continue_still_skips_dependents_of_failed_task():
    rec = _Recorder()
    graph = _abc_graph(rec)

    outcome = Scheduler(graph).run_all(FailPolicy.CONTINUE)

    assert rec.calls == ["A"]
    assert _statuses(outcome) == {
        "A": TaskStatus.FAILURE,
        "B": TaskStatus.SKIPPED,
        "C": TaskStatus.SKIPPED,
    }
    assert outcome.results[1].message == "dependency 'A' did not succeed"


def test_continue_runs_independent_tasks():
    rec = _Recorder()
    graph = TaskGraph(
        [
            Task("a_fail", rec.fail("a_fail")),
            Task("b_dep", rec.ok("b_dep"), ("a_fail",)),
            Task("c_dep", rec.ok("c_dep"), ("b_dep",)),
            Task("d_ind", rec.ok("d_ind")),
        ]
    )

    outcome = Scheduler(graph).run_all(FailPolicy.CONTINUE)

    assert rec.calls == ["a_fail", "d_ind"]
    assert _statuses(outcome) == {
        "a_fail": TaskStatus.FAILURE,
        "b_dep": TaskStatus.SKIPPED,
        "c_dep": TaskStatus.SKIPPED,
        "d_ind": TaskStatus.SUCCESS,
    }


def test_all_succeed_in_dependency_order():
    rec = _Recorder()
    graph = TaskGraph(
        [
            Task("A", rec.ok("A")),
            Task("B", rec.ok("B")),
            Task("C", rec.ok("C"), ("A", "B")),
        ]
    )

    outcome = Scheduler(graph).run_all()

    assert rec.calls == ["A", "B", "C"]
    assert all(r.status is TaskStatus.SUCCESS for r in outcome.results)


def test_task_policy_overrides_run_policy():
    rec = _Recorder()
    graph = TaskGraph(
        [
            Task("soft", rec.fail("soft"), fail_policy=FailPolicy.CONTINUE),
            Task("other", rec.ok("other")),
        ]
    )

    outcome = Scheduler(graph).run_all(FailPolicy.FAIL_FAST)

    assert rec.calls == ["soft", "other"]
    assert _statuses(outcome)["other"] is TaskStatus.SUCCESS


def test_lifecycle_task_succeeds_without_action():
    rec = _Recorder()
    graph = TaskGraph([Task("check", rec.ok("check")), Task("all", None, ("check",))])

    outcome = Scheduler(graph).run_all()

    assert _statuses(outcome) == {
        "check": TaskStatus.SUCCESS,
        "all": TaskStatus.SUCCESS,
    }


def test_action_exception_is_recorded_as_failure():
    def explode() -> Result:
        raise RuntimeError("tool crashed")

    graph = TaskGraph([Task("x", explode), Task("y", None, ("x",))])

    outcome = Scheduler(graph).run_all(FailPolicy.CONTINUE)

    first = outcome.results[0]
    assert first.status is TaskStatus.FAILURE
    assert first.message == "RuntimeError: tool crashed"
    assert outcome.results[1].status is TaskStatus.SKIPPED


def test_action_returning_wrong_type_fails():
    graph = TaskGraph([Task("x", lambda: 0)])

    outcome = Scheduler(graph).run_all()

    assert outcome.results[0].status is TaskStatus.FAILURE


def test_result_is_stamped_with_task_name_and_duration():
    graph = TaskGraph([Task("real", lambda: Result("whatever", TaskStatus.SUCCESS))])

    outcome = Scheduler(graph).run_all()

    assert outcome.results[0].task_name == "real"
    assert outcome.results[0].duration_s >= 0.0


def test_cancel_before_start_skips_everything():
    rec = _Recorder()
    graph = _abc_graph(rec)
    cancel = threading.Event()
    cancel.set()

    outcome = Scheduler(graph).run_all(cancel=cancel)

    assert rec.calls == []
    assert outcome.interrupted is True
    assert all(r.status is TaskStatus.SKIPPED for r in outcome.results)


def test_cancel_between_tasks_stops_before_next():
    cancel = threading.Event()
    calls: list[str] = []

    def first() -> Result:
        calls.append("first")
        cancel.set()
        return Result("first", TaskStatus.SUCCESS)

    def second() -> Result:
        calls.append("second")
        return Result("second", TaskStatus.SUCCESS)

    graph = TaskGraph([Task("first", first), Task("second", second)])

    outcome = Scheduler(graph).run_all(FailPolicy.CONTINUE, cancel=cancel)

    assert calls == ["first"]
    assert outcome.interrupted is True
    assert _statuses(outcome) == {
        "first": TaskStatus.SUCCESS,
        "second": TaskStatus.SKIPPED,
    }


def test_keyboard_interrupt_during_task_produces_interrupted_outcome():
    def abort() -> Result:
        raise KeyboardInterrupt

    rec = _Recorder()
    graph = TaskGraph([Task("a", abort), Task("b", rec.ok("b"))])

    outcome = Scheduler(graph).run_all(FailPolicy.CONTINUE)

    assert rec.calls == []
    assert outcome.interrupted is True
    assert outcome.results[0].status is TaskStatus.FAILURE
    assert outcome.results[0].message == "interrupted"
    assert outcome.results[1].status is TaskStatus.SKIPPED


def test_keyboard_interrupt_between_tasks_does_not_escape(monkeypatch):
    class _InterruptAfterSuccess:
        def __getattr__(self, _name):
            return lambda *args, **kwargs: None

        def info(self, msg, *args):
            if "succeeded" in msg:
                raise KeyboardInterrupt

    monkeypatch.setattr(
        "buildforge.executor.scheduler.log", _InterruptAfterSuccess()
    )
    rec = _Recorder()
    graph = TaskGraph(
        [Task("a", rec.ok("a")), Task("b", rec.ok("b")), Task("c", rec.ok("c"))]
    )

    outcome = Scheduler(graph).run_all(FailPolicy.CONTINUE)

    assert rec.calls == ["a"]
    assert outcome.interrupted is True
    assert [r.task_name for r in outcome.results] == ["a", "b", "c"]
    assert _statuses(outcome) == {
        "a": TaskStatus.SUCCESS,
        "b": TaskStatus.SKIPPED,
        "c": TaskStatus.SKIPPED,
    }
    assert outcome.results[1].message == "interrupted"


def test_runs_commands_in_dependency_order(tmp_path: Path) -> None:
    log = tmp_path / "log.txt"

    project = _project(
        {
            "a": {"command": _py(f"open(r'{log}','a').write('a\\n')")},
            "b": {"command": _py(f"open(r'{log}','a').write('b\\n')"), "deps": ["a"]},
            "c": {"command": _py(f"open(r'{log}','a').write('c\\n')"), "deps": ["b"]},
        }
    )
    graph = TaskGraph.from_project(project)

    outcome = Scheduler(graph).run_all()

    assert [r.task_name for r in outcome.results] == ["a", "b", "c"]
    assert all(r.exit_code == 0 for r in outcome.results)
    assert log.read_text(encoding="utf-8").splitlines() == ["a", "b", "c"]


def test_non_zero_exit_is_failure_with_output(tmp_path: Path) -> None:
    project = _project(
        {
            "fail": {
                "command": _py(
                    "import sys; print('out'); print('err', file=sys.stderr); raise SystemExit(7)"
                )
            },
        }
    )
    graph = TaskGraph.from_project(project)

    outcome = Scheduler(graph).run_all()

    result = outcome.results[0]
    assert result.status is TaskStatus.FAILURE
    assert result.exit_code == 7
    assert result.message == "exit code 7"
    assert result.stdout.strip() == "out"
    assert result.stderr.strip() == "err"


def test_timeout_becomes_failure_and_policy_applies(tmp_path: Path) -> None:
    project = _project(
        {
            "slow": {
                "command": _py("import time; time.sleep(10)"),
                "timeout_s": 0.5,
            },
            "after": {"command": _py("raise SystemExit(0)")},
        }
    )
    graph = TaskGraph.from_project(project)

    outcome = Scheduler(graph).run_all(FailPolicy.CONTINUE)

    slow = outcome.results[0]
    assert slow.status is TaskStatus.FAILURE
    assert slow.message.startswith("TaskTimeoutError")
    assert outcome.results[1].status is TaskStatus.SUCCESS


def test_run_target_executes_only_needed_subgraph(tmp_path: Path) -> None:
    log = tmp_path / "log.txt"

    project = _project(
        {
            "a": {"command": _py(f"open(r'{log}','a').write('a\\n')")},
            "b": {"deps": ["a"], "command": _py(f"open(r'{log}','a').write('b\\n')")},
            "c": {"deps": ["b"], "command": _py(f"open(r'{log}','a').write('c\\n')")},
            "d_extra": {"command": _py(f"open(r'{log}','a').write('d_extra\\n')")},
        }
    )
    graph = TaskGraph.from_project(project)

    outcome = Scheduler(graph).run_target("c")

    assert [r.task_name for r in outcome.results] == ["a", "b", "c"]
    assert log.read_text(encoding="utf-8").splitlines() == ["a", "b", "c"]
