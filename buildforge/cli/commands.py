from __future__ import annotations

import argparse
import sys

from buildforge.config import (
    ConfigError,
    FailPolicy,
    ProjectConfig,
    default_project,
    load_project,
)
from buildforge.executor import Scheduler
from buildforge.graph import GraphError, TaskGraph
from buildforge.logging import get_logger, set_level
from buildforge.report import Report, aggregate, render_failures, render_summary

from .args import RUN_COMMANDS, build_parser

log = get_logger("buildforge.cli")


def run_cli(argv: list[str] | None = None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
        if args.log_level:
            set_level(args.log_level)

        match args.command:
            case "format" | "lint" | "build":
                return cmd_run(args)
            case "list":
                return cmd_list(args)
            case "graph":
                return cmd_graph(args)
            case _:
                return 2

    except (ConfigError, GraphError) as exc:
        log.debug("Aborting before any task ran", exc_info=exc)
        print(str(exc), file=sys.stderr)
        return 2

    except KeyboardInterrupt:
        return 130


def main() -> None:
    sys.exit(run_cli())


def cmd_run(args: argparse.Namespace) -> int:
    report = _run_with(args)
    print(render_summary(report))

    failures = render_failures(report)
    if failures:
        print(failures, file=sys.stderr)

    if report.interrupted:
        return 130
    return report.exit_code


def cmd_list(args: argparse.Namespace) -> int:
    graph = _load_graph(args)
    for task in graph:
        print(f"{task.name} - {task.description}" if task.description else task.name)
    return 0


def cmd_graph(args: argparse.Namespace) -> int:
    graph = _load_graph(args)
    for name in graph.task_names():
        deps = " ".join(graph.dependencies_of(name))
        print(f"{name}: {deps}".rstrip())
    return 0


def _load_project(args: argparse.Namespace) -> ProjectConfig:
    if args.config is None:
        return default_project()
    return load_project(args.config)


def _load_graph(args: argparse.Namespace) -> TaskGraph:
    return TaskGraph.from_project(_load_project(args))


def _run_with(args: argparse.Namespace) -> Report:
    graph = _load_graph(args)
    root, default_policy = RUN_COMMANDS[args.command]

    if args.fail_policy is None:
        fail_policy = default_policy
    else:
        fail_policy = FailPolicy.parse(args.fail_policy)

    target = root
    if args.task is not None:
        if args.task not in graph.subgraph_order(root):
            raise GraphError(f"Task '{args.task}' is not part of '{root}'")
        target = args.task

    outcome = Scheduler(graph).run_target(target, fail_policy)
    return aggregate(outcome.results, interrupted=outcome.interrupted)
