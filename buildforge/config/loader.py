import json
import tomllib
from pathlib import Path
from typing import Any, Mapping

import yaml

from .types import (
    ConfigError,
    FailPolicy,
    ProjectConfig,
    TaskConfig,
    UnsupportedConfigFormatError,
)

_TASK_KEYS = {
    "command",
    "deps",
    "env",
    "working_dir",
    "timeout_s",
    "description",
    "fail_policy",
}


def load_project(path: str | Path) -> ProjectConfig:
    pure_path = Path(path).expanduser().resolve()

    if not pure_path.exists():
        raise ConfigError(f"Config file not found: {pure_path}")

    if not pure_path.is_file():
        raise ConfigError(f"Config path is not a file: {pure_path}")

    fmt = _detect_format(pure_path)
    raw_file = _parse_file(pure_path, fmt)
    return build_project_config(raw_file)


def _detect_format(path: Path) -> str:
    fmt = path.suffix
    match fmt:
        case ".yaml" | ".yml":
            return "yaml"
        case ".toml":
            return "toml"
        case ".json":
            return "json"
        case _:
            raise UnsupportedConfigFormatError(
                f"Non supported file extension: {fmt}\n Expected format: .yml/.yaml, .toml, .json"
            )


def _parse_file(path: Path, fmt: str) -> Mapping[str, Any]:
    text = path.read_text(encoding="utf-8")
    match fmt:
        case "yaml":
            try:
                raw_file = yaml.safe_load(text)
            except yaml.YAMLError as exc:
                raise ConfigError(f"{path}: invalid YAML") from exc
        case "toml":
            try:
                raw_file = tomllib.loads(text)
            except tomllib.TOMLDecodeError as exc:
                raise ConfigError(f"{path}: invalid TOML") from exc
        case "json":
            try:
                raw_file = json.loads(text)
            except json.JSONDecodeError as exc:
                raise ConfigError(f"{path}: invalid JSON") from exc
        case _:
            raise AssertionError("Unreachable")

    if not isinstance(raw_file, Mapping):
        raise ConfigError(
            f"{path}: {fmt.upper()} parsed but top-level value is not an object: {type(raw_file)}"
        )

    return raw_file


def build_project_config(raw: Mapping[str, Any]) -> ProjectConfig:
    """Validate a raw ``{"tasks": {...}}`` mapping into a ProjectConfig.

    Task order follows the mapping order, which is the file order for all
    three supported formats.
    """
    tasks: dict[str, TaskConfig] = {}

    if "tasks" not in raw:
        raise ConfigError("Missing 'tasks' field")

    if not isinstance(raw["tasks"], Mapping):
        raise ConfigError(f"'tasks' must be a mapping, got {type(raw['tasks'])}")

    if len(raw["tasks"]) < 1:
        raise ConfigError("There must be at least one task in the config file")

    for task_id, fields in raw["tasks"].items():
        if not isinstance(fields, Mapping):
            raise ConfigError(f"{task_id} must be a mapping")

        if not isinstance(task_id, str):
            raise ConfigError(f"Task id must be a string, got {type(task_id)}")

        task_id_norm = task_id.strip()

        if len(task_id_norm) < 1:
            raise ConfigError("A task id can't be empty")

        if task_id_norm in tasks:
            raise ConfigError(f"Duplicate task id after normalization: {task_id_norm}")

        tasks[task_id_norm] = _build_task_config(task_id_norm, fields)

    for task in tasks.values():
        for dep in task.deps:
            if dep not in tasks:
                raise ConfigError(f"Task '{task.id}' has unknown dependency '{dep}'")

    return ProjectConfig(tasks=tasks)


def _build_task_config(task_id: str, fields: Mapping[str, Any]) -> TaskConfig:
    for key in fields.keys():
        if key not in _TASK_KEYS:
            raise ConfigError(f"{task_id}: Can't process: {key}")

    command = None
    if "command" in fields:
        if not isinstance(fields["command"], str):
            raise ConfigError(f"{task_id}: The command should be a string")

        if len(fields["command"].strip()) < 1:
            raise ConfigError(f"{task_id}: Command is empty")

        command = fields["command"].strip()

    deps = _build_deps(task_id, fields.get("deps", []))

    if command is None and not deps:
        raise ConfigError(f"{task_id}: a task needs a 'command' or at least one dep")

    env = _build_env(task_id, fields.get("env", {}))

    working_dir = None
    if "working_dir" in fields:
        if not isinstance(fields["working_dir"], str):
            raise ConfigError(f"{task_id}: The working_dir should be a string")

        if len(fields["working_dir"].strip()) < 1:
            raise ConfigError(
                f"{task_id}: Please provide a string or remove this field"
            )

        working_dir = fields["working_dir"].strip()

    timeout_s = None
    if "timeout_s" in fields:
        value = fields["timeout_s"]
        # bool is an int subclass
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigError(f"{task_id}: timeout_s should be a number")

        if value <= 0:
            raise ConfigError(f"{task_id}: timeout_s must be positive")

        timeout_s = float(value)

    description = fields.get("description", "")
    if not isinstance(description, str):
        raise ConfigError(f"{task_id}: The description should be a string")

    fail_policy = None
    if "fail_policy" in fields:
        if not isinstance(fields["fail_policy"], str):
            raise ConfigError(f"{task_id}: fail_policy should be a string")

        fail_policy = FailPolicy.parse(fields["fail_policy"])

    return TaskConfig(
        task_id,
        command,
        deps,
        env,
        working_dir,
        timeout_s=timeout_s,
        description=description.strip(),
        fail_policy=fail_policy,
    )


def _build_deps(task_id: str, raw_deps: Any) -> list[str]:
    if not isinstance(raw_deps, list):
        raise ConfigError(f"{task_id}: Dependencies should be in a list.")

    deps: list[str] = []
    seen: set[str] = set()

    for item in raw_deps:
        if not isinstance(item, str):
            raise ConfigError(
                f"{task_id}: {item} should be a string in the dependency list"
            )

        dep = item.strip()

        if len(dep) < 1:
            raise ConfigError(f"{task_id}: A dependency is empty")

        if dep == task_id:
            raise ConfigError(f"{task_id}: A task cannot be self dependent")

        # Allows to ignore duplicates dependency
        if dep in seen:
            continue

        deps.append(dep)
        seen.add(dep)

    return deps


def _build_env(task_id: str, raw_env: Any) -> dict[str, str]:
    if not isinstance(raw_env, Mapping):
        raise ConfigError(f"{task_id}: Env should be a mapping")

    env: dict[str, str] = {}
    for key, item in raw_env.items():
        if not isinstance(key, str):
            raise ConfigError(f"{task_id}: {key} should be a string")

        if len(key.strip()) < 1:
            raise ConfigError(f"{task_id}: A key can't be empty")

        if not isinstance(item, str):
            raise ConfigError(f"{task_id}: {item} should be a string")

        env[key.strip()] = item

    return env
