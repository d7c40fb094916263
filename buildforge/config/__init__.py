from .defaults import default_project, default_tasks
from .loader import build_project_config, load_project
from .types import (
    ConfigError,
    FailPolicy,
    ProjectConfig,
    TaskConfig,
    UnsupportedConfigFormatError,
)

__all__ = [
    "load_project",
    "build_project_config",
    "default_project",
    "default_tasks",
    "ProjectConfig",
    "TaskConfig",
    "FailPolicy",
    "ConfigError",
    "UnsupportedConfigFormatError",
]
