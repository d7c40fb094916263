"""Run formatting, lint and test tasks in dependency order."""

__version__ = "0.1.0"
