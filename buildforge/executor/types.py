from dataclasses import dataclass

from buildforge.report import Result


@dataclass(frozen=True)
class RunOutcome:
    results: tuple[Result, ...]
    interrupted: bool = False
