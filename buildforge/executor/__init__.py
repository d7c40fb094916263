from .scheduler import Scheduler
from .types import RunOutcome

__all__ = ["Scheduler", "RunOutcome"]
