from .session import Session, SessionCounters
from .registry import SessionRegistry
from .reporter import CountersReporter

__all__ = ["Session", "SessionCounters", "SessionRegistry", "CountersReporter"]
