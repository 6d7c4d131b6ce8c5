from recursive_refine.domain.state import (
    HaltDecision,
    IterationSnapshot,
    RecursiveSession,
    SessionConfig,
    SessionState,
)
from recursive_refine.domain.strategies import SessionRefiners

__all__ = [
    "HaltDecision",
    "IterationSnapshot",
    "RecursiveSession",
    "SessionConfig",
    "SessionRefiners",
    "SessionState",
]
