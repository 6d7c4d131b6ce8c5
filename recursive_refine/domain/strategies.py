"""Strategy contracts: the only boundary between the engine and whatever
actually produces reasoning, answers, and halting verdicts (usually an LLM).

Strategies are plain callables.  The engine calls them strictly one at a
time and never catches their exceptions below the session driver.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable

from recursive_refine.domain.state import HaltDecision

ReasoningRefiner = Callable[[str, str, str], str]  # (x, y, z) -> z'
AnswerRefiner = Callable[[str, str], str]  # (y, z) -> y'
HaltChecker = Callable[[str, str, str], HaltDecision | Mapping[str, Any]]  # (x, y, z)


@dataclass(frozen=True)
class SessionRefiners:
    """The three strategies driving a session.

    ``latent_recursions`` overrides the session config when set.
    """

    reasoning_refiner: ReasoningRefiner
    answer_refiner: AnswerRefiner
    halt_checker: HaltChecker
    latent_recursions: int | None = None


def as_halt_decision(value: HaltDecision | Mapping[str, Any]) -> HaltDecision:
    """Accept a HaltDecision or an equivalent mapping, values untouched."""
    if isinstance(value, HaltDecision):
        return value
    if isinstance(value, Mapping):
        return HaltDecision.model_validate(dict(value))
    raise TypeError(
        f"halt checker must return a HaltDecision or mapping, got {type(value).__name__}"
    )
