"""Refinement primitives — single-step transformations over (x, y, z).

Design principles:
    1. Each primitive calls its strategy exactly once and returns the result
       with a duration.  No state mutation, no I/O.
    2. ``refine_reasoning`` never merges; the strategy owns what the new
       reasoning looks like.  ``merge_reasoning`` is offered for strategies
       that want append semantics.
    3. Reasoning is bounded: a merge never yields more than
       MAX_REASONING_LENGTH characters, keeping the most recent tail.

Confidence heuristic:
    confidence = 0                                       if y is empty
               = min(100, BASE + BONUS * depth)          otherwise

    where depth is the number of ``iteration:`` markers found in z.  This is
    a progress indicator, not a quality judgement.
"""

from __future__ import annotations

from recursive_refine.domain.state import AnswerRefinementResult, RefinementResult
from recursive_refine.domain.strategies import AnswerRefiner, ReasoningRefiner
from recursive_refine.foundation.clock import elapsed_ms, monotonic

MAX_REASONING_LENGTH = 8000

ITERATION_MARKER = "iteration:"
CONFIDENCE_BASE = 20
CONFIDENCE_ITERATION_BONUS = 15
CONFIDENCE_CAP = 100


def refine_reasoning(x: str, y: str, z: str, refiner: ReasoningRefiner) -> RefinementResult:
    """One latent recursion: ``z = refiner(x, y, z)``."""
    start = monotonic()
    new_z = refiner(x, y, z)
    return RefinementResult(z=new_z, duration=elapsed_ms(start))


def refine_answer(y: str, z: str, refiner: AnswerRefiner) -> AnswerRefinementResult:
    """One answer update: ``y = refiner(y, z)``."""
    start = monotonic()
    new_y = refiner(y, z)
    return AnswerRefinementResult(y=new_y, duration=elapsed_ms(start))


def merge_reasoning(old_z: str, new_z: str) -> str:
    """Append *new_z* to *old_z*, keeping at most the last 8000 characters.

    Truncation is purely positional and may cut mid-sentence.
    """
    if not old_z:
        merged = new_z
    elif not new_z:
        merged = old_z
    else:
        merged = f"{old_z}\n{new_z}"

    if len(merged) > MAX_REASONING_LENGTH:
        return merged[-MAX_REASONING_LENGTH:]
    return merged


def calculate_confidence(x: str, y: str, z: str) -> float:
    if not y:
        return 0.0
    depth = z.count(ITERATION_MARKER)
    return float(min(CONFIDENCE_CAP, CONFIDENCE_BASE + CONFIDENCE_ITERATION_BONUS * depth))
