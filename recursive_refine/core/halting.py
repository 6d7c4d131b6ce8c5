"""Halting policy.  The iteration ceiling first, then the caller's strategy.

The ceiling is checked before the strategy is consulted, so no halting
strategy can keep a session running past ``max_iterations``.
"""

from __future__ import annotations

import logging

from recursive_refine.core.refinement import calculate_confidence
from recursive_refine.domain.state import DEFAULT_MAX_ITERATIONS, HaltDecision
from recursive_refine.domain.strategies import HaltChecker, as_halt_decision

logger = logging.getLogger(__name__)


def max_iterations_reason(max_iterations: int) -> str:
    return f"reached max iterations ({max_iterations})"


def check_halt(
    x: str,
    y: str,
    z: str,
    checker: HaltChecker,
    *,
    iteration: int = 0,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> HaltDecision:
    """Decide whether the session should stop after *iteration*.

    Returns:
        A forced halt when ``iteration >= max_iterations``, otherwise the
        checker's decision verbatim.
    """
    if iteration >= max_iterations:
        logger.debug("Iteration ceiling hit (%d >= %d)", iteration, max_iterations)
        return HaltDecision(
            should_halt=True,
            confidence=calculate_confidence(x, y, z),
            reason=max_iterations_reason(max_iterations),
        )

    return as_halt_decision(checker(x, y, z))
