"""Iteration driver — one full refinement cycle.

Order within an iteration is fixed:
    1. latent reasoning, ``latent_recursions`` times (skipped when <= 0)
    2. answer refinement, once
    3. bookkeeping: iteration += 1, snapshot appended to history
    4. halt check against the ceiling and the caller's strategy

The input state is never modified; the result carries a new SessionState.
Strategy exceptions are not caught here.
"""

from __future__ import annotations

import logging

from recursive_refine.domain.state import (
    DEFAULT_LATENT_RECURSIONS,
    DEFAULT_MAX_ITERATIONS,
    IterationResult,
    SessionState,
)
from recursive_refine.domain.strategies import SessionRefiners
from recursive_refine.foundation.clock import elapsed_ms, monotonic
from recursive_refine.graph.builder import build_iteration_graph, recursion_limit
from recursive_refine.graph.state import IterationGraphState

logger = logging.getLogger(__name__)


def run_iteration(
    state: SessionState,
    refiners: SessionRefiners,
    *,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    graph=None,
) -> IterationResult:
    """Run one iteration of the recursive refinement loop.

    Args:
        state: Current session state.  Left untouched.
        refiners: Strategies; ``refiners.latent_recursions`` defaults to 1.
        max_iterations: Ceiling handed to the halting policy.
        graph: A compiled graph from ``build_iteration_graph(refiners)``,
               reused across iterations by the session driver.

    Returns:
        IterationResult with the new state and the elapsed milliseconds.
        A halted state is returned as-is with zero duration.
    """
    if state.halted:
        return IterationResult(state=state, duration=0)

    start = monotonic()
    latent = refiners.latent_recursions
    if latent is None:
        latent = DEFAULT_LATENT_RECURSIONS

    compiled = graph if graph is not None else build_iteration_graph(refiners)
    initial: IterationGraphState = {
        "x": state.x,
        "y": state.y,
        "z": state.z,
        "iteration": state.iteration,
        "halted": False,
        "halt_reason": None,
        "history": list(state.history),
        "latent_remaining": max(latent, 0),
        "max_iterations": max_iterations,
        "refine_duration": 0,
    }

    final = compiled.invoke(initial, config={"recursion_limit": recursion_limit(latent)})

    new_state = state.model_copy(update={
        "y": final["y"],
        "z": final["z"],
        "iteration": final["iteration"],
        "halted": final["halted"],
        "halt_reason": final["halt_reason"],
        "history": list(final["history"]),
    })
    duration = elapsed_ms(start)
    logger.debug(
        "Iteration %d complete in %d ms (halted=%s)",
        new_state.iteration, duration, new_state.halted,
    )
    return IterationResult(state=new_state, duration=duration)
