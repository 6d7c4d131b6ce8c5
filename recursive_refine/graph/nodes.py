"""LangGraph nodes — functions that transform IterationGraphState.

Each node:
    - Receives the full IterationGraphState
    - Returns a partial dict update
    - Lets strategy exceptions propagate; the session driver decides what a
      failed iteration means
"""

from __future__ import annotations

import logging

from recursive_refine.core.halting import check_halt
from recursive_refine.core.refinement import (
    calculate_confidence,
    refine_answer,
    refine_reasoning,
)
from recursive_refine.domain.state import IterationSnapshot
from recursive_refine.domain.strategies import AnswerRefiner, HaltChecker, ReasoningRefiner
from recursive_refine.graph.state import IterationGraphState

logger = logging.getLogger(__name__)


# ── 1. latent reasoning ─────────────────────────────────────────────────────

def make_latent_reasoning(refiner: ReasoningRefiner):
    """Create the latent reasoning node.

    Each pass hands the z produced by the previous pass straight back to the
    strategy.  No merging happens here.
    """

    def latent_reasoning(state: IterationGraphState) -> dict:
        result = refine_reasoning(state["x"], state["y"], state["z"], refiner)
        remaining = state.get("latent_remaining", 0) - 1
        logger.debug(
            "Latent pass done (iteration=%d, remaining=%d, z=%d chars, %d ms)",
            state.get("iteration", 0) + 1, remaining, len(result.z), result.duration,
        )
        return {
            "z": result.z,
            "latent_remaining": remaining,
            "refine_duration": state.get("refine_duration", 0) + result.duration,
        }

    return latent_reasoning


def route_latent(state: IterationGraphState) -> str:
    """Conditional edge: another latent pass, or on to the answer."""
    if state.get("latent_remaining", 0) > 0:
        return "reason"
    return "answer"


# ── 2. answer refinement ────────────────────────────────────────────────────

def make_refine_answer(refiner: AnswerRefiner):

    def answer(state: IterationGraphState) -> dict:
        result = refine_answer(state["y"], state["z"], refiner)
        return {
            "y": result.y,
            "refine_duration": state.get("refine_duration", 0) + result.duration,
        }

    return answer


# ── 3. bookkeeping ──────────────────────────────────────────────────────────

def record_snapshot(state: IterationGraphState) -> dict:
    """Count the iteration and append its snapshot to a fresh history list."""
    iteration = state.get("iteration", 0) + 1
    snapshot = IterationSnapshot(
        iteration=iteration,
        z=state["z"],
        y=state["y"],
        confidence=calculate_confidence(state["x"], state["y"], state["z"]),
        duration=state.get("refine_duration", 0),
    )
    return {
        "iteration": iteration,
        "history": [*state.get("history", []), snapshot],
    }


# ── 4. halt check ───────────────────────────────────────────────────────────

def make_halt_check(checker: HaltChecker):

    def halt_check(state: IterationGraphState) -> dict:
        decision = check_halt(
            state["x"],
            state["y"],
            state["z"],
            checker,
            iteration=state["iteration"],
            max_iterations=state["max_iterations"],
        )
        if decision.should_halt:
            logger.info(
                "Halting at iteration %d (confidence=%.0f): %s",
                state["iteration"], decision.confidence, decision.reason,
            )
            return {"halted": True, "halt_reason": decision.reason}

        logger.debug("Continuing after iteration %d: %s", state["iteration"], decision.reason)
        return {"halted": False, "halt_reason": None}

    return halt_check
