"""Graph builder — constructs the LangGraph topology of one iteration.

Topology:

    START ─┬── "reason" → latent_reasoning ─┬── "reason" → latent_reasoning
           │                                └── "answer" → refine_answer
           └── "answer" → refine_answer
    refine_answer → record_snapshot → halt_check → END

The graph is compiled once per session and invoked once per iteration.
"""

from __future__ import annotations

from langgraph.graph import END, START, StateGraph

from recursive_refine.domain.strategies import SessionRefiners
from recursive_refine.graph.nodes import (
    make_halt_check,
    make_latent_reasoning,
    make_refine_answer,
    record_snapshot,
    route_latent,
)
from recursive_refine.graph.state import IterationGraphState

# Steps outside the latent loop: refine_answer, record_snapshot, halt_check.
FIXED_STEPS = 3


def build_iteration_graph(refiners: SessionRefiners):
    """Construct and compile the iteration graph around *refiners*.

    Returns:
        A compiled LangGraph application.
    """
    graph = StateGraph(IterationGraphState)

    # ── Register nodes ───────────────────────────────────────────────────
    graph.add_node("latent_reasoning", make_latent_reasoning(refiners.reasoning_refiner))
    graph.add_node("refine_answer", make_refine_answer(refiners.answer_refiner))
    graph.add_node("record_snapshot", record_snapshot)
    graph.add_node("halt_check", make_halt_check(refiners.halt_checker))

    # ── Latent loop ──────────────────────────────────────────────────────
    routes = {"reason": "latent_reasoning", "answer": "refine_answer"}
    graph.add_conditional_edges(START, route_latent, routes)
    graph.add_conditional_edges("latent_reasoning", route_latent, routes)

    # ── Answer, bookkeeping, halt ────────────────────────────────────────
    graph.add_edge("refine_answer", "record_snapshot")
    graph.add_edge("record_snapshot", "halt_check")
    graph.add_edge("halt_check", END)

    return graph.compile()


def recursion_limit(latent_recursions: int) -> int:
    """Superstep budget large enough for *latent_recursions* passes."""
    return max(latent_recursions, 0) + FIXED_STEPS + 2
