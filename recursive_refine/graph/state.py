"""IterationGraphState — the state LangGraph nodes read and write while
running one refinement iteration.

Every node receives the full state and returns a partial update.  Nodes never
touch persistence; the only outside calls are the injected strategies.
"""

from __future__ import annotations

from typing import TypedDict

from recursive_refine.domain.state import IterationSnapshot


class IterationGraphState(TypedDict, total=False):
    """LangGraph state for a single refinement iteration.

    Fields:
        x, y, z: Problem statement, current answer, latent reasoning.
        iteration: Completed iterations so far (incremented by record_snapshot).
        halted: Whether the halt check fired.
        halt_reason: Human-readable reason when halted.
        history: Snapshots of completed iterations (replaced, never mutated).
        latent_remaining: Latent reasoning passes still to run this iteration.
        max_iterations: Hard ceiling handed to the halting policy.
        refine_duration: Milliseconds spent inside strategies this iteration.
    """

    x: str
    y: str
    z: str
    iteration: int
    halted: bool
    halt_reason: str | None
    history: list[IterationSnapshot]
    latent_remaining: int
    max_iterations: int
    refine_duration: int
