"""Session driver — deep supervision over repeated iterations.

    for step in range(max_iterations):
        z, y = refine(x, y, z)
        if should_halt: break

The driver owns persistence: state is loaded when a session is created with
``resume=True`` and saved once when a run finishes.  Whatever happens inside
a strategy, callers get a well-formed SessionState back; failures show up as
``halted=True`` with a descriptive ``halt_reason``.

State machine:
    RUNNING (halted=False) --iterate--> RUNNING | HALTED
    HALTED  (halted=True)  terminal
"""

from __future__ import annotations

import logging
import os
from dataclasses import replace

from recursive_refine.core.halting import max_iterations_reason
from recursive_refine.core.iteration import run_iteration
from recursive_refine.domain.state import (
    DEFAULT_LATENT_RECURSIONS,
    DEFAULT_MAX_ITERATIONS,
    RecursiveSession,
    SessionConfig,
    SessionRunResult,
    SessionState,
)
from recursive_refine.domain.strategies import SessionRefiners
from recursive_refine.foundation.clock import elapsed_ms, monotonic
from recursive_refine.graph.builder import build_iteration_graph
from recursive_refine.store.session_store import SessionStore

logger = logging.getLogger(__name__)


def create_session(
    x: str,
    project_path: str | os.PathLike[str],
    *,
    y: str = "",
    z: str = "",
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    latent_recursions: int = DEFAULT_LATENT_RECURSIONS,
    resume: bool = False,
    store: SessionStore | None = None,
) -> RecursiveSession:
    """Create a fresh session, or resume the persisted one for the same *x*.

    Only the state is resumed.  ``max_iterations`` and ``latent_recursions``
    always come from this call.  Persisted state for a different *x* is
    ignored.
    """
    config = SessionConfig(
        max_iterations=max_iterations,
        latent_recursions=latent_recursions,
        project_path=os.fspath(project_path),
    )

    if resume:
        existing = (store or SessionStore()).load(config.project_path)
        if existing is not None and existing.x == x:
            logger.info(
                "Resuming session for %s at iteration %d (halted=%s)",
                config.project_path, existing.iteration, existing.halted,
            )
            return RecursiveSession(state=existing, config=config)
        if existing is not None:
            logger.debug("Persisted session in %s is for another input, starting fresh", config.project_path)

    return RecursiveSession(state=SessionState(x=x, y=y, z=z), config=config)


def run_session(
    session: RecursiveSession,
    refiners: SessionRefiners,
    *,
    store: SessionStore | None = None,
) -> SessionRunResult:
    """Run *session* until its state halts, then persist it.

    Returns:
        SessionRunResult with an updated copy of the session, its final
        state, and total elapsed milliseconds.
    """
    store = store or SessionStore()
    start = monotonic()
    config = session.config
    state = session.state

    if state.halted:
        logger.info("Session %s already halted: %s", session.session_id, state.halt_reason)
    elif config.max_iterations <= 0:
        state = state.model_copy(update={
            "halted": True,
            "halt_reason": f"max_iterations is {config.max_iterations}",
        })
    else:
        logger.info(
            "Running session %s (max_iterations=%d, latent_recursions=%s, from iteration %d)",
            session.session_id, config.max_iterations,
            refiners.latent_recursions if refiners.latent_recursions is not None
            else config.latent_recursions,
            state.iteration,
        )
        state = _supervise(state, refiners, config)

    store.save(config.project_path, state)

    logger.info(
        "Session %s finished: iterations=%d halted=%s reason=%s",
        session.session_id, state.iteration, state.halted, state.halt_reason,
    )
    return SessionRunResult(
        session=session.model_copy(update={"state": state}),
        state=state,
        total_duration=elapsed_ms(start),
    )


def _supervise(
    state: SessionState,
    refiners: SessionRefiners,
    config: SessionConfig,
) -> SessionState:
    """The deep-supervision loop.  Never raises on strategy failure."""
    if refiners.latent_recursions is None:
        refiners = replace(refiners, latent_recursions=config.latent_recursions)
    graph = build_iteration_graph(refiners)

    while not state.halted and state.iteration < config.max_iterations:
        try:
            result = run_iteration(
                state, refiners, max_iterations=config.max_iterations, graph=graph,
            )
        except Exception as exc:
            message = str(exc) or type(exc).__name__
            logger.warning(
                "Refinement failed during iteration %d: %s", state.iteration + 1, message,
            )
            state = state.model_copy(update={
                "halted": True,
                "halt_reason": f"refinement error: {message}",
            })
            break
        state = result.state

    # The halt check inside the iteration normally catches this already.
    if not state.halted and state.iteration >= config.max_iterations:
        state = state.model_copy(update={
            "halted": True,
            "halt_reason": max_iterations_reason(config.max_iterations),
        })

    return state
