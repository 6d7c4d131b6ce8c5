"""Session runner — clean interface for tooling that drives refinement.

Usage:
    from recursive_refine.runner import run_refinement

    result = run_refinement(problem, project_dir, refiners)

The runner turns Settings into explicit arguments for the session driver.
The engine itself never reads configuration.
"""

from __future__ import annotations

import os

from recursive_refine.config import Settings
from recursive_refine.core.session import create_session, run_session
from recursive_refine.domain.state import SessionRunResult, SessionState
from recursive_refine.domain.strategies import SessionRefiners
from recursive_refine.store.session_store import CorruptionHandler, SessionStore


def run_refinement(
    x: str,
    project_path: str | os.PathLike[str],
    refiners: SessionRefiners,
    *,
    settings: Settings | None = None,
    y: str = "",
    z: str = "",
    resume: bool | None = None,
    on_corrupt: CorruptionHandler | None = None,
) -> SessionRunResult:
    """Create (or resume) a session for *x* and run it to a halt.

    Args:
        x: The problem statement.
        project_path: Project directory the session state lives under.
        refiners: Reasoning, answer, and halting strategies.
        settings: Configuration; read from the environment when omitted.
        y: Initial answer for a fresh session.
        z: Initial reasoning for a fresh session.
        resume: Override ``settings.resume``.
        on_corrupt: Diagnostic callback for unreadable persisted state.
    """
    settings = settings or Settings()
    store = SessionStore.from_settings(settings, on_corrupt=on_corrupt)
    session = create_session(
        x,
        project_path,
        y=y,
        z=z,
        max_iterations=settings.max_iterations,
        latent_recursions=settings.latent_recursions,
        resume=settings.resume if resume is None else resume,
        store=store,
    )
    return run_session(session, refiners, store=store)


def load_session_state(
    project_path: str | os.PathLike[str],
    settings: Settings | None = None,
) -> SessionState | None:
    """Load persisted state for inspection without advancing it."""
    settings = settings or Settings()
    return SessionStore.from_settings(settings).load(project_path)
