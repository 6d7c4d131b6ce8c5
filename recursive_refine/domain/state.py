"""Session state models, the x, y, z of a recursive refinement session.

    x: the problem statement, fixed for the lifetime of a session
    y: the current best answer, replaced every iteration
    z: accumulated latent reasoning, appended and length-capped

These models carry no behaviour beyond representation and JSON round-trip.
The persisted document uses camelCase keys (``haltReason``) so state files
stay readable by every tool that shares the project directory.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, Field

from recursive_refine.foundation.clock import utc_now
from recursive_refine.foundation.identifiers import new_session_id

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 16
DEFAULT_LATENT_RECURSIONS = 1


class IterationSnapshot(BaseModel):
    """Immutable record of one completed iteration."""

    iteration: int = Field(..., ge=0)
    z: str = ""
    y: str = ""
    confidence: float = Field(default=0.0, ge=0.0, le=100.0)
    duration: int | None = Field(
        default=None,
        description="Milliseconds spent refining during this iteration",
    )

    model_config = ConfigDict(frozen=True)


class SessionState(BaseModel):
    """The mutable heart of a session.

    Invariants maintained by the drivers:
        - ``len(history) == iteration`` after every completed iteration.
        - ``halted`` never flips back to False once set.
        - ``halt_reason`` is None exactly while ``halted`` is False.
    """

    x: str = ""
    y: str = ""
    z: str = ""
    iteration: int = Field(default=0, ge=0)
    halted: bool = False
    halt_reason: str | None = Field(default=None, alias="haltReason")
    history: list[IterationSnapshot] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class SessionConfig(BaseModel):
    """Run-time configuration.  Never persisted with the state."""

    max_iterations: int = DEFAULT_MAX_ITERATIONS
    latent_recursions: int = DEFAULT_LATENT_RECURSIONS
    project_path: str


class RecursiveSession(BaseModel):
    session_id: str = Field(default_factory=new_session_id)
    state: SessionState
    config: SessionConfig
    created_at: datetime = Field(default_factory=utc_now)


class HaltDecision(BaseModel):
    """Verdict of a halting strategy."""

    should_halt: bool = Field(..., alias="shouldHalt")
    confidence: float = Field(default=0.0, ge=0.0, le=100.0)
    reason: str = ""

    model_config = ConfigDict(populate_by_name=True)


# ── Step results ─────────────────────────────────────────────────────────────


class RefinementResult(BaseModel):
    z: str
    duration: int = 0


class AnswerRefinementResult(BaseModel):
    y: str
    duration: int = 0


class IterationResult(BaseModel):
    state: SessionState
    duration: int = 0


class SessionRunResult(BaseModel):
    session: RecursiveSession
    state: SessionState
    total_duration: int = 0


# ── Serialisation ────────────────────────────────────────────────────────────


def default_state() -> SessionState:
    """The state a missing or malformed document stands for."""
    return SessionState()


def serialize_state(state: SessionState) -> str:
    """Render *state* as the persisted JSON document."""
    return state.model_dump_json(by_alias=True, indent=2)


def _field(data: dict[str, Any], key: str, default: Any, *alternates: str) -> Any:
    for name in (key, *alternates):
        value = data.get(name)
        if value is not None:
            return value
    return default


def deserialize_state(
    text: str | bytes,
    on_error: Callable[[Exception], None] | None = None,
) -> SessionState:
    """Parse a persisted document, falling back to the default state.

    Missing or null fields take their defaults individually.  Anything that
    cannot be parsed or validated yields ``default_state()``; the failure is
    handed to *on_error* when given, logged otherwise, and never raised.
    """
    try:
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        return SessionState.model_validate({
            "x": _field(data, "x", ""),
            "y": _field(data, "y", ""),
            "z": _field(data, "z", ""),
            "iteration": _field(data, "iteration", 0),
            "halted": _field(data, "halted", False),
            "haltReason": _field(data, "haltReason", None, "halt_reason"),
            "history": _field(data, "history", []),
        })
    except (ValueError, TypeError, RecursionError) as exc:
        if on_error is not None:
            on_error(exc)
        else:
            logger.warning("Discarding malformed session state: %s", exc)
        return default_state()
