"""Durable, crash-safe storage of SessionState, one document per project.

Design notes:
    - Writes go to a sibling ``.tmp`` file which is then ``os.replace``d over
      the target, so readers only ever see a complete document.
    - Reads fail soft: a malformed document stands for the default state and
      is reported through ``on_corrupt`` and the log, never raised.
    - Single writer per project.  There is no locking; callers must not run
      two sessions against the same project concurrently.
"""

from __future__ import annotations

import contextlib
import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Callable

from recursive_refine.domain.state import (
    SessionState,
    default_state,
    deserialize_state,
    serialize_state,
)

if TYPE_CHECKING:
    from recursive_refine.config import Settings

logger = logging.getLogger(__name__)

DEFAULT_STATE_DIR = ".refine"
DEFAULT_STATE_FILE = "recursive-session.json"

CorruptionHandler = Callable[[Path, Exception], None]


class SessionStore:
    """File-backed SessionState persistence keyed by project path.

    Args:
        state_dir: Directory, relative to the project, holding the document.
        file_name: Name of the JSON document inside ``state_dir``.
        on_corrupt: Called with the path and the error whenever a persisted
            document cannot be read back.
    """

    def __init__(
        self,
        state_dir: str = DEFAULT_STATE_DIR,
        file_name: str = DEFAULT_STATE_FILE,
        on_corrupt: CorruptionHandler | None = None,
    ) -> None:
        self._state_dir = state_dir
        self._file_name = file_name
        self._on_corrupt = on_corrupt

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        on_corrupt: CorruptionHandler | None = None,
    ) -> SessionStore:
        return cls(
            state_dir=settings.state_dir,
            file_name=settings.state_file,
            on_corrupt=on_corrupt,
        )

    # ── Public API ───────────────────────────────────────────────────────

    def path_for(self, project_path: str | os.PathLike[str]) -> Path:
        return Path(project_path) / self._state_dir / self._file_name

    def save(self, project_path: str | os.PathLike[str], state: SessionState) -> bool:
        """Atomically persist *state*.  Returns False if the write failed."""
        path = self.path_for(project_path)
        tmp = path.with_suffix(path.suffix + ".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tmp.open("w", encoding="utf-8") as fh:
                fh.write(serialize_state(state))
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp, path)
        except OSError as exc:
            with contextlib.suppress(OSError):
                tmp.unlink(missing_ok=True)
            logger.warning("Could not persist session state to %s: %s", path, exc)
            return False

        logger.debug("Saved session state to %s (iteration=%d)", path, state.iteration)
        return True

    def load(self, project_path: str | os.PathLike[str]) -> SessionState | None:
        """Read the persisted state.

        Returns:
            None when nothing is persisted, the default state when the
            document is malformed, otherwise the stored state.
        """
        path = self.path_for(project_path)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as exc:
            self._report_corrupt(path, exc)
            return default_state()
        except OSError as exc:
            logger.warning("Could not read session state from %s: %s", path, exc)
            return None

        return deserialize_state(text, on_error=lambda exc: self._report_corrupt(path, exc))

    def clear(self, project_path: str | os.PathLike[str]) -> bool:
        """Delete the persisted document.  Returns False if there was none."""
        path = self.path_for(project_path)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        logger.info("Cleared session state at %s", path)
        return True

    # ── Internals ────────────────────────────────────────────────────────

    def _report_corrupt(self, path: Path, exc: Exception) -> None:
        logger.warning("Session state at %s is corrupt, treating as absent: %s", path, exc)
        if self._on_corrupt is not None:
            self._on_corrupt(path, exc)
