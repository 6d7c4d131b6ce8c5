"""Application configuration loaded from environment variables."""

from __future__ import annotations

import logging

from pydantic_settings import BaseSettings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


class Settings(BaseSettings):
    app_name: str = "recursive-refine"
    log_level: str = "INFO"

    # Deep supervision
    max_iterations: int = 16
    latent_recursions: int = 1
    resume: bool = False

    # Persistence
    state_dir: str = ".refine"
    state_file: str = "recursive-session.json"

    model_config = {"env_prefix": "RECURSIVE_REFINE_"}


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
