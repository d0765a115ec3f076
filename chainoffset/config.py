"""Application configuration from environment variables."""

from __future__ import annotations

import logging

from dotenv import load_dotenv
from pydantic_settings import BaseSettings

load_dotenv()


class Settings(BaseSettings):
    chainoffset_log_level: str = "info"

    # Engine defaults used by the kerf layer (drawing units)
    chainoffset_tolerance: float = 0.1
    chainoffset_max_extension: float = 50.0
    chainoffset_snap_threshold: float = 0.5

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()


def configure_logging(level: str | None = None) -> None:
    """Install the root handler used by scripts and the kerf layer."""
    name = (level or settings.chainoffset_log_level).upper()
    logging.basicConfig(
        level=getattr(logging, name, logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
