from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

from photo_meta.core.models import (
    DEFAULT_OUTPUT_PATH,
    DEFAULT_SCRIPT_PATH,
    DEFAULT_SHELL,
    DispatchPaths,
)


def load_dotenv_if_present(path: str | Path = ".env") -> None:
    """Load environment variables from a .env file if it exists."""
    dotenv_path = Path(path)
    if dotenv_path.exists():
        load_dotenv(dotenv_path=dotenv_path, override=False)


def configure_logging(default_level: str = "INFO") -> None:
    """Configure root logging level from LOG_LEVEL env (default INFO)."""
    level_name = os.getenv("LOG_LEVEL", default_level).upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(level=level)


def dispatch_paths_from_env() -> DispatchPaths:
    """Resolve the JSON destination, post-processing script and shell from the environment."""
    return DispatchPaths(
        output_path=Path(os.getenv("PHOTO_META_OUTPUT_PATH", str(DEFAULT_OUTPUT_PATH))),
        script_path=Path(os.getenv("PHOTO_META_SCRIPT_PATH", str(DEFAULT_SCRIPT_PATH))),
        shell=os.getenv("PHOTO_META_SHELL", DEFAULT_SHELL),
    )


def scan_concurrency_from_env(default: int = 1) -> int:
    raw = os.getenv("PHOTO_META_CONCURRENCY")
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        logging.getLogger(__name__).warning(
            "Config: ignoring non-integer PHOTO_META_CONCURRENCY=%r", raw
        )
        return default
    return max(value, 0)
