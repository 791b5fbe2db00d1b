"""Settings for the Lume budget tracker.

Values are module-level constants that can be overridden through
environment variables before the package is imported.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

DATA_DIR = Path(os.getenv("LUME_DATA_DIR", _PROJECT_ROOT / "data")).resolve()

# The key suffix versions the stored schema
STORAGE_KEY = os.getenv("LUME_STORAGE_KEY", "lume_app_data_v1")

LOG_LEVEL = os.getenv("LUME_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def ensure_data_directory() -> Path:
    """Create the data directory if it doesn't exist and return it."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    return DATA_DIR


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=getattr(logging, (level or LOG_LEVEL), logging.INFO),
        format=LOG_FORMAT,
    )
