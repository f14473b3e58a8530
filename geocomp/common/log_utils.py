"""Logging utilities for geocomp.

Library modules only create loggers (``logging.getLogger(__name__)``);
entry points such as the CLI call :func:`configure_logging` once.
"""

import json
import logging
import logging.config
from pathlib import Path

LOGGING_CONFIG_FILE = "logging-dev.json"


def configure_logging(level: int | str | None = None, config_path: Path | None = None) -> None:
    """Configure logging from a dictConfig JSON file.

    Uses logging-dev.json at the repository root when present, otherwise falls
    back to a basic single-line format.

    Args:
        level: Optional level applied to the ``geocomp`` logger after loading
        config_path: Explicit dictConfig file (default: logging-dev.json)
    """
    if config_path is None:
        config_path = Path(__file__).parent.parent.parent / LOGGING_CONFIG_FILE

    if config_path.exists():
        with open(config_path) as f:
            logging.config.dictConfig(json.load(f))
    else:
        # Fallback to basic config if file not found
        logging.basicConfig(
            level=logging.INFO,
            format=(
                '{"timestamp": "%(asctime)s", "level": "%(levelname)s", '
                '"logger": "%(name)s", "message": "%(message)s"}'
            ),
            datefmt="%Y-%m-%dT%H:%M:%S",
        )

    if level is not None:
        logging.getLogger("geocomp").setLevel(level)
