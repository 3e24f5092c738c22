"""Small shared helpers."""
from __future__ import annotations

import logging
from typing import Union

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def setup_logging(level: Union[int, str] = logging.INFO) -> None:
    """Configure root logging for the CLI and the web launcher."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # urllib3 retries/connection chatter is noise at INFO
    logging.getLogger("urllib3").setLevel(logging.WARNING)
