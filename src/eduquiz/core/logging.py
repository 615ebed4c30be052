"""Logging configuration shared by the API process and the scheduler."""

import logging
import sys

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: int | str = logging.INFO, format_string: str | None = None) -> None:
    if isinstance(level, str):
        level = level.upper()
    logging.basicConfig(
        level=level,
        format=format_string or DEFAULT_FORMAT,
        stream=sys.stdout,
        force=True,
    )
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access", "apscheduler", "eduquiz"):
        logging.getLogger(name).setLevel(level)
