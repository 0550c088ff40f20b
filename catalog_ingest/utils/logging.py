from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Third-party loggers that drown out per-page progress at INFO.
_NOISY = ("asyncio", "aiohttp.access", "urllib3", "uvicorn.access")


def resolve_level(level: str | int | None) -> int:
    """
    Map a CLI/env level ("debug", "WARNING", "10", 20) to a logging constant.
    Unknown names fall back to INFO rather than failing the run.
    """
    if level is None or level == "":
        return logging.INFO
    if isinstance(level, int):
        return level
    text = level.strip()
    if text.isdigit():
        return int(text)
    value = logging.getLevelName(text.upper())
    return value if isinstance(value, int) else logging.INFO


def setup_logging(level: str | int | None = None) -> int:
    """Configure root logging once per process and return the effective level."""
    resolved = resolve_level(level if level is not None else os.getenv("CATALOG_LOG_LEVEL"))
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
    for name in _NOISY:
        logging.getLogger(name).setLevel(max(resolved, logging.WARNING))
    return resolved
