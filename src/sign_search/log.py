"""Logging setup shared by the CLI and the API server."""

import logging

from rich.logging import RichHandler


def configure_logging(level: str | int = "INFO") -> None:
    """Route package logs through Rich at ``level``."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )
    # SDK clients are chatty at INFO
    for name in ("httpx", "httpcore", "google_genai"):
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
