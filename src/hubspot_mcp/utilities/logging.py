"""Logging setup for the server process."""

import logging
from collections.abc import Mapping
from typing import Literal

from rich.console import Console
from rich.logging import RichHandler

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

SENSITIVE_HEADERS = frozenset({"authorization", "cookie", "set-cookie"})


def configure_logging(level: LogLevel = "INFO") -> None:
    """Send log records to stderr through rich.

    Args:
        level: the log level to use
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


def redact_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Return a copy of ``headers`` with credential-bearing values replaced by ``***``."""
    return {key: "***" if key.lower() in SENSITIVE_HEADERS else value for key, value in headers.items()}
