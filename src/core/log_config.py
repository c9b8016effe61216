"""Process-wide logging setup.

Modules log through `logging.getLogger(__name__)`; only the entry points
(CLI `serve` / `sync`) call `configure_logging`. Rendering goes through
Rich, the same console library the CLI uses.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_NOISY_LOGGERS = ("httpx", "httpcore", "kubernetes", "urllib3")


def configure_logging(level: str = "INFO", *, console: Console | None = None) -> None:
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"unknown log level: {level}")

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
        log_time_format="%Y-%m-%dT%H:%M:%S.%f",
    )
    logging.basicConfig(level=numeric, format="%(name)s: %(message)s", handlers=[handler], force=True)

    # Request lines from the HTTP/k8s clients are only useful when debugging.
    quiet = logging.DEBUG if numeric <= logging.DEBUG else logging.WARNING
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(quiet)
