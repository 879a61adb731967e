"""Logging configuration for the command-line tool."""

from __future__ import annotations

import logging
import sys

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(level: str = "WARNING", pretty: bool | None = None) -> None:
    """Configure the root logger once.

    Uses RichHandler when stderr is a terminal, plain lines otherwise (so
    redirected output stays greppable).
    """
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        numeric = logging.WARNING
    if pretty is None:
        pretty = sys.stderr.isatty()

    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)

    if pretty:
        handler: logging.Handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="%H:%M:%S"))
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s", datefmt="%H:%M:%S")
        )

    handler.setLevel(numeric)
    root.setLevel(numeric)
    root.addHandler(handler)
