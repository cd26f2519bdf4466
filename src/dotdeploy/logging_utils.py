from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(level: int = logging.WARNING, console: Console | None = None) -> RichHandler:
    """Route log records through rich on stderr.

    Executed commands are logged at INFO, debug output includes captured
    stderr of git probes. Calling this again replaces the handler installed
    by the previous call.
    """
    root = logging.getLogger()
    root.setLevel(level)

    previous = getattr(root, "_dotdeploy_handler", None)
    if previous is not None:
        root.removeHandler(previous)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        show_time=level <= logging.DEBUG,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(handler)
    setattr(root, "_dotdeploy_handler", handler)
    return handler
