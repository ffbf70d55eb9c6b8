"""Logging setup — Rich console output for commands, a plain file while the editor runs."""

from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

_HANDLER_FLAG = "_ghostpad_handler"


def setup_logging(level: str = "WARNING", log_file: Path | None = None) -> None:
    """Configure the ``ghostpad`` logger.

    With ``log_file`` set, records go to that file only. The full-screen editor
    owns the terminal, so anything written to stderr would corrupt the display.
    Calling this again replaces the handler installed by the previous call.
    """
    logger = logging.getLogger("ghostpad")
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))

    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_FLAG, False):
            logger.removeHandler(handler)
            handler.close()

    handler: logging.Handler
    if log_file is not None:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s %(levelname)s %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
    else:
        handler = RichHandler(console=Console(stderr=True), show_path=False, markup=False)
        handler.setFormatter(logging.Formatter("%(message)s"))

    setattr(handler, _HANDLER_FLAG, True)
    logger.addHandler(handler)
    logger.propagate = False
