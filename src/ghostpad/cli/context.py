"""Shared Click context object for Ghostpad commands."""

from __future__ import annotations

from typing import Any

import click

from ghostpad.output.formatter import OutputFormatter


class GhostpadContext:
    """Shared context passed through Click commands."""

    def __init__(self, json_mode: bool = False, verbose: bool = False) -> None:
        self.json_mode = json_mode
        self.verbose = verbose
        self.formatter = OutputFormatter(json_mode=json_mode)
        self._config: dict[str, Any] | None = None

    def get_config(self) -> dict[str, Any]:
        """Lazy-load and return the configuration."""
        if self._config is None:
            from ghostpad.core.config import load_config

            self._config = load_config()
        return self._config

    def setup_console_logging(self) -> None:
        """Log to the terminal, for commands that do not take over the screen."""
        from ghostpad.core.log import setup_logging

        level = "DEBUG" if self.verbose else self.get_config()["logging"]["level"]
        setup_logging(level)


pass_context = click.make_pass_decorator(GhostpadContext, ensure=True)
