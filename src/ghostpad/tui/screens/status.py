"""Status screen — request state, token usage, prices and the last backend response."""

from __future__ import annotations

import json
import time

from rich.markup import escape
from textual.app import ComposeResult
from textual.containers import VerticalScroll
from textual.widgets import Footer, Header, Static

from ghostpad.models.completion import get_price
from ghostpad.output.formatter import usd
from ghostpad.tui.screens.base import PanelScreen


class StatusScreen(PanelScreen):
    """Read-only view of what the suggestion controller has been doing."""

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield VerticalScroll(Static(id="status-content"))
        yield Footer()

    def on_mount(self) -> None:
        self.query_one("#status-content", Static).update(self.build_content())

    def build_content(self) -> str:
        state = self.controller.state
        usage = self.controller.usage
        settings = self.controller.settings
        price = get_price(settings.model)

        lines = ["[bold cyan]Suggestions[/bold cyan]\n"]
        lines.append(f"  Status:       {state.status.value}")
        lines.append(f"  Auto-fetch:   {'on' if state.suggestions_enabled else 'paused'}")
        lines.append(f"  Wait time:    {settings.wait_time_ms} ms")
        if state.pending is not None:
            waited = time.monotonic() - state.pending.issued_at
            lines.append(f"  In flight:    {waited:.1f} s for change #{state.pending.change_stamp}")
        if state.last_error:
            lines.append(f"  Last error:   [red]{escape(state.last_error)}[/red]")

        lines.append("\n[bold cyan]Usage[/bold cyan]\n")
        lines.append(f"  Requests:          {usage.requests}")
        lines.append(f"  Prompt tokens:     {usage.prompt_tokens}")
        lines.append(f"  Completion tokens: {usage.completion_tokens}")
        lines.append(f"  Cost so far:       {usd(usage.cost)}")
        for model, count in sorted(usage.by_model.items()):
            lines.append(f"    {escape(model)}: {count} request{'s' if count != 1 else ''}")
        lines.append(
            f"  Price of {settings.model}: input {usd(price.input)} / output {usd(price.output)} per 1M tokens"
        )

        lines.append("\n[bold cyan]Backend response[/bold cyan]\n")
        if state.last_response is None:
            lines.append("  [dim]No response yet[/dim]")
        else:
            dumped = json.dumps(state.last_response, indent=2, default=str, ensure_ascii=False)
            lines.append(escape(dumped))
        return "\n".join(lines)
