"""Settings screen — debounce delay, model and system prompt."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.containers import Horizontal, VerticalScroll
from textual.widgets import Button, Footer, Header, Input, Label, Select, TextArea

from ghostpad.models.completion import ModelName
from ghostpad.tui.screens.base import PanelScreen


class SettingsScreen(PanelScreen):
    """Edit the live suggestion settings. Changes apply to the next request."""

    DEFAULT_CSS = """
    SettingsScreen Input, SettingsScreen Select {
        width: 40;
    }
    SettingsScreen TextArea {
        height: 14;
    }
    SettingsScreen #settings-error {
        color: $error;
    }
    """

    def compose(self) -> ComposeResult:
        settings = self.controller.settings
        models = [(m.value, m.value) for m in ModelName]
        if settings.model not in {m.value for m in ModelName}:
            models.append((settings.model, settings.model))

        yield Header(show_clock=True)
        with VerticalScroll():
            yield Label("Wait time before fetching a suggestion (ms)")
            yield Input(str(settings.wait_time_ms), id="wait-time", type="integer")
            yield Label("Model")
            yield Select(models, value=settings.model, allow_blank=False, id="model")
            yield Label("System prompt")
            yield TextArea(settings.prompt, id="prompt")
            yield Label("", id="settings-error")
            with Horizontal():
                yield Button("Save", id="save", variant="primary")
                yield Button("Cancel", id="cancel")
        yield Footer()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "cancel":
            self.action_go_back()
            return

        raw_wait = self.query_one("#wait-time", Input).value.strip()
        try:
            wait_time_ms = int(raw_wait)
        except ValueError:
            self.query_one("#settings-error", Label).update(f"Not a number: {raw_wait!r}")
            return
        if wait_time_ms < 0:
            self.query_one("#settings-error", Label).update("Wait time cannot be negative")
            return

        self.controller.update_settings(
            wait_time_ms=wait_time_ms,
            model=str(self.query_one("#model", Select).value),
            prompt=self.query_one("#prompt", TextArea).text,
        )
        self.action_go_back()
