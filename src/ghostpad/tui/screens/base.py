"""Shared base for secondary screens."""

from __future__ import annotations

from textual.binding import Binding
from textual.screen import Screen

from ghostpad.editor.controller import SuggestionController


class PanelScreen(Screen):
    """Base screen with back navigation."""

    BINDINGS = [
        Binding("escape", "go_back", "Back"),
    ]

    def __init__(self, controller: SuggestionController, **kwargs) -> None:
        super().__init__(**kwargs)
        self.controller = controller

    def action_go_back(self) -> None:
        self.app.pop_screen()
