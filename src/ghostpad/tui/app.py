"""Textual editor application."""

from __future__ import annotations

from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widget import Widget
from textual.widgets import Footer, Header, Static

from ghostpad.editor.controller import SuggestionController, SuggestionStatus
from ghostpad.editor.keys import from_textual, is_function_key
from ghostpad.models.document import Point
from ghostpad.output.formatter import usd

_STATUS_STYLES = {
    SuggestionStatus.IDLE: "dim",
    SuggestionStatus.PENDING: "yellow",
    SuggestionStatus.SUCCESS: "green",
    SuggestionStatus.ERROR: "bold red",
}


def render_buffer(controller: SuggestionController, show_caret: bool = True) -> Text:
    """Render the document: pending text grey, marks as styles, caret in reverse video."""
    buffer = controller.buffer
    selection = buffer.selection
    caret = buffer.caret
    start, end = selection.start, selection.end
    text = Text()

    for b, block in enumerate(buffer.document.blocks):
        if b:
            text.append("\n")
        for offset_start, run in block.run_offsets():
            style = []
            if run.pending:
                style.append("grey50")
            if run.bold:
                style.append("bold")
            if run.italic:
                style.append("italic")
            for i, char in enumerate(run.text):
                point = Point(block=b, offset=offset_start + i)
                char_style = list(style)
                if not selection.collapsed and start <= point and point < end:
                    char_style.append("on dark_blue")
                if show_caret and point == caret:
                    char_style.append("reverse")
                text.append(char, style=" ".join(char_style))
        if show_caret and caret.block == b and caret.offset == block.length:
            text.append(" ", style="reverse")
    return text


class EditorView(Widget, can_focus=True):
    """Focusable widget that feeds keystrokes to the suggestion controller."""

    DEFAULT_CSS = """
    EditorView {
        height: 1fr;
        padding: 0 1;
        border: round $accent;
    }
    """

    def __init__(self, controller: SuggestionController, **kwargs) -> None:
        super().__init__(**kwargs)
        self.controller = controller

    def render(self) -> Text:
        return render_buffer(self.controller, show_caret=self.has_focus)

    async def on_key(self, event: events.Key) -> None:
        press = from_textual(event.key, event.character)
        # shortcuts and F-keys bubble up to the app bindings
        if press is None or press.is_shortcut or is_function_key(press.key):
            return
        event.prevent_default()
        event.stop()
        self.controller.press(press)
        self.refresh()


class GhostpadApp(App):
    """Ghostpad editor with inline LLM suggestions."""

    TITLE = "Ghostpad"

    CSS = """
    #status-line {
        height: 1;
        padding: 0 1;
        background: $panel;
    }
    """

    BINDINGS = [
        Binding("ctrl+f", "toggle_bold", "Bold"),
        Binding("ctrl+k", "toggle_italic", "Italic"),
        Binding("ctrl+z", "undo", "Undo"),
        Binding("f2", "settings", "Settings"),
        Binding("f3", "status", "Status"),
    ]

    def __init__(self, controller: SuggestionController, **kwargs) -> None:
        super().__init__(**kwargs)
        self.controller = controller
        self.editor_view = EditorView(controller, id="editor")
        self.status_line = Static(id="status-line")

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield self.editor_view
        yield self.status_line
        yield Footer()

    def on_mount(self) -> None:
        self.controller.on_update = self.refresh_view
        self.editor_view.focus()
        self.refresh_view()

    async def on_unmount(self) -> None:
        await self.controller.close()

    def status_text(self) -> Text:
        state = self.controller.state
        usage = self.controller.usage
        line = Text()
        line.append(f"● {state.status.value}", style=_STATUS_STYLES[state.status])
        line.append(f"  {self.controller.settings.model}")
        line.append(f"  tokens {usage.prompt_tokens}/{usage.completion_tokens}")
        line.append(f"  {usd(usage.cost)}")
        if not state.suggestions_enabled:
            line.append("  suggestions paused", style="dim")
        if state.status == SuggestionStatus.ERROR and state.last_error:
            line.append(f"  {state.last_error}", style="red")
        return line

    def refresh_view(self) -> None:
        self.editor_view.refresh()
        self.status_line.update(self.status_text())

    def action_toggle_bold(self) -> None:
        self.controller.toggle_mark("bold")

    def action_toggle_italic(self) -> None:
        self.controller.toggle_mark("italic")

    def action_undo(self) -> None:
        self.controller.undo()

    def action_settings(self) -> None:
        from ghostpad.tui.screens.settings import SettingsScreen

        self.push_screen(SettingsScreen(self.controller))

    def action_status(self) -> None:
        from ghostpad.tui.screens.status import StatusScreen

        self.push_screen(StatusScreen(self.controller))
