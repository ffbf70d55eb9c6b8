"""Editor buffer — versioned document state driven by an explicit command log."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ghostpad.core.exceptions import DocumentError
from ghostpad.editor.commands import (
    Command,
    DeleteRange,
    DeleteRun,
    InsertRun,
    SetMark,
    SetSelection,
    SplitBlock,
    UpdateRun,
)
from ghostpad.editor.keys import KeyPress
from ghostpad.models.document import Document, Mark, Point, Selection, TextRun

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 200


@dataclass(frozen=True)
class Snapshot:
    document: Document
    selection: Selection
    version: int


class EditorBuffer:
    """Holds the current document and selection.

    All changes go through ``apply``, which records the command, bumps
    ``version`` and checks that at most one pending suggestion run exists.
    """

    def __init__(self, document: Document | None = None, selection: Selection | None = None) -> None:
        self.document = document or Document()
        self.selection = selection or Selection.caret(self.document.end_point())
        self.version = 0
        self.log: list[Command] = []
        self.marks: dict[str, bool] | None = None
        self._history: list[Snapshot] = []
        self._check()

    @classmethod
    def from_text(cls, text: str) -> EditorBuffer:
        """Buffer holding ``text`` with the caret at its end."""
        return cls(Document.from_text(text))

    # ── Command application ──────────────────────────────────────

    def apply(self, command: Command) -> None:
        if isinstance(command, SetSelection):
            self.document.validate_point(command.selection.anchor)
            self.document.validate_point(command.selection.focus)
            self.selection = command.selection
        else:
            self.document = command.apply(self.document)
            self.selection = Selection(
                anchor=self.document.clamp(self.selection.anchor),
                focus=self.document.clamp(self.selection.focus),
            )
        self.log.append(command)
        self.version += 1
        self._check()

    def _check(self) -> None:
        pending = self.document.pending_runs()
        if len(pending) > 1:
            raise DocumentError(f"Document holds {len(pending)} pending suggestion runs")
        self.document.validate_point(self.selection.anchor)
        self.document.validate_point(self.selection.focus)

    def _select(self, point: Point) -> None:
        self.apply(SetSelection(selection=Selection.caret(point)))

    # ── Queries ──────────────────────────────────────────────────

    @property
    def caret(self) -> Point:
        return self.selection.focus

    def plain_text(self, include_pending: bool = True) -> str:
        return self.document.plain_text(include_pending=include_pending)

    def text_before_caret(self) -> str:
        """Text up to the caret, pending suggestion excluded."""
        return self.document.text_before(self.caret)

    def pending_after_caret(self) -> tuple[int, int] | None:
        """``(block, run_index)`` of a pending run directly after a collapsed caret."""
        if not self.selection.collapsed:
            return None
        index = self.document.pending_at(self.caret)
        if index is None:
            return None
        return (self.caret.block, index)

    def pending_text(self) -> str:
        found = self.document.pending_runs()
        if not found:
            return ""
        block, index = found[0]
        return self.document.run(block, index).text

    def active_marks(self) -> dict[str, bool]:
        if self.marks is not None:
            return dict(self.marks)
        return self.document.marks_before(self.selection.start)

    def is_mark_active(self, mark: Mark) -> bool:
        if self.selection.collapsed:
            return self.active_marks().get(mark, False)
        return self.document.has_mark(self.selection.start, self.selection.end, mark)

    # ── Suggestions ──────────────────────────────────────────────

    def clear_pending(self) -> bool:
        """Delete any pending run wherever it sits. Returns True if one was removed."""
        found = self.document.pending_runs()
        for block, index in reversed(found):
            self._delete_run_keeping_caret(block, index)
        return bool(found)

    def _delete_run_keeping_caret(self, block: int, index: int) -> None:
        start = self.document.blocks[block].run_start(index)
        length = len(self.document.run(block, index).text)
        anchor, focus = (
            self._shift_after_delete(p, block, start, length) for p in (self.selection.anchor, self.selection.focus)
        )
        self.apply(DeleteRun(block=block, index=index))
        if (anchor, focus) != (self.selection.anchor, self.selection.focus):
            self.apply(SetSelection(selection=Selection(anchor=anchor, focus=focus)))

    @staticmethod
    def _shift_after_delete(point: Point, block: int, start: int, length: int) -> Point:
        if point.block != block or point.offset <= start:
            return point
        return Point(block=block, offset=max(start, point.offset - length))

    def insert_suggestion(self, text: str) -> None:
        """Insert ``text`` as the pending run at the caret. The caret stays before it."""
        if not self.selection.collapsed:
            raise DocumentError("Suggestions can only be inserted at a collapsed caret")
        self.clear_pending()
        caret = self.caret
        self.apply(InsertRun(point=caret, run=TextRun(text=text, pending=True)))
        self._select(caret)

    def accept_suggestion(self) -> str:
        """Turn the pending run after the caret into ordinary text and jump past it."""
        found = self.pending_after_caret()
        if found is None:
            raise DocumentError("No pending suggestion at the caret")
        block, index = found
        text = self.document.run(block, index).text
        caret = self.caret
        self.apply(UpdateRun(block=block, index=index, pending=False))
        self._select(caret.moved(len(text)))
        self.marks = None
        return text

    def accept_character(self, character: str) -> None:
        """Accept one leading character of the pending run as typed text."""
        found = self.pending_after_caret()
        if found is None:
            raise DocumentError("No pending suggestion at the caret")
        block, index = found
        if not self.document.run(block, index).text.startswith(character):
            raise DocumentError(f"Pending suggestion does not start with {character!r}")
        caret = self.caret
        marks = self.active_marks()
        self.apply(DeleteRange(start=caret, end=caret.moved(len(character))))
        self.apply(InsertRun(point=caret, run=TextRun(text=character, **marks)))
        self._select(caret.moved(len(character)))

    def reject_suggestion(self) -> str:
        """Remove the pending run after the caret."""
        found = self.pending_after_caret()
        if found is None:
            raise DocumentError("No pending suggestion at the caret")
        block, index = found
        text = self.document.run(block, index).text
        self.apply(DeleteRun(block=block, index=index))
        return text

    # ── Ordinary editing ─────────────────────────────────────────

    def delete_selection(self) -> bool:
        if self.selection.collapsed:
            return False
        start, end = self.selection.start, self.selection.end
        self.apply(DeleteRange(start=start, end=end))
        self._select(start)
        return True

    def insert_text(self, text: str) -> None:
        marks = self.active_marks()
        self.delete_selection()
        caret = self.caret
        self.apply(InsertRun(point=caret, run=TextRun(text=text, **marks)))
        self._select(caret.moved(len(text)))

    def split_block(self) -> None:
        self.delete_selection()
        caret = self.caret
        self.apply(SplitBlock(point=caret))
        self._select(Point(block=caret.block + 1, offset=0))

    def delete_backward(self) -> None:
        if self.delete_selection():
            return
        caret = self.caret
        if caret.offset > 0:
            start = caret.moved(-1)
        elif caret.block > 0:
            start = Point(block=caret.block - 1, offset=self.document.blocks[caret.block - 1].length)
        else:
            return
        self.apply(DeleteRange(start=start, end=caret))
        self._select(start)

    def delete_forward(self) -> None:
        if self.delete_selection():
            return
        caret = self.caret
        if caret.offset < self.document.blocks[caret.block].length:
            end = caret.moved(1)
        elif caret.block < len(self.document.blocks) - 1:
            end = Point(block=caret.block + 1, offset=0)
        else:
            return
        self.apply(DeleteRange(start=caret, end=end))

    def move(self, key: str, extend: bool = False) -> None:
        """Move the caret for an arrow/Home/End key. ``extend`` grows the selection."""
        focus = self.caret
        blocks = self.document.blocks
        if key == "ArrowLeft":
            if not extend and not self.selection.collapsed:
                target = self.selection.start
            elif focus.offset > 0:
                target = focus.moved(-1)
            elif focus.block > 0:
                target = Point(block=focus.block - 1, offset=blocks[focus.block - 1].length)
            else:
                target = focus
        elif key == "ArrowRight":
            if not extend and not self.selection.collapsed:
                target = self.selection.end
            elif focus.offset < blocks[focus.block].length:
                target = focus.moved(1)
            elif focus.block < len(blocks) - 1:
                target = Point(block=focus.block + 1, offset=0)
            else:
                target = focus
        elif key == "ArrowUp":
            target = self.document.clamp(Point(block=focus.block - 1, offset=focus.offset)) if focus.block > 0 else Point(block=0, offset=0)
        elif key == "ArrowDown":
            if focus.block < len(blocks) - 1:
                target = self.document.clamp(Point(block=focus.block + 1, offset=focus.offset))
            else:
                target = Point(block=focus.block, offset=blocks[focus.block].length)
        elif key == "Home":
            target = Point(block=focus.block, offset=0)
        elif key == "End":
            target = Point(block=focus.block, offset=blocks[focus.block].length)
        else:
            return

        anchor = self.selection.anchor if extend else target
        selection = Selection(anchor=anchor, focus=target)
        if selection != self.selection:
            self.apply(SetSelection(selection=selection))
            self.marks = None

    def toggle_mark(self, mark: Mark) -> None:
        """Bold/italic toggle: applies to a range, or to the next typed text at a caret."""
        active = self.is_mark_active(mark)
        if self.selection.collapsed:
            marks = self.active_marks()
            marks[mark] = not active
            self.marks = marks
            return
        self.apply(SetMark(start=self.selection.start, end=self.selection.end, mark=mark, value=not active))

    def handle_default(self, press: KeyPress) -> None:
        """Perform the ordinary editing action of a keystroke."""
        if press.is_character:
            self.insert_text(press.key)
        elif press.is_shortcut:
            return
        elif press.key == "Enter":
            self.split_block()
        elif press.key == "Backspace":
            self.delete_backward()
        elif press.key == "Delete":
            self.delete_forward()
        elif press.key in ("ArrowLeft", "ArrowRight", "ArrowUp", "ArrowDown", "Home", "End"):
            self.move(press.key, extend=press.shift)

    # ── History ──────────────────────────────────────────────────

    def snapshot(self) -> Snapshot:
        return Snapshot(self.document, self.selection, self.version)

    def remember(self, snapshot: Snapshot) -> None:
        """Push a state the user can return to with ``undo``."""
        self._history.append(snapshot)
        del self._history[:-HISTORY_LIMIT]

    @property
    def can_undo(self) -> bool:
        return bool(self._history)

    def undo(self) -> bool:
        """Restore the previous snapshot. A suggestion that was pending then is dropped."""
        if not self._history:
            return False
        previous = self._history.pop()
        logger.debug("Undo to buffer version %d", previous.version)
        self.document = previous.document
        self.selection = previous.selection
        self.version += 1
        self.marks = None
        self.clear_pending()
        return True
