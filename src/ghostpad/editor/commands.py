"""Editor commands — every change to the buffer is one of these, recorded in order."""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from ghostpad.models.document import Document, Mark, Point, Selection, TextRun


class _Command(BaseModel):
    model_config = ConfigDict(frozen=True)

    def apply(self, document: Document) -> Document:
        return document


class InsertRun(_Command):
    kind: Literal["insert-run"] = "insert-run"
    point: Point
    run: TextRun

    def apply(self, document: Document) -> Document:
        return document.insert_run(self.point, self.run)


class DeleteRun(_Command):
    kind: Literal["delete-run"] = "delete-run"
    block: int
    index: int

    def apply(self, document: Document) -> Document:
        return document.delete_run(self.block, self.index)


class DeleteRange(_Command):
    kind: Literal["delete-range"] = "delete-range"
    start: Point
    end: Point

    def apply(self, document: Document) -> Document:
        return document.delete_range(self.start, self.end)


class UpdateRun(_Command):
    kind: Literal["update-run"] = "update-run"
    block: int
    index: int
    pending: bool | None = None
    bold: bool | None = None
    italic: bool | None = None

    def apply(self, document: Document) -> Document:
        changes = {
            name: value
            for name, value in (("pending", self.pending), ("bold", self.bold), ("italic", self.italic))
            if value is not None
        }
        return document.update_run(self.block, self.index, **changes)


class SplitBlock(_Command):
    kind: Literal["split-block"] = "split-block"
    point: Point

    def apply(self, document: Document) -> Document:
        return document.split_block(self.point)


class SetMark(_Command):
    kind: Literal["set-mark"] = "set-mark"
    start: Point
    end: Point
    mark: Mark
    value: bool

    def apply(self, document: Document) -> Document:
        return document.set_mark(self.start, self.end, self.mark, self.value)


class SetSelection(_Command):
    """Moves the caret; leaves the document untouched."""

    kind: Literal["set-selection"] = "set-selection"
    selection: Selection


Command = Annotated[
    Union[InsertRun, DeleteRun, DeleteRange, UpdateRun, SplitBlock, SetMark, SetSelection],
    Field(discriminator="kind"),
]
