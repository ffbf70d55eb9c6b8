"""Immutable document model — blocks of styled text runs, points and selections.

Every edit returns a new ``Document``. Blocks are normalised after each edit:
empty runs are dropped, neighbouring runs with identical flags are merged and
a block always keeps at least one (possibly empty) run.

Positions are ``Point(block, offset)`` where ``offset`` counts characters in
the block's full text, pending suggestion text included.
"""

from __future__ import annotations

from typing import Iterable, Literal

from pydantic import BaseModel, ConfigDict, Field

from ghostpad.core.exceptions import DocumentError

Mark = Literal["bold", "italic"]
MARKS: tuple[Mark, ...] = ("bold", "italic")


class TextRun(BaseModel):
    """A stretch of text sharing the same style flags."""

    model_config = ConfigDict(frozen=True)

    text: str = ""
    bold: bool = False
    italic: bool = False
    pending: bool = False

    def same_flags(self, other: TextRun) -> bool:
        return (self.bold, self.italic, self.pending) == (other.bold, other.italic, other.pending)

    def with_text(self, text: str) -> TextRun:
        return self.model_copy(update={"text": text})


class Block(BaseModel):
    """A paragraph: an ordered sequence of runs."""

    model_config = ConfigDict(frozen=True)

    runs: tuple[TextRun, ...] = Field(default_factory=lambda: (TextRun(),))

    @property
    def text(self) -> str:
        return "".join(run.text for run in self.runs)

    @property
    def length(self) -> int:
        return sum(len(run.text) for run in self.runs)

    def run_offsets(self) -> list[tuple[int, TextRun]]:
        """Return ``(start_offset, run)`` for every run."""
        result = []
        pos = 0
        for run in self.runs:
            result.append((pos, run))
            pos += len(run.text)
        return result

    def run_start(self, index: int) -> int:
        return sum(len(run.text) for run in self.runs[:index])

    def split(self, offset: int) -> tuple[list[TextRun], list[TextRun]]:
        return split_runs(self.runs, offset)


def split_runs(runs: Iterable[TextRun], offset: int) -> tuple[list[TextRun], list[TextRun]]:
    """Split runs at a character offset, cutting the run that straddles it."""
    left: list[TextRun] = []
    right: list[TextRun] = []
    pos = 0
    for run in runs:
        end = pos + len(run.text)
        if end <= offset:
            left.append(run)
        elif pos >= offset:
            right.append(run)
        else:
            cut = offset - pos
            left.append(run.with_text(run.text[:cut]))
            right.append(run.with_text(run.text[cut:]))
        pos = end
    return left, right


def normalize_runs(runs: Iterable[TextRun]) -> tuple[TextRun, ...]:
    merged: list[TextRun] = []
    for run in runs:
        if not run.text:
            continue
        if merged and merged[-1].same_flags(run):
            merged[-1] = merged[-1].with_text(merged[-1].text + run.text)
        else:
            merged.append(run)
    return tuple(merged) or (TextRun(),)


class Point(BaseModel):
    """A caret position: block index plus character offset within the block."""

    model_config = ConfigDict(frozen=True)

    block: int = 0
    offset: int = 0

    @property
    def key(self) -> tuple[int, int]:
        return (self.block, self.offset)

    def __lt__(self, other: Point) -> bool:
        return self.key < other.key

    def __le__(self, other: Point) -> bool:
        return self.key <= other.key

    def moved(self, delta: int) -> Point:
        return Point(block=self.block, offset=self.offset + delta)


class Selection(BaseModel):
    """Anchor/focus pair. Collapsed when both points coincide (a plain caret)."""

    model_config = ConfigDict(frozen=True)

    anchor: Point = Field(default_factory=Point)
    focus: Point = Field(default_factory=Point)

    @classmethod
    def caret(cls, point: Point) -> Selection:
        return cls(anchor=point, focus=point)

    @property
    def collapsed(self) -> bool:
        return self.anchor == self.focus

    @property
    def start(self) -> Point:
        return min(self.anchor, self.focus, key=lambda p: p.key)

    @property
    def end(self) -> Point:
        return max(self.anchor, self.focus, key=lambda p: p.key)


class Document(BaseModel):
    """An ordered sequence of blocks."""

    model_config = ConfigDict(frozen=True)

    blocks: tuple[Block, ...] = Field(default_factory=lambda: (Block(),))

    # ── Construction & queries ───────────────────────────────────

    @classmethod
    def from_text(cls, text: str) -> Document:
        """Build a document with one plain block per line."""
        lines = text.split("\n")
        return cls(blocks=tuple(Block(runs=normalize_runs([TextRun(text=line)])) for line in lines))

    def plain_text(self, include_pending: bool = True) -> str:
        return "\n".join(self._block_text(block, include_pending) for block in self.blocks)

    def text_before(self, point: Point, include_pending: bool = False) -> str:
        """Plain text from the start of the document up to ``point``."""
        self.validate_point(point)
        parts = [self._block_text(block, include_pending) for block in self.blocks[: point.block]]
        left, _ = self.blocks[point.block].split(point.offset)
        parts.append("".join(r.text for r in left if include_pending or not r.pending))
        return "\n".join(parts)

    @staticmethod
    def _block_text(block: Block, include_pending: bool) -> str:
        return "".join(r.text for r in block.runs if include_pending or not r.pending)

    def end_point(self) -> Point:
        last = len(self.blocks) - 1
        return Point(block=last, offset=self.blocks[last].length)

    def validate_point(self, point: Point) -> None:
        if not 0 <= point.block < len(self.blocks):
            raise DocumentError(f"Block {point.block} out of range (document has {len(self.blocks)})")
        length = self.blocks[point.block].length
        if not 0 <= point.offset <= length:
            raise DocumentError(f"Offset {point.offset} out of range for block {point.block} (length {length})")

    def clamp(self, point: Point) -> Point:
        block = min(max(point.block, 0), len(self.blocks) - 1)
        offset = min(max(point.offset, 0), self.blocks[block].length)
        return Point(block=block, offset=offset)

    def pending_runs(self) -> list[tuple[int, int]]:
        """Return ``(block, run_index)`` of every pending run."""
        return [
            (b, i)
            for b, block in enumerate(self.blocks)
            for i, run in enumerate(block.runs)
            if run.pending
        ]

    def pending_at(self, point: Point) -> int | None:
        """Index of the pending run that starts exactly at ``point``, if any."""
        self.validate_point(point)
        for index, (start, run) in enumerate(self.blocks[point.block].run_offsets()):
            if run.pending and run.text and start == point.offset:
                return index
        return None

    def marks_before(self, point: Point) -> dict[str, bool]:
        """Marks of the ordinary run left of ``point``; typed text inherits these."""
        self.validate_point(point)
        left, _ = self.blocks[point.block].split(point.offset)
        for run in reversed(left):
            if not run.pending and run.text:
                return {"bold": run.bold, "italic": run.italic}
        return {"bold": False, "italic": False}

    def run(self, block: int, index: int) -> TextRun:
        try:
            return self.blocks[block].runs[index]
        except IndexError as e:
            raise DocumentError(f"No run {index} in block {block}") from e

    # ── Edits (each returns a new document) ──────────────────────

    def _replace_blocks(self, start: int, stop: int, new: Iterable[Block]) -> Document:
        return Document(blocks=self.blocks[:start] + tuple(new) + self.blocks[stop:])

    def insert_run(self, point: Point, run: TextRun) -> Document:
        self.validate_point(point)
        left, right = self.blocks[point.block].split(point.offset)
        block = Block(runs=normalize_runs(left + [run] + right))
        return self._replace_blocks(point.block, point.block + 1, [block])

    def delete_run(self, block: int, index: int) -> Document:
        self.run(block, index)
        runs = self.blocks[block].runs[:index] + self.blocks[block].runs[index + 1 :]
        return self._replace_blocks(block, block + 1, [Block(runs=normalize_runs(runs))])

    def update_run(self, block: int, index: int, **changes: object) -> Document:
        current = self.run(block, index)
        runs = list(self.blocks[block].runs)
        runs[index] = current.model_copy(update=changes)
        return self._replace_blocks(block, block + 1, [Block(runs=normalize_runs(runs))])

    def delete_range(self, start: Point, end: Point) -> Document:
        self.validate_point(start)
        self.validate_point(end)
        if end < start:
            start, end = end, start
        left, _ = self.blocks[start.block].split(start.offset)
        _, right = self.blocks[end.block].split(end.offset)
        merged = Block(runs=normalize_runs(left + right))
        return self._replace_blocks(start.block, end.block + 1, [merged])

    def split_block(self, point: Point) -> Document:
        self.validate_point(point)
        left, right = self.blocks[point.block].split(point.offset)
        return self._replace_blocks(
            point.block,
            point.block + 1,
            [Block(runs=normalize_runs(left)), Block(runs=normalize_runs(right))],
        )

    def set_mark(self, start: Point, end: Point, mark: Mark, value: bool) -> Document:
        """Set ``mark`` on every run between two points, splitting runs at the edges."""
        if mark not in MARKS:
            raise DocumentError(f"Unknown mark: {mark}")
        self.validate_point(start)
        self.validate_point(end)
        if end < start:
            start, end = end, start
        blocks = list(self.blocks)
        for b in range(start.block, end.block + 1):
            block = blocks[b]
            lo = start.offset if b == start.block else 0
            hi = end.offset if b == end.block else block.length
            head, rest = block.split(lo)
            middle, tail = split_runs(rest, hi - lo)
            middle = [run.model_copy(update={mark: value}) for run in middle]
            blocks[b] = Block(runs=normalize_runs(head + middle + tail))
        return Document(blocks=tuple(blocks))

    def has_mark(self, start: Point, end: Point, mark: Mark) -> bool:
        """True when every non-empty run in the range carries ``mark``."""
        if end < start:
            start, end = end, start
        found = False
        for b in range(start.block, end.block + 1):
            block = self.blocks[b]
            lo = start.offset if b == start.block else 0
            hi = end.offset if b == end.block else block.length
            _, rest = block.split(lo)
            middle, _ = split_runs(rest, hi - lo)
            for run in middle:
                if not run.text:
                    continue
                if not getattr(run, mark):
                    return False
                found = True
        return found
