"""
Topic text -> display blocks.

Markup is line based: **bold** (a whole **line** is a subheading),
"- " list items, "| a | b |" table rows ("|---|---|" rules are skipped),
empty line = line break. Each line is classified on its own.
"""
from __future__ import annotations

import re
from typing import Annotated, Iterator, Literal, Union

from pydantic import BaseModel, Field

BOLD_MARKER = "**"
LIST_PREFIX = "- "

_SEPARATOR_RULE = re.compile(r"^[\s|:\-]*-[\s|:\-]*$")


class Span(BaseModel):
    text: str
    emphasized: bool = False

    model_config = {"frozen": True}


class Subheading(BaseModel):
    kind: Literal["subheading"] = "subheading"
    text: str

    model_config = {"frozen": True}


class Paragraph(BaseModel):
    kind: Literal["paragraph"] = "paragraph"
    spans: tuple[Span, ...]

    model_config = {"frozen": True}

    @property
    def text(self) -> str:
        return "".join(s.text for s in self.spans)


class ListItem(BaseModel):
    kind: Literal["list_item"] = "list_item"
    text: str

    model_config = {"frozen": True}


class TableRow(BaseModel):
    kind: Literal["table_row"] = "table_row"
    cells: tuple[str, ...]

    model_config = {"frozen": True}


class LineBreak(BaseModel):
    kind: Literal["line_break"] = "line_break"

    model_config = {"frozen": True}


Block = Annotated[
    Union[Subheading, Paragraph, ListItem, TableRow, LineBreak],
    Field(discriminator="kind"),
]


def _table_cells(line: str) -> tuple[str, ...]:
    cells = [c.strip() for c in line.split("|")]
    while cells and not cells[0]:
        cells.pop(0)
    while cells and not cells[-1]:
        cells.pop()
    return tuple(cells)


def classify_line(line: str) -> Block | None:
    """Block for a single line; None for lines that render nothing (table rules)."""
    if line.startswith(BOLD_MARKER) and line.endswith(BOLD_MARKER):
        return Subheading(text=line.replace(BOLD_MARKER, ""))

    if BOLD_MARKER in line:
        spans = tuple(
            Span(text=part, emphasized=index % 2 == 1)
            for index, part in enumerate(line.split(BOLD_MARKER))
            if part
        )
        return Paragraph(spans=spans)

    stripped = line.strip()
    if stripped.startswith(LIST_PREFIX):
        return ListItem(text=stripped[len(LIST_PREFIX):])

    if "|" in line:
        if _SEPARATOR_RULE.match(line):
            return None
        cells = _table_cells(line)
        return TableRow(cells=cells) if cells else None

    if stripped:
        return Paragraph(spans=(Span(text=line),))

    return LineBreak()


def iter_blocks(text: str) -> Iterator[Block]:
    for line in text.split("\n"):
        block = classify_line(line)
        if block is not None:
            yield block


class TopicDocument:
    """Lazy and restartable: every iteration re-reads the text from the start."""

    def __init__(self, text: str) -> None:
        self.text = text

    def __iter__(self) -> Iterator[Block]:
        return iter_blocks(self.text)

    def blocks(self) -> list[Block]:
        return list(self)


def render_topic(text: str) -> TopicDocument:
    return TopicDocument(text)
