#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdtex/events.py
"""Markdown event model consumed by the LaTeX renderer.

A document is represented as a flat, ordered stream of events. Container
constructs (paragraphs, lists, emphasis, links...) open with a ``START``
event and close with a matching ``END`` event carrying an equal
:class:`Tag`. Leaf content arrives as ``TEXT``, ``CODE`` or ``HTML`` events.
Every event is paired with the :class:`SourceRange` it covers in the
preprocessed markdown text.

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple


class SourceRange(NamedTuple):
    """Half-open ``[start, end)`` range into the preprocessed text."""

    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start

    def shrink(self, amount: int) -> SourceRange:
        """Return the range with ``amount`` characters removed from both ends."""
        return SourceRange(self.start + amount, self.end - amount)


class TagKind(Enum):
    """Kinds of container constructs."""

    PARAGRAPH = "paragraph"
    HEADING = "heading"
    BLOCK_QUOTE = "block_quote"
    CODE_BLOCK = "code_block"
    LIST = "list"
    ITEM = "item"
    FOOTNOTE_DEFINITION = "footnote_definition"
    TABLE = "table"
    TABLE_HEAD = "table_head"
    TABLE_ROW = "table_row"
    TABLE_CELL = "table_cell"
    EMPHASIS = "emphasis"
    STRONG = "strong"
    STRIKETHROUGH = "strikethrough"
    LINK = "link"
    IMAGE = "image"


class LinkType(Enum):
    """How a link or image destination was written in the source."""

    INLINE = "inline"
    REFERENCE = "reference"
    AUTOLINK = "autolink"
    EMAIL = "email"


@dataclass(frozen=True)
class Tag:
    """A container construct and its attributes.

    Parameters
    ----------
    kind : TagKind
        The construct
    level : int, optional
        Heading level (1-6)
    start : int, optional
        First number of an ordered list; None for bullet lists
    language : str, optional
        Info string of a fenced code block
    url : str, optional
        Link or image destination
    title : str, optional
        Link or image title
    link_type : LinkType, optional
        Link or image syntax variant
    label : str, optional
        Footnote definition label or reference link label

    """

    kind: TagKind
    level: int | None = None
    start: int | None = None
    language: str | None = None
    url: str | None = None
    title: str | None = None
    link_type: LinkType | None = None
    label: str | None = None

    @property
    def is_ordered_list(self) -> bool:
        return self.kind is TagKind.LIST and self.start is not None


class EventKind(Enum):
    """Kinds of stream events."""

    START = "start"
    END = "end"
    TEXT = "text"
    CODE = "code"
    HTML = "html"
    SOFT_BREAK = "soft_break"
    HARD_BREAK = "hard_break"
    RULE = "rule"
    TASK_LIST_MARKER = "task_list_marker"
    FOOTNOTE_REFERENCE = "footnote_reference"


@dataclass(frozen=True)
class Event:
    """A single event of the markdown stream.

    Only the attributes relevant to ``kind`` are set: ``tag`` for START/END,
    ``text`` for TEXT/CODE/HTML, ``checked`` for TASK_LIST_MARKER and
    ``label`` for FOOTNOTE_REFERENCE.
    """

    kind: EventKind
    tag: Tag | None = None
    text: str | None = None
    checked: bool | None = None
    label: str | None = None


def start(tag: Tag) -> Event:
    return Event(EventKind.START, tag=tag)


def end(tag: Tag) -> Event:
    return Event(EventKind.END, tag=tag)


def text(content: str) -> Event:
    return Event(EventKind.TEXT, text=content)


def code(content: str) -> Event:
    return Event(EventKind.CODE, text=content)


def html(content: str) -> Event:
    return Event(EventKind.HTML, text=content)


def soft_break() -> Event:
    return Event(EventKind.SOFT_BREAK)


def hard_break() -> Event:
    return Event(EventKind.HARD_BREAK)


def rule() -> Event:
    return Event(EventKind.RULE)


def task_list_marker(checked: bool) -> Event:
    return Event(EventKind.TASK_LIST_MARKER, checked=checked)


def footnote_reference(label: str) -> Event:
    return Event(EventKind.FOOTNOTE_REFERENCE, label=label)


__all__ = [
    "Event",
    "EventKind",
    "LinkType",
    "SourceRange",
    "Tag",
    "TagKind",
    "code",
    "end",
    "footnote_reference",
    "hard_break",
    "html",
    "rule",
    "soft_break",
    "start",
    "task_list_marker",
    "text",
]
