#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdtex/parsers/markdown.py
"""Markdown to event stream parser.

This module adapts the token tree produced by mistune into the flat
``(Event, SourceRange)`` stream consumed by the LaTeX renderer. mistune
does not report source positions, so they are reconstructed by a
:class:`SourceLocator` that walks the text forward in step with the tokens.

Leaf fragments (text, code spans, HTML, code block lines) receive exact
ranges whenever they can be found verbatim in the source. A fragment that
cannot be found receives an empty range at the current position; the
renderer then treats it as uncorrelatable and leaves it unchanged.
Structural events carry an empty range at the current position.

"""

from __future__ import annotations

import html
import logging
import re
from typing import Any, Iterator

from mdtex import events as ev
from mdtex.constants import DEPS_MARKDOWN
from mdtex.events import Event, LinkType, SourceRange, Tag, TagKind
from mdtex.exceptions import MdtexError, ParsingError
from mdtex.options.markdown import MarkdownParserOptions
from mdtex.parsers.base import BaseParser
from mdtex.utils.decorators import requires_dependencies

logger = logging.getLogger(__name__)

_BACKTICK_RUN = re.compile(r"`+")
_LINE_ENDINGS = re.compile(r"\r\n?")

EventStream = Iterator[tuple[Event, SourceRange]]


def normalize_line_endings(text: str) -> str:
    r"""Convert ``\r\n`` and ``\r`` line endings to ``\n``.

    mistune normalizes line endings internally, so offsets only agree with
    its view of the text after the same normalization.
    """
    return _LINE_ENDINGS.sub("\n", text)


def _normalize_code_span(content: str) -> str:
    content = content.replace("\n", " ")
    if content.strip() and content.startswith(" ") and content.endswith(" "):
        return content[1:-1]
    return content


def _link_destination(tail: str) -> str:
    """Return the destination part of ``destination "title"``."""
    tail = tail.strip()
    if tail.startswith("<"):
        closing = tail.find(">")
        return tail[1:closing] if closing >= 0 else tail[1:]
    return tail.split(maxsplit=1)[0] if tail else ""


class SourceLocator:
    """Forward-only cursor that maps fragments back to source offsets.

    Parameters
    ----------
    source : str
        Text handed to the markdown parser

    """

    def __init__(self, source: str):
        self.source = source
        self.cursor = 0

    def here(self) -> SourceRange:
        """Return an empty range at the cursor."""
        return SourceRange(self.cursor, self.cursor)

    def find(self, fragment: str) -> SourceRange:
        """Locate ``fragment`` at or after the cursor and advance past it."""
        if not fragment:
            return self.here()
        index = self.source.find(fragment, self.cursor)
        if index < 0:
            logger.debug("Could not locate fragment %r after offset %d", fragment[:40], self.cursor)
            return self.here()
        self.cursor = index + len(fragment)
        return SourceRange(index, self.cursor)

    def find_code_span(self, content: str) -> tuple[str, SourceRange]:
        """Locate a code span whose normalized content matches ``content``.

        Returns
        -------
        tuple[str, SourceRange]
            Content as written in the source (normalized as CommonMark does)
            and the range of the whole span including its backtick runs.

        """
        source = self.source
        candidates = {content, html.unescape(content)}
        pos = self.cursor
        while True:
            opener = _BACKTICK_RUN.search(source, pos)
            if opener is None:
                logger.debug("Could not locate code span %r after offset %d", content[:40], self.cursor)
                return content, self.here()
            closer = re.compile(r"(?<!`)" + opener.group(0) + r"(?!`)").search(source, opener.end())
            if closer is not None:
                inner = _normalize_code_span(source[opener.end() : closer.start()])
                if inner in candidates:
                    self.cursor = closer.end()
                    return inner, SourceRange(opener.start(), closer.end())
            pos = opener.end()

    def next_opener(self) -> str | None:
        """Return ``"<"`` or ``"["``, whichever link opener comes first."""
        bracket = self.source.find("[", self.cursor)
        angle = self.source.find("<", self.cursor)
        if angle >= 0 and (bracket < 0 or angle < bracket):
            return "<"
        return "[" if bracket >= 0 else None

    def skip_past(self, char: str) -> int:
        """Advance past the next ``char`` and return its offset, or -1."""
        index = self.source.find(char, self.cursor)
        if index >= 0:
            self.cursor = index + 1
        return index

    def skip_bracketed(self, opener: str) -> int:
        """Advance past ``opener`` and its balanced closing ``]``.

        Returns the offset of the opener, or -1 when it is not found.
        """
        source = self.source
        start = source.find(opener, self.cursor)
        if start < 0:
            return -1
        depth = 0
        pos = start + len(opener) - 1
        while pos < len(source):
            char = source[pos]
            if char == "\\":
                pos += 2
                continue
            if char == "[":
                depth += 1
            elif char == "]":
                depth -= 1
                if depth == 0:
                    self.cursor = pos + 1
                    return start
            pos += 1
        return start

    def link_tail_type(self) -> LinkType:
        """Classify the destination that follows a closing ``]`` at the cursor."""
        if self.source.startswith("(", self.cursor):
            return LinkType.INLINE
        return LinkType.REFERENCE

    def skip_link_tail(self) -> str | None:
        """Advance past ``(destination "title")`` or a ``[label]`` after the cursor.

        Returns
        -------
        str or None
            Destination of an inline tail exactly as written in the source,
            or None for reference tails and unterminated inline tails

        """
        source = self.source
        if source.startswith("[", self.cursor):
            self.skip_past("]")
            return None
        if not source.startswith("(", self.cursor):
            return None

        pos = self.cursor + 1
        depth = 0
        quote: str | None = None
        while pos < len(source):
            char = source[pos]
            if char == "\\":
                pos += 2
                continue
            if quote:
                if char == quote:
                    quote = None
            elif char == "<" and not source[self.cursor + 1 : pos].strip():
                closing = source.find(">", pos)
                if closing < 0:
                    break
                pos = closing
            elif char in "\"'" and source[pos - 1].isspace():
                quote = char
            elif char == "(":
                depth += 1
            elif char == ")":
                if depth == 0:
                    tail = source[self.cursor + 1 : pos]
                    self.cursor = pos + 1
                    return _link_destination(tail)
                depth -= 1
            pos += 1
        return None


class MarkdownEventParser(BaseParser):
    r"""Convert preprocessed markdown into an ``(Event, SourceRange)`` stream.

    Parameters
    ----------
    options : MarkdownParserOptions or None, default = None
        Parser configuration options

    Examples
    --------
        >>> parser = MarkdownEventParser()
        >>> [event.kind.value for event, _ in parser.events("Hello *world*")]
        ['start', 'text', 'start', 'text', 'end', 'end']

    Notes
    -----
    Footnote definitions are reported as an empty START/END pair per
    definition at the end of the stream, where mistune places them. Image
    alt text is not reported.

    """

    def __init__(self, options: MarkdownParserOptions | None = None):
        BaseParser._validate_options_type(options, MarkdownParserOptions, "markdown")
        options = options or MarkdownParserOptions()
        super().__init__(options)
        self.options: MarkdownParserOptions = options
        self._locator = SourceLocator("")

        self._block_handlers = {
            "paragraph": self._paragraph,
            "block_text": self._block_text,
            "heading": self._heading,
            "block_code": self._code_block,
            "block_quote": self._block_quote,
            "list": self._list,
            "list_item": self._list_item,
            "task_list_item": self._list_item,
            "thematic_break": self._thematic_break,
            "block_html": self._html,
            "table": self._table,
            "table_head": self._table_head,
            "table_body": self._table_body,
            "table_row": self._table_row,
            "table_cell": self._table_cell,
            "footnotes": self._footnotes,
            "footnote_item": self._footnote_item,
        }
        self._inline_handlers = {
            "text": self._text,
            "emphasis": self._emphasis,
            "strong": self._strong,
            "strikethrough": self._strikethrough,
            "codespan": self._codespan,
            "link": self._link,
            "image": self._image,
            "softbreak": self._soft_break,
            "linebreak": self._hard_break,
            "inline_html": self._html,
            "footnote_ref": self._footnote_ref,
        }

    @requires_dependencies("markdown", DEPS_MARKDOWN)
    def events(self, text: str) -> EventStream:
        """Parse ``text`` and return its event stream.

        Parameters
        ----------
        text : str
            Markdown text with ``\n`` line endings

        Returns
        -------
        Iterator[tuple[Event, SourceRange]]
            Events in document order

        Raises
        ------
        ParsingError
            If mistune fails on the input

        """
        import mistune

        try:
            markdown = mistune.create_markdown(plugins=self.options.plugin_names(), renderer=None)
            tokens, _state = markdown.parse(text)
        except MdtexError:
            raise
        except Exception as e:
            raise ParsingError(f"Failed to parse markdown: {e}", parsing_stage="tokenize", original_error=e) from e

        self._locator = SourceLocator(text)
        return self._walk(tokens if isinstance(tokens, list) else [])

    def _walk(self, tokens: list[dict[str, Any]]) -> EventStream:
        for token in tokens:
            token_type = token.get("type", "")
            handler = self._block_handlers.get(token_type) or self._inline_handlers.get(token_type)
            if handler is None:
                if token_type != "blank_line":
                    logger.debug("Ignoring markdown token of type %r", token_type)
                continue
            yield from handler(token)

    def _container(self, tag: Tag, children: list[dict[str, Any]]) -> EventStream:
        yield ev.start(tag), self._locator.here()
        yield from self._walk(children)
        yield ev.end(tag), self._locator.here()

    # Block tokens

    def _paragraph(self, token: dict[str, Any]) -> EventStream:
        yield from self._container(Tag(TagKind.PARAGRAPH), token.get("children", []))

    def _block_text(self, token: dict[str, Any]) -> EventStream:
        # Tight list items hold inline content without a paragraph
        yield from self._walk(token.get("children", []))

    def _heading(self, token: dict[str, Any]) -> EventStream:
        level = token.get("attrs", {}).get("level", 1)
        if not isinstance(level, int) or not 1 <= level <= 6:
            level = 1
        yield from self._container(Tag(TagKind.HEADING, level=level), token.get("children", []))

    def _code_block(self, token: dict[str, Any]) -> EventStream:
        info = (token.get("attrs") or {}).get("info") or ""
        language = info.split(maxsplit=1)[0] if info.strip() else None
        tag = Tag(TagKind.CODE_BLOCK, language=language)

        yield ev.start(tag), self._locator.here()
        # Line by line, since indented blocks are not contiguous in the source
        for line in token.get("raw", "").splitlines(keepends=True):
            yield ev.text(line), self._locator.find(line)
        yield ev.end(tag), self._locator.here()

    def _block_quote(self, token: dict[str, Any]) -> EventStream:
        yield from self._container(Tag(TagKind.BLOCK_QUOTE), token.get("children", []))

    def _list(self, token: dict[str, Any]) -> EventStream:
        attrs = token.get("attrs", {})
        start = attrs.get("start", 1) if attrs.get("ordered", False) else None
        yield from self._container(Tag(TagKind.LIST, start=start), token.get("children", []))

    def _list_item(self, token: dict[str, Any]) -> EventStream:
        tag = Tag(TagKind.ITEM)
        yield ev.start(tag), self._locator.here()
        attrs = token.get("attrs") or {}
        if token.get("type") == "task_list_item" and "checked" in attrs:
            marker_start = self._locator.skip_bracketed("[")
            if marker_start >= 0:
                marker_range = SourceRange(marker_start, self._locator.cursor)
            else:
                marker_range = self._locator.here()
            yield ev.task_list_marker(bool(attrs["checked"])), marker_range
        yield from self._walk(token.get("children", []))
        yield ev.end(tag), self._locator.here()

    def _thematic_break(self, token: dict[str, Any]) -> EventStream:
        yield ev.rule(), self._locator.here()

    def _table(self, token: dict[str, Any]) -> EventStream:
        yield from self._container(Tag(TagKind.TABLE), token.get("children", []))

    def _table_head(self, token: dict[str, Any]) -> EventStream:
        yield from self._container(Tag(TagKind.TABLE_HEAD), token.get("children", []))

    def _table_body(self, token: dict[str, Any]) -> EventStream:
        yield from self._walk(token.get("children", []))

    def _table_row(self, token: dict[str, Any]) -> EventStream:
        yield from self._container(Tag(TagKind.TABLE_ROW), token.get("children", []))

    def _table_cell(self, token: dict[str, Any]) -> EventStream:
        yield from self._container(Tag(TagKind.TABLE_CELL), token.get("children", []))

    def _footnotes(self, token: dict[str, Any]) -> EventStream:
        yield from self._walk(token.get("children", []))

    def _footnote_item(self, token: dict[str, Any]) -> EventStream:
        attrs = token.get("attrs", {})
        tag = Tag(TagKind.FOOTNOTE_DEFINITION, label=str(attrs.get("key", attrs.get("label", ""))))
        yield ev.start(tag), self._locator.here()
        yield ev.end(tag), self._locator.here()

    # Inline tokens

    def _text(self, token: dict[str, Any]) -> EventStream:
        content = token.get("raw", "")
        if content:
            yield ev.text(content), self._locator.find(content)

    def _emphasis(self, token: dict[str, Any]) -> EventStream:
        yield from self._container(Tag(TagKind.EMPHASIS), token.get("children", []))

    def _strong(self, token: dict[str, Any]) -> EventStream:
        yield from self._container(Tag(TagKind.STRONG), token.get("children", []))

    def _strikethrough(self, token: dict[str, Any]) -> EventStream:
        yield from self._container(Tag(TagKind.STRIKETHROUGH), token.get("children", []))

    def _codespan(self, token: dict[str, Any]) -> EventStream:
        content, source_range = self._locator.find_code_span(token.get("raw", ""))
        yield ev.code(content), source_range

    def _html(self, token: dict[str, Any]) -> EventStream:
        content = token.get("raw", "")
        if content:
            yield ev.html(content), self._locator.find(content)

    def _soft_break(self, token: dict[str, Any]) -> EventStream:
        yield ev.soft_break(), self._locator.here()

    def _hard_break(self, token: dict[str, Any]) -> EventStream:
        yield ev.hard_break(), self._locator.here()

    def _footnote_ref(self, token: dict[str, Any]) -> EventStream:
        label = str(token.get("raw", (token.get("attrs") or {}).get("label", "")))
        start = self._locator.skip_bracketed("[^")
        source_range = SourceRange(start, self._locator.cursor) if start >= 0 else self._locator.here()
        yield ev.footnote_reference(label), source_range

    def _link(self, token: dict[str, Any]) -> EventStream:
        """Emit a link, preferring the destination as written for inline links.

        mistune percent-encodes link URLs; the LaTeX output keeps the
        destination from the source instead.
        """
        attrs = token.get("attrs", {})
        locator = self._locator
        url = attrs.get("url", "")

        if locator.next_opener() == "<":
            locator.skip_past("<")
            children = list(self._walk(token.get("children", [])))
            locator.skip_past(">")
            link_type = LinkType.EMAIL if url.startswith("mailto:") else LinkType.AUTOLINK
        else:
            locator.skip_past("[")
            children = list(self._walk(token.get("children", [])))
            locator.skip_past("]")
            link_type = locator.link_tail_type()
            destination = locator.skip_link_tail()
            if link_type is LinkType.INLINE and destination is not None:
                url = destination

        tag = Tag(
            TagKind.LINK,
            url=url,
            title=attrs.get("title"),
            link_type=link_type,
            label=token.get("label"),
        )
        yield ev.start(tag), locator.here()
        yield from children
        yield ev.end(tag), locator.here()

    def _image(self, token: dict[str, Any]) -> EventStream:
        attrs = token.get("attrs", {})
        locator = self._locator

        start = locator.skip_bracketed("![")
        link_type = locator.link_tail_type()
        locator.skip_link_tail()
        source_range = SourceRange(start, locator.cursor) if start >= 0 else locator.here()

        tag = Tag(
            TagKind.IMAGE,
            url=attrs.get("url", ""),
            title=attrs.get("title"),
            link_type=link_type,
            label=token.get("label"),
        )
        yield ev.start(tag), source_range
        yield ev.end(tag), source_range


__all__ = ["MarkdownEventParser", "SourceLocator", "normalize_line_endings"]
