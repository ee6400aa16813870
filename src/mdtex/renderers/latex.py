#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdtex/renderers/latex.py
r"""LaTeX rendering from markdown event streams.

This module provides the LatexRenderer class which converts the event
stream of a preprocessed markdown document into LaTeX source. Inline math
written as ``$$...$$`` is disguised as a code span before parsing (see
:mod:`mdtex.preprocess`) and restored here as ``$...$``.

Tables and footnotes are not supported: they are reported and omitted.
Unresolved images are written as commented-out ``\includegraphics`` lines
so the document still compiles and the missing figures are easy to find.

"""

from __future__ import annotations

import logging
from io import StringIO
from pathlib import Path
from typing import IO, Callable, Iterable, Iterator, TextIO, Union

from mdtex.constants import (
    CHECKED_BOX,
    END_DOCUMENT,
    HEADING_COMMANDS,
    HORIZONTAL_RULE,
    LINE_BREAK,
    LOWER_ROMAN,
    MAX_ENUMERATE_NESTING,
    UNCHECKED_BOX,
)
from mdtex.events import Event, EventKind, LinkType, SourceRange, Tag, TagKind
from mdtex.exceptions import FileNotFoundError, MalformedEventStreamError, OutputWriteError
from mdtex.images import ImageCallback
from mdtex.options.latex import LatexRendererOptions
from mdtex.options.markdown import MarkdownParserOptions
from mdtex.parsers.markdown import MarkdownEventParser, normalize_line_endings
from mdtex.preprocess import MathSpanReplacer
from mdtex.renderers.base import BaseRenderer
from mdtex.renderers.formatter import LatexFormatter
from mdtex.utils.decorators import debug_timer
from mdtex.utils.escape import decode_entities, escape_latex
from mdtex.utils.io_utils import text_sink

logger = logging.getLogger(__name__)

DEFAULT_PREAMBLE_PATH = Path(__file__).parent.parent / "templates" / "preamble.tex"

# Constructs whose whole content is omitted
_SKIPPED_CONTAINERS = frozenset({TagKind.TABLE, TagKind.FOOTNOTE_DEFINITION})


class LatexRenderer(BaseRenderer):
    r"""Render markdown event streams to LaTeX.

    Parameters
    ----------
    options : LatexRendererOptions or None, default = None
        LaTeX rendering options
    parser_options : MarkdownParserOptions or None, default = None
        Options for the markdown parser used by :meth:`render`

    Examples
    --------
    Basic usage:

        >>> renderer = LatexRenderer(LatexRendererOptions(include_preamble=False))
        >>> renderer.render_to_string("Some *text* and $$x^2$$.")
        'Some \\emph{text} and $x^2$.\n'

    Resolving images:

        >>> renderer.render_to_string("![](a.png)", image_callback=lambda url: "figures/a.png")
        '\\includegraphics[width=\\textwidth]{figures/a.png}\n'

    """

    def __init__(
        self,
        options: LatexRendererOptions | None = None,
        parser_options: MarkdownParserOptions | None = None,
    ):
        """Initialize the LaTeX renderer with options."""
        BaseRenderer._validate_options_type(options, LatexRendererOptions, "latex")
        options = options or LatexRendererOptions()
        BaseRenderer.__init__(self, options)
        self.options: LatexRendererOptions = options
        self.parser = MarkdownEventParser(parser_options)

        self._formatter: LatexFormatter | None = None
        self._replacer = MathSpanReplacer([0])
        self._events: Iterator[tuple[Event, SourceRange]] = iter(())
        self._image_callback: ImageCallback | None = None
        self._enumerate_nesting = 0
        self._skip_depth = 0
        self._in_code_block = False
        self._code_line_open = False
        self._open_links: list[bool] = []

        self._start_handlers: dict[TagKind, Callable[[Tag, SourceRange], None]] = {
            TagKind.PARAGRAPH: self._start_paragraph,
            TagKind.HEADING: self._start_heading,
            TagKind.BLOCK_QUOTE: self._start_block_quote,
            TagKind.CODE_BLOCK: self._start_code_block,
            TagKind.LIST: self._start_list,
            TagKind.ITEM: self._start_item,
            TagKind.FOOTNOTE_DEFINITION: self._start_skipped,
            TagKind.TABLE: self._start_skipped,
            TagKind.TABLE_HEAD: self._ignore_tag,
            TagKind.TABLE_ROW: self._ignore_tag,
            TagKind.TABLE_CELL: self._ignore_tag,
            TagKind.EMPHASIS: self._start_emphasis,
            TagKind.STRONG: self._start_strong,
            TagKind.STRIKETHROUGH: self._start_strikethrough,
            TagKind.LINK: self._start_link,
            TagKind.IMAGE: self._start_image,
        }
        self._end_handlers: dict[TagKind, Callable[[Tag, SourceRange], None]] = {
            TagKind.PARAGRAPH: self._end_paragraph,
            TagKind.HEADING: self._end_heading,
            TagKind.BLOCK_QUOTE: self._end_block_quote,
            TagKind.CODE_BLOCK: self._end_code_block,
            TagKind.LIST: self._end_list,
            TagKind.ITEM: self._ignore_tag,
            TagKind.FOOTNOTE_DEFINITION: self._ignore_tag,
            TagKind.TABLE: self._ignore_tag,
            TagKind.TABLE_HEAD: self._ignore_tag,
            TagKind.TABLE_ROW: self._ignore_tag,
            TagKind.TABLE_CELL: self._ignore_tag,
            TagKind.EMPHASIS: self._close_group,
            TagKind.STRONG: self._close_group,
            TagKind.STRIKETHROUGH: self._close_group,
            TagKind.LINK: self._end_link,
            TagKind.IMAGE: self._end_image,
        }
        self._leaf_handlers: dict[EventKind, Callable[[Event, SourceRange], None]] = {
            EventKind.TEXT: self._text,
            EventKind.CODE: self._code,
            EventKind.HTML: self._html,
            EventKind.SOFT_BREAK: self._soft_break,
            EventKind.HARD_BREAK: self._hard_break,
            EventKind.RULE: self._rule,
            EventKind.TASK_LIST_MARKER: self._task_list_marker,
            EventKind.FOOTNOTE_REFERENCE: self._footnote_reference,
        }

    def load_preamble(self) -> str:
        r"""Return the preamble text, ending with ``\begin{document}``.

        Raises
        ------
        FileNotFoundError
            If a configured ``preamble_path`` does not exist

        """
        path = Path(self.options.preamble_path) if self.options.preamble_path else DEFAULT_PREAMBLE_PATH
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise FileNotFoundError(str(path), original_error=e) from e

    def render(
        self,
        markdown: str,
        output: Union[str, Path, IO[bytes], IO[str]],
        image_callback: ImageCallback | None = None,
    ) -> None:
        """Render markdown to LaTeX and write it to ``output``.

        Parameters
        ----------
        markdown : str
            Markdown source text, with ``$$...$$`` inline math
        output : str, Path, IO[bytes], or IO[str]
            Output destination
        image_callback : callable, optional
            Maps an image URL to the path to use in ``\\includegraphics``,
            or None to comment the image out. Called once per inline image
            in document order.

        Raises
        ------
        OutputWriteError
            If writing to ``output`` fails
        MalformedEventStreamError
            If an image start is not directly followed by its end

        """
        preprocessed, replacer = MathSpanReplacer.replace(normalize_line_endings(markdown))
        events = self.parser.events(preprocessed)

        file_path = str(output) if isinstance(output, (str, Path)) else None
        try:
            with text_sink(output) as sink:
                self.render_events(events, replacer, sink, image_callback)
        except OSError as e:
            raise OutputWriteError(file_path=file_path, original_error=e) from e

    def render_to_string(self, markdown: str, image_callback: ImageCallback | None = None) -> str:
        """Render markdown to a LaTeX string.

        Parameters
        ----------
        markdown : str
            Markdown source text
        image_callback : callable, optional
            See :meth:`render`

        Returns
        -------
        str
            LaTeX document (or body, without the preamble)

        """
        buffer = StringIO()
        self.render(markdown, buffer, image_callback)
        return buffer.getvalue()

    def render_events(
        self,
        events: Iterable[tuple[Event, SourceRange]],
        replacer: MathSpanReplacer,
        sink: TextIO,
        image_callback: ImageCallback | None = None,
    ) -> None:
        """Write LaTeX for an event stream to ``sink``.

        Parameters
        ----------
        events : iterable of (Event, SourceRange)
            Events over the preprocessed text, in document order
        replacer : MathSpanReplacer
            Replacement table created for the same preprocessed text
        sink : TextIO
            Destination; sink errors propagate unchanged
        image_callback : callable, optional
            See :meth:`render`

        """
        options = self.options
        formatter = LatexFormatter(sink, options.indent_width, options.math_aware_escaping)
        self._formatter = formatter
        self._replacer = replacer
        self._events = iter(events)
        self._image_callback = image_callback
        self._enumerate_nesting = 0
        self._skip_depth = 0
        self._in_code_block = False
        self._code_line_open = False
        self._open_links = []

        with debug_timer(logger, "Rendering LaTeX"):
            if options.include_preamble:
                formatter.write(self.load_preamble().rstrip("\n"))
                formatter.limit_newlines(2)
                formatter.add_newlines(2)

            for event, source_range in self._events:
                if self._skip_depth:
                    self._track_skipped(event)
                elif event.kind is EventKind.START:
                    assert event.tag is not None
                    self._start_handlers[event.tag.kind](event.tag, source_range)
                elif event.kind is EventKind.END:
                    assert event.tag is not None
                    self._end_handlers[event.tag.kind](event.tag, source_range)
                else:
                    self._leaf_handlers[event.kind](event, source_range)

            if options.include_preamble:
                formatter.limit_newlines(3)
                formatter.add_newlines(3)
                formatter.write(END_DOCUMENT)
            else:
                formatter.limit_newlines(1)
                formatter.add_newlines(1)
                formatter.finish()

    @property
    def formatter(self) -> LatexFormatter:
        if self._formatter is None:
            raise RuntimeError("render_events() has not been called")
        return self._formatter

    def _track_skipped(self, event: Event) -> None:
        if event.tag is None or event.tag.kind not in _SKIPPED_CONTAINERS:
            return
        if event.kind is EventKind.START:
            self._skip_depth += 1
        elif event.kind is EventKind.END:
            self._skip_depth -= 1

    # Block containers

    def _start_paragraph(self, tag: Tag, source_range: SourceRange) -> None:
        self.formatter.add_newlines(2)

    def _end_paragraph(self, tag: Tag, source_range: SourceRange) -> None:
        self.formatter.add_newlines(2)

    @staticmethod
    def _heading_command(tag: Tag) -> tuple[str, int]:
        level = min(max(tag.level or 1, 1), len(HEADING_COMMANDS))
        return HEADING_COMMANDS[level - 1]

    def _start_heading(self, tag: Tag, source_range: SourceRange) -> None:
        """Open a sectioning command.

        Levels deeper than 4 share the ``\\paragraph`` style.
        """
        command, trailing = self._heading_command(tag)
        self.formatter.add_newlines(trailing + 1)
        self.formatter.write(command)

    def _end_heading(self, tag: Tag, source_range: SourceRange) -> None:
        _command, trailing = self._heading_command(tag)
        self.formatter.write("}")
        self.formatter.add_newlines(trailing)
        # Consecutive headings get a single blank line between them
        self.formatter.limit_newlines(2)

    def _start_block_quote(self, tag: Tag, source_range: SourceRange) -> None:
        self.formatter.write_on_single_line(r"\begin{quote}")

    def _end_block_quote(self, tag: Tag, source_range: SourceRange) -> None:
        self.formatter.write_on_single_line(r"\end{quote}")

    def _start_code_block(self, tag: Tag, source_range: SourceRange) -> None:
        self.formatter.write_on_single_line(r"\begin{verbatim}")
        self.formatter.limit_newlines(1)
        self._in_code_block = True

    def _end_code_block(self, tag: Tag, source_range: SourceRange) -> None:
        # Indented blocks lose the newline after their last line
        if self._code_line_open:
            self.formatter.write("\n")
        self.formatter.write(r"\end{verbatim}")
        self.formatter.add_newlines(1)
        self._in_code_block = False
        self._code_line_open = False

    def _start_list(self, tag: Tag, source_range: SourceRange) -> None:
        """Open an itemize or enumerate environment.

        An ordered list starting at a number other than 1 resets the
        enumerate counter of its nesting depth. LaTeX has only four such
        counters, so deeper lists always start at 1.
        """
        formatter = self.formatter
        if tag.start is None:
            formatter.write_on_single_line(r"\begin{itemize}")
            formatter.increase_indent()
            formatter.increase_indent()
            return

        formatter.write_on_single_line(r"\begin{enumerate}")
        formatter.increase_indent()
        if tag.start != 1 and self._enumerate_nesting < MAX_ENUMERATE_NESTING:
            counter = LOWER_ROMAN[self._enumerate_nesting]
            formatter.write_on_single_line(rf"\setcounter{{enum{counter}}}{{{tag.start - 1}}}")
        formatter.increase_indent()
        self._enumerate_nesting += 1

    def _end_list(self, tag: Tag, source_range: SourceRange) -> None:
        formatter = self.formatter
        formatter.decrease_indent()
        formatter.decrease_indent()
        if tag.start is None:
            formatter.write_on_single_line(r"\end{itemize}")
        else:
            formatter.write_on_single_line(r"\end{enumerate}")
            self._enumerate_nesting = max(0, self._enumerate_nesting - 1)

    def _start_item(self, tag: Tag, source_range: SourceRange) -> None:
        formatter = self.formatter
        formatter.add_newlines(1)
        formatter.decrease_indent()
        formatter.write(r"\item ")
        formatter.increase_indent()
        # Item content follows the marker on the same line
        formatter.limit_newlines(0)

    def _start_skipped(self, tag: Tag, source_range: SourceRange) -> None:
        if tag.kind is TagKind.TABLE:
            logger.warning("Ignoring table (tables are not supported)")
        else:
            logger.warning("Ignoring footnote definition %r (footnotes are not supported)", tag.label)
        self._skip_depth = 1

    def _ignore_tag(self, tag: Tag, source_range: SourceRange) -> None:
        pass

    # Inline containers

    def _start_emphasis(self, tag: Tag, source_range: SourceRange) -> None:
        self.formatter.write(r"\emph{")

    def _start_strong(self, tag: Tag, source_range: SourceRange) -> None:
        self.formatter.write(r"\textbf{")

    def _start_strikethrough(self, tag: Tag, source_range: SourceRange) -> None:
        self.formatter.write(r"\sout{")

    def _close_group(self, tag: Tag, source_range: SourceRange) -> None:
        self.formatter.write("}")

    def _start_link(self, tag: Tag, source_range: SourceRange) -> None:
        """Open ``\\href`` for inline links.

        The URL is written as given; it is neither escaped nor un-replaced.
        Other link types keep their text but lose the hyperlink.
        """
        if tag.link_type is LinkType.INLINE:
            self.formatter.write(rf"\href{{{tag.url or ''}}}{{")
            self._open_links.append(True)
        else:
            link_type = tag.link_type.value if tag.link_type else "unknown"
            logger.warning("Ignoring %s link to %r (only inline links are supported)", link_type, tag.url)
            self._open_links.append(False)

    def _end_link(self, tag: Tag, source_range: SourceRange) -> None:
        if not self._open_links:
            raise MalformedEventStreamError("Link end without a matching link start", event=tag)
        if self._open_links.pop():
            self.formatter.write("}")

    def _start_image(self, tag: Tag, source_range: SourceRange) -> None:
        """Write ``\\includegraphics`` for an inline image.

        The image end must be the very next event.

        Raises
        ------
        MalformedEventStreamError
            If the next event is not the image end

        """
        if tag.link_type is LinkType.INLINE:
            formatter = self.formatter
            url = tag.url or ""
            formatter.add_newlines(1)
            path = self._image_callback(url) if self._image_callback else None
            if path is None:
                logger.debug("Image %r not resolved; commenting it out", url)
                formatter.write("%")
                path = url
            formatter.write(rf"\includegraphics[width={self.options.image_width}]{{{path}}}")
            formatter.add_newlines(1)
        else:
            link_type = tag.link_type.value if tag.link_type else "unknown"
            logger.warning("Ignoring %s image %r (only inline images are supported)", link_type, tag.url)

        following = next(self._events, None)
        if following is None:
            raise MalformedEventStreamError(f"Unclosed image {tag.url!r} at end of stream", event=tag)
        next_event = following[0]
        if next_event.kind is not EventKind.END or next_event.tag is None or next_event.tag.kind is not TagKind.IMAGE:
            raise MalformedEventStreamError(
                f"Unclosed image {tag.url!r}: expected image end, got {next_event.kind.value}", event=next_event
            )

    def _end_image(self, tag: Tag, source_range: SourceRange) -> None:
        raise MalformedEventStreamError(f"Image end without a matching image start ({tag.url!r})", event=tag)

    # Leaves

    def _text(self, event: Event, source_range: SourceRange) -> None:
        """Write a text fragment.

        Disguised delimiters are restored against the fragment as located in
        the source, before character references are decoded. Code block
        lines are written verbatim.
        """
        content = self._replacer.un_replace(event.text or "", source_range)
        if self._in_code_block:
            self.formatter.write(content)
            if content:
                self._code_line_open = not content.endswith("\n")
        else:
            self.formatter.write_escaped(decode_entities(content))

    def _code(self, event: Event, source_range: SourceRange) -> None:
        """Write a code span, or inline math if it was a disguised ``$$`` span."""
        replacer = self._replacer
        content = event.text or ""
        start, end = source_range

        # Delimiters (and any stripped padding) are equally wide on both sides
        padding = source_range.length - len(content)
        inner = source_range.shrink(padding // 2) if padding >= 0 and padding % 2 == 0 else source_range

        if replacer.is_replacement_point(start) and source_range.length > 4 and replacer.is_replacement_point(end - 2):
            math = replacer.un_replace(content, inner)
            self.formatter.write(f"${math}$")
        else:
            code = replacer.un_replace(content, inner)
            self.formatter.write(rf"\texttt{{{escape_latex(code)}}}")

    def _html(self, event: Event, source_range: SourceRange) -> None:
        logger.info("Found HTML; including it as typewriter text")
        content = self._replacer.un_replace(event.text or "", source_range)
        self.formatter.write(rf"\texttt{{{escape_latex(content)}}}")

    def _soft_break(self, event: Event, source_range: SourceRange) -> None:
        if self.options.soft_break_mode == "hard":
            self.formatter.write(LINE_BREAK)
        self.formatter.add_newlines(1)

    def _hard_break(self, event: Event, source_range: SourceRange) -> None:
        self.formatter.write(LINE_BREAK)
        self.formatter.add_newlines(1)

    def _rule(self, event: Event, source_range: SourceRange) -> None:
        self.formatter.write(HORIZONTAL_RULE)

    def _task_list_marker(self, event: Event, source_range: SourceRange) -> None:
        self.formatter.write(CHECKED_BOX if event.checked else UNCHECKED_BOX)
        self.formatter.limit_newlines(0)

    def _footnote_reference(self, event: Event, source_range: SourceRange) -> None:
        logger.warning("Ignoring footnote reference %r (footnotes are not supported)", event.label)


__all__ = ["DEFAULT_PREAMBLE_PATH", "ImageCallback", "LatexRenderer"]
