#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# tests/unit/renderers/test_latex_renderer.py
"""Unit tests for LaTeX rendering from markdown event streams.

Tests cover:
- Complete documents with and without the preamble
- Headings, lists, code blocks, quotes and inline formatting
- Inline math restored from disguised code spans
- Image resolution and malformed image streams
- Unsupported constructs reported and skipped

"""

import logging
from io import BytesIO, StringIO
from pathlib import Path

import pytest

from mdtex import events as ev
from mdtex.events import LinkType, SourceRange, Tag, TagKind
from mdtex.exceptions import FileNotFoundError, InvalidOptionsError, MalformedEventStreamError
from mdtex.images import RecordingResolver
from mdtex.options import LatexRendererOptions, MarkdownParserOptions
from mdtex.preprocess import MathSpanReplacer
from mdtex.renderers.latex import DEFAULT_PREAMBLE_PATH, LatexRenderer


def render_body(markdown: str, **option_kwargs) -> str:
    """Render markdown without the preamble.

    Parameters
    ----------
    markdown : str
        Markdown source
    **option_kwargs
        Extra LatexRendererOptions fields

    Returns
    -------
    str
        LaTeX body

    """
    options = LatexRendererOptions(include_preamble=False, **option_kwargs)
    return LatexRenderer(options).render_to_string(markdown)


def render_stream(stream: list, image_callback=None) -> str:
    """Render a hand-built event stream without the preamble.

    Events are laid out back to back, each with a range as long as its text.
    """
    renderer = LatexRenderer(LatexRendererOptions(include_preamble=False))
    buffer = StringIO()
    events = []
    offset = 0
    for event in stream:
        length = len(event.text or "")
        events.append((event, SourceRange(offset, offset + length)))
        offset += length
    renderer.render_events(events, MathSpanReplacer([offset]), buffer, image_callback)
    return buffer.getvalue()


@pytest.mark.unit
class TestDocumentFraming:
    """Test the preamble and document end."""

    def test_full_document(self) -> None:
        """Test a heading, emphasis and inline math in a complete document."""
        latex = LatexRenderer().render_to_string("# Title\n\nText with *emphasis* and $$m_a^{th}$$.")

        preamble = DEFAULT_PREAMBLE_PATH.read_text(encoding="utf-8").rstrip("\n")
        assert latex.startswith(preamble + "\n\n")
        assert r"\section{Title}" in latex
        assert r"\emph{emphasis}" in latex
        assert "$m_a^{th}$" in latex
        assert latex.endswith("\n\n\n\\end{document}\n")

    def test_body_only(self) -> None:
        """Test the exact body without preamble."""
        latex = render_body("# Title\n\nText with *emphasis* and $$m_a^{th}$$.")

        assert latex == "\\section{Title}\n\nText with \\emph{emphasis} and $m_a^{th}$.\n"

    def test_custom_preamble(self, tmp_path: Path) -> None:
        """Test framing with a preamble file."""
        preamble = tmp_path / "preamble.tex"
        preamble.write_text("\\documentclass{article}\n\\begin{document}\n\n", encoding="utf-8")

        options = LatexRendererOptions(preamble_path=str(preamble))
        latex = LatexRenderer(options).render_to_string("Hello")

        assert latex == "\\documentclass{article}\n\\begin{document}\n\nHello\n\n\n\\end{document}\n"

    def test_missing_preamble(self, tmp_path: Path) -> None:
        """Test that a missing preamble file is reported."""
        options = LatexRendererOptions(preamble_path=str(tmp_path / "nope.tex"))

        with pytest.raises(FileNotFoundError):
            LatexRenderer(options).render_to_string("Hello")

    def test_empty_document_body(self) -> None:
        """Test that an empty body renders to nothing."""
        assert render_body("") == ""

    def test_bundled_preamble_begins_document(self) -> None:
        """Test that the bundled preamble ends by opening the document."""
        preamble = LatexRenderer().load_preamble()

        assert preamble.rstrip().endswith(r"\begin{document}")
        assert r"\documentclass" in preamble

    def test_render_to_path_and_binary_stream(self, tmp_path: Path) -> None:
        """Test writing to a file path and to a bytes buffer."""
        renderer = LatexRenderer(LatexRendererOptions(include_preamble=False))
        output = tmp_path / "out.tex"
        renderer.render("Caf\u00e9 & co", output)
        buffer = BytesIO()
        renderer.render("Caf\u00e9 & co", buffer)

        assert output.read_text(encoding="utf-8") == "Caf\u00e9 \\& co\n"
        assert buffer.getvalue() == "Caf\u00e9 \\& co\n".encode("utf-8")

    def test_crlf_input(self) -> None:
        """Test that Windows line endings do not break math offsets."""
        assert render_body("a\r\n\r\n$$x_1$$ b") == "a\n\n$x_1$ b\n"

    def test_wrong_options_type(self) -> None:
        """Test that parser options are rejected as renderer options."""
        with pytest.raises(InvalidOptionsError):
            LatexRenderer(MarkdownParserOptions())  # type: ignore[arg-type]

    def test_formatter_unavailable_before_rendering(self) -> None:
        """Test that the formatter only exists during rendering."""
        with pytest.raises(RuntimeError):
            _ = LatexRenderer().formatter


@pytest.mark.unit
class TestHeadings:
    """Test sectioning commands."""

    @pytest.mark.parametrize(
        "markdown,expected",
        [
            ("# A", "\\section{A}\n"),
            ("## A", "\\subsection{A}\n"),
            ("### A", "\\subsubsection{A}\n"),
            ("#### A", "\\paragraph{A}\n"),
            ("###### A", "\\paragraph{A}\n"),
        ],
    )
    def test_heading_levels(self, markdown: str, expected: str) -> None:
        """Test each heading level."""
        assert render_body(markdown) == expected

    def test_consecutive_headings_get_one_blank_line(self) -> None:
        """Test that heading spacing is limited."""
        assert render_body("# A\n## B\n") == "\\section{A}\n\n\\subsection{B}\n"

    def test_paragraph_before_heading(self) -> None:
        """Test the wider gap before a section."""
        assert render_body("Text\n\n# A\n") == "Text\n\n\n\\section{A}\n"

    def test_heading_text_is_escaped(self) -> None:
        """Test escaping inside a heading."""
        assert render_body("# 100% & more") == "\\section{100\\% \\& more}\n"


@pytest.mark.unit
class TestInlineFormatting:
    """Test inline commands, code spans and math."""

    def test_emphasis_strong_strikethrough(self) -> None:
        """Test inline groups."""
        assert render_body("*a* **b** ~~c~~") == "\\emph{a} \\textbf{b} \\sout{c}\n"

    def test_code_span_is_texttt(self) -> None:
        """Test that an ordinary code span is typewriter text."""
        assert render_body("Use `code span` here") == "Use \\texttt{code span} here\n"

    def test_code_span_content_is_escaped(self) -> None:
        """Test escaping inside a code span."""
        assert render_body("`a_b{}`") == "\\texttt{a\\_b\\{\\}}\n"

    def test_code_span_with_dollars_is_not_math(self) -> None:
        """Test that dollars touching backticks stay literal code."""
        assert render_body("`$$`") == "\\texttt{\\$\\$}\n"

    def test_inline_math(self) -> None:
        """Test that math content is written unescaped."""
        assert render_body(r"Let $$\frac{a_1}{b}$$ and $$x^2$$ hold.") == "Let $\\frac{a_1}{b}$ and $x^2$ hold.\n"

    def test_text_is_escaped(self) -> None:
        """Test escaping of plain text."""
        assert render_body("Cost: 50% & #1") == "Cost: 50\\% \\& \\#1\n"

    def test_character_references_are_decoded(self) -> None:
        """Test that entities are written as the characters they stand for."""
        assert render_body("Tom &amp; Jerry &lt;3") == "Tom \\& Jerry <3\n"
        assert render_body("&#36;5 &copy; &bogus;") == "\\$5 \u00a9 \\&bogus;\n"

    def test_references_decoded_in_headings_and_links(self) -> None:
        """Test entity decoding inside headings and link text."""
        assert render_body("# Q&amp;A") == "\\section{Q\\&A}\n"
        assert render_body("[R&amp;D](https://example.com)") == "\\href{https://example.com}{R\\&D}\n"

    def test_references_kept_in_code(self) -> None:
        """Test that code spans show entities literally."""
        assert render_body("`&amp;`") == "\\texttt{\\&amp;}\n"

    def test_decoded_text_keeps_math(self) -> None:
        """Test that math restoration still works next to entities."""
        assert render_body("a &lt; $$x_1$$") == "a < $x_1$\n"

    def test_unterminated_math_is_closed(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test that a dangling delimiter does not break the document."""
        with caplog.at_level(logging.WARNING):
            latex = render_body("a $$b\n\nnext")

        assert latex == "a $b$\n\nnext\n"
        assert "Unterminated inline math" in caplog.text

    def test_math_oblivious_mode(self) -> None:
        """Test that disabling math-aware escaping still restores math spans."""
        assert render_body("$$x_1$$ costs $5", math_aware_escaping=False) == "$x_1$ costs \\$5\n"

    def test_html_is_typewriter_text(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test that HTML is shown literally and reported."""
        with caplog.at_level(logging.INFO, logger="mdtex.renderers.latex"):
            latex = render_body("a <b>x</b>")

        assert latex == "a \\texttt{<b>}x\\texttt{</b>}\n"
        assert "HTML" in caplog.text


@pytest.mark.unit
class TestLineBreaks:
    """Test soft breaks, hard breaks and rules."""

    def test_soft_break_hard_mode(self) -> None:
        """Test the default manual line break for soft breaks."""
        assert render_body("a\nb") == "a \\\\\nb\n"

    def test_soft_break_space_mode(self) -> None:
        """Test joining lines for soft breaks."""
        assert render_body("a\nb", soft_break_mode="space") == "a\nb\n"

    def test_hard_break(self) -> None:
        """Test that hard breaks ignore the soft break mode."""
        assert render_body("a  \nb", soft_break_mode="space") == "a \\\\\nb\n"

    def test_horizontal_rule(self) -> None:
        """Test a thematic break between paragraphs."""
        assert render_body("a\n\n---\n\nb") == "a\n\n\\par\\noindent\\hrulefill\\par\n\nb\n"


@pytest.mark.unit
class TestBlocks:
    """Test lists, quotes and code blocks."""

    def test_bullet_list(self) -> None:
        """Test an itemize environment."""
        assert render_body("- a\n- b\n") == "\\begin{itemize}\n  \\item a\n  \\item b\n\\end{itemize}\n"

    def test_ordered_list_starting_at_five(self) -> None:
        """Test that the enumerate counter is set before the first item."""
        latex = render_body("5. first\n6. second\n")

        assert latex == (
            "\\begin{enumerate}\n"
            "  \\setcounter{enumi}{4}\n"
            "  \\item first\n"
            "  \\item second\n"
            "\\end{enumerate}\n"
        )

    def test_ordered_list_starting_at_one(self) -> None:
        """Test that no counter is set for the default start."""
        latex = render_body("1. first\n2. second\n")

        assert "\\setcounter" not in latex
        assert latex.startswith("\\begin{enumerate}\n  \\item first")

    def test_nested_bullet_list(self) -> None:
        """Test indentation of nested lists."""
        latex = render_body("- a\n  - b\n")

        assert latex == (
            "\\begin{itemize}\n"
            "  \\item a\n"
            "    \\begin{itemize}\n"
            "      \\item b\n"
            "    \\end{itemize}\n"
            "\\end{itemize}\n"
        )

    def test_task_list(self) -> None:
        """Test checkbox markers."""
        latex = render_body("- [ ] todo\n- [x] done\n")

        assert latex == (
            "\\begin{itemize}\n"
            "  \\item [\\uncheckedbox] todo\n"
            "  \\item [\\checkedbox] done\n"
            "\\end{itemize}\n"
        )

    def test_code_block_is_verbatim(self) -> None:
        """Test that code block content is written without escaping."""
        latex = render_body("```python\nx = 1_000  # $$\n```\n")

        assert latex == "\\begin{verbatim}\nx = 1_000  # $$\n\\end{verbatim}\n"

    def test_indented_code_block_ends_its_last_line(self) -> None:
        """Test that the environment end is on its own line for indented blocks."""
        assert render_body("    indented $$x$$\n") == "\\begin{verbatim}\nindented $$x$$\n\\end{verbatim}\n"
        assert render_body("Text\n\n    a\n    b\n\nMore") == (
            "Text\n\n\\begin{verbatim}\na\nb\n\\end{verbatim}\n\nMore\n"
        )

    def test_block_quote(self) -> None:
        """Test a quote environment."""
        assert render_body("> quoted\n") == "\\begin{quote}\n\nquoted\n\n\\end{quote}\n"


@pytest.mark.unit
class TestEnumerateCounters:
    """Test counters of nested ordered lists with hand-built streams."""

    @staticmethod
    def nested_lists(starts: list[int]) -> list:
        """Build nested ordered lists with one item each."""
        opened = []
        for start in starts:
            opened += [ev.start(Tag(TagKind.LIST, start=start)), ev.start(Tag(TagKind.ITEM)), ev.text("x")]
        closed = []
        for start in reversed(starts):
            closed += [ev.end(Tag(TagKind.ITEM)), ev.end(Tag(TagKind.LIST, start=start))]
        return opened + closed

    def test_counter_per_depth(self) -> None:
        """Test that each depth resets its own counter."""
        latex = render_stream(self.nested_lists([1, 3, 1, 7]))

        assert "\\setcounter{enumi}" not in latex
        assert "\\setcounter{enumii}{2}" in latex
        assert "\\setcounter{enumiv}{6}" in latex

    def test_no_counter_beyond_four_levels(self) -> None:
        """Test that a fifth level cannot reset a counter."""
        latex = render_stream(self.nested_lists([1, 1, 1, 1, 9]))

        assert "\\setcounter" not in latex
        assert latex.count("\\begin{enumerate}") == 5

    def test_bullet_list_does_not_count(self) -> None:
        """Test that itemize nesting does not shift enumerate counters."""
        stream = [
            ev.start(Tag(TagKind.LIST)),
            ev.start(Tag(TagKind.ITEM)),
            *self.nested_lists([2]),
            ev.end(Tag(TagKind.ITEM)),
            ev.end(Tag(TagKind.LIST)),
        ]

        assert "\\setcounter{enumi}{1}" in render_stream(stream)

    def test_deep_indentation_is_bounded(self) -> None:
        """Test that twenty levels of nesting indent at most 32 spaces."""
        latex = render_stream(self.nested_lists([1] * 20))

        assert max(len(line) - len(line.lstrip(" ")) for line in latex.splitlines()) == 32


@pytest.mark.unit
class TestLinksAndImages:
    """Test hyperlinks and figures."""

    def test_inline_link(self) -> None:
        """Test that inline links become href with the raw URL."""
        assert render_body("[site](https://example.com/a_b)") == "\\href{https://example.com/a_b}{site}\n"

    def test_inline_link_url_is_not_percent_encoded(self) -> None:
        """Test that the destination is written as it appears in the source."""
        assert render_body("[café](https://example.com/café)") == "\\href{https://example.com/café}{café}\n"

    def test_reference_link_keeps_text(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test that non-inline links lose the hyperlink but keep their text."""
        with caplog.at_level(logging.WARNING):
            latex = render_body("[site][ref]\n\n[ref]: https://example.com\n")

        assert latex == "site\n"
        assert "reference link" in caplog.text

    def test_autolink_keeps_text(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test that autolinks are written as plain text."""
        with caplog.at_level(logging.WARNING):
            latex = render_body("<https://example.com>")

        assert latex == "https://example.com\n"
        assert "autolink" in caplog.text

    def test_image_without_callback_is_commented_out(self) -> None:
        """Test that unresolved images do not break compilation."""
        assert render_body("![alt](fig.png)") == "%\\includegraphics[width=\\textwidth]{fig.png}\n"

    def test_image_resolved_by_callback(self) -> None:
        """Test that the callback supplies the graphics path."""
        renderer = LatexRenderer(LatexRendererOptions(include_preamble=False, image_width="0.5\\linewidth"))
        latex = renderer.render_to_string("![alt](fig.png)", image_callback=lambda url: f"figures/{url}")

        assert latex == "\\includegraphics[width=0.5\\linewidth]{figures/fig.png}\n"

    def test_callback_returning_none(self) -> None:
        """Test that a callback can decline an image."""
        renderer = LatexRenderer(LatexRendererOptions(include_preamble=False))
        latex = renderer.render_to_string("![alt](fig.png)", image_callback=lambda url: None)

        assert latex.startswith("%\\includegraphics")

    def test_callback_called_once_per_image_in_order(self) -> None:
        """Test the order of image callback calls."""
        recorder = RecordingResolver()
        renderer = LatexRenderer(LatexRendererOptions(include_preamble=False))
        renderer.render_to_string("![](a.png) ![](b.png)\n\n![](a.png)", image_callback=recorder)

        assert recorder.urls == ["a.png", "b.png", "a.png"]
        assert recorder.unique_urls == ["a.png", "b.png"]

    def test_image_on_its_own_line(self) -> None:
        """Test that figures are separated from surrounding text."""
        latex = render_body("See ![x](a.png) here")

        assert "\n%\\includegraphics[width=\\textwidth]{a.png}\n" in latex

    def test_reference_image_is_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test that non-inline images are reported and omitted."""
        with caplog.at_level(logging.WARNING):
            latex = render_body("![x][img]\n\n[img]: a.png\n")

        assert "includegraphics" not in latex
        assert "reference image" in caplog.text

    def test_unclosed_image_raises(self) -> None:
        """Test that an image start must be followed by its end."""
        image = Tag(TagKind.IMAGE, url="a.png", link_type=LinkType.INLINE)

        with pytest.raises(MalformedEventStreamError):
            render_stream([ev.start(image), ev.text("alt"), ev.end(image)])

    def test_image_start_at_end_of_stream_raises(self) -> None:
        """Test an image start as the last event."""
        image = Tag(TagKind.IMAGE, url="a.png", link_type=LinkType.INLINE)

        with pytest.raises(MalformedEventStreamError):
            render_stream([ev.start(image)])

    def test_stray_image_end_raises(self) -> None:
        """Test an image end without a start."""
        with pytest.raises(MalformedEventStreamError):
            render_stream([ev.end(Tag(TagKind.IMAGE, url="a.png"))])

    def test_stray_link_end_raises(self) -> None:
        """Test a link end without a start."""
        with pytest.raises(MalformedEventStreamError):
            render_stream([ev.end(Tag(TagKind.LINK, url="x", link_type=LinkType.INLINE))])


@pytest.mark.unit
class TestUnsupportedConstructs:
    """Test constructs that are reported and skipped."""

    def test_table_is_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test that a table and all of its content is omitted."""
        with caplog.at_level(logging.WARNING):
            latex = render_body("| a | b |\n|---|---|\n| 1 | 2 |\n\nAfter")

        assert latex == "After\n"
        assert "Ignoring table" in caplog.text

    def test_footnotes_are_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test that footnote references and definitions are omitted."""
        with caplog.at_level(logging.WARNING):
            latex = render_body("Text[^1]\n\n[^1]: Note\n")

        assert latex == "Text\n"
        assert "footnote reference" in caplog.text
        assert "footnote definition" in caplog.text

    def test_nested_skipped_containers(self) -> None:
        """Test that skipping resumes only after the outermost container ends."""
        table = Tag(TagKind.TABLE)
        footnote = Tag(TagKind.FOOTNOTE_DEFINITION, label="n")
        stream = [
            ev.start(footnote),
            ev.start(table),
            ev.text("hidden"),
            ev.end(table),
            ev.text("still hidden"),
            ev.end(footnote),
            ev.text("shown"),
        ]

        assert render_stream(stream) == "shown\n"
