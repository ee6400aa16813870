#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdtex/options/markdown.py
"""Configuration options for markdown parsing."""

from __future__ import annotations

from dataclasses import dataclass, field

from mdtex.options.base import BaseParserOptions


@dataclass(frozen=True)
class MarkdownParserOptions(BaseParserOptions):
    """Configuration options for markdown-to-event parsing.

    Each flag enables one mistune plugin. Constructs recognized through a
    plugin that the LaTeX renderer does not support (tables, footnotes) are
    still parsed so they can be reported and skipped as a unit.

    Parameters
    ----------
    parse_strikethrough : bool, default True
        Whether to parse strikethrough syntax (~~text~~).
    parse_task_lists : bool, default True
        Whether to parse task list checkboxes (- [ ] and - [x]).
    parse_tables : bool, default True
        Whether to parse table syntax (GFM pipe tables).
    parse_footnotes : bool, default True
        Whether to parse footnote references and definitions.

    """

    parse_strikethrough: bool = field(
        default=True,
        metadata={
            "help": "Parse strikethrough syntax (~~text~~)",
            "cli_name": "no-parse-strikethrough",
            "importance": "core",
        },
    )
    parse_task_lists: bool = field(
        default=True,
        metadata={
            "help": "Parse task list checkboxes (- [ ] and - [x])",
            "cli_name": "no-parse-task-lists",
            "importance": "core",
        },
    )
    parse_tables: bool = field(
        default=True,
        metadata={"help": "Parse table syntax (GFM pipe tables)", "cli_name": "no-parse-tables", "importance": "core"},
    )
    parse_footnotes: bool = field(
        default=True,
        metadata={
            "help": "Parse footnote references and definitions",
            "cli_name": "no-parse-footnotes",
            "importance": "core",
        },
    )

    def plugin_names(self) -> list[str]:
        """Return the mistune plugin names enabled by these options."""
        plugins: list[str] = []
        if self.parse_strikethrough:
            plugins.append("strikethrough")
        if self.parse_tables:
            plugins.append("table")
        if self.parse_footnotes:
            plugins.append("footnotes")
        if self.parse_task_lists:
            plugins.append("task_lists")
        return plugins
