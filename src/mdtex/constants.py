#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdtex/constants.py
"""Constants and default values for the mdtex library.

Constants are organized by category:
1. Type Definitions - Literal types and type aliases
2. Formatter - newline and indentation limits
3. LaTeX Output - command tables used by the renderer
4. Network and Packaging - download and archive defaults
5. Dependencies - optional third-party packages
"""

from __future__ import annotations

from typing import Literal

# =============================================================================
# Type Definitions
# =============================================================================

SoftBreakMode = Literal["hard", "space"]
ArchiveCompression = Literal["stored", "deflated"]
LatexEngine = Literal["pdflatex", "xelatex", "lualatex"]

# =============================================================================
# Formatter
# =============================================================================

# Hard ceiling on consecutive newlines emitted by a single flush
MAX_NEWLINES = 4

# Indentation never exceeds this many spaces regardless of nesting depth
MAX_INDENT = 32

DEFAULT_INDENT_WIDTH = 2

# Marker written in place of a disguised ``$$`` delimiter
MATH_DELIMITER = "$$"
MATH_MARKER = "``"

# Shortest text that can hold a non-empty ``$$x$$`` span
MIN_REPLACEABLE_LENGTH = 5

# =============================================================================
# LaTeX Output
# =============================================================================

# (command opener, trailing newline request) per heading level 1-4.
# Leading newline request is trailing + 1.
HEADING_COMMANDS: tuple[tuple[str, int], ...] = (
    (r"\section{", 2),
    (r"\subsection{", 2),
    (r"\subsubsection{", 2),
    (r"\paragraph{", 1),
)

# LaTeX enumerate counters are enumi..enumiv
LOWER_ROMAN: tuple[str, ...] = ("i", "ii", "iii", "iv")
MAX_ENUMERATE_NESTING = 4

CHECKED_BOX = r"[\checkedbox] "
UNCHECKED_BOX = r"[\uncheckedbox] "
LINE_BREAK = " \\\\"
HORIZONTAL_RULE = r"\par\noindent\hrulefill\par"
END_DOCUMENT = "\\end{document}\n"

DEFAULT_INCLUDE_PREAMBLE = True
DEFAULT_MATH_AWARE_ESCAPING = True
DEFAULT_SOFT_BREAK_MODE: SoftBreakMode = "hard"
DEFAULT_IMAGE_WIDTH = r"\textwidth"

# =============================================================================
# Network and Packaging
# =============================================================================

DEFAULT_REQUIRE_HTTPS = True
DEFAULT_NETWORK_TIMEOUT = 10.0
DEFAULT_MAX_REDIRECTS = 5
DEFAULT_MAX_ASSET_SIZE_BYTES = 50 * 1024 * 1024  # 50MB maximum per download
DEFAULT_USER_AGENT = "mdtex/0.1"

DEFAULT_MAIN_FILENAME = "main"
DEFAULT_FIGURES_DIR = "figures"
DEFAULT_ARCHIVE_COMPRESSION: ArchiveCompression = "stored"

# Output filenames are derived from the document title
DEFAULT_OUTPUT_STEM = "mdtex"
MIN_TITLE_STEM_LENGTH = 4
TITLE_WORDS_IN_FILENAME = 2

DEFAULT_LATEX_ENGINE: LatexEngine = "pdflatex"
DEFAULT_COMPILE_TIMEOUT = 120.0
DEFAULT_COMPILE_PASSES = 2

# =============================================================================
# Dependencies
# =============================================================================

# (install_name, import_name, version_spec)
DEPS_MARKDOWN = [("mistune", "mistune", ">=3.0.0")]
DEPS_NETWORK = [("httpx", "httpx", ">=0.28.1")]
