#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdtex/cli/builder.py
"""Argument parser construction for the mdtex CLI.

Option arguments are generated from the fields of the frozen options
dataclasses. Field metadata supplies the help text, an optional
``cli_name`` and ``choices``. Boolean fields that default to True become
``--no-...`` switches.

Generated arguments use ``argparse.SUPPRESS`` as their default, so only
options given on the command line appear in the parsed namespace and
configuration file values are not overridden by argparse defaults.
"""

from __future__ import annotations

import argparse
from dataclasses import MISSING, fields
from typing import Any, get_args

from mdtex import __version__
from mdtex.constants import DEFAULT_LATEX_ENGINE, LatexEngine
from mdtex.exceptions import (
    CompilationError,
    DependencyError,
    FileError,
    ParsingError,
    RenderingError,
    SecurityError,
    ValidationError,
)
from mdtex.options.base import CloneFrozenMixin
from mdtex.options.latex import LatexRendererOptions
from mdtex.options.markdown import MarkdownParserOptions

EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_DEPENDENCY_ERROR = 2
EXIT_VALIDATION_ERROR = 3
EXIT_FILE_ERROR = 4
EXIT_PARSING_ERROR = 6
EXIT_RENDERING_ERROR = 7
EXIT_SECURITY_ERROR = 8
EXIT_COMPILATION_ERROR = 11


def get_exit_code_for_exception(exception: Exception) -> int:
    """Map an exception to an appropriate CLI exit code.

    Parameters
    ----------
    exception : Exception
        The exception to map to an exit code

    Returns
    -------
    int
        The appropriate exit code for the exception type

    """
    if isinstance(exception, SecurityError):
        return EXIT_SECURITY_ERROR

    if isinstance(exception, (DependencyError, ImportError)):
        return EXIT_DEPENDENCY_ERROR

    if isinstance(exception, (ValidationError, argparse.ArgumentTypeError, ValueError)):
        return EXIT_VALIDATION_ERROR

    if isinstance(exception, FileError):
        return EXIT_FILE_ERROR

    if isinstance(exception, ParsingError):
        return EXIT_PARSING_ERROR

    if isinstance(exception, RenderingError):
        return EXIT_RENDERING_ERROR

    if isinstance(exception, CompilationError):
        return EXIT_COMPILATION_ERROR

    return EXIT_ERROR


def add_options_arguments(parser: argparse.ArgumentParser, options_class: type[CloneFrozenMixin], title: str) -> None:
    """Add one argument per field of ``options_class`` to a new argument group.

    Parameters
    ----------
    parser : argparse.ArgumentParser
        Parser receiving the group
    options_class : type
        Frozen options dataclass
    title : str
        Argument group title

    """
    group = parser.add_argument_group(title)

    for field in fields(options_class):  # type: ignore[arg-type]
        metadata = field.metadata
        cli_name = metadata.get("cli_name", field.name.replace("_", "-"))
        kwargs: dict[str, Any] = {"dest": field.name, "default": argparse.SUPPRESS, "help": metadata.get("help")}

        if field.type in (bool, "bool"):
            kwargs["action"] = "store_false" if field.default is True else "store_true"
        else:
            kwargs["type"] = metadata.get("type", str)
            if "choices" in metadata:
                kwargs["choices"] = metadata["choices"]
            if field.default is not MISSING and field.default is not None:
                kwargs["help"] = f"{kwargs['help']} (default: {field.default})"

        group.add_argument(f"--{cli_name}", **kwargs)


def options_kwargs_from_args(parsed_args: argparse.Namespace, options_class: type[CloneFrozenMixin]) -> dict[str, Any]:
    """Return the options of ``options_class`` that were given on the command line."""
    provided = vars(parsed_args)
    return {name: provided[name] for name in options_class.field_names() if name in provided}


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the ``mdtex`` command."""
    parser = argparse.ArgumentParser(
        prog="mdtex",
        description="Convert markdown with $$inline math$$ to LaTeX.",
        epilog="Exit codes: 0 success, 1 error, 2 missing dependency, 3 invalid arguments, 4 file error, "
        "6 parsing error, 7 rendering error, 8 network/security error, 11 LaTeX compilation error.",
    )

    parser.add_argument("input", help='Markdown file, "-" for stdin, or an http(s) URL')
    parser.add_argument(
        "-o",
        "--output",
        help='Output .tex path, or "-" for stdout. By default a new file is named after the document title '
        "and existing files are never overwritten.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    output_group = parser.add_argument_group("Packaging and compilation")
    output_group.add_argument("--zip", metavar="PATH", help="Write a zip archive with main.tex and its figures")
    output_group.add_argument(
        "--fetch-images", action="store_true", default=None, help="Download remote images into the package"
    )
    output_group.add_argument("--pdf", action="store_true", help="Compile a PDF next to the .tex output")
    output_group.add_argument(
        "--engine",
        choices=list(get_args(LatexEngine)),
        default=None,
        help=f"LaTeX engine used with --pdf (default: {DEFAULT_LATEX_ENGINE})",
    )
    output_group.add_argument(
        "--allow-http", action="store_true", help="Allow plain HTTP for remote input and images"
    )

    add_options_arguments(parser, LatexRendererOptions, "LaTeX rendering options")
    add_options_arguments(parser, MarkdownParserOptions, "Markdown parsing options")

    config_group = parser.add_argument_group("Configuration")
    config_group.add_argument("--config", help="Configuration file (.toml, .yaml, .json or pyproject.toml)")
    config_group.add_argument(
        "--no-config", action="store_true", help="Ignore MDTEX_CONFIG and configuration file discovery"
    )

    logging_group = parser.add_argument_group("Logging")
    logging_group.add_argument("-q", "--quiet", action="store_true", help="Only report errors")
    logging_group.add_argument(
        "-v", "--verbose", action="count", default=0, help="Show progress (-v) or debug output (-vv)"
    )
    logging_group.add_argument("--log-file", help="Also write log messages to this file")
    logging_group.add_argument("--trace", action="store_true", help="Debug logging with timestamps and logger names")

    return parser


__all__ = [
    "EXIT_COMPILATION_ERROR",
    "EXIT_DEPENDENCY_ERROR",
    "EXIT_ERROR",
    "EXIT_FILE_ERROR",
    "EXIT_PARSING_ERROR",
    "EXIT_RENDERING_ERROR",
    "EXIT_SECURITY_ERROR",
    "EXIT_SUCCESS",
    "EXIT_VALIDATION_ERROR",
    "add_options_arguments",
    "create_parser",
    "get_exit_code_for_exception",
    "options_kwargs_from_args",
]
