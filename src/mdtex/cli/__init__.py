#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdtex/cli/__init__.py
"""Command-line interface for mdtex.

Examples
--------
Convert a file; the output is named after the document title::

    $ mdtex notes.md

Write to stdout::

    $ mdtex notes.md -o -

Build a zip archive with local and downloaded figures::

    $ mdtex notes.md --zip notes.zip --fetch-images

Compile a PDF next to the LaTeX file::

    $ mdtex notes.md -o notes.tex --pdf --engine xelatex

Configuration files (``--config``, ``MDTEX_CONFIG`` or a discovered
``.mdtex.toml``/``.mdtex.yaml``/``.mdtex.json``/``[tool.mdtex]``) provide
defaults for the rendering options; command-line arguments win.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Any
from urllib.parse import unquote, urlparse

from mdtex.api import collect_image_urls
from mdtex.cli.builder import (
    EXIT_SUCCESS,
    EXIT_VALIDATION_ERROR,
    create_parser,
    get_exit_code_for_exception,
    options_kwargs_from_args,
)
from mdtex.cli.config import load_config_with_priority, split_config
from mdtex.cli.output import default_output_path
from mdtex.compile import compile_latex
from mdtex.constants import DEFAULT_FIGURES_DIR, DEFAULT_LATEX_ENGINE
from mdtex.exceptions import (
    CompilationError,
    FileAccessError,
    FileNotFoundError,
    MdtexError,
    OutputWriteError,
    ValidationError,
)
from mdtex.images import ImageCallback, ImageRegistry, filename_for_url
from mdtex.logging_utils import configure_logging, resolve_log_level
from mdtex.options.latex import LatexRendererOptions
from mdtex.options.markdown import MarkdownParserOptions
from mdtex.packagers.archive import LatexArchivePackager, write_package
from mdtex.renderers.latex import LatexRenderer
from mdtex.utils.io_utils import open_unique_file, write_content
from mdtex.utils.network import download_images, fetch_text, is_remote_url

logger = logging.getLogger(__name__)

__all__ = ["main", "create_parser"]


def _setup_logging(parsed_args: argparse.Namespace) -> None:
    if parsed_args.trace:
        log_level = logging.DEBUG
    else:
        log_level = resolve_log_level(verbosity=parsed_args.verbose, quiet=parsed_args.quiet)
    configure_logging(log_level, log_file=parsed_args.log_file, trace_mode=parsed_args.trace)


def _build_options(
    config_kwargs: tuple[dict[str, Any], dict[str, Any]],
    arg_kwargs: tuple[dict[str, Any], dict[str, Any]],
) -> tuple[LatexRendererOptions, MarkdownParserOptions]:
    """Construct options from the configuration, then apply command-line overrides.

    Bad values from either source are reported as validation errors.
    """
    renderer_config, parser_config = config_kwargs
    renderer_args, parser_args = arg_kwargs
    try:
        options = LatexRendererOptions(**renderer_config).create_updated(**renderer_args)
        parser_options = MarkdownParserOptions(**parser_config).create_updated(**parser_args)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid option value: {e}", original_error=e) from e
    return options, parser_options


def _read_input(source: str, require_https: bool, max_size_bytes: int) -> tuple[str, Path | None, str | None]:
    """Read the markdown source.

    Returns
    -------
    tuple
        ``(markdown, base_dir, input_name)``; ``base_dir`` is the directory
        relative image paths are resolved against, if any

    """
    if source == "-":
        return sys.stdin.read(), None, None

    if is_remote_url(source):
        logger.info(f"Downloading markdown from {source}")
        markdown = fetch_text(source, require_https=require_https, max_size_bytes=max_size_bytes)
        return markdown, None, Path(unquote(urlparse(source).path)).name or None

    path = Path(source)
    if not path.exists():
        raise FileNotFoundError(str(path))
    try:
        markdown = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FileAccessError(str(path), original_error=e) from e
    return markdown, path.parent, path.name


def _local_image_path(url: str, base_dir: Path | None) -> Path | None:
    if is_remote_url(url) or urlparse(url).scheme:
        return None
    candidate = (base_dir or Path.cwd()) / unquote(url)
    return candidate if candidate.is_file() else None


def _local_image_resolver(base_dir: Path | None) -> ImageCallback:
    """Keep local image paths that exist; comment out everything else."""

    def resolve(url: str) -> str | None:
        return url if _local_image_path(url, base_dir) is not None else None

    return resolve


def _build_registry(
    markdown: str,
    base_dir: Path | None,
    parser_options: MarkdownParserOptions,
    fetch_images: bool,
    require_https: bool,
    max_size_bytes: int,
) -> ImageRegistry:
    """Register the document's local images and, optionally, downloaded remote ones."""
    registry = ImageRegistry()
    urls = collect_image_urls(markdown, parser_options)

    for url in urls:
        path = _local_image_path(url, base_dir)
        if path is None:
            if not is_remote_url(url):
                logger.warning(f"Image not found: {url}")
            continue
        if path.stat().st_size > max_size_bytes:
            logger.warning(f"Skipping image {url}: larger than {max_size_bytes} bytes")
            continue
        data = path.read_bytes()
        registry.register(url, filename_for_url(url, data, taken=registry.filenames()), data)

    if fetch_images:
        download_images(urls, registry, require_https=require_https, max_size_bytes=max_size_bytes)
    elif any(is_remote_url(url) for url in urls):
        logger.info("Remote images are commented out; use --fetch-images to include them")

    return registry


def _write_tex(
    latex: str,
    output: str | None,
    markdown: str,
    input_name: str | None,
    parser_options: MarkdownParserOptions,
) -> Path | None:
    """Write the LaTeX output and return its path (None for stdout)."""
    if output == "-":
        sys.stdout.write(latex)
        sys.stdout.flush()
        return None

    if output:
        path = Path(output)
        try:
            write_content(latex, path)
        except OSError as e:
            raise OutputWriteError(file_path=str(path), original_error=e) from e
        logger.info(f"Wrote LaTeX to {path}")
        return path

    preferred = default_output_path(markdown, input_name, parser_options=parser_options)
    try:
        path, handle = open_unique_file(preferred)
        with handle:
            handle.write(latex)
    except OSError as e:
        raise OutputWriteError(file_path=str(preferred), original_error=e) from e
    logger.info(f"Wrote LaTeX to {path}")
    return path


def _convert(parsed_args: argparse.Namespace) -> int:
    config: dict[str, Any] = {}
    if not parsed_args.no_config:
        config = load_config_with_priority(parsed_args.config, os.environ.get("MDTEX_CONFIG"))
    renderer_kwargs, parser_kwargs, cli_settings = split_config(config)
    options, parser_options = _build_options(
        (renderer_kwargs, parser_kwargs),
        (
            options_kwargs_from_args(parsed_args, LatexRendererOptions),
            options_kwargs_from_args(parsed_args, MarkdownParserOptions),
        ),
    )

    engine = parsed_args.engine or cli_settings.get("engine", DEFAULT_LATEX_ENGINE)
    fetch_images = parsed_args.fetch_images
    if fetch_images is None:
        fetch_images = bool(cli_settings.get("fetch_images", False))
    require_https = not parsed_args.allow_http

    if parsed_args.pdf and parsed_args.output == "-":
        raise ValidationError("--pdf cannot be combined with output to stdout", parameter_name="output")
    if parsed_args.pdf and not options.include_preamble:
        raise ValidationError("--pdf needs a complete document; remove --no-preamble", parameter_name="pdf")
    if fetch_images and not (parsed_args.zip or parsed_args.pdf):
        logger.warning("--fetch-images has no effect without --zip or --pdf")

    markdown, base_dir, input_name = _read_input(parsed_args.input, require_https, options.max_asset_size_bytes)

    if parsed_args.zip or parsed_args.pdf:
        registry = _build_registry(
            markdown, base_dir, parser_options, fetch_images, require_https, options.max_asset_size_bytes
        )
    else:
        registry = ImageRegistry()

    if parsed_args.zip:
        packager = LatexArchivePackager(renderer_options=options, parser_options=parser_options)
        zip_path = write_package(packager.package_markdown(markdown, registry), parsed_args.zip)
        if not parsed_args.quiet:
            print(f"Wrote {zip_path}", file=sys.stderr)

    if parsed_args.zip and parsed_args.output is None and not parsed_args.pdf:
        return EXIT_SUCCESS

    renderer = LatexRenderer(options, parser_options)
    # The saved file points at images where they are on disk
    latex = renderer.render_to_string(markdown, image_callback=_local_image_resolver(base_dir))
    tex_path = _write_tex(latex, parsed_args.output, markdown, input_name, parser_options)
    if tex_path is not None and not parsed_args.quiet:
        print(f"Wrote {tex_path}", file=sys.stderr)

    if parsed_args.pdf and tex_path is not None:
        compiled = renderer.render_to_string(markdown, image_callback=registry.resolver(DEFAULT_FIGURES_DIR))
        figures = {f"{DEFAULT_FIGURES_DIR}/{image.filename}": image.data for _url, image in registry.items()}
        pdf = compile_latex(compiled, engine=engine, workdir_files=figures)
        pdf_path = tex_path.with_suffix(".pdf")
        try:
            write_content(pdf, pdf_path)
        except OSError as e:
            raise OutputWriteError(file_path=str(pdf_path), original_error=e) from e
        if not parsed_args.quiet:
            print(f"Wrote {pdf_path}", file=sys.stderr)

    return EXIT_SUCCESS


def main(args: list[str] | None = None) -> int:
    """Execute the mdtex command and return its exit code."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)
    _setup_logging(parsed_args)

    try:
        return _convert(parsed_args)
    except MdtexError as e:
        logger.error(e.message)
        if isinstance(e, CompilationError) and e.log:
            logger.error(f"{e.engine} log (last lines):\n{e.log}")
        return get_exit_code_for_exception(e)
    except argparse.ArgumentTypeError as e:
        logger.error(str(e))
        return EXIT_VALIDATION_ERROR


if __name__ == "__main__":
    sys.exit(main())
