#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdtex/cli/config.py
"""Configuration file discovery and loading for the mdtex CLI.

Configuration files hold option names as keys, for example::

    # .mdtex.toml
    indent_width = 4
    soft_break_mode = "space"
    parse_tables = false

Keys may use hyphens or underscores. Renderer options
(:class:`~mdtex.options.LatexRendererOptions`) and parser options
(:class:`~mdtex.options.MarkdownParserOptions`) share one flat namespace;
a few CLI settings (``engine``, ``fetch_images``) are accepted as well.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[import-not-found,unused-ignore]

import yaml

from mdtex.options.latex import LatexRendererOptions
from mdtex.options.markdown import MarkdownParserOptions

logger = logging.getLogger(__name__)

CONFIG_FILENAMES = [".mdtex.toml", ".mdtex.yaml", ".mdtex.yml", ".mdtex.json"]

# Settings that belong to the CLI rather than an options class
CLI_SETTINGS = frozenset({"engine", "fetch_images"})


def _load_pyproject_section(pyproject_path: Path) -> Dict[str, Any]:
    """Load the ``[tool.mdtex]`` table of a pyproject.toml, or an empty dict.

    Raises
    ------
    argparse.ArgumentTypeError
        If the file cannot be parsed or the section is not a table

    """
    try:
        with open(pyproject_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise argparse.ArgumentTypeError(f"Invalid TOML in pyproject.toml {pyproject_path}: {e}") from e
    except OSError as e:
        raise argparse.ArgumentTypeError(f"Error reading pyproject.toml {pyproject_path}: {e}") from e

    config = data.get("tool", {}).get("mdtex", {})
    if not isinstance(config, dict):
        raise argparse.ArgumentTypeError(
            f"[tool.mdtex] section in {pyproject_path} must be a table, got {type(config).__name__}"
        )
    return config


def find_config_in_parents(start_dir: Optional[Path] = None) -> Optional[Path]:
    """Find a configuration file in ``start_dir`` or one of its parents.

    Each directory is checked for ``.mdtex.toml``, ``.mdtex.yaml``,
    ``.mdtex.yml``, ``.mdtex.json`` and then a ``pyproject.toml`` with a
    ``[tool.mdtex]`` section. The first match wins.

    Parameters
    ----------
    start_dir : Path, optional
        Starting directory, defaults to the current working directory

    Returns
    -------
    Path or None
        Path to the first config file found

    """
    current = (start_dir or Path.cwd()).resolve()

    while True:
        for filename in CONFIG_FILENAMES:
            config_path = current / filename
            if config_path.is_file():
                return config_path

        pyproject_path = current / "pyproject.toml"
        if pyproject_path.is_file():
            try:
                if _load_pyproject_section(pyproject_path):
                    return pyproject_path
            except argparse.ArgumentTypeError:
                logger.debug(f"Skipping unreadable {pyproject_path}")

        parent = current.parent
        if parent == current:
            return None
        current = parent


def load_config_file(config_path: Path | str) -> Dict[str, Any]:
    """Load configuration from a JSON, TOML, YAML or pyproject.toml file.

    Parameters
    ----------
    config_path : Path or str
        Path to the configuration file

    Returns
    -------
    dict
        Configuration dictionary

    Raises
    ------
    argparse.ArgumentTypeError
        If the file cannot be read, parsed, or has an unsupported format

    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise argparse.ArgumentTypeError(f"Configuration file does not exist: {config_path}")
    if not config_path.is_file():
        raise argparse.ArgumentTypeError(f"Configuration path is not a file: {config_path}")

    if config_path.name.lower() == "pyproject.toml":
        return _load_pyproject_section(config_path)

    ext = config_path.suffix.lower()
    try:
        if ext == ".toml":
            with open(config_path, "rb") as f:
                config = tomllib.load(f)
        elif ext in (".yaml", ".yml"):
            with open(config_path, "r", encoding="utf-8") as f:
                config = yaml.safe_load(f)
        elif ext == ".json":
            with open(config_path, "r", encoding="utf-8") as f:
                config = json.load(f)
        else:
            raise argparse.ArgumentTypeError(f"Unsupported config file format: {ext}. Use .json, .toml, or .yaml")
    except (tomllib.TOMLDecodeError, yaml.YAMLError, json.JSONDecodeError) as e:
        raise argparse.ArgumentTypeError(f"Invalid config file {config_path}: {e}") from e
    except OSError as e:
        raise argparse.ArgumentTypeError(f"Error reading config file {config_path}: {e}") from e

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise argparse.ArgumentTypeError(
            f"Config file {config_path} must contain a mapping at the top level, got {type(config).__name__}"
        )
    return config


def load_config_with_priority(
    explicit_path: Optional[str] = None,
    env_var_path: Optional[str] = None,
    start_dir: Optional[Path] = None,
) -> Dict[str, Any]:
    """Load configuration with priority handling.

    Priority order (highest to lowest):
    1. Explicit config file path (``--config``)
    2. Environment variable config path (``MDTEX_CONFIG``)
    3. Auto-discovered config file from ``start_dir`` upwards

    Returns
    -------
    dict
        Normalized configuration (keys with underscores), empty if none found

    """
    path: Optional[Path]
    if explicit_path:
        path = Path(explicit_path)
    elif env_var_path:
        path = Path(env_var_path)
    else:
        path = find_config_in_parents(start_dir)

    if path is None:
        return {}

    logger.debug(f"Loading configuration from {path}")
    return normalize_config_keys(load_config_file(path))


def normalize_config_keys(config: Dict[str, Any]) -> Dict[str, Any]:
    """Return ``config`` with hyphens in keys replaced by underscores.

    Examples
    --------
    >>> normalize_config_keys({"indent-width": 4})
    {'indent_width': 4}

    """
    return {str(key).replace("-", "_"): value for key, value in config.items()}


def split_config(config: Dict[str, Any]) -> tuple[Dict[str, Any], Dict[str, Any], Dict[str, Any]]:
    """Split a flat configuration into renderer, parser and CLI settings.

    Unknown keys are reported with a warning and dropped.

    Returns
    -------
    tuple of dict
        ``(renderer_kwargs, parser_kwargs, cli_settings)``

    """
    renderer_fields = LatexRendererOptions.field_names()
    parser_fields = MarkdownParserOptions.field_names()
    renderer_kwargs: Dict[str, Any] = {}
    parser_kwargs: Dict[str, Any] = {}
    cli_settings: Dict[str, Any] = {}

    for key, value in config.items():
        if key in renderer_fields:
            renderer_kwargs[key] = value
        elif key in parser_fields:
            parser_kwargs[key] = value
        elif key in CLI_SETTINGS:
            cli_settings[key] = value
        else:
            logger.warning(f"Ignoring unknown configuration key: {key!r}")

    return renderer_kwargs, parser_kwargs, cli_settings


__all__ = [
    "CONFIG_FILENAMES",
    "find_config_in_parents",
    "load_config_file",
    "load_config_with_priority",
    "normalize_config_keys",
    "split_config",
]
