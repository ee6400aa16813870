#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdtex/utils/decorators.py
"""Utility decorators for dependency checks and timing."""

from __future__ import annotations

import importlib
import logging
import time
from contextlib import contextmanager
from functools import wraps
from importlib import metadata
from typing import Any, Callable, Generator, List, Optional, Tuple

from packaging.specifiers import SpecifierSet
from packaging.version import InvalidVersion, Version

from mdtex.exceptions import DependencyError


def _installed_version(install_name: str) -> Optional[str]:
    try:
        return metadata.version(install_name)
    except metadata.PackageNotFoundError:
        return None


def _meets_requirement(install_name: str, version_spec: str) -> bool:
    installed = _installed_version(install_name)
    if installed is None:
        # Importable but not installed as a distribution (vendored, editable path)
        return True
    try:
        return Version(installed) in SpecifierSet(version_spec)
    except InvalidVersion:
        return True


def requires_dependencies(feature_name: str, packages: List[Tuple[str, str, str]]) -> Callable:
    """Check required dependencies before method execution.

    Parameters
    ----------
    feature_name : str
        Name of the feature (e.g., "markdown", "network"). Appears in error
        messages.
    packages : list of tuple
        Required packages as (install_name, import_name, version_spec) tuples.

    Returns
    -------
    Callable
        Decorated function that checks dependencies before execution

    Raises
    ------
    DependencyError
        If any required package is missing or too old.

    Examples
    --------
        >>> @requires_dependencies("network", [("httpx", "httpx", ">=0.28.1")])
        ... def fetch(url):
        ...     import httpx
        ...     return httpx.get(url).content

    """

    def decorator(method: Callable) -> Callable:
        @wraps(method)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            missing: list[tuple[str, str]] = []
            original_error = None

            for install_name, import_name, version_spec in packages:
                try:
                    importlib.import_module(import_name)
                except ImportError as e:
                    missing.append((install_name, version_spec))
                    if original_error is None:
                        original_error = e
                    continue

                if version_spec and not _meets_requirement(install_name, version_spec):
                    missing.append((install_name, version_spec))

            if missing:
                raise DependencyError(
                    converter_name=feature_name,
                    missing_packages=missing,
                    original_import_error=original_error,
                ) from original_error

            return method(*args, **kwargs)

        return wrapper

    return decorator


@contextmanager
def debug_timer(logger: logging.Logger, operation: str) -> Generator[None, None, None]:
    """Time a block and log the elapsed time at DEBUG level.

    Parameters
    ----------
    logger : logging.Logger
        Logger instance to use for DEBUG messages
    operation : str
        Description of the operation being timed (e.g., "Rendering")

    """
    if logger.isEnabledFor(logging.DEBUG):
        start_time = time.perf_counter()
        yield
        elapsed = time.perf_counter() - start_time
        logger.debug(f"{operation} completed in {elapsed:.2f}s")
    else:
        yield
