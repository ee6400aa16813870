#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdtex/compile.py
"""Compile LaTeX source to PDF with an installed TeX engine.

The engine runs in a temporary directory with ``-interaction=nonstopmode``
so errors end the run instead of waiting for input. Two passes are made
so cross references settle.

"""

from __future__ import annotations

import logging
import shutil
import subprocess
import tempfile
from pathlib import Path, PurePosixPath
from typing import Mapping, get_args

from mdtex.constants import DEFAULT_COMPILE_PASSES, DEFAULT_COMPILE_TIMEOUT, DEFAULT_LATEX_ENGINE, LatexEngine
from mdtex.exceptions import CompilationError, DependencyError, ValidationError
from mdtex.utils.decorators import debug_timer

logger = logging.getLogger(__name__)

_LOG_TAIL_LINES = 40
_JOB_NAME = "main"


def _log_tail(log: str, lines: int = _LOG_TAIL_LINES) -> str:
    return "\n".join(log.splitlines()[-lines:])


def _write_workdir_files(workdir: Path, files: Mapping[str, bytes]) -> None:
    """Write auxiliary files (figures...) below ``workdir``.

    Raises
    ------
    ValidationError
        If a name is absolute or escapes the working directory

    """
    for name, data in files.items():
        relative = PurePosixPath(name.replace("\\", "/"))
        if relative.is_absolute() or ".." in relative.parts:
            raise ValidationError(
                f"Working directory file must be a relative path inside the project: {name!r}",
                parameter_name="workdir_files",
                parameter_value=name,
            )
        target = workdir.joinpath(*relative.parts)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)


def compile_latex(
    latex: str,
    engine: LatexEngine = DEFAULT_LATEX_ENGINE,
    workdir_files: Mapping[str, bytes] | None = None,
    timeout: float = DEFAULT_COMPILE_TIMEOUT,
    passes: int = DEFAULT_COMPILE_PASSES,
) -> bytes:
    """Compile a LaTeX document and return the PDF bytes.

    Parameters
    ----------
    latex : str
        Complete LaTeX document
    engine : {"pdflatex", "xelatex", "lualatex"}, default "pdflatex"
        TeX engine executable
    workdir_files : mapping of str to bytes, optional
        Extra files to place next to the document, keyed by relative path
        (e.g. ``{"figures/plot.png": data}``)
    timeout : float, default 120
        Seconds allowed per engine pass
    passes : int, default 2
        Number of engine runs

    Returns
    -------
    bytes
        PDF content

    Raises
    ------
    DependencyError
        If the engine is not installed
    CompilationError
        If the engine fails, times out or produces no PDF

    """
    if engine not in get_args(LatexEngine):
        raise ValidationError(
            f"Unknown LaTeX engine {engine!r}; expected one of {get_args(LatexEngine)}",
            parameter_name="engine",
            parameter_value=engine,
        )
    executable = shutil.which(engine)
    if executable is None:
        raise DependencyError(
            converter_name="pdf",
            missing_packages=[(engine, "")],
            install_command="Install a TeX distribution such as TeX Live or MiKTeX",
            message=f"PDF output requires the {engine} executable, which was not found in PATH",
        )

    log = ""
    command = [executable, "-interaction=nonstopmode", "-halt-on-error", f"-jobname={_JOB_NAME}", f"{_JOB_NAME}.tex"]

    with tempfile.TemporaryDirectory(prefix="mdtex-") as temp_dir:
        workdir = Path(temp_dir)
        (workdir / f"{_JOB_NAME}.tex").write_text(latex, encoding="utf-8")
        if workdir_files:
            _write_workdir_files(workdir, workdir_files)

        with debug_timer(logger, f"Compiling with {engine}"):
            for run in range(1, passes + 1):
                logger.debug(f"{engine} pass {run}/{passes}")
                try:
                    result = subprocess.run(
                        command,
                        cwd=workdir,
                        capture_output=True,
                        timeout=timeout,
                        check=False,
                    )
                except subprocess.TimeoutExpired as e:
                    raise CompilationError(
                        f"{engine} timed out after {timeout:g}s", engine=engine, original_error=e
                    ) from e
                except OSError as e:
                    raise CompilationError(f"Could not run {engine}: {e}", engine=engine, original_error=e) from e

                log = result.stdout.decode("utf-8", errors="replace") + result.stderr.decode("utf-8", errors="replace")
                if result.returncode != 0:
                    raise CompilationError(
                        f"{engine} exited with status {result.returncode}", engine=engine, log=_log_tail(log)
                    )

        pdf_path = workdir / f"{_JOB_NAME}.pdf"
        if not pdf_path.exists():
            raise CompilationError(f"{engine} did not produce a PDF", engine=engine, log=_log_tail(log))
        pdf = pdf_path.read_bytes()

    logger.info(f"Compiled PDF ({len(pdf)} bytes) with {engine}")
    return pdf


__all__ = ["compile_latex"]
