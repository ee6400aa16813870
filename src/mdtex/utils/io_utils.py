#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdtex/utils/io_utils.py
"""I/O utilities for handling input sources and output destinations."""

from __future__ import annotations

import io
from contextlib import contextmanager
from io import BytesIO, StringIO
from pathlib import Path
from typing import IO, Iterator, TextIO, Union, cast

OutputTarget = Union[str, Path, IO[bytes], IO[str]]


def is_binary_stream(output: object) -> bool:
    """Detect whether a file-like object expects bytes.

    Parameters
    ----------
    output : object
        File-like object with a ``write`` method

    Returns
    -------
    bool
        True for binary streams, False for text streams or when unknown

    """
    if isinstance(output, BytesIO):
        return True
    if isinstance(output, StringIO) or isinstance(output, io.TextIOBase):
        return False
    if isinstance(output, (io.BufferedIOBase, io.RawIOBase)):
        return True
    mode = getattr(output, "mode", "")
    return isinstance(mode, str) and "b" in mode


def write_content(content: Union[str, bytes], output: OutputTarget) -> None:
    """Write content to a path or file-like object.

    Parameters
    ----------
    content : str or bytes
        Content to write. Text is encoded as UTF-8 for binary destinations.
    output : str, Path, IO[bytes] or IO[str]
        Output destination

    Raises
    ------
    TypeError
        If the output or content type is not supported
    OSError
        If the destination cannot be written

    Examples
    --------
        >>> buffer = BytesIO()
        >>> write_content("\\section{A}", buffer)
        >>> buffer.getvalue()
        b'\\\\section{A}'

    """
    if not isinstance(content, (str, bytes)):
        raise TypeError(f"Content must be str or bytes, got {type(content)}")

    if isinstance(output, (str, Path)):
        output_path = Path(output)
        if isinstance(content, str):
            output_path.write_text(content, encoding="utf-8")
        else:
            output_path.write_bytes(content)
        return

    if not hasattr(output, "write"):
        raise TypeError(f"Unsupported output type: {type(output)}")

    if is_binary_stream(output):
        binary_output = cast(IO[bytes], output)
        binary_output.write(content.encode("utf-8") if isinstance(content, str) else content)
    else:
        text_output = cast(IO[str], output)
        text_output.write(content.decode("utf-8") if isinstance(content, bytes) else content)


@contextmanager
def text_sink(output: OutputTarget) -> Iterator[TextIO]:
    """Provide a text stream that ends up in ``output``.

    Paths are opened for writing as UTF-8 and closed on exit. Text streams
    are used directly. Binary streams receive the UTF-8 encoded text when
    the block exits without error.

    Parameters
    ----------
    output : str, Path, IO[bytes] or IO[str]
        Output destination

    Yields
    ------
    TextIO
        Stream accepting ``str`` writes

    """
    if isinstance(output, (str, Path)):
        with open(output, "w", encoding="utf-8", newline="\n") as handle:
            yield handle
        return

    if not hasattr(output, "write"):
        raise TypeError(f"Unsupported output type: {type(output)}")

    if is_binary_stream(output):
        buffer = StringIO()
        yield buffer
        cast(IO[bytes], output).write(buffer.getvalue().encode("utf-8"))
    else:
        yield cast(TextIO, output)


def unique_path(path: Union[str, Path]) -> Path:
    """Return ``path``, or the first free ``<stem>-<n><suffix>`` sibling.

    Parameters
    ----------
    path : str or Path
        Desired path

    Returns
    -------
    Path
        A path that did not exist at the time of the call

    """
    candidate = Path(path)
    counter = 1
    while candidate.exists():
        candidate = candidate.with_name(f"{Path(path).stem}-{counter}{Path(path).suffix}")
        counter += 1
    return candidate


def open_unique_file(path: Union[str, Path]) -> tuple[Path, TextIO]:
    """Create and open a new text file without overwriting existing ones.

    Uses exclusive creation, so a file that appears between the existence
    check and the open is not clobbered.

    Parameters
    ----------
    path : str or Path
        Desired path; a numeric suffix is added when it is taken

    Returns
    -------
    tuple[Path, TextIO]
        The path actually created and its open handle

    """
    while True:
        candidate = unique_path(path)
        try:
            handle = open(candidate, "x", encoding="utf-8", newline="\n")
        except FileExistsError:
            continue
        return candidate, handle


__all__ = ["OutputTarget", "is_binary_stream", "open_unique_file", "text_sink", "unique_path", "write_content"]
