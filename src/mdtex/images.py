#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdtex/images.py
"""Image registry and resolvers for figure packaging.

Images referenced from markdown are resolved in two passes. A discovery
pass renders the document with a :class:`RecordingResolver` to learn every
image URL. The caller then registers image bytes for the URLs it can
provide, and a second pass renders with :meth:`ImageRegistry.resolver`,
which points each registered URL at ``figures/<filename>``.

"""

from __future__ import annotations

import logging
import re
import threading
import unicodedata
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Callable, Iterator, Optional
from urllib.parse import unquote, urlparse

from mdtex.constants import DEFAULT_FIGURES_DIR

logger = logging.getLogger(__name__)

ImageCallback = Callable[[str], Optional[str]]

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


@dataclass(frozen=True)
class RegisteredImage:
    """Image bytes and the filename they are stored under in a package."""

    filename: str
    data: bytes


class ImageRegistry:
    """Thread-safe mapping of image URLs to registered image data.

    Examples
    --------
        >>> registry = ImageRegistry()
        >>> registry.register("https://example.com/a.png", "a.png", b"...")
        >>> resolve = registry.resolver()
        >>> resolve("https://example.com/a.png")
        'figures/a.png'
        >>> resolve("https://example.com/missing.png") is None
        True

    """

    def __init__(self) -> None:
        self._images: dict[str, RegisteredImage] = {}
        self._lock = threading.Lock()

    def register(self, url: str, filename: str, data: bytes) -> None:
        """Register image data for ``url``, replacing any previous entry.

        Parameters
        ----------
        url : str
            Image URL exactly as written in the markdown
        filename : str
            Plain filename to store the image under
        data : bytes
            Image content

        Raises
        ------
        ValueError
            If ``filename`` is empty or contains a path separator

        """
        if not filename or "/" in filename or "\\" in filename or filename in (".", ".."):
            raise ValueError(f"Image filename must be a plain file name, got {filename!r}")
        with self._lock:
            self._images[url] = RegisteredImage(filename, bytes(data))
        logger.debug(f"Registered image {url!r} as {filename!r} ({len(data)} bytes)")

    def get(self, url: str) -> RegisteredImage | None:
        with self._lock:
            return self._images.get(url)

    def clear(self) -> None:
        with self._lock:
            self._images.clear()

    def items(self) -> list[tuple[str, RegisteredImage]]:
        """Return a snapshot of ``(url, image)`` pairs in registration order."""
        with self._lock:
            return list(self._images.items())

    def filenames(self) -> set[str]:
        with self._lock:
            return {image.filename for image in self._images.values()}

    def __len__(self) -> int:
        with self._lock:
            return len(self._images)

    def __contains__(self, url: object) -> bool:
        with self._lock:
            return url in self._images

    def __iter__(self) -> Iterator[str]:
        return iter([url for url, _image in self.items()])

    def resolver(self, prefix: str = DEFAULT_FIGURES_DIR) -> ImageCallback:
        """Return an image callback mapping registered URLs to ``<prefix>/<filename>``.

        Unregistered URLs resolve to None, which renders them commented out.
        """

        def resolve(url: str) -> str | None:
            image = self.get(url)
            if image is None:
                logger.info(f"No registered image for {url!r}")
                return None
            return f"{prefix}/{image.filename}"

        return resolve


class RecordingResolver:
    """Image callback that records every URL it is asked to resolve.

    Parameters
    ----------
    delegate : callable, optional
        Callback whose answer is returned; without one every image
        resolves to None

    """

    def __init__(self, delegate: ImageCallback | None = None):
        self.delegate = delegate
        self.urls: list[str] = []

    def __call__(self, url: str) -> str | None:
        self.urls.append(url)
        return self.delegate(url) if self.delegate else None

    @property
    def unique_urls(self) -> list[str]:
        """Recorded URLs without repeats, in first-seen order."""
        return list(dict.fromkeys(self.urls))


def detect_image_format_from_bytes(data: bytes) -> str | None:
    r"""Detect an image format from its magic bytes.

    Returns
    -------
    str or None
        Lowercase extension without dot (``"png"``, ``"jpg"``, ``"gif"``,
        ``"pdf"``, ``"svg"``...), or None if unrecognized

    """
    if not data or len(data) < 4:
        return None
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "png"
    if data.startswith(b"\xff\xd8\xff"):
        return "jpg"
    if data.startswith(b"GIF87a") or data.startswith(b"GIF89a"):
        return "gif"
    if data.startswith(b"%PDF"):
        return "pdf"
    if len(data) >= 12 and data.startswith(b"RIFF") and data[8:12] == b"WEBP":
        return "webp"
    if data.startswith(b"II*\x00") or data.startswith(b"MM\x00*"):
        return "tiff"
    stripped = data.lstrip()
    if stripped.startswith(b"<svg") or stripped.startswith(b"<?xml"):
        return "svg"
    return None


def sanitize_image_filename(name: str, fallback: str = "image") -> str:
    """Reduce ``name`` to a safe ASCII file name.

    Examples
    --------
    >>> sanitize_image_filename("../../etc/Plot (final).PNG")
    'plot_final_.png'
    >>> sanitize_image_filename("")
    'image'

    """
    base = PurePosixPath(name.replace("\\", "/")).name
    normalized = unicodedata.normalize("NFKD", base).encode("ascii", "ignore").decode("ascii")
    cleaned = _UNSAFE_FILENAME_CHARS.sub("_", normalized).strip("._").lower()
    return cleaned or fallback


def filename_for_url(url: str, data: bytes | None = None, taken: set[str] | None = None) -> str:
    """Derive a unique, sanitized figure filename for an image URL.

    The last path segment of the URL is used as the name. When it has no
    extension, one is taken from the image's magic bytes. Names already in
    ``taken`` get a numeric suffix.

    Parameters
    ----------
    url : str
        Image URL
    data : bytes, optional
        Image content used to detect a missing extension
    taken : set[str], optional
        Filenames already in use

    Returns
    -------
    str
        A filename not present in ``taken``

    """
    path = unquote(urlparse(url).path)
    filename = sanitize_image_filename(PurePosixPath(path).name)
    stem, suffix = PurePosixPath(filename).stem, PurePosixPath(filename).suffix
    if not suffix and data is not None:
        detected = detect_image_format_from_bytes(data)
        if detected:
            suffix = f".{detected}"

    taken = taken or set()
    candidate = f"{stem}{suffix}"
    counter = 1
    while candidate in taken:
        candidate = f"{stem}-{counter}{suffix}"
        counter += 1
    return candidate


__all__ = [
    "ImageCallback",
    "ImageRegistry",
    "RecordingResolver",
    "RegisteredImage",
    "detect_image_format_from_bytes",
    "filename_for_url",
    "sanitize_image_filename",
]
