#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdtex/utils/network.py
"""Network retrieval of markdown sources and remote images.

Requests go through an httpx client that validates every URL, including
redirect targets, before it is fetched. Responses are streamed and
aborted once they exceed the configured size limit.

Setting ``MDTEX_DISABLE_NETWORK`` to a true value refuses all requests.

Functions
---------
- validate_url: Check scheme and host of a URL
- fetch_content: Fetch bytes with size and content-type limits
- fetch_image: Fetch image bytes
- download_images: Fetch images into an ImageRegistry
"""

from __future__ import annotations

import logging
import os
from email.message import Message
from typing import Any, Iterable
from urllib.parse import urlparse

from mdtex.constants import (
    DEFAULT_MAX_ASSET_SIZE_BYTES,
    DEFAULT_MAX_REDIRECTS,
    DEFAULT_NETWORK_TIMEOUT,
    DEFAULT_REQUIRE_HTTPS,
    DEFAULT_USER_AGENT,
    DEPS_NETWORK,
)
from mdtex.exceptions import NetworkSecurityError
from mdtex.images import ImageRegistry, filename_for_url
from mdtex.utils.decorators import requires_dependencies

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 8192


def is_network_disabled() -> bool:
    """Check if network access is globally disabled via ``MDTEX_DISABLE_NETWORK``."""
    return os.getenv("MDTEX_DISABLE_NETWORK", "").lower() in ("true", "1", "yes", "on")


def is_remote_url(value: str) -> bool:
    return urlparse(value).scheme in ("http", "https")


def _parse_content_type(content_type: str) -> str:
    """Return the lowercased MIME type of a content-type header, without parameters.

    Examples
    --------
    >>> _parse_content_type("image/png; charset=utf-8")
    'image/png'
    >>> _parse_content_type("")
    ''

    """
    if not content_type:
        return ""
    msg = Message()
    msg["content-type"] = content_type
    return msg.get_content_type().lower()


def validate_url(url: str, require_https: bool = DEFAULT_REQUIRE_HTTPS) -> None:
    """Validate a URL before requesting it.

    Parameters
    ----------
    url : str
        URL to validate
    require_https : bool, default True
        If True, only HTTPS URLs are allowed

    Raises
    ------
    NetworkSecurityError
        If the scheme is not http(s), HTTPS is required but not used, or
        the URL has no host

    """
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        raise NetworkSecurityError(f"Unsupported URL scheme: {parsed.scheme or '(none)'} in {url!r}")
    if require_https and parsed.scheme != "https":
        raise NetworkSecurityError(f"HTTPS required but got: {parsed.scheme} ({url})")
    if not parsed.hostname:
        raise NetworkSecurityError(f"URL missing hostname: {url!r}")
    if parsed.scheme == "http":
        logger.warning(f"Fetching URL over insecure HTTP: {url}")


@requires_dependencies("network", DEPS_NETWORK)
def create_http_client(
    timeout: float = DEFAULT_NETWORK_TIMEOUT,
    max_redirects: int = DEFAULT_MAX_REDIRECTS,
    require_https: bool = DEFAULT_REQUIRE_HTTPS,
    user_agent: str | None = None,
    transport: Any = None,
) -> Any:
    """Create an httpx client that validates every request and redirect.

    Parameters
    ----------
    timeout : float, default 10.0
        Request timeout in seconds
    max_redirects : int, default 5
        Maximum number of redirects to follow
    require_https : bool, default True
        If True, only HTTPS URLs are allowed
    user_agent : str, optional
        User-Agent header; defaults to ``MDTEX_USER_AGENT`` or the package default
    transport : httpx.BaseTransport, optional
        Transport override, mainly for tests

    Returns
    -------
    httpx.Client
        Configured HTTP client

    """
    import httpx

    def validate_request_url(request: Any) -> None:
        validate_url(str(request.url), require_https=require_https)

    effective_user_agent = user_agent or os.getenv("MDTEX_USER_AGENT") or DEFAULT_USER_AGENT
    return httpx.Client(
        timeout=timeout,
        follow_redirects=True,
        max_redirects=max_redirects,
        event_hooks={"request": [validate_request_url]},
        headers={"User-Agent": effective_user_agent},
        transport=transport,
    )


@requires_dependencies("network", DEPS_NETWORK)
def fetch_content(
    url: str,
    require_https: bool = DEFAULT_REQUIRE_HTTPS,
    max_size_bytes: int = DEFAULT_MAX_ASSET_SIZE_BYTES,
    timeout: float = DEFAULT_NETWORK_TIMEOUT,
    expected_content_types: list[str] | None = None,
    user_agent: str | None = None,
    transport: Any = None,
) -> bytes:
    """Fetch content from a URL with streaming size validation.

    Parameters
    ----------
    url : str
        URL to fetch
    require_https : bool, default True
        If True, only HTTPS URLs are allowed
    max_size_bytes : int, default 50MB
        Maximum allowed response size in bytes
    timeout : float, default 10.0
        Request timeout in seconds
    expected_content_types : list[str], optional
        Allowed content type prefixes (e.g., ``["image/"]``)
    user_agent : str, optional
        Custom User-Agent header
    transport : httpx.BaseTransport, optional
        Transport override, mainly for tests

    Returns
    -------
    bytes
        Response body

    Raises
    ------
    NetworkSecurityError
        If the URL is refused, the request fails, or a limit is exceeded

    """
    if is_network_disabled():
        raise NetworkSecurityError("Network access is globally disabled via MDTEX_DISABLE_NETWORK")

    validate_url(url, require_https=require_https)

    import httpx

    try:
        with create_http_client(
            timeout=timeout, require_https=require_https, user_agent=user_agent, transport=transport
        ) as client:
            with client.stream("GET", url) as response:
                response.raise_for_status()

                content_type = _parse_content_type(response.headers.get("content-type", ""))
                if expected_content_types and not any(content_type.startswith(ct) for ct in expected_content_types):
                    raise NetworkSecurityError(
                        f"Invalid content type: {content_type or '(none)'}. Expected one of: {expected_content_types}"
                    )

                declared = response.headers.get("content-length")
                if declared and declared.isdigit() and int(declared) > max_size_bytes:
                    raise NetworkSecurityError(f"Content-Length too large: {declared} bytes (max: {max_size_bytes})")

                chunks = []
                total_size = 0
                for chunk in response.iter_bytes(chunk_size=_CHUNK_SIZE):
                    total_size += len(chunk)
                    if total_size > max_size_bytes:
                        raise NetworkSecurityError(f"Response too large: exceeded {max_size_bytes} bytes")
                    chunks.append(chunk)

    except NetworkSecurityError:
        raise
    except httpx.TooManyRedirects as e:
        raise NetworkSecurityError(f"Too many redirects fetching {url}", original_error=e) from e
    except httpx.HTTPError as e:
        raise NetworkSecurityError(f"HTTP request failed for {url}: {e}", original_error=e) from e

    logger.debug(f"Fetched {total_size} bytes from {url}")
    return b"".join(chunks)


def fetch_image(url: str, **kwargs: Any) -> bytes:
    """Fetch image bytes; a convenience wrapper around :func:`fetch_content`.

    Raises
    ------
    NetworkSecurityError
        If the fetch fails or the response is not an image

    """
    return fetch_content(url, expected_content_types=["image/", "application/pdf"], **kwargs)


def fetch_text(url: str, **kwargs: Any) -> str:
    """Fetch a text document such as a remote markdown file, decoded as UTF-8."""
    data = fetch_content(url, **kwargs)
    return data.decode("utf-8", errors="replace")


def download_images(urls: Iterable[str], registry: ImageRegistry, **kwargs: Any) -> list[str]:
    """Fetch remote images and register them under unique filenames.

    URLs that are already registered or are not http(s) are skipped.
    Failed downloads are logged and skipped; the rest of the document can
    still be packaged.

    Parameters
    ----------
    urls : iterable of str
        Image URLs in document order
    registry : ImageRegistry
        Registry receiving the images
    **kwargs
        Passed to :func:`fetch_image`

    Returns
    -------
    list[str]
        URLs that were downloaded and registered

    """
    downloaded = []
    for url in dict.fromkeys(urls):
        if url in registry:
            continue
        if not is_remote_url(url):
            logger.debug(f"Skipping non-remote image {url!r}")
            continue
        try:
            data = fetch_image(url, **kwargs)
        except NetworkSecurityError as e:
            logger.warning(f"Could not download image {url}: {e.message}")
            continue
        filename = filename_for_url(url, data, taken=registry.filenames())
        registry.register(url, filename, data)
        downloaded.append(url)

    logger.info(f"Downloaded {len(downloaded)} image(s)")
    return downloaded


__all__ = [
    "create_http_client",
    "download_images",
    "fetch_content",
    "fetch_image",
    "fetch_text",
    "is_network_disabled",
    "is_remote_url",
    "validate_url",
]
