"""Retrieval of style-sheet text and theme assets.

Style sheets are fetched with a blocking call per sheet; image preloads are
asynchronous. Remote resources go through httpx, anything else is read from
the filesystem.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Protocol

import httpx

from style_shifter.logger import get_logger

logger = get_logger(__name__)

DEFAULT_FETCH_TIMEOUT = 10.0

_REMOTE_SCHEMES = ("http://", "https://")


class StyleSheetFetchError(Exception):
    """Raised when a style sheet cannot be retrieved."""

    def __init__(self, href: str, reason: str) -> None:
        """Initialize the error.

        Args:
            href: Style sheet that failed.
            reason: Human-readable failure reason.
        """
        super().__init__(f"Failed to fetch {href}: {reason}")
        self.href = href
        self.reason = reason


class StyleSheetSource(Protocol):
    """Knows which style sheets exist and how to read them."""

    def hrefs(self) -> list[str]:
        """Get the style sheets in discovery order."""
        ...

    def fetch(self, href: str) -> str:
        """Get the text of one style sheet, raising StyleSheetFetchError on failure."""
        ...


def is_remote(href: str) -> bool:
    """Check whether an href points at an HTTP(S) resource."""
    return href.startswith(_REMOTE_SCHEMES)


class InlineStyleSheets:
    """Style sheets held in memory, keyed by an identifier."""

    def __init__(self, sheets: Mapping[str, str] | None = None) -> None:
        """Initialize the source.

        Args:
            sheets: Identifier to style-sheet text, in discovery order.
        """
        self._sheets: dict[str, str] = dict(sheets or {})

    def add(self, href: str, text: str) -> None:
        """Add or replace a style sheet."""
        self._sheets[href] = text

    def hrefs(self) -> list[str]:
        """Get the identifiers in insertion order."""
        return list(self._sheets)

    def fetch(self, href: str) -> str:
        """Get a style sheet's text.

        Args:
            href: Identifier of the sheet.

        Returns:
            The style-sheet text.

        Raises:
            StyleSheetFetchError: If no sheet has that identifier.
        """
        try:
            return self._sheets[href]
        except KeyError:
            raise StyleSheetFetchError(href, "unknown style sheet") from None


class HttpStyleSheets:
    """Style sheets referenced by URL or filesystem path."""

    def __init__(
        self,
        hrefs: Iterable[str] = (),
        *,
        timeout: float = DEFAULT_FETCH_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the source.

        Args:
            hrefs: URLs or paths in discovery order.
            timeout: Timeout in seconds for each HTTP request.
            transport: Optional httpx transport (e.g. a mock transport in tests).
        """
        self._hrefs = list(hrefs)
        self._timeout = timeout
        self._transport = transport

    def hrefs(self) -> list[str]:
        """Get the configured URLs and paths."""
        return list(self._hrefs)

    def fetch(self, href: str) -> str:
        """Fetch one style sheet, blocking until it completes or fails.

        Args:
            href: URL or filesystem path.

        Returns:
            The style-sheet text.

        Raises:
            StyleSheetFetchError: If the request or read fails.
        """
        if not is_remote(href):
            try:
                return Path(href).expanduser().read_text(encoding="utf-8")
            except OSError as exc:
                raise StyleSheetFetchError(href, str(exc)) from exc

        logger.debug(f"Fetching style sheet {href}")
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport, follow_redirects=True) as client:
                response = client.get(href)
                response.raise_for_status()
        except httpx.HTTPError as exc:
            raise StyleSheetFetchError(href, str(exc)) from exc
        return response.text


async def fetch_image(url: str, timeout: float = DEFAULT_FETCH_TIMEOUT) -> bytes:
    """Download an image so it is cached before a theme is shown.

    Args:
        url: Image URL or filesystem path.
        timeout: Request timeout in seconds.

    Returns:
        The image bytes.

    Raises:
        httpx.HTTPError: If the download fails.
        OSError: If a local file cannot be read.
    """
    if not is_remote(url):
        return Path(url).expanduser().read_bytes()
    async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
        response = await client.get(url)
        response.raise_for_status()
        return response.content
