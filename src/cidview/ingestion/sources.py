"""Byte sources that turn locators into payloads.

Only :class:`GatewaySource` talks to the network. It maps content-addressed
locators onto a single HTTP path gateway and reports the gateway's
``Content-Type`` header as the declared type. :class:`FileSource` serves local
files with no declared type so signature detection applies.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional, Protocol
from urllib.parse import unquote, urlsplit

import httpx

from cidview.config.models import FetchSettings
from cidview.errors import FetchError

from .models import FetchResponse, Payload

LOGGER = logging.getLogger(__name__)

_CONTENT_SCHEMES = {"ipfs", "ipns"}
_HTTP_SCHEMES = {"http", "https"}


class ByteSource(Protocol):
    """Supply bytes and an optional declared content type for a locator."""

    async def fetch(self, locator: str, *, follow_redirects: bool = True) -> FetchResponse:
        """Retrieve the payload addressed by ``locator``."""


def gateway_url(locator: str, gateway: str) -> str:
    """Return the HTTP URL serving ``locator`` through a path gateway.

    Accepts ``ipfs://``/``ipns://`` URIs, ``/ipfs/`` and ``/ipns/`` paths, plain
    ``http(s)://`` URLs (returned unchanged), and bare content identifiers.
    """
    locator = locator.strip()
    if not locator:
        raise ValueError("locator must not be empty")

    base = gateway.rstrip("/")
    scheme, _, remainder = locator.partition("://")
    if remainder:
        scheme = scheme.lower()
        if scheme in _HTTP_SCHEMES:
            return locator
        if scheme in _CONTENT_SCHEMES:
            return f"{base}/{scheme}/{remainder.lstrip('/')}"
        raise ValueError(f"unsupported locator scheme '{scheme}'")

    if locator.startswith(("/ipfs/", "/ipns/")):
        return f"{base}{locator}"
    return f"{base}/ipfs/{locator.lstrip('/')}"


class GatewaySource:
    """Fetch content-addressed payloads from an HTTP gateway with httpx."""

    def __init__(
        self,
        settings: FetchSettings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings or FetchSettings()
        self._client = client

    def build_client(self) -> httpx.AsyncClient:
        """Create an ``httpx.AsyncClient`` configured from the fetch settings."""
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.settings.timeout_seconds),
            headers={"User-Agent": self.settings.user_agent, "Accept": "*/*"},
        )

    async def fetch(self, locator: str, *, follow_redirects: bool | None = None) -> FetchResponse:
        """Download ``locator`` and return its bytes and declared content type.

        Raises:
            FetchError: If the locator is invalid, the transport fails, or the gateway
                answers with a non-success status.
        """
        try:
            url = gateway_url(locator, self.settings.gateway)
        except ValueError as exc:
            raise FetchError(locator, str(exc)) from exc

        if follow_redirects is None:
            follow_redirects = self.settings.follow_redirects

        LOGGER.info("Fetching %s", url)
        client = self._client or self.build_client()
        try:
            response = await client.get(url, follow_redirects=follow_redirects)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise FetchError(locator, f"request failed: {exc}") from exc
        finally:
            if self._client is None:
                await client.aclose()

        if response.is_error:
            raise FetchError(locator, f"gateway returned HTTP {response.status_code}")

        declared = response.headers.get("content-type")
        LOGGER.debug("Received %d bytes (content-type=%s)", len(response.content), declared)
        return FetchResponse(
            locator=locator,
            payload=Payload(response.content),
            declared_type=declared,
        )

    async def aclose(self) -> None:
        """Close the injected client, if any."""
        if self._client is not None:
            await self._client.aclose()


def local_path(locator: str) -> Optional[Path]:
    """Return the filesystem path for ``file://`` URIs and existing local paths."""
    parts = urlsplit(locator)
    if parts.scheme == "file":
        return Path(unquote(parts.path))
    if "://" in locator:
        return None
    candidate = Path(locator).expanduser()
    return candidate if candidate.exists() else None


class FileSource:
    """Read payloads from the local filesystem."""

    async def fetch(self, locator: str, *, follow_redirects: bool = True) -> FetchResponse:
        """Read the file addressed by ``locator``; no content type is declared."""
        path = local_path(locator) or Path(locator).expanduser()
        try:
            data = await asyncio.to_thread(path.read_bytes)
        except OSError as exc:
            raise FetchError(locator, f"cannot read {path}: {exc.strerror or exc}") from exc
        LOGGER.debug("Read %d bytes from %s", len(data), path)
        return FetchResponse(locator=locator, payload=Payload(data), declared_type=None)


class LocatorSource:
    """Route each locator to the local file source or the gateway source."""

    def __init__(self, gateway: ByteSource, files: ByteSource | None = None) -> None:
        self.gateway = gateway
        self.files = files or FileSource()

    def select(self, locator: str) -> ByteSource:
        """Return the source responsible for ``locator``."""
        return self.files if local_path(locator) is not None else self.gateway

    async def fetch(self, locator: str, *, follow_redirects: bool = True) -> FetchResponse:
        return await self.select(locator).fetch(locator, follow_redirects=follow_redirects)


__all__ = [
    "ByteSource",
    "FileSource",
    "GatewaySource",
    "LocatorSource",
    "gateway_url",
    "local_path",
]
