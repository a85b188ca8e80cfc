"""Downloader for generated world assets."""

from dataclasses import dataclass
from typing import Protocol

import httpx

from world_capture.errors import TransportError, UpstreamError


class AssetDownloader(Protocol):
    """Interface for fetching remote binary assets."""

    async def download(self, url: str) -> bytes:
        """Download an asset and return its bytes."""


@dataclass
class HttpxAssetDownloader(AssetDownloader):
    """Asset downloader using httpx."""

    http_client: httpx.AsyncClient
    timeout: float = 120.0

    @classmethod
    def create(cls, timeout: float = 120.0) -> "HttpxAssetDownloader":
        """Create a downloader with a managed httpx session."""
        return cls(
            http_client=httpx.AsyncClient(follow_redirects=True), timeout=timeout
        )

    async def download(self, url: str) -> bytes:
        """Download asset bytes, failing on any non-success status."""
        try:
            response = await self.http_client.get(url, timeout=self.timeout)
        except httpx.TransportError as exc:
            raise TransportError(f"Failed to download asset {url}: {exc}") from exc
        if not response.is_success:
            raise UpstreamError(
                f"Failed to download asset {url} ({response.status_code})",
                status_code=response.status_code,
            )
        return response.content

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
