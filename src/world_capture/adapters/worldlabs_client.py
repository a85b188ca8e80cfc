"""World Labs API client used by the gateway proxy."""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

import httpx

from world_capture.errors import TransportError

UploadFile = tuple[str, bytes, str]


@dataclass(frozen=True)
class UpstreamReply:
    """Status code and decoded body returned by the provider."""

    status_code: int
    body: object


class WorldLabsClient(Protocol):
    """Interface for the upstream world generation API."""

    async def generate_world(
        self, api_key: str, images: Sequence[UploadFile]
    ) -> UpstreamReply:
        """Start a world generation from uploaded images."""

    async def get_operation(self, api_key: str, operation_id: str) -> UpstreamReply:
        """Fetch the state of a generation operation."""


@dataclass
class HttpxWorldLabsClient(WorldLabsClient):
    """World Labs client implemented with httpx."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout: float = 30.0

    @classmethod
    def create(cls, base_url: str, timeout: float = 30.0) -> "HttpxWorldLabsClient":
        """Create a World Labs client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(),
            timeout=timeout,
        )

    async def generate_world(
        self, api_key: str, images: Sequence[UploadFile]
    ) -> UpstreamReply:
        """Forward the uploaded images to worlds:generate."""
        files = [("images", image) for image in images]
        return await self._send(
            "POST",
            f"{self.base_url}/worlds:generate",
            api_key,
            files=files,
        )

    async def get_operation(self, api_key: str, operation_id: str) -> UpstreamReply:
        """Fetch an operation by id."""
        return await self._send(
            "GET", f"{self.base_url}/operations/{operation_id}", api_key
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _send(
        self, method: str, url: str, api_key: str, **kwargs: object
    ) -> UpstreamReply:
        try:
            response = await self.http_client.request(
                method,
                url,
                headers={"WLT-Api-Key": api_key},
                timeout=self.timeout,
                **kwargs,
            )
        except httpx.TransportError as exc:
            raise TransportError(f"World Labs request failed: {exc}") from exc
        try:
            body: object = response.json()
        except ValueError:
            body = {"message": response.text or response.reason_phrase}
        return UpstreamReply(status_code=response.status_code, body=body)
