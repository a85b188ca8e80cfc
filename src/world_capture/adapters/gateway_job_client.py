"""Client for the generation gateway's job endpoints."""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

import httpx
from pydantic import ValidationError as PydanticValidationError

from world_capture.adapters.job_models import OperationPayload
from world_capture.domain.jobs import JobSnapshot
from world_capture.errors import MalformedResponseError, TransportError, UpstreamError


class JobClient(Protocol):
    """Interface for submitting and polling generation jobs."""

    async def submit(self, images: Sequence[bytes]) -> str:
        """Submit a capture and return the operation id."""

    async def poll(self, operation_id: str) -> JobSnapshot:
        """Return the current state of an operation."""


@dataclass
class HttpxJobClient(JobClient):
    """Gateway job client implemented with httpx."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout: float = 30.0

    @classmethod
    def create(cls, base_url: str, timeout: float = 30.0) -> "HttpxJobClient":
        """Create a job client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(),
            timeout=timeout,
        )

    async def submit(self, images: Sequence[bytes]) -> str:
        """Upload the capture images as a multipart job request."""
        files = [
            ("images", (f"img_{index}.jpg", image, "image/jpeg"))
            for index, image in enumerate(images)
        ]
        try:
            response = await self.http_client.post(
                f"{self.base_url}/jobs", files=files, timeout=self.timeout
            )
        except httpx.TransportError as exc:
            raise TransportError(f"Could not reach generation gateway: {exc}") from exc
        _raise_for_status(response, "Generation request failed")
        payload = _json_object(response)
        operation_id = payload.get("operation_id")
        if not isinstance(operation_id, str) or not operation_id:
            raise MalformedResponseError("Gateway response has no operation_id")
        return operation_id

    async def poll(self, operation_id: str) -> JobSnapshot:
        """Fetch the operation status from the gateway."""
        try:
            response = await self.http_client.get(
                f"{self.base_url}/jobs/{operation_id}", timeout=self.timeout
            )
        except httpx.TransportError as exc:
            raise TransportError(f"Could not reach generation gateway: {exc}") from exc
        _raise_for_status(response, "Polling failed")
        payload = _json_object(response)
        try:
            operation = OperationPayload.model_validate(payload)
        except PydanticValidationError as exc:
            raise MalformedResponseError(
                f"Unexpected operation payload for {operation_id}"
            ) from exc
        return operation.to_snapshot(operation_id)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def _raise_for_status(response: httpx.Response, fallback: str) -> None:
    if response.is_success:
        return
    try:
        body: object = response.json()
    except ValueError:
        body = response.text
    detail = None
    if isinstance(body, dict):
        detail = body.get("message") or body.get("error")
    elif isinstance(body, str) and body:
        detail = body
    message = f"{fallback} ({response.status_code})"
    if detail:
        message = f"{message}: {detail}"
    raise UpstreamError(message, status_code=response.status_code, body=body)


def _json_object(response: httpx.Response) -> dict[str, object]:
    try:
        payload = response.json()
    except ValueError as exc:
        raise MalformedResponseError("Gateway returned a non-JSON body") from exc
    if not isinstance(payload, dict):
        raise MalformedResponseError("Gateway returned a non-object body")
    return payload
