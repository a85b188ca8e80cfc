"""Gateway proxy endpoints for world generation jobs."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from starlette.datastructures import UploadFile

from world_capture.errors import ConfigurationError, TransportError, ValidationError

if TYPE_CHECKING:
    from world_capture.adapters.worldlabs_client import UpstreamReply
    from world_capture.containers import AppContainer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/jobs", tags=["jobs"])

_GATEWAY_ERRORS = (ConfigurationError, ValidationError, TransportError)


@router.post("")
async def create_job(request: Request) -> JSONResponse:
    """Forward a multipart capture upload to the provider."""
    container: AppContainer = request.app.state.container
    form = await request.form()
    images = []
    for item in form.getlist("images"):
        if isinstance(item, UploadFile):
            content = await item.read()
            images.append(
                (
                    item.filename or f"img_{len(images)}.jpg",
                    content,
                    item.content_type or "image/jpeg",
                )
            )
    try:
        reply = await container.gateway_service.submit_job(images)
    except _GATEWAY_ERRORS as exc:
        return _error_response(exc)
    return _pass_through(reply)


@router.get("/{operation_id:path}")
async def get_job(operation_id: str, request: Request) -> JSONResponse:
    """Return the provider's view of an operation."""
    container: AppContainer = request.app.state.container
    try:
        reply = await container.gateway_service.get_job(operation_id)
    except _GATEWAY_ERRORS as exc:
        return _error_response(exc)
    return _pass_through(reply)


def _pass_through(reply: UpstreamReply) -> JSONResponse:
    return JSONResponse(status_code=reply.status_code, content=reply.body)


def _error_response(
    exc: ConfigurationError | ValidationError | TransportError,
) -> JSONResponse:
    if isinstance(exc, ConfigurationError):
        logger.error("Gateway misconfigured: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": str(exc)},
        )
    if isinstance(exc, ValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST, content={"message": str(exc)}
        )
    logger.warning("Upstream unreachable: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Proxy error", "details": str(exc)},
    )
