"""Record library endpoints consumed by the capture and viewer UIs."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import (
    APIRouter,
    BackgroundTasks,
    HTTPException,
    Request,
    Response,
    status,
)
from starlette.datastructures import UploadFile

from world_capture.domain.records import AssetKind, RecordSummary
from world_capture.errors import (
    GenerationInProgressError,
    GenerationNotAllowedError,
    RecordNotFoundError,
    ValidationError,
)

if TYPE_CHECKING:
    from world_capture.containers import AppContainer

router = APIRouter(prefix="/records", tags=["records"])


@router.get("")
async def list_records(request: Request) -> dict[str, object]:
    """Return every record, newest first."""
    container: AppContainer = request.app.state.container
    summaries = container.record_service.list_records()
    return {"records": [_record_summary(summary) for summary in summaries]}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_record(request: Request) -> dict[str, object]:
    """Store a captured image set as a draft record."""
    container: AppContainer = request.app.state.container
    form = await request.form()
    images = [
        await item.read()
        for item in form.getlist("images")
        if isinstance(item, UploadFile)
    ]
    name = form.get("name")
    thumbnail = form.get("thumbnail")
    try:
        record = container.record_service.create_draft(
            name=name if isinstance(name, str) else "",
            images=images,
            thumbnail=thumbnail if isinstance(thumbnail, str) else "",
        )
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return _record_summary(RecordSummary.from_record(record))


@router.get("/{record_id}")
async def get_record(record_id: str, request: Request) -> dict[str, object]:
    """Return a single record's metadata."""
    container: AppContainer = request.app.state.container
    try:
        summary = container.record_service.get_summary(record_id)
    except RecordNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND) from exc
    return _record_summary(summary)


@router.get("/{record_id}/assets/{asset}")
async def get_asset(record_id: str, asset: str, request: Request) -> Response:
    """Return a generated asset for the viewer."""
    container: AppContainer = request.app.state.container
    kind: AssetKind
    if asset == "primary":
        kind = "primary"
    elif asset == "collider":
        kind = "collider"
    else:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    try:
        content = container.record_service.get_asset(record_id, kind)
    except RecordNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND) from exc
    return Response(content=content, media_type="application/octet-stream")


@router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_record(record_id: str, request: Request) -> Response:
    """Delete a record without touching any remote job."""
    container: AppContainer = request.app.state.container
    container.record_service.delete_record(record_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{record_id}/generate", status_code=status.HTTP_202_ACCEPTED)
async def generate_record(
    record_id: str, request: Request, background_tasks: BackgroundTasks
) -> dict[str, str]:
    """Start generating a world for the record.

    The request only checks the record; the background task takes the
    in-flight reservation, so an undelivered response leaves nothing held.
    """
    container: AppContainer = request.app.state.container
    try:
        record = container.record_service.get_record(record_id)
        container.generation_service.ensure_startable(record)
    except RecordNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND) from exc
    except (GenerationInProgressError, GenerationNotAllowedError) as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail=str(exc)
        ) from exc
    background_tasks.add_task(
        container.generation_service.generate_in_background, record
    )
    return {"status": "accepted", "record_id": record_id}


def _record_summary(summary: RecordSummary) -> dict[str, object]:
    return {
        "id": summary.id,
        "name": summary.name,
        "created_at": summary.created_at.isoformat(),
        "status": summary.status.value,
        "thumbnail": summary.thumbnail,
        "image_count": summary.image_count,
        "operation_id": summary.operation_id,
        "world_id": summary.world_id,
        "has_primary_asset": summary.has_primary_asset,
        "has_collider_asset": summary.has_collider_asset,
        "error": summary.error,
    }
