"""Supabase-backed clone record repository."""

from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from world_capture.domain.records import (
    AssetKind,
    CloneRecord,
    CloneStatus,
    RecordSummary,
    edits_from_json,
    edits_to_json,
)
from world_capture.services.records import RecordRepository

_COLUMNS = (
    "id, name, created_at, status, thumbnail, image_count, operation_id, "
    "world_id, primary_asset_path, collider_asset_path, edits_json, error"
)


@dataclass
class SupabaseRecordRepository(RecordRepository):
    """Supabase implementation for clone records.

    Scalar fields live in a table row; images and generated assets live in a
    storage bucket. Blobs are written before the row, so a row never points
    at an object that has not been uploaded.
    """

    client: Client
    table: str = "clone_records"
    bucket: str = "clone-assets"

    def save(self, record: CloneRecord) -> None:
        """Insert or fully replace a record."""
        if self._fetch_row(record.id) is None:
            for index, image in enumerate(record.images):
                self._upload(_image_path(record.id, index), image, "image/jpeg")
        primary_path = None
        if record.primary_asset is not None:
            primary_path = f"{record.id}/primary.spz"
            self._upload(primary_path, record.primary_asset, "application/octet-stream")
        collider_path = None
        if record.collider_asset is not None:
            collider_path = f"{record.id}/collider.glb"
            self._upload(collider_path, record.collider_asset, "model/gltf-binary")
        self.client.table(self.table).upsert(
            {
                "id": record.id,
                "name": record.name,
                "created_at": record.created_at.isoformat(),
                "status": record.status.value,
                "thumbnail": record.thumbnail,
                "image_count": len(record.images),
                "operation_id": record.operation_id,
                "world_id": record.world_id,
                "primary_asset_path": primary_path,
                "collider_asset_path": collider_path,
                "edits_json": edits_to_json(record.edits) if record.edits else None,
                "error": record.error,
            }
        ).execute()

    def get_all(self) -> list[CloneRecord]:
        """Return every stored record with its blobs loaded."""
        response = self.client.table(self.table).select(_COLUMNS).execute()
        return [self._to_record(row) for row in response.data or []]

    def get_by_id(self, record_id: str) -> CloneRecord | None:
        """Return a record by id, if present."""
        row = self._fetch_row(record_id)
        if row is None:
            return None
        return self._to_record(row)

    def get_summaries(self) -> list[RecordSummary]:
        """Return metadata of every stored record without touching storage."""
        response = self.client.table(self.table).select(_COLUMNS).execute()
        return [_to_summary(row) for row in response.data or []]

    def get_summary(self, record_id: str) -> RecordSummary | None:
        """Return a record's metadata without touching storage, if present."""
        row = self._fetch_row(record_id)
        if row is None:
            return None
        return _to_summary(row)

    def get_asset(self, record_id: str, kind: AssetKind) -> bytes | None:
        """Download a single generated asset, if the record has one."""
        row = self._fetch_row(record_id)
        if row is None:
            return None
        return self._download(row.get(f"{kind}_asset_path"))

    def delete(self, record_id: str) -> None:
        """Delete a record row and its stored objects."""
        row = self._fetch_row(record_id)
        if row is None:
            return
        self.client.table(self.table).delete().eq("id", record_id).execute()
        paths = [
            _image_path(record_id, index) for index in range(int(row["image_count"]))
        ]
        paths.extend(
            path
            for path in (row.get("primary_asset_path"), row.get("collider_asset_path"))
            if path
        )
        self.client.storage.from_(self.bucket).remove(paths)

    def _fetch_row(self, record_id: str) -> dict[str, object] | None:
        response = (
            self.client.table(self.table)
            .select(_COLUMNS)
            .eq("id", record_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0]

    def _upload(self, path: str, data: bytes, content_type: str) -> None:
        self.client.storage.from_(self.bucket).upload(
            path,
            data,
            file_options={"content-type": content_type, "upsert": "true"},
        )

    def _download(self, path: str | None) -> bytes | None:
        if not path:
            return None
        return self.client.storage.from_(self.bucket).download(path)

    def _to_record(self, row: dict[str, object]) -> CloneRecord:
        record_id = str(row["id"])
        images = tuple(
            self.client.storage.from_(self.bucket).download(
                _image_path(record_id, index)
            )
            for index in range(int(row["image_count"]))
        )
        edits = row.get("edits_json")
        return CloneRecord(
            id=record_id,
            name=str(row["name"]),
            created_at=datetime.fromisoformat(str(row["created_at"])),
            status=CloneStatus(row["status"]),
            images=images,
            thumbnail=str(row.get("thumbnail") or ""),
            operation_id=row.get("operation_id"),
            world_id=row.get("world_id"),
            primary_asset=self._download(row.get("primary_asset_path")),
            collider_asset=self._download(row.get("collider_asset_path")),
            edits=edits_from_json(edits) if isinstance(edits, dict) else None,
            error=row.get("error"),
        )


def _image_path(record_id: str, index: int) -> str:
    return f"{record_id}/images/{index:02d}.jpg"


def _to_summary(row: dict[str, object]) -> RecordSummary:
    return RecordSummary(
        id=str(row["id"]),
        name=str(row["name"]),
        created_at=datetime.fromisoformat(str(row["created_at"])),
        status=CloneStatus(row["status"]),
        thumbnail=str(row.get("thumbnail") or ""),
        image_count=int(row["image_count"]),
        operation_id=row.get("operation_id"),
        world_id=row.get("world_id"),
        has_primary_asset=bool(row.get("primary_asset_path")),
        has_collider_asset=bool(row.get("collider_asset_path")),
        error=row.get("error"),
    )
