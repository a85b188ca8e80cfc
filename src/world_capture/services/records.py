"""Record library operations."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol
from uuid import uuid4

from world_capture.domain.records import (
    AssetKind,
    CloneRecord,
    CloneStatus,
    RecordSummary,
)
from world_capture.errors import RecordNotFoundError, ValidationError

logger = logging.getLogger(__name__)


class RecordRepository(Protocol):
    """Persistence interface for clone records."""

    def save(self, record: CloneRecord) -> None:
        """Insert or fully replace a record."""

    def get_all(self) -> list[CloneRecord]:
        """Return every stored record in no particular order."""

    def get_by_id(self, record_id: str) -> CloneRecord | None:
        """Return a record by id, if present."""

    def get_summaries(self) -> list[RecordSummary]:
        """Return metadata of every stored record without loading blobs."""

    def get_summary(self, record_id: str) -> RecordSummary | None:
        """Return a record's metadata without loading blobs, if present."""

    def get_asset(self, record_id: str, kind: AssetKind) -> bytes | None:
        """Return one generated asset of a record, if stored."""

    def delete(self, record_id: str) -> None:
        """Delete a record; deleting a missing record is a no-op."""


@dataclass
class RecordService:
    """Creates drafts and serves the record library."""

    repository: RecordRepository
    image_count: int = 16

    def create_draft(
        self, name: str, images: Sequence[bytes], thumbnail: str
    ) -> CloneRecord:
        """Persist a freshly captured image set as a draft record."""
        if len(images) != self.image_count:
            raise ValidationError(
                f"Expected {self.image_count} images, got {len(images)}"
            )
        if any(not image for image in images):
            raise ValidationError("Captured images must not be empty")
        record = CloneRecord(
            id=uuid4().hex,
            name=name.strip() or _default_name(),
            created_at=datetime.now(tz=UTC),
            status=CloneStatus.DRAFT,
            images=tuple(images),
            thumbnail=thumbnail,
        )
        record.check_invariants()
        self.repository.save(record)
        logger.info("Created draft record %s", record.id)
        return record

    def list_records(self) -> list[RecordSummary]:
        """Return the metadata of all records, newest first."""
        summaries = self.repository.get_summaries()
        return sorted(summaries, key=lambda summary: summary.created_at, reverse=True)

    def get_summary(self, record_id: str) -> RecordSummary:
        """Return a record's metadata or raise if it does not exist."""
        summary = self.repository.get_summary(record_id)
        if summary is None:
            raise RecordNotFoundError(f"Record {record_id} not found")
        return summary

    def get_record(self, record_id: str) -> CloneRecord:
        """Return a full record or raise if it does not exist."""
        record = self.repository.get_by_id(record_id)
        if record is None:
            raise RecordNotFoundError(f"Record {record_id} not found")
        return record

    def get_asset(self, record_id: str, kind: AssetKind) -> bytes:
        """Return a generated asset or raise if the record has none."""
        content = self.repository.get_asset(record_id, kind)
        if content is None:
            raise RecordNotFoundError(f"Record {record_id} has no {kind} asset")
        return content

    def delete_record(self, record_id: str) -> None:
        """Delete a record; a running remote job is left orphaned."""
        self.repository.delete(record_id)
        logger.info("Deleted record %s", record_id)


def _default_name() -> str:
    return f"Clone {datetime.now(tz=UTC).strftime('%H:%M:%S')}"
