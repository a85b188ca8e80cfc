"""Domain models for remote generation jobs."""

from dataclasses import dataclass, field
from enum import Enum


class JobStatus(str, Enum):
    """Normalized status of a provider operation."""

    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class WorldResult:
    """Asset locations of a finished world."""

    world_id: str
    splat_urls: dict[str, str] = field(default_factory=dict)
    collider_mesh_url: str | None = None


@dataclass(frozen=True)
class JobSnapshot:
    """One observation of a remote operation."""

    operation_id: str
    status: JobStatus
    progress: float | None = None
    result: WorldResult | None = None
    error: str | None = None
