"""Pydantic models for provider operation payloads."""

from pydantic import BaseModel, ConfigDict, Field

from world_capture.domain.jobs import JobSnapshot, JobStatus, WorldResult

_STATUSES = {status.value: status for status in JobStatus}


class SplatAssets(BaseModel):
    """Splat files keyed by fidelity level."""

    spz_urls: dict[str, str] = Field(default_factory=dict)


class MeshAssets(BaseModel):
    """Mesh files generated alongside the splats."""

    collider_mesh_url: str | None = None


class WorldAssets(BaseModel):
    """Asset bundle of a generated world."""

    splats: SplatAssets = Field(default_factory=SplatAssets)
    mesh: MeshAssets = Field(default_factory=MeshAssets)


class WorldPayload(BaseModel):
    """Result payload of a completed operation."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    world_id: str = Field(alias="id")
    assets: WorldAssets = Field(default_factory=WorldAssets)

    def to_domain(self) -> WorldResult:
        return WorldResult(
            world_id=self.world_id,
            splat_urls=dict(self.assets.splats.spz_urls),
            collider_mesh_url=self.assets.mesh.collider_mesh_url,
        )


class OperationError(BaseModel):
    """Error payload of a failed operation."""

    model_config = ConfigDict(extra="ignore")

    message: str | None = None
    code: int | str | None = None


class OperationPayload(BaseModel):
    """Operation status as returned by the gateway.

    The provider reports either an explicit ``status`` or a ``done`` flag with
    ``response``/``error`` payloads; both shapes normalize to a
    :class:`JobSnapshot`.
    """

    model_config = ConfigDict(extra="ignore")

    operation_id: str | None = None
    status: str | None = None
    done: bool | None = None
    progress: float | None = None
    result: WorldPayload | None = None
    response: WorldPayload | None = None
    error: OperationError | str | None = None

    def to_snapshot(self, operation_id: str) -> JobSnapshot:
        """Normalize the payload into a domain snapshot."""
        result = self.result or self.response
        error = self._error_message()
        if self.status is not None:
            status = _STATUSES.get(self.status.lower(), JobStatus.PROCESSING)
        elif self.done:
            status = JobStatus.FAILED if error else JobStatus.COMPLETED
        else:
            status = JobStatus.PROCESSING
        return JobSnapshot(
            operation_id=self.operation_id or operation_id,
            status=status,
            progress=self.progress,
            result=result.to_domain() if result else None,
            error=error,
        )

    def _error_message(self) -> str | None:
        if self.error is None:
            return None
        if isinstance(self.error, str):
            return self.error or None
        return self.error.message or "Generation failed"
