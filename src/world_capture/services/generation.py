"""Generation job orchestration for clone records."""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field, replace

from world_capture.adapters.asset_client import AssetDownloader
from world_capture.adapters.gateway_job_client import JobClient
from world_capture.domain.jobs import JobStatus, WorldResult
from world_capture.domain.records import (
    GENERATABLE_STATUSES,
    CloneRecord,
    CloneStatus,
    SceneEdits,
)
from world_capture.errors import (
    AssetSelectionError,
    GenerationInProgressError,
    GenerationNotAllowedError,
    JobFailedError,
    JobTimeoutError,
)
from world_capture.services.records import RecordRepository

logger = logging.getLogger(__name__)

PREFERRED_SPLAT_RESOLUTIONS = ("500k", "full_res")

RecordListener = Callable[[CloneRecord], None]


@dataclass(frozen=True)
class PollPolicy:
    """Cadence and bounds of the status polling loop."""

    interval_seconds: float = 5.0
    backoff_factor: float = 1.0
    max_interval_seconds: float = 30.0
    timeout_seconds: float | None = 1800.0
    max_attempts: int | None = None

    def next_delay(self, delay: float) -> float:
        """Return the delay to wait before the following poll."""
        return max(
            self.interval_seconds,
            min(delay * self.backoff_factor, self.max_interval_seconds),
        )


class InFlightRegistry:
    """Tracks which records currently have a generation running."""

    def __init__(self) -> None:
        self._active: set[str] = set()

    def acquire(self, record_id: str) -> None:
        """Mark a record busy, failing if it already is."""
        if record_id in self._active:
            raise GenerationInProgressError(
                f"Generation already running for record {record_id}"
            )
        self._active.add(record_id)

    def release(self, record_id: str) -> None:
        """Mark a record idle."""
        self._active.discard(record_id)

    def is_active(self, record_id: str) -> bool:
        """Return True if a generation is running for the record."""
        return record_id in self._active


@dataclass
class GenerationService:
    """Drives a record through submission, polling and asset download.

    Every transition persists a full replacement of the record before the
    next suspension point, so the store always holds the latest state.
    """

    repository: RecordRepository
    job_client: JobClient
    asset_downloader: AssetDownloader
    poll_policy: PollPolicy = field(default_factory=PollPolicy)
    registry: InFlightRegistry = field(default_factory=InFlightRegistry)
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    clock: Callable[[], float] = time.monotonic
    listeners: list[RecordListener] = field(default_factory=list)

    def subscribe(self, listener: RecordListener) -> Callable[[], None]:
        """Register a callback for every persisted record state."""
        self.listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self.listeners:
                self.listeners.remove(listener)

        return unsubscribe

    async def generate(self, record: CloneRecord) -> CloneRecord:
        """Run a full generation and return the final record.

        Failures are persisted on the record as ``error``; only a rejected
        claim raises.
        """
        self.claim(record)
        return await self.run_claimed(record)

    def ensure_startable(self, record: CloneRecord) -> None:
        """Raise if a generation for the record could not start now.

        Nothing is reserved; :meth:`claim` repeats the check atomically.
        """
        if self.registry.is_active(record.id):
            raise GenerationInProgressError(
                f"Generation already running for record {record.id}"
            )
        if record.status not in GENERATABLE_STATUSES:
            raise GenerationNotAllowedError(
                f"Record {record.id} is {record.status.value}; "
                "only draft or failed records can be generated"
            )

    def claim(self, record: CloneRecord) -> None:
        """Reserve a record for generation or raise if it cannot start."""
        self.ensure_startable(record)
        self.registry.acquire(record.id)

    async def run_claimed(self, record: CloneRecord) -> CloneRecord:
        """Run the generation for a record reserved with :meth:`claim`."""
        try:
            return await self._run(record)
        finally:
            self.registry.release(record.id)

    async def generate_in_background(self, record: CloneRecord) -> None:
        """Run a generation scheduled after the request was answered."""
        try:
            await self.generate(record)
        except (GenerationInProgressError, GenerationNotAllowedError) as exc:
            logger.warning("Skipped generation for record %s: %s", record.id, exc)

    async def _run(self, record: CloneRecord) -> CloneRecord:
        working = replace(
            record, status=CloneStatus.UPLOADING, operation_id=None, error=None
        )
        try:
            self._persist(working)
            operation_id = await self.job_client.submit(working.images)
            working = replace(
                working, status=CloneStatus.PROCESSING, operation_id=operation_id
            )
            self._persist(working)
            logger.info("Record %s submitted as operation %s", record.id, operation_id)

            result = await self._wait_for_result(operation_id)
            primary_url, collider_url = select_asset_urls(result)
            primary_asset, collider_asset = await asyncio.gather(
                self.asset_downloader.download(primary_url),
                self.asset_downloader.download(collider_url),
            )
            ready = replace(
                working,
                status=CloneStatus.READY,
                world_id=result.world_id,
                primary_asset=primary_asset,
                collider_asset=collider_asset,
                edits=SceneEdits(),
            )
            self._persist(ready)
        except Exception as exc:
            logger.exception("Generation failed for record %s", record.id)
            failed = replace(
                working,
                status=CloneStatus.ERROR,
                error=str(exc) or type(exc).__name__,
            )
            self._persist(failed)
            return failed
        logger.info("Record %s is ready as world %s", record.id, ready.world_id)
        return ready

    async def _wait_for_result(self, operation_id: str) -> WorldResult:
        policy = self.poll_policy
        started = self.clock()
        delay = policy.interval_seconds
        attempts = 0
        while True:
            if policy.max_attempts is not None and attempts >= policy.max_attempts:
                raise JobTimeoutError(
                    f"Operation {operation_id} did not finish after {attempts} polls"
                )
            elapsed = self.clock() - started
            if (
                policy.timeout_seconds is not None
                and elapsed + delay > policy.timeout_seconds
            ):
                raise JobTimeoutError(
                    f"Operation {operation_id} did not finish within "
                    f"{policy.timeout_seconds:g} seconds"
                )
            await self.sleep(delay)
            attempts += 1
            snapshot = await self.job_client.poll(operation_id)
            if snapshot.status is JobStatus.COMPLETED and snapshot.result is not None:
                return snapshot.result
            if snapshot.status is JobStatus.FAILED:
                detail = f": {snapshot.error}" if snapshot.error else "."
                raise JobFailedError(f"Generation failed on World Labs{detail}")
            logger.info(
                "Operation %s is %s (progress %s)",
                operation_id,
                snapshot.status.value,
                snapshot.progress,
            )
            delay = policy.next_delay(delay)

    def _persist(self, record: CloneRecord) -> None:
        record.check_invariants()
        self.repository.save(record)
        for listener in list(self.listeners):
            try:
                listener(record)
            except Exception:
                logger.exception("Record listener failed for %s", record.id)


def select_asset_urls(result: WorldResult) -> tuple[str, str]:
    """Pick the splat and collider URLs to download for a finished world."""
    splat_url = next(
        (
            result.splat_urls[key]
            for key in PREFERRED_SPLAT_RESOLUTIONS
            if result.splat_urls.get(key)
        ),
        None,
    )
    if splat_url is None:
        raise AssetSelectionError(f"World {result.world_id} has no usable splat asset")
    if not result.collider_mesh_url:
        raise AssetSelectionError(f"World {result.world_id} has no collider mesh")
    return splat_url, result.collider_mesh_url
