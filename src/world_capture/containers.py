"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from world_capture.adapters.asset_client import HttpxAssetDownloader
from world_capture.adapters.gateway_job_client import HttpxJobClient
from world_capture.adapters.supabase_record_repository import (
    SupabaseRecordRepository,
)
from world_capture.adapters.worldlabs_client import HttpxWorldLabsClient
from world_capture.config import Settings
from world_capture.services.gateway import GatewayService
from world_capture.services.generation import GenerationService, PollPolicy
from world_capture.services.records import RecordService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    record_service: RecordService
    generation_service: GenerationService
    gateway_service: GatewayService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    record_repository = SupabaseRecordRepository(
        client=supabase_client,
        table=resolved_settings.records_table,
        bucket=resolved_settings.assets_bucket,
    )
    record_service = RecordService(
        repository=record_repository,
        image_count=resolved_settings.capture_image_count,
    )
    job_client = HttpxJobClient.create(
        base_url=resolved_settings.gateway_base_url,
        timeout=resolved_settings.http_timeout_seconds,
    )
    asset_downloader = HttpxAssetDownloader.create(
        timeout=resolved_settings.asset_timeout_seconds
    )
    generation_service = GenerationService(
        repository=record_repository,
        job_client=job_client,
        asset_downloader=asset_downloader,
        poll_policy=PollPolicy(
            interval_seconds=resolved_settings.poll_interval_seconds,
            backoff_factor=resolved_settings.poll_backoff_factor,
            max_interval_seconds=resolved_settings.poll_max_interval_seconds,
            timeout_seconds=resolved_settings.poll_timeout_seconds,
            max_attempts=resolved_settings.poll_max_attempts,
        ),
    )
    worldlabs_client = HttpxWorldLabsClient.create(
        base_url=resolved_settings.worldlabs_base_url,
        timeout=resolved_settings.http_timeout_seconds,
    )
    gateway_service = GatewayService(
        client=worldlabs_client, api_key=resolved_settings.wlt_api_key
    )

    async def close_resources() -> None:
        await job_client.close()
        await asset_downloader.close()
        await worldlabs_client.close()

    return AppContainer(
        settings=resolved_settings,
        record_service=record_service,
        generation_service=generation_service,
        gateway_service=gateway_service,
        close_resources=close_resources,
    )
