"""Credential-injecting proxy in front of the world generation provider."""

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass

from world_capture.adapters.worldlabs_client import (
    UploadFile,
    UpstreamReply,
    WorldLabsClient,
)
from world_capture.errors import ConfigurationError, ValidationError

logger = logging.getLogger(__name__)

_OPERATION_ID = re.compile(r"^[A-Za-z0-9._:-]+$")


@dataclass
class GatewayService:
    """Forwards job requests upstream with the server-held API key."""

    client: WorldLabsClient
    api_key: str | None

    async def submit_job(self, images: Sequence[UploadFile]) -> UpstreamReply:
        """Start a world generation and pass the provider reply through."""
        api_key = self._require_api_key()
        if not images:
            raise ValidationError("At least one image is required")
        reply = await self.client.generate_world(api_key, images)
        if reply.status_code >= 400:
            logger.warning("World generation rejected upstream (%s)", reply.status_code)
        return reply

    async def get_job(self, operation_id: str) -> UpstreamReply:
        """Fetch an operation and pass the provider reply through."""
        api_key = self._require_api_key()
        if not _OPERATION_ID.match(operation_id):
            raise ValidationError("Operation id must be a single non-empty value")
        return await self.client.get_operation(api_key, operation_id)

    def _require_api_key(self) -> str:
        if not self.api_key:
            raise ConfigurationError("Server configuration error: Missing API Key")
        return self.api_key
