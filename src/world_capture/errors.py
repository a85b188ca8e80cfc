"""Error types raised across the capture and generation layers."""


class WorldCaptureError(Exception):
    """Base class for application errors."""


class ConfigurationError(WorldCaptureError):
    """A required server-side setting is missing."""


class ValidationError(WorldCaptureError):
    """Caller supplied a malformed or missing value."""


class UpstreamError(WorldCaptureError):
    """A remote service answered with a non-success HTTP status."""

    def __init__(
        self, message: str, status_code: int, body: object | None = None
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class MalformedResponseError(WorldCaptureError):
    """A remote service answered with a body we could not decode."""


class TransportError(WorldCaptureError):
    """The remote service could not be reached."""


class JobFailedError(WorldCaptureError):
    """The provider reported the generation job as failed."""


class JobTimeoutError(WorldCaptureError):
    """Polling gave up before the job reached a terminal state."""


class AssetSelectionError(WorldCaptureError):
    """A completed job did not offer the assets we need."""


class GenerationInProgressError(WorldCaptureError):
    """A generation for the record is already running."""


class GenerationNotAllowedError(WorldCaptureError):
    """The record is not in a state that accepts a new generation."""


class RecordNotFoundError(WorldCaptureError):
    """No record exists for the given id."""


class RecordInvariantError(WorldCaptureError):
    """A record's fields contradict its status."""
