"""Error taxonomy shared by the ingestion and chat pipelines."""
from typing import Any, Dict, Optional


class PipelineError(Exception):
    """Base class for every failure raised by a pipeline step."""

    code = "PIPELINE_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


class InvalidArgumentError(PipelineError, ValueError):
    """Bad chunking parameters, malformed storage URI, empty input."""

    code = "INVALID_ARGUMENT"


class FetchError(PipelineError):
    """Source content could not be fetched."""

    code = "FETCH_ERROR"


class NotFoundError(FetchError):
    """Object-storage content is absent or empty."""

    code = "NOT_FOUND"


class IntegrationError(PipelineError, RuntimeError):
    """An external model or store call failed or returned unusable output."""

    code = "INTEGRATION_ERROR"
