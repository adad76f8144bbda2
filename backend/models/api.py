"""Request and response models for the RPC surface."""
import re
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_TITLE = "Untitled Document"

GCS_URI_PATTERN = re.compile(r"^gs://[^/]+/.+$")
HTTP_URI_PATTERN = re.compile(r"^https?://[^/\s]+", re.IGNORECASE)


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class HistoryTurn(_CamelModel):
    """A previous exchange in the chat."""
    role: Literal["user", "model"]
    text: str


class ChatQuery(_CamelModel):
    """Input for the chat procedure."""
    question: str = Field(..., min_length=1, max_length=1000)
    history: Optional[List[HistoryTurn]] = None

    @field_validator("question")
    @classmethod
    def question_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("question must contain non-whitespace characters")
        return value


class ChatResponse(_CamelModel):
    """Output of the chat procedure."""
    response: str
    citations: List[str]


class IngestRequest(_CamelModel):
    """Input for the ingest procedure."""
    source_uri: str = Field(..., alias="sourceUri", min_length=1)
    source_type: Literal["api", "gcs"] = Field(..., alias="sourceType")
    title: Optional[str] = None

    @model_validator(mode="after")
    def check_scheme_matches_source_type(self) -> "IngestRequest":
        if self.source_type == "gcs" and not GCS_URI_PATTERN.match(self.source_uri):
            raise ValueError("sourceType 'gcs' requires a gs://bucket/path URI")
        if self.source_type == "api" and not HTTP_URI_PATTERN.match(self.source_uri):
            raise ValueError("sourceType 'api' requires an http:// or https:// URL")
        return self

    @property
    def resolved_title(self) -> str:
        return self.title or DEFAULT_TITLE


class IngestResponse(_CamelModel):
    """Output of the ingest procedure."""
    success: bool
    doc_id: str = Field(..., alias="docId")
