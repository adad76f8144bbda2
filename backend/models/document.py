"""Document data models."""
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Document:
    """Metadata for one ingested source."""
    doc_id: str
    title: str
    source_uri: str
    chunk_count: int
    created_at: datetime
