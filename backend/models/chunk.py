"""Chunk data models."""
from dataclasses import dataclass, field
from typing import List


@dataclass
class Chunk:
    """A window of a source document together with its embedding."""
    doc_id: str
    index: int  # ordinal position within the document
    text: str
    source_uri: str  # denormalized from the parent document
    embedding: List[float] = field(default_factory=list)


@dataclass(frozen=True)
class ContextItem:
    """Retrieved chunk text and where it came from."""
    text: str
    source_uri: str


@dataclass
class Answer:
    """Grounded answer produced for a chat question."""
    response_text: str
    citations: List[str]
    context: List[ContextItem] = field(default_factory=list)
