"""Data models for Orion RAG."""
from .document import Document
from .chunk import Chunk, ContextItem, Answer
from .api import ChatQuery, ChatResponse, HistoryTurn, IngestRequest, IngestResponse

__all__ = [
    "Document",
    "Chunk",
    "ContextItem",
    "Answer",
    "ChatQuery",
    "ChatResponse",
    "HistoryTurn",
    "IngestRequest",
    "IngestResponse",
]
