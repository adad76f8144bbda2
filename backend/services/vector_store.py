"""Vector store port and its backends."""
import logging
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Sequence

import numpy as np

from models.chunk import Chunk, ContextItem
from models.document import Document
from services.document_store import DocumentStore
from services.errors import IntegrationError, InvalidArgumentError

logger = logging.getLogger(__name__)


class VectorStore(ABC):
    """
    Read side of chunk storage: nearest-neighbour lookup by embedding.

    Retrieval depends only on this contract, so the backend can be swapped
    (pgvector, an in-process index, a test double) without touching the
    orchestration code. Writes belong to the document store.
    """

    @abstractmethod
    def find_nearest(self, query_vector: Sequence[float], limit: int) -> List[ContextItem]:
        """
        Return up to ``limit`` context items, most similar first.

        Raises:
            InvalidArgumentError: If the vector is empty or limit is not positive
            IntegrationError: If the backend query fails
        """

    @staticmethod
    def _check_query(query_vector: Sequence[float], limit: int) -> None:
        if query_vector is None or len(query_vector) == 0:
            raise InvalidArgumentError("Query embedding cannot be empty")
        if limit <= 0:
            raise InvalidArgumentError("limit must be positive", {"limit": limit})


class SupabaseVectorStore(VectorStore):
    """pgvector similarity search through a Supabase RPC function."""

    def __init__(self, client: Any, match_function: str = "match_chunks"):
        """
        Initialize the vector store.

        Args:
            client: Supabase client (see services.supabase_client)
            match_function: Postgres function ordering chunks by cosine distance
        """
        self.client = client
        self.match_function = match_function
        logger.info(f"Initialized SupabaseVectorStore with function: {match_function}")

    def find_nearest(self, query_vector: Sequence[float], limit: int) -> List[ContextItem]:
        """
        Find most similar chunks to query using cosine distance.

        ``match_chunks`` (backend/sql/schema.sql) selects only text and
        source_uri so the stored vectors never travel back over the wire.
        """
        self._check_query(query_vector, limit)

        try:
            response = self.client.rpc(
                self.match_function,
                {
                    "query_embedding": list(query_vector),
                    "match_count": limit
                }
            ).execute()
        except Exception as e:
            error_msg = f"Failed to search vector store: {str(e)}"
            logger.error(error_msg)
            raise IntegrationError(error_msg, {"function": self.match_function}) from e

        items = [
            ContextItem(text=row["text"], source_uri=row["source_uri"])
            for row in (response.data or [])[:limit]
        ]

        logger.debug(f"Found {len(items)} chunks for query")
        return items


class InMemoryVectorStore(VectorStore, DocumentStore):
    """
    Brute-force cosine search over chunks held in process memory.

    Used for local development (VECTOR_BACKEND=memory) and in tests. It
    implements the document store's ``save`` as well so ingestion and chat
    can share one instance.
    """

    def __init__(self):
        self.documents = {}
        self.chunks = []
        self._matrix: Optional[Any] = None

    def save(self, document: Document, chunks: List[Chunk]) -> None:
        if document.doc_id in self.documents:
            raise IntegrationError(f"Document already exists: {document.doc_id}")
        # Build the new state first so a bad vector leaves the store untouched
        rows = [list(chunk.embedding) for chunk in self.chunks + list(chunks)]
        try:
            matrix = np.asarray(rows, dtype=float) if rows else None
        except ValueError as e:
            raise IntegrationError(f"Chunk embeddings must share one dimensionality: {e}") from e
        if matrix is not None and (matrix.ndim != 2 or matrix.shape[1] == 0):
            raise IntegrationError("Chunk embeddings must share one dimensionality")

        self.documents[document.doc_id] = document
        self.chunks.extend(chunks)
        self._matrix = matrix

    def find_nearest(self, query_vector: Sequence[float], limit: int) -> List[ContextItem]:
        self._check_query(query_vector, limit)
        if self._matrix is None:
            return []

        query = np.asarray(query_vector, dtype=float)
        if query.shape[0] != self._matrix.shape[1]:
            raise IntegrationError(
                f"Query dimension {query.shape[0]} does not match stored dimension {self._matrix.shape[1]}"
            )

        norms = np.linalg.norm(self._matrix, axis=1) * np.linalg.norm(query)
        similarity = np.divide(
            self._matrix @ query,
            norms,
            out=np.zeros(len(self.chunks)),
            where=norms != 0
        )
        # Stable sort keeps insertion order among equal scores
        ranked = np.argsort(-similarity, kind="stable")[:limit]

        return [
            ContextItem(text=self.chunks[i].text, source_uri=self.chunks[i].source_uri)
            for i in ranked
        ]
