"""Write side of storage: documents and their embedded chunks."""
import logging
from abc import ABC, abstractmethod
from typing import Any, List

from models.chunk import Chunk
from models.document import Document
from services.errors import IntegrationError, InvalidArgumentError

logger = logging.getLogger(__name__)


class DocumentStore(ABC):
    """Persists one document and all of its chunks as a single unit."""

    @abstractmethod
    def save(self, document: Document, chunks: List[Chunk]) -> None:
        """
        Store document metadata and chunks atomically.

        Either everything is committed or nothing is.

        Raises:
            IntegrationError: If the write fails
        """


class SupabaseDocumentStore(DocumentStore):
    """Writes through the ``ingest_document`` Postgres function in one transaction."""

    def __init__(self, client: Any, ingest_function: str = "ingest_document"):
        """
        Args:
            client: Supabase client (see services.supabase_client)
            ingest_function: Postgres function inserting the document row and chunk rows
        """
        self.client = client
        self.ingest_function = ingest_function
        logger.info(f"Initialized SupabaseDocumentStore with function: {ingest_function}")

    def save(self, document: Document, chunks: List[Chunk]) -> None:
        if len(chunks) != document.chunk_count:
            raise InvalidArgumentError(
                f"Document declares {document.chunk_count} chunks but {len(chunks)} were given",
                {"doc_id": document.doc_id}
            )

        # A single RPC call is a single transaction; PostgREST table inserts
        # into two tables would not be.
        params = {
            "doc": {
                "id": document.doc_id,
                "title": document.title,
                "source_uri": document.source_uri,
                "chunk_count": document.chunk_count,
                "created_at": document.created_at.isoformat(),
            },
            "chunks": [
                {
                    "chunk_index": chunk.index,
                    "text": chunk.text,
                    "source_uri": chunk.source_uri,
                    "embedding": chunk.embedding,
                }
                for chunk in chunks
            ],
        }

        try:
            self.client.rpc(self.ingest_function, params).execute()
        except Exception as e:
            error_msg = f"Failed to store document {document.doc_id}: {str(e)}"
            logger.error(error_msg)
            raise IntegrationError(error_msg, {"doc_id": document.doc_id}) from e

        logger.info(f"Stored document {document.doc_id} with {len(chunks)} chunks")
