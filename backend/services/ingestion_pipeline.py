"""Ingestion orchestration: fetch, chunk, embed, persist."""
import logging
import secrets
import time
from datetime import datetime, timezone
from typing import Callable

from models.document import Document
from services.chunking_engine import ChunkingEngine
from services.content_fetcher import ContentFetcher
from services.document_store import DocumentStore
from services.embedding_model import EmbeddingModel

logger = logging.getLogger(__name__)


def new_doc_id() -> str:
    """Time-derived document id, e.g. ``doc_1700000000000_a1b2c3``."""
    return f"doc_{int(time.time() * 1000)}_{secrets.token_hex(3)}"


class IngestionPipeline:
    """Turns one source URI into a stored document with embedded chunks."""

    def __init__(
        self,
        fetcher: ContentFetcher,
        chunking_engine: ChunkingEngine,
        embedding_model: EmbeddingModel,
        document_store: DocumentStore,
        id_factory: Callable[[], str] = new_doc_id
    ):
        self.fetcher = fetcher
        self.chunking_engine = chunking_engine
        self.embedding_model = embedding_model
        self.document_store = document_store
        self.id_factory = id_factory
        logger.info("Initialized IngestionPipeline")

    def ingest(self, source_uri: str, title: str, source_type: str = "api") -> str:
        """
        Ingest a document.

        Steps:
        1. Generate the document id (before any I/O)
        2. Fetch content ("api" → HTTP GET, "gcs" → object storage)
        3. Chunk the content
        4. Embed all chunks in one batch
        5. Write document metadata and chunks as one atomic unit

        Nothing is written until step 5, so a failure at any step leaves the
        store unchanged.

        Args:
            source_uri: http(s):// URL or gs://bucket/path
            title: Human readable title
            source_type: "api" or "gcs"

        Returns:
            The new document id

        Raises:
            InvalidArgumentError, FetchError, NotFoundError, IntegrationError
        """
        doc_id = self.id_factory()
        log_extra = {"doc_id": doc_id, "source_uri": source_uri, "source_type": source_type}
        logger.info(f"Ingesting {source_uri} as {doc_id}", extra=log_extra)

        content = self.fetcher.fetch(source_uri, source_type)
        logger.debug(f"Fetched {len(content)} characters", extra=log_extra)

        texts = self.chunking_engine.chunk_text(content)
        logger.info(f"Created {len(texts)} chunks", extra=log_extra)

        embeddings = self.embedding_model.embed_batch(texts)
        chunks = self.chunking_engine.build_chunks(doc_id, source_uri, texts, embeddings)

        document = Document(
            doc_id=doc_id,
            title=title,
            source_uri=source_uri,
            chunk_count=len(chunks),
            created_at=datetime.now(timezone.utc)
        )
        self.document_store.save(document, chunks)

        logger.info(f"Ingested {doc_id} with {len(chunks)} chunks", extra=log_extra)
        return doc_id
