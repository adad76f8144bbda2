"""Retrieval engine for orchestrating query embedding and chunk retrieval."""
import logging
from typing import List, Optional

from config import RETRIEVAL_LIMIT
from models.chunk import ContextItem
from services.embedding_model import EmbeddingModel
from services.vector_store import VectorStore

logger = logging.getLogger(__name__)


class RetrievalEngine:
    """Embed a question and look up its nearest chunks."""

    def __init__(
        self,
        vector_store: VectorStore,
        embedding_model: EmbeddingModel,
        default_limit: int = RETRIEVAL_LIMIT
    ):
        """
        Initialize the retrieval engine.

        Args:
            vector_store: Any VectorStore backend
            embedding_model: EmbeddingModel instance for query embedding
            default_limit: Number of chunks returned when the caller does not say
        """
        self.vector_store = vector_store
        self.embedding_model = embedding_model
        self.default_limit = default_limit
        logger.info("Initialized RetrievalEngine")

    def get_query_embedding(self, query: str) -> List[float]:
        """Embed the query as a batch of one."""
        return self.embedding_model.embed_text(query)

    def retrieve(self, query: str, limit: Optional[int] = None) -> List[ContextItem]:
        """
        Retrieve context for a query, closest first.

        Args:
            query: User question
            limit: Maximum number of chunks (default: self.default_limit)

        Returns:
            Ranked context items, at most ``limit`` long

        Raises:
            InvalidArgumentError: If the query is empty or limit is not positive
            IntegrationError: If embedding or search fails
        """
        if limit is None:
            limit = self.default_limit

        logger.debug(f"Embedding query: {query[:100]}...")
        query_embedding = self.get_query_embedding(query)

        logger.debug(f"Searching for top {limit} chunks")
        context = self.vector_store.find_nearest(query_embedding, limit)

        logger.info(f"Retrieved {len(context)} chunks (limit {limit})")
        return context
