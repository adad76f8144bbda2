"""Services for Orion RAG."""
from .errors import PipelineError, InvalidArgumentError, FetchError, NotFoundError, IntegrationError
from .chunking_engine import ChunkingEngine, chunk_text
from .embedding_model import EmbeddingModel
from .vector_store import VectorStore, SupabaseVectorStore, InMemoryVectorStore
from .document_store import DocumentStore, SupabaseDocumentStore
from .content_fetcher import ContentFetcher, parse_gcs_uri
from .ingestion_pipeline import IngestionPipeline
from .retrieval_engine import RetrievalEngine
from .llm_client import LLMClient, LLMResponse, LLMError, LLMClientError
from .chat_service import ChatService, dedupe_citations

__all__ = [
    'PipelineError', 'InvalidArgumentError', 'FetchError', 'NotFoundError', 'IntegrationError',
    'ChunkingEngine', 'chunk_text', 'EmbeddingModel',
    'VectorStore', 'SupabaseVectorStore', 'InMemoryVectorStore',
    'DocumentStore', 'SupabaseDocumentStore', 'ContentFetcher', 'parse_gcs_uri',
    'IngestionPipeline', 'RetrievalEngine',
    'LLMClient', 'LLMResponse', 'LLMError', 'LLMClientError',
    'ChatService', 'dedupe_citations',
]
