"""Main entry point for the Orion RAG API."""
import logging
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from config import get_settings
from logger import setup_logging
from models.api import ChatQuery, ChatResponse, IngestRequest, IngestResponse
from services.chat_service import ChatService
from services.chunking_engine import ChunkingEngine
from services.content_fetcher import ContentFetcher
from services.document_store import SupabaseDocumentStore
from services.embedding_model import EmbeddingModel
from services.errors import (
    FetchError,
    IntegrationError,
    InvalidArgumentError,
    NotFoundError,
    PipelineError,
)
from services.ingestion_pipeline import IngestionPipeline
from services.llm_client import LLMClient
from services.retrieval_engine import RetrievalEngine
from services.supabase_client import create_supabase_client
from services.vector_store import InMemoryVectorStore, SupabaseVectorStore

settings = get_settings()
setup_logging(settings.log_level, settings.log_format)

# Initialize logging
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Orion RAG",
    description="Document ingestion and grounded chat over a vector store",
    version="1.0.0"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize services (will be done on startup)
chat_service: ChatService = None
ingestion_pipeline: IngestionPipeline = None


def build_services(app_settings=None):
    """Wire the pipelines from settings. Returns (chat_service, ingestion_pipeline)."""
    settings = app_settings or get_settings()
    embedding_model = EmbeddingModel(settings)

    if settings.vector_backend == "memory":
        store = InMemoryVectorStore()
        vector_store, document_store = store, store
        logger.warning("Using in-memory vector store; documents are lost on restart")
    else:
        client = create_supabase_client(settings)
        vector_store = SupabaseVectorStore(client)
        document_store = SupabaseDocumentStore(client)

    retrieval_engine = RetrievalEngine(vector_store, embedding_model, settings.retrieval_limit)
    chat = ChatService(retrieval_engine, LLMClient(settings))

    ingestion = IngestionPipeline(
        fetcher=ContentFetcher(settings),
        chunking_engine=ChunkingEngine(settings.chunk_size, settings.chunk_overlap),
        embedding_model=embedding_model,
        document_store=document_store
    )
    return chat, ingestion


@app.on_event("startup")
async def startup_event():
    """Initialize services on startup."""
    global chat_service, ingestion_pipeline

    logger.info("Initializing Orion RAG services...")
    try:
        chat_service, ingestion_pipeline = build_services()
        logger.info("All services initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize services: {e}", exc_info=True)
        raise


def _http_error(e: PipelineError) -> HTTPException:
    """Map the pipeline error taxonomy onto HTTP status codes, keeping the message."""
    if isinstance(e, InvalidArgumentError):
        status_code = 400
    elif isinstance(e, NotFoundError):
        status_code = 404
    elif isinstance(e, FetchError):
        status_code = 502
    elif isinstance(e, IntegrationError):
        status_code = 503
    else:
        status_code = 500
    return HTTPException(status_code=status_code, detail={"error": e.to_dict()})


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "message": "Orion RAG API"}


@app.get("/health")
async def health():
    """Detailed health check."""
    return {
        "status": "healthy",
        "service": "orion-rag",
        "version": "1.0.0",
        "ready": chat_service is not None and ingestion_pipeline is not None
    }


@app.post("/rag/chat", response_model=ChatResponse)
def chat_endpoint(query: ChatQuery) -> ChatResponse:
    """
    Retrieval-augmented chat.

    1. Embed the question
    2. Find the nearest chunks
    3. Generate a grounded answer citing the retrieved sources
    """
    logger.info(f"Processing chat question: {query.question[:100]}...")
    try:
        answer = chat_service.answer(query.question, history=query.history)
    except PipelineError as e:
        logger.error(f"Chat failed: {e.code}: {e.message}", extra={"error_code": e.code})
        raise _http_error(e)
    except Exception as e:
        logger.error(f"Unexpected error processing chat: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail={"error": {"code": "UNKNOWN_ERROR", "message": str(e) or "Failed to generate AI response"}}
        )

    return ChatResponse(response=answer.response_text, citations=answer.citations)


@app.post("/rag/ingest", response_model=IngestResponse)
def ingest_endpoint(request: IngestRequest) -> IngestResponse:
    """Fetch, chunk, embed and store one document."""
    try:
        doc_id = ingestion_pipeline.ingest(
            request.source_uri,
            request.resolved_title,
            request.source_type
        )
    except PipelineError as e:
        logger.error(f"Ingestion failed: {e.code}: {e.message}", extra={"error_code": e.code})
        raise _http_error(e)
    except Exception as e:
        logger.error(f"Unexpected error during ingestion: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail={"error": {"code": "UNKNOWN_ERROR", "message": str(e) or "Failed to ingest document"}}
        )

    return IngestResponse(success=True, doc_id=doc_id)


if __name__ == "__main__":
    import uvicorn
    logger.info(f"Starting Orion RAG API on port {settings.port}")
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
