"""
Document ingestion script for Orion RAG.

Runs the same pipeline as POST /rag/ingest for one source:
1. Fetch content (HTTP(S) URL or gs://bucket/path)
2. Chunk it into overlapping windows
3. Embed all chunks in one Hugging Face call
4. Store the document and its chunks in Supabase

Usage:
    python ingest_documents.py https://example.com/handbook.txt --title "Handbook"
    python ingest_documents.py gs://my-bucket/docs/faq.md --warmup
"""
import argparse
import sys
import logging
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent))

from config import get_settings
from logger import setup_logging
from models.api import DEFAULT_TITLE
from services.chunking_engine import ChunkingEngine
from services.content_fetcher import ContentFetcher
from services.document_store import SupabaseDocumentStore
from services.embedding_model import EmbeddingModel
from services.errors import PipelineError
from services.ingestion_pipeline import IngestionPipeline
from services.supabase_client import create_supabase_client

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Ingest one document into the Orion RAG store")
    parser.add_argument("source_uri", help="http(s):// URL or gs://bucket/path")
    parser.add_argument("--title", default=DEFAULT_TITLE, help="Document title")
    parser.add_argument(
        "--source-type",
        choices=["api", "gcs"],
        help="Fetch strategy (inferred from the URI scheme when omitted)"
    )
    parser.add_argument("--warmup", action="store_true", help="Warm up the embedding model first")
    return parser.parse_args(argv)


def infer_source_type(source_uri: str) -> str:
    return "gcs" if source_uri.startswith("gs://") else "api"


def main(argv=None) -> int:
    """Main ingestion process."""
    args = parse_args(argv)
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)

    source_type = args.source_type or infer_source_type(args.source_uri)

    try:
        embedding_model = EmbeddingModel(settings)
        pipeline = IngestionPipeline(
            fetcher=ContentFetcher(settings),
            chunking_engine=ChunkingEngine(settings.chunk_size, settings.chunk_overlap),
            embedding_model=embedding_model,
            document_store=SupabaseDocumentStore(create_supabase_client(settings))
        )

        if args.warmup:
            logger.info("This may take 15-20 seconds on first run (HuggingFace free tier)...")
            embedding_model.warmup()

        doc_id = pipeline.ingest(args.source_uri, args.title, source_type)

    except KeyboardInterrupt:
        logger.warning("Ingestion interrupted by user")
        return 1
    except (PipelineError, ValueError) as e:
        logger.error(f"Ingestion failed: {e}")
        return 1

    logger.info(f"Ingestion complete: {doc_id}")
    print(doc_id)
    return 0


if __name__ == "__main__":
    sys.exit(main())
