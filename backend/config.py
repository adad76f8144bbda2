"""Configuration management for Orion RAG."""
import os
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, Optional
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Model Configuration
EMBEDDING_MODEL = "sentence-transformers/all-mpnet-base-v2"
EMBEDDING_API_URL = "https://router.huggingface.co/hf-inference/models/{model}/pipeline/feature-extraction"
CHAT_MODEL = "llama-3.3-70b-versatile"

# Chunking Configuration
CHUNK_SIZE = 1000  # characters
CHUNK_OVERLAP = 200  # characters

# Retrieval Configuration
RETRIEVAL_LIMIT = 3

# Network Configuration
REQUEST_TIMEOUT = 60.0  # seconds


def _optional_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    return int(value) if value else None


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration, built once at startup and passed to clients."""
    groq_api_key: Optional[str] = None
    huggingface_api_key: Optional[str] = None
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    gcp_project: Optional[str] = None

    embedding_model: str = EMBEDDING_MODEL
    embedding_api_url: str = EMBEDDING_API_URL
    embedding_dimensions: Optional[int] = None
    chat_model: str = CHAT_MODEL

    chunk_size: int = CHUNK_SIZE
    chunk_overlap: int = CHUNK_OVERLAP
    retrieval_limit: int = RETRIEVAL_LIMIT
    request_timeout: float = REQUEST_TIMEOUT

    # "supabase" or "memory"
    vector_backend: str = "supabase"

    # Server Configuration
    port: int = 8000
    log_level: str = "INFO"
    log_format: str = "text"
    cors_origins: List[str] = field(
        default_factory=lambda: ["http://localhost:3000", "http://localhost:5173"]
    )

    @classmethod
    def from_env(cls) -> "Settings":
        """Read settings from environment variables (and .env)."""
        return cls(
            groq_api_key=os.getenv("GROQ_API_KEY"),
            huggingface_api_key=os.getenv("HUGGINGFACE_API_KEY"),
            supabase_url=os.getenv("SUPABASE_URL"),
            supabase_key=os.getenv("SUPABASE_KEY"),
            gcp_project=os.getenv("GCP_PROJECT"),
            embedding_model=os.getenv("EMBEDDING_MODEL", EMBEDDING_MODEL),
            embedding_api_url=os.getenv("EMBEDDING_API_URL", EMBEDDING_API_URL),
            embedding_dimensions=_optional_int("EMBEDDING_DIMENSIONS"),
            chat_model=os.getenv("CHAT_MODEL", CHAT_MODEL),
            chunk_size=int(os.getenv("CHUNK_SIZE", str(CHUNK_SIZE))),
            chunk_overlap=int(os.getenv("CHUNK_OVERLAP", str(CHUNK_OVERLAP))),
            retrieval_limit=int(os.getenv("RETRIEVAL_LIMIT", str(RETRIEVAL_LIMIT))),
            request_timeout=float(os.getenv("REQUEST_TIMEOUT", str(REQUEST_TIMEOUT))),
            vector_backend=os.getenv("VECTOR_BACKEND", "supabase"),
            port=int(os.getenv("PORT", "8000")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            log_format=os.getenv("LOG_FORMAT", "text"),
            cors_origins=os.getenv(
                "CORS_ORIGINS",
                "http://localhost:3000,http://localhost:5173"
            ).split(","),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached process-wide settings."""
    return Settings.from_env()


# Logging Configuration
logging.basicConfig(
    level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
