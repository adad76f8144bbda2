"""Chunking engine: overlapping fixed-size character windows."""
import logging
from typing import List, Sequence

from models.chunk import Chunk
from config import CHUNK_SIZE, CHUNK_OVERLAP
from services.errors import InvalidArgumentError

logger = logging.getLogger(__name__)


def _validate(size: int, overlap: int) -> None:
    if size <= 0:
        raise InvalidArgumentError("Chunk size must be greater than 0", {"size": size})
    if overlap < 0:
        raise InvalidArgumentError("Overlap cannot be negative", {"overlap": overlap})
    if overlap >= size:
        raise InvalidArgumentError(
            "Overlap must be less than chunk size",
            {"size": size, "overlap": overlap}
        )


def chunk_text(text: str, size: int, overlap: int) -> List[str]:
    """
    Split text into overlapping windows.

    Windows of ``size`` characters start at offset 0 and advance by
    ``size - overlap`` until one reaches the end of the text; the last
    window is clipped to the text length.

    Args:
        text: Source text
        size: Window length in characters
        overlap: Characters shared by consecutive windows

    Returns:
        Ordered list of substrings of ``text``

    Raises:
        InvalidArgumentError: If size <= 0 or overlap is outside [0, size)
    """
    _validate(size, overlap)

    if len(text) <= size:
        return [text]

    chunks = []
    step = size - overlap
    start = 0
    while True:
        end = min(start + size, len(text))
        chunks.append(text[start:end])
        if end == len(text):
            break
        start += step

    return chunks


class ChunkingEngine:
    """Segments document text into chunks and attaches their embeddings."""

    def __init__(self, chunk_size: int = CHUNK_SIZE, chunk_overlap: int = CHUNK_OVERLAP):
        """
        Initialize ChunkingEngine.

        Args:
            chunk_size: Window length in characters
            chunk_overlap: Overlap between consecutive windows in characters

        Raises:
            InvalidArgumentError: If the parameters would never advance
        """
        _validate(chunk_size, chunk_overlap)
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap

    def chunk_text(self, text: str) -> List[str]:
        """Split text using this engine's size and overlap."""
        chunks = chunk_text(text, self.chunk_size, self.chunk_overlap)
        logger.debug(
            f"Split {len(text)} characters into {len(chunks)} chunks "
            f"(size={self.chunk_size}, overlap={self.chunk_overlap})"
        )
        return chunks

    @staticmethod
    def build_chunks(
        doc_id: str,
        source_uri: str,
        texts: Sequence[str],
        embeddings: Sequence[List[float]]
    ) -> List[Chunk]:
        """
        Pair chunk texts with their vectors.

        Raises:
            InvalidArgumentError: If texts and embeddings are not the same length
        """
        if len(texts) != len(embeddings):
            raise InvalidArgumentError(
                f"Chunk/embedding count mismatch: {len(texts)} texts, {len(embeddings)} vectors",
                {"texts": len(texts), "embeddings": len(embeddings)}
            )

        return [
            Chunk(
                doc_id=doc_id,
                index=index,
                text=text,
                source_uri=source_uri,
                embedding=list(embedding)
            )
            for index, (text, embedding) in enumerate(zip(texts, embeddings))
        ]
