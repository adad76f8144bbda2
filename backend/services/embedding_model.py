"""Embedding model integration with Hugging Face Inference API."""
import time
import logging
from numbers import Number
from typing import Any, List, Optional
import httpx

from config import Settings, get_settings
from services.errors import IntegrationError, InvalidArgumentError

logger = logging.getLogger(__name__)


class EmbeddingModel:
    """Wrapper for the Hugging Face feature-extraction endpoint."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        api_key: Optional[str] = None,
        max_retries: int = 5,
        initial_delay: float = 5.0
    ):
        """
        Initialize the embedding model client.

        Args:
            settings: Process-wide settings (defaults to get_settings())
            api_key: Hugging Face API key, overrides settings
            max_retries: Maximum number of attempts for 503 and transport errors
            initial_delay: Initial delay in seconds for exponential backoff
        """
        settings = settings or get_settings()
        self.api_key = api_key or settings.huggingface_api_key
        if not self.api_key:
            raise ValueError("HUGGINGFACE_API_KEY environment variable is required")

        self.model_name = settings.embedding_model
        self.dimensions = settings.embedding_dimensions
        self.max_retries = max_retries
        self.initial_delay = initial_delay
        self.timeout = settings.request_timeout
        self.api_url = settings.embedding_api_url.format(model=self.model_name)

        logger.info(f"Initialized EmbeddingModel with model: {self.model_name}")

    def embed_text(self, text: str) -> List[float]:
        """
        Generate embedding for a single text string.

        Raises:
            InvalidArgumentError: If text is empty
            IntegrationError: If the provider call fails or returns unusable output
        """
        return self.embed_batch([text])[0]

    def embed_batch(self, texts: List[str]) -> List[List[float]]:
        """
        Generate embeddings for multiple texts in a single API call.

        The result has exactly one vector per input text, in input order.

        Args:
            texts: List of texts to embed

        Returns:
            List of embedding vectors

        Raises:
            InvalidArgumentError: If the list is empty or contains an empty string
            IntegrationError: If the provider call fails, or the returned vectors
                do not line up with the inputs
        """
        if not texts:
            raise InvalidArgumentError("Texts list cannot be empty")

        # Whitespace-only texts are sent as-is; dropping any would misalign vectors
        empty = [i for i, t in enumerate(texts) if not t]
        if empty:
            raise InvalidArgumentError(
                f"Cannot embed empty text at positions {empty}",
                {"positions": empty}
            )

        payload = self._embed_with_retry(texts)
        vectors = self._parse_vectors(payload)

        if len(vectors) != len(texts):
            raise IntegrationError(
                f"Embedding count mismatch: got {len(vectors)}, expected {len(texts)}",
                {"expected": len(texts), "received": len(vectors), "model": self.model_name}
            )

        return vectors

    def _parse_vectors(self, payload: Any) -> List[List[float]]:
        """Validate the provider payload as a list of non-empty numeric vectors."""
        if not isinstance(payload, list):
            raise IntegrationError(
                "Embedding provider returned no usable vectors",
                {"model": self.model_name, "payload_type": type(payload).__name__}
            )

        vectors = []
        for position, vector in enumerate(payload):
            if (
                not isinstance(vector, list)
                or not vector
                or not all(isinstance(v, Number) for v in vector)
            ):
                raise IntegrationError(
                    f"Embedding provider returned an unusable vector at position {position}",
                    {"model": self.model_name, "position": position}
                )
            if self.dimensions and len(vector) != self.dimensions:
                raise IntegrationError(
                    f"Embedding dimension mismatch: got {len(vector)}, expected {self.dimensions}",
                    {"model": self.model_name, "position": position}
                )
            vectors.append([float(v) for v in vector])

        return vectors

    def _embed_with_retry(self, texts: List[str]) -> Any:
        """
        Internal method to call HF API with exponential backoff retry strategy.

        HF serverless models "sleep" and answer 503 while loading, so 503 and
        transport failures are retried; auth and rate-limit errors are not.

        Raises:
            IntegrationError: If the request fails after all retries
        """
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }

        payload = {
            "inputs": texts,
            "options": {
                "wait_for_model": True  # Wait for model to load if sleeping
            }
        }

        delay = self.initial_delay
        last_error = None

        for attempt in range(self.max_retries):
            try:
                start_time = time.time()

                with httpx.Client(timeout=self.timeout) as client:
                    response = client.post(
                        self.api_url,
                        headers=headers,
                        json=payload
                    )

                elapsed = time.time() - start_time

            except httpx.TimeoutException:
                last_error = f"Request timeout after {self.timeout}s"
                logger.error(f"{last_error} on attempt {attempt + 1}/{self.max_retries}")

            except httpx.RequestError as e:
                last_error = f"Network error: {str(e)}"
                logger.error(f"{last_error} on attempt {attempt + 1}/{self.max_retries}")

            else:
                # Handle 503 Service Unavailable (model loading)
                if response.status_code == 503:
                    last_error = "Model loading (503)"
                    logger.warning(
                        f"Model loading (503) on attempt {attempt + 1}/{self.max_retries}. "
                        f"Retrying in {delay}s..."
                    )

                elif response.status_code == 429:
                    logger.error("Rate limit exceeded for Hugging Face API")
                    raise IntegrationError(
                        "Rate limit exceeded. Please try again later.",
                        {"status_code": 429, "model": self.model_name}
                    )

                elif response.status_code == 401:
                    logger.error("Authentication failed for Hugging Face API")
                    raise IntegrationError(
                        "Invalid API key",
                        {"status_code": 401, "model": self.model_name}
                    )

                elif response.status_code != 200:
                    error_msg = f"API request failed with status {response.status_code}: {response.text}"
                    logger.error(error_msg)
                    raise IntegrationError(
                        error_msg,
                        {"status_code": response.status_code, "model": self.model_name}
                    )

                else:
                    if elapsed > 10.0:
                        logger.info(
                            f"Model loading delay detected: {elapsed:.1f}s for {len(texts)} texts "
                            f"(attempt {attempt + 1})"
                        )
                    else:
                        logger.debug(f"Generated embeddings for {len(texts)} texts in {elapsed:.2f}s")

                    try:
                        return response.json()
                    except ValueError as e:
                        raise IntegrationError(
                            f"Embedding provider returned invalid JSON: {e}",
                            {"model": self.model_name}
                        ) from e

            if attempt < self.max_retries - 1:
                time.sleep(delay)
                delay = min(delay * 2, 60.0)  # Exponential backoff, max 60s

        # All retries exhausted
        error_msg = f"Failed to generate embeddings after {self.max_retries} attempts. Last error: {last_error}"
        logger.error(error_msg)
        raise IntegrationError(error_msg, {"model": self.model_name, "attempts": self.max_retries})

    def warmup(self) -> bool:
        """
        Warm up the model with a dummy query to avoid cold start delays.

        Returns:
            True if warmup successful, False otherwise
        """
        try:
            logger.info("Warming up embedding model...")
            start_time = time.time()

            self.embed_text("warmup query")

            elapsed = time.time() - start_time
            logger.info(f"Model warmup completed in {elapsed:.1f}s")
            return True

        except (IntegrationError, InvalidArgumentError) as e:
            logger.error(f"Model warmup failed: {str(e)}")
            return False
