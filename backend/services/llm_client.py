"""LLM Client for Groq API integration and grounded prompt assembly."""
import time
from dataclasses import dataclass
from typing import List, Optional, Dict, Any, Sequence
from groq import Groq
from groq import RateLimitError, AuthenticationError, APIError, APITimeoutError
import logging

from config import Settings, get_settings
from models.api import HistoryTurn
from models.chunk import ContextItem
from services.errors import IntegrationError

logger = logging.getLogger(__name__)

ASSISTANT_NAME = "ORION AI"

PROMPT_TEMPLATE = """You are {assistant}, a helpful assistant. Use the following context to answer the user's question.
If the answer is not in the context, say you don't know based on the provided data.
Always cite your sources using the source numbers provided in brackets, like [Source 1].

CONTEXT:
{context}

{history}USER QUESTION:
{question}

STRICT INSTRUCTIONS:
1. Only use the provided context.
2. Maintain a professional tone.
3. Use markdown for formatting."""

NO_CONTEXT = "(no relevant context was found)"


@dataclass
class LLMResponse:
    """Response from LLM generation."""
    text: str
    tokens_input: int
    tokens_output: int
    latency_ms: int
    model_used: str


@dataclass
class LLMError:
    """Structured error response from LLM operations."""
    code: str
    message: str
    details: Dict[str, Any]


class LLMClientError(IntegrationError):
    """Custom exception for LLM client errors with structured error information."""

    def __init__(self, error: LLMError):
        self.error = error
        self.code = error.code
        super().__init__(error.message, error.details)


def format_context(context: Sequence[ContextItem]) -> str:
    """
    Render every retrieved item as a numbered source block.

    Numbering is 1-based in retrieval order and repeats a URI when several
    chunks come from the same document.
    """
    return "\n\n".join(
        f"[Source {i}: {item.source_uri}]\n{item.text}"
        for i, item in enumerate(context, start=1)
    )


def format_history(history: Optional[Sequence[HistoryTurn]]) -> str:
    if not history:
        return ""
    lines = [f"{'User' if turn.role == 'user' else 'Assistant'}: {turn.text}" for turn in history]
    return "CONVERSATION SO FAR:\n" + "\n".join(lines) + "\n\n"


class LLMClient:
    """Client for interfacing with Groq API for text generation."""

    def __init__(self, settings: Optional[Settings] = None, api_key: Optional[str] = None):
        """
        Initialize LLM client.

        Args:
            settings: Process-wide settings (defaults to get_settings())
            api_key: Groq API key, overrides settings
        """
        settings = settings or get_settings()
        self.api_key = api_key or settings.groq_api_key
        if not self.api_key:
            raise ValueError("GROQ_API_KEY must be provided or set in environment")

        self.model = settings.chat_model
        self.client = Groq(api_key=self.api_key, timeout=settings.request_timeout)
        logger.info(f"LLMClient initialized with model: {self.model}")

    def generate(
        self,
        prompt: str,
        max_tokens: int = 1024
    ) -> LLMResponse:
        """
        Generate response using Groq API.

        Args:
            prompt: Complete prompt with context and query
            max_tokens: Maximum tokens to generate

        Returns:
            LLMResponse with text, token counts, and latency

        Raises:
            LLMClientError: Structured error with code, message, and details
        """
        model = self.model
        start_time = time.time()

        try:
            logger.debug(f"Generating response with model: {model}")

            response = self.client.chat.completions.create(
                model=model,
                messages=[
                    {
                        "role": "user",
                        "content": prompt
                    }
                ],
                max_tokens=max_tokens,
                temperature=0.2
            )

        except RateLimitError as e:
            self._fail("RATE_LIMIT_ERROR", "Rate limit exceeded. Please try again in a few moments.",
                       model, start_time, e, retry_after=60)
        except AuthenticationError as e:
            self._fail("AUTHENTICATION_ERROR", "Authentication failed. Please check your API key.",
                       model, start_time, e)
        except APITimeoutError as e:
            self._fail("TIMEOUT_ERROR", "Request timed out. Please try again.",
                       model, start_time, e)
        except APIError as e:
            self._fail("API_ERROR", f"Groq API error: {str(e)}", model, start_time, e)
        except Exception as e:
            self._fail("UNKNOWN_ERROR", f"Unexpected error during generation: {str(e)}",
                       model, start_time, e, error_type=type(e).__name__)

        latency_ms = int((time.time() - start_time) * 1000)

        text = response.choices[0].message.content if response.choices else None
        if not text or not text.strip():
            error = LLMError(
                code="EMPTY_RESPONSE",
                message="Model failed to generate a response",
                details={"model": model, "latency_ms": latency_ms}
            )
            logger.error(f"Empty response: model={model}, latency={latency_ms}ms")
            raise LLMClientError(error)

        usage = response.usage
        tokens_input = usage.prompt_tokens if usage else 0
        tokens_output = usage.completion_tokens if usage else 0

        logger.info(
            f"Generated response: model={model}, "
            f"input_tokens={tokens_input}, output_tokens={tokens_output}, "
            f"latency={latency_ms}ms"
        )

        return LLMResponse(
            text=text,
            tokens_input=tokens_input,
            tokens_output=tokens_output,
            latency_ms=latency_ms,
            model_used=model
        )

    @staticmethod
    def _fail(code: str, message: str, model: str, start_time: float, exc: Exception, **details) -> None:
        latency_ms = int((time.time() - start_time) * 1000)
        error = LLMError(
            code=code,
            message=message,
            details={
                "model": model,
                "latency_ms": latency_ms,
                "original_error": str(exc),
                **details
            }
        )
        logger.error(
            f"{code}: model={model}, latency={latency_ms}ms, error={exc}",
            exc_info=True,
            extra={"error_code": error.code}
        )
        raise LLMClientError(error) from exc

    @staticmethod
    def build_prompt(
        query: str,
        context: Optional[Sequence[ContextItem]] = None,
        history: Optional[List[HistoryTurn]] = None
    ) -> str:
        """
        Build the grounded prompt.

        Args:
            query: User question
            context: Retrieved context items, in retrieval order
            history: Earlier turns of the conversation

        Returns:
            Complete prompt string
        """
        return PROMPT_TEMPLATE.format(
            assistant=ASSISTANT_NAME,
            context=format_context(context) if context else NO_CONTEXT,
            history=format_history(history),
            question=query
        )
