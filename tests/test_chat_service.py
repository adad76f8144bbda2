"""Unit tests for ChatService."""
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

import pytest
from unittest.mock import Mock
from models.api import HistoryTurn
from models.chunk import ContextItem
from services.chat_service import ChatService, dedupe_citations
from services.embedding_model import EmbeddingModel
from services.errors import IntegrationError
from services.llm_client import LLMClient, LLMClientError, LLMError, LLMResponse
from services.retrieval_engine import RetrievalEngine
from services.vector_store import VectorStore


def llm_response(text="Grounded answer [Source 1]"):
    return LLMResponse(text=text, tokens_input=100, tokens_output=20, latency_ms=5, model_used="m")


@pytest.fixture
def vector_store():
    store = Mock(spec=VectorStore)
    store.find_nearest.return_value = [
        ContextItem("Relevant chunk about ORION AI.", "https://docs.orion.ai/overview"),
        ContextItem("Vertex AI powers the embeddings.", "https://docs.orion.ai/architecture"),
    ]
    return store


@pytest.fixture
def embedding_model():
    model = Mock(spec=EmbeddingModel)
    model.embed_text.return_value = [0.1, 0.2, 0.3]
    return model


@pytest.fixture
def llm_client():
    client = Mock(spec=LLMClient)
    client.generate.return_value = llm_response()
    return client


@pytest.fixture
def chat_service(vector_store, embedding_model, llm_client):
    return ChatService(RetrievalEngine(vector_store, embedding_model), llm_client)


class TestDedupeCitations:

    def test_order_of_first_appearance(self):
        context = [
            ContextItem("1", "https://b"),
            ContextItem("2", "https://a"),
            ContextItem("3", "https://b"),
            ContextItem("4", "https://c"),
        ]
        assert dedupe_citations(context) == ["https://b", "https://a", "https://c"]

    def test_empty(self):
        assert dedupe_citations([]) == []


class TestChatService:
    """Test suite for ChatService."""

    def test_answer_with_two_sources(self, chat_service):
        answer = chat_service.answer("What is ORION AI?")

        assert answer.response_text == "Grounded answer [Source 1]"
        assert answer.citations == [
            "https://docs.orion.ai/overview",
            "https://docs.orion.ai/architecture",
        ]
        assert len(answer.context) == 2

    def test_pipeline_order(self, chat_service, embedding_model, vector_store, llm_client):
        chat_service.answer("Tell me about Vertex AI")

        embedding_model.embed_text.assert_called_once_with("Tell me about Vertex AI")
        vector_store.find_nearest.assert_called_once_with([0.1, 0.2, 0.3], 3)
        prompt = llm_client.generate.call_args.args[0]
        assert "[Source 1: https://docs.orion.ai/overview]" in prompt
        assert "[Source 2: https://docs.orion.ai/architecture]" in prompt
        assert "Tell me about Vertex AI" in prompt

    def test_prompt_numbers_duplicates_but_citations_do_not(self, chat_service, vector_store, llm_client):
        vector_store.find_nearest.return_value = [
            ContextItem("first", "https://a"),
            ContextItem("second", "https://a"),
            ContextItem("third", "https://b"),
        ]

        answer = chat_service.answer("q")

        prompt = llm_client.generate.call_args.args[0]
        assert "[Source 1: https://a]" in prompt
        assert "[Source 2: https://a]" in prompt
        assert "[Source 3: https://b]" in prompt
        assert answer.citations == ["https://a", "https://b"]

    def test_caller_limit(self, chat_service, vector_store):
        chat_service.answer("q", limit=5)
        assert vector_store.find_nearest.call_args.args[1] == 5

    def test_history_reaches_prompt(self, chat_service, llm_client):
        chat_service.answer("q", history=[HistoryTurn(role="user", text="earlier question")])
        assert "User: earlier question" in llm_client.generate.call_args.args[0]

    def test_no_context_still_answers(self, chat_service, vector_store, llm_client):
        vector_store.find_nearest.return_value = []
        llm_client.generate.return_value = llm_response("I don't know based on the provided data.")

        answer = chat_service.answer("q")

        assert answer.citations == []
        assert "(no relevant context was found)" in llm_client.generate.call_args.args[0]

    def test_generation_failure_propagates(self, chat_service, llm_client):
        llm_client.generate.side_effect = LLMClientError(
            LLMError(code="EMPTY_RESPONSE", message="Model failed to generate a response", details={})
        )

        with pytest.raises(IntegrationError, match="Model failed to generate a response"):
            chat_service.answer("q")

    def test_retrieval_failure_skips_generation(self, chat_service, vector_store, llm_client):
        vector_store.find_nearest.side_effect = IntegrationError("Failed to search vector store")

        with pytest.raises(IntegrationError):
            chat_service.answer("q")
        llm_client.generate.assert_not_called()
