"""Integration tests for the /rag/chat and /rag/ingest endpoints."""
import pytest
from fastapi.testclient import TestClient
from unittest.mock import Mock
import sys
import os

# Add backend to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'backend'))


@pytest.fixture
def client():
    """Create a test client with mocked services."""
    # Import after path is set
    import main

    # Not used as a context manager, so the startup event never builds real services
    client = TestClient(main.app)

    main.chat_service = Mock()
    main.ingestion_pipeline = Mock()

    yield client

    main.chat_service = None
    main.ingestion_pipeline = None


@pytest.fixture
def services(client):
    import main
    from models.chunk import Answer, ContextItem

    main.chat_service.answer.return_value = Answer(
        response_text="ORION AI is a RAG platform. [Source 1]",
        citations=["https://docs.orion.ai/overview", "https://docs.orion.ai/architecture"],
        context=[
            ContextItem("Relevant chunk about ORION AI.", "https://docs.orion.ai/overview"),
            ContextItem("Vertex AI powers the embeddings.", "https://docs.orion.ai/architecture"),
        ]
    )
    main.ingestion_pipeline.ingest.return_value = "doc_1700000000000_abcdef"

    return {"chat": main.chat_service, "ingest": main.ingestion_pipeline}


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_chat_basic(client, services):
    response = client.post("/rag/chat", json={"question": "What is ORION AI?"})

    assert response.status_code == 200
    assert response.json() == {
        "response": "ORION AI is a RAG platform. [Source 1]",
        "citations": ["https://docs.orion.ai/overview", "https://docs.orion.ai/architecture"],
    }
    services["chat"].answer.assert_called_once_with("What is ORION AI?", history=None)


def test_chat_with_history(client, services):
    response = client.post("/rag/chat", json={
        "question": "And then?",
        "history": [{"role": "user", "text": "Hi"}],
    })

    assert response.status_code == 200
    history = services["chat"].answer.call_args.kwargs["history"]
    assert history[0].text == "Hi"


@pytest.mark.parametrize("body", [
    {"question": ""},
    {"question": "   "},
    {"question": "a" * 1001},
    {},
])
def test_chat_rejects_invalid_question(client, services, body):
    response = client.post("/rag/chat", json=body)

    # Pydantic validation returns 422 for validation errors
    assert response.status_code == 422
    services["chat"].answer.assert_not_called()


def test_chat_integration_error(client, services):
    from services.llm_client import LLMClientError, LLMError

    services["chat"].answer.side_effect = LLMClientError(
        LLMError(code="EMPTY_RESPONSE", message="Model failed to generate a response", details={"model": "m"})
    )

    response = client.post("/rag/chat", json={"question": "q"})

    assert response.status_code == 503
    error = response.json()["detail"]["error"]
    assert error["code"] == "EMPTY_RESPONSE"
    assert error["message"] == "Model failed to generate a response"


def test_chat_unexpected_error_keeps_message(client, services):
    services["chat"].answer.side_effect = KeyError("text")

    response = client.post("/rag/chat", json={"question": "q"})

    assert response.status_code == 500
    assert "text" in response.json()["detail"]["error"]["message"]


def test_ingest_api_source(client, services):
    response = client.post("/rag/ingest", json={
        "sourceUri": "https://example.com/doc.txt",
        "sourceType": "api",
        "title": "Sample Document",
    })

    assert response.status_code == 200
    assert response.json() == {"success": True, "docId": "doc_1700000000000_abcdef"}
    services["ingest"].ingest.assert_called_once_with(
        "https://example.com/doc.txt", "Sample Document", "api"
    )


def test_ingest_default_title(client, services):
    response = client.post("/rag/ingest", json={"sourceUri": "gs://bucket/doc.txt", "sourceType": "gcs"})

    assert response.status_code == 200
    services["ingest"].ingest.assert_called_once_with("gs://bucket/doc.txt", "Untitled Document", "gcs")


@pytest.mark.parametrize("body", [
    {"sourceUri": "not-a-url", "sourceType": "gcs"},
    {"sourceUri": "gs://bucket/file", "sourceType": "api"},
    {"sourceUri": "https://example.com/doc.txt", "sourceType": "gcs"},
    {"sourceUri": "https://example.com", "sourceType": "invalid"},
    {"sourceType": "api"},
])
def test_ingest_rejects_invalid_input(client, services, body):
    response = client.post("/rag/ingest", json=body)

    assert response.status_code == 422
    services["ingest"].ingest.assert_not_called()


@pytest.mark.parametrize("error_class,status_code", [
    ("InvalidArgumentError", 400),
    ("NotFoundError", 404),
    ("FetchError", 502),
    ("IntegrationError", 503),
])
def test_ingest_error_mapping(client, services, error_class, status_code):
    from services import errors

    services["ingest"].ingest.side_effect = getattr(errors, error_class)("something went wrong")

    response = client.post("/rag/ingest", json={"sourceUri": "gs://bucket/doc.txt", "sourceType": "gcs"})

    assert response.status_code == status_code
    error = response.json()["detail"]["error"]
    assert error["message"] == "something went wrong"
    assert error["code"] == getattr(errors, error_class).code


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
