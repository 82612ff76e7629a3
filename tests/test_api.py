"""
End-to-end tests for the FastAPI application.
Tests the chat, system and relay endpoints with a test client.
"""

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from conftest import INDEX_HOST, make_match
from vectorchat.api.dependencies import get_http_client
from vectorchat.api.routes import chat as chat_routes
from vectorchat.api.routes import system as system_routes
from vectorchat.config import Config
from vectorchat.connection import ConnectionProber
from vectorchat.main import app


@pytest.fixture
def client(chat_service, pinecone_http, monkeypatch):
    """Test client wired to the fake backends."""
    monkeypatch.setattr(chat_routes, "chat_service", chat_service)
    monkeypatch.setattr(system_routes, "chat_service", chat_service)
    monkeypatch.setattr(system_routes, "connection_prober", ConnectionProber(client=pinecone_http))
    return TestClient(app)


class RelayUpstream:
    """Records relayed requests and answers with a canned response."""

    def __init__(self, status_code: int = 200, body: object = None):
        self.status_code = status_code
        self.body = body if body is not None else {}
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.body)


@pytest.fixture
def relay_upstream():
    upstream = RelayUpstream()

    async def override_client():
        async with httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler)) as client:
            yield client

    app.dependency_overrides[get_http_client] = override_client
    yield upstream
    app.dependency_overrides.pop(get_http_client, None)


class TestChatEndpoints:
    """Tests for /chat and /conversation."""

    def test_chat_grounded(self, client, fake_pinecone):
        fake_pinecone.matches = [
            make_match("a", 0.92, title="Understanding Vector Databases", content="Vectors..."),
            make_match("b", 0.88, title="Pinecone Documentation", content="Pinecone is..."),
        ]

        response = client.post("/chat", json={"message": "What is a vector database?"})

        assert response.status_code == 200
        data = response.json()
        assert data["answer"] == "A vector database stores embeddings."
        assert data["confidence"] == 0.92
        assert [s["title"] for s in data["sources"]] == [
            "Understanding Vector Databases",
            "Pinecone Documentation",
        ]
        assert data["error"] is None
        assert data["message"]["role"] == "assistant"

    def test_chat_degraded(self, client, fake_pinecone):
        fake_pinecone.describe_unreachable = True

        response = client.post("/chat", json={"message": "What is a vector database?"})

        assert response.status_code == 200
        data = response.json()
        assert data["confidence"] == 0.0
        assert data["message"]["sources_unavailable"] is True
        assert data["error"]["type"] == "retrieval"

    def test_chat_empty_message(self, client):
        response = client.post("/chat", json={"message": "  "})

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_chat_missing_openai_key(self, client, monkeypatch):
        monkeypatch.setattr(Config, "OPENAI_API_KEY", "")

        response = client.post("/chat", json={"message": "Hello"})

        assert response.status_code == 400
        assert response.json()["code"] == "CONFIG_ERROR"

    def test_conversation_and_reset(self, client, fake_pinecone):
        fake_pinecone.matches = [make_match("a", 0.92, content="Vectors...")]
        client.post("/chat", json={"message": "What is a vector database?"})

        conversation = client.get("/conversation").json()
        assert [m["role"] for m in conversation["messages"]] == ["user", "assistant"]

        reset = client.post("/conversation/reset").json()
        assert reset["status"] == "reset"
        assert reset["conversation_id"] != conversation["id"]

        after = client.get("/conversation").json()
        assert after == {"id": reset["conversation_id"], "messages": []}


class TestSystemEndpoints:
    """Tests for /health, /health/vector-index and /config."""

    def test_health(self, client):
        data = client.get("/health").json()

        assert data["status"] == "ok"
        assert data["openai_configured"] is True
        assert data["pinecone_configured"] is True

    def test_probe(self, client):
        data = client.get("/health/vector-index").json()

        assert data["success"] is True
        assert data["host"] == INDEX_HOST

    def test_config_hides_keys(self, client):
        response = client.get("/config")

        assert response.status_code == 200
        assert "pc-test-key" not in response.text
        assert response.json()["pinecone"]["index_name"] == "docs"

    def test_update_config(self, client, monkeypatch):
        """Test credentials supplied at runtime are trimmed and applied."""
        monkeypatch.setattr(Config, "PINECONE_API_KEY", "")

        response = client.put(
            "/config", json={"pinecone_api_key": "  pc-new-key ", "pinecone_index_name": "handbook"}
        )

        assert response.status_code == 200
        assert response.json()["pinecone"]["api_key_present"] is True
        assert response.json()["pinecone"]["index_name"] == "handbook"
        assert "pc-new-key" not in response.text
        assert Config.PINECONE_API_KEY == "pc-new-key"
        assert client.get("/health").json()["pinecone_configured"] is True

    def test_update_config_unknown_setting(self, client):
        response = client.put("/config", json={"llm_temperature": 0.9})

        assert response.status_code == 400
        assert response.json()["code"] == "CONFIG_ERROR"
        assert Config.LLM_TEMPERATURE == 0.3


class TestRelayEndpoints:
    """Tests for the same-origin relay routes."""

    def test_embedding_relay(self, configured, relay_upstream):
        relay_upstream.body = {"data": [{"embedding": [0.1, 0.2]}]}
        client = TestClient(app)

        response = client.post("/api/openai-proxy", json={"query": "hello", "apiKey": "sk-browser"})

        assert response.status_code == 200
        assert response.json() == {"success": True, "embedding": [0.1, 0.2]}
        sent = relay_upstream.requests[0]
        assert sent.url == "https://api.openai.com/v1/embeddings"
        assert sent.headers["Authorization"] == "Bearer sk-browser"
        assert json.loads(sent.content) == {"model": "text-embedding-3-small", "input": "hello"}

    def test_embedding_relay_missing_fields(self, configured, relay_upstream):
        response = TestClient(app).post("/api/openai-proxy", json={"query": "hello"})

        assert response.status_code == 400
        assert relay_upstream.requests == []

    def test_embedding_relay_upstream_error(self, configured, relay_upstream):
        relay_upstream.status_code = 401
        relay_upstream.body = {"error": {"message": "Incorrect API key provided"}}

        response = TestClient(app).post(
            "/api/openai-proxy", json={"query": "hello", "apiKey": "sk-bad"}
        )

        assert response.status_code == 401
        assert response.json() == {"error": {"message": "Incorrect API key provided"}}

    def test_embedding_relay_missing_embedding(self, configured, relay_upstream):
        relay_upstream.body = {"data": []}

        response = TestClient(app).post(
            "/api/openai-proxy", json={"query": "hello", "apiKey": "sk-browser"}
        )

        assert response.status_code == 500
        assert "embedding is missing" in response.json()["error"]

    def test_describe_relay_passes_through(self, configured, relay_upstream):
        relay_upstream.status_code = 404
        relay_upstream.body = {"error": {"code": "NOT_FOUND", "message": "Index not found"}}

        response = TestClient(app).post(
            "/api/pinecone-describe?index=docs", json={"apiKey": "pc-browser"}
        )

        assert response.status_code == 404
        assert response.json() == relay_upstream.body
        sent = relay_upstream.requests[0]
        assert sent.method == "GET"
        assert sent.url == "https://api.pinecone.io/indexes/docs"
        assert sent.headers["Api-Key"] == "pc-browser"

    def test_describe_relay_missing_index(self, configured, relay_upstream):
        response = TestClient(app).post("/api/pinecone-describe", json={"apiKey": "pc-browser"})

        assert response.status_code == 400
        assert response.json()["index"] is False

    def test_query_relay(self, configured, relay_upstream):
        relay_upstream.body = {"matches": [{"id": "a", "score": 0.9}]}
        body = {"vector": [0.1, 0.2], "topK": 3, "includeMetadata": True, "includeValues": False}

        response = TestClient(app).post(
            f"/api/pinecone-proxy?host={INDEX_HOST}",
            json={"pineconeBody": body, "apiKey": "pc-browser"},
        )

        assert response.status_code == 200
        assert response.json() == relay_upstream.body
        sent = relay_upstream.requests[0]
        assert sent.url == f"https://{INDEX_HOST}/query"
        assert json.loads(sent.content) == body

    def test_query_relay_missing_host(self, configured, relay_upstream):
        response = TestClient(app).post(
            "/api/pinecone-proxy", json={"pineconeBody": {"topK": 1}, "apiKey": "pc-browser"}
        )

        assert response.status_code == 400
        assert response.json() == {"error": "No host provided"}
