"""
Pytest configuration and shared fixtures for vectorchat tests.
"""

import json
from typing import Optional
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import pytest_asyncio

from vectorchat.answer import AnswerGenerator
from vectorchat.chat import ChatService
from vectorchat.config import Config
from vectorchat.connection import ConnectionProber
from vectorchat.conversation import Conversation
from vectorchat.embeddings import EmbeddingGenerator
from vectorchat.vector_index import VectorIndexClient

INDEX_HOST = "docs-abc123.svc.gcp-starter.pinecone.io"


def make_embedding_response(embedding: Optional[list[float]]) -> MagicMock:
    """Build an object shaped like an OpenAI embeddings response."""
    response = MagicMock()
    response.data = [MagicMock()]
    response.data[0].embedding = embedding
    return response


def make_completion_response(content: Optional[str]) -> MagicMock:
    """Build an object shaped like an OpenAI chat completion response."""
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    return response


def make_match(match_id: str, score: float, **metadata) -> dict:
    """Build one Pinecone query match."""
    match = {"id": match_id, "score": score}
    if metadata:
        match["metadata"] = metadata
    return match


class FakePinecone:
    """
    In-memory stand-in for the Pinecone control plane and index host.

    Serve it through ``httpx.MockTransport(fake.handler)``.
    """

    def __init__(self):
        self.host = INDEX_HOST
        self.matches: list[dict] = []
        self.describe_status = 200
        self.describe_failures = 0
        self.describe_unreachable = False
        self.query_status = 200
        self.query_error_body: object = {"error": {"message": "query failed"}}
        self.query_unreachable = False
        self.describe_calls = 0
        self.query_calls = 0
        self.last_query: Optional[dict] = None
        self.last_headers: Optional[httpx.Headers] = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.last_headers = request.headers

        if request.url.path.startswith("/indexes/"):
            self.describe_calls += 1
            if self.describe_unreachable:
                raise httpx.ConnectError("connection refused", request=request)
            if self.describe_failures > 0:
                self.describe_failures -= 1
                return httpx.Response(503, json={"error": "service unavailable"})
            if self.describe_status != 200:
                return httpx.Response(self.describe_status, json={"error": "denied"})
            return httpx.Response(200, json={
                "name": request.url.path.rsplit("/", 1)[-1],
                "dimension": 1536,
                "metric": "cosine",
                "host": self.host,
            })

        if request.url.path == "/query":
            self.query_calls += 1
            if self.query_unreachable:
                raise httpx.ConnectError("connection reset", request=request)
            self.last_query = json.loads(request.content)
            if self.query_status != 200:
                return httpx.Response(self.query_status, json=self.query_error_body)
            return httpx.Response(200, json={"matches": self.matches, "namespace": ""})

        return httpx.Response(404, json={"error": "not found"})


@pytest.fixture
def configured(monkeypatch):
    """Configure credentials and fast, deterministic pipeline settings."""
    monkeypatch.setattr(Config, "OPENAI_API_KEY", "sk-test-key")
    monkeypatch.setattr(Config, "OPENAI_BASE_URL", "https://api.openai.com/v1")
    monkeypatch.setattr(Config, "OPENAI_MODEL", "gpt-4o-mini")
    monkeypatch.setattr(Config, "OPENAI_EMBEDDING_MODEL", "text-embedding-3-small")
    monkeypatch.setattr(Config, "PINECONE_API_KEY", "pc-test-key")
    monkeypatch.setattr(Config, "PINECONE_INDEX_NAME", "docs")
    monkeypatch.setattr(Config, "PINECONE_NAMESPACE", "")
    monkeypatch.setattr(Config, "PINECONE_CONTROLLER_URL", "https://api.pinecone.io")
    monkeypatch.setattr(Config, "PROBE_MAX_ATTEMPTS", 3)
    monkeypatch.setattr(Config, "PROBE_INITIAL_DELAY_MS", 0)
    monkeypatch.setattr(Config, "RAG_TOP_K", 5)
    monkeypatch.setattr(Config, "RAG_SIMILARITY_THRESHOLD", 0.35)
    monkeypatch.setattr(Config, "LLM_TEMPERATURE", 0.3)
    monkeypatch.setattr(Config, "LLM_MAX_TOKENS", 1000)
    monkeypatch.setattr(Config, "HISTORY_WINDOW", 5)
    return Config


@pytest.fixture
def openai_client() -> MagicMock:
    """A mocked AsyncOpenAI client with canned embedding and completion replies."""
    client = MagicMock()
    client.embeddings.create = AsyncMock(
        return_value=make_embedding_response([0.1, 0.2, 0.3])
    )
    client.chat.completions.create = AsyncMock(
        return_value=make_completion_response("A vector database stores embeddings.")
    )
    return client


@pytest.fixture
def fake_pinecone() -> FakePinecone:
    return FakePinecone()


@pytest_asyncio.fixture
async def pinecone_http(fake_pinecone: FakePinecone):
    """An HTTP client whose requests are answered by the fake Pinecone."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(fake_pinecone.handler))
    yield client
    await client.aclose()


@pytest.fixture
def vector_index(configured, openai_client, pinecone_http) -> VectorIndexClient:
    return VectorIndexClient(
        embedder=EmbeddingGenerator(client=openai_client),
        prober=ConnectionProber(client=pinecone_http),
        client=pinecone_http,
    )


@pytest.fixture
def chat_service(configured, openai_client, vector_index) -> ChatService:
    return ChatService(
        conversation=Conversation.create(),
        vector_index=vector_index,
        answer_generator=AnswerGenerator(client=openai_client),
    )
