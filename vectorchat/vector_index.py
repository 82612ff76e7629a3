"""
Vector search module for vectorchat.
Queries a Pinecone index and maps the matches to Source records.
"""

import logging
from typing import Any, Iterable, Optional

import httpx

from vectorchat.config import Config
from vectorchat.connection import AUTH_FAILURE_STATUSES, ConnectionProber, connection_prober
from vectorchat.embeddings import EmbeddingGenerator, embedding_generator
from vectorchat.errors import (
    AuthError,
    BackendConnectionError,
    ChatError,
    UpstreamError,
)
from vectorchat.models import RetrievalQuery, Source
from vectorchat.transport import extract_error_message, http_client

logger = logging.getLogger(__name__)

# Metadata keys tried in order when labelling a match
TITLE_FIELDS = (
    "title",
    "category",
    "filename",
    "file_name",
    "document_name",
    "original_filename",
    "file",
)
CONTENT_FIELDS = ("content", "text", "chunk_text")
NO_CONTENT_AVAILABLE = "No content available"


def resolve_field(
    metadata: Optional[dict[str, Any]],
    keys: Iterable[str],
    default: Optional[str] = None,
) -> Optional[str]:
    """
    Return the first non-blank value among ``keys`` in ``metadata``.

    Args:
        metadata: Match metadata (may be None).
        keys: Keys to try, highest priority first.
        default: Value returned when no key yields a usable value.
    """
    if not metadata:
        return default

    for key in keys:
        value = metadata.get(key)
        if value is None:
            continue
        text = str(value).strip()
        if text:
            return text

    return default


def match_to_source(match: dict[str, Any]) -> Source:
    """Convert one backend match to a Source."""
    match_id = str(match.get("id", ""))
    metadata = match.get("metadata") or {}

    title = resolve_field(metadata, TITLE_FIELDS, default=f"Document {match_id[:8]}")
    content = resolve_field(metadata, CONTENT_FIELDS, default=NO_CONTENT_AVAILABLE)
    url = resolve_field(metadata, ("url",))

    return Source(
        id=match_id,
        title=title,
        content=content,
        similarity=float(match.get("score") or 0.0),
        url=url,
        metadata=dict(metadata),
    )


class VectorIndexClient:
    """
    Semantic search over a Pinecone index.

    Pipeline per search:
    1. Check the Pinecone configuration
    2. Probe the index to learn its host
    3. Embed the query
    4. Query the index host and map matches to sources
    """

    def __init__(
        self,
        embedder: Optional[EmbeddingGenerator] = None,
        prober: Optional[ConnectionProber] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            embedder: Embedding generator. Defaults to the shared instance.
            prober: Connection prober. Defaults to the shared instance.
            client: HTTP client for queries. A short-lived client is created
                per search when omitted.
        """
        self.embedder = embedder or embedding_generator
        self.prober = prober or connection_prober
        self._client = client

    async def search(
        self,
        query: str,
        top_k: Optional[int] = None,
        similarity_threshold: Optional[float] = None,
    ) -> list[Source]:
        """
        Search the index for chunks similar to ``query``.

        The threshold is advisory: matches scoring below it are still
        returned, so a search never comes back empty while the backend
        has at least one match.

        Args:
            query: The user's question.
            top_k: Maximum number of sources. Defaults to RAG_TOP_K.
            similarity_threshold: Advisory minimum score. Defaults to
                RAG_SIMILARITY_THRESHOLD.

        Returns:
            Sources in backend ranking order, at most ``top_k`` of them.

        Raises:
            ValidationError, ConfigError, BackendConnectionError, AuthError,
            UpstreamError: Logged and re-raised for the caller to handle.
        """
        try:
            request = RetrievalQuery(
                text=query,
                top_k=Config.RAG_TOP_K if top_k is None else top_k,
                similarity_threshold=(
                    Config.RAG_SIMILARITY_THRESHOLD
                    if similarity_threshold is None
                    else similarity_threshold
                ),
            )
            return await self._search(request)
        except ChatError as e:
            logger.error(f"Vector search failed ({e.kind}): {e.message}")
            raise
        except Exception as e:
            logger.error(f"Vector search failed: {e}")
            raise UpstreamError(f"Vector search failed: {e}") from e

    async def _search(self, request: RetrievalQuery) -> list[Source]:
        Config.validate_pinecone_config()
        index_name = Config.PINECONE_INDEX_NAME.strip()
        logger.info(f"Searching Pinecone index '{index_name}' for: {request.text[:100]}")

        probe = await self.prober.probe()
        if not probe.success or not probe.host:
            if probe.status_code in AUTH_FAILURE_STATUSES:
                raise AuthError(probe.message)
            raise BackendConnectionError(probe.message)

        embedding = await self.embedder.embed(request.text)

        body: dict[str, Any] = {
            "vector": embedding,
            "topK": request.top_k,
            "includeMetadata": True,
            "includeValues": False,
        }
        namespace = Config.PINECONE_NAMESPACE.strip()
        if namespace:
            body["namespace"] = namespace

        matches = await self._query(probe.host, body)
        sources = [match_to_source(m) for m in matches[:request.top_k]]

        below = sum(1 for s in sources if s.similarity < request.similarity_threshold)
        if sources and below == len(sources):
            logger.warning(
                f"All {len(sources)} matches scored below {request.similarity_threshold}; "
                f"returning them as low-confidence sources"
            )
        elif below:
            logger.debug(f"{below} of {len(sources)} matches below threshold")

        logger.info(f"Found {len(sources)} sources in Pinecone index '{index_name}'")
        return sources

    async def _query(self, host: str, body: dict[str, Any]) -> list[dict[str, Any]]:
        """POST a query to the index host and return its raw matches."""
        base = host if host.startswith(("http://", "https://")) else f"https://{host}"
        url = f"{base.rstrip('/')}/query"

        try:
            async with http_client(self._client) as client:
                response = await client.post(
                    url,
                    json=body,
                    headers={
                        "Api-Key": Config.PINECONE_API_KEY.strip(),
                        "Content-Type": "application/json",
                        "Accept": "application/json",
                    },
                )
        except httpx.HTTPError as e:
            raise BackendConnectionError(f"Could not reach Pinecone index host: {e}") from e

        if response.status_code in AUTH_FAILURE_STATUSES:
            raise AuthError(
                "Pinecone rejected the API key. Please check your credentials in settings."
            )
        if not response.is_success:
            raise UpstreamError(
                f"Pinecone query failed: {extract_error_message(response)}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError("Pinecone returned an unreadable query response") from e

        matches = data.get("matches") if isinstance(data, dict) else None
        if not isinstance(matches, list):
            raise UpstreamError("Pinecone query response is missing matches")

        return matches


# Singleton instance
vector_index = VectorIndexClient()
