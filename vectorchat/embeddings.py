"""
Embedding service for vectorchat.
Turns query text into a vector using the OpenAI embeddings API.
"""

import logging
from typing import Optional

from openai import AsyncOpenAI

from vectorchat.config import Config
from vectorchat.errors import UpstreamError, ValidationError
from vectorchat.openai_client import get_openai_client, translate_openai_error

logger = logging.getLogger(__name__)


class EmbeddingGenerator:
    """
    Generates query embeddings.

    No retries happen here; a failed call is reported to the caller.
    """

    def __init__(self, client: Optional[AsyncOpenAI] = None, model: Optional[str] = None):
        """
        Initialize the embedding generator.

        Args:
            client: OpenAI client to use instead of the shared one.
            model: Embedding model name. Defaults to OPENAI_EMBEDDING_MODEL.
        """
        self._client = client
        self._model = model

    @property
    def model(self) -> str:
        return self._model or Config.OPENAI_EMBEDDING_MODEL

    @property
    def client(self) -> AsyncOpenAI:
        """The injected client, or the shared client for the current key."""
        if self._client is not None:
            return self._client
        return get_openai_client()

    async def embed(self, text: str) -> list[float]:
        """
        Generate an embedding for a single text.

        Args:
            text: The text to embed. Must not be blank.

        Returns:
            The embedding vector.

        Raises:
            ValidationError: If the text is blank.
            ConfigError: If the OpenAI API key is not configured.
            AuthError: If OpenAI rejects the key.
            BackendConnectionError: If OpenAI cannot be reached.
            UpstreamError: On a failure status or a payload without an embedding.
        """
        if not text or not text.strip():
            raise ValidationError("Cannot embed empty text")

        Config.validate_openai_config()
        logger.debug(f"Generating embedding with {self.model} for: {text[:80]}")

        try:
            response = await self.client.embeddings.create(
                model=self.model,
                input=text,
            )
        except Exception as e:
            error = translate_openai_error(e, "Embedding request")
            logger.error(f"Embedding generation failed: {error.message}")
            raise error from e

        data = getattr(response, "data", None)
        embedding = getattr(data[0], "embedding", None) if data else None
        if not embedding:
            logger.error("Embedding response did not contain an embedding")
            raise UpstreamError("Invalid response from OpenAI: embedding is missing")

        return list(embedding)


# Singleton instance
embedding_generator = EmbeddingGenerator()
