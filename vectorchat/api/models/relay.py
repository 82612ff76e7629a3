"""
Relay request models.

Field names follow the JSON bodies sent by the browser client, so they
are camelCase.
"""

from typing import Any, Optional

from pydantic import BaseModel


class EmbeddingRelayRequest(BaseModel):
    """Request body for /api/openai-proxy."""
    query: Optional[str] = None
    apiKey: Optional[str] = None
    model: Optional[str] = None


class DescribeRelayRequest(BaseModel):
    """Request body for /api/pinecone-describe."""
    apiKey: Optional[str] = None


class QueryRelayRequest(BaseModel):
    """Request body for /api/pinecone-proxy."""
    pineconeBody: Optional[dict[str, Any]] = None
    apiKey: Optional[str] = None
