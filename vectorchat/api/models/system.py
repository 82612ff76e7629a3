"""
System-related API models: health, connection probe, settings, errors.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    conversation_id: str
    openai_configured: bool
    pinecone_configured: bool


class ProbeResponse(BaseModel):
    """Result of probing the vector index."""
    success: bool
    message: str
    host: Optional[str] = None
    details: Optional[dict[str, Any]] = None


class ErrorResponse(BaseModel):
    """Error response body."""
    error: str
    code: str


class ConfigUpdateRequest(BaseModel):
    """
    Runtime settings update. Omitted fields are left unchanged.

    Unknown fields are passed through so the update can reject them.
    """
    model_config = ConfigDict(extra="allow")

    openai_api_key: Optional[str] = None
    pinecone_api_key: Optional[str] = None
    pinecone_index_name: Optional[str] = None
    pinecone_namespace: Optional[str] = None
    pinecone_environment: Optional[str] = None
    pinecone_project_id: Optional[str] = None
