"""
Pydantic models (schemas) for API request/response types.

All models are re-exported here for convenience:
    from vectorchat.api.models import ChatRequest, ChatReply, ...
"""

from vectorchat.api.models.chat import (
    ChatRequest,
    SourceModel,
    ErrorInfo,
    MessageModel,
    ChatReply,
    ConversationResponse,
    ResetResponse,
)
from vectorchat.api.models.system import (
    HealthResponse,
    ProbeResponse,
    ErrorResponse,
    ConfigUpdateRequest,
)
from vectorchat.api.models.relay import (
    EmbeddingRelayRequest,
    DescribeRelayRequest,
    QueryRelayRequest,
)

__all__ = [
    # Chat
    "ChatRequest",
    "SourceModel",
    "ErrorInfo",
    "MessageModel",
    "ChatReply",
    "ConversationResponse",
    "ResetResponse",
    # System
    "HealthResponse",
    "ProbeResponse",
    "ErrorResponse",
    "ConfigUpdateRequest",
    # Relay
    "EmbeddingRelayRequest",
    "DescribeRelayRequest",
    "QueryRelayRequest",
]
