"""
Chat-related API models: requests, messages, sources, conversations.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from vectorchat.models import ChatResponse, Message, Source


class ChatRequest(BaseModel):
    """Request body for /chat."""
    message: str


class SourceModel(BaseModel):
    """A retrieved source."""
    id: str
    title: str
    content: str
    similarity: float
    url: Optional[str] = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_source(cls, source: Source) -> "SourceModel":
        return cls(**source.to_dict())


class ErrorInfo(BaseModel):
    """Error details attached to a degraded message."""
    type: str
    message: str


class MessageModel(BaseModel):
    """One conversation message."""
    id: str
    role: str
    content: str
    timestamp: datetime
    sources: list[SourceModel] = Field(default_factory=list)
    confidence: Optional[float] = None
    sources_unavailable: bool = False
    error: Optional[ErrorInfo] = None

    @classmethod
    def from_message(cls, message: Message) -> "MessageModel":
        error = None
        if message.retrieval_error:
            error = ErrorInfo(type="retrieval", message=message.retrieval_error)
        return cls(
            id=message.id,
            role=message.role,
            content=message.content,
            timestamp=message.timestamp,
            sources=[SourceModel.from_source(s) for s in message.sources],
            confidence=message.confidence,
            sources_unavailable=message.sources_unavailable,
            error=error,
        )


class ChatReply(BaseModel):
    """Response from /chat."""
    answer: str
    confidence: float
    sources: list[SourceModel]
    conversation_id: str
    message: MessageModel
    error: Optional[ErrorInfo] = None

    @classmethod
    def from_response(cls, response: ChatResponse) -> "ChatReply":
        message = MessageModel.from_message(response.message)
        return cls(
            answer=response.answer,
            confidence=response.confidence,
            sources=message.sources,
            conversation_id=response.conversation_id,
            message=message,
            error=message.error,
        )


class ConversationResponse(BaseModel):
    """The active conversation with its messages."""
    id: str
    messages: list[MessageModel]


class ResetResponse(BaseModel):
    """Response from /conversation/reset."""
    conversation_id: str
    status: str = "reset"
