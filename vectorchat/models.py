"""
Core data types for the chat pipeline: sources, messages and responses.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from vectorchat.errors import ValidationError

ROLES = ("user", "assistant")


def new_message_id() -> str:
    """Generate a unique message id."""
    return f"msg-{uuid.uuid4().hex}"


@dataclass(frozen=True)
class Source:
    """A document chunk retrieved from the vector index."""
    id: str
    title: str
    content: str
    similarity: float
    url: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "similarity": self.similarity,
            "url": self.url,
            "metadata": dict(self.metadata),
        }


@dataclass(frozen=True)
class Message:
    """One turn in a conversation. Never mutated once appended."""
    role: str
    content: str
    id: str = field(default_factory=new_message_id)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    sources: tuple[Source, ...] = ()
    confidence: Optional[float] = None
    sources_unavailable: bool = False
    retrieval_error: Optional[str] = None

    def __post_init__(self):
        if self.role not in ROLES:
            raise ValidationError(f"Unsupported message role: {self.role}")
        if self.confidence is not None and not 0.0 <= self.confidence <= 1.0:
            raise ValidationError(f"Confidence must be within [0, 1], got {self.confidence}")
        # Accept any iterable of sources but store an immutable tuple
        object.__setattr__(self, "sources", tuple(self.sources))


@dataclass(frozen=True)
class RetrievalQuery:
    """Parameters for one vector retrieval."""
    text: str
    top_k: int = 5
    similarity_threshold: float = 0.35

    def __post_init__(self):
        if not self.text or not self.text.strip():
            raise ValidationError("Query text cannot be empty")
        if self.top_k < 1:
            raise ValidationError(f"top_k must be at least 1, got {self.top_k}")


@dataclass
class ProbeResult:
    """Outcome of a vector backend connection probe."""
    success: bool
    message: str
    details: Optional[dict[str, Any]] = None
    status_code: Optional[int] = None

    @property
    def host(self) -> Optional[str]:
        if not self.details:
            return None
        return self.details.get("host")


@dataclass
class ChatResponse:
    """Result of one chat turn."""
    answer: str
    confidence: float
    sources: list[Source]
    conversation_id: str
    message: Message
    retrieval_error: Optional[str] = None
