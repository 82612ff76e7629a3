"""
Conversation store: the active session's id and ordered message log.
"""

import logging
import threading
import time
import uuid
from typing import Optional

from vectorchat.errors import ValidationError
from vectorchat.models import Message

logger = logging.getLogger(__name__)


def new_conversation_id() -> str:
    """Generate an opaque conversation id."""
    return f"conv-{int(time.time() * 1000)}-{uuid.uuid4().hex[:7]}"


class Conversation:
    """
    Ordered, append-only message log for one chat session.

    ``append`` and ``reset`` are the only mutators and are serialized
    with a lock.
    """

    def __init__(self, conversation_id: Optional[str] = None):
        self._lock = threading.Lock()
        self._id = conversation_id or new_conversation_id()
        self._messages: list[Message] = []
        self._message_ids: set[str] = set()

    @classmethod
    def create(cls) -> "Conversation":
        """Start a new conversation with a fresh id."""
        return cls()

    @property
    def id(self) -> str:
        return self._id

    @property
    def messages(self) -> list[Message]:
        """A copy of the message log, oldest first."""
        with self._lock:
            return list(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def append(self, message: Message, expected_id: Optional[str] = None) -> Optional[Message]:
        """
        Append a message to the log.

        Args:
            message: The message to record.
            expected_id: Only append while this is still the active
                conversation id. Returns None when the conversation has
                since been reset.

        Raises:
            ValidationError: If a message with the same id is already present.
        """
        with self._lock:
            if expected_id is not None and expected_id != self._id:
                return None
            if message.id in self._message_ids:
                raise ValidationError(f"Duplicate message id: {message.id}")
            self._messages.append(message)
            self._message_ids.add(message.id)
        return message

    def history(self, limit: Optional[int] = None, exclude_id: Optional[str] = None) -> list[Message]:
        """
        Return recent messages, oldest first.

        Args:
            limit: Keep only the last ``limit`` messages.
            exclude_id: Leave out the message with this id.
        """
        with self._lock:
            messages = [m for m in self._messages if m.id != exclude_id]
        if limit is not None:
            messages = messages[-limit:] if limit > 0 else []
        return messages

    def reset(self) -> str:
        """Clear the log and switch to a new conversation id. Returns the new id."""
        with self._lock:
            old_id = self._id
            new_id = new_conversation_id()
            while new_id == old_id:
                new_id = new_conversation_id()
            self._id = new_id
            self._messages = []
            self._message_ids = set()
        logger.info(f"Conversation {old_id} reset; new conversation {new_id}")
        return new_id
