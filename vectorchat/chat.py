"""
Chat service: turns one user message into one grounded assistant answer.

Pipeline:
1. Record the user message
2. Retrieve sources from the vector index (failures degrade, not abort)
3. Generate the answer from sources and recent history
4. Record the assistant message with its sources and confidence
"""

import logging
from enum import Enum
from typing import Iterable, Optional

from vectorchat.answer import AnswerGenerator, answer_generator as default_answer_generator
from vectorchat.config import Config
from vectorchat.conversation import Conversation
from vectorchat.errors import ChatError, UpstreamError, ValidationError
from vectorchat.models import ChatResponse, Message, Source
from vectorchat.vector_index import VectorIndexClient, vector_index as default_vector_index

logger = logging.getLogger(__name__)

# Confidence when retrieval worked but found nothing
NEUTRAL_CONFIDENCE = 0.5
# Confidence when retrieval itself failed
FAILED_RETRIEVAL_CONFIDENCE = 0.0


class TurnState(str, Enum):
    """Stages of a single chat turn."""
    IDLE = "idle"
    RETRIEVING = "retrieving"
    DEGRADED_RETRIEVAL = "degraded_retrieval"
    GENERATING = "generating"
    COMPLETED = "completed"
    FAILED = "failed"


def compute_confidence(sources: Iterable[Source], retrieval_failed: bool = False) -> float:
    """
    Confidence of an answer, derived from its sources.

    Highest source similarity (clamped to [0, 1]); NEUTRAL_CONFIDENCE when
    retrieval found nothing; FAILED_RETRIEVAL_CONFIDENCE when it failed.
    """
    if retrieval_failed:
        return FAILED_RETRIEVAL_CONFIDENCE

    scores = [s.similarity for s in sources]
    if not scores:
        return NEUTRAL_CONFIDENCE

    return min(max(max(scores), 0.0), 1.0)


class ChatService:
    """
    Orchestrates retrieval-augmented chat for one conversation.

    Callers that must keep turns in order should await each
    ``send_message`` before starting the next.
    """

    def __init__(
        self,
        conversation: Optional[Conversation] = None,
        vector_index: Optional[VectorIndexClient] = None,
        answer_generator: Optional[AnswerGenerator] = None,
        top_k: Optional[int] = None,
        similarity_threshold: Optional[float] = None,
    ):
        self.conversation = conversation or Conversation.create()
        self.vector_index = vector_index or default_vector_index
        self.answer_generator = answer_generator or default_answer_generator
        self._top_k = top_k
        self._similarity_threshold = similarity_threshold

    @property
    def top_k(self) -> int:
        return Config.RAG_TOP_K if self._top_k is None else self._top_k

    @property
    def similarity_threshold(self) -> float:
        if self._similarity_threshold is None:
            return Config.RAG_SIMILARITY_THRESHOLD
        return self._similarity_threshold

    @staticmethod
    def _transition(current: TurnState, new: TurnState) -> TurnState:
        logger.debug(f"Turn state: {current.value} -> {new.value}")
        return new

    async def send_message(self, text: str) -> ChatResponse:
        """
        Answer a user message.

        Retrieval failures are logged and the answer is generated without
        sources; the assistant message is then flagged ``sources_unavailable``.
        Generation failures abort the turn: the error propagates and no
        assistant message is recorded.

        Args:
            text: The user's message.

        Returns:
            ChatResponse with the answer, sources and confidence.

        Raises:
            ValidationError: If the message is blank.
            ChatError: If answer generation fails.
        """
        if not text or not text.strip():
            raise ValidationError("Message cannot be empty")

        state = TurnState.IDLE
        conversation_id = self.conversation.id
        user_message = self.conversation.append(Message(role="user", content=text))
        logger.info(f"Chat turn in {conversation_id}: {text[:100]}")

        state = self._transition(state, TurnState.RETRIEVING)
        retrieval_error: Optional[str] = None
        try:
            sources = await self.vector_index.search(
                text,
                top_k=self.top_k,
                similarity_threshold=self.similarity_threshold,
            )
        except ChatError as e:
            state = self._transition(state, TurnState.DEGRADED_RETRIEVAL)
            logger.warning(f"Retrieval failed, answering without sources: {e.message}")
            sources = []
            retrieval_error = e.message

        state = self._transition(state, TurnState.GENERATING)
        history = self.conversation.history(exclude_id=user_message.id)
        try:
            answer = await self.answer_generator.generate(
                text,
                sources,
                history,
                allow_general_knowledge=retrieval_error is not None,
            )
        except ChatError as e:
            self._transition(state, TurnState.FAILED)
            logger.error(f"Answer generation failed ({e.kind}): {e.message}")
            raise
        except Exception as e:
            self._transition(state, TurnState.FAILED)
            logger.error(f"Answer generation failed: {e}")
            raise UpstreamError(f"Failed to generate a response: {e}") from e

        confidence = compute_confidence(sources, retrieval_failed=retrieval_error is not None)
        assistant_message = Message(
            role="assistant",
            content=answer,
            sources=tuple(sources),
            confidence=confidence,
            sources_unavailable=retrieval_error is not None,
            retrieval_error=retrieval_error,
        )
        if self.conversation.append(assistant_message, expected_id=conversation_id) is None:
            logger.warning(
                f"Conversation {conversation_id} was reset during the turn; "
                f"answer not recorded in {self.conversation.id}"
            )
        self._transition(state, TurnState.COMPLETED)

        return ChatResponse(
            answer=answer,
            confidence=confidence,
            sources=list(sources),
            conversation_id=conversation_id,
            message=assistant_message,
            retrieval_error=retrieval_error,
        )

    def get_history(self) -> list[Message]:
        """Messages of the active conversation, oldest first."""
        return self.conversation.messages

    def reset_conversation(self) -> str:
        """Start a new conversation. Returns the new conversation id."""
        return self.conversation.reset()


# Singleton
chat_service = ChatService()
