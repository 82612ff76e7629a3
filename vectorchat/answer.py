"""
Answer generation for vectorchat.
Builds a grounded prompt from retrieved sources and recent history and
asks the chat completion API for an answer.
"""

import logging
from typing import Iterable, Optional

from openai import AsyncOpenAI

from vectorchat.config import Config
from vectorchat.errors import UpstreamError, ValidationError
from vectorchat.models import Message, Source
from vectorchat.openai_client import get_openai_client, translate_openai_error

logger = logging.getLogger(__name__)

NO_INFORMATION_ANSWER = (
    "I couldn't find any relevant information in the knowledge base to answer "
    "your question. Could you please rephrase it or ask about something else?"
)

GROUNDED_SYSTEM_PROMPT = """You are a helpful assistant that answers questions using context retrieved from a document knowledge base.

Guidelines:
- Answer from the provided context whenever it is relevant
- If the context is only partially relevant, extract and use whatever information it does contain
- Only say that you don't have enough information when the context is empty or entirely unrelated to the question
- Be concise but thorough
- Don't make up facts that are not supported by the context"""

GENERAL_KNOWLEDGE_SYSTEM_PROMPT = """You are a helpful assistant. The document knowledge base could not be searched for this question, so answer from your general knowledge.

Guidelines:
- Be concise but thorough
- Say so when you are unsure of an answer
- Don't claim that your answer comes from the user's documents"""


def build_context(sources: Iterable[Source], include_scores: bool = True) -> str:
    """
    Concatenate source contents in the order received.

    Args:
        sources: Retrieved sources.
        include_scores: Whether to label each block with its similarity.
    """
    parts = []
    for i, source in enumerate(sources, 1):
        header = f"Context {i}"
        if include_scores:
            header += f" (similarity {round(source.similarity * 100)}%)"
        parts.append(f"{header}: {source.content}")
    return "\n\n".join(parts)


def recent_history(history: Iterable[Message], window: int) -> list[dict[str, str]]:
    """Return the last ``window`` user/assistant turns as chat messages."""
    turns = [
        {"role": m.role, "content": m.content}
        for m in history
        if m.role in ("user", "assistant")
    ]
    if window <= 0:
        return []
    return turns[-window:]


class AnswerGenerator:
    """Generates grounded answers with a chat completion model."""

    def __init__(
        self,
        client: Optional[AsyncOpenAI] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        history_window: Optional[int] = None,
    ):
        self._client = client
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._history_window = history_window

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is not None:
            return self._client
        return get_openai_client()

    @property
    def model(self) -> str:
        return self._model or Config.OPENAI_MODEL

    @property
    def history_window(self) -> int:
        if self._history_window is None:
            return Config.HISTORY_WINDOW
        return self._history_window

    def build_messages(
        self,
        query: str,
        sources: list[Source],
        history: list[Message],
        allow_general_knowledge: bool = False,
    ) -> list[dict[str, str]]:
        """
        Build the chat messages for a completion request.

        Layout: system instruction, recent history, then the final user
        turn carrying the retrieved context and the question.
        """
        if sources or not allow_general_knowledge:
            system_prompt = GROUNDED_SYSTEM_PROMPT
            user_message = (
                f"Context from knowledge base:\n---\n{build_context(sources)}\n---\n\n"
                f"Question: {query}\n\nAnswer based on the context above:"
            )
        else:
            system_prompt = GENERAL_KNOWLEDGE_SYSTEM_PROMPT
            user_message = query

        messages = [{"role": "system", "content": system_prompt}]
        messages.extend(recent_history(history, self.history_window))
        messages.append({"role": "user", "content": user_message})
        return messages

    async def generate(
        self,
        query: str,
        sources: list[Source],
        history: list[Message],
        allow_general_knowledge: bool = False,
    ) -> str:
        """
        Generate an answer for ``query``.

        Args:
            query: The user's question.
            sources: Retrieved sources, in ranking order.
            history: Earlier conversation messages, oldest first.
            allow_general_knowledge: Answer without context when there are
                no sources. Used when retrieval failed.

        Returns:
            The answer text. With no sources and no general-knowledge
            fallback this is NO_INFORMATION_ANSWER and the model is not called.

        Raises:
            ValidationError: If the query is blank.
            ConfigError: If the OpenAI API key is not configured.
            AuthError, BackendConnectionError, UpstreamError: If the
                completion call fails or returns no content.
        """
        if not query or not query.strip():
            raise ValidationError("Question cannot be empty")

        if not sources and not allow_general_knowledge:
            logger.info("No sources retrieved; returning no-information answer")
            return NO_INFORMATION_ANSWER

        Config.validate_openai_config()
        messages = self.build_messages(query, sources, history, allow_general_knowledge)
        logger.info(
            f"Generating answer with {self.model} from {len(sources)} sources "
            f"and {len(messages) - 2} history messages"
        )

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=(
                    Config.LLM_TEMPERATURE if self._temperature is None else self._temperature
                ),
                max_tokens=self._max_tokens or Config.LLM_MAX_TOKENS,
            )
        except Exception as e:
            error = translate_openai_error(e, "Chat completion request")
            logger.error(f"LLM generation failed: {error.message}")
            raise error from e

        choices = getattr(response, "choices", None)
        message = getattr(choices[0], "message", None) if choices else None
        content = getattr(message, "content", None)
        if not content or not content.strip():
            logger.error("Chat completion response did not contain an answer")
            raise UpstreamError("Invalid response from OpenAI: completion content is missing")

        return content


# Singleton instance
answer_generator = AnswerGenerator()
