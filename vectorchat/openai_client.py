"""
Shared OpenAI client for embeddings and chat completions.
"""

import logging
from typing import Optional

import openai
from openai import AsyncOpenAI

from vectorchat.config import Config
from vectorchat.errors import (
    AuthError,
    BackendConnectionError,
    ChatError,
    UpstreamError,
)

logger = logging.getLogger(__name__)

_client: Optional[AsyncOpenAI] = None
_client_settings: Optional[tuple[str, str]] = None


def get_openai_client() -> AsyncOpenAI:
    """
    Get an OpenAI client for the configured credential.

    The client is rebuilt whenever the API key or base URL changes.
    SDK-level retries are disabled; callers decide whether to retry.

    Raises:
        ConfigError: If the OpenAI API key is blank.
    """
    global _client, _client_settings

    Config.validate_openai_config()
    settings = (Config.OPENAI_API_KEY.strip(), Config.OPENAI_BASE_URL)

    if _client is None or _client_settings != settings:
        _client = AsyncOpenAI(
            api_key=settings[0],
            base_url=settings[1],
            max_retries=0,
            timeout=Config.HTTP_TIMEOUT_SECONDS,
        )
        _client_settings = settings
        logger.debug("Initialized OpenAI client")

    return _client


def translate_openai_error(exc: Exception, operation: str) -> ChatError:
    """
    Map an OpenAI SDK exception to a pipeline error.

    Args:
        exc: The exception raised by the SDK.
        operation: Human-readable name of the failed call.
    """
    if isinstance(exc, ChatError):
        return exc
    if isinstance(exc, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return AuthError(
            f"{operation} was rejected by OpenAI. "
            f"Please check your OpenAI API key in settings."
        )
    if isinstance(exc, openai.APIConnectionError):
        return BackendConnectionError(f"{operation} could not reach OpenAI: {exc}")
    if isinstance(exc, openai.APIStatusError):
        return UpstreamError(
            f"{operation} failed with status {exc.status_code}: {exc.message}",
            status_code=exc.status_code,
        )
    return UpstreamError(f"{operation} failed: {exc}")
