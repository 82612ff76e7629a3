"""
Typed errors raised by the retrieval-and-answer pipeline.

Every error carries a human-readable message and a short ``kind`` used
by the API layer and by degraded chat messages.
"""

from typing import Optional


class ChatError(Exception):
    """Base class for pipeline errors."""

    kind = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigError(ChatError, ValueError):
    """A required credential or identifier is missing or blank."""

    kind = "config"


class ValidationError(ChatError, ValueError):
    """Caller input is malformed (e.g. an empty query)."""

    kind = "validation"


class BackendConnectionError(ChatError, ConnectionError):
    """A backend is unreachable or the connection probe exhausted its retries."""

    kind = "connection"


class AuthError(ChatError):
    """A backend rejected the configured credential."""

    kind = "auth"


class UpstreamError(ChatError):
    """A backend was reachable but returned a failure or a malformed payload."""

    kind = "upstream"

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
