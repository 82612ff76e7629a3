"""
Translation of pipeline errors into HTTP error responses.
"""

from fastapi.responses import JSONResponse

from vectorchat.errors import (
    AuthError,
    BackendConnectionError,
    ChatError,
    ConfigError,
    UpstreamError,
    ValidationError,
)

_STATUS_CODES: list[tuple[type[ChatError], int, str]] = [
    (ValidationError, 400, "VALIDATION_ERROR"),
    (ConfigError, 400, "CONFIG_ERROR"),
    (AuthError, 401, "AUTH_ERROR"),
    (BackendConnectionError, 503, "CONNECTION_ERROR"),
    (UpstreamError, 502, "UPSTREAM_ERROR"),
]


def error_response(exc: ChatError) -> JSONResponse:
    """Build the JSON error response for a pipeline error."""
    for error_type, status_code, code in _STATUS_CODES:
        if isinstance(exc, error_type):
            return JSONResponse(
                status_code=status_code,
                content={"error": exc.message, "code": code},
            )
    return JSONResponse(
        status_code=500,
        content={"error": exc.message, "code": "GENERATION_ERROR"},
    )
