"""
HTTP helpers shared by the vector backend clients and relay routes.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx

from vectorchat.config import Config


@asynccontextmanager
async def http_client(client: Optional[httpx.AsyncClient] = None) -> AsyncIterator[httpx.AsyncClient]:
    """
    Yield ``client`` if given, otherwise a short-lived client that is
    closed on exit.
    """
    if client is not None:
        yield client
        return

    async with httpx.AsyncClient(timeout=Config.HTTP_TIMEOUT_SECONDS) as owned:
        yield owned


def extract_error_message(response: httpx.Response) -> str:
    """
    Best-effort error text from a failed response.

    Uses the JSON ``error``/``message`` field when the body parses,
    otherwise the status text.
    """
    try:
        data = response.json()
    except ValueError:
        data = None

    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict):
            error = error.get("message") or error.get("code")
        message = error or data.get("message")
        if message:
            return str(message)

    return response.reason_phrase or f"HTTP {response.status_code}"
