"""
Common API dependencies.
"""

from typing import AsyncIterator

import httpx

from vectorchat.transport import http_client


async def get_http_client() -> AsyncIterator[httpx.AsyncClient]:
    """Provide an HTTP client for relaying a single request."""
    async with http_client() as client:
        yield client
