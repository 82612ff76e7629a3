"""
Connection probing for the Pinecone vector backend.

Describes the configured index to check reachability and credentials,
and to learn the per-index host used for queries.
"""

import logging
from typing import Any, Optional

import httpx

from vectorchat.config import Config
from vectorchat.models import ProbeResult
from vectorchat.retry import retry_async
from vectorchat.transport import extract_error_message, http_client

logger = logging.getLogger(__name__)

AUTH_FAILURE_STATUSES = (401, 403)


class _ProbeError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class _ProbeAttemptError(_ProbeError):
    """A single probe attempt failed and may be retried."""


class _ProbeRejectedError(_ProbeError):
    """The backend rejected the credential; retrying will not help."""


class ConnectionProber:
    """Checks that the vector backend is reachable before it is queried."""

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        """
        Args:
            client: HTTP client to use. A short-lived client is created per
                probe when omitted.
        """
        self._client = client

    def describe_url(self) -> str:
        base = Config.PINECONE_CONTROLLER_URL.rstrip("/")
        return f"{base}/indexes/{Config.PINECONE_INDEX_NAME.strip()}"

    async def _describe_index(self, client: httpx.AsyncClient) -> dict[str, Any]:
        try:
            response = await client.get(
                self.describe_url(),
                headers={
                    "Api-Key": Config.PINECONE_API_KEY.strip(),
                    "Accept": "application/json",
                },
            )
        except httpx.HTTPError as e:
            raise _ProbeAttemptError(f"Could not reach Pinecone: {e}") from e

        if response.status_code in AUTH_FAILURE_STATUSES:
            raise _ProbeRejectedError(
                "Pinecone rejected the API key. Please check your credentials in settings.",
                status_code=response.status_code,
            )

        if not response.is_success:
            raise _ProbeAttemptError(
                f"Pinecone returned {response.status_code}: {extract_error_message(response)}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise _ProbeAttemptError("Pinecone returned an unreadable index description") from e

        if not isinstance(data, dict) or not data.get("host"):
            raise _ProbeAttemptError("Pinecone index description is missing the host")

        return data

    async def probe(
        self,
        max_attempts: Optional[int] = None,
        initial_delay_ms: Optional[int] = None,
    ) -> ProbeResult:
        """
        Probe the configured index, retrying with exponential backoff.

        Args:
            max_attempts: Maximum attempts. Defaults to PROBE_MAX_ATTEMPTS.
            initial_delay_ms: Delay before the second attempt, doubled after
                each failure. Defaults to PROBE_INITIAL_DELAY_MS.

        Returns:
            ProbeResult; ``details`` holds the index description on success.
            This method never raises.
        """
        if max_attempts is None:
            max_attempts = Config.PROBE_MAX_ATTEMPTS
        max_attempts = max(1, max_attempts)
        if initial_delay_ms is None:
            initial_delay_ms = Config.PROBE_INITIAL_DELAY_MS

        config_error = Config.get_pinecone_config_error()
        if config_error:
            return ProbeResult(success=False, message=config_error)

        index_name = Config.PINECONE_INDEX_NAME.strip()
        logger.info(f"Probing Pinecone index '{index_name}'")

        try:
            async with http_client(self._client) as client:
                details = await retry_async(
                    lambda: self._describe_index(client),
                    max_attempts=max_attempts,
                    initial_delay=max(0, initial_delay_ms) / 1000,
                    multiplier=2.0,
                    retry_on=(_ProbeAttemptError,),
                )
        except _ProbeRejectedError as e:
            logger.error(f"Pinecone probe rejected: {e.message}")
            return ProbeResult(success=False, message=e.message, status_code=e.status_code)
        except _ProbeAttemptError as e:
            logger.error(f"Pinecone probe failed after {max_attempts} attempt(s): {e.message}")
            return ProbeResult(
                success=False,
                message=f"Failed to connect to Pinecone after {max_attempts} attempt(s): {e.message}",
                status_code=e.status_code,
            )
        except Exception as e:
            logger.error(f"Unexpected error probing Pinecone: {e}")
            return ProbeResult(success=False, message=f"Unexpected error probing Pinecone: {e}")

        logger.info(f"Connected to Pinecone index '{index_name}' at {details['host']}")
        return ProbeResult(
            success=True,
            message=f"Connected to Pinecone index '{index_name}'",
            details=details,
        )


# Singleton instance
connection_prober = ConnectionProber()
