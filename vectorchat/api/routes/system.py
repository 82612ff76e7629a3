"""
System routes: /health, /health/vector-index, /config (GET, PUT)
"""

import logging

from fastapi import APIRouter

from vectorchat.api.models.system import (
    ConfigUpdateRequest,
    ErrorResponse,
    HealthResponse,
    ProbeResponse,
)
from vectorchat.api.responses import error_response
from vectorchat.chat import chat_service
from vectorchat.config import Config
from vectorchat.connection import connection_prober
from vectorchat.errors import ConfigError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["System"])


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint.
    Reports whether OpenAI and Pinecone credentials are configured.
    """
    return HealthResponse(
        status="ok",
        conversation_id=chat_service.conversation.id,
        openai_configured=bool(Config.OPENAI_API_KEY.strip()),
        pinecone_configured=Config.get_pinecone_config_error() is None,
    )


@router.get("/health/vector-index", response_model=ProbeResponse)
async def probe_vector_index():
    """
    Check the connection to the Pinecone index.
    Retries with exponential backoff before reporting a failure.
    """
    result = await connection_prober.probe()
    return ProbeResponse(
        success=result.success,
        message=result.message,
        host=result.host,
        details=result.details,
    )


@router.get("/config")
async def get_config():
    """
    Get the active configuration.
    Credentials are reported as present or missing, never returned.
    """
    return Config.describe()


@router.put("/config", responses={400: {"model": ErrorResponse}})
async def update_config(request: ConfigUpdateRequest):
    """
    Supply credentials and index settings at runtime.
    Returns the updated configuration summary.
    """
    values = {name.upper(): value for name, value in request.model_dump(exclude_none=True).items()}
    try:
        Config.update(**values)
    except ConfigError as e:
        logger.error("Config update failed: %s", e.message)
        return error_response(e)

    logger.info("Configuration updated: %s", ", ".join(sorted(values)) or "no changes")
    return Config.describe()
