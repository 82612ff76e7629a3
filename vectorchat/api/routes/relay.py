"""
Relay routes: /api/openai-proxy, /api/pinecone-describe, /api/pinecone-proxy

Same-origin pass-through endpoints for browser deployments. They forward
request bodies unchanged and return the upstream status and JSON body.
"""

import logging
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from vectorchat.api.dependencies import get_http_client
from vectorchat.api.models.relay import (
    DescribeRelayRequest,
    EmbeddingRelayRequest,
    QueryRelayRequest,
)
from vectorchat.config import Config

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Relay"])


@router.post("/openai-proxy")
async def relay_embedding(
    request: EmbeddingRelayRequest,
    client: httpx.AsyncClient = Depends(get_http_client),
):
    """
    Generate an embedding for ``query`` via OpenAI.
    Returns ``{"success": true, "embedding": [...]}``.
    """
    if not request.query or not request.apiKey:
        return JSONResponse(status_code=400, content={"error": "Missing query or API key"})

    logger.info("Generating embedding for query via relay")

    try:
        response = await client.post(
            f"{Config.OPENAI_BASE_URL.rstrip('/')}/embeddings",
            headers={
                "Authorization": f"Bearer {request.apiKey.strip()}",
                "Content-Type": "application/json",
            },
            json={
                "model": request.model or Config.OPENAI_EMBEDDING_MODEL,
                "input": request.query,
            },
        )
        data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.error("OpenAI relay error: %s", e)
        return JSONResponse(
            status_code=500,
            content={"error": "Error in OpenAI proxy", "message": str(e)},
        )

    if not response.is_success:
        error = data.get("error") if isinstance(data, dict) else None
        return JSONResponse(
            status_code=response.status_code,
            content={"error": error or "OpenAI API error"},
        )

    try:
        embedding = data["data"][0]["embedding"]
    except (KeyError, IndexError, TypeError):
        embedding = None

    if not embedding:
        return JSONResponse(
            status_code=500,
            content={"error": "Invalid response from OpenAI: embedding is missing"},
        )

    return {"success": True, "embedding": embedding}


@router.post("/pinecone-describe")
async def relay_describe_index(
    request: DescribeRelayRequest,
    index: Optional[str] = Query(None, description="Pinecone index name"),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    """
    Describe a Pinecone index.
    Returns the Pinecone response unchanged.
    """
    if not index or not request.apiKey:
        return JSONResponse(
            status_code=400,
            content={
                "error": "Missing index name or API key",
                "index": bool(index),
                "apiKey": bool(request.apiKey),
            },
        )

    logger.info("Describing Pinecone index via relay: %s", index)

    try:
        response = await client.get(
            f"{Config.PINECONE_CONTROLLER_URL.rstrip('/')}/indexes/{index}",
            headers={"Api-Key": request.apiKey.strip(), "Accept": "application/json"},
        )
        data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.error("Pinecone describe relay error: %s", e)
        return JSONResponse(
            status_code=500,
            content={"error": "Error describing Pinecone index", "message": str(e)},
        )

    return JSONResponse(status_code=response.status_code, content=data)


@router.post("/pinecone-proxy")
async def relay_query(
    request: QueryRelayRequest,
    host: Optional[str] = Query(None, description="Pinecone index host"),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    """
    Forward a vector query to a Pinecone index host.
    Returns the Pinecone response unchanged.
    """
    if not host:
        return JSONResponse(status_code=400, content={"error": "No host provided"})
    if not request.pineconeBody or not request.apiKey:
        return JSONResponse(status_code=400, content={"error": "Missing request body or API key"})

    logger.info("Relaying query to Pinecone host: %s", host)

    try:
        response = await client.post(
            f"https://{host}/query",
            headers={
                "Api-Key": request.apiKey.strip(),
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            json=request.pineconeBody,
        )
        data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.error("Pinecone query relay error: %s", e)
        return JSONResponse(
            status_code=500,
            content={"error": "Error in Pinecone proxy", "message": str(e)},
        )

    return JSONResponse(status_code=response.status_code, content=data)
