"""
vectorchat - FastAPI Application
Retrieval-augmented chat over a Pinecone index, answered by OpenAI.
"""

import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from vectorchat.api.responses import error_response
from vectorchat.api.routes import all_routers
from vectorchat.config import config
from vectorchat.errors import ChatError

# Configure logging
logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Reports missing configuration at startup without refusing to start,
    since credentials can still be supplied later through PUT /config.
    """
    logger.info("Starting vectorchat...")

    if not config.OPENAI_API_KEY.strip():
        logger.warning("OPENAI_API_KEY is not set; chat requests will fail until it is configured")

    pinecone_error = config.get_pinecone_config_error()
    if pinecone_error:
        logger.warning(f"{pinecone_error} Answers will be generated without sources.")
    else:
        logger.info(f"Using Pinecone index: {config.PINECONE_INDEX_NAME}")

    yield

    logger.info("vectorchat stopped")


# Create FastAPI app
app = FastAPI(
    title="vectorchat API",
    description="Retrieval-augmented chat over a Pinecone vector index",
    version="1.0.0",
    lifespan=lifespan
)

for router in all_routers:
    app.include_router(router)


# Exception handlers
@app.exception_handler(ChatError)
async def chat_error_handler(request, exc: ChatError):
    logger.error(f"Unhandled {exc.kind} error: {exc.message}")
    return error_response(exc)


@app.exception_handler(Exception)
async def general_exception_handler(request, exc):
    logger.error(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "detail": str(exc)}
    )


# Entry point for running with uvicorn directly
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "vectorchat.main:app",
        host=config.API_HOST,
        port=config.API_PORT,
        reload=False,
        log_level=config.LOG_LEVEL.lower()
    )
