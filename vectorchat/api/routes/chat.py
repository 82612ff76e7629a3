"""
Chat routes: /chat, /conversation, /conversation/reset
"""

import logging

from fastapi import APIRouter

from vectorchat.api.models.chat import (
    ChatReply,
    ChatRequest,
    ConversationResponse,
    MessageModel,
    ResetResponse,
)
from vectorchat.api.models.system import ErrorResponse
from vectorchat.api.responses import error_response
from vectorchat.chat import chat_service
from vectorchat.errors import ChatError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Chat"])


@router.post(
    "/chat",
    response_model=ChatReply,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def send_message(request: ChatRequest):
    """
    Send a message and get a grounded answer.

    Retrieves similar chunks from the vector index and asks the language
    model to answer from them. If retrieval fails the answer is still
    generated, and the reply carries an ``error`` describing the failure.
    """
    try:
        response = await chat_service.send_message(request.message)
    except ChatError as e:
        logger.error("Chat error (%s): %s", e.kind, e.message)
        return error_response(e)

    return ChatReply.from_response(response)


@router.get("/conversation", response_model=ConversationResponse)
async def get_conversation():
    """
    Get the active conversation with all messages.
    """
    return ConversationResponse(
        id=chat_service.conversation.id,
        messages=[MessageModel.from_message(m) for m in chat_service.get_history()],
    )


@router.post("/conversation/reset", response_model=ResetResponse)
async def reset_conversation():
    """
    Clear the message history and start a new conversation.
    """
    return ResetResponse(conversation_id=chat_service.reset_conversation())
