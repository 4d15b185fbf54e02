from __future__ import annotations

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from supportchat.api.dependencies import OrchestratorDep
from supportchat.chat.errors import ChatInputError, ConversationNotFound
from supportchat.logging import get_logger


logger = get_logger(__name__)

router = APIRouter(prefix="/chat", tags=["Chat"])

_SEND_FAILED = (
    "Something went wrong on our side while processing your message. "
    "Please try again in a moment."
)
_HISTORY_FAILED = (
    "Something went wrong while loading your past messages. "
    "Please refresh and try again."
)


class ChatRequest(BaseModel):
    message: str | None = None
    sessionId: str | None = Field(default=None, max_length=256)


class ChatResponse(BaseModel):
    reply: str
    sessionId: str


class HistoryMessage(BaseModel):
    sender: str
    text: str
    created_at: int


class HistoryResponse(BaseModel):
    sessionId: str
    createdAt: int
    messages: list[HistoryMessage]


@router.post("/message", response_model=ChatResponse)
def send_message(payload: ChatRequest, orchestrator: OrchestratorDep):
    try:
        result = orchestrator.send_message(payload.message, payload.sessionId)
    except ChatInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception("Error in /chat/message")
        raise HTTPException(status_code=500, detail=_SEND_FAILED) from exc

    return ChatResponse(reply=result.reply, sessionId=result.session_id)


@router.get("/history/{session_id}", response_model=HistoryResponse)
def history(session_id: str, orchestrator: OrchestratorDep):
    try:
        conversation = orchestrator.get_history(session_id)
    except ConversationNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception("Error in /chat/history")
        raise HTTPException(status_code=500, detail=_HISTORY_FAILED) from exc

    return HistoryResponse(
        sessionId=conversation.conversation.id,
        createdAt=conversation.conversation.created_at,
        messages=[
            HistoryMessage(sender=row.sender.value, text=row.text, created_at=row.created_at)
            for row in conversation.messages
        ],
    )
