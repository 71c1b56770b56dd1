import logging
import os
from enum import Enum

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from vitraya.api.auth import get_current_user
from vitraya.core.coach import (
    COACH_SYSTEM_MESSAGE,
    COACH_TEMPERATURE,
    COACH_TOP_P,
    QUICK_COACH_SYSTEM_MESSAGE,
    build_chat_messages,
    reply_or_default,
)
from vitraya.db.models import User
from vitraya.services.llm import LLMClient, LLMRequestError, get_llm_client

logger = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/api", tags=["chat"])

LLM_CHAT_MAX_TOKENS = int(os.getenv("LLM_CHAT_MAX_TOKENS", "8192"))


class ChatRole(str, Enum):
    system = "system"
    user = "user"
    assistant = "assistant"


class ChatMessage(BaseModel):
    role: ChatRole
    content: str = Field(max_length=8000)


class ChatRequest(BaseModel):
    messages: list[ChatMessage] = Field(max_length=100)


class ChatResponse(BaseModel):
    message: str


def _unavailable_detail(exc: LLMRequestError) -> str:
    if exc.status_code == 401:
        return "llm_auth_error"
    if exc.status_code == 429:
        return "llm_rate_limited"
    if exc.status_code and exc.status_code >= 500:
        return "llm_provider_error"
    return "llm_unavailable"


def _complete_chat(llm_client: LLMClient, system_message: str, payload: ChatRequest) -> str:
    history = [{"role": item.role.value, "content": item.content} for item in payload.messages]
    raw = llm_client.complete(
        build_chat_messages(system_message, history),
        temperature=COACH_TEMPERATURE,
        max_tokens=LLM_CHAT_MAX_TOKENS,
        top_p=COACH_TOP_P,
    )
    return reply_or_default(raw)


@router.post("/chat", response_model=ChatResponse)
def chat(
    payload: ChatRequest,
    user: User = Depends(get_current_user),
    llm_client: LLMClient = Depends(get_llm_client),
) -> ChatResponse:
    try:
        return ChatResponse(message=_complete_chat(llm_client, COACH_SYSTEM_MESSAGE, payload))
    except LLMRequestError as exc:
        logger.exception("chat_llm_request_error user_id=%s detail=%s", user.id, str(exc))
        raise HTTPException(status_code=500, detail=_unavailable_detail(exc))


@router.post("/chat-test", response_model=ChatResponse)
def chat_test(payload: ChatRequest, llm_client: LLMClient = Depends(get_llm_client)) -> ChatResponse:
    try:
        return ChatResponse(message=_complete_chat(llm_client, QUICK_COACH_SYSTEM_MESSAGE, payload))
    except LLMRequestError as exc:
        logger.exception("chat_test_llm_request_error detail=%s", str(exc))
        raise HTTPException(status_code=500, detail=_unavailable_detail(exc))
