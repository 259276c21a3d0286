"""Sales assistant chat routes."""

import logging
import uuid
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.ai.assistant import SalesAssistant
from storefront.ai.llm_service import llm_service
from storefront.api.deps import get_assistant, get_database
from storefront.api.routes.orders import InvoiceTotalsResponse, LineItemModel, OrderResponse
from storefront.config import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/assistant", tags=["assistant"])


class ChatMessageModel(BaseModel):
    role: str
    text: str
    timestamp: datetime

    class Config:
        from_attributes = True


class SessionResponse(BaseModel):
    session_id: str
    messages: List[ChatMessageModel]


class ChatRequest(BaseModel):
    session_id: str
    message: str


class InvoiceDataModel(BaseModel):
    customer_name: str
    items: List[LineItemModel]
    total: float
    date: str

    class Config:
        from_attributes = True


class ChatResponse(BaseModel):
    """
    One assistant turn.

    When the reply closed a sale, ``order``, ``invoice`` and ``totals`` are
    set and the client shows the invoice after
    ``invoice_display_delay_seconds``. Failures arrive as a normal model
    message with ``error_kind`` set.
    """
    message: ChatMessageModel
    order: Optional[OrderResponse] = None
    invoice: Optional[InvoiceDataModel] = None
    totals: Optional[InvoiceTotalsResponse] = None
    error_kind: Optional[str] = None
    invoice_display_delay_seconds: float = 0.0


class SystemPromptResponse(BaseModel):
    prompt: str


def _session_response(assistant: SalesAssistant, session_id: str) -> SessionResponse:
    conversation = assistant.get_conversation(session_id)
    return SessionResponse(
        session_id=session_id,
        messages=[ChatMessageModel.model_validate(m) for m in conversation.transcript],
    )


@router.post("/sessions", response_model=SessionResponse, status_code=201)
async def start_session(assistant: SalesAssistant = Depends(get_assistant)):
    """Open a conversation and return its greeting."""
    session_id = uuid.uuid4().hex
    assistant.start_conversation(session_id)
    return _session_response(assistant, session_id)


@router.post("/sessions/{session_id}/reset", response_model=SessionResponse)
async def reset_session(session_id: str, assistant: SalesAssistant = Depends(get_assistant)):
    """Start over with a fresh conversation handle under the same session id."""
    assistant.reset_conversation(session_id)
    return _session_response(assistant, session_id)


@router.get("/sessions/{session_id}/messages", response_model=SessionResponse)
async def get_messages(session_id: str, assistant: SalesAssistant = Depends(get_assistant)):
    if assistant.get_conversation(session_id) is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return _session_response(assistant, session_id)


@router.delete("/sessions/{session_id}", status_code=204)
async def end_session(session_id: str, assistant: SalesAssistant = Depends(get_assistant)):
    assistant.end_conversation(session_id)


@router.post("/chat", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    db: AsyncSession = Depends(get_database),
    assistant: SalesAssistant = Depends(get_assistant),
):
    """Send a customer message to the assistant."""
    try:
        reply = await assistant.send_message(db, request.session_id, request.message)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    response = ChatResponse(
        message=ChatMessageModel.model_validate(reply.message),
        error_kind=reply.error_kind.value if reply.error_kind else None,
    )
    if reply.order is not None:
        response.order = OrderResponse.model_validate(reply.order)
        response.invoice = InvoiceDataModel.model_validate(reply.invoice)
        response.totals = InvoiceTotalsResponse.model_validate(reply.totals)
        response.invoice_display_delay_seconds = settings.invoice_display_delay_seconds
    return response


@router.get("/system-prompt", response_model=SystemPromptResponse)
async def get_system_prompt(assistant: SalesAssistant = Depends(get_assistant)):
    """The instructions the assistant currently runs with, including the live catalog."""
    return SystemPromptResponse(prompt=assistant.system_prompt())


@router.get("/stats")
async def get_stats():
    """LLM call statistics."""
    return llm_service.get_stats()
