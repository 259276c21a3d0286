"""Conversational sales assistant.

Keeps one conversation handle per client session, forwards user text to the
chat model together with a catalog-aware system prompt, and turns invoice
blocks in the model's replies into confirmed orders.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from storefront import metrics
from storefront.ai.errors import AssistantError, ErrorKind
from storefront.ai.llm_service import LLMService, llm_service
from storefront.ai.prompts import generate_system_prompt
from storefront.ai.structured_output import extract_invoice_data
from storefront.catalog.store import CatalogStore, catalog_store
from storefront.db.models import Order
from storefront.logging_config import get_logger
from storefront.sales.invoice import InvoiceData, InvoiceTotals, calculate_invoice
from storefront.sales.orders import OrderLedger, order_ledger

logger = logging.getLogger(__name__)

WELCOME_MESSAGE = (
    "Hello! I'm the Gadget Wall AI assistant. Looking for a new phone or the right accessory? "
    "Tell me what you need and your budget."
)
RESET_MESSAGE = "Conversation restarted. How can I help you today?"
PROCESSING_ERROR_MESSAGE = "Sorry, I couldn't process that reply. Could you rephrase?"


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ChatMessage:
    """One line of the visible chat transcript."""

    role: str  # "user" | "model"
    text: str
    timestamp: datetime = field(default_factory=_now)


@dataclass
class Conversation:
    """
    A conversation handle.

    ``transcript`` is what the customer sees. ``context`` is what the model
    has been told: only exchanges that got a reply, with the reply unedited.
    """

    session_id: str
    transcript: List[ChatMessage] = field(default_factory=list)
    context: List[Dict[str, str]] = field(default_factory=list)
    started_at: datetime = field(default_factory=_now)


@dataclass
class ChatReply:
    """Result of sending one user message."""

    message: ChatMessage
    order: Optional[Order] = None
    invoice: Optional[InvoiceData] = None
    totals: Optional[InvoiceTotals] = None
    error_kind: Optional[ErrorKind] = None


class SalesAssistant:
    """Chat front door to the model host."""

    def __init__(
        self,
        llm: Optional[LLMService] = None,
        catalog: Optional[CatalogStore] = None,
        ledger: Optional[OrderLedger] = None,
    ):
        self.llm = llm or llm_service
        self.catalog = catalog or catalog_store
        self.ledger = ledger or order_ledger
        self._conversations: Dict[str, Conversation] = {}

    def system_prompt(self) -> str:
        return generate_system_prompt(self.catalog.products)

    def get_conversation(self, session_id: str) -> Optional[Conversation]:
        return self._conversations.get(session_id)

    def start_conversation(self, session_id: str, greeting: str = WELCOME_MESSAGE) -> Conversation:
        """Open a fresh handle for a session, replacing any previous one."""
        conversation = Conversation(session_id=session_id)
        conversation.transcript.append(ChatMessage(role="model", text=greeting))
        self._conversations[session_id] = conversation
        logger.info(f"Conversation started for session {session_id}")
        return conversation

    def reset_conversation(self, session_id: str) -> Conversation:
        return self.start_conversation(session_id, greeting=RESET_MESSAGE)

    def end_conversation(self, session_id: str):
        self._conversations.pop(session_id, None)

    def _restart_handle(self, conversation: Conversation) -> Conversation:
        """Drop what the model was told, keep what the customer sees."""
        restarted = Conversation(
            session_id=conversation.session_id,
            transcript=conversation.transcript,
        )
        self._conversations[conversation.session_id] = restarted
        metrics.conversation_restarts_total.inc()
        return restarted

    async def _complete(self, conversation: Conversation, text: str) -> str:
        messages = [
            {"role": "system", "content": self.system_prompt()},
            *conversation.context,
            {"role": "user", "content": text},
        ]
        reply = await self.llm.chat(messages)
        conversation.context.append({"role": "user", "content": text})
        conversation.context.append({"role": "assistant", "content": reply})
        return reply

    def _failure(self, conversation: Conversation, error: AssistantError) -> ChatReply:
        metrics.chat_messages_total.labels(status="error").inc()
        message = ChatMessage(role="model", text=error.user_message)
        conversation.transcript.append(message)
        return ChatReply(message=message, error_kind=error.kind)

    async def send_message(self, db: AsyncSession, session_id: str, text: str) -> ChatReply:
        """
        Send a customer message and return the assistant's reply.

        Transport failures never raise: they come back as a model message
        with ``error_kind`` set. Restartable failures get exactly one retry
        on a fresh conversation handle first.

        Raises:
            ValueError: If the message is blank
        """
        text = (text or "").strip()
        if not text:
            raise ValueError("Message is required")

        log = get_logger(__name__, session_id=session_id)
        conversation = self._conversations.get(session_id) or self.start_conversation(session_id)
        conversation.transcript.append(ChatMessage(role="user", text=text))

        try:
            raw = await self._complete(conversation, text)
        except AssistantError as e:
            if not e.kind.restartable:
                return self._failure(conversation, e)
            log.warning(f"Chat send failed ({e.kind.value}), restarting conversation once")
            conversation = self._restart_handle(conversation)
            try:
                raw = await self._complete(conversation, text)
            except AssistantError as retry_error:
                return self._failure(conversation, retry_error)

        clean_text, invoice = extract_invoice_data(raw)
        message = ChatMessage(role="model", text=clean_text or PROCESSING_ERROR_MESSAGE)
        conversation.transcript.append(message)
        metrics.chat_messages_total.labels(status="success").inc()

        if invoice is None:
            return ChatReply(message=message)

        order = await self.ledger.record(db, invoice, session_id=session_id)
        log.info(f"Invoice extracted from reply, order {order.id} created")
        return ChatReply(
            message=message,
            order=order,
            invoice=invoice,
            totals=calculate_invoice(invoice.items).rounded(),
        )


# Global assistant instance
sales_assistant = SalesAssistant()
