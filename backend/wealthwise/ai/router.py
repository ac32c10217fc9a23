"""FastAPI router for the AI financial advisor.

Apart from request-body validation, every failure on these endpoints answers
with a non-2xx status and an `{"error": ...}` body.

The one-pending-reply guard lives in process memory, so it only holds within a
single worker process; several uvicorn workers each keep their own guard.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from wealthwise.ai.context import build_financial_context, format_transaction_line, load_advice_snapshot
from wealthwise.ai.conversation import (
    AdvisorSessions,
    ReplyPendingError,
    receive_failure,
    receive_reply,
    submit_message,
)
from wealthwise.ai.gemini_client import GeminiClient, GeminiError
from wealthwise.ai.history import append_exchange, list_exchanges
from wealthwise.ai.prompt import build_system_prompt, build_transaction_prompt
from wealthwise.auth import get_current_user_id
from wealthwise.config import settings
from wealthwise.database import get_db_connection
from wealthwise.errors import RecordStoreError
from wealthwise.services.transactions_service import get_transaction

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/ai", tags=["ai"])

ADVICE_FAILED = "Failed to get AI response. Please try again."
ADVICE_UNCONFIGURED = "AI advisor is unavailable because GEMINI_API_KEY is not configured."
TRANSACTION_ADVICE_MESSAGE = "What should I keep in mind about this transaction?"

sessions = AdvisorSessions()


class HistoryItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    content: str
    is_user: bool = Field(alias="isUser")
    timestamp: datetime | None = None


class AdviceRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(max_length=4000)
    conversation_history: list[HistoryItem] = Field(default_factory=list, alias="conversationHistory")


class AdviceResponse(BaseModel):
    reply: str


class TransactionAdviceRequest(BaseModel):
    transaction_id: UUID


class TransactionAdviceResponse(BaseModel):
    advice: str


class ConversationItem(BaseModel):
    id: UUID
    message: str
    response: str
    created_at: datetime


def _today() -> date:
    """Wrapper for deterministic tests."""
    return date.today()


def _get_gemini_client() -> GeminiClient:
    return GeminiClient(
        api_key=settings.gemini_api_key,
        model=settings.gemini_model,
        timeout_seconds=settings.gemini_timeout_seconds,
    )


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def _financial_context(connection: Any, user_id: UUID) -> str:
    snapshot = await load_advice_snapshot(connection, user_id, _today())
    return build_financial_context(
        snapshot,
        redact_personal_details=settings.advice_redact_personal_details,
    )


@router.post("/advice", response_model=AdviceResponse)
async def ai_advice(
    payload: AdviceRequest,
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
):
    """
    Reply to one advisor message with the user's financial data in the prompt.

    Example request:
    {
      "message": "How should I budget my income?",
      "conversationHistory": [
        {"content": "Hello!", "isUser": false, "timestamp": "2026-10-19T09:00:00Z"}
      ]
    }

    Example response:
    {"reply": "Start with the 50/30/20 rule ..."}
    """
    message_text = payload.message.strip()
    if not message_text:
        return _error_response(422, "message must not be empty")

    if not settings.gemini_api_key:
        return _error_response(503, ADVICE_UNCONFIGURED)

    try:
        state, _ = submit_message(sessions.get(user_id), message_text)
    except ReplyPendingError as exc:
        return _error_response(409, str(exc))
    sessions.set(user_id, state)

    history = [
        {"content": item.content, "isUser": item.is_user}
        for item in payload.conversation_history
    ]

    reply: str | None = None
    try:
        system_prompt = build_system_prompt(await _financial_context(connection, user_id))
        reply = await _get_gemini_client().generate_reply(system_prompt, history, message_text)
    except GeminiError as exc:
        logger.warning(
            "advice_request_failed",
            user_id=str(user_id),
            status_code=getattr(exc, "status_code", None),
            error=str(exc),
        )
        return _error_response(502, ADVICE_FAILED)
    except RecordStoreError as exc:
        logger.error("advice_context_failed", user_id=str(user_id), error=str(exc))
        return _error_response(500, ADVICE_FAILED)
    finally:
        current = sessions.get(user_id)
        sessions.set(
            user_id,
            receive_reply(current, reply) if reply is not None else receive_failure(current),
        )

    try:
        await append_exchange(connection, user_id, message_text, reply)
    except RecordStoreError:
        # The reply is still returned; only the saved history misses this exchange.
        logger.warning("advice_exchange_not_saved", user_id=str(user_id))

    return AdviceResponse(reply=reply)


@router.get("/conversations", response_model=list[ConversationItem])
async def ai_conversations(
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> list[ConversationItem]:
    """Most recent saved advisor exchanges, newest first."""
    rows = await list_exchanges(connection, user_id)
    return [ConversationItem.model_validate(row) for row in rows]


@router.post("/transaction-advice", response_model=TransactionAdviceResponse)
async def ai_transaction_advice(
    payload: TransactionAdviceRequest,
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
):
    """Short advice about one saved transaction, shown after it is added."""
    if not settings.gemini_api_key:
        return _error_response(503, ADVICE_UNCONFIGURED)

    try:
        transaction = await get_transaction(connection, user_id, payload.transaction_id)
        system_prompt = build_transaction_prompt(
            format_transaction_line(transaction),
            await _financial_context(connection, user_id),
        )
    except LookupError as exc:
        return _error_response(404, str(exc))
    except RecordStoreError as exc:
        logger.error("advice_context_failed", user_id=str(user_id), error=str(exc))
        return _error_response(500, ADVICE_FAILED)

    try:
        advice = await _get_gemini_client().generate_reply(system_prompt, [], TRANSACTION_ADVICE_MESSAGE)
    except GeminiError as exc:
        logger.warning("transaction_advice_failed", user_id=str(user_id), error=str(exc))
        return _error_response(502, ADVICE_FAILED)

    return TransactionAdviceResponse(advice=advice)
