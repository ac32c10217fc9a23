"""Persisted advisor exchanges (one row per message/response pair)."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from psycopg import AsyncConnection

from ..services.record_store import fetch_all, insert_row

CONVERSATION_COLUMNS = "id, user_id, message, response, created_at"


async def append_exchange(
    connection: AsyncConnection,
    user_id: UUID,
    message: str,
    response: str,
) -> dict[str, Any]:
    return await insert_row(
        connection,
        "ai_conversations",
        {"user_id": user_id, "message": message, "response": response},
        returning=CONVERSATION_COLUMNS,
        operation="save conversation",
    )


async def list_exchanges(
    connection: AsyncConnection,
    user_id: UUID,
    limit: int = 20,
) -> list[dict[str, Any]]:
    return await fetch_all(
        connection,
        f"""
        SELECT {CONVERSATION_COLUMNS}
        FROM ai_conversations
        WHERE user_id = %s
        ORDER BY created_at DESC
        LIMIT %s
        """,
        (user_id, limit),
        operation="fetch conversations",
    )
