from __future__ import annotations

import random
from typing import Any

from psycopg import AsyncConnection

from .record_store import fetch_all

QUOTE_COLUMNS = "id, quote, author, category, created_at, updated_at"


async def list_quotes(
    connection: AsyncConnection,
    *,
    category: str | None = None,
) -> list[dict[str, Any]]:
    """Quotes are shared by all users, so no user_id filter applies here."""
    sql = f"SELECT {QUOTE_COLUMNS} FROM financial_quotes"
    params: list[Any] = []
    if category is not None:
        sql += " WHERE category = %s"
        params.append(category)
    sql += " ORDER BY created_at DESC"

    return await fetch_all(connection, sql, tuple(params), operation="fetch quotes")


def pick_quote(quotes: list[dict[str, Any]], rng: random.Random | None = None) -> dict[str, Any] | None:
    if not quotes:
        return None
    return (rng or random).choice(quotes)
