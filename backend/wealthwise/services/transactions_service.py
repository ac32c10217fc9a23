"""Service layer for the transactions table (create, list, delete; no edit-in-place)."""

from __future__ import annotations

from datetime import date
from typing import Any, Literal
from uuid import UUID

from psycopg import AsyncConnection

from .record_store import delete_row, fetch_all, fetch_one, insert_row, normalize_amount

TransactionType = Literal["income", "expense"]

TRANSACTION_COLUMNS = "id, user_id, type, amount, category, description, date, currency, created_at, updated_at"
MAX_LIST_LIMIT = 100


def _build_list_filters(
    *,
    user_id: UUID,
    currency: str | None,
    type_filter: TransactionType | None,
    date_from: date | None,
    date_to: date | None,
) -> tuple[str, list[object]]:
    filters = ["user_id = %s"]
    params: list[object] = [user_id]

    if currency is not None:
        filters.append("currency = %s")
        params.append(currency)

    if type_filter is not None:
        filters.append("type = %s")
        params.append(type_filter)

    if date_from is not None:
        filters.append("date >= %s")
        params.append(date_from)

    if date_to is not None:
        filters.append("date <= %s")
        params.append(date_to)

    return " AND ".join(filters), params


async def list_transactions(
    connection: AsyncConnection,
    user_id: UUID,
    *,
    currency: str | None = None,
    type_filter: TransactionType | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    limit: int | None = 20,
) -> list[dict[str, Any]]:
    """List the user's transactions, most recent first. `limit=None` returns every match."""
    if date_from and date_to and date_from > date_to:
        raise ValueError("date_from must be on or before date_to")

    where_clause, params = _build_list_filters(
        user_id=user_id,
        currency=currency,
        type_filter=type_filter,
        date_from=date_from,
        date_to=date_to,
    )

    sql = f"""
    SELECT {TRANSACTION_COLUMNS}
    FROM transactions
    WHERE {where_clause}
    ORDER BY date DESC, created_at DESC
    """
    if limit is not None:
        sql += " LIMIT %s"
        params.append(min(max(limit, 1), MAX_LIST_LIMIT))

    return await fetch_all(connection, sql, tuple(params), operation="fetch transactions")


async def get_transaction(
    connection: AsyncConnection,
    user_id: UUID,
    transaction_id: UUID,
) -> dict[str, Any]:
    row = await fetch_one(
        connection,
        f"""
        SELECT {TRANSACTION_COLUMNS}
        FROM transactions
        WHERE id = %s
          AND user_id = %s
        """,
        (transaction_id, user_id),
        operation="fetch transaction",
    )
    if row is None:
        raise LookupError("Transaction not found")
    return row


async def create_transaction(
    connection: AsyncConnection,
    user_id: UUID,
    data: dict[str, Any],
) -> dict[str, Any]:
    return await insert_row(
        connection,
        "transactions",
        {
            "user_id": user_id,
            "type": data["type"],
            "amount": normalize_amount(data["amount"]),
            "category": data["category"],
            "description": data["description"],
            "date": data["date"],
            "currency": data["currency"],
        },
        returning=TRANSACTION_COLUMNS,
        operation="add transaction",
    )


async def delete_transaction(
    connection: AsyncConnection,
    user_id: UUID,
    transaction_id: UUID,
) -> None:
    deleted = await delete_row(
        connection,
        "transactions",
        row_id=transaction_id,
        user_id=user_id,
        operation="delete transaction",
    )
    if not deleted:
        raise LookupError("Transaction not found")
