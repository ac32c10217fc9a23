from __future__ import annotations

from typing import Any, Literal
from uuid import UUID

from psycopg import AsyncConnection

from .aggregations import investment_performance
from .record_store import delete_row, fetch_all, insert_row, normalize_amount, update_row

InvestmentType = Literal["stocks", "bonds", "crypto", "real_estate", "mutual_funds", "etf"]

INVESTMENT_COLUMNS = (
    "id, user_id, name, type, amount, current_value, purchase_date, currency, created_at, updated_at"
)
INVESTMENT_UPDATABLE = ("name", "type", "amount", "current_value", "purchase_date", "currency")


def _with_performance(row: dict[str, Any]) -> dict[str, Any]:
    return {
        **row,
        "amount": normalize_amount(row["amount"]),
        "current_value": normalize_amount(row["current_value"]),
        **investment_performance(row["amount"], row["current_value"]),
    }


async def list_investments(
    connection: AsyncConnection,
    user_id: UUID,
    *,
    currency: str | None = None,
) -> list[dict[str, Any]]:
    sql = f"""
    SELECT {INVESTMENT_COLUMNS}
    FROM investments
    WHERE user_id = %s
    """
    params: list[Any] = [user_id]
    if currency is not None:
        sql += " AND currency = %s"
        params.append(currency)
    sql += " ORDER BY created_at DESC"

    rows = await fetch_all(connection, sql, tuple(params), operation="fetch investments")
    return [_with_performance(row) for row in rows]


async def create_investment(
    connection: AsyncConnection,
    user_id: UUID,
    data: dict[str, Any],
) -> dict[str, Any]:
    row = await insert_row(
        connection,
        "investments",
        {
            "user_id": user_id,
            "name": data["name"],
            "type": data["type"],
            "amount": normalize_amount(data["amount"]),
            "current_value": normalize_amount(data["current_value"]),
            "purchase_date": data["purchase_date"],
            "currency": data["currency"],
        },
        returning=INVESTMENT_COLUMNS,
        operation="add investment",
    )
    return _with_performance(row)


async def update_investment(
    connection: AsyncConnection,
    user_id: UUID,
    investment_id: UUID,
    patch: dict[str, Any],
) -> dict[str, Any]:
    values = {column: patch[column] for column in INVESTMENT_UPDATABLE if column in patch}
    if not values:
        raise ValueError("At least one field must be provided")
    for column in ("amount", "current_value"):
        if column in values:
            values[column] = normalize_amount(values[column])

    row = await update_row(
        connection,
        "investments",
        row_id=investment_id,
        user_id=user_id,
        values=values,
        returning=INVESTMENT_COLUMNS,
        operation="update investment",
    )
    if row is None:
        raise LookupError("Investment not found")
    return _with_performance(row)


async def delete_investment(connection: AsyncConnection, user_id: UUID, investment_id: UUID) -> None:
    deleted = await delete_row(
        connection,
        "investments",
        row_id=investment_id,
        user_id=user_id,
        operation="delete investment",
    )
    if not deleted:
        raise LookupError("Investment not found")
