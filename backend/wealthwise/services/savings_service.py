from __future__ import annotations

from typing import Any, Literal
from uuid import UUID

from psycopg import AsyncConnection

from .record_store import delete_row, fetch_all, insert_row, normalize_amount, update_row

AccountType = Literal["savings", "checking", "money_market", "cd"]

SAVINGS_COLUMNS = "id, user_id, account_name, account_type, balance, currency, created_at, updated_at"
SAVINGS_UPDATABLE = ("account_name", "account_type", "balance", "currency")


async def list_savings_accounts(
    connection: AsyncConnection,
    user_id: UUID,
    *,
    currency: str | None = None,
) -> list[dict[str, Any]]:
    sql = f"""
    SELECT {SAVINGS_COLUMNS}
    FROM savings
    WHERE user_id = %s
    """
    params: list[Any] = [user_id]
    if currency is not None:
        sql += " AND currency = %s"
        params.append(currency)
    sql += " ORDER BY created_at DESC"

    return await fetch_all(connection, sql, tuple(params), operation="fetch savings accounts")


async def create_savings_account(
    connection: AsyncConnection,
    user_id: UUID,
    data: dict[str, Any],
) -> dict[str, Any]:
    return await insert_row(
        connection,
        "savings",
        {
            "user_id": user_id,
            "account_name": data["account_name"],
            "account_type": data.get("account_type", "savings"),
            "balance": normalize_amount(data.get("balance")),
            "currency": data["currency"],
        },
        returning=SAVINGS_COLUMNS,
        operation="add savings account",
    )


async def update_savings_account(
    connection: AsyncConnection,
    user_id: UUID,
    account_id: UUID,
    patch: dict[str, Any],
) -> dict[str, Any]:
    values = {column: patch[column] for column in SAVINGS_UPDATABLE if column in patch}
    if not values:
        raise ValueError("At least one field must be provided")
    if "balance" in values:
        values["balance"] = normalize_amount(values["balance"])

    row = await update_row(
        connection,
        "savings",
        row_id=account_id,
        user_id=user_id,
        values=values,
        returning=SAVINGS_COLUMNS,
        operation="update balance" if set(values) == {"balance"} else "update savings account",
    )
    if row is None:
        raise LookupError("Savings account not found")
    return row


async def delete_savings_account(connection: AsyncConnection, user_id: UUID, account_id: UUID) -> None:
    deleted = await delete_row(
        connection,
        "savings",
        row_id=account_id,
        user_id=user_id,
        operation="delete savings account",
    )
    if not deleted:
        raise LookupError("Savings account not found")
