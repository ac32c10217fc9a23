"""Service layer for per-category budgets."""

from __future__ import annotations

from typing import Any, Literal
from uuid import UUID

from psycopg import AsyncConnection

from .record_store import delete_row, fetch_all, fetch_one, insert_row, normalize_amount, update_row

BudgetPeriod = Literal["weekly", "monthly", "yearly"]

BUDGET_COLUMNS = "id, user_id, category, amount, currency, period, created_at, updated_at"
BUDGET_UPDATABLE = ("category", "amount", "currency", "period")


async def list_budgets(
    connection: AsyncConnection,
    user_id: UUID,
    *,
    limit: int | None = None,
) -> list[dict[str, Any]]:
    sql = f"""
    SELECT {BUDGET_COLUMNS}
    FROM budgets
    WHERE user_id = %s
    ORDER BY created_at DESC
    """
    params: list[Any] = [user_id]
    if limit is not None:
        sql += " LIMIT %s"
        params.append(limit)

    return await fetch_all(connection, sql, tuple(params), operation="fetch budgets")


async def count_budgets(connection: AsyncConnection, user_id: UUID) -> int:
    row = await fetch_one(
        connection,
        "SELECT COUNT(*) AS total FROM budgets WHERE user_id = %s",
        (user_id,),
        operation="fetch budgets",
    )
    return int(row["total"]) if row else 0


async def create_budget(
    connection: AsyncConnection,
    user_id: UUID,
    data: dict[str, Any],
) -> dict[str, Any]:
    return await insert_row(
        connection,
        "budgets",
        {
            "user_id": user_id,
            "category": data["category"],
            "amount": normalize_amount(data["amount"]),
            "currency": data["currency"],
            "period": data.get("period", "monthly"),
        },
        returning=BUDGET_COLUMNS,
        operation="add budget",
    )


async def update_budget(
    connection: AsyncConnection,
    user_id: UUID,
    budget_id: UUID,
    patch: dict[str, Any],
) -> dict[str, Any]:
    values = {column: patch[column] for column in BUDGET_UPDATABLE if column in patch}
    if not values:
        raise ValueError("At least one field must be provided")
    if "amount" in values:
        values["amount"] = normalize_amount(values["amount"])

    row = await update_row(
        connection,
        "budgets",
        row_id=budget_id,
        user_id=user_id,
        values=values,
        returning=BUDGET_COLUMNS,
        operation="update budget",
    )
    if row is None:
        raise LookupError("Budget not found")
    return row


async def delete_budget(connection: AsyncConnection, user_id: UUID, budget_id: UUID) -> None:
    deleted = await delete_row(
        connection,
        "budgets",
        row_id=budget_id,
        user_id=user_id,
        operation="delete budget",
    )
    if not deleted:
        raise LookupError("Budget not found")
