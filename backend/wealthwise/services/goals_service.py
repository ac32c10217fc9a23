"""Service layer for savings goals and their computed progress fields."""

from __future__ import annotations

import math
from datetime import date
from decimal import Decimal, ROUND_CEILING
from typing import Any
from uuid import UUID

from psycopg import AsyncConnection

from .aggregations import progress_pct
from .record_store import (
    MONEY_QUANT,
    delete_row,
    fetch_all,
    fetch_one,
    insert_row,
    normalize_amount,
    quantize_amount,
    update_row,
)

GOAL_COLUMNS = (
    "id, user_id, title, category, target_amount, current_amount, target_date, currency, created_at, updated_at"
)
GOAL_UPDATABLE = ("title", "category", "target_amount", "current_amount", "target_date", "currency")


def _today() -> date:
    """Wrapper for deterministic tests."""
    return date.today()


def _ceil_to_cent(value: Decimal) -> Decimal:
    return value.quantize(MONEY_QUANT, rounding=ROUND_CEILING)


def compute_goal_metrics(goal_row: dict[str, Any], today: date) -> dict[str, Any]:
    """
    Add progress and monthly plan fields to one goal row.

    current_amount is allowed to exceed target_amount, so progress_pct is not
    clamped at 100. progress_pct is None for a zero target.
    """
    target_amount = normalize_amount(goal_row["target_amount"])
    current_amount = normalize_amount(goal_row["current_amount"])
    target_date: date = goal_row["target_date"]

    remaining_amount = quantize_amount(max(target_amount - current_amount, Decimal("0.00")))

    days_left = max((target_date - today).days, 0)
    months_left = int(math.ceil(days_left / 30)) if days_left > 0 else 0

    if remaining_amount == Decimal("0.00"):
        recommended_monthly_save_amount = Decimal("0.00")
    elif months_left <= 0:
        recommended_monthly_save_amount = remaining_amount
    else:
        recommended_monthly_save_amount = _ceil_to_cent(remaining_amount / Decimal(months_left))

    return {
        **goal_row,
        "target_amount": target_amount,
        "current_amount": current_amount,
        "remaining_amount": remaining_amount,
        "progress_pct": progress_pct(current_amount, target_amount),
        "days_left": days_left,
        "months_left": months_left,
        "recommended_monthly_save_amount": recommended_monthly_save_amount,
    }


def _validate_amounts(values: dict[str, Any]) -> None:
    if "target_amount" in values and normalize_amount(values["target_amount"]) <= Decimal("0.00"):
        raise ValueError("target_amount must be greater than 0")
    if "current_amount" in values and normalize_amount(values["current_amount"]) < Decimal("0.00"):
        raise ValueError("current_amount must be >= 0")


async def list_goals(
    connection: AsyncConnection,
    user_id: UUID,
    *,
    limit: int | None = None,
) -> list[dict[str, Any]]:
    sql = f"""
    SELECT {GOAL_COLUMNS}
    FROM goals
    WHERE user_id = %s
    ORDER BY created_at DESC
    """
    params: list[Any] = [user_id]
    if limit is not None:
        sql += " LIMIT %s"
        params.append(limit)

    rows = await fetch_all(connection, sql, tuple(params), operation="fetch goals")
    today = _today()
    return [compute_goal_metrics(row, today) for row in rows]


async def count_goals(connection: AsyncConnection, user_id: UUID) -> int:
    row = await fetch_one(
        connection,
        "SELECT COUNT(*) AS total FROM goals WHERE user_id = %s",
        (user_id,),
        operation="fetch goals",
    )
    return int(row["total"]) if row else 0


async def create_goal(
    connection: AsyncConnection,
    user_id: UUID,
    data: dict[str, Any],
) -> dict[str, Any]:
    """Create one goal; new goals start at current_amount 0 unless given."""
    values = {
        "user_id": user_id,
        "title": str(data["title"]).strip(),
        "category": data["category"],
        "target_amount": normalize_amount(data["target_amount"]),
        "current_amount": normalize_amount(data.get("current_amount")),
        "target_date": data["target_date"],
        "currency": data["currency"],
    }
    if not values["title"]:
        raise ValueError("title is required")
    _validate_amounts(values)

    row = await insert_row(
        connection,
        "goals",
        values,
        returning=GOAL_COLUMNS,
        operation="add goal",
    )
    return compute_goal_metrics(row, _today())


async def update_goal(
    connection: AsyncConnection,
    user_id: UUID,
    goal_id: UUID,
    patch: dict[str, Any],
) -> dict[str, Any]:
    """Partial update; the usual call is a new current_amount from the progress input."""
    values = {column: patch[column] for column in GOAL_UPDATABLE if column in patch}
    if not values:
        raise ValueError("At least one field must be provided")
    _validate_amounts(values)
    for column in ("target_amount", "current_amount"):
        if column in values:
            values[column] = normalize_amount(values[column])

    row = await update_row(
        connection,
        "goals",
        row_id=goal_id,
        user_id=user_id,
        values=values,
        returning=GOAL_COLUMNS,
        operation="update goal",
    )
    if row is None:
        raise LookupError("Goal not found")
    return compute_goal_metrics(row, _today())


async def delete_goal(connection: AsyncConnection, user_id: UUID, goal_id: UUID) -> None:
    """Hard-delete one goal scoped to the authenticated user."""
    deleted = await delete_row(
        connection,
        "goals",
        row_id=goal_id,
        user_id=user_id,
        operation="delete goal",
    )
    if not deleted:
        raise LookupError("Goal not found")
