"""
Service layer for the dashboard widgets.

Each widget issues its own bounded, filtered fetch and folds the rows with the
pure helpers in `aggregations`.
"""

from __future__ import annotations

from datetime import date
from typing import Any
from uuid import UUID

from psycopg import AsyncConnection

from .aggregations import (
    budget_usage,
    category_breakdown,
    quick_stats,
    spending_velocity,
    summarize_month,
)
from .budgets_service import count_budgets, list_budgets
from .date_windows import month_bounds, trailing_window_start
from .goals_service import count_goals
from .investments_service import list_investments
from .profile_service import get_user_currency
from .savings_service import list_savings_accounts
from .transactions_service import list_transactions

CATEGORY_WINDOW_DAYS = 30
VELOCITY_WINDOW_DAYS = 7
TOP_CATEGORY_LIMIT = 4


def _today() -> date:
    """Wrapper for deterministic tests."""
    return date.today()


async def get_monthly_summary(
    connection: AsyncConnection,
    user_id: UUID,
    *,
    currency: str | None = None,
    year: int | None = None,
    month: int | None = None,
) -> dict[str, Any]:
    today = _today()
    reference = date(year, month, 1) if year and month else today
    selected_currency = currency or await get_user_currency(connection, user_id)

    month_start, month_end = month_bounds(reference.year, reference.month)
    rows = await list_transactions(
        connection,
        user_id,
        currency=selected_currency,
        date_from=month_start,
        date_to=month_end,
        limit=None,
    )
    return summarize_month(rows, currency=selected_currency, today=reference)


async def get_spending_analytics(connection: AsyncConnection, user_id: UUID) -> dict[str, Any]:
    today = _today()
    currency = await get_user_currency(connection, user_id)

    rows = await list_transactions(
        connection,
        user_id,
        currency=currency,
        type_filter="expense",
        date_from=trailing_window_start(today, CATEGORY_WINDOW_DAYS),
        limit=None,
    )

    breakdown = category_breakdown(
        rows,
        currency=currency,
        today=today,
        window_days=CATEGORY_WINDOW_DAYS,
        limit=TOP_CATEGORY_LIMIT,
    )
    velocity = spending_velocity(rows, currency=currency, today=today, window_days=VELOCITY_WINDOW_DAYS)

    return {
        "currency": currency,
        **breakdown,
        **velocity,
    }


async def get_quick_stats(connection: AsyncConnection, user_id: UUID) -> dict[str, Any]:
    currency = await get_user_currency(connection, user_id)

    return quick_stats(
        goals_count=await count_goals(connection, user_id),
        budgets_count=await count_budgets(connection, user_id),
        savings_rows=await list_savings_accounts(connection, user_id, currency=currency),
        investment_rows=await list_investments(connection, user_id, currency=currency),
        currency=currency,
    )


async def get_budget_usage(connection: AsyncConnection, user_id: UUID) -> list[dict[str, Any]]:
    today = _today()
    budgets = await list_budgets(connection, user_id)
    if not budgets:
        return []

    # Earliest day any period window can reach: Jan 1 for yearly, a week back for weekly.
    earliest = min(date(today.year, 1, 1), trailing_window_start(today, 7))
    rows = await list_transactions(
        connection,
        user_id,
        type_filter="expense",
        date_from=earliest,
        limit=None,
    )
    return budget_usage(budgets, rows, today=today)
