from __future__ import annotations
"""
Dashboard API router.

Fetch and display:

- monthly overview (income, expenses, net, spending rate)
- spending analytics (top 4 expense categories, weekly spend, daily average)
- quick stats (goals, budgets, savings and investment totals)
"""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Literal
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, field_serializer

from .auth import get_current_user_id
from .currencies import format_currency
from .database import get_db_connection
from .services.dashboard_service import get_monthly_summary, get_quick_stats, get_spending_analytics
from .services.date_windows import month_label, parse_month

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

DisplayStyle = Literal["primary", "warning", "destructive"]


def _money(value: Decimal) -> str:
    """Serialize Decimal values to fixed 2-decimal amount strings."""
    return str(value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


class SpendingRate(BaseModel):
    """Expense/income bar; bar_pct is capped at 100 for display."""
    ratio_pct: float
    bar_pct: float
    status: DisplayStyle


class MonthlySummaryResponse(BaseModel):
    month: str
    currency: str
    total_income: Decimal
    total_expenses: Decimal
    net_income: Decimal
    net_income_display: str
    net_style: DisplayStyle
    transaction_count: int
    spending_rate: SpendingRate | None

    @field_serializer("total_income", "total_expenses", "net_income")
    def serialize_decimal(self, value: Decimal) -> str:
        return _money(value)


class CategorySpending(BaseModel):
    category: str
    amount: Decimal
    percentage: float
    transaction_count: int
    level: Literal["High", "Medium", "Low"]

    @field_serializer("amount")
    def serialize_amount(self, value: Decimal) -> str:
        return _money(value)


class SpendingAnalyticsResponse(BaseModel):
    currency: str
    window_start: date
    total_spend: Decimal
    weekly_spend: Decimal
    daily_average: Decimal
    top_categories: list[CategorySpending]

    @field_serializer("total_spend", "weekly_spend", "daily_average")
    def serialize_decimal(self, value: Decimal) -> str:
        return _money(value)


class QuickStatsResponse(BaseModel):
    currency: str
    active_goals: int
    budget_categories: int
    total_savings: Decimal
    total_investments: Decimal

    @field_serializer("total_savings", "total_investments")
    def serialize_decimal(self, value: Decimal) -> str:
        return _money(value)


@router.get("/summary", response_model=MonthlySummaryResponse)
async def monthly_summary(
    currency: str | None = Query(default=None, min_length=3, max_length=3),
    month: str | None = Query(default=None, description="YYYY-MM"),
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> MonthlySummaryResponse:
    """
    Monthly overview card; rows in other currencies are left out, not converted.

    Example response:
    {
      "month": "2026-10",
      "currency": "USD",
      "total_income": "3200.00",
      "total_expenses": "2100.00",
      "net_income": "1100.00",
      "net_income_display": "$1,100",
      "net_style": "primary",
      "transaction_count": 14,
      "spending_rate": {"ratio_pct": 65.63, "bar_pct": 65.63, "status": "warning"}
    }
    """
    year, month_number = parse_month(month)
    summary = await get_monthly_summary(
        connection,
        user_id,
        currency=currency.upper() if currency else None,
        year=year,
        month=month_number,
    )

    return MonthlySummaryResponse(
        month=month_label(summary["month_start"]),
        currency=summary["currency"],
        total_income=summary["total_income"],
        total_expenses=summary["total_expenses"],
        net_income=summary["net_income"],
        net_income_display=format_currency(summary["net_income"], summary["currency"]),
        net_style=summary["net_style"],
        transaction_count=summary["transaction_count"],
        spending_rate=summary["spending_rate"],
    )


@router.get("/spending-analytics", response_model=SpendingAnalyticsResponse)
async def spending_analytics(
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> SpendingAnalyticsResponse:
    payload = await get_spending_analytics(connection, user_id)
    return SpendingAnalyticsResponse.model_validate(payload)


@router.get("/quick-stats", response_model=QuickStatsResponse)
async def quick_stats(
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> QuickStatsResponse:
    payload = await get_quick_stats(connection, user_id)
    return QuickStatsResponse.model_validate(payload)
