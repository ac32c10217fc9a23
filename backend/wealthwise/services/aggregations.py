"""
Pure aggregation helpers behind the dashboard widgets.

Every function takes rows that were already fetched plus `today`, and never
touches the database. Rows in another currency than the selected one are left
out of the sums, never converted.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal, ROUND_FLOOR
from typing import Any, Iterable

from .date_windows import month_bounds, period_window, trailing_window_start
from .record_store import normalize_amount, quantize_amount

PCT_QUANT = Decimal("0.01")
ZERO = Decimal("0.00")


def _in_currency(rows: Iterable[dict[str, Any]], currency: str) -> list[dict[str, Any]]:
    return [row for row in rows if row.get("currency") == currency]


def _between(row: dict[str, Any], start: date, end: date | None = None) -> bool:
    row_date = row["date"]
    if row_date < start:
        return False
    return end is None or row_date <= end


def _sum_amounts(rows: Iterable[dict[str, Any]], field: str = "amount") -> Decimal:
    return quantize_amount(sum((normalize_amount(row[field]) for row in rows), ZERO))


def _floor_pct(part: Decimal, total: Decimal) -> Decimal:
    return ((part * Decimal("100")) / total).quantize(PCT_QUANT, rounding=ROUND_FLOOR)


def net_style(net_income: Decimal) -> str:
    """Display style for the net figure: non-negative is primary, negative is destructive."""
    return "primary" if net_income >= ZERO else "destructive"


def spending_rate(total_income: Decimal, total_expenses: Decimal) -> dict[str, Any] | None:
    """Expense-to-income bar; absent when there is no income to compare against."""
    if total_income <= ZERO:
        return None

    ratio = total_expenses / total_income
    ratio_pct = (ratio * Decimal("100")).quantize(PCT_QUANT)

    if ratio > Decimal("0.8"):
        status = "destructive"
    elif ratio > Decimal("0.6"):
        status = "warning"
    else:
        status = "primary"

    return {
        "ratio_pct": ratio_pct,
        "bar_pct": min(ratio_pct, Decimal("100.00")),
        "status": status,
    }


def summarize_month(
    rows: Iterable[dict[str, Any]],
    *,
    currency: str,
    today: date,
) -> dict[str, Any]:
    """Income/expense totals for the calendar month containing `today`."""
    month_start, month_end = month_bounds(today.year, today.month)
    in_month = [
        row for row in _in_currency(rows, currency)
        if _between(row, month_start, month_end)
    ]

    total_income = _sum_amounts(row for row in in_month if row["type"] == "income")
    total_expenses = _sum_amounts(row for row in in_month if row["type"] == "expense")
    net_income = quantize_amount(total_income - total_expenses)

    return {
        "month_start": month_start,
        "month_end": month_end,
        "currency": currency,
        "total_income": total_income,
        "total_expenses": total_expenses,
        "net_income": net_income,
        "transaction_count": len(in_month),
        "net_style": net_style(net_income),
        "spending_rate": spending_rate(total_income, total_expenses),
    }


def spending_level(percentage: Decimal) -> str:
    if percentage > Decimal("30"):
        return "High"
    if percentage > Decimal("15"):
        return "Medium"
    return "Low"


def category_breakdown(
    rows: Iterable[dict[str, Any]],
    *,
    currency: str,
    today: date,
    window_days: int = 30,
    limit: int = 4,
) -> dict[str, Any]:
    """
    Top expense categories over a trailing window.

    Percentages are floored to 0.01 so the returned items never add up to more
    than 100, even after truncation to `limit`.
    """
    window_start = trailing_window_start(today, window_days)
    expenses = [
        row for row in _in_currency(rows, currency)
        if row["type"] == "expense" and _between(row, window_start)
    ]

    totals: dict[str, dict[str, Any]] = {}
    for row in expenses:
        bucket = totals.setdefault(row["category"], {"amount": ZERO, "count": 0})
        bucket["amount"] += normalize_amount(row["amount"])
        bucket["count"] += 1

    total_spend = _sum_amounts(expenses)

    items = []
    for category, bucket in totals.items():
        amount = quantize_amount(bucket["amount"])
        percentage = _floor_pct(amount, total_spend) if total_spend > ZERO else ZERO
        items.append(
            {
                "category": category,
                "amount": amount,
                "percentage": percentage,
                "transaction_count": bucket["count"],
                "level": spending_level(percentage),
            }
        )

    items.sort(key=lambda item: (-item["amount"], item["category"].lower()))

    return {
        "window_start": window_start,
        "total_spend": total_spend,
        "top_categories": items[:limit],
    }


def spending_velocity(
    rows: Iterable[dict[str, Any]],
    *,
    currency: str,
    today: date,
    window_days: int = 7,
) -> dict[str, Decimal]:
    """Expense total over the trailing week and its per-day average."""
    window_start = trailing_window_start(today, window_days)
    weekly_spend = _sum_amounts(
        row for row in _in_currency(rows, currency)
        if row["type"] == "expense" and _between(row, window_start)
    )
    return {
        "weekly_spend": weekly_spend,
        "daily_average": quantize_amount(weekly_spend / Decimal(window_days)),
    }


def progress_pct(current_amount: Decimal, target_amount: Decimal) -> float | None:
    """current / target * 100, unclamped; None when the target is zero."""
    target = normalize_amount(target_amount)
    if target == ZERO:
        return None
    ratio = normalize_amount(current_amount) / target * Decimal("100")
    return float(ratio.quantize(PCT_QUANT))


def investment_performance(amount: Decimal, current_value: Decimal) -> dict[str, Any]:
    cost_basis = normalize_amount(amount)
    gain_loss = quantize_amount(normalize_amount(current_value) - cost_basis)
    gain_loss_pct = None
    if cost_basis != ZERO:
        gain_loss_pct = float(((gain_loss / cost_basis) * Decimal("100")).quantize(PCT_QUANT))
    return {"gain_loss": gain_loss, "gain_loss_pct": gain_loss_pct}


def budget_usage(
    budgets: Iterable[dict[str, Any]],
    rows: Iterable[dict[str, Any]],
    *,
    today: date,
) -> list[dict[str, Any]]:
    """Spending against each budget, matched on exact category text and currency."""
    expenses = [row for row in rows if row["type"] == "expense"]
    usage = []

    for budget in budgets:
        period_start, period_end = period_window(budget["period"], today)
        spent = _sum_amounts(
            row for row in expenses
            if row["category"] == budget["category"]
            and row["currency"] == budget["currency"]
            and _between(row, period_start, period_end)
        )
        limit_amount = normalize_amount(budget["amount"])
        used_pct = _floor_pct(spent, limit_amount) if limit_amount > ZERO else None
        usage.append(
            {
                "budget_id": budget["id"],
                "category": budget["category"],
                "period": budget["period"],
                "currency": budget["currency"],
                "period_start": period_start,
                "period_end": period_end,
                "budget_amount": limit_amount,
                "spent_amount": spent,
                "remaining_amount": quantize_amount(limit_amount - spent),
                "used_pct": used_pct,
            }
        )

    return usage


def quick_stats(
    *,
    goals_count: int,
    budgets_count: int,
    savings_rows: Iterable[dict[str, Any]],
    investment_rows: Iterable[dict[str, Any]],
    currency: str,
) -> dict[str, Any]:
    return {
        "currency": currency,
        "active_goals": goals_count,
        "budget_categories": budgets_count,
        "total_savings": _sum_amounts(_in_currency(savings_rows, currency), "balance"),
        "total_investments": _sum_amounts(_in_currency(investment_rows, currency), "current_value"),
    }
