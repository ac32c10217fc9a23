"""Financial snapshot that is inlined into advisor prompts.

The snapshot carries the user's name and raw figures into a third-party prompt.
`redact_personal_details` drops the name; figures are always sent.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

from psycopg import AsyncConnection

from ..services.aggregations import progress_pct
from ..services.budgets_service import list_budgets
from ..services.date_windows import trailing_window_start
from ..services.goals_service import list_goals
from ..services.profile_service import get_profile
from ..services.transactions_service import list_transactions

TRANSACTION_WINDOW_DAYS = 30
MAX_TRANSACTIONS = 20
MAX_GOALS = 5
MAX_BUDGETS = 10
EMPTY_SECTION = "None"


@dataclass
class AdviceSnapshot:
    profile: dict[str, Any] | None = None
    transactions: list[dict[str, Any]] = field(default_factory=list)
    goals: list[dict[str, Any]] = field(default_factory=list)
    budgets: list[dict[str, Any]] = field(default_factory=list)


async def load_advice_snapshot(
    connection: AsyncConnection,
    user_id: UUID,
    today: date,
) -> AdviceSnapshot:
    return AdviceSnapshot(
        profile=await get_profile(connection, user_id),
        transactions=await list_transactions(
            connection,
            user_id,
            date_from=trailing_window_start(today, TRANSACTION_WINDOW_DAYS),
            limit=MAX_TRANSACTIONS,
        ),
        goals=await list_goals(connection, user_id, limit=MAX_GOALS),
        budgets=await list_budgets(connection, user_id, limit=MAX_BUDGETS),
    )


def format_transaction_line(row: dict[str, Any]) -> str:
    return (
        f"{row['date']} {row['type']} {row['amount']} {row['currency']}, "
        f"{row['category']}: {row['description']}"
    )


def _profile_line(profile: dict[str, Any] | None, redact: bool) -> str:
    if profile is None:
        return f"Profile: {EMPTY_SECTION}"

    name = "name withheld" if redact else (profile.get("full_name") or "unnamed")
    return f"Profile: {name}, preferred currency {profile.get('currency')}"


def _totals_line(transactions: list[dict[str, Any]], currency: str | None) -> str | None:
    if currency is None:
        return None

    income = sum((row["amount"] for row in transactions if row["type"] == "income" and row["currency"] == currency), Decimal("0"))
    expenses = sum((row["amount"] for row in transactions if row["type"] == "expense" and row["currency"] == currency), Decimal("0"))
    return f"Totals across these transactions ({currency}): income {income}, expenses {expenses}, net {income - expenses}"


def _goal_line(goal: dict[str, Any]) -> str:
    progress = progress_pct(goal["current_amount"], goal["target_amount"])
    progress_text = "n/a" if progress is None else f"{progress:.1f}%"
    return (
        f"- {goal['title']} ({goal['category']}): {goal['current_amount']} of "
        f"{goal['target_amount']} {goal['currency']}, {progress_text} complete, "
        f"target date {goal['target_date']}"
    )


def _budget_line(budget: dict[str, Any]) -> str:
    return f"- {budget['category']}: {budget['amount']} {budget['currency']} per {budget['period']}"


def _section(title: str, lines: list[str]) -> str:
    if not lines:
        return f"{title}: {EMPTY_SECTION}"
    return f"{title}:\n" + "\n".join(lines)


def build_financial_context(snapshot: AdviceSnapshot, *, redact_personal_details: bool = False) -> str:
    """Render the snapshot as plain text; same snapshot in, same text out."""
    transactions = snapshot.transactions[:MAX_TRANSACTIONS]
    goals = snapshot.goals[:MAX_GOALS]
    budgets = snapshot.budgets[:MAX_BUDGETS]

    parts = [_profile_line(snapshot.profile, redact_personal_details)]

    transaction_lines = [f"- {format_transaction_line(row)}" for row in transactions]
    parts.append(_section(f"Recent transactions (last {TRANSACTION_WINDOW_DAYS} days, most recent first)", transaction_lines))

    if transactions:
        totals = _totals_line(transactions, (snapshot.profile or {}).get("currency"))
        if totals:
            parts.append(totals)

    parts.append(_section("Goals", [_goal_line(goal) for goal in goals]))
    parts.append(_section("Budgets", [_budget_line(budget) for budget in budgets]))

    return "\n".join(parts)
