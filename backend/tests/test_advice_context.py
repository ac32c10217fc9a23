from __future__ import annotations

import asyncio
from datetime import date
from decimal import Decimal
from uuid import uuid4

import wealthwise.ai.context as advice_context
from wealthwise.ai.context import AdviceSnapshot, build_financial_context
from wealthwise.ai.prompt import SYSTEM_PROMPT_BASE, build_system_prompt

_run = asyncio.run


def _profile() -> dict:
    return {"full_name": "Ada Obi", "currency": "USD"}


def _transactions() -> list[dict]:
    return [
        {
            "date": date(2026, 10, 18),
            "type": "expense",
            "amount": Decimal("45.50"),
            "currency": "USD",
            "category": "Food",
            "description": "Groceries",
        },
        {
            "date": date(2026, 10, 1),
            "type": "income",
            "amount": Decimal("3000.00"),
            "currency": "USD",
            "category": "Salary",
            "description": "October pay",
        },
    ]


def _goals() -> list[dict]:
    return [
        {
            "title": "Emergency fund",
            "category": "Safety",
            "current_amount": Decimal("7500.00"),
            "target_amount": Decimal("10000.00"),
            "currency": "USD",
            "target_date": date(2027, 6, 1),
        }
    ]


def _budgets() -> list[dict]:
    return [{"category": "Food", "amount": Decimal("400.00"), "currency": "USD", "period": "monthly"}]


def test_empty_snapshot_renders_none_sections() -> None:
    text = build_financial_context(AdviceSnapshot())

    assert text.splitlines() == [
        "Profile: None",
        "Recent transactions (last 30 days, most recent first): None",
        "Goals: None",
        "Budgets: None",
    ]


def test_full_snapshot_lists_every_section() -> None:
    snapshot = AdviceSnapshot(
        profile=_profile(),
        transactions=_transactions(),
        goals=_goals(),
        budgets=_budgets(),
    )

    text = build_financial_context(snapshot)

    assert "Profile: Ada Obi, preferred currency USD" in text
    assert "- 2026-10-18 expense 45.50 USD, Food: Groceries" in text
    assert text.index("Groceries") < text.index("October pay")
    assert "income 3000.00, expenses 45.50, net 2954.50" in text
    assert "- Emergency fund (Safety): 7500.00 of 10000.00 USD, 75.0% complete, target date 2027-06-01" in text
    assert "- Food: 400.00 USD per monthly" in text


def test_context_is_deterministic() -> None:
    snapshot = AdviceSnapshot(profile=_profile(), transactions=_transactions(), goals=_goals(), budgets=_budgets())

    assert build_financial_context(snapshot) == build_financial_context(snapshot)


def test_redaction_withholds_name() -> None:
    snapshot = AdviceSnapshot(profile=_profile())

    text = build_financial_context(snapshot, redact_personal_details=True)

    assert "Ada Obi" not in text
    assert text.startswith("Profile: name withheld, preferred currency USD")


def test_zero_target_goal_renders_without_progress() -> None:
    goal = {**_goals()[0], "target_amount": Decimal("0.00")}

    text = build_financial_context(AdviceSnapshot(goals=[goal]))

    assert "n/a complete" in text


def test_section_caps_are_applied() -> None:
    budgets = [
        {"category": f"Cat {index}", "amount": Decimal("10.00"), "currency": "USD", "period": "monthly"}
        for index in range(15)
    ]

    text = build_financial_context(AdviceSnapshot(budgets=budgets))

    assert "Cat 9:" in text
    assert "Cat 10:" not in text


def test_system_prompt_includes_context() -> None:
    assert build_system_prompt("") == SYSTEM_PROMPT_BASE

    prompt = build_system_prompt("Profile: None")
    assert prompt.startswith(SYSTEM_PROMPT_BASE)
    assert prompt.endswith("The user's current financial data:\nProfile: None")


def test_load_advice_snapshot_uses_bounded_fetches(monkeypatch) -> None:
    user_id = uuid4()
    calls = {}

    async def fake_profile(connection, uid):
        return _profile()

    async def fake_transactions(connection, uid, **kwargs):
        calls["transactions"] = kwargs
        return _transactions()

    async def fake_goals(connection, uid, **kwargs):
        calls["goals"] = kwargs
        return _goals()

    async def fake_budgets(connection, uid, **kwargs):
        calls["budgets"] = kwargs
        return _budgets()

    monkeypatch.setattr(advice_context, "get_profile", fake_profile)
    monkeypatch.setattr(advice_context, "list_transactions", fake_transactions)
    monkeypatch.setattr(advice_context, "list_goals", fake_goals)
    monkeypatch.setattr(advice_context, "list_budgets", fake_budgets)

    snapshot = _run(advice_context.load_advice_snapshot(object(), user_id, date(2026, 10, 19)))

    assert snapshot.profile == _profile()
    assert calls["transactions"] == {"date_from": date(2026, 9, 19), "limit": 20}
    assert calls["goals"] == {"limit": 5}
    assert calls["budgets"] == {"limit": 10}
