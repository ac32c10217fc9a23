from __future__ import annotations

import asyncio
import re
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID, uuid4

import pytest

from wealthwise.services import goals_service


def _run(coro):
    return asyncio.run(coro)


class FakeGoalsCursor:
    def __init__(self, connection):
        self.connection = connection
        self._rows = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    async def execute(self, query, params=None):
        params = params or ()
        normalized = " ".join(query.split())
        self._rows = []

        if normalized.startswith("INSERT INTO goals"):
            columns = re.search(r"INSERT INTO goals \((.*?)\)", normalized).group(1).split(", ")
            now = self.connection._next_timestamp()
            row = {"id": uuid4(), **dict(zip(columns, params)), "created_at": now, "updated_at": now}
            self.connection.goals[row["id"]] = row
            self._rows = [dict(row)]
            return

        if normalized.startswith("UPDATE goals SET"):
            assignments = re.search(r"SET (.*?), updated_at = now\(\)", normalized).group(1)
            columns = [part.split(" = ")[0] for part in assignments.split(", ")]
            *values, goal_id, user_id = params
            row = self.connection.goals.get(goal_id)
            if row is None or row["user_id"] != user_id:
                return
            row.update(dict(zip(columns, values)))
            row["updated_at"] = self.connection._next_timestamp()
            self._rows = [dict(row)]
            return

        if normalized.startswith("DELETE FROM goals"):
            goal_id, user_id = params
            row = self.connection.goals.get(goal_id)
            if row and row["user_id"] == user_id:
                del self.connection.goals[goal_id]
                self._rows = [{"id": goal_id}]
            return

        if normalized.startswith("SELECT COUNT(*) AS total FROM goals"):
            user_id = params[0]
            self._rows = [{"total": sum(1 for row in self.connection.goals.values() if row["user_id"] == user_id)}]
            return

        if normalized.startswith("SELECT") and "FROM goals WHERE user_id = %s" in normalized:
            user_id = params[0]
            rows = [dict(row) for row in self.connection.goals.values() if row["user_id"] == user_id]
            rows.sort(key=lambda row: row["created_at"], reverse=True)
            if "LIMIT %s" in normalized:
                rows = rows[: params[1]]
            self._rows = rows
            return

        raise AssertionError(f"Unhandled query: {normalized}")

    async def fetchone(self):
        if not self._rows:
            return None
        return self._rows[0]

    async def fetchall(self):
        return list(self._rows)


class FakeGoalsConnection:
    def __init__(self):
        self.goals: dict[UUID, dict] = {}
        self._tick = 0

    def _next_timestamp(self):
        self._tick += 1
        return datetime(2026, 1, 1, 12, 0, self._tick)

    def cursor(self):
        return FakeGoalsCursor(self)


def _goal_data(**overrides) -> dict:
    data = {
        "title": "  Japan Trip ",
        "category": "Travel",
        "target_amount": Decimal("1200.00"),
        "current_amount": Decimal("200.00"),
        "target_date": date(2026, 7, 1),
        "currency": "USD",
    }
    data.update(overrides)
    return data


def test_create_goal_success(monkeypatch) -> None:
    connection = FakeGoalsConnection()
    user_id = uuid4()
    monkeypatch.setattr(goals_service, "_today", lambda: date(2026, 3, 1))

    row = _run(goals_service.create_goal(connection, user_id, _goal_data()))

    assert row["title"] == "Japan Trip"
    assert row["remaining_amount"] == Decimal("1000.00")
    assert row["progress_pct"] == 16.67
    assert row["days_left"] == 122
    assert row["months_left"] == 5
    assert row["recommended_monthly_save_amount"] == Decimal("200.00")


def test_create_goal_defaults_current_amount_to_zero(monkeypatch) -> None:
    connection = FakeGoalsConnection()
    monkeypatch.setattr(goals_service, "_today", lambda: date(2026, 3, 1))
    data = _goal_data()
    del data["current_amount"]

    row = _run(goals_service.create_goal(connection, uuid4(), data))

    assert row["current_amount"] == Decimal("0.00")
    assert row["progress_pct"] == 0.0


@pytest.mark.parametrize(
    "overrides",
    [
        {"target_amount": Decimal("0.00")},
        {"current_amount": Decimal("-1.00")},
        {"title": "   "},
    ],
)
def test_create_goal_rejects_invalid_values(monkeypatch, overrides) -> None:
    connection = FakeGoalsConnection()
    monkeypatch.setattr(goals_service, "_today", lambda: date(2026, 3, 1))

    with pytest.raises(ValueError):
        _run(goals_service.create_goal(connection, uuid4(), _goal_data(**overrides)))

    assert connection.goals == {}


def test_computed_fields_months_left_and_recommended() -> None:
    goal = {
        "id": uuid4(),
        "user_id": uuid4(),
        "title": "Emergency Fund",
        "category": "Safety",
        "target_amount": Decimal("1000.00"),
        "current_amount": Decimal("250.00"),
        "target_date": date(2026, 4, 15),  # 45 days => ceil(45/30)=2
        "currency": "USD",
    }

    out = goals_service.compute_goal_metrics(goal, date(2026, 3, 1))

    assert out["months_left"] == 2
    assert out["recommended_monthly_save_amount"] == Decimal("375.00")
    assert out["progress_pct"] == 25.0


def test_past_target_date_asks_for_full_remainder() -> None:
    goal = {
        "target_amount": Decimal("1000.00"),
        "current_amount": Decimal("400.00"),
        "target_date": date(2026, 2, 1),
    }

    out = goals_service.compute_goal_metrics(goal, date(2026, 3, 1))

    assert out["days_left"] == 0
    assert out["months_left"] == 0
    assert out["recommended_monthly_save_amount"] == Decimal("600.00")


def test_update_current_amount_past_target_is_not_clamped(monkeypatch) -> None:
    connection = FakeGoalsConnection()
    user_id = uuid4()
    monkeypatch.setattr(goals_service, "_today", lambda: date(2026, 3, 1))

    created = _run(goals_service.create_goal(connection, user_id, _goal_data(target_amount=Decimal("1000.00"))))

    updated = _run(
        goals_service.update_goal(
            connection,
            user_id,
            created["id"],
            {"current_amount": Decimal("1200.00")},
        )
    )

    assert updated["current_amount"] == Decimal("1200.00")
    assert updated["progress_pct"] == 120.0
    assert updated["remaining_amount"] == Decimal("0.00")
    assert updated["recommended_monthly_save_amount"] == Decimal("0.00")


def test_update_goal_is_user_scoped(monkeypatch) -> None:
    connection = FakeGoalsConnection()
    monkeypatch.setattr(goals_service, "_today", lambda: date(2026, 3, 1))
    created = _run(goals_service.create_goal(connection, uuid4(), _goal_data()))

    with pytest.raises(LookupError):
        _run(goals_service.update_goal(connection, uuid4(), created["id"], {"current_amount": Decimal("5.00")}))


def test_update_goal_requires_a_field() -> None:
    with pytest.raises(ValueError):
        _run(goals_service.update_goal(FakeGoalsConnection(), uuid4(), uuid4(), {}))


def test_list_and_count_goals_newest_first(monkeypatch) -> None:
    connection = FakeGoalsConnection()
    user_id = uuid4()
    monkeypatch.setattr(goals_service, "_today", lambda: date(2026, 3, 1))

    _run(goals_service.create_goal(connection, user_id, _goal_data(title="First")))
    _run(goals_service.create_goal(connection, user_id, _goal_data(title="Second")))
    _run(goals_service.create_goal(connection, uuid4(), _goal_data(title="Someone else")))

    rows = _run(goals_service.list_goals(connection, user_id))

    assert [row["title"] for row in rows] == ["Second", "First"]
    assert _run(goals_service.count_goals(connection, user_id)) == 2
    assert [row["title"] for row in _run(goals_service.list_goals(connection, user_id, limit=1))] == ["Second"]


def test_delete_goal_missing_raises(monkeypatch) -> None:
    connection = FakeGoalsConnection()
    user_id = uuid4()
    monkeypatch.setattr(goals_service, "_today", lambda: date(2026, 3, 1))
    created = _run(goals_service.create_goal(connection, user_id, _goal_data()))

    _run(goals_service.delete_goal(connection, user_id, created["id"]))

    assert connection.goals == {}
    with pytest.raises(LookupError):
        _run(goals_service.delete_goal(connection, user_id, created["id"]))
