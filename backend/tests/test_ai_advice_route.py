from __future__ import annotations

from datetime import datetime
from uuid import uuid4

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

import wealthwise.ai.router as ai_router
from wealthwise.ai.conversation import AdvisorSessions, submit_message
from wealthwise.ai.gemini_client import GeminiRequestError
from wealthwise.errors import RecordStoreError, register_exception_handlers


class StubGeminiClient:
    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    async def generate_reply(self, system_prompt, history, message):
        self.calls.append((system_prompt, history, message))
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def advice_client(monkeypatch):
    async def override_db_connection():
        yield object()

    async def fake_context(connection, user_id):
        return "Profile: None"

    saved = []

    async def fake_append(connection, user_id, message, response):
        saved.append((user_id, message, response))
        return {}

    user_id = uuid4()
    monkeypatch.setattr(ai_router.settings, "gemini_api_key", "test-key")
    monkeypatch.setattr(ai_router, "sessions", AdvisorSessions())
    monkeypatch.setattr(ai_router, "_financial_context", fake_context)
    monkeypatch.setattr(ai_router, "append_exchange", fake_append)

    test_app = FastAPI()
    register_exception_handlers(test_app)
    test_app.include_router(ai_router.router)
    test_app.dependency_overrides[ai_router.get_current_user_id] = lambda: user_id
    test_app.dependency_overrides[ai_router.get_db_connection] = override_db_connection

    with TestClient(test_app) as client:
        yield client, user_id, saved

    test_app.dependency_overrides.clear()


def test_advice_success_returns_reply_and_saves_exchange(advice_client, monkeypatch) -> None:
    client, user_id, saved = advice_client
    stub = StubGeminiClient(reply="Start with the 50/30/20 rule.")
    monkeypatch.setattr(ai_router, "_get_gemini_client", lambda: stub)

    response = client.post(
        "/ai/advice",
        json={
            "message": "How should I budget my income?",
            "conversationHistory": [
                {"content": "Hello!", "isUser": False, "timestamp": "2026-10-19T09:00:00Z"}
            ],
        },
    )

    assert response.status_code == 200
    assert response.json() == {"reply": "Start with the 50/30/20 rule."}

    system_prompt, history, message = stub.calls[0]
    assert system_prompt.endswith("Profile: None")
    assert history == [{"content": "Hello!", "isUser": False}]
    assert message == "How should I budget my income?"
    assert saved == [(user_id, "How should I budget my income?", "Start with the 50/30/20 rule.")]

    assert ai_router.sessions.get(user_id).awaiting_reply is False
    assert ai_router.sessions.states == {}


def test_blank_message_is_rejected_without_calling_gemini(advice_client, monkeypatch) -> None:
    client, _user_id, saved = advice_client
    stub = StubGeminiClient(reply="unused")
    monkeypatch.setattr(ai_router, "_get_gemini_client", lambda: stub)

    response = client.post("/ai/advice", json={"message": "   "})

    assert response.status_code == 422
    assert response.json() == {"error": "message must not be empty"}
    assert stub.calls == []
    assert saved == []


def test_gemini_failure_returns_error_body(advice_client, monkeypatch) -> None:
    client, user_id, saved = advice_client
    stub = StubGeminiClient(error=GeminiRequestError(500, "upstream exploded"))
    monkeypatch.setattr(ai_router, "_get_gemini_client", lambda: stub)

    response = client.post("/ai/advice", json={"message": "hello"})

    assert response.status_code == 502
    assert response.json() == {"error": "Failed to get AI response. Please try again."}
    assert saved == []

    assert ai_router.sessions.get(user_id).awaiting_reply is False
    assert ai_router.sessions.states == {}


def test_pending_reply_rejects_second_submission(advice_client, monkeypatch) -> None:
    client, user_id, _saved = advice_client
    stub = StubGeminiClient(reply="unused")
    monkeypatch.setattr(ai_router, "_get_gemini_client", lambda: stub)

    pending, _ = submit_message(ai_router.sessions.get(user_id), "first question")
    ai_router.sessions.set(user_id, pending)

    response = client.post("/ai/advice", json={"message": "second question"})

    assert response.status_code == 409
    assert response.json() == {"error": "A reply is already being generated"}
    assert stub.calls == []


def test_missing_api_key_returns_503(advice_client, monkeypatch) -> None:
    client, _user_id, _saved = advice_client
    monkeypatch.setattr(ai_router.settings, "gemini_api_key", "")

    response = client.post("/ai/advice", json={"message": "hello"})

    assert response.status_code == 503
    assert "GEMINI_API_KEY" in response.json()["error"]


def test_history_save_failure_still_returns_reply(advice_client, monkeypatch) -> None:
    client, _user_id, _saved = advice_client
    monkeypatch.setattr(ai_router, "_get_gemini_client", lambda: StubGeminiClient(reply="Keep going."))

    async def failing_append(connection, user_id, message, response):
        raise RecordStoreError("save conversation")

    monkeypatch.setattr(ai_router, "append_exchange", failing_append)

    response = client.post("/ai/advice", json={"message": "hello"})

    assert response.status_code == 200
    assert response.json() == {"reply": "Keep going."}


def test_conversations_lists_saved_exchanges(advice_client, monkeypatch) -> None:
    client, user_id, _saved = advice_client
    row = {
        "id": uuid4(),
        "user_id": user_id,
        "message": "hello",
        "response": "hi there",
        "created_at": datetime(2026, 10, 19, 9, 0, 0),
    }

    async def fake_list(connection, uid):
        assert uid == user_id
        return [row]

    monkeypatch.setattr(ai_router, "list_exchanges", fake_list)

    response = client.get("/ai/conversations")

    assert response.status_code == 200
    assert response.json()[0]["response"] == "hi there"


def test_transaction_advice_not_found(advice_client, monkeypatch) -> None:
    client, _user_id, _saved = advice_client

    async def fake_get_transaction(connection, user_id, transaction_id):
        raise LookupError("Transaction not found")

    monkeypatch.setattr(ai_router, "get_transaction", fake_get_transaction)

    response = client.post("/ai/transaction-advice", json={"transaction_id": str(uuid4())})

    assert response.status_code == 404
    assert response.json() == {"error": "Transaction not found"}


def test_transaction_advice_success(advice_client, monkeypatch) -> None:
    client, _user_id, _saved = advice_client
    stub = StubGeminiClient(reply="Nice, that's within your food budget.")
    monkeypatch.setattr(ai_router, "_get_gemini_client", lambda: stub)

    async def fake_get_transaction(connection, user_id, transaction_id):
        return {
            "date": "2026-10-19",
            "type": "expense",
            "amount": "12.00",
            "currency": "USD",
            "category": "Food",
            "description": "Lunch",
        }

    monkeypatch.setattr(ai_router, "get_transaction", fake_get_transaction)

    response = client.post("/ai/transaction-advice", json={"transaction_id": str(uuid4())})

    assert response.status_code == 200
    assert response.json() == {"advice": "Nice, that's within your food budget."}
    assert "Transaction: 2026-10-19 expense 12.00 USD, Food: Lunch" in stub.calls[0][0]


def test_context_store_failure_returns_error_body(advice_client, monkeypatch) -> None:
    client, user_id, saved = advice_client
    stub = StubGeminiClient(reply="unused")
    monkeypatch.setattr(ai_router, "_get_gemini_client", lambda: stub)

    async def failing_context(connection, uid):
        raise RecordStoreError("fetch goals")

    monkeypatch.setattr(ai_router, "_financial_context", failing_context)

    response = client.post("/ai/advice", json={"message": "hello"})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to get AI response. Please try again."}
    assert stub.calls == []
    assert saved == []
    assert ai_router.sessions.states == {}


def test_transaction_advice_store_failure_returns_error_body(advice_client, monkeypatch) -> None:
    client, _user_id, _saved = advice_client
    stub = StubGeminiClient(reply="unused")
    monkeypatch.setattr(ai_router, "_get_gemini_client", lambda: stub)

    async def failing_get_transaction(connection, user_id, transaction_id):
        raise RecordStoreError("fetch transaction")

    monkeypatch.setattr(ai_router, "get_transaction", failing_get_transaction)

    response = client.post("/ai/transaction-advice", json={"transaction_id": str(uuid4())})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to get AI response. Please try again."}
    assert stub.calls == []


def test_repeated_advice_calls_hold_no_session_state(advice_client, monkeypatch) -> None:
    client, user_id, saved = advice_client
    monkeypatch.setattr(ai_router, "_get_gemini_client", lambda: StubGeminiClient(reply="Noted."))

    for index in range(50):
        response = client.post("/ai/advice", json={"message": f"question {index}"})
        assert response.status_code == 200

    assert len(saved) == 50
    assert ai_router.sessions.states == {}
    assert len(ai_router.sessions.get(user_id).messages) == 1
