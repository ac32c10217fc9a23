"""Advisor chat state as an explicit value with pure transitions.

idle --submit_message--> awaiting_reply --receive_reply/receive_failure--> idle

Messages are only ever appended. A submission while a reply is pending is
rejected, never queued.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from uuid import UUID

GREETING = (
    "Hello! I'm your AI Financial Advisor. I can help you with budgeting, investment strategies, "
    "savings goals, and financial planning. What would you like to discuss today?"
)
FAILURE_REPLY = "Sorry, I couldn't get a response right now. Please try again."


class ReplyPendingError(Exception):
    """Raised when a message is submitted while the previous one awaits its reply."""


@dataclass(frozen=True)
class ChatMessage:
    content: str
    is_user: bool
    timestamp: datetime


@dataclass(frozen=True)
class ChatState:
    messages: tuple[ChatMessage, ...] = ()
    awaiting_reply: bool = False


def _now() -> datetime:
    return datetime.now(timezone.utc)


def initial_state(now: datetime | None = None) -> ChatState:
    return ChatState(messages=(ChatMessage(GREETING, False, now or _now()),))


def submit_message(state: ChatState, text: str, now: datetime | None = None) -> tuple[ChatState, bool]:
    """Return (new_state, should_dispatch). Blank text leaves the state untouched."""
    if not text.strip():
        return state, False
    if state.awaiting_reply:
        raise ReplyPendingError("A reply is already being generated")

    message = ChatMessage(text, True, now or _now())
    return replace(state, messages=state.messages + (message,), awaiting_reply=True), True


def receive_reply(state: ChatState, reply: str, now: datetime | None = None) -> ChatState:
    message = ChatMessage(reply, False, now or _now())
    return replace(state, messages=state.messages + (message,), awaiting_reply=False)


def receive_failure(state: ChatState, now: datetime | None = None) -> ChatState:
    """Leave the awaiting state and record an inline fallback message."""
    return receive_reply(state, FAILURE_REPLY, now)


@dataclass
class AdvisorSessions:
    """
    Per-user pending-reply guard held in process memory.

    A state is kept only while its reply is pending; idle users hold nothing.
    The chat log itself lives with the client and in `ai_conversations`.
    """

    states: dict[UUID, ChatState] = field(default_factory=dict)

    def get(self, user_id: UUID) -> ChatState:
        return self.states.get(user_id) or initial_state()

    def set(self, user_id: UUID, state: ChatState) -> None:
        if state.awaiting_reply:
            self.states[user_id] = state
        else:
            self.states.pop(user_id, None)
