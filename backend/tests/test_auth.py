from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import jwt
import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from wealthwise.auth import get_current_user_id
from wealthwise.config import settings

_run = asyncio.run


def _token(**claims) -> str:
    payload = {
        "sub": str(uuid4()),
        "aud": "authenticated",
        "exp": datetime.now(timezone.utc) + timedelta(minutes=5),
    }
    payload.update(claims)
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def _credentials(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


def test_valid_token_returns_subject() -> None:
    user_id = uuid4()

    assert _run(get_current_user_id(_credentials(_token(sub=str(user_id))))) == user_id


def test_missing_credentials_rejected() -> None:
    with pytest.raises(HTTPException) as exc_info:
        _run(get_current_user_id(None))

    assert exc_info.value.status_code == 401
    assert exc_info.value.detail == "Missing bearer token"


@pytest.mark.parametrize(
    "claims",
    [
        {"aud": "someone-else"},
        {"exp": datetime.now(timezone.utc) - timedelta(minutes=1)},
    ],
)
def test_wrong_audience_or_expired_token_rejected(claims) -> None:
    with pytest.raises(HTTPException) as exc_info:
        _run(get_current_user_id(_credentials(_token(**claims))))

    assert exc_info.value.detail == "Invalid token"


def test_token_signed_with_other_secret_rejected() -> None:
    token = jwt.encode(
        {"sub": str(uuid4()), "aud": "authenticated", "exp": datetime.now(timezone.utc) + timedelta(minutes=5)},
        "not-the-secret-key-at-all-0123456789",
        algorithm="HS256",
    )

    with pytest.raises(HTTPException) as exc_info:
        _run(get_current_user_id(_credentials(token)))

    assert exc_info.value.status_code == 401


def test_non_uuid_subject_rejected() -> None:
    with pytest.raises(HTTPException) as exc_info:
        _run(get_current_user_id(_credentials(_token(sub="not-a-uuid"))))

    assert exc_info.value.detail == "Invalid token subject"
