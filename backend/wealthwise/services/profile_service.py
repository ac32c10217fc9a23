from __future__ import annotations

from typing import Any
from uuid import UUID

from psycopg import AsyncConnection

from ..config import settings
from .record_store import fetch_one

PROFILE_COLUMNS = (
    "id, user_id, full_name, currency, date_of_birth, nationality, phone_number, created_at, updated_at"
)
PROFILE_FIELDS = ("full_name", "currency", "date_of_birth", "nationality", "phone_number")


async def get_profile(connection: AsyncConnection, user_id: UUID) -> dict[str, Any] | None:
    return await fetch_one(
        connection,
        f"SELECT {PROFILE_COLUMNS} FROM profiles WHERE user_id = %s",
        (user_id,),
        operation="fetch profile",
    )


async def get_user_currency(connection: AsyncConnection, user_id: UUID) -> str:
    """Preferred display currency; falls back to the configured default without a profile."""
    row = await fetch_one(
        connection,
        "SELECT currency FROM profiles WHERE user_id = %s",
        (user_id,),
        operation="fetch profile",
    )
    if row is None or not row.get("currency"):
        return settings.default_currency
    return row["currency"]


async def upsert_profile(
    connection: AsyncConnection,
    user_id: UUID,
    data: dict[str, Any],
) -> dict[str, Any]:
    """Create the one profile row for this user, or overwrite its fields."""
    values = [data.get(field) for field in PROFILE_FIELDS]
    assignments = ", ".join(f"{field} = EXCLUDED.{field}" for field in PROFILE_FIELDS)

    row = await fetch_one(
        connection,
        f"""
        INSERT INTO profiles (user_id, {", ".join(PROFILE_FIELDS)})
        VALUES (%s, %s, %s, %s, %s, %s)
        ON CONFLICT (user_id) DO UPDATE
        SET {assignments}, updated_at = now()
        RETURNING {PROFILE_COLUMNS}
        """,
        (user_id, *values),
        operation="update profile",
    )
    if row is None:
        raise LookupError("Profile not found")
    return row
