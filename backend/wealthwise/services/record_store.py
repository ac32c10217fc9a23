"""Scoped create/read/update/delete helpers over the flat per-user tables.

Every write is keyed by primary key *and* `user_id`. Table and column names are
supplied by the service modules, never by request data. Driver failures are
logged and re-raised as `RecordStoreError` naming the operation.
"""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Any
from uuid import UUID

import psycopg
import structlog
from psycopg import AsyncConnection

from ..errors import RecordStoreError

logger = structlog.get_logger(__name__)

MONEY_QUANT = Decimal("0.01")


def quantize_amount(value: Decimal) -> Decimal:
    """Normalize money values to NUMERIC(12,2) precision."""
    return value.quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)


def normalize_amount(value: Decimal | int | float | str | None) -> Decimal:
    if value is None:
        return Decimal("0.00")
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return quantize_amount(value)


async def _run(
    connection: AsyncConnection,
    query: str,
    params: tuple[Any, ...],
    *,
    operation: str,
    many: bool = False,
) -> Any:
    try:
        async with connection.cursor() as cursor:
            await cursor.execute(query, params)
            if many:
                return await cursor.fetchall()
            return await cursor.fetchone()
    except psycopg.Error as exc:
        logger.error("record_store_failed", operation=operation, error=str(exc))
        raise RecordStoreError(operation) from exc


async def fetch_all(
    connection: AsyncConnection,
    query: str,
    params: tuple[Any, ...],
    *,
    operation: str,
) -> list[dict[str, Any]]:
    rows = await _run(connection, query, params, operation=operation, many=True)
    return list(rows or [])


async def fetch_one(
    connection: AsyncConnection,
    query: str,
    params: tuple[Any, ...],
    *,
    operation: str,
) -> dict[str, Any] | None:
    return await _run(connection, query, params, operation=operation)


async def insert_row(
    connection: AsyncConnection,
    table: str,
    values: dict[str, Any],
    *,
    returning: str,
    operation: str,
) -> dict[str, Any]:
    columns = ", ".join(values)
    placeholders = ", ".join(["%s"] * len(values))
    row = await _run(
        connection,
        f"INSERT INTO {table} ({columns}) VALUES ({placeholders}) RETURNING {returning}",
        tuple(values.values()),
        operation=operation,
    )
    if row is None:
        # INSERT ... RETURNING always yields a row unless a policy filtered it out.
        raise RecordStoreError(operation)
    return row


async def update_row(
    connection: AsyncConnection,
    table: str,
    *,
    row_id: UUID,
    user_id: UUID,
    values: dict[str, Any],
    returning: str,
    operation: str,
) -> dict[str, Any] | None:
    """Apply a partial update; returns None when the row does not exist for this user."""
    assignments = ", ".join(f"{column} = %s" for column in values)
    return await _run(
        connection,
        f"""
        UPDATE {table}
        SET {assignments}, updated_at = now()
        WHERE id = %s
          AND user_id = %s
        RETURNING {returning}
        """,
        (*values.values(), row_id, user_id),
        operation=operation,
    )


async def delete_row(
    connection: AsyncConnection,
    table: str,
    *,
    row_id: UUID,
    user_id: UUID,
    operation: str,
) -> bool:
    """Hard-delete one user-scoped row; returns False when nothing matched."""
    row = await _run(
        connection,
        f"""
        DELETE FROM {table}
        WHERE id = %s
          AND user_id = %s
        RETURNING id
        """,
        (row_id, user_id),
        operation=operation,
    )
    return row is not None
