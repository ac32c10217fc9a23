"""Goals router with CRUD endpoints and computed progress fields."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, Field, field_serializer, field_validator

from .auth import get_current_user_id
from .database import get_db_connection
from .services.goals_service import (
    create_goal,
    delete_goal,
    list_goals,
    update_goal,
)

router = APIRouter(prefix="/goals", tags=["goals"])


def _money(value: Decimal) -> str:
    return str(value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


class GoalCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=120)
    category: str = Field(min_length=1, max_length=80)
    target_amount: Decimal = Field(gt=Decimal("0"), max_digits=12, decimal_places=2)
    current_amount: Decimal = Field(default=Decimal("0.00"), ge=Decimal("0"), max_digits=12, decimal_places=2)
    target_date: date
    currency: str = Field(default="USD", min_length=3, max_length=3)

    @field_validator("currency", mode="before")
    @classmethod
    def upper_currency(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value


class GoalUpdateRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=120)
    category: str | None = Field(default=None, min_length=1, max_length=80)
    target_amount: Decimal | None = Field(default=None, gt=Decimal("0"), max_digits=12, decimal_places=2)
    current_amount: Decimal | None = Field(default=None, ge=Decimal("0"), max_digits=12, decimal_places=2)
    target_date: date | None = None
    currency: str | None = Field(default=None, min_length=3, max_length=3)

    @field_validator("currency", mode="before")
    @classmethod
    def upper_currency(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value


class GoalResponse(BaseModel):
    id: UUID
    user_id: UUID
    title: str
    category: str
    target_amount: Decimal
    current_amount: Decimal
    target_date: date
    currency: str
    created_at: datetime
    updated_at: datetime
    remaining_amount: Decimal
    progress_pct: float | None
    days_left: int
    months_left: int
    recommended_monthly_save_amount: Decimal

    @field_serializer(
        "target_amount",
        "current_amount",
        "remaining_amount",
        "recommended_monthly_save_amount",
    )
    def serialize_decimal(self, value: Decimal) -> str:
        return _money(value)


@router.get("", response_model=list[GoalResponse])
async def list_goals_endpoint(
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> list[GoalResponse]:
    """List the user's goals, newest first, with progress and monthly plan."""
    rows = await list_goals(connection, user_id)
    return [GoalResponse(**row) for row in rows]


@router.post("", response_model=GoalResponse, status_code=status.HTTP_201_CREATED)
async def create_goal_endpoint(
    payload: GoalCreateRequest,
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> GoalResponse:
    try:
        result = await create_goal(connection, user_id, payload.model_dump())
        return GoalResponse(**result)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.patch("/{goal_id}", response_model=GoalResponse)
async def update_goal_endpoint(
    goal_id: UUID,
    payload: GoalUpdateRequest,
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> GoalResponse:
    """
    Partially update one goal.

    The progress input sends only `current_amount`, which may go past the target.
    """
    patch_data = payload.model_dump(exclude_unset=True, exclude_none=True)
    if not patch_data:
        raise HTTPException(status_code=422, detail="At least one field must be provided")

    try:
        row = await update_goal(connection, user_id, goal_id, patch_data)
        return GoalResponse(**row)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.delete("/{goal_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_goal_endpoint(
    goal_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> Response:
    """Delete one goal for the current user."""
    try:
        await delete_goal(connection, user_id, goal_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    return Response(status_code=status.HTTP_204_NO_CONTENT)
