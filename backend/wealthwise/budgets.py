from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Literal
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field, field_serializer, field_validator

from .auth import get_current_user_id
from .database import get_db_connection
from .services.budgets_service import create_budget, delete_budget, list_budgets, update_budget
from .services.dashboard_service import get_budget_usage

router = APIRouter(prefix="/budgets", tags=["budgets"])

BudgetPeriod = Literal["weekly", "monthly", "yearly"]


def _money(value: Decimal) -> str:
    return str(value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def _upper(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().upper()
    return value


class BudgetCreate(BaseModel):
    category: str = Field(min_length=1, max_length=80)
    amount: Decimal = Field(gt=Decimal("0"), max_digits=12, decimal_places=2)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    period: BudgetPeriod = "monthly"

    @field_validator("currency", mode="before")
    @classmethod
    def normalize_currency(cls, value: Any) -> Any:
        return _upper(value)


class BudgetUpdate(BaseModel):
    category: str | None = Field(default=None, min_length=1, max_length=80)
    amount: Decimal | None = Field(default=None, gt=Decimal("0"), max_digits=12, decimal_places=2)
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    period: BudgetPeriod | None = None

    @field_validator("currency", mode="before")
    @classmethod
    def normalize_currency(cls, value: Any) -> Any:
        return _upper(value)


class BudgetResponse(BaseModel):
    id: UUID
    user_id: UUID
    category: str
    amount: Decimal
    currency: str
    period: BudgetPeriod
    created_at: datetime
    updated_at: datetime

    @field_serializer("amount")
    def serialize_amount(self, value: Decimal) -> str:
        return _money(value)


class BudgetUsageResponse(BaseModel):
    """Spending against one budget, matched by category text in the current period."""
    budget_id: UUID
    category: str
    period: BudgetPeriod
    currency: str
    period_start: date
    period_end: date
    budget_amount: Decimal
    spent_amount: Decimal
    remaining_amount: Decimal
    used_pct: Decimal | None

    @field_serializer("budget_amount", "spent_amount", "remaining_amount")
    def serialize_decimal(self, value: Decimal) -> str:
        return _money(value)

    @field_serializer("used_pct", when_used="always")
    def serialize_pct(self, value: Decimal | None) -> float | None:
        return None if value is None else float(value)


@router.get("", response_model=list[BudgetResponse])
async def list_budgets_endpoint(
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> list[BudgetResponse]:
    rows = await list_budgets(connection, user_id)
    return [BudgetResponse.model_validate(row) for row in rows]


@router.get("/usage", response_model=list[BudgetUsageResponse])
async def budget_usage_endpoint(
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> list[BudgetUsageResponse]:
    rows = await get_budget_usage(connection, user_id)
    return [BudgetUsageResponse.model_validate(row) for row in rows]


@router.post("", response_model=BudgetResponse, status_code=201)
async def create_budget_endpoint(
    payload: BudgetCreate,
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> BudgetResponse:
    row = await create_budget(connection, user_id, payload.model_dump())
    return BudgetResponse.model_validate(row)


@router.patch("/{budget_id}", response_model=BudgetResponse)
async def update_budget_endpoint(
    budget_id: UUID,
    payload: BudgetUpdate,
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> BudgetResponse:
    try:
        row = await update_budget(connection, user_id, budget_id, payload.model_dump(exclude_unset=True, exclude_none=True))
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    return BudgetResponse.model_validate(row)


@router.delete("/{budget_id}", status_code=204)
async def delete_budget_endpoint(
    budget_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> Response:
    try:
        await delete_budget(connection, user_id, budget_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    return Response(status_code=204)
