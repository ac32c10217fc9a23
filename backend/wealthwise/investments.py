from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Literal
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field, field_serializer, field_validator

from .auth import get_current_user_id
from .database import get_db_connection
from .services.investments_service import (
    create_investment,
    delete_investment,
    list_investments,
    update_investment,
)

router = APIRouter(prefix="/investments", tags=["investments"])

InvestmentType = Literal["stocks", "bonds", "crypto", "real_estate", "mutual_funds", "etf"]


def _money(value: Decimal) -> str:
    return str(value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


class InvestmentCreate(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    type: InvestmentType
    amount: Decimal = Field(ge=Decimal("0"), max_digits=14, decimal_places=2)
    current_value: Decimal = Field(ge=Decimal("0"), max_digits=14, decimal_places=2)
    purchase_date: date
    currency: str = Field(default="USD", min_length=3, max_length=3)

    @field_validator("currency", mode="before")
    @classmethod
    def upper_currency(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value


class InvestmentUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=120)
    type: InvestmentType | None = None
    amount: Decimal | None = Field(default=None, ge=Decimal("0"), max_digits=14, decimal_places=2)
    current_value: Decimal | None = Field(default=None, ge=Decimal("0"), max_digits=14, decimal_places=2)
    purchase_date: date | None = None
    currency: str | None = Field(default=None, min_length=3, max_length=3)

    @field_validator("currency", mode="before")
    @classmethod
    def upper_currency(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value


class InvestmentResponse(BaseModel):
    id: UUID
    user_id: UUID
    name: str
    type: InvestmentType
    amount: Decimal
    current_value: Decimal
    purchase_date: date
    currency: str
    created_at: datetime
    updated_at: datetime
    gain_loss: Decimal
    gain_loss_pct: float | None

    @field_serializer("amount", "current_value", "gain_loss")
    def serialize_decimal(self, value: Decimal) -> str:
        return _money(value)


@router.get("", response_model=list[InvestmentResponse])
async def list_investments_endpoint(
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> list[InvestmentResponse]:
    rows = await list_investments(connection, user_id)
    return [InvestmentResponse(**row) for row in rows]


@router.post("", response_model=InvestmentResponse, status_code=201)
async def create_investment_endpoint(
    payload: InvestmentCreate,
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> InvestmentResponse:
    row = await create_investment(connection, user_id, payload.model_dump())
    return InvestmentResponse(**row)


@router.patch("/{investment_id}", response_model=InvestmentResponse)
async def update_investment_endpoint(
    investment_id: UUID,
    payload: InvestmentUpdate,
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> InvestmentResponse:
    """Partially update one investment; usually a new `current_value`."""
    try:
        row = await update_investment(
            connection,
            user_id,
            investment_id,
            payload.model_dump(exclude_unset=True, exclude_none=True),
        )
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    return InvestmentResponse(**row)


@router.delete("/{investment_id}", status_code=204)
async def delete_investment_endpoint(
    investment_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> Response:
    try:
        await delete_investment(connection, user_id, investment_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    return Response(status_code=204)
