from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Literal
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel, Field, field_serializer, field_validator

from .auth import get_current_user_id
from .database import get_db_connection
from .services.savings_service import (
    create_savings_account,
    delete_savings_account,
    list_savings_accounts,
    update_savings_account,
)

router = APIRouter(prefix="/savings", tags=["savings"])

AccountType = Literal["savings", "checking", "money_market", "cd"]


def _money(value: Decimal) -> str:
    return str(value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


class SavingsAccountCreate(BaseModel):
    account_name: str = Field(min_length=1, max_length=120)
    account_type: AccountType = "savings"
    balance: Decimal = Field(default=Decimal("0.00"), max_digits=14, decimal_places=2)
    currency: str = Field(default="USD", min_length=3, max_length=3)

    @field_validator("currency", mode="before")
    @classmethod
    def upper_currency(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value


class SavingsAccountUpdate(BaseModel):
    account_name: str | None = Field(default=None, min_length=1, max_length=120)
    account_type: AccountType | None = None
    balance: Decimal | None = Field(default=None, max_digits=14, decimal_places=2)
    currency: str | None = Field(default=None, min_length=3, max_length=3)

    @field_validator("currency", mode="before")
    @classmethod
    def upper_currency(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value


class SavingsAccountResponse(BaseModel):
    id: UUID
    user_id: UUID
    account_name: str
    account_type: AccountType
    balance: Decimal
    currency: str
    created_at: datetime
    updated_at: datetime

    @field_serializer("balance")
    def serialize_balance(self, value: Decimal) -> str:
        return _money(value)


@router.get("", response_model=list[SavingsAccountResponse])
async def list_savings_endpoint(
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> list[SavingsAccountResponse]:
    rows = await list_savings_accounts(connection, user_id)
    return [SavingsAccountResponse.model_validate(row) for row in rows]


@router.post("", response_model=SavingsAccountResponse, status_code=201)
async def create_savings_endpoint(
    payload: SavingsAccountCreate,
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> SavingsAccountResponse:
    row = await create_savings_account(connection, user_id, payload.model_dump())
    return SavingsAccountResponse.model_validate(row)


@router.patch("/{account_id}", response_model=SavingsAccountResponse)
async def update_savings_endpoint(
    account_id: UUID,
    payload: SavingsAccountUpdate,
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> SavingsAccountResponse:
    try:
        row = await update_savings_account(
            connection,
            user_id,
            account_id,
            payload.model_dump(exclude_unset=True, exclude_none=True),
        )
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    return SavingsAccountResponse.model_validate(row)


@router.delete("/{account_id}", status_code=204)
async def delete_savings_endpoint(
    account_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> Response:
    try:
        await delete_savings_account(connection, user_id, account_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    return Response(status_code=204)
