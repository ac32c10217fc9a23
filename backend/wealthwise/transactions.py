from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Annotated, Any, Literal
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel, Field, field_serializer, field_validator

from .auth import get_current_user_id
from .database import get_db_connection
from .services.transactions_service import (
    create_transaction,
    delete_transaction,
    list_transactions,
)

router = APIRouter(prefix="/transactions", tags=["transactions"])

TransactionType = Literal["expense", "income"]
Amount = Annotated[Decimal, Field(ge=Decimal("0"), max_digits=12, decimal_places=2)]


def _money(value: Decimal) -> str:
    return str(value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


class TransactionCreate(BaseModel):
    type: TransactionType = "expense"
    amount: Amount
    category: str = Field(min_length=1, max_length=80)
    description: str = Field(min_length=1, max_length=255)
    date: date
    currency: str = Field(default="USD", min_length=3, max_length=3)

    @field_validator("category", "description", mode="before")
    @classmethod
    def clean_text(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("currency", mode="before")
    @classmethod
    def upper_currency(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().upper()
        return value


class TransactionResponse(BaseModel):
    id: UUID
    user_id: UUID
    type: TransactionType
    amount: Decimal
    category: str
    description: str
    date: date
    currency: str
    created_at: datetime
    updated_at: datetime

    @field_serializer("amount")
    def serialize_amount(self, value: Decimal) -> str:
        return _money(value)


@router.get("", response_model=list[TransactionResponse])
async def list_transactions_endpoint(
    currency: str | None = Query(default=None, min_length=3, max_length=3),
    type: TransactionType | None = Query(default=None),
    date_from: date | None = Query(default=None),
    date_to: date | None = Query(default=None),
    limit: int = Query(default=20, ge=1, le=100),
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> list[TransactionResponse]:
    """List transactions newest first, filtered by currency, type and date range."""
    try:
        rows = await list_transactions(
            connection,
            user_id,
            currency=currency.upper() if currency else None,
            type_filter=type,
            date_from=date_from,
            date_to=date_to,
            limit=limit,
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    return [TransactionResponse.model_validate(row) for row in rows]


@router.post("", response_model=TransactionResponse, status_code=201)
async def create_transaction_endpoint(
    payload: TransactionCreate,
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> TransactionResponse:
    row = await create_transaction(connection, user_id, payload.model_dump())
    return TransactionResponse.model_validate(row)


@router.delete("/{transaction_id}", status_code=204)
async def delete_transaction_endpoint(
    transaction_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> Response:
    try:
        await delete_transaction(connection, user_id, transaction_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    return Response(status_code=204)
