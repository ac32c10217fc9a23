from datetime import date, datetime
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field, field_validator

from .auth import get_current_user_id
from .database import get_db_connection
from .services.profile_service import get_profile, upsert_profile

router = APIRouter(prefix="/profile", tags=["profile"])


class ProfileUpsertRequest(BaseModel):
    full_name: str = Field(min_length=1, max_length=120)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    date_of_birth: date
    nationality: str = Field(min_length=1, max_length=80)
    phone_number: str = Field(min_length=3, max_length=32)

    @field_validator("full_name", "nationality", "phone_number", mode="before")
    @classmethod
    def clean_text(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("currency", mode="before")
    @classmethod
    def upper_currency(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value


class ProfileResponse(BaseModel):
    id: UUID
    user_id: UUID
    full_name: str
    currency: str
    date_of_birth: date | None
    nationality: str | None
    phone_number: str | None
    created_at: datetime
    updated_at: datetime


@router.get("", response_model=ProfileResponse)
async def get_profile_endpoint(
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> ProfileResponse:
    row = await get_profile(connection, user_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Profile not found")

    return ProfileResponse.model_validate(row)


@router.put("", response_model=ProfileResponse)
async def upsert_profile_endpoint(
    payload: ProfileUpsertRequest,
    user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> ProfileResponse:
    """Create or replace the single profile row tied to the signed-in user."""
    row = await upsert_profile(connection, user_id, payload.model_dump())
    return ProfileResponse.model_validate(row)
