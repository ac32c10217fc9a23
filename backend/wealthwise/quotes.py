from datetime import datetime
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from .auth import get_current_user_id
from .database import get_db_connection
from .services.quotes_service import list_quotes, pick_quote

router = APIRouter(prefix="/quotes", tags=["quotes"])


class QuoteResponse(BaseModel):
    id: UUID
    quote: str
    author: str
    category: str
    created_at: datetime
    updated_at: datetime


@router.get("/random", response_model=QuoteResponse)
async def random_quote(
    category: str | None = Query(default=None, max_length=80),
    _user_id: UUID = Depends(get_current_user_id),
    connection: Any = Depends(get_db_connection),
) -> QuoteResponse:
    """One financial quote for the dashboard card, optionally from a single category."""
    quote = pick_quote(await list_quotes(connection, category=category))
    if quote is None:
        raise HTTPException(status_code=404, detail="No quotes available")

    return QuoteResponse.model_validate(quote)
