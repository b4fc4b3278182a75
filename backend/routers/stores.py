from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Dict
from uuid import UUID

from db.database import get_async_session
from schemas.errors import ServerErrorOut, ValidationErrorOut
from schemas.store import RestockModel
from services.restock import restock_store

router = APIRouter()


@router.post(
    "/{store_id}/restock",
    response_model=Dict,
    responses={400: {"model": ValidationErrorOut}, 503: {"model": ServerErrorOut}},
)
async def restock(
    store_id: UUID,
    payload: RestockModel,
    db: AsyncSession = Depends(get_async_session),
):
    """
    Add stock to a store.

    - Creates one availability row per known product, even when the store
      already holds a row for that product.
    - Unknown product ids are ignored as long as at least one id exists.
    """
    await restock_store(db, store_id=store_id, quantities=payload.products)
    return {"ok": True}
