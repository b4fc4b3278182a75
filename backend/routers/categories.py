from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from db.database import get_async_session
from schemas.category import CategoryModel
from services.catalog import list_categories

router = APIRouter()


@router.get("", response_model=List[CategoryModel])
async def all_categories(db: AsyncSession = Depends(get_async_session)):
    """Get all categories"""
    return await list_categories(db)
