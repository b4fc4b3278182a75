from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Dict, List
from uuid import UUID

from db.database import get_async_session
from schemas.errors import ServerErrorOut, ValidationErrorOut
from schemas.product import BookModelIn, ProductCategoryModel, ProductModel
from services.booking import book_product
from services.catalog import all_products, products_by_category
from services.category_links import link_product, unlink_product

router = APIRouter()

_MUTATION_RESPONSES = {
    400: {"model": ValidationErrorOut},
    503: {"model": ServerErrorOut},
}


@router.get("/by-category/{category_id}", response_model=List[ProductModel])
async def get_products_by_category(category_id: UUID, db: AsyncSession = Depends(get_async_session)):
    """Products linked to a category, each with its availability per store"""
    return await products_by_category(db, category_id)


@router.get("", response_model=List[ProductCategoryModel])
async def get_all_products(db: AsyncSession = Depends(get_async_session)):
    """
    All products grouped by category.

    Products without a category are returned in a group with `category_id: null`,
    listed before the other groups.
    """
    return await all_products(db)


@router.put("/{product_id}/category/{category_id}", response_model=Dict, responses=_MUTATION_RESPONSES)
async def put_product_in_category(
    product_id: UUID,
    category_id: UUID,
    db: AsyncSession = Depends(get_async_session),
):
    await link_product(db, product_id=product_id, category_id=category_id)
    return {"ok": True}


@router.delete("/{product_id}/category/{category_id}", response_model=Dict, responses=_MUTATION_RESPONSES)
async def remove_product_from_category(
    product_id: UUID,
    category_id: UUID,
    db: AsyncSession = Depends(get_async_session),
):
    await unlink_product(db, product_id=product_id, category_id=category_id)
    return {"ok": True}


@router.post("/{product_id}/book", response_model=Dict, responses=_MUTATION_RESPONSES)
async def book(
    product_id: UUID,
    payload: BookModelIn,
    db: AsyncSession = Depends(get_async_session),
):
    """Book `qty` units of a product, taken from one or more stores"""
    await book_product(db, product_id=product_id, qty=payload.qty)
    return {"ok": True}
