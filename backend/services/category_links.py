"""Link and unlink products to categories."""

from typing import List, Optional, Tuple
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import Reason, ReasonCode, raise_if_any
from db.ledger import IsolationLevel, Ledger
from db.models import Category, Product, ProductCategory

logger = structlog.get_logger(__name__)


def _missing_entities(product: Optional[Product], category: Optional[Category]) -> List[Reason]:
    reasons = []
    if product is None:
        reasons.append(Reason(ReasonCode.PRODUCT_NOT_FOUND, "Product doesn't exist"))
    if category is None:
        reasons.append(Reason(ReasonCode.CATEGORY_NOT_FOUND, "Category doesn't exist"))
    return reasons


def validate_link(product, category, link) -> List[Reason]:
    reasons = _missing_entities(product, category)
    if link is not None:
        reasons.append(Reason(ReasonCode.ALREADY_LINKED, "Product already added to category"))
    return reasons


def validate_unlink(product, category, link) -> List[Reason]:
    reasons = _missing_entities(product, category)
    if link is None:
        reasons.append(Reason(ReasonCode.NOT_LINKED, "Product is not in the category"))
    return reasons


async def _load(
    ledger: Ledger, product_id: UUID, category_id: UUID
) -> Tuple[Optional[Product], Optional[Category], Optional[ProductCategory]]:
    # One AsyncSession runs one statement at a time, so the reads are sequential.
    product = await ledger.get(Product, product_id)
    category = await ledger.get(Category, category_id)
    link = await ledger.find_one(
        select(ProductCategory).where(
            ProductCategory.product_id == product_id,
            ProductCategory.category_id == category_id,
        )
    )
    return product, category, link


async def link_product(db: AsyncSession, *, product_id: UUID, category_id: UUID) -> None:
    ledger = Ledger(db)
    async with ledger.transaction(IsolationLevel.REPEATABLE_READ):
        product, category, link = await _load(ledger, product_id, category_id)
        raise_if_any(validate_link(product, category, link))
        ledger.save(ProductCategory(product_id=product_id, category_id=category_id))

    logger.info("product_linked", product_id=str(product_id), category_id=str(category_id))


async def unlink_product(db: AsyncSession, *, product_id: UUID, category_id: UUID) -> None:
    ledger = Ledger(db)
    async with ledger.transaction(IsolationLevel.REPEATABLE_READ):
        product, category, link = await _load(ledger, product_id, category_id)
        raise_if_any(validate_unlink(product, category, link))
        await ledger.delete(link)

    logger.info("product_unlinked", product_id=str(product_id), category_id=str(category_id))
