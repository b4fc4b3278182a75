"""
Restock: append availability rows for one store.

Rows are never merged with existing (product, store) rows; every restock adds
new ones. Inserts are flushed in batches through ``Ledger.checkpoint`` so a
large request does not keep every new row tracked by the session, while the
whole request still commits or rolls back as one transaction.
"""

from dataclasses import dataclass
from typing import List, Mapping, Optional, Sequence
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.errors import Reason, ReasonCode, raise_if_any
from db.ledger import IsolationLevel, Ledger
from db.models import Product, ProductAvailability, Store

logger = structlog.get_logger(__name__)


@dataclass
class RestockResult:
    store_id: UUID
    created: int
    checkpoints: int


def validate_restock(
    store: Optional[Store],
    products: Sequence[Product],
    quantities: Mapping[UUID, int],
) -> List[Reason]:
    reasons = []
    if store is None:
        reasons.append(Reason(ReasonCode.STORE_NOT_FOUND, "Store not found"))
    if not products:
        reasons.append(Reason(ReasonCode.PRODUCTS_NOT_FOUND, "Products not found"))
    reasons.extend(
        Reason(
            ReasonCode.NEGATIVE_QUANTITY,
            f"Product {product_id} has qty {qty}, negative quantities are not allowed",
            {"product_id": str(product_id), "qty": qty},
        )
        for product_id, qty in quantities.items()
        if qty < 0
    )
    return reasons


async def restock_store(
    db: AsyncSession,
    *,
    store_id: UUID,
    quantities: Mapping[UUID, int],
    batch_size: Optional[int] = None,
) -> RestockResult:
    batch_size = settings.restock_batch_size if batch_size is None else batch_size
    if batch_size < 1:
        raise ValueError("batch_size must be >= 1")

    ledger = Ledger(db)
    async with ledger.transaction(IsolationLevel.REPEATABLE_READ):
        store = await ledger.get(Store, store_id)
        products = await ledger.find(
            select(Product).where(Product.id.in_(list(quantities.keys())))
        )
        raise_if_any(validate_restock(store, products, quantities))

        # Unknown product ids are dropped here; they only count towards
        # "Products not found" when none of the ids exist.
        known_ids = {p.id for p in products}
        pairs = [(pid, qty) for pid, qty in quantities.items() if pid in known_ids]

        for i, (product_id, qty) in enumerate(pairs):
            ledger.save(
                ProductAvailability(product_id=product_id, store_id=store_id, quantity=qty)
            )
            if i % batch_size == 0:
                await ledger.checkpoint()

        result = RestockResult(store_id=store_id, created=len(pairs), checkpoints=ledger.checkpoints)

    logger.info(
        "store_restocked",
        store_id=str(store_id),
        created=result.created,
        skipped=len(quantities) - result.created,
        checkpoints=result.checkpoints,
    )
    return result
