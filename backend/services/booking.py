"""
Booking: take units of a product out of its per-store availability.

The request is checked against the total over every availability row before
any row is touched, so a booking either absorbs the full quantity or changes
nothing. Rows are consumed greedily (first fit) in ascending store id order,
then in insertion order within a store.
"""

from dataclasses import dataclass, field
from typing import List, Sequence, Tuple
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import Reason, ReasonCode, StoreValidationError, raise_if_any
from db.ledger import IsolationLevel, Ledger
from db.models import ProductAvailability

logger = structlog.get_logger(__name__)


@dataclass
class BookingResult:
    product_id: UUID
    booked: int
    # (store_id, units taken from that row), one entry per changed row
    allocations: List[Tuple[UUID, int]] = field(default_factory=list)


def _invalid_quantity(qty: int) -> Reason:
    return Reason(
        ReasonCode.INVALID_QUANTITY,
        "We can book only 1 or more",
        {"requested": qty},
    )


def validate_booking(records: Sequence[ProductAvailability], qty: int) -> List[Reason]:
    if qty < 1:
        return [_invalid_quantity(qty)]
    if not records:
        return [Reason(ReasonCode.OUT_OF_STOCK, "Product doesn't exist in stores")]

    total = sum(r.quantity for r in records)
    if total < qty:
        return [
            Reason(
                ReasonCode.INSUFFICIENT_STOCK,
                f"There are {total} products but you are trying to book {qty}",
                {"available": total, "requested": qty},
            )
        ]
    return []


def allocate(records: Sequence[ProductAvailability], qty: int) -> List[Tuple[ProductAvailability, int]]:
    """Decrement ``records`` in order until ``qty`` units are taken.

    Quantities are changed in place. Returns ``(record, taken)`` for every
    record that gave up at least one unit. The caller must have checked that
    the records hold ``qty`` units in total.
    """
    remaining = qty
    changed = []
    for record in records:
        if remaining == 0:
            break
        taken = min(record.quantity, remaining)
        if taken == 0:
            continue
        record.quantity -= taken
        remaining -= taken
        changed.append((record, taken))

    if remaining:
        raise ValueError(f"records are short by {remaining} units")
    return changed


async def book_product(db: AsyncSession, *, product_id: UUID, qty: int) -> BookingResult:
    if qty < 1:
        raise StoreValidationError([_invalid_quantity(qty)])

    ledger = Ledger(db)
    async with ledger.transaction(IsolationLevel.REPEATABLE_READ):
        records = await ledger.find(
            select(ProductAvailability)
            .where(ProductAvailability.product_id == product_id)
            .order_by(ProductAvailability.store_id.asc(), ProductAvailability.id.asc())
        )
        raise_if_any(validate_booking(records, qty))

        allocations = allocate(records, qty)
        for record, _taken in allocations:
            ledger.save(record)

        result = BookingResult(
            product_id=product_id,
            booked=qty,
            allocations=[(record.store_id, taken) for record, taken in allocations],
        )

    logger.info(
        "product_booked",
        product_id=str(product_id),
        qty=qty,
        rows_touched=len(result.allocations),
    )
    return result
