"""Failure types raised by the store services.

Validation failures are collected as a list of ``Reason`` values before
anything is raised, so a single ``StoreValidationError`` always carries every
problem found with the request.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List


class ReasonCode(str, Enum):
    INVALID_QUANTITY = "INVALID_QUANTITY"
    OUT_OF_STOCK = "OUT_OF_STOCK"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    STORE_NOT_FOUND = "STORE_NOT_FOUND"
    PRODUCTS_NOT_FOUND = "PRODUCTS_NOT_FOUND"
    NEGATIVE_QUANTITY = "NEGATIVE_QUANTITY"
    PRODUCT_NOT_FOUND = "PRODUCT_NOT_FOUND"
    CATEGORY_NOT_FOUND = "CATEGORY_NOT_FOUND"
    ALREADY_LINKED = "ALREADY_LINKED"
    NOT_LINKED = "NOT_LINKED"


@dataclass(frozen=True)
class Reason:
    code: ReasonCode
    message: str
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code.value, "message": self.message, **self.extra}


class StoreValidationError(Exception):
    """Client-correctable rejection, raised before any mutation."""

    def __init__(self, reasons: List[Reason]):
        if not reasons:
            raise ValueError("StoreValidationError needs at least one reason")
        self.reasons = list(reasons)
        super().__init__(self.message)

    @property
    def message(self) -> str:
        return "; ".join(r.message for r in self.reasons)

    @property
    def codes(self) -> List[ReasonCode]:
        return [r.code for r in self.reasons]


class ConcurrencyConflict(Exception):
    """A concurrent writer invalidated this transaction. Safe to retry."""


class PersistenceError(Exception):
    """The database failed for a reason other than a concurrency conflict."""


def raise_if_any(reasons: List[Reason]) -> None:
    if reasons:
        raise StoreValidationError(reasons)
