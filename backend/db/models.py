"""Imports every mapped class so Base.metadata knows all tables."""

from db.product import Product  # noqa: F401
from db.store import Store  # noqa: F401
from db.category import Category  # noqa: F401
from db.product_category import ProductCategory  # noqa: F401
from db.inventory.availability import ProductAvailability  # noqa: F401
