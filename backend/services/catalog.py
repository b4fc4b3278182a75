"""
Read side of the catalog.

``all_products`` reads products, product/category links and availability rows
as three plain queries and joins them in memory, keyed by product id and then
by category id. Products without availability keep an empty list; products
without a category land in a single bucket whose ``category_id`` is None,
which is sorted ahead of every real category.
"""

from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from db.ledger import IsolationLevel, Ledger
from db.models import Category, Product, ProductAvailability, ProductCategory
from schemas.category import CategoryModel
from schemas.product import AvailabilityModel, ProductCategoryModel, ProductModel


def category_sort_key(group: ProductCategoryModel) -> Tuple[bool, int]:
    """Uncategorized first, then ascending category id."""
    if group.category_id is None:
        return (False, 0)
    return (True, group.category_id.int)


def _availability_query():
    return select(ProductAvailability).order_by(
        ProductAvailability.store_id.asc(), ProductAvailability.id.asc()
    )


def _availability_models(records: Sequence[ProductAvailability]) -> List[AvailabilityModel]:
    return [AvailabilityModel(store_id=r.store_id, quantity=r.quantity) for r in records]


def build_catalog(
    products: Sequence[Product],
    links: Sequence[ProductCategory],
    records: Sequence[ProductAvailability],
) -> List[ProductCategoryModel]:
    availability_by_product: Dict[UUID, List[ProductAvailability]] = defaultdict(list)
    for record in records:
        availability_by_product[record.product_id].append(record)

    # dict keeps the product read order
    product_models: Dict[UUID, ProductModel] = {
        p.id: ProductModel(
            **p.to_schema,
            availability=_availability_models(availability_by_product.get(p.id, [])),
        )
        for p in products
    }

    categories_by_product: Dict[UUID, List[UUID]] = defaultdict(list)
    for link in links:
        if link.product_id in product_models:
            categories_by_product[link.product_id].append(link.category_id)

    buckets: Dict[Optional[UUID], List[ProductModel]] = {}
    for product_id, model in product_models.items():
        for category_id in categories_by_product.get(product_id) or [None]:
            buckets.setdefault(category_id, []).append(model)

    groups = [
        ProductCategoryModel(category_id=category_id, products=models)
        for category_id, models in buckets.items()
    ]
    return sorted(groups, key=category_sort_key)


async def all_products(db: AsyncSession) -> List[ProductCategoryModel]:
    ledger = Ledger(db)
    async with ledger.transaction(IsolationLevel.READ_COMMITTED, read_only=True):
        products = await ledger.find(select(Product).order_by(Product.name.asc(), Product.id.asc()))
        links = await ledger.find(select(ProductCategory))
        records = await ledger.find(_availability_query())
        return build_catalog(products, links, records)


async def products_by_category(db: AsyncSession, category_id: UUID) -> List[ProductModel]:
    """Products linked to ``category_id``; availability is read product by product."""
    ledger = Ledger(db)
    async with ledger.transaction(IsolationLevel.READ_COMMITTED, read_only=True):
        products = await ledger.find(
            select(Product)
            .join(ProductCategory, ProductCategory.product_id == Product.id)
            .where(ProductCategory.category_id == category_id)
            .order_by(Product.name.asc(), Product.id.asc())
        )

        result = []
        for product in products:
            records = await ledger.find(
                _availability_query().where(ProductAvailability.product_id == product.id)
            )
            result.append(
                ProductModel(**product.to_schema, availability=_availability_models(records))
            )
        return result


async def list_categories(db: AsyncSession) -> List[CategoryModel]:
    ledger = Ledger(db)
    async with ledger.transaction(IsolationLevel.READ_COMMITTED, read_only=True):
        categories = await ledger.find(select(Category).order_by(Category.name.asc(), Category.id.asc()))
        return [CategoryModel(**c.to_schema) for c in categories]
