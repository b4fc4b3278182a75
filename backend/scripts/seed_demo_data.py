import argparse
import asyncio
import sys
from pathlib import Path

"""
Seed demo data (stores, categories, products, stock) into the DB.

Products are linked and restocked through the same services the API uses,
so the demo data obeys the same rules (one link per pair, append-only stock).

This script can be run from either:
- backend/: `python scripts/seed_demo_data.py`
- repo root: `python backend/scripts/seed_demo_data.py --no-stock`
"""

# Allow running from repo root by ensuring `backend/` is on sys.path
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from sqlalchemy import func, select  # noqa: E402

from core.logging import configure_logging  # noqa: E402
from db.database import async_session_maker, create_db_and_tables  # noqa: E402
from db.models import Category, Product, ProductCategory, Store  # noqa: E402
from services.category_links import link_product  # noqa: E402
from services.restock import restock_store  # noqa: E402


STORES = ["Downtown", "Harbour", "Airport"]

# category name -> product names
CATALOG = {
    "Beverages": ["Orange juice", "Sparkling water", "Cold brew"],
    "Snacks": ["Salted crackers", "Trail mix"],
    "Bakery": ["Sourdough loaf", "Croissant"],
}
UNCATEGORIZED = ["Gift card sleeve"]


async def get_or_create_by_name(session, model, name: str):
    result = await session.execute(
        select(model).where(func.lower(model.name) == name.strip().lower())
    )
    entity = result.scalars().first()
    if entity:
        return entity

    entity = model(name=name.strip())
    session.add(entity)
    await session.flush()
    return entity


async def seed_catalog(session) -> dict:
    """Create stores, categories and products. Returns them keyed by name."""
    stores = {name: await get_or_create_by_name(session, Store, name) for name in STORES}
    categories = {}
    products = {}
    for category_name, product_names in CATALOG.items():
        categories[category_name] = await get_or_create_by_name(session, Category, category_name)
        for product_name in product_names:
            products[product_name] = await get_or_create_by_name(session, Product, product_name)
    for product_name in UNCATEGORIZED:
        products[product_name] = await get_or_create_by_name(session, Product, product_name)
    await session.commit()
    return {"stores": stores, "categories": categories, "products": products}


async def link_catalog(session, seeded: dict) -> int:
    """Link every catalog product to its category, skipping pairs already linked."""
    existing = {
        (row.product_id, row.category_id)
        for row in (await session.execute(select(ProductCategory))).scalars().all()
    }

    linked = 0
    for category_name, product_names in CATALOG.items():
        category = seeded["categories"][category_name]
        for product_name in product_names:
            product = seeded["products"][product_name]
            if (product.id, category.id) in existing:
                continue
            await link_product(session, product_id=product.id, category_id=category.id)
            linked += 1
    return linked


async def stock_stores(session, seeded: dict, qty: int) -> int:
    created = 0
    quantities = {p.id: qty for p in seeded["products"].values()}
    for store in seeded["stores"].values():
        result = await restock_store(session, store_id=store.id, quantities=quantities)
        created += result.created
    return created


async def seed(qty: int, with_stock: bool):
    await create_db_and_tables()
    async with async_session_maker() as session:
        seeded = await seed_catalog(session)
        linked = await link_catalog(session, seeded)
        created = await stock_stores(session, seeded, qty) if with_stock else 0

    print(
        f"Seeded {len(seeded['stores'])} stores, {len(seeded['categories'])} categories, "
        f"{len(seeded['products'])} products; {linked} new links, {created} availability rows"
    )


def main():
    parser = argparse.ArgumentParser(description="Seed demo catalog data")
    parser.add_argument("--qty", type=int, default=10, help="units per product per store")
    parser.add_argument("--no-stock", action="store_true", help="skip restocking stores")
    args = parser.parse_args()

    configure_logging()
    asyncio.run(seed(qty=args.qty, with_stock=not args.no_stock))


if __name__ == "__main__":
    main()
