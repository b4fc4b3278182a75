import os

# Must be set before any application module creates the engine
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

import uuid

import httpx
import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from db.database import Base, get_async_session
from db.models import Category, Product, ProductAvailability, ProductCategory, Store

# Fixed ids so that store ordering (and therefore allocation order) is known.
STORE_A = uuid.UUID("00000000-0000-0000-0000-00000000000a")
STORE_B = uuid.UUID("00000000-0000-0000-0000-00000000000b")
STORE_C = uuid.UUID("00000000-0000-0000-0000-00000000000c")

CATEGORY_1 = uuid.UUID("10000000-0000-0000-0000-000000000001")
CATEGORY_2 = uuid.UUID("20000000-0000-0000-0000-000000000002")


@pytest.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def seed(db):
    """Persist the given entities and commit."""

    async def _seed(*entities):
        db.add_all(entities)
        await db.commit()
        return entities

    return _seed


@pytest.fixture
def read_stock(session_maker):
    """Return [(store_id, quantity)] for a product, read through a fresh session."""

    async def _read(product_id):
        async with session_maker() as session:
            result = await session.execute(
                select(ProductAvailability)
                .where(ProductAvailability.product_id == product_id)
                .order_by(ProductAvailability.store_id, ProductAvailability.id)
            )
            return [(r.store_id, r.quantity) for r in result.scalars().all()]

    return _read


@pytest.fixture
def count_rows(session_maker):
    async def _count(model):
        async with session_maker() as session:
            result = await session.execute(select(model))
            return len(result.scalars().all())

    return _count


@pytest.fixture
async def stores(seed):
    return await seed(
        Store(id=STORE_A, name="Store A"),
        Store(id=STORE_B, name="Store B"),
        Store(id=STORE_C, name="Store C"),
    )


@pytest.fixture
async def categories(seed):
    return await seed(
        Category(id=CATEGORY_1, name="Beverages"),
        Category(id=CATEGORY_2, name="Snacks"),
    )


def make_product(name="Product", **kwargs):
    return Product(id=kwargs.pop("id", uuid.uuid4()), name=name, **kwargs)


def make_availability(product, store_id, quantity):
    return ProductAvailability(product_id=product.id, store_id=store_id, quantity=quantity)


def make_link(product, category_id):
    return ProductCategory(product_id=product.id, category_id=category_id)


@pytest.fixture
async def client(session_maker):
    from main import app

    async def _override_session():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_async_session] = _override_session
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
