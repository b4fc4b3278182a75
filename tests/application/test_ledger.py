"""Application tests for driver errors raised inside a ledger transaction."""

import pytest

from conftest import CATEGORY_1, CATEGORY_2, STORE_A, make_availability, make_link, make_product
from core.errors import ConcurrencyConflict, PersistenceError
from db.inventory.availability import ProductAvailability
from db.ledger import IsolationLevel, Ledger
from db.product import Product
from db.product_category import ProductCategory
from services.category_links import link_product


@pytest.fixture
async def product(seed, stores, categories):
    product = make_product("Ginger beer")
    await seed(product)
    return product


class TestLedgerTransaction:
    async def test_duplicate_link_is_a_conflict(self, db, seed, product, count_rows):
        await seed(make_link(product, CATEGORY_1))
        ledger = Ledger(db)

        with pytest.raises(ConcurrencyConflict):
            async with ledger.transaction(IsolationLevel.REPEATABLE_READ):
                ledger.save(make_link(product, CATEGORY_1))

        assert not db.in_transaction()
        assert product.name == "Ginger beer"
        assert await count_rows(ProductCategory) == 1

    async def test_check_constraint_is_a_persistence_error(self, db, product, count_rows):
        ledger = Ledger(db)

        with pytest.raises(PersistenceError) as exc:
            async with ledger.transaction(IsolationLevel.REPEATABLE_READ):
                ledger.save(make_availability(product, STORE_A, -1))

        assert str(exc.value) == "Database error"
        assert not db.in_transaction()
        assert await count_rows(ProductAvailability) == 0

    async def test_session_is_usable_after_a_driver_error(self, db, seed, product, count_rows):
        await seed(make_link(product, CATEGORY_1))
        ledger = Ledger(db)

        with pytest.raises(ConcurrencyConflict):
            async with ledger.transaction(IsolationLevel.REPEATABLE_READ):
                ledger.save(make_link(product, CATEGORY_1))

        await link_product(db, product_id=product.id, category_id=CATEGORY_2)
        assert await count_rows(ProductCategory) == 2

    async def test_read_only_block_keeps_objects_readable(self, db, product):
        ledger = Ledger(db)

        async with ledger.transaction(IsolationLevel.READ_COMMITTED, read_only=True):
            loaded = await ledger.get(Product, product.id)

        assert loaded.name == "Ginger beer"
        assert not db.in_transaction()
