"""Integration tests for the products endpoints."""

import uuid

import pytest

from conftest import CATEGORY_1, STORE_A, STORE_B, make_availability, make_link, make_product
from core.errors import ConcurrencyConflict, PersistenceError


@pytest.fixture
async def product(seed, stores, categories):
    product = make_product("Orange juice")
    await seed(product)
    await seed(
        make_availability(product, STORE_A, 5),
        make_availability(product, STORE_B, 3),
    )
    return product


class TestListEndpoints:
    async def test_all_products(self, client, seed, product):
        loose = make_product("Zucchini")
        await seed(loose, make_link(product, CATEGORY_1))

        response = await client.get("/products")

        assert response.status_code == 200
        data = response.json()
        assert [g["category_id"] for g in data] == [None, str(CATEGORY_1)]
        assert data[0]["products"] == [{"id": str(loose.id), "name": "Zucchini", "availability": []}]
        assert data[1]["products"][0]["availability"] == [
            {"store_id": str(STORE_A), "quantity": 5},
            {"store_id": str(STORE_B), "quantity": 3},
        ]

    async def test_by_category(self, client, seed, product):
        await seed(make_link(product, CATEGORY_1))

        response = await client.get(f"/products/by-category/{CATEGORY_1}")

        assert response.status_code == 200
        assert [p["name"] for p in response.json()] == ["Orange juice"]


class TestBookEndpoint:
    async def test_book(self, client, product, read_stock):
        response = await client.post(f"/products/{product.id}/book", json={"qty": 7})

        assert response.status_code == 200
        assert response.json() == {"ok": True}
        assert await read_stock(product.id) == [(STORE_A, 0), (STORE_B, 1)]

    async def test_insufficient_stock(self, client, product):
        response = await client.post(f"/products/{product.id}/book", json={"qty": 100})

        assert response.status_code == 400
        body = response.json()
        assert body["detail"] == "There are 8 products but you are trying to book 100"
        assert body["reasons"] == [
            {
                "code": "INSUFFICIENT_STOCK",
                "message": "There are 8 products but you are trying to book 100",
                "available": 8,
                "requested": 100,
            }
        ]

    async def test_zero_quantity(self, client, product):
        response = await client.post(f"/products/{product.id}/book", json={"qty": 0})
        assert response.status_code == 400
        assert response.json()["reasons"][0]["code"] == "INVALID_QUANTITY"

    async def test_unknown_product_is_out_of_stock(self, client, stores):
        response = await client.post(f"/products/{uuid.uuid4()}/book", json={"qty": 1})
        assert response.status_code == 400
        assert response.json()["reasons"][0]["code"] == "OUT_OF_STOCK"

    async def test_conflict_is_reported_as_retryable(self, client, product, monkeypatch):
        async def conflicting(*args, **kwargs):
            raise ConcurrencyConflict("serialization failure")

        monkeypatch.setattr("routers.products.book_product", conflicting)

        response = await client.post(f"/products/{product.id}/book", json={"qty": 1})

        assert response.status_code == 503
        assert response.json()["retryable"] is True
        assert "serialization" not in response.json()["detail"]

    async def test_persistence_error_hides_details(self, client, product, monkeypatch):
        async def broken(*args, **kwargs):
            raise PersistenceError("connection refused on 10.0.0.1")

        monkeypatch.setattr("routers.products.book_product", broken)

        response = await client.post(f"/products/{product.id}/book", json={"qty": 1})

        assert response.status_code == 500
        assert response.json() == {"detail": "Internal server error", "retryable": False}


class TestCategoryEndpoints:
    async def test_put_then_delete(self, client, product):
        url = f"/products/{product.id}/category/{CATEGORY_1}"

        assert (await client.put(url)).status_code == 200
        assert (await client.delete(url)).status_code == 200

    async def test_put_twice(self, client, product):
        url = f"/products/{product.id}/category/{CATEGORY_1}"
        await client.put(url)

        response = await client.put(url)

        assert response.status_code == 400
        assert response.json()["detail"] == "Product already added to category"

    async def test_errors_are_joined(self, client, categories):
        response = await client.delete(f"/products/{uuid.uuid4()}/category/{uuid.uuid4()}")

        assert response.status_code == 400
        assert response.json()["detail"] == (
            "Product doesn't exist; Category doesn't exist; Product is not in the category"
        )
