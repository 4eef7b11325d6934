"""HTTP tests for the product endpoints."""

import pytest

from src.catalog.entities.service.product import ProductMetadata


class TestListing:
    def test_list_envelope_and_pagination(self, client, seed, product_factory):
        products = seed(*[product_factory() for _ in range(15)])

        response = client.get("/api/products", params={"limit": 10, "page": 2})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["status_code"] == 200
        assert body["data"]["total"] == 15
        assert body["data"]["page"] == 2
        assert [p["id"] for p in body["data"]["products"]] == [p.id for p in products[10:]]

    def test_category_filter(self, client, seed, product_factory):
        seed(product_factory(category="laptops"), product_factory(category="phones"))

        body = client.get("/api/products", params={"category": "laptops"}).json()

        assert body["data"]["total"] == 1
        assert body["data"]["products"][0]["category"] == "laptops"

    def test_search(self, client, seed, product_factory):
        seed(product_factory(title="Phone Pro"), product_factory(title="Laptop"))

        body = client.get("/api/products", params={"search": "phone"}).json()

        assert [p["title"] for p in body["data"]["products"]] == ["Phone Pro"]

    def test_empty_listing_is_not_an_error(self, client):
        body = client.get("/api/products", params={"page": 40}).json()

        assert body["success"] is True
        assert body["data"]["products"] == []

    @pytest.mark.parametrize("params", [{"limit": "abc"}, {"page": "-1"}, {"offset": "x"}])
    def test_malformed_numbers(self, client, params):
        response = client.get("/api/products", params=params)

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["status_code"] == 400
        assert isinstance(body["errors"], list)
        assert body["request_id"]

    def test_get_by_id(self, client, seed, product_factory):
        (product,) = seed(product_factory())

        body = client.get(f"/api/products/{product.id}").json()
        assert body["data"]["title"] == product.title

    def test_get_missing_is_404(self, client):
        response = client.get("/api/products/nope")

        assert response.status_code == 404
        assert response.json()["message"] == "Product nope not found"


class TestDiscountListings:
    def test_discounted_default_threshold(self, client, seed, product_factory):
        seed(
            product_factory(title="a", discount_percentage=4),
            product_factory(title="b", discount_percentage=5),
        )

        body = client.get("/api/products/discounted").json()

        assert [p["title"] for p in body["data"]] == ["b"]

    def test_discounted_none_is_404(self, client, seed, product_factory):
        seed(product_factory(discount_percentage=1))

        response = client.get("/api/products/discounted", params={"min_discount": 50})

        assert response.status_code == 404
        assert response.json()["success"] is False

    def test_discounted_invalid_threshold(self, client):
        assert client.get("/api/products/discounted?min_discount=abc").status_code == 400

    def test_cash_discount_and_special_offers(self, client, seed, product_factory):
        seed(
            product_factory(title="small", discount_percentage=6, cash_discount=True),
            product_factory(title="big", discount_percentage=25, cash_discount=True),
        )

        cash = client.get("/api/products/cash-discount").json()["data"]
        offers = client.get("/api/products/special-offers").json()["data"]

        assert [p["title"] for p in cash] == ["big", "small"]
        assert [p["title"] for p in offers] == ["big"]

    def test_featured(self, client, seed, product_factory):
        seed(*[product_factory(title=f"p{i}", sales_count=i) for i in range(12)])

        featured = client.get("/api/products/featured").json()["data"]

        assert len(featured) == 10
        assert featured[0]["title"] == "p11"

    def test_categories(self, client, seed, product_factory):
        seed(product_factory(category="b"), product_factory(category="a"))

        assert client.get("/api/products/categories").json()["data"] == ["a", "b"]


class TestWrites:
    def test_create_then_discount(self, client):
        created = client.post(
            "/api/products",
            json={"title": "Phone X", "price": 500, "category": "smartphones"},
        )
        assert created.status_code == 201
        product = created.json()["data"]
        assert product["old_price"] == 500

        response = client.patch(
            f"/api/products/{product['id']}/discount", json={"percentage": 20}
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["price"] == 400
        assert data["old_price"] == 500
        assert data["discount_percentage"] == 20

    def test_create_requires_fields(self, client):
        response = client.post("/api/products", json={"title": "No price"})

        assert response.status_code == 400
        assert response.json()["message"].startswith("Missing required fields")

    def test_create_rejects_bad_types(self, client):
        response = client.post(
            "/api/products", json={"title": "x", "price": "cheap", "category": "c"}
        )
        assert response.status_code == 400

    @pytest.mark.parametrize("percentage", [-5, 101, None])
    def test_invalid_discount(self, client, seed, product_factory, percentage):
        (product,) = seed(product_factory(price=80))

        response = client.patch(
            f"/api/products/{product.id}/discount", json={"percentage": percentage}
        )

        assert response.status_code == 400
        stored = client.get(f"/api/products/{product.id}").json()["data"]
        assert stored["price"] == 80

    def test_discount_unknown_product(self, client):
        response = client.patch("/api/products/missing/discount", json={"percentage": 10})
        assert response.status_code == 404

    def test_toggle_active_hides_product(self, client, seed, product_factory):
        (product,) = seed(product_factory())

        response = client.patch(f"/api/products/{product.id}/active")

        assert response.json()["data"]["active"] is False
        assert client.get("/api/products").json()["data"]["total"] == 0

    def test_bulk_insert_reports_duplicates(self, client):
        products = [
            {"title": "A", "price": 1, "external_id": 1},
            {"title": "B", "price": 2, "external_id": 1},
            {"title": "C", "price": 3, "external_id": 2},
        ]

        response = client.post("/api/products/bulk", json={"products": products})

        assert response.status_code == 201
        assert response.json()["data"] == {"inserted_count": 2, "duplicates": 1, "failed": 0}

    @pytest.mark.parametrize("body", [{}, {"products": "nope"}, {"products": {"a": 1}}])
    def test_bulk_requires_list(self, client, body):
        response = client.post("/api/products/bulk", json=body)

        assert response.status_code == 400
        assert response.json()["message"] == "'products' must be a list of products"


class TestSync:
    def test_sync_dummy(self, client, seed, product_factory):
        seed(product_factory(title="Stale", metadata=ProductMetadata(source="dummyjson")))

        response = client.post("/api/products/sync-dummy")

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["imported_count"] == 3
        assert data["deleted_count"] == 1
        titles = [p["title"] for p in client.get("/api/products").json()["data"]["products"]]
        assert "Stale" not in titles

    def test_sync_dummy_upstream_failure(self, client, app_dependencies, catalog_client_factory):
        app_dependencies.catalog_client = catalog_client_factory(status_code=500, payload={})

        response = client.post("/api/products/sync-dummy")

        assert response.status_code == 502
        assert response.json()["success"] is False

    def test_sync_dummy_nothing_to_import(self, client, app_dependencies, catalog_client_factory):
        app_dependencies.catalog_client = catalog_client_factory([])

        assert client.post("/api/products/sync-dummy").status_code == 404

    def test_sync_legacy(self, client):
        first = client.post("/api/products/sync-legacy")
        second = client.post("/api/products/sync-legacy")

        assert first.status_code == 201
        assert first.json()["data"]["upserted_count"] == 3
        assert second.json()["data"]["modified_count"] == 3
