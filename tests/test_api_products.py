"""Tests for product, category and supplier endpoints."""
import uuid

import pytest

from stockroom.services.repositories import ProductRepository


def create_category(client, headers, name="Beverages"):
    response = client.post("/api/v1/categories", json={"name": name}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def create_supplier(client, headers, email="orders@acme.example.com"):
    response = client.post(
        "/api/v1/suppliers",
        json={"name": "Acme", "email": email, "contact_person": "Jo"},
        headers=headers
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestProducts:
    """Tests for /products."""

    def test_create_with_initial_stock(self, client, auth_headers):
        response = client.post(
            "/api/v1/products",
            json={"name": "Cola", "unit": "can", "stock": 12},
            headers=auth_headers
        )

        assert response.status_code == 201
        data = response.json()
        assert data["stock"] == 12
        assert data["status"] == "active"
        assert data["unique_code"].startswith("PRD-")

    def test_create_without_stock_is_out_of_stock(self, client, auth_headers, product_factory):
        assert product_factory()["status"] == "out-of-stock"

    def test_code_prefix_comes_from_category(self, client, auth_headers, product_factory):
        category = create_category(client, auth_headers)

        product = product_factory(stock=1, category_id=category["id"])

        assert product["category_id"] == category["id"]
        assert product["unique_code"].startswith("Beverages-")

    def test_codes_are_unique(self, client, auth_headers, product_factory):
        codes = {product_factory()["unique_code"] for _ in range(5)}

        assert len(codes) == 5

    def test_negative_initial_stock_rejected(self, client, auth_headers):
        response = client.post(
            "/api/v1/products",
            json={"name": "Cola", "unit": "can", "stock": -1},
            headers=auth_headers
        )

        assert response.status_code == 422

    def test_unknown_category_rejected(self, client, auth_headers):
        response = client.post(
            "/api/v1/products",
            json={"name": "Cola", "unit": "can", "category_id": str(uuid.uuid4())},
            headers=auth_headers
        )

        assert response.status_code == 422

    def test_foreign_supplier_rejected(self, client, auth_headers, other_auth_headers):
        supplier = create_supplier(client, other_auth_headers)

        response = client.post(
            "/api/v1/products",
            json={"name": "Cola", "unit": "can", "supplier_id": supplier["id"]},
            headers=auth_headers
        )

        assert response.status_code == 422

    def test_list_search_and_status_filter(self, client, auth_headers, product_factory):
        product_factory(stock=3, name="Green Tea")
        product_factory(stock=0, name="Black Tea")
        product_factory(stock=3, name="Coffee")

        response = client.get("/api/v1/products?search=tea", headers=auth_headers)
        assert response.json()["total"] == 2

        response = client.get("/api/v1/products?status=out-of-stock", headers=auth_headers)
        assert [item["name"] for item in response.json()["items"]] == ["Black Tea"]

    def test_products_are_scoped_to_owner(self, client, auth_headers, other_auth_headers, product_factory):
        product = product_factory(stock=3)

        assert client.get("/api/v1/products", headers=other_auth_headers).json()["total"] == 0
        response = client.get(f"/api/v1/products/{product['id']}", headers=other_auth_headers)
        assert response.status_code == 404

    def test_initial_stock_above_column_limit_rejected(self, client, auth_headers):
        response = client.post(
            "/api/v1/products",
            json={"name": "Cola", "unit": "can", "stock": 2**63},
            headers=auth_headers
        )

        assert response.status_code == 422

    @pytest.mark.parametrize("field", ["name", "unit"])
    def test_update_rejects_null_for_required_fields(self, client, auth_headers, product_factory, field):
        product = product_factory(stock=3)

        response = client.put(
            f"/api/v1/products/{product['id']}",
            json={field: None},
            headers=auth_headers
        )

        assert response.status_code == 422
        assert client.get(f"/api/v1/products/{product['id']}", headers=auth_headers).json()[field] == product[field]

    def test_writers_lock_the_product_row(self, client, auth_headers, product_factory, monkeypatch):
        product = product_factory(stock=0)
        lock_flags = []
        original = ProductRepository.get_for_owner

        async def recording_get_for_owner(self, product_id, owner_id, lock=False):
            lock_flags.append(lock)
            return await original(self, product_id, owner_id, lock=lock)

        monkeypatch.setattr(ProductRepository, "get_for_owner", recording_get_for_owner)
        url = f"/api/v1/products/{product['id']}"

        client.get(url, headers=auth_headers)
        assert client.put(url, json={"status": "active"}, headers=auth_headers).json()["status"] == "out-of-stock"
        assert client.delete(url, headers=auth_headers).status_code == 204

        assert lock_flags == [False, True, True]

    def test_update_rejects_stock(self, client, auth_headers, product_factory):
        product = product_factory(stock=3)

        response = client.put(
            f"/api/v1/products/{product['id']}",
            json={"stock": 100},
            headers=auth_headers
        )

        assert response.status_code == 422
        assert client.get(f"/api/v1/products/{product['id']}", headers=auth_headers).json()["stock"] == 3

    def test_update_rejects_out_of_stock_status(self, client, auth_headers, product_factory):
        product = product_factory(stock=3)

        response = client.put(
            f"/api/v1/products/{product['id']}",
            json={"status": "out-of-stock"},
            headers=auth_headers
        )

        assert response.status_code == 422

    def test_update_details(self, client, auth_headers, product_factory):
        product = product_factory(stock=3)

        response = client.put(
            f"/api/v1/products/{product['id']}",
            json={"name": "Renamed", "description": "Now with more fizz"},
            headers=auth_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Renamed"
        assert data["description"] == "Now with more fizz"
        assert data["unique_code"] == product["unique_code"]

    def test_category_change_regenerates_code(self, client, auth_headers, product_factory):
        product = product_factory(stock=3)
        category = create_category(client, auth_headers, name="Snacks")

        response = client.put(
            f"/api/v1/products/{product['id']}",
            json={"category_id": category["id"]},
            headers=auth_headers
        )

        assert response.json()["unique_code"].startswith("Snacks-")

    def test_reactivating_empty_product_stays_out_of_stock(self, client, auth_headers, product_factory):
        product = product_factory(stock=0)
        url = f"/api/v1/products/{product['id']}"

        assert client.put(url, json={"status": "discontinued"}, headers=auth_headers).json()["status"] == "discontinued"
        assert client.put(url, json={"status": "active"}, headers=auth_headers).json()["status"] == "out-of-stock"

    def test_delete_without_history(self, client, auth_headers, product_factory):
        product = product_factory(stock=3)

        response = client.delete(f"/api/v1/products/{product['id']}", headers=auth_headers)

        assert response.status_code == 204
        assert client.get(f"/api/v1/products/{product['id']}", headers=auth_headers).status_code == 404

    def test_delete_with_history_is_refused(self, client, auth_headers, product_factory):
        product = product_factory(stock=3)
        client.post(
            "/api/v1/stock/transactions",
            json={"product_id": product["id"], "transaction_type": "out", "quantity": 1},
            headers=auth_headers
        )

        response = client.delete(f"/api/v1/products/{product['id']}", headers=auth_headers)

        assert response.status_code == 409
        assert client.get(f"/api/v1/products/{product['id']}", headers=auth_headers).status_code == 200


class TestCategories:
    """Tests for /categories."""

    def test_create_and_list(self, client, auth_headers):
        create_category(client, auth_headers, name="Snacks")
        create_category(client, auth_headers, name="Beverages")

        response = client.get("/api/v1/categories", headers=auth_headers)

        assert [c["name"] for c in response.json()] == ["Beverages", "Snacks"]

    def test_duplicate_name_conflicts(self, client, auth_headers):
        create_category(client, auth_headers)

        response = client.post("/api/v1/categories", json={"name": "Beverages"}, headers=auth_headers)

        assert response.status_code == 409

    def test_requires_authentication(self, client):
        assert client.get("/api/v1/categories").status_code == 401


class TestSuppliers:
    """Tests for /suppliers."""

    def test_crud(self, client, auth_headers):
        supplier = create_supplier(client, auth_headers)
        url = f"/api/v1/suppliers/{supplier['id']}"

        assert client.get(url, headers=auth_headers).json()["name"] == "Acme"

        response = client.put(url, json={"status": "inactive"}, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "inactive"

        assert client.delete(url, headers=auth_headers).status_code == 204
        assert client.get(url, headers=auth_headers).status_code == 404

    @pytest.mark.parametrize("field", ["name", "email", "status"])
    def test_update_rejects_null_for_required_fields(self, client, auth_headers, field):
        supplier = create_supplier(client, auth_headers)

        response = client.put(
            f"/api/v1/suppliers/{supplier['id']}",
            json={field: None},
            headers=auth_headers
        )

        assert response.status_code == 422

    def test_duplicate_email_conflicts(self, client, auth_headers, other_auth_headers):
        create_supplier(client, auth_headers)

        response = client.post(
            "/api/v1/suppliers",
            json={"name": "Copycat", "email": "orders@acme.example.com"},
            headers=other_auth_headers
        )

        assert response.status_code == 409

    def test_suppliers_are_scoped_to_owner(self, client, auth_headers, other_auth_headers):
        supplier = create_supplier(client, auth_headers)

        assert client.get("/api/v1/suppliers", headers=other_auth_headers).json() == []
        response = client.get(f"/api/v1/suppliers/{supplier['id']}", headers=other_auth_headers)
        assert response.status_code == 404

    def test_deleting_supplier_detaches_products(self, client, auth_headers, product_factory):
        supplier = create_supplier(client, auth_headers)
        product = product_factory(stock=1, supplier_id=supplier["id"])

        client.delete(f"/api/v1/suppliers/{supplier['id']}", headers=auth_headers)

        response = client.get(f"/api/v1/products/{product['id']}", headers=auth_headers)
        assert response.json()["supplier_id"] is None
