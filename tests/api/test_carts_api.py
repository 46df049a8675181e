"""
Testy REST /api/v1/carts przez TestClient.
Prawdziwy serwis + repo na sqlite, bez mocków.
"""
from decimal import Decimal
from uuid import uuid4

from fastapi.testclient import TestClient

BASE = "/api/v1/carts"

IPHONE = {"productId": "product-001", "productName": "iPhone 15", "price": "999.99", "quantity": 1}
MACBOOK = {"productId": "product-002", "productName": "MacBook Pro", "price": "2499.99", "quantity": 1}


def dec(value) -> Decimal:
    # kwoty w JSON jako string, str() obsługuje też liczbę
    return Decimal(str(value))


def assert_item(item: dict, product_id: str, name: str, price: str, quantity: int, total: str):
    assert item["id"]
    assert item["productId"] == product_id
    assert item["productName"] == name
    assert dec(item["price"]) == Decimal(price)
    assert item["quantity"] == quantity
    assert dec(item["totalPrice"]) == Decimal(total)
    assert item["createdAt"]
    assert item["updatedAt"]


class TestCartFlow:

    def test_full_cart_lifecycle(self, client: TestClient):
        # get-or-create
        response = client.get(BASE, params={"userId": "user123"})
        assert response.status_code == 200
        body = response.json()
        cart_id = body["id"]
        assert body["userId"] == "user123"
        assert body["items"] == []
        assert dec(body["totalAmount"]) == Decimal("0")
        assert body["createdAt"] and body["updatedAt"]

        # add item 1
        response = client.post(f"{BASE}/items", params={"userId": "user123"}, json=IPHONE)
        assert response.status_code == 200
        body = response.json()
        assert body["id"] == cart_id
        assert len(body["items"]) == 1
        assert_item(body["items"][0], "product-001", "iPhone 15", "999.99", 1, "999.99")
        assert dec(body["totalAmount"]) == Decimal("999.99")

        # add item 2
        response = client.post(f"{BASE}/items", params={"userId": "user123"}, json=MACBOOK)
        assert response.status_code == 200
        body = response.json()
        assert len(body["items"]) == 2
        assert_item(body["items"][0], "product-001", "iPhone 15", "999.99", 1, "999.99")
        assert_item(body["items"][1], "product-002", "MacBook Pro", "2499.99", 1, "2499.99")
        assert dec(body["totalAmount"]) == Decimal("3499.98")
        assert body["itemCount"] == 2

        # update quantity of first item
        item_id = client.get(BASE, params={"userId": "user123"}).json()["items"][0]["id"]
        response = client.patch(f"{BASE}/items/{item_id}", params={"userId": "user123"}, json={"quantity": 3})
        assert response.status_code == 200
        body = response.json()
        assert_item(body["items"][0], "product-001", "iPhone 15", "999.99", 3, "2999.97")
        assert_item(body["items"][1], "product-002", "MacBook Pro", "2499.99", 1, "2499.99")
        assert dec(body["totalAmount"]) == Decimal("5499.96")

        # remove first item
        response = client.delete(f"{BASE}/items/{item_id}", params={"userId": "user123"})
        assert response.status_code == 200
        body = response.json()
        assert len(body["items"]) == 1
        assert_item(body["items"][0], "product-002", "MacBook Pro", "2499.99", 1, "2499.99")
        assert dec(body["totalAmount"]) == Decimal("2499.99")

        # get by id
        response = client.get(f"{BASE}/{cart_id}")
        assert response.status_code == 200
        assert response.json()["id"] == cart_id

        # delete cart
        response = client.delete(BASE, params={"userId": "user123"})
        assert response.status_code == 200
        assert response.json() == {"message": "Cart deleted successfully"}

        assert client.get(f"{BASE}/{cart_id}").status_code == 404

    def test_clear_cart(self, client: TestClient):
        client.post(f"{BASE}/items", params={"userId": "user123"}, json=IPHONE)

        response = client.delete(f"{BASE}/items", params={"userId": "user123"})

        assert response.status_code == 200
        assert response.json() == {"message": "Cart cleared successfully"}
        assert client.get(BASE, params={"userId": "user123"}).json()["items"] == []


class TestCartErrors:

    def test_unknown_cart_id(self, client: TestClient):
        response = client.get(f"{BASE}/{uuid4()}")
        assert response.status_code == 404

    def test_foreign_cart(self, client: TestClient):
        cart_id = client.get(BASE, params={"userId": "alice"}).json()["id"]

        response = client.get(f"{BASE}/{cart_id}", params={"userId": "bob"})

        assert response.status_code == 403

    def test_update_unknown_item(self, client: TestClient):
        client.post(f"{BASE}/items", params={"userId": "user123"}, json=IPHONE)

        response = client.patch(f"{BASE}/items/{uuid4()}", params={"userId": "user123"}, json={"quantity": 2})

        assert response.status_code == 404

    def test_delete_without_cart(self, client: TestClient):
        response = client.delete(BASE, params={"userId": "nobody"})
        assert response.status_code == 404

    def test_blank_product_id_is_rejected_by_service(self, client: TestClient):
        payload = {**IPHONE, "productId": "   "}

        response = client.post(f"{BASE}/items", params={"userId": "user123"}, json=payload)

        assert response.status_code == 400

    def test_schema_validation(self, client: TestClient):
        for payload in (
            {**IPHONE, "quantity": 0},
            {**IPHONE, "price": "-1"},
            {"productId": "p1"},
            {**IPHONE, "price": "0.001"},
            {**IPHONE, "price": "123456789012.5"},
            {**IPHONE, "quantity": 2**31},
        ):
            response = client.post(f"{BASE}/items", params={"userId": "user123"}, json=payload)
            assert response.status_code == 422
        assert client.get(BASE, params={"userId": "user123"}).json()["items"] == []

    def test_update_quantity_beyond_integer_range(self, client: TestClient):
        item_id = client.post(f"{BASE}/items", params={"userId": "user123"}, json=IPHONE).json()["items"][0]["id"]

        response = client.patch(f"{BASE}/items/{item_id}", params={"userId": "user123"}, json={"quantity": 2**31})

        assert response.status_code == 422

    def test_user_id_is_required(self, client: TestClient):
        assert client.get(BASE).status_code == 422


def test_health(client: TestClient):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
