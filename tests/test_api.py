"""Tests for the HTTP API."""

import pytest

API = "/api/v1"


@pytest.fixture
def admin(register, headers_for):
    return headers_for(register("Admin"), "admin")


@pytest.fixture
def shopper(register, headers_for):
    return headers_for(register("Shopper"))


@pytest.fixture
def make_product(client, admin):
    def _make(name="Headphones", price=50.0, stock=5):
        response = client.post(f"{API}/products/", json={"name": name, "price": price, "stock": stock}, headers=admin)
        assert response.status_code == 201, response.text
        return response.json()["data"]["product"]["id"]
    return _make


def _stock(client, product_id):
    return client.get(f"{API}/products/{product_id}").json()["data"]["product"]["stock"]


def _place_order(client, headers, product_id, quantity, payload):
    response = client.post(f"{API}/cart/", json={"product_id": product_id, "quantity": quantity}, headers=headers)
    assert response.status_code == 201, response.text
    response = client.post(f"{API}/orders/", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]["order"]


class TestHealthAndAuth:
    def test_health(self, client):
        response = client.get(f"{API}/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_login_and_me(self, client, register):
        register("Alice")
        response = client.post(f"{API}/auth/login", json={"email": "alice1@example.com", "password": "Secret@12345"})
        assert response.status_code == 200
        token = response.json()["access_token"]

        me = client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["email"] == "alice1@example.com"
        assert me.json()["role"] == "user"

    def test_wrong_password(self, client, register):
        register("Bob")
        response = client.post(f"{API}/auth/login", json={"email": "bob1@example.com", "password": "nope-nope"})
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"

    def test_orders_require_auth(self, client):
        response = client.get(f"{API}/orders/")
        assert response.status_code == 401
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "UNAUTHORIZED"

    def test_only_admins_create_products(self, client, shopper):
        response = client.post(f"{API}/products/", json={"name": "Nope", "price": 1.0, "stock": 1}, headers=shopper)
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "FORBIDDEN"


class TestProducts:
    def test_list_and_search(self, client, make_product):
        make_product(name="Blue Kettle")
        make_product(name="Red Toaster")

        everything = client.get(f"{API}/products/").json()["data"]["products"]
        kettles = client.get(f"{API}/products/?search=kettle").json()["data"]["products"]

        assert len(everything) == 2
        assert [p["name"] for p in kettles] == ["Blue Kettle"]

    def test_restock(self, client, admin, make_product):
        product = make_product(stock=2)
        response = client.post(f"{API}/products/{product}/restock", json={"quantity": 3}, headers=admin)
        assert response.status_code == 200
        assert response.json()["data"]["product"]["stock"] == 5

    def test_missing_product(self, client):
        response = client.get(f"{API}/products/404")
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"


class TestCart:
    def test_add_merges_and_reports_subtotal(self, client, shopper, make_product):
        product = make_product(price=12.5, stock=10)
        client.post(f"{API}/cart/", json={"product_id": product, "quantity": 1}, headers=shopper)
        client.post(f"{API}/cart/", json={"product_id": product, "quantity": 2}, headers=shopper)

        cart = client.get(f"{API}/cart/", headers=shopper).json()["data"]
        assert len(cart["items"]) == 1
        assert cart["items"][0]["quantity"] == 3
        assert cart["items"][0]["product"]["name"] == "Headphones"
        assert cart["subtotal"] == 37.5
        assert cart["item_count"] == 3

    def test_add_beyond_stock(self, client, shopper, make_product):
        product = make_product(stock=1)
        response = client.post(f"{API}/cart/", json={"product_id": product, "quantity": 2}, headers=shopper)
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INSUFFICIENT_STOCK"

    def test_update_and_remove(self, client, shopper, make_product):
        product = make_product(stock=10)
        item = client.post(f"{API}/cart/", json={"product_id": product}, headers=shopper).json()["data"]["item"]

        updated = client.put(f"{API}/cart/{item['id']}", json={"quantity": 4}, headers=shopper)
        assert updated.json()["data"]["item"]["quantity"] == 4

        removed = client.delete(f"{API}/cart/{item['id']}", headers=shopper)
        assert removed.status_code == 200
        assert client.get(f"{API}/cart/", headers=shopper).json()["data"]["items"] == []

    def test_unknown_product(self, client, shopper):
        response = client.post(f"{API}/cart/", json={"product_id": 999}, headers=shopper)
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"


class TestCheckout:
    def test_creates_order_with_totals(self, client, shopper, make_product, checkout_payload):
        product = make_product(price=50.0, stock=5)

        order = _place_order(client, shopper, product, 2, checkout_payload)

        assert order["status"] == "pending"
        assert order["payment_status"] == "pending"
        assert order["subtotal"] == 100.0
        assert order["tax"] == 8.0
        assert order["shipping"] == 0.0
        assert order["total"] == 108.0
        assert order["shipping_address"]["city"] == "Springfield"
        assert order["items"][0]["name"] == "Headphones"
        assert order["items"][0]["quantity"] == 2
        assert _stock(client, product) == 3
        assert client.get(f"{API}/cart/", headers=shopper).json()["data"]["items"] == []

    def test_flat_shipping(self, client, shopper, make_product, checkout_payload):
        product = make_product(name="Mug", price=30.0, stock=5)
        order = _place_order(client, shopper, product, 1, checkout_payload)
        assert (order["subtotal"], order["tax"], order["shipping"], order["total"]) == (30.0, 2.4, 9.99, 42.39)

    def test_empty_cart(self, client, shopper, checkout_payload):
        response = client.post(f"{API}/orders/", json=checkout_payload, headers=shopper)
        assert response.status_code == 400
        assert response.json() == {"success": False, "error": {"message": "Cart is empty", "code": "EMPTY_CART"}}

    def test_validation_error(self, client, shopper, checkout_payload):
        del checkout_payload["billing_address"]
        response = client.post(f"{API}/orders/", json=checkout_payload, headers=shopper)
        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert "billing_address" in error["details"]

    def test_list_own_orders(self, client, shopper, make_product, checkout_payload):
        product = make_product(stock=10)
        first = _place_order(client, shopper, product, 1, checkout_payload)
        second = _place_order(client, shopper, product, 1, checkout_payload)

        body = client.get(f"{API}/orders/?page=1&page_size=1", headers=shopper).json()["data"]
        assert [o["id"] for o in body["data"]] == [second["id"]]
        assert body["pagination"] == {"page": 1, "page_size": 1, "total": 2, "total_pages": 2}
        assert first["id"] != second["id"]

    def test_other_users_order_is_not_found(self, client, register, headers_for, admin, make_product, checkout_payload):
        owner = headers_for(register("Owner"))
        stranger = headers_for(register("Stranger"))
        product = make_product()
        order = _place_order(client, owner, product, 1, checkout_payload)

        foreign = client.get(f"{API}/orders/{order['id']}", headers=stranger)
        missing = client.get(f"{API}/orders/999999", headers=stranger)
        assert foreign.status_code == missing.status_code == 404
        assert foreign.json() == missing.json()

        assert client.put(f"{API}/orders/{order['id']}/cancel", headers=stranger).status_code == 404
        assert client.get(f"{API}/orders/{order['id']}", headers=admin).status_code == 200

    def test_cancel_restores_stock(self, client, shopper, make_product, checkout_payload):
        product = make_product(stock=4)
        order = _place_order(client, shopper, product, 3, checkout_payload)
        assert _stock(client, product) == 1

        response = client.put(f"{API}/orders/{order['id']}/cancel", headers=shopper)

        assert response.status_code == 200
        assert response.json()["data"]["order"]["status"] == "cancelled"
        assert _stock(client, product) == 4

        again = client.put(f"{API}/orders/{order['id']}/cancel", headers=shopper)
        assert again.status_code == 400
        assert again.json()["error"]["code"] == "CANNOT_CANCEL"


class TestPayments:
    def test_methods(self, client):
        methods = client.get(f"{API}/payments/methods").json()["data"]["methods"]
        assert [m["id"] for m in methods] == ["credit_card", "paypal", "bank_transfer"]

    def test_decline_then_pay_then_reject_second_charge(self, client, shopper, make_product, checkout_payload):
        product = make_product()
        order = _place_order(client, shopper, product, 1, checkout_payload)

        declined = client.post(
            f"{API}/payments/process",
            json={"order_id": order["id"], "payment_details": {"card_number": "4000000000000002"}},
            headers=shopper,
        )
        assert declined.status_code == 400
        assert declined.json()["error"]["code"] == "PAYMENT_FAILED"
        after_decline = client.get(f"{API}/orders/{order['id']}", headers=shopper).json()["data"]["order"]
        assert after_decline["payment_status"] == "failed"
        assert after_decline["status"] == "pending"

        paid = client.post(
            f"{API}/payments/process",
            json={"order_id": order["id"], "payment_details": {"card_number": "4242424242424242"}},
            headers=shopper,
        )
        assert paid.status_code == 200
        data = paid.json()["data"]
        assert data["success"] is True
        assert data["transaction_id"].startswith("TXN-")
        assert data["order"]["status"] == "processing"
        assert data["order"]["payment_status"] == "completed"

        twice = client.post(f"{API}/payments/process", json={"order_id": order["id"]}, headers=shopper)
        assert twice.status_code == 400
        assert twice.json()["error"]["code"] == "ALREADY_PAID"

    def test_unknown_order(self, client, shopper):
        response = client.post(f"{API}/payments/process", json={"order_id": 4242}, headers=shopper)
        assert response.status_code == 404


class TestAdminOrders:
    def test_requires_admin(self, client, shopper):
        assert client.get(f"{API}/orders/admin", headers=shopper).status_code == 403
        response = client.put(f"{API}/orders/admin/1/status", json={"status": "shipped"}, headers=shopper)
        assert response.status_code == 403

    def test_list_with_status_filter(self, client, register, headers_for, admin, make_product, checkout_payload):
        product = make_product(stock=10)
        first = _place_order(client, headers_for(register("One")), product, 1, checkout_payload)
        _place_order(client, headers_for(register("Two")), product, 1, checkout_payload)
        client.put(f"{API}/orders/admin/{first['id']}/status", json={"status": "processing"}, headers=admin)

        everything = client.get(f"{API}/orders/admin", headers=admin).json()["data"]
        processing = client.get(f"{API}/orders/admin?status=processing", headers=admin).json()["data"]

        assert everything["pagination"]["total"] == 2
        assert [o["id"] for o in processing["data"]] == [first["id"]]
        owner = processing["data"][0]["user"]
        assert owner["first_name"] == "One"
        assert owner["last_name"] == "User"
        assert owner["email"].startswith("one")
        assert {o["user"]["first_name"] for o in everything["data"]} == {"One", "Two"}

    def test_status_transitions(self, client, shopper, admin, make_product, checkout_payload):
        product = make_product()
        order = _place_order(client, shopper, product, 1, checkout_payload)
        url = f"{API}/orders/admin/{order['id']}/status"

        skipped = client.put(url, json={"status": "delivered"}, headers=admin)
        assert skipped.status_code == 400
        assert skipped.json()["error"]["code"] == "INVALID_STATUS_TRANSITION"

        for status in ("processing", "shipped"):
            response = client.put(url, json={"status": status}, headers=admin)
            assert response.status_code == 200
            assert response.json()["data"]["order"]["status"] == status

        cancel = client.put(f"{API}/orders/{order['id']}/cancel", headers=shopper)
        assert cancel.json()["error"]["code"] == "CANNOT_CANCEL"

    def test_unknown_status_value(self, client, admin):
        response = client.put(f"{API}/orders/admin/1/status", json={"status": "lost"}, headers=admin)
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_unknown_order(self, client, admin):
        response = client.put(f"{API}/orders/admin/999/status", json={"status": "processing"}, headers=admin)
        assert response.status_code == 404
