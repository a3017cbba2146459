import pytest
from sqlmodel import select

from bazarika.models.inventory_log import InventoryLog
from bazarika.models.order import Order


@pytest.fixture()
def place(client, make_profile, make_address, make_product):
    """Place an order for the default customer and return (order json, product)."""
    def _place(headers, quantity=2, stock=5):
        make_profile()
        address = make_address()
        product = make_product("Nakshi Kantha", price=1200, stock_quantity=stock)
        client.post("/cart/items", json={"product_id": product.id, "quantity": quantity}, headers=headers)
        response = client.post("/checkout/place-order", json={"address_id": address.id}, headers=headers)
        assert response.status_code == 201
        return response.json()["order"], product

    return _place


class TestMyOrders:
    def test_list_my_orders(self, client, place, customer_headers, other_headers):
        order, _ = place(customer_headers)

        mine = client.get("/orders/", headers=customer_headers).json()
        theirs = client.get("/orders/", headers=other_headers).json()

        assert [o["order_number"] for o in mine] == [order["order_number"]]
        assert theirs == []

    def test_order_details_with_items(self, client, place, customer_headers):
        order, product = place(customer_headers)

        data = client.get(f"/orders/{order['id']}", headers=customer_headers).json()

        assert data["order_number"] == order["order_number"]
        assert data["items"][0]["product_id"] == product.id
        assert data["items"][0]["product_price"] == 1200

    def test_other_customers_cannot_see_order(self, client, place, customer_headers, other_headers):
        order, _ = place(customer_headers)

        assert client.get(f"/orders/{order['id']}", headers=other_headers).status_code == 404

    def test_requires_sign_in(self, client):
        assert client.get("/orders/").status_code == 401


class TestCancelOrder:
    def test_cancel_pending_order_restocks(self, client, session, place, customer_headers):
        order, product = place(customer_headers, quantity=2, stock=5)

        response = client.post(f"/orders/{order['id']}/cancel", headers=customer_headers)

        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"

        session.refresh(product)
        assert product.stock_quantity == 5

        restock = session.exec(
            select(InventoryLog).where(InventoryLog.reason == "cancellation")
        ).one()
        assert restock.quantity_change == 2
        assert restock.previous_quantity == 3
        assert restock.new_quantity == 5

    def test_cancel_confirmed_order_restocks(self, client, session, place, customer_headers):
        order, product = place(customer_headers, quantity=2, stock=5)
        row = session.get(Order, order["id"])
        row.status = "confirmed"
        session.add(row)
        session.commit()

        response = client.post(f"/orders/{order['id']}/cancel", headers=customer_headers)

        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"

        session.refresh(product)
        assert product.stock_quantity == 5

        restock = session.exec(
            select(InventoryLog).where(InventoryLog.reason == "cancellation")
        ).one()
        assert restock.quantity_change == 2
        assert restock.reference_id == order["order_number"]

    def test_cannot_cancel_once_processing(self, client, session, place, customer_headers):
        order, _ = place(customer_headers)
        row = session.get(Order, order["id"])
        row.status = "processing"
        session.add(row)
        session.commit()

        response = client.post(f"/orders/{order['id']}/cancel", headers=customer_headers)

        assert response.status_code == 400
        assert response.json()["detail"] == "Order cannot be cancelled once it is processing"

    def test_cannot_cancel_twice(self, client, place, customer_headers):
        order, _ = place(customer_headers)
        client.post(f"/orders/{order['id']}/cancel", headers=customer_headers)

        response = client.post(f"/orders/{order['id']}/cancel", headers=customer_headers)

        assert response.status_code == 400


class TestAdminOrders:
    def test_list_with_search_and_status(self, client, place, customer_headers, admin_headers):
        order, _ = place(customer_headers)

        by_number = client.get(
            "/admin/orders/", params={"search": order["order_number"]}, headers=admin_headers
        ).json()
        by_name = client.get("/admin/orders/", params={"search": "asha"}, headers=admin_headers).json()
        shipped = client.get("/admin/orders/", params={"status": "shipped"}, headers=admin_headers).json()

        assert by_number["total_items"] == 1
        assert by_name["results"][0]["customer_name"] == "Asha Rahman"
        assert shipped["total_items"] == 0

    def test_search_wildcards_match_literally(self, client, place, customer_headers, admin_headers):
        place(customer_headers)

        for term in ("%", "_"):
            data = client.get("/admin/orders/", params={"search": term}, headers=admin_headers).json()
            assert data["total_items"] == 0

    def test_detail_includes_customer(self, client, place, customer_headers, admin_headers):
        order, _ = place(customer_headers)

        data = client.get(f"/admin/orders/{order['id']}", headers=admin_headers).json()

        assert data["customer"]["email"] == "asha@example.com"
        assert len(data["items"]) == 1

    def test_status_follows_allowed_transitions(self, client, place, customer_headers, admin_headers):
        order, _ = place(customer_headers)
        url = f"/admin/orders/{order['id']}/status"

        for status in ("confirmed", "processing", "shipped", "delivered"):
            response = client.patch(url, json={"status": status}, headers=admin_headers)
            assert response.status_code == 200
            assert response.json()["status"] == status

        response = client.patch(url, json={"status": "cancelled"}, headers=admin_headers)
        assert response.status_code == 400

    def test_skipping_a_step_is_rejected(self, client, place, customer_headers, admin_headers):
        order, _ = place(customer_headers)

        response = client.patch(
            f"/admin/orders/{order['id']}/status", json={"status": "shipped"}, headers=admin_headers
        )

        assert response.status_code == 400
        assert "pending" in response.json()["detail"]

    def test_admin_cancel_restocks(self, client, session, place, customer_headers, admin_headers):
        order, product = place(customer_headers, quantity=3, stock=4)
        client.patch(f"/admin/orders/{order['id']}/status", json={"status": "confirmed"}, headers=admin_headers)
        client.patch(f"/admin/orders/{order['id']}/status", json={"status": "processing"}, headers=admin_headers)

        client.patch(f"/admin/orders/{order['id']}/status", json={"status": "cancelled"}, headers=admin_headers)

        session.refresh(product)
        assert product.stock_quantity == 4

    def test_update_payment_status(self, client, session, place, customer_headers, admin_headers):
        order, _ = place(customer_headers)

        response = client.patch(
            f"/admin/orders/{order['id']}/payment-status",
            json={"payment_status": "paid"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert session.get(Order, order["id"]).payment_status == "paid"

    def test_unknown_status_is_rejected(self, client, place, customer_headers, admin_headers):
        order, _ = place(customer_headers)

        response = client.patch(
            f"/admin/orders/{order['id']}/status", json={"status": "lost"}, headers=admin_headers
        )

        assert response.status_code == 422

    def test_customers_are_forbidden(self, client, customer_headers):
        assert client.get("/admin/orders/", headers=customer_headers).status_code == 403
