from sqlmodel import select

from bazarika.models.cart import Cart, CartItem
from bazarika.models.category import Category
from bazarika.models.inventory_log import InventoryLog
from bazarika.models.order import Order
from bazarika.models.order_item import OrderItem
from bazarika.models.product import Product


def add_order(session, user_id, number, total, status="pending"):
    order = Order(
        order_number=number,
        user_id=user_id,
        status=status,
        subtotal=total,
        shipping_cost=0,
        total=total,
        shipping_address={"city": "Dhaka"},
    )
    session.add(order)
    session.commit()
    session.refresh(order)
    return order


class TestAdminGate:
    def test_customer_is_forbidden(self, client, customer_headers):
        response = client.get("/admin/dashboard", headers=customer_headers)

        assert response.status_code == 403
        assert response.json()["detail"] == "Admin access required"

    def test_anonymous_is_unauthorized(self, client):
        assert client.get("/admin/dashboard").status_code == 401


class TestDashboard:
    def test_cards_and_lists(self, client, session, make_profile, make_product, admin_headers):
        make_profile()
        make_product("Plenty", stock_quantity=50)
        make_product("Almost Gone", stock_quantity=2)
        make_product("Sold Out", stock_quantity=0)
        make_product("Retired", stock_quantity=1, is_active=False)
        add_order(session, "user-1", "BZK-20260101-0001", 1000)
        add_order(session, "user-1", "BZK-20260101-0002", 2500, status="delivered")
        add_order(session, "user-1", "BZK-20260101-0003", 800, status="cancelled")

        data = client.get("/admin/dashboard", headers=admin_headers).json()

        assert data["cards"] == {
            "total_products": 4,
            "total_orders": 3,
            "pending_orders": 1,
            "total_users": 2,
            "total_revenue": 3500,
        }
        assert len(data["recent_orders"]) == 3
        assert [p["name"] for p in data["low_stock_products"]] == ["Sold Out", "Almost Gone"]
        assert data["admin_info"]["email"] == "owner@bazarika.test"


class TestAdminProducts:
    def test_create_with_generated_slug_and_stock_log(self, client, session, make_category, admin_headers):
        bags = make_category("Bags")

        response = client.post(
            "/admin/products/",
            json={"name": "Jute Tote Bag", "price": 650, "stock_quantity": 12, "category_id": bags.id},
            headers=admin_headers,
        )

        assert response.status_code == 201
        product = response.json()
        assert product["slug"] == "jute-tote-bag"
        assert product["stock_quantity"] == 12
        assert product["category"]["name"] == "Bags"

        log = session.exec(select(InventoryLog).where(InventoryLog.product_id == product["id"])).one()
        assert (log.previous_quantity, log.new_quantity, log.reason) == (0, 12, "restock")

    def test_duplicate_names_get_unique_slugs(self, client, admin_headers):
        client.post("/admin/products/", json={"name": "Tote", "price": 100}, headers=admin_headers)

        second = client.post("/admin/products/", json={"name": "Tote", "price": 120}, headers=admin_headers).json()

        assert second["slug"] == "tote-2"

    def test_invalid_category(self, client, admin_headers):
        response = client.post(
            "/admin/products/", json={"name": "Tote", "price": 100, "category_id": 42}, headers=admin_headers
        )
        assert response.status_code == 400

    def test_price_must_be_positive(self, client, admin_headers):
        response = client.post("/admin/products/", json={"name": "Free", "price": 0}, headers=admin_headers)
        assert response.status_code == 422

    def test_list_with_search_and_filters(self, client, make_category, make_product, admin_headers):
        bags = make_category("Bags")
        make_product("Jute Tote", category_id=bags.id, sku="JT-1")
        make_product("Silk Scarf", sku="SS-1", is_active=False)

        by_sku = client.get("/admin/products/", params={"search": "ss-"}, headers=admin_headers).json()
        by_category = client.get("/admin/products/", params={"category_id": bags.id}, headers=admin_headers).json()
        inactive = client.get("/admin/products/", params={"is_active": "false"}, headers=admin_headers).json()

        assert [p["name"] for p in by_sku["results"]] == ["Silk Scarf"]
        assert [p["name"] for p in by_category["results"]] == ["Jute Tote"]
        assert inactive["total_items"] == 1

    def test_search_treats_underscore_literally(self, client, make_product, admin_headers):
        make_product("Jute Tote", sku="JT_1")
        make_product("Jute Bag", sku="JT-1")

        data = client.get("/admin/products/", params={"search": "jt_"}, headers=admin_headers).json()

        assert [p["name"] for p in data["results"]] == ["Jute Tote"]

    def test_update(self, client, make_product, admin_headers):
        tote = make_product("Jute Tote", price=650)

        data = client.put(
            f"/admin/products/{tote.id}",
            json={"price": 700, "is_featured": True, "slug": "tote"},
            headers=admin_headers,
        ).json()

        assert data["price"] == 700
        assert data["is_featured"] is True
        assert data["slug"] == "tote"

    def test_delete_keeps_order_history(self, client, session, make_profile, make_product, admin_headers):
        make_profile()
        tote = make_product("Jute Tote", price=650)
        cart = Cart(user_id="user-1")
        session.add(cart)
        session.commit()
        session.add(CartItem(cart_id=cart.id, product_id=tote.id))
        order = add_order(session, "user-1", "BZK-20260101-0001", 650)
        session.add(OrderItem(
            order_id=order.id, product_id=tote.id, product_name="Jute Tote",
            product_price=650, quantity=1, total=650,
        ))
        session.commit()

        response = client.delete(f"/admin/products/{tote.id}", headers=admin_headers)

        assert response.status_code == 200
        assert session.exec(select(Product)).all() == []
        assert session.exec(select(CartItem)).all() == []
        item = session.exec(select(OrderItem)).one()
        assert item.product_id is None
        assert item.product_name == "Jute Tote"

    def test_images(self, client, make_product, admin_headers):
        tote = make_product("Jute Tote")

        first = client.post(
            f"/admin/products/{tote.id}/images", json={"url": "https://cdn.test/1.jpg"}, headers=admin_headers
        ).json()
        second = client.post(
            f"/admin/products/{tote.id}/images", json={"url": "https://cdn.test/2.jpg"}, headers=admin_headers
        ).json()

        assert (first["position"], second["position"]) == (0, 1)

        client.delete(f"/admin/products/{tote.id}/images/{first['id']}", headers=admin_headers)
        product = client.get(f"/admin/products/{tote.id}", headers=admin_headers).json()
        assert [i["url"] for i in product["images"]] == ["https://cdn.test/2.jpg"]

    def test_adjust_stock_and_log(self, client, make_product, admin_headers):
        tote = make_product("Jute Tote", stock_quantity=5)

        response = client.post(
            f"/admin/products/{tote.id}/stock",
            json={"quantity_change": -3, "reason": "damaged"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["stock_quantity"] == 2

        log = client.get(f"/admin/products/{tote.id}/inventory-log", headers=admin_headers).json()
        assert log[0]["reason"] == "damaged"
        assert (log[0]["previous_quantity"], log[0]["new_quantity"]) == (5, 2)

    def test_stock_cannot_go_negative(self, client, session, make_product, admin_headers):
        tote = make_product("Jute Tote", stock_quantity=1)

        response = client.post(
            f"/admin/products/{tote.id}/stock", json={"quantity_change": -2}, headers=admin_headers
        )

        assert response.status_code == 400
        session.refresh(tote)
        assert tote.stock_quantity == 1

    def test_zero_change_is_rejected(self, client, make_product, admin_headers):
        tote = make_product("Jute Tote")

        response = client.post(
            f"/admin/products/{tote.id}/stock", json={"quantity_change": 0}, headers=admin_headers
        )

        assert response.status_code == 400


class TestAdminCategories:
    def test_create_with_slug_from_name(self, client, admin_headers):
        response = client.post("/admin/categories/", json={"name": "Home Decor"}, headers=admin_headers)

        assert response.status_code == 201
        assert response.json()["slug"] == "home-decor"

    def test_duplicate_name(self, client, make_category, admin_headers):
        make_category("Bags")

        response = client.post("/admin/categories/", json={"name": "Bags"}, headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["detail"] == "Category already exists"

    def test_update(self, client, make_category, admin_headers):
        bags = make_category("Bags")

        data = client.put(
            f"/admin/categories/{bags.id}", json={"description": "Carry it all"}, headers=admin_headers
        ).json()

        assert data["description"] == "Carry it all"
        assert data["name"] == "Bags"

    def test_cannot_be_own_parent(self, client, make_category, admin_headers):
        bags = make_category("Bags")

        response = client.put(f"/admin/categories/{bags.id}", json={"parent_id": bags.id}, headers=admin_headers)

        assert response.status_code == 400

    def test_delete_uncategorises_products(self, client, session, make_category, make_product, admin_headers):
        bags = make_category("Bags")
        tote = make_product("Jute Tote", category_id=bags.id)

        assert client.delete(f"/admin/categories/{bags.id}", headers=admin_headers).status_code == 200

        assert session.exec(select(Category)).all() == []
        session.refresh(tote)
        assert tote.category_id is None


class TestAdminCoupons:
    def test_create_upper_cases_code(self, client, admin_headers):
        response = client.post(
            "/admin/coupons/",
            json={"code": "eid25", "discount_type": "percentage", "discount_value": 25, "max_discount_amount": 500},
            headers=admin_headers,
        )

        assert response.status_code == 201
        assert response.json()["code"] == "EID25"
        assert response.json()["used_count"] == 0

    def test_duplicate_code(self, client, make_coupon, admin_headers):
        make_coupon("EID25")

        response = client.post(
            "/admin/coupons/", json={"code": "Eid25", "discount_value": 10}, headers=admin_headers
        )

        assert response.status_code == 400

    def test_percentage_over_100(self, client, admin_headers):
        response = client.post(
            "/admin/coupons/", json={"code": "TOO", "discount_value": 120}, headers=admin_headers
        )
        assert response.status_code == 422

    def test_list_newest_first(self, client, make_coupon, admin_headers):
        make_coupon("FIRST")
        make_coupon("SECOND")

        codes = [c["code"] for c in client.get("/admin/coupons/", headers=admin_headers).json()]

        assert codes == ["SECOND", "FIRST"]

    def test_update_and_toggle(self, client, make_coupon, admin_headers):
        coupon = make_coupon("EID25")

        updated = client.put(
            f"/admin/coupons/{coupon.id}", json={"discount_type": "fixed", "discount_value": 300}, headers=admin_headers
        ).json()
        toggled = client.post(f"/admin/coupons/{coupon.id}/toggle", headers=admin_headers).json()

        assert (updated["discount_type"], updated["discount_value"]) == ("fixed", 300)
        assert toggled["message"] == "Coupon deactivated"
        assert toggled["coupon"]["is_active"] is False

    def test_delete(self, client, session, make_profile, make_coupon, admin_headers):
        make_profile()
        coupon = make_coupon("EID25")
        order = add_order(session, "user-1", "BZK-20260101-0001", 900)
        order.coupon_id = coupon.id
        session.add(order)
        session.commit()

        assert client.delete(f"/admin/coupons/{coupon.id}", headers=admin_headers).status_code == 200

        session.refresh(order)
        assert order.coupon_id is None
        assert order.total == 900
