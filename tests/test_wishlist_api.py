class TestWishlist:
    def test_add_and_list(self, client, make_product, customer_headers):
        kantha = make_product("Nakshi Kantha", price=1200)

        assert client.post(f"/wishlist/{kantha.id}", headers=customer_headers).json() == {
            "message": "Added to wishlist"
        }

        items = client.get("/wishlist/", headers=customer_headers).json()
        assert len(items) == 1
        assert items[0]["product_id"] == kantha.id
        assert items[0]["slug"] == "nakshi-kantha"

    def test_adding_twice_is_idempotent(self, client, make_product, customer_headers):
        kantha = make_product("Nakshi Kantha")
        client.post(f"/wishlist/{kantha.id}", headers=customer_headers)

        response = client.post(f"/wishlist/{kantha.id}", headers=customer_headers)

        assert response.json() == {"message": "Already in wishlist"}
        assert client.get("/wishlist/count", headers=customer_headers).json() == {"count": 1}

    def test_unknown_product(self, client, customer_headers):
        assert client.post("/wishlist/999", headers=customer_headers).status_code == 404

    def test_status_and_remove(self, client, make_product, customer_headers):
        kantha = make_product("Nakshi Kantha")
        client.post(f"/wishlist/{kantha.id}", headers=customer_headers)

        assert client.get(f"/wishlist/status/{kantha.id}", headers=customer_headers).json() == {"in_wishlist": True}

        assert client.delete(f"/wishlist/{kantha.id}", headers=customer_headers).status_code == 200
        assert client.get(f"/wishlist/status/{kantha.id}", headers=customer_headers).json() == {"in_wishlist": False}

    def test_remove_missing_item(self, client, make_product, customer_headers):
        kantha = make_product("Nakshi Kantha")
        assert client.delete(f"/wishlist/{kantha.id}", headers=customer_headers).status_code == 404

    def test_wishlists_are_per_user(self, client, make_product, customer_headers, other_headers):
        kantha = make_product("Nakshi Kantha")
        client.post(f"/wishlist/{kantha.id}", headers=customer_headers)

        assert client.get("/wishlist/count", headers=other_headers).json() == {"count": 0}

    def test_requires_sign_in(self, client):
        assert client.get("/wishlist/").status_code == 401
