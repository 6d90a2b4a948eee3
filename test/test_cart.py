def test_cart_requires_login(client, catalog):
    assert client.get("/api/cart").status_code == 401
    assert client.post("/api/cart", json={"product_id": catalog["mug"]}).status_code == 401


def test_add_merges_quantities(client, catalog, signup):
    signup("alice")
    first = client.post("/api/cart", json={"product_id": catalog["mug"], "quantity": 2})
    assert first.status_code == 201
    assert first.json()["product"]["sku"] == "MUG-1"

    again = client.post("/api/cart", json={"product_id": catalog["mug"]})
    assert again.json()["id"] == first.json()["id"]
    assert again.json()["quantity"] == 3

    cart = client.get("/api/cart").json()
    assert len(cart) == 1
    assert cart[0]["quantity"] == 3


def test_add_rejects_bad_input(client, catalog, signup, as_admin):
    as_admin()
    client.put(f"/api/products/{catalog['novel']}", json={"is_active": False})

    signup("alice")
    assert client.post("/api/cart", json={"product_id": 9999}).status_code == 404
    assert client.post("/api/cart", json={"product_id": catalog["novel"]}).status_code == 404
    assert client.post("/api/cart", json={"product_id": catalog["mug"], "quantity": 0}).status_code == 400


def test_update_and_remove(client, catalog, signup):
    signup("alice")
    item = client.post("/api/cart", json={"product_id": catalog["mug"]}).json()

    updated = client.put(f"/api/cart/{item['id']}", json={"quantity": 4})
    assert updated.status_code == 200
    assert updated.json()["quantity"] == 4
    assert client.put(f"/api/cart/{item['id']}", json={"quantity": 0}).status_code == 400
    assert client.put("/api/cart/9999", json={"quantity": 1}).status_code == 404

    assert client.delete(f"/api/cart/{item['id']}").status_code == 204
    assert client.get("/api/cart").json() == []
    assert client.delete(f"/api/cart/{item['id']}").status_code == 404


def test_cart_items_are_private(client, catalog, signup):
    signup("alice")
    item = client.post("/api/cart", json={"product_id": catalog["mug"]}).json()

    signup("bob")
    assert client.get("/api/cart").json() == []
    assert client.put(f"/api/cart/{item['id']}", json={"quantity": 9}).status_code == 404
    assert client.delete(f"/api/cart/{item['id']}").status_code == 404


def test_clear_cart(client, catalog, signup):
    signup("alice")
    client.post("/api/cart", json={"product_id": catalog["mug"]})
    client.post("/api/cart", json={"product_id": catalog["lamp"]})
    assert len(client.get("/api/cart").json()) == 2

    assert client.delete("/api/cart/clear").status_code == 204
    assert client.get("/api/cart").json() == []


def test_cart_summary(client, catalog, signup):
    signup("alice")
    empty = client.get("/api/cart/summary").json()
    assert empty["item_count"] == 0
    assert empty["total"] == "0.00"
    assert empty["shipping"] == "0.00"

    client.post("/api/cart", json={"product_id": catalog["mug"], "quantity": 2})
    small = client.get("/api/cart/summary").json()
    assert small == {
        "item_count": 2,
        "subtotal": "40.00",
        "discount": "0.00",
        "tax": "3.20",
        "shipping": "9.99",
        "total": "53.19",
        "coupon_code": None,
    }

    # sale price applies to the lamp, pushing the cart past free shipping
    client.post("/api/cart", json={"product_id": catalog["lamp"]})
    large = client.get("/api/cart/summary").json()
    assert large["subtotal"] == "100.00"
    assert large["shipping"] == "0.00"
    assert large["total"] == "108.00"


def test_cart_summary_with_coupon(client, catalog, signup, as_admin):
    as_admin()
    client.post("/api/coupons", json={"code": "ten", "discount_type": "fixed", "discount_value": 10})

    signup("alice")
    client.post("/api/cart", json={"product_id": catalog["lamp"]})
    summary = client.get("/api/cart/summary", params={"coupon_code": "TEN"}).json()
    assert summary["coupon_code"] == "TEN"
    assert summary["discount"] == "10.00"
    assert summary["tax"] == "4.00"
    assert summary["total"] == "54.00"

    missing = client.get("/api/cart/summary", params={"coupon_code": "NOPE"})
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Coupon not found"


def test_wishlist(client, catalog, signup):
    assert client.get("/api/wishlist").status_code == 401
    signup("alice")

    added = client.post("/api/wishlist", json={"product_id": catalog["lamp"]})
    assert added.status_code == 201
    assert added.json()["product"]["name"] == "Desk Lamp"

    duplicate = client.post("/api/wishlist", json={"product_id": catalog["lamp"]})
    assert duplicate.status_code == 400
    assert duplicate.json()["detail"] == "Item already in wishlist"
    assert client.post("/api/wishlist", json={"product_id": 9999}).status_code == 404

    items = client.get("/api/wishlist").json()
    assert [i["product_id"] for i in items] == [catalog["lamp"]]

    signup("bob")
    assert client.get("/api/wishlist").json() == []
    assert client.delete(f"/api/wishlist/{items[0]['id']}").status_code == 404

    client.post("/api/logout")
    client.post("/api/login", json={"username": "alice", "password": "secret123"})
    assert client.delete(f"/api/wishlist/{items[0]['id']}").status_code == 204
    assert client.get("/api/wishlist").json() == []


def test_deleted_product_leaves_cart_and_wishlist(client, catalog, signup, as_admin):
    signup("alice")
    client.post("/api/cart", json={"product_id": catalog["mug"]})
    client.post("/api/wishlist", json={"product_id": catalog["mug"]})

    as_admin()
    assert client.delete(f"/api/products/{catalog['mug']}").status_code == 204

    client.post("/api/login", json={"username": "alice", "password": "secret123"})
    assert client.get("/api/cart").json() == []
    assert client.get("/api/wishlist").json() == []
