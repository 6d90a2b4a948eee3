from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

import pytest

from shopmaster.errors import ConflictError
from shopmaster.storage import MemoryStorage


def make_user(storage, username="john"):
    return storage.create_user({
        "username": username,
        "email": f"{username}@example.com",
        "password": "not-a-real-hash",
        "first_name": "John",
        "last_name": "Doe",
    })


def make_product(storage, sku="SKU-1", **extra):
    values = {"name": f"Product {sku}", "description": "Something useful",
              "price": Decimal("10.00"), "sku": sku, "stock": 5}
    values.update(extra)
    return storage.create_product(values)


def test_insert_update_delete_category(storage):
    category = storage.create_category({"name": "Garden"})
    assert category.id is not None
    assert category.description is None
    assert category.created_at is not None

    updated = storage.update_category(category.id, {"description": "Outdoor things"})
    assert updated.description == "Outdoor things"
    assert storage.get_category(category.id).description == "Outdoor things"

    assert storage.delete_category(category.id) is True
    assert storage.get_category(category.id) is None
    assert storage.delete_category(category.id) is False
    assert storage.update_category(category.id, {"name": "x"}) is None


def test_user_lookups(storage):
    user = make_user(storage)
    assert user.is_admin is False
    assert storage.get_user_by_username("john").id == user.id
    assert storage.get_user_by_email("JOHN@example.com").id == user.id
    assert storage.get_user_by_username("nobody") is None
    assert storage.count_users() == 1


def test_product_filters(storage):
    tools = storage.create_category({"name": "Tools"})
    hammer = make_product(storage, "H-1", name="Claw Hammer", category_id=tools.id)
    make_product(storage, "S-1", name="Screwdriver", description="Flat head")
    make_product(storage, "OLD-1", name="Old Hammer", is_active=False)

    assert [p.sku for p in storage.get_products()] == ["H-1", "S-1"]
    assert [p.id for p in storage.get_products(category_id=tools.id)] == [hammer.id]
    assert [p.sku for p in storage.get_products(search="hammer")] == ["H-1"]
    assert [p.sku for p in storage.get_products(search="FLAT")] == ["S-1"]
    assert len(storage.get_products(include_inactive=True)) == 3
    assert storage.get_product_by_sku("S-1").name == "Screwdriver"


def test_deleting_category_detaches_products(storage):
    tools = storage.create_category({"name": "Tools"})
    hammer = make_product(storage, category_id=tools.id)
    storage.delete_category(tools.id)
    assert storage.get_product(hammer.id).category_id is None


def test_add_to_cart_merges_quantity(storage):
    user = make_user(storage)
    product = make_product(storage)

    first = storage.add_to_cart({"user_id": user.id, "product_id": product.id, "quantity": 2})
    second = storage.add_to_cart({"user_id": user.id, "product_id": product.id, "quantity": 3})

    assert second.id == first.id
    items = storage.get_cart_items(user.id)
    assert len(items) == 1
    assert items[0].quantity == 5


def test_cart_ownership(storage):
    alice = make_user(storage, "alice")
    bob = make_user(storage, "bob")
    product = make_product(storage)
    item = storage.add_to_cart({"user_id": alice.id, "product_id": product.id, "quantity": 1})

    assert storage.update_cart_item(item.id, bob.id, 9) is None
    assert storage.remove_from_cart(item.id, bob.id) is False
    assert storage.get_cart_item(item.id).quantity == 1

    assert storage.update_cart_item(item.id, alice.id, 4).quantity == 4
    assert storage.remove_from_cart(item.id, alice.id) is True
    assert storage.get_cart_items(alice.id) == []


def test_clear_cart_only_touches_one_user(storage):
    alice = make_user(storage, "alice")
    bob = make_user(storage, "bob")
    product = make_product(storage)
    storage.add_to_cart({"user_id": alice.id, "product_id": product.id, "quantity": 1})
    storage.add_to_cart({"user_id": bob.id, "product_id": product.id, "quantity": 1})

    storage.clear_cart(alice.id)

    assert storage.get_cart_items(alice.id) == []
    assert len(storage.get_cart_items(bob.id)) == 1


def test_delete_product_cleans_up_references(storage):
    user = make_user(storage)
    product = make_product(storage)
    storage.add_to_cart({"user_id": user.id, "product_id": product.id, "quantity": 1})
    storage.add_to_wishlist({"user_id": user.id, "product_id": product.id})
    storage.create_review({"product_id": product.id, "user_id": user.id, "rating": 4})
    order = storage.create_order({
        "user_id": user.id, "subtotal": Decimal("10.00"), "discount": Decimal("0.00"),
        "tax": Decimal("0.80"), "shipping": Decimal("9.99"), "total": Decimal("20.79"),
        "shipping_address": "1 Main St",
    })
    storage.create_order_item({"order_id": order.id, "product_id": product.id,
                               "product_name": product.name, "quantity": 1, "price": Decimal("10.00")})

    assert storage.delete_product(product.id) is True

    assert storage.get_cart_items(user.id) == []
    assert storage.get_wishlist_items(user.id) == []
    assert storage.get_product_reviews(product.id) == []
    items = storage.get_order_items(order.id)
    assert len(items) == 1
    assert items[0].product_id is None
    assert items[0].product_name == "Product SKU-1"


def test_review_delete_requires_author(storage):
    author = make_user(storage, "author")
    other = make_user(storage, "other")
    product = make_product(storage)
    review = storage.create_review({"product_id": product.id, "user_id": author.id, "rating": 5,
                                    "comment": "Great"})

    assert storage.delete_review(review.id, other.id) is False
    assert storage.delete_review(review.id, author.id) is True
    assert storage.get_review(review.id) is None


def test_orders_newest_first(storage):
    user = make_user(storage)
    other = make_user(storage, "other")
    base = {"subtotal": Decimal("1.00"), "discount": Decimal("0.00"), "tax": Decimal("0.08"),
            "shipping": Decimal("9.99"), "total": Decimal("11.07"), "shipping_address": "x"}
    first = storage.create_order({**base, "user_id": user.id})
    second = storage.create_order({**base, "user_id": other.id})
    third = storage.create_order({**base, "user_id": user.id})

    assert [o.id for o in storage.get_orders()] == [third.id, second.id, first.id]
    assert [o.id for o in storage.get_user_orders(user.id)] == [third.id, first.id]
    assert first.status == "pending"

    storage.update_order_status(first.id, "shipped")
    assert [o.id for o in storage.get_orders(status="shipped")] == [first.id]
    assert storage.update_order_status(9999, "shipped") is None


def test_coupon_lookup_is_case_insensitive_and_active_only(storage):
    coupon = storage.create_coupon({"code": "WELCOME10", "discount_type": "fixed",
                                    "discount_value": Decimal("10.00")})
    assert storage.get_coupon_by_code("welcome10").id == coupon.id

    storage.update_coupon(coupon.id, {"is_active": False})
    assert storage.get_coupon_by_code("WELCOME10") is None
    assert storage.get_coupon_by_code("WELCOME10", active_only=False).id == coupon.id

    assert storage.delete_coupon(coupon.id) is True
    assert storage.get_coupons() == []


def test_default_address_is_unique_per_user(storage):
    user = make_user(storage)
    base = {"user_id": user.id, "first_name": "John", "last_name": "Doe", "address": "1 Main St",
            "city": "Springfield", "state": "IL", "zip_code": "62701"}
    home = storage.create_address({**base, "is_default": True})
    work = storage.create_address({**base, "address": "9 Office Rd", "is_default": True})

    assert storage.get_address(home.id).is_default is False
    assert storage.get_address(work.id).is_default is True

    storage.update_address(home.id, user.id, {"is_default": True})
    assert storage.get_address(home.id).is_default is True
    assert storage.get_address(work.id).is_default is False
    assert home.country == "United States"


def test_address_ownership(storage):
    alice = make_user(storage, "alice")
    bob = make_user(storage, "bob")
    address = storage.create_address({"user_id": alice.id, "first_name": "A", "last_name": "L",
                                      "address": "1 Main St", "city": "C", "state": "S", "zip_code": "1"})
    assert storage.update_address(address.id, bob.id, {"city": "Elsewhere"}) is None
    assert storage.delete_address(address.id, bob.id) is False
    assert storage.delete_address(address.id, alice.id) is True
    assert storage.get_user_addresses(alice.id) == []


def test_unique_sku(storage):
    make_product(storage, "DUP-1")
    with pytest.raises(ConflictError):
        make_product(storage, "DUP-1")
    # storage is usable after the conflict
    assert storage.get_product_by_sku("DUP-1") is not None
    assert storage.count_products() == 1


def test_unique_user_fields(storage):
    make_user(storage, "john")
    with pytest.raises(ConflictError):
        make_user(storage, "john")
    with pytest.raises(ConflictError):
        storage.create_user({"username": "johnny", "email": "john@example.com", "password": "x",
                             "first_name": "J", "last_name": "D"})
    assert storage.count_users() == 1


def test_unique_category_and_coupon(storage):
    storage.create_category({"name": "Tools"})
    with pytest.raises(ConflictError):
        storage.create_category({"name": "Tools"})

    coupon = {"code": "WELCOME10", "discount_type": "fixed", "discount_value": Decimal("10.00")}
    storage.create_coupon(coupon)
    with pytest.raises(ConflictError):
        storage.create_coupon(dict(coupon))
    assert len(storage.get_coupons()) == 1


def test_unique_wishlist_entry(storage):
    user = make_user(storage)
    product = make_product(storage)
    storage.add_to_wishlist({"user_id": user.id, "product_id": product.id})
    with pytest.raises(ConflictError):
        storage.add_to_wishlist({"user_id": user.id, "product_id": product.id})
    assert len(storage.get_wishlist_items(user.id)) == 1


def test_update_cannot_create_duplicate(storage):
    make_product(storage, "A-1")
    other = make_product(storage, "B-1")
    with pytest.raises(ConflictError):
        storage.update_product(other.id, {"sku": "A-1"})
    assert storage.get_product(other.id).sku == "B-1"

    # keeping its own value is not a conflict
    assert storage.update_product(other.id, {"sku": "B-1", "stock": 7}).stock == 7


def test_memory_reads_during_writes():
    storage = MemoryStorage()
    user = make_user(storage)
    products = [make_product(storage, f"P-{i}") for i in range(20)]

    def churn():
        for _ in range(200):
            for product in products:
                storage.add_to_cart({"user_id": user.id, "product_id": product.id, "quantity": 1})
            storage.clear_cart(user.id)

    def read():
        for _ in range(2000):
            storage.get_cart_items(user.id)
            storage.get_products()

    with ThreadPoolExecutor(max_workers=4) as pool:
        futures = [pool.submit(churn), pool.submit(read), pool.submit(read), pool.submit(churn)]
        for future in futures:
            future.result()
