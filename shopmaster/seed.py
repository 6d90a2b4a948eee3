"""
Demo data and bulk fake data for the storefront

seed_demo_data() fills an empty store with a small fixed catalog, a coupon
and the admin account. DataGenerator produces larger random data sets with
Faker for local load and UI testing.
"""
import random
import string
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import List

from faker import Faker
from loguru import logger

from shopmaster.config import Settings
from shopmaster.storage.base import Storage
from shopmaster.utils.security import hash_password

DEMO_CATEGORIES = [
    ("Electronics", "Electronic devices and accessories"),
    ("Fashion", "Clothing and accessories"),
    ("Home & Garden", "Home improvement and garden supplies"),
]

DEMO_PRODUCTS = [
    {
        "name": "Premium Wireless Headphones",
        "description": "High-quality sound with noise cancellation technology",
        "price": Decimal("89.99"),
        "sale_price": Decimal("76.49"),
        "sku": "WH-001",
        "stock": 45,
        "image_url": "https://images.unsplash.com/photo-1505740420928-5e560c06d30e?w=400&h=300&fit=crop",
    },
    {
        "name": "Smart Fitness Watch",
        "description": "Track your health and fitness with advanced sensors",
        "price": Decimal("199.99"),
        "sku": "SW-001",
        "stock": 32,
        "image_url": "https://images.unsplash.com/photo-1523275335684-37898b6baf30?w=400&h=300&fit=crop",
    },
    {
        "name": "Professional Laptop",
        "description": "High-performance laptop for work and creativity",
        "price": Decimal("1299.99"),
        "sku": "LP-001",
        "stock": 18,
        "image_url": "https://images.unsplash.com/photo-1496181133206-80ce9b88a853?w=400&h=300&fit=crop",
    },
]


def seed_demo_data(storage: Storage, settings: Settings) -> bool:
    """Seed an empty store; returns False when the catalog already has data"""
    if storage.get_categories() or storage.get_products(include_inactive=True):
        return False

    categories = [storage.create_category({"name": name, "description": description})
                  for name, description in DEMO_CATEGORIES]
    electronics = categories[0]
    for product in DEMO_PRODUCTS:
        storage.create_product({**product, "category_id": electronics.id})

    if storage.get_coupon_by_code("SAVE15", active_only=False) is None:
        storage.create_coupon({
            "code": "SAVE15",
            "description": "15% off on all orders",
            "discount_type": "percentage",
            "discount_value": Decimal("15.00"),
            "min_order_amount": Decimal("50.00"),
            "max_discount_amount": Decimal("50.00"),
            "is_active": True,
            "expires_at": datetime.now(timezone.utc) + timedelta(days=30),
        })

    if storage.get_user_by_username(settings.admin_username) is None:
        storage.create_user({
            "username": settings.admin_username,
            "email": settings.admin_email,
            "password": hash_password(settings.admin_password),
            "first_name": "Admin",
            "last_name": "User",
            "is_admin": True,
        })

    logger.info(f"Seeded {len(categories)} categories, {len(DEMO_PRODUCTS)} products, coupon SAVE15 and admin user")
    return True


class DataGenerator:
    """Random catalog and customer data built with Faker"""

    def __init__(self, storage: Storage, seed: int = None):
        self.storage = storage
        self.fake = Faker(["en_US"])
        self.random = random.Random(seed)
        if seed is not None:
            self.fake.seed_instance(seed)

    def generate_categories(self, count: int = 5) -> List:
        logger.info(f"Generating {count} categories...")
        categories = []
        while len(categories) < count:
            name = self.fake.unique.word().capitalize()
            if self.storage.get_category_by_name(name) is not None:
                continue
            categories.append(self.storage.create_category({
                "name": name,
                "description": self.fake.sentence(nb_words=8),
            }))
        logger.info(f"Created {len(categories)} categories")
        return categories

    def generate_products(self, count: int = 50) -> List:
        logger.info(f"Generating {count} products...")
        categories = self.storage.get_categories()
        if not categories:
            logger.warning("No categories found. Please generate categories first.")
            return []

        products = []
        for _ in range(count):
            price = (Decimal(self.random.randint(500, 150000)) / 100).quantize(Decimal("0.01"))
            on_sale = self.random.random() < 0.2
            products.append(self.storage.create_product({
                "name": self.fake.catch_phrase(),
                "description": self.fake.text(max_nb_chars=120),
                "price": price,
                "sale_price": (price * Decimal("0.85")).quantize(Decimal("0.01")) if on_sale else None,
                "sku": self.fake.unique.bothify("??-####", letters=string.ascii_uppercase),
                "category_id": self.random.choice(categories).id,
                "stock": self.random.randint(0, 200),
                "image_url": self.fake.image_url(),
                "is_active": True,
            }))
        logger.info(f"Created {len(products)} products")
        return products

    def generate_customers(self, count: int = 20, password: str = "password123") -> List:
        logger.info(f"Generating {count} customers...")
        password_hash = hash_password(password)
        customers = []
        for _ in range(count):
            profile = self.fake.unique.simple_profile()
            first_name, _, last_name = profile["name"].partition(" ")
            customers.append(self.storage.create_user({
                "username": profile["username"],
                "email": profile["mail"],
                "password": password_hash,
                "first_name": first_name,
                "last_name": last_name or first_name,
                "is_admin": False,
            }))
        logger.info(f"Created {len(customers)} customers")
        return customers

    def generate_all(self, products: int = 50):
        self.generate_categories(max(1, products // 10))
        self.generate_products(products)
        self.generate_customers(max(1, products // 5))
