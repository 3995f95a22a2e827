"""Faker-based data generators for Locust load test scenarios.

Each generator produces payloads that match the field names expected by the
Storefront API's Pydantic request schemas.
"""

import random
import uuid

from faker import Faker

fake = Faker()


def customer_id() -> str:
    """Generate unique customer ids like 'cust-lt-a1b2c3d4'."""
    return f"cust-lt-{uuid.uuid4().hex[:8]}"


def contact_data() -> dict:
    return {
        "name": fake.name(),
        "email": f"{fake.user_name()[:20]}.{uuid.uuid4().hex[:4]}@{fake.free_email_domain()}",
        "phone": fake.phone_number()[:30],
        "address": fake.address().replace("\n", ", ")[:500],
    }


def product_data(product_id: str, available: int) -> dict:
    return {
        "product_id": product_id,
        "name": fake.catch_phrase()[:255],
        "unit_price": f"{random.randint(100, 20000) / 100:.2f}",
        "available": available,
    }


def cart_item_data(product_ids: list[str]) -> dict:
    return {
        "product_id": random.choice(product_ids),
        "quantity": random.randint(1, 3),
    }
