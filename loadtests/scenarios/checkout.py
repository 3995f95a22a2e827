"""Checkout load test scenarios.

Many shoppers compete for a small pool of scarce products, so reservations
on the same product id contend with each other. Rejected checkouts
(InsufficientStock) are an expected outcome here, not a failure; the
invariant to watch is that ``available`` never goes negative.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import cart_item_data, contact_data, customer_id, product_data
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import ShopperState

HOT_PRODUCTS = [f"hot-{n:02d}" for n in range(5)]
STAFF_HEADERS = {"X-Customer-Id": "staff-loadtest", "X-Customer-Role": "staff"}


class CheckoutJourney(SequentialTaskSet):
    """Register profile -> Add items -> Checkout -> maybe Cancel.

    Generates events: CustomerRegistered, CartItemAdded (x2), StockReserved,
    OrderPlaced, CartCheckedOut and sometimes OrderCancelled/StockReleased.
    """

    def on_start(self):
        self.state = ShopperState(customer_id=customer_id())
        self.headers = {"X-Customer-Id": self.state.customer_id}

    @task
    def register_profile(self):
        with self.client.put(
            "/customers/me",
            json=contact_data(),
            headers=self.headers,
            catch_response=True,
            name="PUT /customers/me",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Register profile failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def add_item_1(self):
        self._add_item()

    @task
    def add_item_2(self):
        self._add_item()

    @task
    def checkout(self):
        with self.client.post(
            "/checkout",
            headers=self.headers,
            catch_response=True,
            name="POST /checkout",
        ) as resp:
            if resp.status_code == 201:
                self.state.order_ids.append(resp.json()["order_id"])
            elif resp.status_code == 409:
                # Sold out under contention
                self.state.rejected_checkouts += 1
                resp.success()
            else:
                resp.failure(f"Checkout failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def maybe_cancel(self):
        if not self.state.order_ids or random.random() > 0.3:
            return
        order_id = self.state.order_ids[-1]
        with self.client.post(
            f"/orders/{order_id}/cancel",
            headers=self.headers,
            catch_response=True,
            name="POST /orders/{id}/cancel",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Cancel failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def stop(self):
        self.interrupt()

    def _add_item(self):
        with self.client.post(
            "/cart/items",
            json=cart_item_data(HOT_PRODUCTS),
            headers=self.headers,
            catch_response=True,
            name="POST /cart/items",
        ) as resp:
            if resp.status_code == 201:
                self.state.item_ids.append(resp.json()["item_id"])
            else:
                resp.failure(f"Add cart item failed: {resp.status_code} — {extract_error_detail(resp)}")


class CheckoutUser(HttpUser):
    """Shopper competing for the hot products."""

    wait_time = between(0.5, 2)
    weight = 10
    tasks = [CheckoutJourney]


class RestockUser(HttpUser):
    """Staff member registering and replenishing the hot products."""

    wait_time = between(2, 5)
    weight = 1

    def on_start(self):
        for product_id in HOT_PRODUCTS:
            # 400 means another staff user registered it first
            with self.client.post(
                "/products",
                json=product_data(product_id, available=50),
                headers=STAFF_HEADERS,
                catch_response=True,
                name="POST /products",
            ) as resp:
                if resp.status_code in (201, 400):
                    resp.success()

    @task
    def replenish(self):
        self.client.post(
            f"/products/{random.choice(HOT_PRODUCTS)}/stock",
            json={"quantity": random.randint(5, 20)},
            headers=STAFF_HEADERS,
            name="POST /products/{id}/stock",
        )

    @task(3)
    def check_stock(self):
        with self.client.get(
            f"/products/{random.choice(HOT_PRODUCTS)}",
            headers=STAFF_HEADERS,
            catch_response=True,
            name="GET /products/{id}",
        ) as resp:
            if resp.status_code == 200 and resp.json()["available"] < 0:
                resp.failure("Stock went negative")
