"""
Checkout Simulation Script

Fires many concurrent checkouts at a running server to exercise the
settlement path: every simulated customer signs in, fills a cart, asks
for a payment intent and settles the payment.

Run from project root: python scripts/simulate.py --customers 25
"""

import argparse
import asyncio
import random
import sys
import time
from datetime import datetime, timezone
from typing import Any

import httpx

API_BASE_URL = "http://localhost:5000"
TOTAL_CUSTOMERS = 25

FIRST_NAMES = ["John", "Jane", "Mike", "Sarah", "Tom", "Emma", "David", "Lisa", "Chris", "Amy"]


def generate_random_customer(num: int) -> dict[str, str]:
    name = random.choice(FIRST_NAMES)
    return {"name": name, "email": f"{name.lower()}.{num}.{random.randint(1000, 9999)}@bistro.test"}


async def checkout(
    client: httpx.AsyncClient,
    customer_num: int,
    menu: list[dict[str, Any]],
) -> dict[str, Any]:
    """Sign in, fill a cart, pay and settle for one customer."""
    customer = generate_random_customer(customer_num)
    start_time = time.time()

    try:
        await client.post("/users", json=customer)
        token = (await client.post("/jwt", json={"email": customer["email"]})).json()["token"]
        headers = {"Authorization": f"Bearer {token}"}

        picked = random.sample(menu, k=min(len(menu), random.randint(1, 4)))
        cart_ids = []
        for item in picked:
            response = await client.post("/carts", json={
                "email": customer["email"],
                "menuItemId": item["_id"],
                "name": item.get("name"),
                "price": item["price"],
            })
            cart_ids.append(response.json()["insertedId"])

        price = round(sum(item["price"] for item in picked), 2)
        intent = await client.post("/create-payment-intent", json={"price": price}, headers=headers)
        intent.raise_for_status()

        response = await client.post("/payments", headers=headers, json={
            "email": customer["email"],
            "price": price,
            "transactionId": intent.json()["clientSecret"].split("_secret")[0],
            "date": datetime.now(timezone.utc).isoformat(),
            "menuItems": [item["_id"] for item in picked],
            "cartItems": cart_ids,
            "status": "service pending",
        })
        elapsed = round(time.time() - start_time, 3)

        if response.status_code != 200:
            return {"customer_num": customer_num, "success": False, "error": response.text[:100], "time": elapsed}

        return {
            "customer_num": customer_num,
            "success": True,
            "total": price,
            "removed": response.json()["cartDeletionCount"],
            "expected": len(cart_ids),
            "time": elapsed,
        }
    except (httpx.HTTPError, KeyError) as e:
        elapsed = round(time.time() - start_time, 3)
        return {"customer_num": customer_num, "success": False, "error": str(e)[:100], "time": elapsed}


async def run_simulation(num_customers: int = TOTAL_CUSTOMERS) -> dict[str, Any]:
    print("=" * 70)
    print("CHECKOUT SIMULATION")
    print("=" * 70)
    print(f"Customers: {num_customers}")
    print(f"Target: {API_BASE_URL}")
    print(f"Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    start_time = time.time()

    async with httpx.AsyncClient(base_url=API_BASE_URL, timeout=30.0) as client:
        menu = (await client.get("/menu")).json()
        if not menu:
            print("\nMenu is empty. Seed the menu collection first.")
            return {"total": num_customers, "successful": 0, "failed": num_customers}

        results = await asyncio.gather(*[checkout(client, i + 1, menu) for i in range(num_customers)])

    total_time = round(time.time() - start_time, 2)
    successful = [r for r in results if r["success"]]
    failed = [r for r in results if not r["success"]]
    incomplete = [r for r in successful if r["removed"] != r["expected"]]

    print(f"\nSuccessful checkouts: {len(successful)}/{num_customers}")
    print(f"Failed checkouts: {len(failed)}/{num_customers}")
    print(f"Carts not fully cleared: {len(incomplete)}")
    print(f"Total Time: {total_time}s")

    if successful:
        avg_time = round(sum(r["time"] for r in successful) / len(successful), 3)
        print(f"Average checkout: {avg_time}s")
        print(f"Revenue: ${sum(r['total'] for r in successful):.2f}")

    if failed:
        print("\nFailed checkout details (first 5):")
        for f in failed[:5]:
            print(f"   Customer #{f['customer_num']}: {f.get('error', 'Unknown error')}")

    print("=" * 70)
    return {"total": num_customers, "successful": len(successful), "failed": len(failed)}


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Checkout Simulation Script")
    parser.add_argument("--customers", type=int, default=TOTAL_CUSTOMERS, help="Number of concurrent customers")
    parser.add_argument("--url", default=API_BASE_URL, help="API base URL")
    args = parser.parse_args()

    API_BASE_URL = args.url
    summary = asyncio.run(run_simulation(num_customers=args.customers))
    sys.exit(0 if summary["failed"] == 0 else 1)
