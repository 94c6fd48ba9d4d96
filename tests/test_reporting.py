import asyncio

from bson import ObjectId

from bistro.services.reporting import ReportingAggregator


def seed_menu(store):
    pizza, salad, soup = ObjectId(), ObjectId(), ObjectId()
    store.menu.docs.extend([
        {"_id": pizza, "name": "Margherita", "category": "pizza", "price": 12.0},
        {"_id": salad, "name": "Caesar", "category": "salad", "price": 8.5},
        {"_id": soup, "name": "Tomato", "category": "soup", "price": 6.0},
    ])
    return pizza, salad, soup


def test_order_stats_groups_by_category(store):
    pizza, salad, _ = seed_menu(store)
    store.payments.docs.extend([
        {"_id": ObjectId(), "price": 20.5, "menuItems": [pizza, salad]},
        {"_id": ObjectId(), "price": 12.0, "menuItems": [pizza]},
    ])

    rows = asyncio.run(ReportingAggregator(store).order_stats())

    assert sorted(rows, key=lambda r: r["category"]) == [
        {"category": "pizza", "count": 2, "total": 24.0},
        {"category": "salad", "count": 1, "total": 8.5},
    ]


def test_order_stats_rounds_totals(store):
    item = ObjectId()
    store.menu.docs.append({"_id": item, "category": "dessert", "price": 0.1})
    store.payments.docs.append({"_id": ObjectId(), "price": 0.3, "menuItems": [item, item, item]})

    rows = asyncio.run(ReportingAggregator(store).order_stats())

    assert rows == [{"category": "dessert", "count": 3, "total": 0.3}]


def test_order_stats_skips_deleted_menu_items(store):
    pizza, _, _ = seed_menu(store)
    store.payments.docs.append({"_id": ObjectId(), "price": 12.0, "menuItems": [pizza, ObjectId()]})

    rows = asyncio.run(ReportingAggregator(store).order_stats())

    assert rows == [{"category": "pizza", "count": 1, "total": 12.0}]


def test_order_stats_without_payments_is_empty(store):
    seed_menu(store)

    assert asyncio.run(ReportingAggregator(store).order_stats()) == []


def test_admin_stats_sums_revenue(store, admin_email, customer_email):
    seed_menu(store)
    for price in (10.5, 20.25, 5.0):
        store.payments.docs.append({"_id": ObjectId(), "price": price, "menuItems": []})

    stats = asyncio.run(ReportingAggregator(store).admin_stats())

    assert stats == {"userCount": 2, "productCount": 3, "orderCount": 3, "revenue": 35.75}


def test_stats_endpoints_are_admin_only(client, auth_headers, admin_email, customer_email):
    for path in ("/admin-stats", "/order-stats"):
        assert client.get(path).status_code == 401
        assert client.get(path, headers=auth_headers(customer_email)).status_code == 403
        assert client.get(path, headers=auth_headers(admin_email)).status_code == 200


def test_order_stats_endpoint(client, store, auth_headers, admin_email):
    pizza, salad, _ = seed_menu(store)
    store.payments.docs.append({"_id": ObjectId(), "price": 32.5, "menuItems": [pizza, pizza, salad]})

    response = client.get("/order-stats", headers=auth_headers(admin_email))

    assert sorted(response.json(), key=lambda r: r["category"]) == [
        {"category": "pizza", "count": 2, "total": 24.0},
        {"category": "salad", "count": 1, "total": 8.5},
    ]


def test_admin_stats_endpoint(client, store, auth_headers, admin_email):
    store.payments.docs.append({"_id": ObjectId(), "price": 12.0, "menuItems": []})

    response = client.get("/admin-stats", headers=auth_headers(admin_email))

    assert response.status_code == 200
    assert response.json() == {"userCount": 1, "productCount": 0, "orderCount": 1, "revenue": 12.0}
