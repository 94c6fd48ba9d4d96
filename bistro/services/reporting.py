"""
Reporting Aggregator

Dashboard statistics for admins: collection sizes, revenue, and
per-category sales computed from the stored payments.
"""

import logging
from collections import Counter
from typing import Any

from bistro.database import DocumentStore
from bistro.models import coerce_object_ids

logger = logging.getLogger(__name__)


class ReportingAggregator:

    def __init__(self, store: DocumentStore):
        self.store = store

    async def admin_stats(self) -> dict[str, Any]:
        """
        Counts are the server's fast estimates; revenue is the plain sum of
        every stored payment price.
        """
        users = await self.store.users.estimated_document_count()
        products = await self.store.menu.estimated_document_count()
        orders = await self.store.payments.estimated_document_count()

        payments = await self.store.payments.find({}, {"price": 1}).to_list(length=None)
        revenue = sum(payment.get("price", 0) for payment in payments)

        return {"userCount": users, "productCount": products, "orderCount": orders, "revenue": revenue}

    async def order_stats(self) -> list[dict[str, Any]]:
        """
        Items sold and their total price per menu category.

        Each occurrence of a menu item id in a payment counts once. Ids that
        no longer resolve to a menu item are skipped; categories without
        sales are not listed.
        """
        payments = await self.store.payments.find({}, {"menuItems": 1}).to_list(length=None)

        occurrences: Counter = Counter()
        for payment in payments:
            occurrences.update(coerce_object_ids(payment.get("menuItems", [])))

        if not occurrences:
            return []

        menu_items = await self.store.menu.find(
            {"_id": {"$in": list(occurrences)}}
        ).to_list(length=None)

        counts: Counter = Counter()
        totals: dict[str, float] = {}
        for item in menu_items:
            category = item.get("category")
            times = occurrences[item["_id"]]
            counts[category] += times
            totals[category] = totals.get(category, 0) + item.get("price", 0) * times

        return [
            {"category": category, "count": counts[category], "total": round(totals[category], 2)}
            for category in counts
        ]
