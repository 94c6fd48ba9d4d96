"""
Order Settlement

Turns a completed checkout into a stored payment and clears the settled
cart items. The two writes are separate steps:

    1. insert the payment   (failure: nothing written, UpstreamError)
    2. delete the cart items (failure: payment kept, PartialSettlementError)

With ``USE_TRANSACTIONS`` both steps share one MongoDB transaction and a
failure in step 2 rolls step 1 back instead.
"""

import logging
from typing import Any

from pymongo.errors import PyMongoError

from bistro.core.exceptions import PartialSettlementError, UpstreamError
from bistro.database import DocumentStore
from bistro.models import parse_object_ids
from bistro.services.resources import CartResource, insert_ack

logger = logging.getLogger(__name__)


class SettlementProcessor:

    def __init__(self, store: DocumentStore):
        self.store = store
        self.carts = CartResource(store.carts)

    async def settle(self, payment: dict[str, Any]) -> dict[str, Any]:
        """
        Record ``payment`` and delete the cart items it paid for.

        Args:
            payment: Payment document with ``menuItems`` and ``cartItems``
                as lists of id strings

        Returns:
            {"paymentRecord": {...}, "cartDeletionCount": int}

        Raises:
            ValidationError: a menu or cart id is malformed (nothing written)
            UpstreamError: the payment could not be stored
            PartialSettlementError: stored, but the cart cleanup failed
        """
        menu_item_ids = parse_object_ids(payment.get("menuItems", []))
        cart_item_ids = parse_object_ids(payment.get("cartItems", []))
        document = {**payment, "menuItems": menu_item_ids}

        async with self.store.transaction() as session:
            try:
                inserted = await self.store.payments.insert_one(document, session=session)
            except PyMongoError as e:
                logger.error(f"Settlement aborted, payment not stored: {e}")
                raise UpstreamError("Could not record payment")

            payment_record = insert_ack(inserted)

            try:
                deleted = await self.carts.delete_many_by_ids(cart_item_ids, session=session)
            except PyMongoError as e:
                if session is not None:
                    logger.error(f"Settlement rolled back, cart cleanup failed: {e}")
                    raise UpstreamError("Could not remove settled cart items")

                logger.error(
                    f"Payment {payment_record['insertedId']} stored but cart cleanup failed: {e}"
                )
                raise PartialSettlementError(
                    "Payment recorded but cart items were not removed",
                    extra={"paymentRecord": payment_record, "cartItems": payment.get("cartItems", [])},
                )

        removed = deleted["deletedCount"]
        logger.info(
            f"Settled payment {payment_record['insertedId']} for {payment.get('email')}: "
            f"{removed}/{len(cart_item_ids)} cart items removed"
        )
        return {"paymentRecord": payment_record, "cartDeletionCount": removed}
