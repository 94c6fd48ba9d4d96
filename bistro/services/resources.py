"""
Collection Resource Handlers

Thin CRUD wrappers over the MongoDB collections. Every method returns
JSON-ready dicts shaped like the driver's acknowledgements
(``insertedId``, ``deletedCount``...).
"""

import logging
from typing import Any, Iterable, Optional

from bistro.database import DocumentStore
from bistro.models import Role, parse_object_id, parse_object_ids, serialize_document

logger = logging.getLogger(__name__)


def insert_ack(result) -> dict[str, Any]:
    return {"acknowledged": result.acknowledged, "insertedId": str(result.inserted_id)}


def delete_ack(result) -> dict[str, Any]:
    return {"acknowledged": result.acknowledged, "deletedCount": result.deleted_count}


def update_ack(result) -> dict[str, Any]:
    upserted = result.upserted_id
    return {
        "acknowledged": result.acknowledged,
        "matchedCount": result.matched_count,
        "modifiedCount": result.modified_count,
        "upsertedId": str(upserted) if upserted is not None else None,
    }


class CollectionResource:
    """list / create / delete-by-id over one collection."""

    def __init__(self, collection):
        self.collection = collection

    async def list(self, query: Optional[dict] = None) -> list[dict]:
        documents = await self.collection.find(query or {}).to_list(length=None)
        return [serialize_document(doc) for doc in documents]

    async def create(self, document: dict) -> dict[str, Any]:
        result = await self.collection.insert_one(document)
        return insert_ack(result)

    async def delete_by_id(self, raw_id: str) -> dict[str, Any]:
        """Delete one document; an unknown id reports ``deletedCount: 0``."""
        result = await self.collection.delete_one({"_id": parse_object_id(raw_id)})
        return delete_ack(result)


class UserResource(CollectionResource):

    async def find_by_email(self, email: str) -> Optional[dict]:
        return await self.collection.find_one({"email": email})

    async def create_if_absent(self, document: dict) -> dict[str, Any]:
        """Insert a user unless one with the same email exists."""
        document = {k: v for k, v in document.items() if k != "role"}
        if await self.find_by_email(document["email"]):
            return {"message": "user already exists"}

        ack = await self.create(document)
        logger.info(f"User registered: {document['email']}")
        return ack

    async def is_admin(self, email: str) -> bool:
        user = await self.find_by_email(email)
        return bool(user) and user.get("role") == Role.ADMIN.value

    async def promote(self, raw_id: str) -> dict[str, Any]:
        """Set the admin role; there is no demotion."""
        result = await self.collection.update_one(
            {"_id": parse_object_id(raw_id)},
            {"$set": {"role": Role.ADMIN.value}},
        )
        logger.info(f"User {raw_id} promoted to admin (matched={result.matched_count})")
        return update_ack(result)


class CartResource(CollectionResource):

    async def list_for_email(self, email: str) -> list[dict]:
        return await self.list({"email": email})

    async def delete_many_by_ids(self, raw_ids: Iterable[Any], session=None) -> dict[str, Any]:
        ids = parse_object_ids(raw_ids)
        result = await self.collection.delete_many({"_id": {"$in": ids}}, session=session)
        return delete_ack(result)


class PaymentResource(CollectionResource):

    async def list_for_email(self, email: str) -> list[dict]:
        return await self.list({"email": email})


class Resources:
    """Resource handlers bound to one DocumentStore."""

    def __init__(self, store: DocumentStore):
        self.users = UserResource(store.users)
        self.menu = CollectionResource(store.menu)
        self.reviews = CollectionResource(store.reviews)
        self.carts = CartResource(store.carts)
        self.payments = PaymentResource(store.payments)
