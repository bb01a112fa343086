"""
Document Store - the storage seam every route and service goes through.

Operations:
1. get / find / find_one / count  - lookups by id or field equality
2. insert                          - assigns a string id + timestamps
3. update / increment / delete     - single-record changes
4. commit                          - all-or-nothing batch of Mutations

Documents leave the store with their id under "id" (Mongo keeps it in
"_id"). Routes depend on get_document_store() so tests can swap in an
in-memory implementation of the same interface.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any, Tuple

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from career_api.core.exceptions import DuplicateRecord, StaleWriteError
from career_api.db.mongodb import get_mongo_client, get_mongo_db

logger = logging.getLogger(__name__)

SortSpec = List[Tuple[str, int]]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(ObjectId())


# ============================================================
# HELPER: Move "_id" to "id" for JSON serialization
# ============================================================

def serialize_doc(doc: dict) -> Optional[dict]:
    """Convert MongoDB document to an API dict."""
    if doc is None:
        return None
    if "_id" in doc:
        doc["id"] = str(doc.pop("_id"))
    return doc


def serialize_docs(docs: list) -> list:
    return [serialize_doc(doc) for doc in docs]


@dataclass
class Mutation:
    """
    One field-level update inside a batch commit.

    `expected` holds field values the stored record must still have when
    the batch is applied; a mismatch aborts the whole batch.
    """
    collection: str
    doc_id: str
    fields: Dict[str, Any]
    expected: Dict[str, Any] = field(default_factory=dict)


# ============================================================
# INTERFACE
# ============================================================

class DocumentStore(ABC):

    @abstractmethod
    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        ...

    @abstractmethod
    def find(
        self,
        collection: str,
        filters: Optional[dict] = None,
        sort: Optional[SortSpec] = None,
        limit: Optional[int] = None
    ) -> List[dict]:
        ...

    def find_one(self, collection: str, filters: dict) -> Optional[dict]:
        docs = self.find(collection, filters, limit=1)
        return docs[0] if docs else None

    @abstractmethod
    def count(self, collection: str, filters: Optional[dict] = None) -> int:
        ...

    @abstractmethod
    def insert(self, collection: str, doc: dict, doc_id: Optional[str] = None) -> dict:
        """Insert and return the stored document (with id and timestamps)."""

    @abstractmethod
    def update(self, collection: str, doc_id: str, fields: dict) -> Optional[dict]:
        """Set fields and return the updated document, None when missing."""

    @abstractmethod
    def increment(self, collection: str, doc_id: str, field_name: str, amount: int = 1) -> bool:
        ...

    @abstractmethod
    def delete(self, collection: str, doc_id: str) -> bool:
        ...

    @abstractmethod
    def commit(self, mutations: List[Mutation]) -> None:
        """
        Apply every mutation or none of them.

        Raises StaleWriteError when a mutation's expected fields no longer
        match the stored record.
        """


# ============================================================
# MONGODB IMPLEMENTATION
# ============================================================

class MongoDocumentStore(DocumentStore):
    """DocumentStore over pymongo. Batch commits run in a transaction."""

    def __init__(self, db: Optional[Database] = None):
        self.db: Database = db if db is not None else get_mongo_db()

    def get(self, collection, doc_id):
        doc = self.db[collection].find_one({"_id": doc_id})
        return serialize_doc(doc)

    def find(self, collection, filters=None, sort=None, limit=None):
        cursor = self.db[collection].find(filters or {})
        if sort:
            cursor = cursor.sort(sort)
        if limit:
            cursor = cursor.limit(limit)
        return serialize_docs(list(cursor))

    def count(self, collection, filters=None):
        return self.db[collection].count_documents(filters or {})

    def insert(self, collection, doc, doc_id=None):
        now = utcnow()
        stored = {**doc, "_id": doc_id or new_id()}
        stored.setdefault("created_at", now)
        stored.setdefault("updated_at", now)
        try:
            self.db[collection].insert_one(stored)
        except DuplicateKeyError:
            raise DuplicateRecord(collection)
        return serialize_doc(stored)

    def update(self, collection, doc_id, fields):
        fields = {**fields, "updated_at": fields.get("updated_at", utcnow())}
        doc = self.db[collection].find_one_and_update(
            {"_id": doc_id},
            {"$set": fields},
            return_document=ReturnDocument.AFTER
        )
        return serialize_doc(doc)

    def increment(self, collection, doc_id, field_name, amount=1):
        result = self.db[collection].update_one(
            {"_id": doc_id},
            {"$inc": {field_name: amount}, "$set": {"updated_at": utcnow()}}
        )
        return result.matched_count > 0

    def delete(self, collection, doc_id):
        result = self.db[collection].delete_one({"_id": doc_id})
        return result.deleted_count > 0

    def commit(self, mutations):
        if not mutations:
            return
        now = utcnow()

        def apply_batch(session):
            for mutation in mutations:
                query = {"_id": mutation.doc_id, **mutation.expected}
                fields = {"updated_at": now, **mutation.fields}
                result = self.db[mutation.collection].update_one(
                    query, {"$set": fields}, session=session
                )
                if result.matched_count == 0:
                    raise StaleWriteError(mutation.collection, mutation.doc_id)

        with get_mongo_client().start_session() as session:
            session.with_transaction(apply_batch)
        logger.debug("Committed batch of %d mutations", len(mutations))


_store: Optional[DocumentStore] = None


def get_document_store() -> DocumentStore:
    """FastAPI dependency - process-wide MongoDB-backed store."""
    global _store
    if _store is None:
        _store = MongoDocumentStore()
    return _store
