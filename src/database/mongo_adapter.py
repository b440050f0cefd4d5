"""
MongoDB adapter for document-based operations.
Provides the same interface as NoSQLAdapter but uses native MongoDB collections.
"""

import os
import logging
from contextlib import contextmanager
from typing import Dict, Any, Iterator, List, Optional, Sequence

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING, MongoClient, ReturnDocument
from pymongo.errors import (
    ConnectionFailure,
    ExecutionTimeout,
    NetworkTimeout,
    ServerSelectionTimeoutError,
    WTimeoutError,
)

from .base import SortSpec, Touch
from .errors import DocumentValidationError, StoreUnavailableError
from .schemas import (
    COLLECTIONS,
    DOCUMENT_VALIDATORS,
    FILES_COLLECTION,
    USERS_COLLECTION,
    validate_fields,
)

logger = logging.getLogger(__name__)

TIMEOUT_ERRORS = (ServerSelectionTimeoutError, NetworkTimeout, ExecutionTimeout, WTimeoutError)


class MongoAdapter:
    """MongoDB adapter for document-based database operations"""

    def __init__(
        self,
        connection_string: Optional[str] = None,
        database: Optional[str] = None,
        timeout_ms: int = 5000,
    ):
        self.connection_string = connection_string or os.getenv('MONGODB_URI')
        if not self.connection_string:
            raise ValueError("MongoDB connection string required. Set MONGODB_URI environment variable or pass connection_string")

        self.database_name = database
        self.timeout_ms = timeout_ms
        self.client = None
        self.db = None
        self._connect()

    def _connect(self) -> None:
        """Establish MongoDB connection"""
        try:
            self.client = MongoClient(
                self.connection_string,
                serverSelectionTimeoutMS=self.timeout_ms,
                timeoutMS=self.timeout_ms,
                tz_aware=True,
            )
            # Database name from the URI path wins over the configured default
            self.db = self.client.get_default_database(default=self.database_name)

            # Test connection
            self.client.admin.command('ping')
            logger.info(f"Connected to MongoDB database: {self.db.name}")

        except ConnectionFailure as e:
            logger.error(f"Failed to connect to MongoDB: {e}")
            raise
        except Exception as e:
            logger.error(f"MongoDB connection error: {e}")
            raise

    @contextmanager
    def _translate_timeouts(self, action: str) -> Iterator[None]:
        try:
            yield
        except TIMEOUT_ERRORS as e:
            logger.error(f"MongoDB timed out while {action}: {e}")
            raise StoreUnavailableError(str(e)) from e
        except Exception as e:
            logger.error(f"Error {action}: {e}")
            raise

    def _collection(self, collection: str):
        if collection not in COLLECTIONS:
            raise ValueError(f"Unknown collection: {collection}")
        return self.db[collection]

    @staticmethod
    def _projection(exclude_fields: Sequence[str] = ()) -> Dict[str, bool]:
        # MongoDB's _id never leaves the adapter
        projection = {"_id": False}
        projection.update({field: False for field in exclude_fields})
        return projection

    def _validate_document(self, collection: str, document: Dict[str, Any]) -> None:
        """Validate document against schema"""
        if collection in DOCUMENT_VALIDATORS:
            try:
                DOCUMENT_VALIDATORS[collection](document)
            except Exception as e:
                logger.error(f"Document validation failed for {collection}: {e}")
                raise DocumentValidationError(f"Document validation failed: {e}") from e

    def init_collections(self) -> None:
        """Initialize MongoDB collections and indexes"""
        with self._translate_timeouts("initializing collections"):
            files = self._collection(FILES_COLLECTION)
            files.create_index([("id", ASCENDING)], unique=True)
            files.create_index([("owner", ASCENDING), ("updated_at", DESCENDING)])

            users = self._collection(USERS_COLLECTION)
            users.create_index([("id", ASCENDING)], unique=True)

        logger.info("MongoDB collections and indexes initialized successfully")

    def ping(self) -> bool:
        with self._translate_timeouts("pinging"):
            self.client.admin.command('ping')
        return True

    def create_document(self, collection: str, document: Dict[str, Any]) -> str:
        """Create a new document in the collection"""
        self._validate_document(collection, document)
        with self._translate_timeouts(f"creating document in {collection}"):
            # insert_one adds _id to the mapping it is given
            self._collection(collection).insert_one(dict(document))
        logger.info(f"Created document in {collection} with ID: {document['id']}")
        return document["id"]

    @staticmethod
    def _id_filter(collection: str, doc_id: str) -> Dict[str, Any]:
        if collection == USERS_COLLECTION and ObjectId.is_valid(doc_id):
            # Users registered by the sign-in flow are keyed by _id alone
            return {"$or": [{"id": doc_id}, {"_id": ObjectId(doc_id)}]}
        return {"id": doc_id}

    def get_document(
        self, collection: str, doc_id: str, exclude_fields: Sequence[str] = ()
    ) -> Optional[Dict[str, Any]]:
        """Get a document by ID; an _id-keyed document is reported under id"""
        projection = {field: False for field in exclude_fields} or None
        with self._translate_timeouts(f"getting document from {collection}"):
            document = self._collection(collection).find_one(
                self._id_filter(collection, doc_id), projection
            )
        if document is None:
            return None
        object_id = document.pop("_id", None)
        if "id" not in document and object_id is not None:
            document["id"] = str(object_id)
        return document

    def query_documents(
        self,
        collection: str,
        query: Dict[str, Any],
        sort: Optional[SortSpec] = None,
    ) -> List[Dict[str, Any]]:
        """Query documents with filters"""
        with self._translate_timeouts(f"querying documents from {collection}"):
            cursor = self._collection(collection).find(query, self._projection())
            if sort:
                cursor = cursor.sort(list(sort))
            return list(cursor)

    def count_documents(self, collection: str, query: Optional[Dict[str, Any]] = None) -> int:
        """Count documents matching query"""
        with self._translate_timeouts(f"counting documents in {collection}"):
            return self._collection(collection).count_documents(query or {})

    @staticmethod
    def _update_pipeline(fields: Dict[str, Any], touch: Optional[Touch]) -> List[Dict[str, Any]]:
        # $literal keeps values such as "$x" in user code from reading as field paths
        stage = {key: {"$literal": value} for key, value in fields.items()}
        if touch:
            field, at = touch
            stage[field] = {"$max": [at, {"$add": [f"${field}", 1]}]}
        return [{"$set": stage}]

    def find_one_and_update(
        self,
        collection: str,
        query: Dict[str, Any],
        fields: Dict[str, Any],
        touch: Optional[Touch] = None,
    ) -> Optional[Dict[str, Any]]:
        """Atomically set fields on the first document matching query.

        Runs as an update pipeline so ``touch=(field, at)`` can compare against
        the stored value: the field becomes the later of ``at`` and one
        millisecond past what is stored.
        """
        checked = dict(fields)
        if touch:
            checked[touch[0]] = touch[1]
        try:
            validate_fields(collection, checked)
        except Exception as e:
            logger.error(f"Update validation failed for {collection}: {e}")
            raise DocumentValidationError(f"Document validation failed: {e}") from e

        with self._translate_timeouts(f"updating document in {collection}"):
            document = self._collection(collection).find_one_and_update(
                query,
                self._update_pipeline(fields, touch),
                projection=self._projection(),
                return_document=ReturnDocument.AFTER,
            )
        if document is not None:
            logger.info(f"Updated document in {collection} with ID: {document['id']}")
        return document

    def find_one_and_delete(
        self, collection: str, query: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        """Atomically remove the first document matching query and return it"""
        with self._translate_timeouts(f"deleting document from {collection}"):
            document = self._collection(collection).find_one_and_delete(
                query, projection=self._projection()
            )
        if document is not None:
            logger.info(f"Deleted document from {collection} with ID: {document['id']}")
        return document

    def close(self) -> None:
        """Close MongoDB connection"""
        if self.client:
            self.client.close()
            logger.info("MongoDB connection closed")
