"""
SQLite-backed document adapter.
Stores each document as a JSON blob so local development and tests share the
same interface as the MongoDB adapter.
"""

import sqlite3
import json
import logging
from contextlib import contextmanager
from typing import Dict, Any, Iterator, List, Optional, Sequence, Tuple
from datetime import datetime

from .base import DESCENDING, TIMESTAMP_RESOLUTION, SortSpec, Touch
from .errors import DocumentValidationError, StoreUnavailableError
from .schemas import COLLECTIONS, DOCUMENT_VALIDATORS, FILES_COLLECTION

logger = logging.getLogger(__name__)

TIMESTAMP_FIELDS = ("created_at", "updated_at")


class NoSQLAdapter:
    """Document adapter over SQLite JSON columns"""

    def __init__(self, db_path: str = "notecode.db", timeout: float = 5.0):
        self.db_path = db_path
        self.timeout = timeout

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection in autocommit mode"""
        conn = sqlite3.connect(self.db_path, timeout=self.timeout, isolation_level=None)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection, translating lock timeouts"""
        conn = self._get_connection()
        try:
            yield conn
        except sqlite3.OperationalError as e:
            message = str(e).lower()
            if "locked" in message or "busy" in message:
                logger.error(f"SQLite store timed out: {e}")
                raise StoreUnavailableError(str(e)) from e
            raise
        finally:
            conn.close()

    @staticmethod
    def _table(collection: str) -> str:
        if collection not in COLLECTIONS:
            raise ValueError(f"Unknown collection: {collection}")
        return f"{collection}_docs"

    def _validate_document(self, collection: str, document: Dict[str, Any]) -> None:
        """Validate document against schema"""
        if collection in DOCUMENT_VALIDATORS:
            try:
                DOCUMENT_VALIDATORS[collection](document)
            except Exception as e:
                logger.error(f"Document validation failed for {collection}: {e}")
                raise DocumentValidationError(f"Document validation failed: {e}") from e

    def _serialize_document(self, document: Dict[str, Any]) -> str:
        """Serialize document to JSON string"""
        def json_serializer(obj):
            if isinstance(obj, datetime):
                return obj.isoformat(timespec="microseconds")
            raise TypeError(f"Object of type {type(obj)} is not JSON serializable")

        return json.dumps(document, default=json_serializer)

    def _deserialize_document(
        self, json_str: str, exclude_fields: Sequence[str] = ()
    ) -> Dict[str, Any]:
        """Deserialize JSON string to document"""
        document = json.loads(json_str)
        for key in TIMESTAMP_FIELDS:
            if isinstance(document.get(key), str):
                document[key] = datetime.fromisoformat(document[key])
        for key in exclude_fields:
            document.pop(key, None)
        return document

    @staticmethod
    def _apply_touch(document: Dict[str, Any], field: str, at: datetime) -> None:
        previous = document.get(field)
        if isinstance(previous, datetime) and at <= previous:
            at = previous + TIMESTAMP_RESOLUTION
        document[field] = at

    @staticmethod
    def _build_where(query: Dict[str, Any]) -> Tuple[str, List[Any]]:
        """Translate an equality filter into a WHERE clause"""
        where_clauses = []
        params: List[Any] = []
        for key, value in query.items():
            if key == "id":
                where_clauses.append("doc_id = ?")
                params.append(value)
            else:
                # JSON path query
                where_clauses.append("json_extract(document, ?) = ?")
                params.extend([f"$.{key}", value])
        if not where_clauses:
            return "", params
        return " WHERE " + " AND ".join(where_clauses), params

    def init_collections(self) -> None:
        """Initialize document collections (tables) and indexes"""
        with self._connection() as conn:
            for collection in COLLECTIONS:
                conn.execute(f'''
                    CREATE TABLE IF NOT EXISTS {self._table(collection)} (
                        doc_id TEXT PRIMARY KEY,
                        document TEXT NOT NULL
                    )
                ''')

            files_table = self._table(FILES_COLLECTION)
            conn.execute(f'''
                CREATE INDEX IF NOT EXISTS idx_files_owner
                ON {files_table}(json_extract(document, '$.owner'))
            ''')
            conn.execute(f'''
                CREATE INDEX IF NOT EXISTS idx_files_updated_at
                ON {files_table}(json_extract(document, '$.updated_at'))
            ''')
        logger.info(f"NoSQL collections initialized in {self.db_path}")

    def ping(self) -> bool:
        with self._connection() as conn:
            conn.execute("SELECT 1")
        return True

    def create_document(self, collection: str, document: Dict[str, Any]) -> str:
        """Create a new document in the collection"""
        table = self._table(collection)
        self._validate_document(collection, document)
        doc_id = document["id"]
        try:
            with self._connection() as conn:
                conn.execute(
                    f"INSERT INTO {table} (doc_id, document) VALUES (?, ?)",
                    (doc_id, self._serialize_document(document)),
                )
        except Exception as e:
            logger.error(f"Error creating document in {collection}: {e}")
            raise
        logger.info(f"Created document in {collection} with ID: {doc_id}")
        return doc_id

    def get_document(
        self, collection: str, doc_id: str, exclude_fields: Sequence[str] = ()
    ) -> Optional[Dict[str, Any]]:
        """Get a document by ID"""
        table = self._table(collection)
        try:
            with self._connection() as conn:
                row = conn.execute(
                    f"SELECT document FROM {table} WHERE doc_id = ?", (doc_id,)
                ).fetchone()
        except Exception as e:
            logger.error(f"Error getting document from {collection}: {e}")
            raise
        if row is None:
            return None
        return self._deserialize_document(row["document"], exclude_fields)

    def query_documents(
        self,
        collection: str,
        query: Dict[str, Any],
        sort: Optional[SortSpec] = None,
    ) -> List[Dict[str, Any]]:
        """Query documents with equality filters and optional sort"""
        table = self._table(collection)
        where, params = self._build_where(query)
        sql = f"SELECT document FROM {table}{where}"

        order_terms = []
        for field, direction in sort or ():
            order_terms.append(
                "json_extract(document, ?) " + ("DESC" if direction == DESCENDING else "ASC")
            )
            params.append(f"$.{field}")
        # rowid keeps ties in insertion order
        order_terms.append("rowid ASC")
        sql += " ORDER BY " + ", ".join(order_terms)

        try:
            with self._connection() as conn:
                rows = conn.execute(sql, params).fetchall()
        except Exception as e:
            logger.error(f"Error querying documents from {collection}: {e}")
            raise
        return [self._deserialize_document(row["document"]) for row in rows]

    def count_documents(self, collection: str, query: Optional[Dict[str, Any]] = None) -> int:
        """Count documents matching query"""
        table = self._table(collection)
        where, params = self._build_where(query or {})
        with self._connection() as conn:
            row = conn.execute(f"SELECT COUNT(*) AS total FROM {table}{where}", params).fetchone()
        return row["total"]

    def find_one_and_update(
        self,
        collection: str,
        query: Dict[str, Any],
        fields: Dict[str, Any],
        touch: Optional[Touch] = None,
    ) -> Optional[Dict[str, Any]]:
        """Atomically merge fields into the first document matching query.

        With ``touch=(field, at)`` the field is stamped with ``at``, or one tick
        past its stored value when that is later, so it never moves backwards.

        Returns the updated document, or None when nothing matched.
        """
        table = self._table(collection)
        where, params = self._build_where(query)
        try:
            with self._connection() as conn:
                # Take the write lock before reading so the merge cannot interleave
                conn.execute("BEGIN IMMEDIATE")
                try:
                    row = conn.execute(
                        f"SELECT doc_id, document FROM {table}{where} LIMIT 1", params
                    ).fetchone()
                    if row is None:
                        conn.execute("ROLLBACK")
                        return None

                    document = self._deserialize_document(row["document"])
                    document.update(fields)
                    if touch:
                        self._apply_touch(document, *touch)
                    self._validate_document(collection, document)
                    conn.execute(
                        f"UPDATE {table} SET document = ? WHERE doc_id = ?",
                        (self._serialize_document(document), row["doc_id"]),
                    )
                    conn.execute("COMMIT")
                except Exception:
                    conn.execute("ROLLBACK")
                    raise
        except Exception as e:
            logger.error(f"Error updating document in {collection}: {e}")
            raise
        logger.info(f"Updated document in {collection} with ID: {row['doc_id']}")
        return document

    def find_one_and_delete(
        self, collection: str, query: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        """Atomically remove the first document matching query and return it"""
        table = self._table(collection)
        where, params = self._build_where(query)
        try:
            with self._connection() as conn:
                conn.execute("BEGIN IMMEDIATE")
                try:
                    row = conn.execute(
                        f"SELECT doc_id, document FROM {table}{where} LIMIT 1", params
                    ).fetchone()
                    if row is None:
                        conn.execute("ROLLBACK")
                        return None
                    conn.execute(f"DELETE FROM {table} WHERE doc_id = ?", (row["doc_id"],))
                    conn.execute("COMMIT")
                except Exception:
                    conn.execute("ROLLBACK")
                    raise
        except Exception as e:
            logger.error(f"Error deleting document from {collection}: {e}")
            raise
        logger.info(f"Deleted document from {collection} with ID: {row['doc_id']}")
        return self._deserialize_document(row["document"])

    def close(self) -> None:
        """Connections are per call; nothing is held open"""
        logger.info(f"NoSQL adapter for {self.db_path} closed")
