"""
Document persistence for the NoteCode API.

Two adapters share the DocumentStore interface: NoSQLAdapter keeps JSON
documents in SQLite for local development and tests, MongoAdapter talks to
MongoDB in production.
"""

from .base import ASCENDING, DESCENDING, TIMESTAMP_RESOLUTION, DocumentStore
from .errors import DocumentValidationError, StoreError, StoreUnavailableError
from .local import get_document_store, init_db
from .nosql_adapter import NoSQLAdapter

__all__ = [
    'ASCENDING', 'DESCENDING', 'TIMESTAMP_RESOLUTION', 'DocumentStore',
    'DocumentValidationError', 'StoreError', 'StoreUnavailableError',
    'get_document_store', 'init_db', 'NoSQLAdapter',
]
