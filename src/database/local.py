import logging
from typing import Optional

from .base import DocumentStore
from .nosql_adapter import NoSQLAdapter

logger = logging.getLogger(__name__)

MONGO_MODES = ("prod",)


def get_document_store(
    deployment_mode: str = "local-dev",
    db_path: str = "notecode.db",
    mongodb_uri: Optional[str] = None,
    mongodb_database: Optional[str] = None,
    timeout_ms: int = 5000,
) -> DocumentStore:
    """Pick the document store for the deployment mode."""
    if deployment_mode in MONGO_MODES:
        from .mongo_adapter import MongoAdapter
        logger.info("Using MongoDB document store")
        return MongoAdapter(mongodb_uri, database=mongodb_database, timeout_ms=timeout_ms)

    logger.info(f"Using SQLite document store at {db_path}")
    return NoSQLAdapter(db_path, timeout=timeout_ms / 1000)


def init_db(store: DocumentStore) -> DocumentStore:
    """Create collections and indexes; safe to call repeatedly."""
    store.init_collections()
    return store
