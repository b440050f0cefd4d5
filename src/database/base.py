"""
Interface shared by the document store adapters.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

ASCENDING = 1
DESCENDING = -1

# MongoDB keeps millisecond precision
TIMESTAMP_RESOLUTION = timedelta(milliseconds=1)

SortSpec = Sequence[Tuple[str, int]]

# (field, at): set field to at, or one tick past its stored value if that is later
Touch = Tuple[str, datetime]


class DocumentStore(Protocol):
    """Interface for document-based persistence."""

    def init_collections(self) -> None:
        ...

    def ping(self) -> bool:
        ...

    def create_document(self, collection: str, document: Dict[str, Any]) -> str:
        ...

    def get_document(
        self, collection: str, doc_id: str, exclude_fields: Sequence[str] = ()
    ) -> Optional[Dict[str, Any]]:
        ...

    def query_documents(
        self,
        collection: str,
        query: Dict[str, Any],
        sort: Optional[SortSpec] = None,
    ) -> List[Dict[str, Any]]:
        ...

    def count_documents(self, collection: str, query: Optional[Dict[str, Any]] = None) -> int:
        ...

    def find_one_and_update(
        self,
        collection: str,
        query: Dict[str, Any],
        fields: Dict[str, Any],
        touch: Optional[Touch] = None,
    ) -> Optional[Dict[str, Any]]:
        ...

    def find_one_and_delete(
        self, collection: str, query: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        ...

    def close(self) -> None:
        ...
