"""
File service for the NoteCode API.

Owns every read and write of code file documents and enforces ownership:
a file can only be seen, changed or removed by the user recorded as its owner.
Existence is always checked before ownership, so a missing file reports 404 to
everyone and a foreign file reports 403.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List

from bson import ObjectId

from database import DESCENDING, DocumentStore
from database.schemas import FILES_COLLECTION, FileDocument
from notecode_api.auth.identity import UserRecord
from notecode_api.errors import ForbiddenError, NotFoundError, ValidationError
from notecode_api.schemas import CreateFileRequest, UpdateFileRequest
from notecode_api.utils.decorators import log_execution_time

logger = logging.getLogger(__name__)

FileRecord = FileDocument

REQUIRED_FIELDS = ("name", "language", "code")
OPTIONAL_FIELDS = ("algo", "input", "output")
# Fields a caller may change; id, owner and timestamps are managed here
UPDATABLE_FIELDS = REQUIRED_FIELDS + OPTIONAL_FIELDS


def utc_now() -> datetime:
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


class FileService:
    """Ownership-checked CRUD over the files collection"""

    def __init__(self, store: DocumentStore, now: Callable[[], datetime] = utc_now):
        self.store = store
        self._now = now

    def _load_owned(self, identity: UserRecord, file_id: str, action: str) -> Dict[str, Any]:
        """Fetch a file, checking existence first and ownership second."""
        document = self.store.get_document(FILES_COLLECTION, file_id)
        if document is None:
            raise NotFoundError("File not found")
        if document["owner"] != identity.id:
            logger.warning(f"User {identity.id} denied {action} on file {file_id}")
            raise ForbiddenError(f"Not authorized to {action} this file")
        return document

    def _apply_update(self, identity: UserRecord, file_id: str, fields: Dict[str, Any]) -> FileRecord:
        self._load_owned(identity, file_id, "update")

        # Conditional on owner so the write cannot land on a document that changed hands.
        # The store stamps updated_at against the value it holds at write time.
        updated = self.store.find_one_and_update(
            FILES_COLLECTION,
            {"id": file_id, "owner": identity.id},
            fields,
            touch=("updated_at", self._now()),
        )
        if updated is None:
            # Removed between the check and the write
            raise NotFoundError("File not found")
        return FileRecord.model_validate(updated)

    @log_execution_time
    def create(self, identity: UserRecord, payload: CreateFileRequest) -> FileRecord:
        """Store a new file owned by ``identity``."""
        if not all(getattr(payload, field) for field in REQUIRED_FIELDS):
            raise ValidationError("Required fields missing: name, language, and code are required")

        timestamp = self._now()
        document = {
            "id": str(ObjectId()),
            "name": payload.name,
            "owner": identity.id,
            "language": payload.language,
            "code": payload.code,
            "algo": payload.algo or "",
            "input": payload.input or "",
            "output": payload.output or "",
            "created_at": timestamp,
            "updated_at": timestamp,
        }
        self.store.create_document(FILES_COLLECTION, document)
        logger.info(f"User {identity.id} created file {document['id']}")
        return FileRecord.model_validate(document)

    @log_execution_time
    def list_by_owner(self, identity: UserRecord, requested_owner_id: str) -> List[FileRecord]:
        """All files of ``requested_owner_id``, most recently modified first."""
        if requested_owner_id != identity.id:
            logger.warning(f"User {identity.id} denied listing files of {requested_owner_id}")
            raise ForbiddenError("Not authorized to access these files")

        documents = self.store.query_documents(
            FILES_COLLECTION,
            {"owner": requested_owner_id},
            sort=[("updated_at", DESCENDING)],
        )
        return [FileRecord.model_validate(document) for document in documents]

    @log_execution_time
    def get_by_id(self, identity: UserRecord, file_id: str) -> FileRecord:
        return FileRecord.model_validate(self._load_owned(identity, file_id, "access"))

    @log_execution_time
    def update_partial(self, identity: UserRecord, file_id: str, payload: UpdateFileRequest) -> FileRecord:
        """Merge the allow-listed fields present in ``payload`` into the file."""
        updates = {
            field: value
            for field, value in payload.model_dump(exclude_unset=True).items()
            if field in UPDATABLE_FIELDS
        }
        if not updates:
            raise ValidationError("No updates provided")

        for field in REQUIRED_FIELDS:
            if field in updates and not updates[field]:
                raise ValidationError(f"{field} cannot be empty")
        for field in OPTIONAL_FIELDS:
            if field in updates and updates[field] is None:
                updates[field] = ""

        return self._apply_update(identity, file_id, updates)

    @log_execution_time
    def update_code(self, identity: UserRecord, file_id: str, code: str) -> FileRecord:
        if not code:
            raise ValidationError("Code is required")
        return self._apply_update(identity, file_id, {"code": code})

    @log_execution_time
    def update_algo(self, identity: UserRecord, file_id: str, algo: str) -> FileRecord:
        if not algo:
            raise ValidationError("Algo is required")
        return self._apply_update(identity, file_id, {"algo": algo})

    @log_execution_time
    def delete_by_id(self, identity: UserRecord, file_id: str) -> Dict[str, str]:
        """Permanently remove a file owned by ``identity``."""
        self._load_owned(identity, file_id, "delete")
        deleted = self.store.find_one_and_delete(
            FILES_COLLECTION, {"id": file_id, "owner": identity.id}
        )
        if deleted is None:
            raise NotFoundError("File not found")
        logger.info(f"User {identity.id} deleted file {file_id}")
        return {"message": "File deleted successfully"}
