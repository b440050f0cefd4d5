"""Resolve a token subject to the user it names."""

import logging
from typing import Optional

from database import DocumentStore
from database.schemas import SENSITIVE_USER_FIELDS, USERS_COLLECTION, UserDocument
from notecode_api.errors import UserNotFoundError

logger = logging.getLogger(__name__)

# The authenticated identity handed to handlers is the stored user projection
UserRecord = UserDocument


class IdentityResolver:
    """Looks users up in the document store, never returning credential fields."""

    def __init__(self, store: DocumentStore):
        self.store = store

    def resolve(self, subject: str) -> UserRecord:
        """Return the user named by ``subject``.

        Raises:
            UserNotFoundError: no user has that identifier.
        """
        document: Optional[dict] = self.store.get_document(
            USERS_COLLECTION, subject, exclude_fields=SENSITIVE_USER_FIELDS
        )
        if document is None:
            raise UserNotFoundError(f"No user with id {subject}")
        return UserRecord.model_validate(document)
