"""Exceptions raised by the document store adapters."""


class StoreError(Exception):
    """Base class for document store failures."""


class StoreUnavailableError(StoreError):
    """The store did not answer within its configured timeout."""


class DocumentValidationError(StoreError, ValueError):
    """A document failed its collection schema."""
