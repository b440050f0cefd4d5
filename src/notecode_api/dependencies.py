"""
Dependency wiring for the FastAPI app.

The document store and settings are created once in ``create_app`` and kept on
``app.state``; these accessors hand them to routes and the auth gate.
"""

from fastapi import Depends, Request

from database import DocumentStore
from notecode_api.config.settings import Settings
from notecode_api.services.file_service import FileService


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_document_store(request: Request) -> DocumentStore:
    return request.app.state.store


def get_file_service(store: DocumentStore = Depends(get_document_store)) -> FileService:
    return FileService(store)
