"""
NoteCode API service layer.

Services own the business rules and talk to the document store; routers stay thin.
"""

from .file_service import FileRecord, FileService

__all__ = ['FileRecord', 'FileService']
