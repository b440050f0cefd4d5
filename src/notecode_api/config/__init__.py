"""
Configuration management for the NoteCode API.

Contains the Pydantic settings and the cached accessor used by the app and CLI.
"""

from .settings import Settings, get_settings

__all__ = ['Settings', 'get_settings']
