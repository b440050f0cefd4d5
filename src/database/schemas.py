"""
JSON schemas for document validation.
This module defines the collections known to the document store and the
schemas documents must satisfy before they are written.
"""

from typing import Dict, Any, Optional
from datetime import datetime

import jsonschema
from pydantic import BaseModel, ConfigDict, Field

FILES_COLLECTION = "files"
USERS_COLLECTION = "users"

COLLECTIONS = (FILES_COLLECTION, USERS_COLLECTION)

# Fields the identity lookup must never hand back
SENSITIVE_USER_FIELDS = ("password", "password_hash")


class FileDocument(BaseModel):
    """Schema for stored code file documents"""
    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., min_length=1, description="Unique file identifier")
    name: str = Field(..., min_length=1, description="File name")
    owner: str = Field(..., min_length=1, description="Owning user identifier")
    language: str = Field(..., min_length=1, description="Source language label")
    code: str = Field(..., min_length=1, description="Snippet source")
    algo: str = Field("", description="Algorithm description")
    input: str = Field("", description="Sample input")
    output: str = Field("", description="Sample output")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last modification timestamp")


class UserDocument(BaseModel):
    """Schema for user documents as seen by this service"""
    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., min_length=1, description="Unique user identifier")
    name: Optional[str] = Field(None, description="Display name")
    email: Optional[str] = Field(None, description="Contact email")
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")


_TIMESTAMP = {"type": "string", "format": "date-time"}

FILE_JSON_SCHEMA = {
    "type": "object",
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "name": {"type": "string", "minLength": 1},
        "owner": {"type": "string", "minLength": 1},
        "language": {"type": "string", "minLength": 1},
        "code": {"type": "string", "minLength": 1},
        "algo": {"type": "string"},
        "input": {"type": "string"},
        "output": {"type": "string"},
        "created_at": _TIMESTAMP,
        "updated_at": _TIMESTAMP,
    },
    "required": ["id", "name", "owner", "language", "code", "created_at", "updated_at"],
    "additionalProperties": False
}

USER_JSON_SCHEMA = {
    "type": "object",
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "name": {"type": ["string", "null"]},
        "email": {"type": ["string", "null"]},
        "password_hash": {"type": ["string", "null"]},
        "created_at": {"type": ["string", "null"], "format": "date-time"},
    },
    "required": ["id"],
    "additionalProperties": False
}


def _jsonable(document: Dict[str, Any]) -> Dict[str, Any]:
    """Render datetimes as ISO strings so the JSON schema can check them"""
    return {
        key: value.isoformat() if isinstance(value, datetime) else value
        for key, value in document.items()
    }


def validate_file_document(document: Dict[str, Any]) -> None:
    """Validate a code file document against the schema"""
    jsonschema.validate(_jsonable(document), FILE_JSON_SCHEMA)


def validate_user_document(document: Dict[str, Any]) -> None:
    """Validate a user document against the schema"""
    jsonschema.validate(_jsonable(document), USER_JSON_SCHEMA)


# Schema mapping for easy access
DOCUMENT_SCHEMAS = {
    FILES_COLLECTION: FILE_JSON_SCHEMA,
    USERS_COLLECTION: USER_JSON_SCHEMA,
}

DOCUMENT_VALIDATORS = {
    FILES_COLLECTION: validate_file_document,
    USERS_COLLECTION: validate_user_document,
}


def validate_fields(collection: str, fields: Dict[str, Any]) -> None:
    """Validate a partial update against the collection schema, field by field"""
    schema = DOCUMENT_SCHEMAS.get(collection)
    if schema is None:
        return
    properties = schema["properties"]
    for key, value in _jsonable(fields).items():
        if key not in properties:
            raise jsonschema.ValidationError(f"Unknown field for {collection}: {key}")
        jsonschema.validate(value, properties[key])
