####################################
# --- Request/response schemas --- #
####################################

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class FileFields(BaseModel):
    """Client-suppliable file fields. Anything else in the body is dropped."""
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = Field(None, description="File name.")
    language: Optional[str] = Field(None, description="Language label of the snippet.")
    code: Optional[str] = Field(None, description="Snippet source.")
    algo: Optional[str] = Field(None, description="Algorithm description.")
    input: Optional[str] = Field(None, description="Sample input.")
    output: Optional[str] = Field(None, description="Sample output.")


class CreateFileRequest(FileFields):
    """Request body for `POST /api/files`."""

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "example": {
                "name": "a.py",
                "language": "python",
                "code": "print(1)",
                "algo": "",
                "input": "",
                "output": "1",
            }
        },
    )


class UpdateFileRequest(FileFields):
    """Request body for `PATCH /api/files/:id`; only the fields sent are changed."""


class UpdateCodeRequest(BaseModel):
    """Request body for `PATCH /api/files/:id/code`."""
    code: Optional[str] = None


class UpdateAlgoRequest(BaseModel):
    """Request body for `PATCH /api/files/:id/algo`."""
    algo: Optional[str] = None


class FileResponse(BaseModel):
    """A stored code file as returned to clients."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "665f1c2e9b1d4c3a2e8f0a11",
                "name": "a.py",
                "owner": "665f1b9f9b1d4c3a2e8f0a10",
                "language": "python",
                "code": "print(1)",
                "algo": "",
                "input": "",
                "output": "",
                "createdAt": "2024-06-04T12:00:00Z",
                "updatedAt": "2024-06-04T12:00:00Z",
            }
        },
    )

    id: str
    name: str
    owner: str
    language: str
    code: str
    algo: str = ""
    input: str = ""
    output: str = ""
    created_at: datetime
    updated_at: datetime


class MessageResponse(BaseModel):
    message: str


class AuthCheckResponse(BaseModel):
    """Response model for `GET /api/test`."""
    message: str
    user: str
