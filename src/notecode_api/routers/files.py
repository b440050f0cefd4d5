from typing import List

from fastapi import APIRouter, Depends, status

from notecode_api.auth.gate import authenticate
from notecode_api.auth.identity import UserRecord
from notecode_api.dependencies import get_file_service
from notecode_api.schemas import (
    AuthCheckResponse,
    CreateFileRequest,
    FileResponse,
    MessageResponse,
    UpdateAlgoRequest,
    UpdateCodeRequest,
    UpdateFileRequest,
)
from notecode_api.services.file_service import FileRecord, FileService

# Every route below sits behind the authentication gate
router = APIRouter(dependencies=[Depends(authenticate)])


def _to_response(record: FileRecord) -> FileResponse:
    return FileResponse.model_validate(record.model_dump())


@router.get("/test", response_model=AuthCheckResponse)
def check_auth(identity: UserRecord = Depends(authenticate)) -> AuthCheckResponse:
    """Echo the authenticated user; useful to check a token."""
    return AuthCheckResponse(message="File routes are working", user=identity.id)


@router.post("/files", response_model=FileResponse, status_code=status.HTTP_201_CREATED)
def create_file(
    payload: CreateFileRequest,
    identity: UserRecord = Depends(authenticate),
    files: FileService = Depends(get_file_service),
) -> FileResponse:
    """
    Create a code file owned by the caller.

    `name`, `language` and `code` are required. Any `owner` sent in the body is ignored.
    """
    return _to_response(files.create(identity, payload))


@router.get("/files/user/{user_id}", response_model=List[FileResponse])
def list_user_files(
    user_id: str,
    identity: UserRecord = Depends(authenticate),
    files: FileService = Depends(get_file_service),
) -> List[FileResponse]:
    """List the caller's files, most recently modified first."""
    return [_to_response(record) for record in files.list_by_owner(identity, user_id)]


@router.get("/files/{file_id}", response_model=FileResponse)
def get_file(
    file_id: str,
    identity: UserRecord = Depends(authenticate),
    files: FileService = Depends(get_file_service),
) -> FileResponse:
    return _to_response(files.get_by_id(identity, file_id))


@router.patch("/files/{file_id}", response_model=FileResponse)
def update_file(
    file_id: str,
    payload: UpdateFileRequest,
    identity: UserRecord = Depends(authenticate),
    files: FileService = Depends(get_file_service),
) -> FileResponse:
    """Change any of name, language, code, algo, input and output."""
    return _to_response(files.update_partial(identity, file_id, payload))


@router.patch("/files/{file_id}/code", response_model=FileResponse)
def update_file_code(
    file_id: str,
    payload: UpdateCodeRequest,
    identity: UserRecord = Depends(authenticate),
    files: FileService = Depends(get_file_service),
) -> FileResponse:
    return _to_response(files.update_code(identity, file_id, payload.code))


@router.patch("/files/{file_id}/algo", response_model=FileResponse)
def update_file_algo(
    file_id: str,
    payload: UpdateAlgoRequest,
    identity: UserRecord = Depends(authenticate),
    files: FileService = Depends(get_file_service),
) -> FileResponse:
    return _to_response(files.update_algo(identity, file_id, payload.algo))


@router.delete("/files/{file_id}", response_model=MessageResponse)
def delete_file(
    file_id: str,
    identity: UserRecord = Depends(authenticate),
    files: FileService = Depends(get_file_service),
) -> MessageResponse:
    return MessageResponse(**files.delete_by_id(identity, file_id))
