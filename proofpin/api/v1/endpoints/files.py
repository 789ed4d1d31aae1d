"""File API endpoints.

Routes:
- GET    /projects/{project_id}/files   list a project's files (newest first)
- POST   /projects/{project_id}/files   upload a file (multipart/form-data)
- GET    /files/{file_id}               file metadata
- GET    /files/{file_id}/content       file bytes
- DELETE /files/{file_id}               delete a file and its comments

Any file type is accepted; the MIME type decides how comments are anchored.
Blob store failures are left to the application's 500 handler.
"""

from fastapi import APIRouter, Depends, Request, Response, UploadFile, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from proofpin.api.v1.errors import (
    get_request_id,
    not_found,
    not_found_doc,
    validation_doc,
    validation_error,
)
from proofpin.core.database import get_session
from proofpin.core.logging import get_logger
from proofpin.schemas.file import FileResponse
from proofpin.services.file import (
    FileService,
    FileValidationError,
    ProjectFileNotFoundError,
)
from proofpin.services.project import ProjectNotFoundError
from proofpin.services.storage import StorageService, get_storage_service

logger = get_logger(__name__)

router = APIRouter()


@router.get(
    "/projects/{project_id}/files",
    response_model=list[FileResponse],
    summary="List a project's files",
    responses={404: not_found_doc("Project")},
)
async def list_files(
    request: Request,
    project_id: str,
    session: AsyncSession = Depends(get_session),
    storage: StorageService = Depends(get_storage_service),
) -> list[FileResponse] | JSONResponse:
    request_id = get_request_id(request)
    service = FileService(session, storage)
    try:
        files = await service.list_files(project_id)
    except ProjectNotFoundError as e:
        return not_found(e, request_id)
    except FileValidationError as e:
        return validation_error(e, request_id)

    return [FileResponse.model_validate(f) for f in files]


@router.post(
    "/projects/{project_id}/files",
    response_model=FileResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a file",
    responses={
        404: not_found_doc("Project"),
        400: validation_doc("Validation failed for 'file': File is empty"),
    },
)
async def upload_file(
    request: Request,
    project_id: str,
    file: UploadFile,
    session: AsyncSession = Depends(get_session),
    storage: StorageService = Depends(get_storage_service),
) -> FileResponse | JSONResponse:
    request_id = get_request_id(request)
    logger.info(
        "Upload file request",
        extra={
            "request_id": request_id,
            "project_id": project_id,
            "upload_filename": file.filename,
            "content_type": file.content_type,
        },
    )

    content = await file.read()
    service = FileService(session, storage)
    try:
        project_file = await service.upload_file(
            project_id=project_id,
            filename=file.filename,
            content_type=file.content_type,
            content=content,
        )
    except ProjectNotFoundError as e:
        return not_found(e, request_id)
    except FileValidationError as e:
        logger.warning(
            "File validation error",
            extra={"request_id": request_id, "field": e.field, "message": e.message},
        )
        return validation_error(e, request_id)

    return FileResponse.model_validate(project_file)


@router.get(
    "/files/{file_id}",
    response_model=FileResponse,
    summary="Get file metadata",
    responses={404: not_found_doc("File")},
)
async def get_file(
    request: Request,
    file_id: str,
    session: AsyncSession = Depends(get_session),
    storage: StorageService = Depends(get_storage_service),
) -> FileResponse | JSONResponse:
    request_id = get_request_id(request)
    service = FileService(session, storage)
    try:
        project_file = await service.get_file(file_id)
    except ProjectFileNotFoundError as e:
        return not_found(e, request_id)
    except FileValidationError as e:
        return validation_error(e, request_id)

    return FileResponse.model_validate(project_file)


@router.get(
    "/files/{file_id}/content",
    response_class=Response,
    summary="Download file bytes",
    responses={404: not_found_doc("File")},
)
async def get_file_content(
    request: Request,
    file_id: str,
    session: AsyncSession = Depends(get_session),
    storage: StorageService = Depends(get_storage_service),
) -> Response:
    request_id = get_request_id(request)
    service = FileService(session, storage)
    try:
        project_file, content = await service.read_content(file_id)
    except ProjectFileNotFoundError as e:
        return not_found(e, request_id)
    except FileValidationError as e:
        return validation_error(e, request_id)

    return Response(
        content=content,
        media_type=project_file.mime_type,
        headers={
            "Content-Disposition": f'inline; filename="{project_file.name}"',
        },
    )


@router.delete(
    "/files/{file_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a file",
    description="Deletes the file, its comments and its stored bytes.",
    responses={404: not_found_doc("File")},
)
async def delete_file(
    request: Request,
    file_id: str,
    session: AsyncSession = Depends(get_session),
    storage: StorageService = Depends(get_storage_service),
) -> Response:
    request_id = get_request_id(request)
    logger.info(
        "Delete file request",
        extra={"request_id": request_id, "file_id": file_id},
    )

    service = FileService(session, storage)
    try:
        await service.delete_file(file_id)
    except ProjectFileNotFoundError as e:
        return not_found(e, request_id)
    except FileValidationError as e:
        return validation_error(e, request_id)

    return Response(status_code=status.HTTP_204_NO_CONTENT)
