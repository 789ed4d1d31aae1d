"""Public share-link endpoints.

Routes:
- GET /public/projects/{public_id}   shared project with its files
- GET /public/files/{public_id}      shared file with a reference to its project

Unknown public ids are reported as NOT_FOUND.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from proofpin.api.v1.errors import get_request_id, not_found, not_found_doc
from proofpin.core.database import get_session
from proofpin.core.logging import get_logger
from proofpin.schemas.file import FileResponse, PublicFileResponse, PublicProjectRef
from proofpin.schemas.project import ProjectDetailResponse, ProjectResponse
from proofpin.services.file import FileService, ProjectFileNotFoundError
from proofpin.services.project import ProjectNotFoundError, ProjectService
from proofpin.services.storage import StorageService, get_storage_service

logger = get_logger(__name__)

router = APIRouter()


@router.get(
    "/projects/{public_id}",
    response_model=ProjectDetailResponse,
    summary="Resolve a shared project",
    responses={404: not_found_doc("Project")},
)
async def get_public_project(
    request: Request,
    public_id: str,
    session: AsyncSession = Depends(get_session),
) -> ProjectDetailResponse | JSONResponse:
    request_id = get_request_id(request)
    logger.debug(
        "Public project request",
        extra={"request_id": request_id, "public_id": public_id[:64]},
    )

    service = ProjectService(session)
    try:
        project, files = await service.get_public_project(public_id)
    except ProjectNotFoundError as e:
        return not_found(e, request_id)

    return ProjectDetailResponse(
        **ProjectResponse.model_validate(project).model_dump(),
        files=[FileResponse.model_validate(f) for f in files],
    )


@router.get(
    "/files/{public_id}",
    response_model=PublicFileResponse,
    summary="Resolve a shared file",
    responses={404: not_found_doc("File")},
)
async def get_public_file(
    request: Request,
    public_id: str,
    session: AsyncSession = Depends(get_session),
    storage: StorageService = Depends(get_storage_service),
) -> PublicFileResponse | JSONResponse:
    request_id = get_request_id(request)
    logger.debug(
        "Public file request",
        extra={"request_id": request_id, "public_id": public_id[:64]},
    )

    service = FileService(session, storage)
    try:
        project_file, project = await service.get_public_file(public_id)
    except ProjectFileNotFoundError as e:
        return not_found(e, request_id)

    return PublicFileResponse(
        file=FileResponse.model_validate(project_file),
        project=PublicProjectRef.model_validate(project),
    )
