"""Project API endpoints.

Routes:
- GET    /projects                  list the caller's projects with activity
- POST   /projects                  create a project
- GET    /projects/{project_id}     project with its files
- PUT    /projects/{project_id}     rename a project
- DELETE /projects/{project_id}     delete a project and everything in it
- POST   /projects/{project_id}/viewed  mark the project viewed by the caller
- GET    /projects/{project_id}/view    the caller's last view of the project

Error Logging Requirements:
- Log all incoming requests with method, path, request_id
- Log validation failures at WARNING
- Return structured error responses: {"error": str, "code": str, "request_id": str}
"""

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from proofpin.api.v1.errors import (
    get_request_id,
    not_found,
    not_found_doc,
    validation_doc,
    validation_error,
)
from proofpin.core.auth import UserInfo, get_current_user
from proofpin.core.database import get_session
from proofpin.core.logging import get_logger
from proofpin.schemas.file import FileResponse
from proofpin.schemas.project import (
    ProjectCreate,
    ProjectDetailResponse,
    ProjectResponse,
    ProjectUpdate,
    ProjectViewResponse,
    ProjectWithStatsResponse,
)
from proofpin.services.activity import ActivityService
from proofpin.services.project import (
    ProjectNotFoundError,
    ProjectService,
    ProjectValidationError,
)
from proofpin.services.storage import StorageService, get_storage_service
from proofpin.services.view_tracking import ViewTrackingService
from proofpin.utils.timestamps import as_utc

logger = get_logger(__name__)

router = APIRouter()


@router.get(
    "",
    response_model=list[ProjectWithStatsResponse],
    summary="List projects with activity",
    description=(
        "List the caller's projects, newest first. Each entry carries file and "
        "comment counts, the newest comment time, and whether any comment is "
        "newer than the caller's last view of the project."
    ),
)
async def list_projects(
    request: Request,
    user: UserInfo = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> list[ProjectWithStatsResponse]:
    request_id = get_request_id(request)
    logger.info(
        "List projects request",
        extra={"request_id": request_id, "user_id": user.id},
    )

    service = ActivityService(session)
    return await service.list_projects_with_stats(user.id)


@router.post(
    "",
    response_model=ProjectResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a project",
    responses={400: validation_doc("Validation failed for 'title': Title is required")},
)
async def create_project(
    request: Request,
    data: ProjectCreate,
    user: UserInfo = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> ProjectResponse | JSONResponse:
    request_id = get_request_id(request)
    logger.info(
        "Create project request",
        extra={"request_id": request_id, "user_id": user.id},
    )

    service = ProjectService(session)
    try:
        project = await service.create_project(user.id, data)
    except ProjectValidationError as e:
        logger.warning(
            "Project validation error",
            extra={"request_id": request_id, "field": e.field, "message": e.message},
        )
        return validation_error(e, request_id)

    return ProjectResponse.model_validate(project)


@router.get(
    "/{project_id}",
    response_model=ProjectDetailResponse,
    summary="Get a project with its files",
    responses={404: not_found_doc("Project")},
)
async def get_project(
    request: Request,
    project_id: str,
    session: AsyncSession = Depends(get_session),
) -> ProjectDetailResponse | JSONResponse:
    request_id = get_request_id(request)
    logger.debug(
        "Get project request",
        extra={"request_id": request_id, "project_id": project_id},
    )

    service = ProjectService(session)
    try:
        project, files = await service.get_project_with_files(project_id)
    except ProjectNotFoundError as e:
        return not_found(e, request_id)
    except ProjectValidationError as e:
        return validation_error(e, request_id)

    return ProjectDetailResponse(
        **ProjectResponse.model_validate(project).model_dump(),
        files=[FileResponse.model_validate(f) for f in files],
    )


@router.put(
    "/{project_id}",
    response_model=ProjectResponse,
    summary="Rename a project",
    responses={
        404: not_found_doc("Project"),
        400: validation_doc("Validation failed for 'title': Title is required"),
    },
)
async def update_project(
    request: Request,
    project_id: str,
    data: ProjectUpdate,
    session: AsyncSession = Depends(get_session),
) -> ProjectResponse | JSONResponse:
    request_id = get_request_id(request)
    logger.info(
        "Update project request",
        extra={"request_id": request_id, "project_id": project_id},
    )

    service = ProjectService(session)
    try:
        project = await service.update_project(project_id, data)
    except ProjectNotFoundError as e:
        return not_found(e, request_id)
    except ProjectValidationError as e:
        logger.warning(
            "Project validation error",
            extra={"request_id": request_id, "field": e.field, "message": e.message},
        )
        return validation_error(e, request_id)

    return ProjectResponse.model_validate(project)


@router.delete(
    "/{project_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a project",
    description="Deletes the project with its files, comments and view marks.",
    responses={404: not_found_doc("Project")},
)
async def delete_project(
    request: Request,
    project_id: str,
    session: AsyncSession = Depends(get_session),
    storage: StorageService = Depends(get_storage_service),
) -> Response:
    request_id = get_request_id(request)
    logger.info(
        "Delete project request",
        extra={"request_id": request_id, "project_id": project_id},
    )

    service = ProjectService(session, storage=storage)
    try:
        await service.delete_project(project_id)
    except ProjectNotFoundError as e:
        return not_found(e, request_id)
    except ProjectValidationError as e:
        return validation_error(e, request_id)

    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{project_id}/viewed",
    response_model=ProjectViewResponse,
    summary="Mark a project as viewed",
    description="Records now as the caller's last view of the project.",
    responses={404: not_found_doc("Project")},
)
async def mark_project_viewed(
    request: Request,
    project_id: str,
    user: UserInfo = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> ProjectViewResponse | JSONResponse:
    request_id = get_request_id(request)
    logger.info(
        "Mark project viewed request",
        extra={
            "request_id": request_id,
            "project_id": project_id,
            "user_id": user.id,
        },
    )

    service = ViewTrackingService(session)
    try:
        view = await service.record_view(user.id, project_id)
    except ProjectNotFoundError as e:
        return not_found(e, request_id)
    except ProjectValidationError as e:
        return validation_error(e, request_id)

    return ProjectViewResponse(
        project_id=view.project_id,
        user_id=view.user_id,
        last_viewed_at=as_utc(view.last_viewed_at),
    )


@router.get(
    "/{project_id}/view",
    response_model=ProjectViewResponse,
    summary="Get the caller's last view of a project",
    description="last_viewed_at is null when the caller never viewed the project.",
    responses={404: not_found_doc("Project")},
)
async def get_project_view(
    request: Request,
    project_id: str,
    user: UserInfo = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> ProjectViewResponse | JSONResponse:
    request_id = get_request_id(request)
    service = ViewTrackingService(session)
    try:
        view = await service.get_view(user.id, project_id)
    except ProjectNotFoundError as e:
        return not_found(e, request_id)
    except ProjectValidationError as e:
        return validation_error(e, request_id)

    return ProjectViewResponse(
        project_id=project_id,
        user_id=user.id,
        last_viewed_at=as_utc(view.last_viewed_at) if view is not None else None,
    )
