"""Comment API endpoints.

Routes:
- GET    /files/{file_id}/comments            flat list (?order=asc|desc)
- GET    /files/{file_id}/comments/threads    reply forest plus pins (?page=)
- POST   /files/{file_id}/comments            submit a comment or reply
- GET    /comments/{comment_id}/thread        whole thread containing a comment
- PATCH  /comments/{comment_id}               change the review status tag
- DELETE /comments/{comment_id}               delete (replies are kept)

Error Logging Requirements:
- Log all incoming requests with method, path, request_id
- Log validation failures at WARNING with the failing field
- Return structured error responses: {"error": str, "code": str, "request_id": str}
"""

from typing import Literal

from fastapi import APIRouter, Depends, Query, Request, Response, status
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
from proofpin.schemas.comment import (
    CommentCreate,
    CommentResponse,
    CommentTagUpdate,
    CommentThreadResponse,
    FileThreadsResponse,
    PinResponse,
)
from proofpin.services.comment import (
    CommentNotFoundError,
    CommentService,
    CommentValidationError,
)
from proofpin.services.comment_tree import (
    CommentNode,
    comment_depth,
    total_reply_count,
)
from proofpin.services.file import FileValidationError, ProjectFileNotFoundError
from proofpin.services.pins import Pin

logger = get_logger(__name__)

router = APIRouter()


def _thread_response(
    node: CommentNode, pin_numbers: dict[str, int]
) -> CommentThreadResponse:
    return CommentThreadResponse(
        **CommentResponse.model_validate(node.comment).model_dump(),
        pin_number=pin_numbers.get(node.id),
        reply_count=total_reply_count(node),
        depth=comment_depth(node),
        replies=[_thread_response(reply, pin_numbers) for reply in node.replies],
    )


def _pin_response(pin: Pin) -> PinResponse:
    comment = pin.comment
    return PinResponse(
        number=pin.number,
        comment_id=comment.id,
        position_x=comment.position_x,
        position_y=comment.position_y,
        timestamp=comment.timestamp,
        page=comment.page,
    )


@router.get(
    "/files/{file_id}/comments",
    response_model=list[CommentResponse],
    summary="List a file's comments",
    description="Flat list ordered by creation time, oldest first by default.",
    responses={404: not_found_doc("File")},
)
async def list_comments(
    request: Request,
    file_id: str,
    order: Literal["asc", "desc"] = Query("asc"),
    session: AsyncSession = Depends(get_session),
) -> list[CommentResponse] | JSONResponse:
    request_id = get_request_id(request)
    service = CommentService(session)
    try:
        comments = await service.list_comments(file_id, descending=order == "desc")
    except ProjectFileNotFoundError as e:
        return not_found(e, request_id)
    except FileValidationError as e:
        return validation_error(e, request_id)

    return [CommentResponse.model_validate(c) for c in comments]


@router.get(
    "/files/{file_id}/comments/threads",
    response_model=FileThreadsResponse,
    summary="Threaded comments and pins of a file",
    description=(
        "Returns the reply forest of the file and its numbered pins. For PDFs, "
        "page restricts the pins to that page; pin numbers stay the same."
    ),
    responses={
        404: not_found_doc("File"),
        400: validation_doc("Validation failed for 'page': Must be >= 1"),
    },
)
async def get_comment_threads(
    request: Request,
    file_id: str,
    page: int | None = Query(None),
    session: AsyncSession = Depends(get_session),
) -> FileThreadsResponse | JSONResponse:
    request_id = get_request_id(request)
    logger.debug(
        "Get comment threads request",
        extra={"request_id": request_id, "file_id": file_id, "page": page},
    )

    service = CommentService(session)
    try:
        result = await service.get_threads(file_id, page=page)
    except ProjectFileNotFoundError as e:
        return not_found(e, request_id)
    except (FileValidationError, CommentValidationError) as e:
        return validation_error(e, request_id)

    numbers = result.pin_numbers
    return FileThreadsResponse(
        file_id=result.file.id,
        anchor_family=result.family,
        page=result.page,
        total_comments=result.total_comments,
        threads=[_thread_response(root, numbers) for root in result.threads],
        pins=[_pin_response(pin) for pin in result.visible_pins],
    )


@router.post(
    "/files/{file_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a comment or reply",
    responses={
        404: not_found_doc("File"),
        400: validation_doc(
            "Validation failed for 'timestamp': Not allowed on image files"
        ),
    },
)
async def create_comment(
    request: Request,
    file_id: str,
    data: CommentCreate,
    session: AsyncSession = Depends(get_session),
) -> CommentResponse | JSONResponse:
    request_id = get_request_id(request)
    logger.info(
        "Create comment request",
        extra={
            "request_id": request_id,
            "file_id": file_id,
            "parent_id": data.parent_id,
        },
    )

    service = CommentService(session)
    try:
        comment = await service.create_comment(file_id, data)
    except ProjectFileNotFoundError as e:
        return not_found(e, request_id)
    except (FileValidationError, CommentValidationError) as e:
        logger.warning(
            "Comment validation error",
            extra={"request_id": request_id, "field": e.field, "message": e.message},
        )
        return validation_error(e, request_id)

    return CommentResponse.model_validate(comment)


@router.get(
    "/comments/{comment_id}/thread",
    response_model=CommentThreadResponse,
    summary="Get the thread containing a comment",
    responses={404: not_found_doc("Comment")},
)
async def get_comment_thread(
    request: Request,
    comment_id: str,
    session: AsyncSession = Depends(get_session),
) -> CommentThreadResponse | JSONResponse:
    request_id = get_request_id(request)
    service = CommentService(session)
    try:
        thread = await service.get_thread(comment_id)
    except CommentNotFoundError as e:
        return not_found(e, request_id)
    except CommentValidationError as e:
        return validation_error(e, request_id)

    return _thread_response(thread.root, thread.pin_numbers)


@router.patch(
    "/comments/{comment_id}",
    response_model=CommentResponse,
    summary="Change a comment's status tag",
    responses={
        404: not_found_doc("Comment"),
        400: validation_doc(
            "Validation failed for 'tag': Must be one of: In Progress, Resolved, To Do"
        ),
    },
)
async def update_comment_tag(
    request: Request,
    comment_id: str,
    data: CommentTagUpdate,
    session: AsyncSession = Depends(get_session),
) -> CommentResponse | JSONResponse:
    request_id = get_request_id(request)
    logger.info(
        "Update comment tag request",
        extra={"request_id": request_id, "comment_id": comment_id, "tag": data.tag},
    )

    service = CommentService(session)
    try:
        comment = await service.update_tag(comment_id, data.tag)
    except CommentNotFoundError as e:
        return not_found(e, request_id)
    except CommentValidationError as e:
        logger.warning(
            "Comment validation error",
            extra={"request_id": request_id, "field": e.field, "message": e.message},
        )
        return validation_error(e, request_id)

    return CommentResponse.model_validate(comment)


@router.delete(
    "/comments/{comment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a comment",
    description=(
        "Deleting an already absent comment succeeds. Replies are kept and "
        "appear as top-level comments."
    ),
)
async def delete_comment(
    request: Request,
    comment_id: str,
    session: AsyncSession = Depends(get_session),
) -> Response:
    request_id = get_request_id(request)
    logger.info(
        "Delete comment request",
        extra={"request_id": request_id, "comment_id": comment_id},
    )

    service = CommentService(session)
    try:
        await service.delete_comment(comment_id)
    except CommentValidationError as e:
        return validation_error(e, request_id)

    return Response(status_code=status.HTTP_204_NO_CONTENT)
