"""Caller identity dependency for FastAPI.

There is no authentication. The caller names itself with the X-User-ID
header; requests without one act as the configured default user.
"""

from dataclasses import dataclass

from fastapi import Request

from proofpin.core.config import get_settings
from proofpin.core.logging import get_logger

logger = get_logger(__name__)

USER_ID_HEADER = "X-User-ID"
MAX_USER_ID_LENGTH = 255


@dataclass(frozen=True)
class UserInfo:
    """Identity of the caller."""

    id: str


async def get_current_user(request: Request) -> UserInfo:
    """Resolve the caller from the X-User-ID header.

    Blank or oversized header values fall back to the default user rather
    than failing the request.
    """
    settings = get_settings()
    raw = (request.headers.get(USER_ID_HEADER) or "").strip()

    if not raw:
        return UserInfo(id=settings.default_user_id)

    if len(raw) > MAX_USER_ID_LENGTH:
        logger.warning(
            "Ignoring oversized user id header",
            extra={"header_length": len(raw)},
        )
        return UserInfo(id=settings.default_user_id)

    return UserInfo(id=raw)
