"""Positional anchors for comments.

Comments store their position in flat nullable columns (position_x,
position_y, timestamp, page). Which of them mean anything depends on the
owning file's mime type, so at the logic layer the columns are read into one
of three anchor shapes:

    image/*          -> ImagePoint(x, y)
    video/*          -> VideoTime(seconds)
    application/pdf  -> PdfPoint(page, x, y)   (x/y optional)
    anything else    -> no anchor, general comments only

Positions are percentage-of-dimension x 100, i.e. integers in 0..10000.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Protocol

POSITION_MIN = 0
POSITION_MAX = 10000


class AnchorFamily(str, Enum):
    """Coordinate system used by comments on a file."""

    NONE = "none"
    IMAGE = "image"
    VIDEO = "video"
    PDF = "pdf"


class AnchoredComment(Protocol):
    id: str
    parent_id: str | None
    created_at: datetime
    position_x: int | None
    position_y: int | None
    timestamp: int | None
    page: int | None


@dataclass(frozen=True)
class ImagePoint:
    x: int
    y: int


@dataclass(frozen=True)
class VideoTime:
    seconds: int


@dataclass(frozen=True)
class PdfPoint:
    """A page, optionally with a point on it."""

    page: int
    x: int | None = None
    y: int | None = None

    @property
    def has_point(self) -> bool:
        return self.x is not None and self.y is not None


Anchor = ImagePoint | VideoTime | PdfPoint


class AnchorValidationError(Exception):
    """Anchor fields do not fit the file's anchor family."""

    def __init__(self, field: str, value: object, message: str) -> None:
        self.field = field
        self.value = value
        self.message = message
        super().__init__(f"Validation error for {field}: {message}")


def anchor_family_for_mime(mime_type: str | None) -> AnchorFamily:
    """Derive the anchor family from a mime type (parameters are ignored)."""
    if not mime_type:
        return AnchorFamily.NONE
    base = mime_type.split(";", 1)[0].strip().lower()
    if base.startswith("image/"):
        return AnchorFamily.IMAGE
    if base.startswith("video/"):
        return AnchorFamily.VIDEO
    if base == "application/pdf":
        return AnchorFamily.PDF
    return AnchorFamily.NONE


def anchor_for(comment: AnchoredComment, family: AnchorFamily) -> Anchor | None:
    """Read the comment's anchor for the given family.

    Returns None when the fields that family needs are not all set. Fields
    belonging to other families are ignored.
    """
    if family == AnchorFamily.IMAGE:
        if comment.position_x is None or comment.position_y is None:
            return None
        return ImagePoint(x=comment.position_x, y=comment.position_y)

    if family == AnchorFamily.VIDEO:
        if comment.timestamp is None:
            return None
        return VideoTime(seconds=comment.timestamp)

    if family == AnchorFamily.PDF:
        if comment.page is None:
            return None
        if comment.position_x is None or comment.position_y is None:
            return PdfPoint(page=comment.page)
        return PdfPoint(page=comment.page, x=comment.position_x, y=comment.position_y)

    return None


def _check_position(field: str, value: int) -> None:
    if not POSITION_MIN <= value <= POSITION_MAX:
        raise AnchorValidationError(
            field,
            value,
            f"Must be between {POSITION_MIN} and {POSITION_MAX} (percent x 100)",
        )


def _reject(field: str, value: object, family: AnchorFamily) -> None:
    if value is not None:
        raise AnchorValidationError(
            field, value, f"Not allowed on {family.value} files"
        )


def validate_anchor_fields(
    family: AnchorFamily,
    position_x: int | None = None,
    position_y: int | None = None,
    timestamp: int | None = None,
    page: int | None = None,
) -> None:
    """Check submitted anchor fields against the file's family.

    Raises:
        AnchorValidationError: naming the first offending field
    """
    if family == AnchorFamily.NONE:
        _reject("position_x", position_x, family)
        _reject("position_y", position_y, family)
        _reject("timestamp", timestamp, family)
        _reject("page", page, family)
        return

    if family == AnchorFamily.VIDEO:
        _reject("position_x", position_x, family)
        _reject("position_y", position_y, family)
        _reject("page", page, family)
        if timestamp is not None and timestamp < 0:
            raise AnchorValidationError("timestamp", timestamp, "Must be >= 0")
        return

    # Image and PDF both carry an optional point
    _reject("timestamp", timestamp, family)
    if (position_x is None) != (position_y is None):
        missing = "position_y" if position_y is None else "position_x"
        raise AnchorValidationError(
            missing, None, "position_x and position_y must be given together"
        )
    if position_x is not None and position_y is not None:
        _check_position("position_x", position_x)
        _check_position("position_y", position_y)

    if family == AnchorFamily.IMAGE:
        _reject("page", page, family)
        return

    if page is not None and page < 1:
        raise AnchorValidationError("page", page, "Must be >= 1")
    if position_x is not None and page is None:
        raise AnchorValidationError("page", None, "A point on a PDF requires a page")
