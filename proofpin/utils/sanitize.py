"""Filename sanitization for blob store keys."""

import re
from pathlib import PurePosixPath

from proofpin.core.logging import get_logger

logger = get_logger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")
MAX_FILENAME_LENGTH = 200


def sanitize_filename(filename: str) -> str:
    """Reduce an uploaded filename to a safe single path segment.

    Directory components are dropped, runs of unsafe characters collapse to
    a single underscore and the result is truncated while keeping the
    extension. An empty result becomes "file".
    """
    base = PurePosixPath(filename.replace("\\", "/")).name
    cleaned = _UNSAFE_CHARS.sub("_", base).strip("._")

    if not cleaned:
        logger.debug("Filename sanitized to default", extra={"original": filename[:100]})
        return "file"

    if len(cleaned) > MAX_FILENAME_LENGTH:
        suffix = PurePosixPath(cleaned).suffix[:20]
        cleaned = cleaned[: MAX_FILENAME_LENGTH - len(suffix)] + suffix

    return cleaned
