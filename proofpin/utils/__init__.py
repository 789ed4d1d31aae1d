"""Utility modules for the application."""

from proofpin.utils.identifiers import is_valid_uuid
from proofpin.utils.sanitize import sanitize_filename
from proofpin.utils.timestamps import EPOCH, as_utc, utc_now

__all__ = [
    "EPOCH",
    "as_utc",
    "is_valid_uuid",
    "sanitize_filename",
    "utc_now",
]
