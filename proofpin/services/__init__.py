"""Services layer - Business logic and orchestration.

Services coordinate between repositories and the blob store to implement
business use cases. The thread, anchor and pin modules are pure functions
over already loaded comments.

Database-backed services are imported from their own modules
(proofpin.services.comment, .project, ...) to keep this package importable
from the schemas layer.
"""

from proofpin.services.anchors import (
    Anchor,
    AnchorFamily,
    AnchorValidationError,
    ImagePoint,
    PdfPoint,
    VideoTime,
    anchor_family_for_mime,
    anchor_for,
    validate_anchor_fields,
)
from proofpin.services.comment_tree import (
    CommentNode,
    build_comment_tree,
    comment_depth,
    find_comment,
    find_thread_root,
    iter_forest,
    total_reply_count,
)
from proofpin.services.pins import Pin, derive_pins, pin_numbers, pins_on_page

__all__ = [
    # Anchors
    "Anchor",
    "AnchorFamily",
    "AnchorValidationError",
    "ImagePoint",
    "PdfPoint",
    "VideoTime",
    "anchor_family_for_mime",
    "anchor_for",
    "validate_anchor_fields",
    # Threads
    "CommentNode",
    "build_comment_tree",
    "comment_depth",
    "find_comment",
    "find_thread_root",
    "iter_forest",
    "total_reply_count",
    # Pins
    "Pin",
    "derive_pins",
    "pin_numbers",
    "pins_on_page",
]
