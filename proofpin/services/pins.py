"""Pin derivation: which comments get a numbered marker on the media.

Only root comments (no parent_id) whose anchor is complete for the file's
family are pins. Pins are numbered 1..N by (created_at, id) across the
whole file, so a PDF pin keeps its number whichever page is displayed.
Replies and general comments are never pins; they only show up in the
threaded list.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from proofpin.services.anchors import (
    Anchor,
    AnchoredComment,
    AnchorFamily,
    PdfPoint,
    anchor_for,
)
from proofpin.services.comment_tree import sort_key


@dataclass(frozen=True)
class Pin:
    number: int
    comment: AnchoredComment
    anchor: Anchor


def derive_pins(
    comments: Iterable[AnchoredComment], family: AnchorFamily
) -> list[Pin]:
    """Number the pin-eligible root comments of one file.

    Args:
        comments: All comments of the file (any order; replies are skipped)
        family: The file's anchor family

    Returns:
        Pins in number order
    """
    eligible: list[tuple[AnchoredComment, Anchor]] = []
    for comment in comments:
        if comment.parent_id is not None:
            continue
        anchor = anchor_for(comment, family)
        if anchor is not None:
            eligible.append((comment, anchor))

    eligible.sort(key=lambda pair: sort_key(pair[0]))
    return [
        Pin(number=number, comment=comment, anchor=anchor)
        for number, (comment, anchor) in enumerate(eligible, start=1)
    ]


def pins_on_page(pins: Iterable[Pin], page: int) -> list[Pin]:
    """PDF pins that can be drawn on the given page (page plus point set)."""
    return [
        pin
        for pin in pins
        if isinstance(pin.anchor, PdfPoint)
        and pin.anchor.page == page
        and pin.anchor.has_point
    ]


def pin_numbers(pins: Iterable[Pin]) -> dict[str, int]:
    """Map comment id to pin number, for labelling threads in the sidebar."""
    return {pin.comment.id: pin.number for pin in pins}
