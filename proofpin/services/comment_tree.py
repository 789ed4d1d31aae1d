"""Comment thread reconstruction.

Turns the flat comment list of one file into an ordered forest. parent_id
values are treated as hints, not as trusted structure:

- A parent_id that does not resolve within the input (deleted parent, or a
  comment from another file) makes the comment a root.
- A comment pointing at itself is a root.
- Longer cycles (A -> B -> A) are cut at the member with the smallest sort
  key, which becomes a root.

Every input comment therefore appears exactly once and depth is finite.
Siblings and roots are ordered by (created_at, id), so the result does not
depend on the input order. No step recurses, so deep threads are safe.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

from proofpin.core.logging import get_logger
from proofpin.utils.timestamps import as_utc

logger = get_logger(__name__)


class ThreadableComment(Protocol):
    """The fields the tree builder reads from a comment record."""

    id: str
    parent_id: str | None
    created_at: datetime


@dataclass
class CommentNode:
    """A comment plus its ordered direct replies."""

    comment: ThreadableComment
    replies: list["CommentNode"] = field(default_factory=list)

    @property
    def id(self) -> str:
        return self.comment.id

    def walk(self) -> Iterator["CommentNode"]:
        """Yield this node and all descendants in display (pre-)order."""
        stack: list[CommentNode] = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.replies))


def sort_key(comment: ThreadableComment) -> tuple[datetime, str]:
    """Display order: creation time, then id for ties."""
    return (as_utc(comment.created_at), comment.id)


def _resolve_parents(index: dict[str, CommentNode]) -> dict[str, str | None]:
    """Map each id to its effective parent id, None for roots."""
    parent_of: dict[str, str | None] = {}
    for comment_id, node in index.items():
        parent_id = node.comment.parent_id
        if parent_id is None or parent_id == comment_id:
            parent_of[comment_id] = None
        elif parent_id not in index:
            logger.debug(
                "Dangling parent reference, promoting comment to root",
                extra={"comment_id": comment_id, "parent_id": parent_id},
            )
            parent_of[comment_id] = None
        else:
            parent_of[comment_id] = parent_id
    return parent_of


def _break_cycles(
    parent_of: dict[str, str | None], index: dict[str, CommentNode]
) -> None:
    """Cut every parent cycle in place.

    Each comment has at most one parent, so each connected component holds
    at most one cycle. Walking up from every node while tracking the current
    path finds it; the cycle member with the smallest sort key loses its
    parent link.
    """
    done: set[str] = set()
    ordered_ids = sorted(index, key=lambda cid: sort_key(index[cid].comment))

    for start in ordered_ids:
        path: list[str] = []
        on_path: set[str] = set()
        current: str | None = start

        while current is not None and current not in done:
            if current in on_path:
                cycle = path[path.index(current):]
                cut = min(cycle, key=lambda cid: sort_key(index[cid].comment))
                logger.warning(
                    "Comment parent cycle detected, promoting member to root",
                    extra={"cycle_length": len(cycle), "comment_id": cut},
                )
                parent_of[cut] = None
                break
            path.append(current)
            on_path.add(current)
            current = parent_of[current]

        done.update(path)


def build_comment_tree(comments: Iterable[ThreadableComment]) -> list[CommentNode]:
    """Build the ordered reply forest for one file's comments.

    Args:
        comments: Flat comments of a single file, in any order

    Returns:
        Root nodes ordered by (created_at, id); each node's replies are
        ordered the same way
    """
    index: dict[str, CommentNode] = {}
    for comment in comments:
        existing = index.get(comment.id)
        if existing is not None:
            # Keep one record per id regardless of input order
            if sort_key(comment) >= sort_key(existing.comment):
                continue
        index[comment.id] = CommentNode(comment=comment)

    parent_of = _resolve_parents(index)
    _break_cycles(parent_of, index)

    roots: list[CommentNode] = []
    for node in sorted(index.values(), key=lambda n: sort_key(n.comment)):
        parent_id = parent_of[node.id]
        if parent_id is None:
            roots.append(node)
        else:
            index[parent_id].replies.append(node)

    return roots


def iter_forest(forest: Iterable[CommentNode]) -> Iterator[CommentNode]:
    """Yield every node of a forest in display order."""
    for root in forest:
        yield from root.walk()


def comment_depth(node: CommentNode) -> int:
    """Height of the thread below node: 0 without replies, 1 with only direct replies, ..."""
    height = 0
    stack: list[tuple[CommentNode, int]] = [(node, 0)]
    while stack:
        current, level = stack.pop()
        height = max(height, level)
        stack.extend((reply, level + 1) for reply in current.replies)
    return height


def total_reply_count(node: CommentNode) -> int:
    """Number of replies at any depth below node."""
    return sum(1 for _ in node.walk()) - 1


def find_comment(forest: Iterable[CommentNode], comment_id: str) -> CommentNode | None:
    """Find the node for comment_id anywhere in the forest."""
    for node in iter_forest(forest):
        if node.id == comment_id:
            return node
    return None


def find_thread_root(
    forest: Iterable[CommentNode], comment_id: str
) -> CommentNode | None:
    """Return the root whose thread contains comment_id."""
    for root in forest:
        if find_comment([root], comment_id) is not None:
            return root
    return None
