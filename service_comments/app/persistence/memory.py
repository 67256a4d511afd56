"""
In-memory comment storage.
"""

from typing import Dict, List, Optional

from shared.errors import CommentAlreadyExistsError

from ..domain.model_id import ModelId
from ..domain.models import Comment


class InMemoryCommentRepository:
    """Dictionary-backed comment store for local runs and tests."""

    def __init__(self):
        self.comments: Dict[int, Comment] = {}
        self._next_id = 1

    async def save(self, comment: Comment) -> Comment:
        """Store a comment, assigning the next id unless it carries one.

        Explicit ids (imports) must be unused and push the id sequence past
        themselves so later inserts never reuse them.
        """
        ModelId.parse(comment.model_id)

        if comment.id is None:
            stored = comment.with_id(self._next_id)
        elif comment.id in self.comments:
            raise CommentAlreadyExistsError(
                f"Comment with id [{comment.id}] already exists",
                details={"comment_id": comment.id}
            )
        else:
            stored = comment

        self.comments[stored.id] = stored
        self._next_id = max(self._next_id, stored.id + 1)
        return stored

    async def delete(self, comment_id: int) -> None:
        self.comments.pop(comment_id, None)

    async def find_one(self, comment_id: int) -> Optional[Comment]:
        return self.comments.get(comment_id)

    async def find_by_model_id(self, model_id: str) -> List[Comment]:
        return [c for c in self.comments.values() if c.model_id == model_id]

    async def find_by_author(self, author: str) -> List[Comment]:
        return [c for c in self.comments.values() if c.author == author]
