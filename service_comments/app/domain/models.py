"""
Comment data models for the Comments Service.
"""

from typing import Dict, Any, Optional, List
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ModelVisibility(str, Enum):
    """Model visibility as published by the model catalog."""
    PUBLIC = "Public"
    PRIVATE = "Private"

    @classmethod
    def is_public(cls, visibility: Optional[str]) -> bool:
        """Case-insensitive check against the catalog's visibility value."""
        return bool(visibility) and visibility.lower() == cls.PUBLIC.value.lower()


@dataclass(frozen=True)
class Comment:
    """Comment attached to a model."""
    model_id: str
    author: str
    content: str
    date: str
    id: Optional[int] = None

    def with_id(self, comment_id: int) -> "Comment":
        """Return a copy carrying the storage-assigned id."""
        return Comment(
            id=comment_id,
            model_id=self.model_id,
            author=self.author,
            content=self.content,
            date=self.date
        )


@dataclass(frozen=True)
class ModelInfo:
    """Read-only model metadata owned by the model catalog."""
    model_id: str
    author: str
    visibility: str = ModelVisibility.PRIVATE.value
    display_name: Optional[str] = None


@dataclass(frozen=True)
class User:
    """User account as resolved by the account service."""
    username: str
    email: Optional[str] = None


@dataclass(frozen=True)
class CommentReplyMessage:
    """Notification telling a user that a model they follow got a new comment."""
    recipient: User
    model: ModelInfo
    content: str

    event_type = "comment.reply"

    @property
    def subject(self) -> str:
        name = self.model.display_name or self.model.model_id
        return f"New comment for {name}"

    def to_event(self) -> Dict[str, Any]:
        """Serialize to the JSON event published by notification transports."""
        return {
            "event_type": self.event_type,
            "recipient": self.recipient.username,
            "email": self.recipient.email,
            "subject": self.subject,
            "model_id": self.model.model_id,
            "content": self.content,
            "timestamp": int(datetime.now(timezone.utc).timestamp() * 1000)
        }


class CommentCreateRequest(BaseModel):
    """Request model for creating a comment."""
    model_config = ConfigDict(protected_namespaces=())

    model_id: str = Field(..., description="Target model ID (namespace:name:version)")
    content: str = Field(..., min_length=1, description="Comment text")


class CommentResponse(BaseModel):
    """Response model for a stored comment."""
    model_config = ConfigDict(protected_namespaces=())

    id: Optional[int]
    model_id: str
    author: str
    content: str
    date: str

    @classmethod
    def from_comment(cls, comment: Comment) -> "CommentResponse":
        return cls(
            id=comment.id,
            model_id=comment.model_id,
            author=comment.author,
            content=comment.content,
            date=comment.date
        )


class CommentListResponse(BaseModel):
    """Response model for comment listings."""
    comments: List[CommentResponse]
    total: int


class CommentDeleteResponse(BaseModel):
    """Response model for comment deletion."""
    comment_id: int
    deleted: bool


class PermissionResponse(BaseModel):
    """Response model for access decision queries."""
    allowed: bool
