"""
Domain types for the Comments Service.

- model_id: Parsing of ``namespace:name:version`` model identifiers.
- models: Comment, model metadata, user and notification message types,
  plus the request/response models of the HTTP surface.
"""

from .model_id import ModelId, validate_namespace
from .models import (
    Comment, CommentReplyMessage, ModelInfo, ModelVisibility, User,
    CommentCreateRequest, CommentResponse, CommentListResponse,
    CommentDeleteResponse, PermissionResponse
)

__all__ = [
    "Comment",
    "CommentCreateRequest",
    "CommentDeleteResponse",
    "CommentListResponse",
    "CommentReplyMessage",
    "CommentResponse",
    "ModelId",
    "ModelInfo",
    "ModelVisibility",
    "PermissionResponse",
    "User",
    "validate_namespace",
]
