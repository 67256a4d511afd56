"""
Ports (interfaces) used by the comments core.

Ports define the minimal contracts for the storage, catalog, role, account
and notification collaborators so the core can run against different
backends. Every port is async because each call may leave the process.
"""

from __future__ import annotations

from typing import List, Optional, Protocol

from .domain.models import Comment, CommentReplyMessage, ModelInfo, User


class CommentRepository(Protocol):
    """Comment storage keyed by model ID and author."""

    async def save(self, comment: Comment) -> Comment:
        ...

    async def delete(self, comment_id: int) -> None:
        ...

    async def find_one(self, comment_id: int) -> Optional[Comment]:
        ...

    async def find_by_model_id(self, model_id: str) -> List[Comment]:
        ...

    async def find_by_author(self, author: str) -> List[Comment]:
        ...


class ModelRepository(Protocol):
    """Model lookups within one workspace."""

    async def exists(self, model_id: str) -> bool:
        ...

    async def get_by_id(self, model_id: str) -> Optional[ModelInfo]:
        ...


class ModelRepositoryFactory(Protocol):
    """Hands out the model repository backing a workspace or a model."""

    def get_repository(self, workspace_id: str) -> ModelRepository:
        ...

    async def get_repository_by_model(self, model_id: str) -> ModelRepository:
        """Resolve the owning workspace; raises DoesNotExistError when unknown."""
        ...


class NamespaceService(Protocol):
    """Namespace to workspace resolution."""

    async def resolve_workspace_id(self, namespace: str) -> Optional[str]:
        ...


class NamespaceRoleService(Protocol):
    """Namespace-scoped role membership. May raise DoesNotExistError."""

    async def has_role(self, username: str, namespace: str, role: str) -> bool:
        ...

    async def has_any_role(self, username: str, namespace: str) -> bool:
        ...


class RepositoryRoleService(Protocol):
    """Repository-wide roles."""

    async def is_sysadmin(self, username: str) -> bool:
        ...


class UserAccountService(Protocol):
    """User account lookup."""

    async def get_user(self, username: str) -> Optional[User]:
        ...


class NotificationService(Protocol):
    """Outbound notification transport (fire-and-forget)."""

    async def send_notification(self, message: CommentReplyMessage) -> None:
        ...
