"""
Access decision policy for comment operations.
"""

from typing import Optional, Protocol

from shared.logging import get_logger
from shared.errors import DoesNotExistError, ExternalServiceError
from shared.metrics import MetricsCollector

from ..domain.model_id import ModelId
from ..domain.models import Comment, ModelVisibility
from ..ports import ModelRepositoryFactory, NamespaceRoleService, RepositoryRoleService

# Role lookups that fail are answered as "no permission"
_LOOKUP_ERRORS = (DoesNotExistError, ExternalServiceError)

NAMESPACE_ADMIN_ROLE = "namespace_admin"


class TargetsModel(Protocol):
    """Anything naming the model a comment is (or would be) attached to."""
    model_id: str


class CommentAccessPolicy:
    """Decides whether a user may create or delete a comment.

    Both checks return a boolean and never raise for a denial. The only
    error that escapes is InvalidIdentifierError for a malformed model ID,
    which points at bad data rather than a permission question.
    """

    def __init__(
        self,
        model_repository_factory: ModelRepositoryFactory,
        namespace_role_service: NamespaceRoleService,
        repository_role_service: RepositoryRoleService,
        namespace_admin_role: str = NAMESPACE_ADMIN_ROLE,
        metrics: Optional[MetricsCollector] = None
    ):
        self.model_repository_factory = model_repository_factory
        self.namespace_role_service = namespace_role_service
        self.repository_role_service = repository_role_service
        self.namespace_admin_role = namespace_admin_role
        self.metrics = metrics
        self.logger = get_logger("comments.access_policy")

    async def can_create(self, username: str, comment: TargetsModel) -> bool:
        """Check, in order: sysadmin, any namespace role, public model."""
        model_id = ModelId.parse(comment.model_id)

        try:
            if await self.repository_role_service.is_sysadmin(username):
                allowed = True
            elif await self.namespace_role_service.has_any_role(username, model_id.namespace):
                allowed = True
            else:
                allowed = await self._is_public(model_id)
        except _LOOKUP_ERRORS as e:
            self.logger.warning(
                "Create permission lookup failed",
                username=username,
                model_id=model_id.pretty_format,
                error=str(e)
            )
            allowed = False

        self._record("create", allowed)
        return allowed

    async def can_delete(self, username: str, comment: Comment) -> bool:
        """Check, in order: comment author, namespace admin, sysadmin."""
        namespace = ModelId.parse(comment.model_id).namespace

        if username == comment.author:
            self._record("delete", True)
            return True

        try:
            allowed = (
                await self.namespace_role_service.has_role(username, namespace, self.namespace_admin_role)
                or await self.repository_role_service.is_sysadmin(username)
            )
        except _LOOKUP_ERRORS as e:
            self.logger.warning(
                "Delete permission lookup failed",
                username=username,
                comment_id=comment.id,
                namespace=namespace,
                error=str(e)
            )
            allowed = False

        self._record("delete", allowed)
        return allowed

    async def _is_public(self, model_id: ModelId) -> bool:
        repository = await self.model_repository_factory.get_repository_by_model(model_id.pretty_format)
        model = await repository.get_by_id(model_id.pretty_format)
        if model is None:
            return False
        return ModelVisibility.is_public(model.visibility)

    def _record(self, operation: str, allowed: bool):
        if self.metrics:
            self.metrics.increment_counter(
                "access_decisions_total",
                operation=operation,
                decision="allow" if allowed else "deny"
            )
