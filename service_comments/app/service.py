"""
Comment lifecycle for the Comments Service.
"""

from datetime import datetime
from typing import Callable, List, Optional, Union

from shared.logging import comment_context, get_logger
from shared.errors import ForbiddenError, ModelNotFoundError, CommentNotFoundError, NamespaceNotFoundError
from shared.metrics import MetricsCollector

from .access.policy import CommentAccessPolicy, TargetsModel
from .domain.model_id import ModelId
from .domain.models import Comment, CommentCreateRequest
from .notifications.fanout import CommentNotificationFanout
from .ports import CommentRepository, ModelRepositoryFactory, NamespaceService

DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class CommentService:
    """Creates, deletes and lists comments on models.

    Creation is guarded by the access policy and raises on denial; deletion
    reports a denial by returning False. A successful create triggers the
    notification fan-out, whose failures are logged and otherwise ignored.
    """

    def __init__(
        self,
        comment_repository: CommentRepository,
        namespace_service: NamespaceService,
        model_repository_factory: ModelRepositoryFactory,
        access_policy: CommentAccessPolicy,
        fanout: CommentNotificationFanout,
        date_format: str = DEFAULT_DATE_FORMAT,
        clock: Callable[[], datetime] = datetime.now,
        metrics: Optional[MetricsCollector] = None
    ):
        self.comment_repository = comment_repository
        self.namespace_service = namespace_service
        self.model_repository_factory = model_repository_factory
        self.access_policy = access_policy
        self.fanout = fanout
        self.date_format = date_format
        self.clock = clock
        self.metrics = metrics
        self.logger = get_logger("comments.service")

    async def create_comment(self, username: str, request: CommentCreateRequest) -> Comment:
        """Create a comment on behalf of ``username`` and notify the thread."""
        model_id = ModelId.parse(request.model_id)
        with comment_context(model_id=model_id.pretty_format):
            return await self._create(username, request, model_id)

    async def _create(self, username: str, request: CommentCreateRequest, model_id: ModelId) -> Comment:
        if not await self.access_policy.can_create(username, request):
            raise ForbiddenError(
                f"User cannot create a comment for model ID [{model_id.pretty_format}]",
                details={"model_id": model_id.pretty_format}
            )

        workspace_id = await self.namespace_service.resolve_workspace_id(model_id.namespace)
        if workspace_id is None:
            raise NamespaceNotFoundError(
                f"Namespace [{model_id.namespace}] does not exist.",
                details={"namespace": model_id.namespace}
            )

        model_repository = self.model_repository_factory.get_repository(workspace_id)
        if not await model_repository.exists(model_id.pretty_format):
            raise ModelNotFoundError(
                f"Model [{model_id.pretty_format}] not found",
                details={"model_id": model_id.pretty_format}
            )

        comment = await self.comment_repository.save(
            Comment(
                model_id=model_id.pretty_format,
                author=username,
                content=request.content,
                date=self.clock().strftime(self.date_format)
            )
        )
        with comment_context(comment_id=comment.id):
            self.logger.info("Comment created", author=username)
            if self.metrics:
                self.metrics.increment_counter("comments_created_total")
                self.metrics.record_business_event("comment_created")

            await self._notify(comment, model_repository)
        return comment

    async def _notify(self, comment: Comment, model_repository) -> None:
        try:
            model = await model_repository.get_by_id(comment.model_id)
            if model is None:
                self.logger.warning("Model vanished before notification")
                return
            await self.fanout.notify(comment, model)
        except Exception as e:
            self.logger.error("Comment notification fan-out failed", error=str(e))

    async def delete_comment(self, username: str, comment_id: int) -> bool:
        """Delete a comment; False when ``username`` may not delete it."""
        comment = await self.comment_repository.find_one(comment_id)
        if comment is None:
            raise CommentNotFoundError(
                f"Comment with id [{comment_id}] not found",
                details={"comment_id": comment_id}
            )

        with comment_context(model_id=comment.model_id, comment_id=comment_id):
            if not await self.access_policy.can_delete(username, comment):
                self.logger.warning("User cannot delete comment", username=username)
                self._record_delete("denied")
                return False

            await self.comment_repository.delete(comment_id)
            self.logger.info("Comment deleted", username=username)
            self._record_delete("deleted")
            return True

    async def get_comments_for_model(self, model_id: Union[ModelId, str]) -> List[Comment]:
        if isinstance(model_id, str):
            model_id = ModelId.parse(model_id)
        return await self.comment_repository.find_by_model_id(model_id.pretty_format)

    async def get_comments_by_author(self, author: str) -> List[Comment]:
        return await self.comment_repository.find_by_author(author)

    async def save_comment(self, comment: Comment) -> Comment:
        """Persist a comment as-is, without access checks or notifications.

        Meant for imports and migrations; the model ID is still validated.
        """
        ModelId.parse(comment.model_id)
        return await self.comment_repository.save(comment)

    async def can_create(self, username: str, comment: TargetsModel) -> bool:
        return await self.access_policy.can_create(username, comment)

    async def can_delete(self, username: str, comment: Comment) -> bool:
        return await self.access_policy.can_delete(username, comment)

    def _record_delete(self, outcome: str):
        if self.metrics:
            self.metrics.increment_counter("comments_deleted_total", outcome=outcome)
