"""
Comments service for the Model Repository.
"""

from typing import Any, Dict, Optional

from fastapi import Header, Query

from shared.base_service import BaseService
from shared.config import ServiceConfig, get_config
from shared.errors import AuthenticationError, CommentNotFoundError
from shared.logging import set_user_context

from .access.policy import CommentAccessPolicy
from .adapters.memory_catalog import InMemoryModelCatalog, InMemoryUserAccountService
from .adapters.repository_client import RepositoryApiClient
from .domain.models import (
    CommentCreateRequest, CommentResponse, CommentListResponse,
    CommentDeleteResponse, PermissionResponse
)
from .notifications.fanout import CommentNotificationFanout
from .notifications.kafka_notifier import KafkaNotificationService
from .notifications.log_notifier import LoggingNotificationService
from .persistence.memory import InMemoryCommentRepository
from .persistence.postgres import PostgresCommentRepository
from .service import CommentService


class CommentsService(BaseService):
    """Comments service implementation."""

    def __init__(self, config: Optional[ServiceConfig] = None):
        super().__init__("comments", 8013, config or get_config("comments", 8013))

        # Initialize adapters
        self.comment_repository = self._build_comment_repository()
        self.catalog, self.account_service = self._build_catalog()
        self.notification_service = self._build_notification_service()

        # Initialize core
        self.access_policy = CommentAccessPolicy(
            model_repository_factory=self.catalog,
            namespace_role_service=self.catalog,
            repository_role_service=self.catalog,
            namespace_admin_role=self.config.namespace_admin_role,
            metrics=self.metrics
        )
        self.fanout = CommentNotificationFanout(
            comment_repository=self.comment_repository,
            account_service=self.account_service,
            notification_service=self.notification_service,
            anonymous_username=self.config.anonymous_username,
            metrics=self.metrics
        )
        self.comment_service = CommentService(
            comment_repository=self.comment_repository,
            namespace_service=self.catalog,
            model_repository_factory=self.catalog,
            access_policy=self.access_policy,
            fanout=self.fanout,
            date_format=self.config.comment_date_format,
            metrics=self.metrics
        )

        @self.app.on_event("startup")
        async def _startup():
            await self.start()

        @self.app.on_event("shutdown")
        async def _shutdown():
            await self.stop()

        self._setup_comments_routes()

    def _build_comment_repository(self):
        if self.config.storage_backend == "postgres":
            return PostgresCommentRepository(self.config.postgres_dsn)
        return InMemoryCommentRepository()

    def _build_catalog(self):
        if self.config.catalog_backend == "http":
            client = RepositoryApiClient(
                self.config.repository_service_url,
                timeout=self.config.http_timeout_seconds
            )
            return client, client
        return InMemoryModelCatalog(), InMemoryUserAccountService()

    def _build_notification_service(self):
        if self.config.notification_backend == "kafka":
            return KafkaNotificationService(self.config.kafka_bootstrap, self.config.notification_topic)
        return LoggingNotificationService()

    def _acting_user(self, username: Optional[str]) -> str:
        username = username or self.config.anonymous_username
        set_user_context(username)
        return username

    def _authenticated_user(self, username: Optional[str]) -> str:
        """Acting user for writes; the anonymous user may not write."""
        if not username or username.lower() == self.config.anonymous_username.lower():
            raise AuthenticationError("X-Username header with an authenticated user is required")
        return self._acting_user(username)

    def _setup_comments_routes(self):
        """Set up comments-specific routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "comments",
                "message": "Model Repository - Comments Service",
                "version": "1.0.0",
                "capabilities": ["comments", "access_policy", "notifications"]
            }

        @self.app.post("/comments", status_code=201, response_model=CommentResponse)
        async def create_comment(
            request: CommentCreateRequest,
            x_username: Optional[str] = Header(None, alias="X-Username")
        ):
            """Create a comment on a model."""
            username = self._authenticated_user(x_username)
            with self.metrics.time_operation("create"):
                comment = await self.comment_service.create_comment(username, request)
            return CommentResponse.from_comment(comment)

        @self.app.delete("/comments/{comment_id}", response_model=CommentDeleteResponse)
        async def delete_comment(
            comment_id: int,
            x_username: Optional[str] = Header(None, alias="X-Username")
        ):
            """Delete a comment; ``deleted`` is false when not permitted."""
            username = self._authenticated_user(x_username)
            with self.metrics.time_operation("delete"):
                deleted = await self.comment_service.delete_comment(username, comment_id)
            return CommentDeleteResponse(comment_id=comment_id, deleted=deleted)

        @self.app.get("/comments/models/{model_id}", response_model=CommentListResponse)
        async def get_comments_for_model(model_id: str):
            """List comments attached to a model."""
            comments = await self.comment_service.get_comments_for_model(model_id)
            return CommentListResponse(
                comments=[CommentResponse.from_comment(c) for c in comments],
                total=len(comments)
            )

        @self.app.get("/comments/authors/{author}", response_model=CommentListResponse)
        async def get_comments_by_author(author: str):
            """List comments written by a user."""
            comments = await self.comment_service.get_comments_by_author(author)
            return CommentListResponse(
                comments=[CommentResponse.from_comment(c) for c in comments],
                total=len(comments)
            )

        @self.app.get("/comments/permissions/create", response_model=PermissionResponse)
        async def can_create(
            model_id: str = Query(..., description="Target model ID"),
            x_username: Optional[str] = Header(None, alias="X-Username")
        ):
            """Whether the acting user may comment on a model."""
            username = self._acting_user(x_username)
            request = CommentCreateRequest(model_id=model_id, content="-")
            return PermissionResponse(allowed=await self.comment_service.can_create(username, request))

        @self.app.get("/comments/{comment_id}/permissions/delete", response_model=PermissionResponse)
        async def can_delete(
            comment_id: int,
            x_username: Optional[str] = Header(None, alias="X-Username")
        ):
            """Whether the acting user may delete a comment."""
            username = self._acting_user(x_username)
            comment = await self.comment_repository.find_one(comment_id)
            if comment is None:
                raise CommentNotFoundError(
                    f"Comment with id [{comment_id}] not found",
                    details={"comment_id": comment_id}
                )
            return PermissionResponse(allowed=await self.comment_service.can_delete(username, comment))

    async def _check_dependencies(self) -> Dict[str, Any]:
        """Check comments service dependencies."""
        dependencies = {}

        for name, component in (
            ("storage", self.comment_repository),
            ("catalog", self.catalog),
            ("notifications", self.notification_service),
        ):
            health_check = getattr(component, "health_check", None)
            if health_check is None:
                dependencies[name] = "ok"
                continue
            try:
                dependencies[name] = "ok" if await health_check() else "error"
            except Exception:
                dependencies[name] = "error"

        return dependencies

    async def start(self):
        """Start comments service components."""
        for component in (self.comment_repository, self.notification_service):
            start = getattr(component, "start", None)
            if start is not None:
                await start()

        self.logger.info(
            "Comments service started",
            storage=self.config.storage_backend,
            catalog=self.config.catalog_backend,
            notifications=self.config.notification_backend
        )

    async def stop(self):
        """Stop comments service components."""
        for component in (self.comment_repository, self.notification_service):
            stop = getattr(component, "stop", None)
            if stop is not None:
                await stop()

        self.logger.info("Comments service stopped")


def create_app(config: Optional[ServiceConfig] = None):
    """Create comments service application."""
    service = CommentsService(config)
    return service.app


if __name__ == "__main__":
    service = CommentsService()
    service.run()
