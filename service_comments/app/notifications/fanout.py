"""
Notification fan-out for new comments.
"""

from typing import Optional, Set

from shared.logging import comment_context, get_logger
from shared.metrics import MetricsCollector

from ..domain.models import Comment, CommentReplyMessage, ModelInfo
from ..ports import CommentRepository, NotificationService, UserAccountService

ANONYMOUS_USER = "anonymous"


class CommentNotificationFanout:
    """Notifies the model author and everyone who commented on the model."""

    def __init__(
        self,
        comment_repository: CommentRepository,
        account_service: UserAccountService,
        notification_service: NotificationService,
        anonymous_username: str = ANONYMOUS_USER,
        metrics: Optional[MetricsCollector] = None
    ):
        self.comment_repository = comment_repository
        self.account_service = account_service
        self.notification_service = notification_service
        self.anonymous_username = anonymous_username
        self.metrics = metrics
        self.logger = get_logger("comments.fanout")

    async def collect_recipients(self, comment: Comment, model: ModelInfo) -> Set[str]:
        """Model author plus every distinct commenter, without the anonymous user.

        The stored thread already contains ``comment`` itself, so its author
        is part of the result.
        """
        recipients = {model.author}
        for existing in await self.comment_repository.find_by_model_id(comment.model_id):
            recipients.add(existing.author)

        anonymous = self.anonymous_username.lower()
        return {
            recipient for recipient in recipients
            if recipient and recipient.lower() != anonymous
        }

    async def notify(self, comment: Comment, model: ModelInfo) -> Set[str]:
        """Send one reply notification per recipient; return who was notified."""
        with comment_context(model_id=comment.model_id, comment_id=comment.id):
            return await self._dispatch(comment, model)

    async def _dispatch(self, comment: Comment, model: ModelInfo) -> Set[str]:
        notified: Set[str] = set()

        for recipient in await self.collect_recipients(comment, model):
            try:
                user = await self.account_service.get_user(recipient)
                if user is None:
                    self.logger.debug("Skipping unknown notification recipient", recipient=recipient)
                    continue

                await self.notification_service.send_notification(
                    CommentReplyMessage(recipient=user, model=model, content=comment.content)
                )
            except Exception as e:
                self.logger.error(
                    "Error sending comment notification",
                    recipient=recipient,
                    error=str(e)
                )
                self._record("failed")
                continue

            notified.add(recipient)
            self._record("sent")

        self.logger.info(
            "Comment notifications dispatched",
            recipients=len(notified)
        )
        return notified

    def _record(self, status: str):
        if self.metrics:
            self.metrics.increment_counter("notifications_sent_total", status=status)
