"""
Logging notification transport.
"""

from shared.logging import get_logger

from ..domain.models import CommentReplyMessage


class LoggingNotificationService:
    """Writes notifications to the structured log instead of delivering them."""

    def __init__(self):
        self.logger = get_logger("comments.notifications.log")

    async def send_notification(self, message: CommentReplyMessage) -> None:
        self.logger.info("Notification", **message.to_event())
