"""
Notifications package.

- fanout: Computes the recipient set of a new comment and dispatches one
  reply notification per recipient.
- kafka_notifier: Publishes notifications to a Kafka topic.
- log_notifier: Writes notifications to the log (local development).
"""

from .fanout import CommentNotificationFanout, ANONYMOUS_USER
from .log_notifier import LoggingNotificationService

__all__ = [
    "ANONYMOUS_USER",
    "CommentNotificationFanout",
    "LoggingNotificationService",
]
