"""
Unit tests for notification transports.
"""

import pytest
from unittest.mock import patch, AsyncMock, MagicMock
from kafka.errors import KafkaError

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_comments.app.domain.models import CommentReplyMessage, ModelInfo, User
from service_comments.app.notifications.kafka_notifier import KafkaNotificationService
from service_comments.app.notifications.log_notifier import LoggingNotificationService
from shared.errors import CommentServiceException, ExternalServiceError

PRODUCER_PATH = 'service_comments.app.notifications.kafka_notifier.KafkaProducer'


@pytest.fixture
def message():
    """Reply notification for carol."""
    return CommentReplyMessage(
        recipient=User(username="carol", email="carol@example.com"),
        model=ModelInfo(model_id="com.example:Lamp:2.1.0", author="bob", display_name="Lamp"),
        content="Brightness range is missing."
    )


class TestCommentReplyMessage:
    """Test cases for CommentReplyMessage."""

    def test_to_event(self, message):
        event = message.to_event()

        assert event["event_type"] == "comment.reply"
        assert event["recipient"] == "carol"
        assert event["email"] == "carol@example.com"
        assert event["subject"] == "New comment for Lamp"
        assert event["model_id"] == "com.example:Lamp:2.1.0"
        assert event["content"] == "Brightness range is missing."
        assert isinstance(event["timestamp"], int)

    def test_subject_falls_back_to_model_id(self):
        message = CommentReplyMessage(
            recipient=User(username="carol"),
            model=ModelInfo(model_id="com.example:Lamp:2.1.0", author="bob"),
            content="x"
        )

        assert message.subject == "New comment for com.example:Lamp:2.1.0"


class TestKafkaNotificationService:
    """Test cases for KafkaNotificationService."""

    @pytest.fixture
    def notifier(self):
        """Create KafkaNotificationService instance."""
        return KafkaNotificationService("localhost:9092", "comments-test")

    @pytest.mark.asyncio
    async def test_start_success(self, notifier):
        """Test successful producer start."""
        with patch(PRODUCER_PATH) as mock_producer_class:
            await notifier.start()

            assert notifier.producer is mock_producer_class.return_value
            mock_producer_class.assert_called_once()

    @pytest.mark.asyncio
    async def test_start_failure(self, notifier):
        """Test producer start failure."""
        with patch(PRODUCER_PATH) as mock_producer_class:
            mock_producer_class.side_effect = Exception("Connection failed")

            with pytest.raises(CommentServiceException) as exc_info:
                await notifier.start()

            assert exc_info.value.code == "KAFKA_PRODUCER_START_FAILED"
            assert notifier.producer is None

    @pytest.mark.asyncio
    async def test_send_notification(self, notifier, message):
        """Test notifications are keyed by recipient."""
        with patch(PRODUCER_PATH) as mock_producer_class:
            mock_producer = mock_producer_class.return_value
            mock_producer.send.return_value.get.return_value = MagicMock(partition=0, offset=12)

            await notifier.start()
            await notifier.send_notification(message)

            kwargs = mock_producer.send.call_args.kwargs
            assert kwargs["topic"] == "comments-test"
            assert kwargs["key"] == "carol"
            assert kwargs["value"]["subject"] == "New comment for Lamp"
            assert kwargs["headers"] == [("event_type", b"comment.reply")]
            mock_producer.send.return_value.get.assert_called_once_with(timeout=10)

    @pytest.mark.asyncio
    async def test_send_waits_for_ack_off_event_loop(self, notifier, message):
        """Test the blocking ack wait runs in a worker thread."""
        with patch(PRODUCER_PATH) as mock_producer_class, \
                patch('service_comments.app.notifications.kafka_notifier.asyncio.to_thread',
                      new_callable=AsyncMock) as mock_to_thread:
            mock_to_thread.return_value = MagicMock(partition=0, offset=1)
            future = mock_producer_class.return_value.send.return_value

            await notifier.start()
            await notifier.send_notification(message)

            mock_to_thread.assert_awaited_once_with(future.get, timeout=10)
            future.get.assert_not_called()

    @pytest.mark.asyncio
    async def test_send_without_start(self, notifier, message):
        """Test sending before start fails."""
        with pytest.raises(CommentServiceException) as exc_info:
            await notifier.send_notification(message)

        assert exc_info.value.code == "KAFKA_PRODUCER_NOT_STARTED"

    @pytest.mark.asyncio
    async def test_send_kafka_error(self, notifier, message):
        """Test broker errors become ExternalServiceError."""
        with patch(PRODUCER_PATH) as mock_producer_class:
            mock_producer_class.return_value.send.return_value.get.side_effect = KafkaError("broker down")

            await notifier.start()

            with pytest.raises(ExternalServiceError):
                await notifier.send_notification(message)

    @pytest.mark.asyncio
    async def test_stop(self, notifier):
        """Test stop flushes and closes the producer."""
        with patch(PRODUCER_PATH) as mock_producer_class:
            mock_producer = mock_producer_class.return_value

            await notifier.start()
            await notifier.stop()

            mock_producer.flush.assert_called_once()
            mock_producer.close.assert_called_once()
            assert notifier.producer is None

    @pytest.mark.asyncio
    async def test_health_check(self, notifier):
        assert await notifier.health_check() is False

        with patch(PRODUCER_PATH) as mock_producer_class:
            mock_producer_class.return_value.bootstrap_connected.return_value = True
            await notifier.start()

            assert await notifier.health_check() is True


class TestLoggingNotificationService:
    """Test cases for LoggingNotificationService."""

    @pytest.mark.asyncio
    async def test_send_notification_logs_event(self, message):
        notifier = LoggingNotificationService()
        notifier.logger = MagicMock()

        await notifier.send_notification(message)

        notifier.logger.info.assert_called_once()
        args, kwargs = notifier.logger.info.call_args
        assert args == ("Notification",)
        assert kwargs["recipient"] == "carol"
