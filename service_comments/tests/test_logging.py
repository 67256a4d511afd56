"""
Unit tests for structured logging context.
"""

import pytest
import structlog
from datetime import datetime
from unittest.mock import MagicMock

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_comments.app.access.policy import CommentAccessPolicy
from service_comments.app.adapters.memory_catalog import InMemoryModelCatalog, InMemoryUserAccountService
from service_comments.app.domain.models import CommentCreateRequest, ModelInfo
from service_comments.app.notifications.fanout import CommentNotificationFanout
from service_comments.app.persistence.memory import InMemoryCommentRepository
from service_comments.app.service import CommentService
from shared.config import get_config
from shared.logging import (
    add_comment_context, clear_context, comment_context, comment_id_var, configure_logging,
    model_id_var, service_context_processor, set_request_id, set_user_context
)
from shared.test_helpers import RecordingNotificationService, TestEnvironment

THERMOSTAT = "com.example:Thermostat:1.0.0"


class TestLoggingContext:
    """Test cases for logging processors and context binding."""

    @pytest.fixture(autouse=True)
    def reset_context(self):
        clear_context()
        yield
        clear_context()

    def test_service_context_processor(self):
        processor = service_context_processor("comments", "test")

        event = processor(None, "info", {"event": "Comment created"})

        assert event["service"] == "comments"
        assert event["env"] == "test"

    def test_add_comment_context(self):
        """Test bound request and comment fields reach the event."""
        request_id = set_request_id()
        set_user_context("carol")

        with comment_context(model_id=THERMOSTAT, comment_id=7):
            event = add_comment_context(None, "info", {"event": "Comment created"})

        assert event == {
            "event": "Comment created",
            "request_id": request_id,
            "username": "carol",
            "model_id": THERMOSTAT,
            "comment_id": 7
        }

    def test_explicit_fields_win(self):
        with comment_context(model_id=THERMOSTAT):
            event = add_comment_context(None, "info", {"event": "x", "model_id": "other"})

        assert event["model_id"] == "other"

    def test_comment_context_restores_outer_values(self):
        """Test nested blocks unwind to the enclosing binding."""
        with comment_context(model_id=THERMOSTAT):
            with comment_context(comment_id=3):
                assert model_id_var.get() == THERMOSTAT
                assert comment_id_var.get() == 3
            assert comment_id_var.get() is None
            assert model_id_var.get() == THERMOSTAT

        assert model_id_var.get() is None

    def test_configure_logging_from_config(self):
        """Test configuration installs the service context processor."""
        config = get_config("comments", 8013, **TestEnvironment.get_mock_config())

        configure_logging(config)

        processors = structlog.get_config()["processors"]
        stamped = {}
        for processor in processors:
            if getattr(processor, "__name__", "") == "add_service_context":
                stamped = processor(None, "info", {})
        assert stamped == {"service": "comments", "env": "test"}
        assert add_comment_context in processors

    @pytest.mark.asyncio
    async def test_create_comment_binds_model_and_comment(self):
        """Test the lifecycle logs with model and comment ids bound."""
        catalog = InMemoryModelCatalog()
        catalog.add_model(ModelInfo(model_id=THERMOSTAT, author="bob", visibility="Public"))
        repository = InMemoryCommentRepository()
        fanout = CommentNotificationFanout(
            comment_repository=repository,
            account_service=InMemoryUserAccountService(),
            notification_service=RecordingNotificationService()
        )
        service = CommentService(
            comment_repository=repository,
            namespace_service=catalog,
            model_repository_factory=catalog,
            access_policy=CommentAccessPolicy(catalog, catalog, catalog),
            fanout=fanout,
            clock=lambda: datetime(2024, 1, 1)
        )
        seen = []
        service.logger = MagicMock()
        service.logger.info.side_effect = lambda event, **kw: seen.append(
            (event, model_id_var.get(), comment_id_var.get())
        )

        comment = await service.create_comment("alice", CommentCreateRequest(model_id=THERMOSTAT, content="hi"))

        assert seen == [("Comment created", THERMOSTAT, comment.id)]
        assert model_id_var.get() is None
        assert comment_id_var.get() is None
