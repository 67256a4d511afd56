"""
Structured logging for the Model Comments service.

Every event carries the service name and environment from ``ServiceConfig``,
plus whatever request and comment context is active: the request id and
acting user bound by the HTTP layer, and the model/comment ids bound by the
comment core through ``comment_context``.
"""

import sys
import uuid
import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Callable, Dict, Iterator, Optional, TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from shared.config import ServiceConfig

request_id_var: ContextVar[Optional[str]] = ContextVar('request_id', default=None)
username_var: ContextVar[Optional[str]] = ContextVar('username', default=None)
model_id_var: ContextVar[Optional[str]] = ContextVar('model_id', default=None)
comment_id_var: ContextVar[Optional[int]] = ContextVar('comment_id', default=None)

# Event key -> context variable, in rendering order
_CONTEXT_FIELDS = (
    ("request_id", request_id_var),
    ("username", username_var),
    ("model_id", model_id_var),
    ("comment_id", comment_id_var),
)

Processor = Callable[[Any, str, Dict[str, Any]], Dict[str, Any]]


def configure_logging(config: "ServiceConfig") -> None:
    """Configure structlog JSON output for the service described by ``config``."""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            service_context_processor(config.service_name, config.env),
            add_comment_context,
            structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, config.log_level.upper()),
    )


def service_context_processor(service_name: str, env: str) -> Processor:
    """Build a processor stamping ``service`` and ``env`` on every event."""

    def add_service_context(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
        event_dict.setdefault("service", service_name)
        event_dict.setdefault("env", env)
        return event_dict

    return add_service_context


def add_comment_context(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Copy bound request and comment context into the event.

    Explicit keyword arguments on the log call win over bound values.
    """
    for key, var in _CONTEXT_FIELDS:
        value = var.get()
        if value is not None:
            event_dict.setdefault(key, value)
    return event_dict


def set_request_id(request_id: Optional[str] = None) -> str:
    """Bind a request id, generating one when the caller sent none."""
    if request_id is None:
        request_id = str(uuid.uuid4())
    request_id_var.set(request_id)
    return request_id


def set_user_context(username: Optional[str] = None):
    """Bind the acting user."""
    if username:
        username_var.set(username)


@contextmanager
def comment_context(model_id: Optional[str] = None, comment_id: Optional[int] = None) -> Iterator[None]:
    """Bind the model and/or comment being worked on for the enclosed block."""
    tokens = []
    if model_id is not None:
        tokens.append((model_id_var, model_id_var.set(model_id)))
    if comment_id is not None:
        tokens.append((comment_id_var, comment_id_var.set(comment_id)))
    try:
        yield
    finally:
        for var, token in reversed(tokens):
            var.reset(token)


def clear_context():
    """Clear all bound context."""
    for _, var in _CONTEXT_FIELDS:
        var.set(None)


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
