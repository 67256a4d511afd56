"""
Comment storage implementations.

Both repositories re-validate the model ID before inserting so malformed
identifiers never reach storage.
"""

from .memory import InMemoryCommentRepository

__all__ = ["InMemoryCommentRepository"]
