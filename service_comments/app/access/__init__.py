"""
Access decision package.

CommentAccessPolicy combines repository-wide roles, namespace-scoped roles,
comment ownership and model visibility into allow/deny answers for comment
creation and deletion. It is exposed on its own so other code paths that
need the same answers do not re-implement them.
"""

from .policy import CommentAccessPolicy, NAMESPACE_ADMIN_ROLE

__all__ = ["CommentAccessPolicy", "NAMESPACE_ADMIN_ROLE"]
