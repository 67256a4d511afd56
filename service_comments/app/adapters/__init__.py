"""
Adapters for the collaborators of the comments core.

- memory_catalog: Dictionary-backed namespaces, models, roles and accounts.
- repository_client: httpx client for the model repository REST API.
"""

from .memory_catalog import InMemoryModelCatalog, InMemoryModelRepository, InMemoryUserAccountService
from .repository_client import RepositoryApiClient, RemoteModelRepository

__all__ = [
    "InMemoryModelCatalog",
    "InMemoryModelRepository",
    "InMemoryUserAccountService",
    "RemoteModelRepository",
    "RepositoryApiClient",
]
