"""
In-memory model catalog, role and account services.
"""

from typing import Dict, Optional, Set

from shared.errors import DoesNotExistError, NamespaceNotFoundError

from ..domain.model_id import ModelId, validate_namespace
from ..domain.models import ModelInfo, User


class InMemoryModelRepository:
    """Models stored in one workspace."""

    def __init__(self, models: Dict[str, ModelInfo]):
        self.models = models

    async def exists(self, model_id: str) -> bool:
        return model_id in self.models

    async def get_by_id(self, model_id: str) -> Optional[ModelInfo]:
        return self.models.get(model_id)


class InMemoryModelCatalog:
    """Namespaces, workspaces, models and roles held in dictionaries.

    Satisfies the NamespaceService, ModelRepositoryFactory,
    NamespaceRoleService and RepositoryRoleService ports at once.
    """

    def __init__(self):
        self.workspaces: Dict[str, str] = {}  # namespace -> workspace id
        self.models: Dict[str, Dict[str, ModelInfo]] = {}  # workspace id -> models
        self.namespace_roles: Dict[str, Dict[str, Set[str]]] = {}  # namespace -> user -> roles
        self.sysadmins: Set[str] = set()

    def add_namespace(self, namespace: str, workspace_id: Optional[str] = None) -> str:
        """Register a namespace and return its workspace id."""
        validate_namespace(namespace)
        workspace_id = workspace_id or f"ws-{namespace}"
        self.workspaces[namespace] = workspace_id
        self.models.setdefault(workspace_id, {})
        self.namespace_roles.setdefault(namespace, {})
        return workspace_id

    def add_model(self, model: ModelInfo) -> None:
        """Register a model, creating its namespace when needed."""
        namespace = ModelId.parse(model.model_id).namespace
        workspace_id = self.workspaces.get(namespace) or self.add_namespace(namespace)
        self.models[workspace_id][model.model_id] = model

    def grant_role(self, username: str, namespace: str, role: str) -> None:
        if namespace not in self.workspaces:
            raise NamespaceNotFoundError(f"Namespace [{namespace}] does not exist.")
        self.namespace_roles[namespace].setdefault(username, set()).add(role)

    def add_sysadmin(self, username: str) -> None:
        self.sysadmins.add(username)

    async def resolve_workspace_id(self, namespace: str) -> Optional[str]:
        return self.workspaces.get(namespace)

    def get_repository(self, workspace_id: str) -> InMemoryModelRepository:
        return InMemoryModelRepository(self.models.setdefault(workspace_id, {}))

    async def get_repository_by_model(self, model_id: str) -> InMemoryModelRepository:
        namespace = ModelId.parse(model_id).namespace
        workspace_id = self.workspaces.get(namespace)
        if workspace_id is None:
            raise NamespaceNotFoundError(f"Namespace [{namespace}] does not exist.")
        return self.get_repository(workspace_id)

    async def has_role(self, username: str, namespace: str, role: str) -> bool:
        return role in self._roles(username, namespace)

    async def has_any_role(self, username: str, namespace: str) -> bool:
        return bool(self._roles(username, namespace))

    async def is_sysadmin(self, username: str) -> bool:
        return username in self.sysadmins

    def _roles(self, username: str, namespace: str) -> Set[str]:
        if namespace not in self.namespace_roles:
            raise DoesNotExistError(f"Namespace [{namespace}] does not exist.")
        return self.namespace_roles[namespace].get(username, set())


class InMemoryUserAccountService:
    """User accounts keyed by username."""

    def __init__(self):
        self.users: Dict[str, User] = {}

    def add_user(self, username: str, email: Optional[str] = None) -> User:
        user = User(username=username, email=email)
        self.users[username] = user
        return user

    async def get_user(self, username: str) -> Optional[User]:
        return self.users.get(username)
