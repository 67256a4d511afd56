"""
Model repository API client for the Comments Service.
"""

from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from shared.logging import get_logger
from shared.errors import DoesNotExistError, ExternalServiceError, NamespaceNotFoundError

from ..domain.model_id import ModelId
from ..domain.models import ModelInfo, ModelVisibility, User


class RemoteModelRepository:
    """Model lookups for one workspace, answered by the repository API."""

    def __init__(self, client: "RepositoryApiClient", workspace_id: str):
        self.client = client
        self.workspace_id = workspace_id

    async def exists(self, model_id: str) -> bool:
        return await self.get_by_id(model_id) is not None

    async def get_by_id(self, model_id: str) -> Optional[ModelInfo]:
        data = await self.client.get_json(
            f"/api/v1/workspaces/{_segment(self.workspace_id)}/models/{_segment(model_id)}"
        )
        if data is None:
            return None
        return ModelInfo(
            model_id=data.get("modelId", model_id),
            author=data.get("author", ""),
            visibility=data.get("visibility", ModelVisibility.PRIVATE.value),
            display_name=data.get("displayName")
        )


class RepositoryApiClient:
    """Client for the model repository REST API.

    Implements the namespace, model catalog, role and account ports. A 404
    means "absent" (or DoesNotExistError for role lookups on an unknown
    namespace); every other failure becomes an ExternalServiceError.
    """

    def __init__(self, base_url: str, timeout: float = 10.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport
        self.logger = get_logger("comments.repository_client")

    async def get_json(self, path: str) -> Optional[Dict[str, Any]]:
        """GET a JSON document; None when the API answers 404."""
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self.transport
            ) as client:
                response = await client.get(path)

        except httpx.HTTPError as e:
            self.logger.error("Repository API HTTP error", path=path, error=str(e))
            raise ExternalServiceError(
                "repository",
                "Repository API unavailable",
                details={"http_error": str(e)}
            )

        if response.status_code == 404:
            return None
        if response.status_code != 200:
            self.logger.error("Repository API error", path=path, status_code=response.status_code)
            raise ExternalServiceError(
                "repository",
                f"Unexpected status {response.status_code}",
                details={"status_code": response.status_code, "path": path}
            )

        try:
            return response.json()
        except ValueError as e:
            self.logger.error("Repository API returned invalid JSON", path=path, error=str(e))
            raise ExternalServiceError(
                "repository",
                "Invalid JSON response",
                details={"path": path}
            )

    async def resolve_workspace_id(self, namespace: str) -> Optional[str]:
        data = await self.get_json(f"/api/v1/namespaces/{_segment(namespace)}/workspace")
        return data.get("workspaceId") if data else None

    def get_repository(self, workspace_id: str) -> RemoteModelRepository:
        return RemoteModelRepository(self, workspace_id)

    async def get_repository_by_model(self, model_id: str) -> RemoteModelRepository:
        namespace = ModelId.parse(model_id).namespace
        workspace_id = await self.resolve_workspace_id(namespace)
        if workspace_id is None:
            raise NamespaceNotFoundError(f"Namespace [{namespace}] does not exist.")
        return self.get_repository(workspace_id)

    async def has_role(self, username: str, namespace: str, role: str) -> bool:
        return role in await self._namespace_roles(username, namespace)

    async def has_any_role(self, username: str, namespace: str) -> bool:
        return bool(await self._namespace_roles(username, namespace))

    async def is_sysadmin(self, username: str) -> bool:
        data = await self.get_json(f"/api/v1/users/{_segment(username)}")
        return bool(data and data.get("sysadmin"))

    async def get_user(self, username: str) -> Optional[User]:
        data = await self.get_json(f"/api/v1/users/{_segment(username)}")
        if data is None:
            return None
        return User(username=data.get("username", username), email=data.get("email"))

    async def health_check(self) -> bool:
        try:
            await self.get_json("/api/v1/health")
            return True
        except ExternalServiceError:
            return False

    async def _namespace_roles(self, username: str, namespace: str) -> set:
        data = await self.get_json(
            f"/api/v1/namespaces/{_segment(namespace)}/users/{_segment(username)}/roles"
        )
        if data is None:
            raise DoesNotExistError(f"Namespace [{namespace}] does not exist.")
        return set(data.get("roles", []))


def _segment(value: str) -> str:
    return quote(value, safe="")
