"""
End-to-end integration tests for the comment flow against the repository API.
"""

import pytest
import httpx
from fastapi.testclient import TestClient

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_comments.app.main import CommentsService
from service_comments.app.adapters.repository_client import RepositoryApiClient
from shared.config import get_config
from shared.test_helpers import RecordingNotificationService, TestDataFactory, TestEnvironment


def build_repository_api():
    """Fake model repository API seeded from the test data factory."""
    users = {user.username: user for user in TestDataFactory.create_test_users()}
    models = {model.model_id: model for model in TestDataFactory.create_test_models()}

    def handler(request: httpx.Request) -> httpx.Response:
        parts = request.url.path.strip("/").split("/")[2:]

        if parts == ["health"]:
            return httpx.Response(200, json={"status": "ok"})

        if len(parts) == 3 and parts[0] == "namespaces" and parts[2] == "workspace":
            if parts[1] == "com.example":
                return httpx.Response(200, json={"workspaceId": "ws-example"})

        if len(parts) == 4 and parts[:3] == ["workspaces", "ws-example", "models"]:
            model = models.get(parts[3])
            if model:
                return httpx.Response(200, json={
                    "modelId": model.model_id,
                    "author": model.author,
                    "visibility": model.visibility,
                    "displayName": model.display_name
                })

        if len(parts) == 5 and parts[0] == "namespaces" and parts[4] == "roles":
            if parts[1] == "com.example":
                user = users.get(parts[3])
                roles = user.namespace_roles.get("com.example", []) if user else []
                return httpx.Response(200, json={"roles": roles})

        if len(parts) == 2 and parts[0] == "users" and parts[1] in users:
            user = users[parts[1]]
            return httpx.Response(200, json={
                "username": user.username,
                "email": user.email,
                "sysadmin": user.sysadmin
            })

        return httpx.Response(404, json={"error": "not found"})

    return httpx.MockTransport(handler)


class TestCommentFlow:
    """End-to-end tests for creating, listing and moderating comments."""

    @pytest.fixture
    def notifier(self):
        return RecordingNotificationService()

    @pytest.fixture
    def service(self, notifier):
        overrides = TestEnvironment.get_mock_config()
        overrides.update({
            "catalog_backend": "http",
            "repository_service_url": "http://repository.test"
        })
        service = CommentsService(get_config("comments", 8013, **overrides))
        service.catalog.transport = build_repository_api()
        service.fanout.notification_service = notifier
        return service

    @pytest.fixture
    def client(self, service):
        with TestClient(service.app) as client:
            yield client

    def post(self, client, username, model_id, content):
        return client.post(
            "/comments",
            json={"model_id": model_id, "content": content},
            headers={"X-Username": username}
        )

    def test_uses_repository_api(self, service):
        """Test the http backend wires a single API client into every port."""
        assert isinstance(service.catalog, RepositoryApiClient)
        assert service.account_service is service.catalog

    def test_discussion_thread(self, client, notifier):
        """Test a thread notifies the model author and every participant."""
        thermostat = "com.example:Thermostat:1.0.0"

        assert self.post(client, "alice", thermostat, "Is 0.5 degree resolution enough?").status_code == 201
        assert self.post(client, "carol", thermostat, "Should be 0.1").status_code == 201
        notifier.messages.clear()

        response = self.post(client, "alice", thermostat, "Agreed")
        assert response.status_code == 201
        assert notifier.recipients == {"bob", "carol", "alice"}

        listing = client.get(f"/comments/models/{thermostat}").json()
        assert listing["total"] == 3
        assert [c["author"] for c in listing["comments"]] == ["alice", "carol", "alice"]

    def test_private_model_moderation(self, client, notifier):
        """Test private model access and namespace-admin moderation."""
        lamp = "com.example:Lamp:2.1.0"

        assert self.post(client, "dave", lamp, "hi").status_code == 403

        created = self.post(client, "carol", lamp, "Brightness range is missing.")
        assert created.status_code == 201
        comment_id = created.json()["id"]
        assert notifier.recipients == {"bob", "carol"}

        denied = client.delete(f"/comments/{comment_id}", headers={"X-Username": "dave"})
        assert denied.json()["deleted"] is False

        removed = client.delete(f"/comments/{comment_id}", headers={"X-Username": "bob"})
        assert removed.json()["deleted"] is True
        assert client.get("/comments/authors/carol").json()["total"] == 0

    def test_unknown_namespace(self, client):
        """Test unknown namespaces are denied before any lookup of the model."""
        response = self.post(client, "alice", "org.missing:Pump:1.0.0", "hi")

        assert response.status_code == 403

        response = self.post(client, "admin", "org.missing:Pump:1.0.0", "hi")

        assert response.status_code == 404
        assert response.json()["code"] == "NAMESPACE_NOT_FOUND"

    def test_health_reports_catalog(self, client):
        """Test health includes the repository API."""
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["dependencies"]["catalog"] == "ok"
