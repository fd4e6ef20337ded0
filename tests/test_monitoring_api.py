"""Tests for the /api/v1/monitoring HTTP endpoints."""

from collections.abc import Generator
from datetime import datetime, timedelta, timezone
from http import HTTPStatus
from typing import Any, Dict, Optional

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from kubernetes import config
from kubernetes.config.config_exception import ConfigException

from cluster_monitor.config import settings
from cluster_monitor.core.exceptions import CollaboratorUnavailableError, NotFoundError
from cluster_monitor.dependencies import get_k8s_client
from cluster_monitor.main import app
from tests.factories import FakeK8sClient, make_container, make_event, make_node, make_pod

BASE = f"{settings.API_PREFIX}/monitoring"


def _token(role: Optional[str] = "user", sub: Optional[str] = "alice", secret: Optional[str] = None) -> str:
    claims: Dict[str, Any] = {"exp": datetime.now(timezone.utc) + timedelta(minutes=5)}
    if sub is not None:
        claims["sub"] = sub
    if role is not None:
        claims["role"] = role
    return jwt.encode(claims, secret or settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def _auth(role: Optional[str] = "user") -> Dict[str, str]:
    return {"Authorization": f"Bearer {_token(role)}"}


@pytest.fixture
def fake() -> FakeK8sClient:
    now = datetime.now(timezone.utc)
    return FakeK8sClient(
        nodes=[make_node("n1"), make_node("n2", ready=False)],
        pods=[
            make_pod("api", namespace="web", containers=[make_container(requests={"cpu": "500m", "memory": "1Gi"})]),
            make_pod("db", namespace="data", containers=[make_container(requests={"cpu": "2", "memory": "4Gi"})]),
        ],
        events=[
            make_event("api.1", type="Warning", namespace="web", last_timestamp=now - timedelta(minutes=5)),
            make_event("db.1", namespace="data", last_timestamp=now - timedelta(minutes=1)),
        ],
        logs={"api": "boot\nERROR: db unreachable", "db": NotFoundError("gone")},
    )


@pytest.fixture
def api(fake: FakeK8sClient) -> Generator[TestClient, Any, None]:
    app.dependency_overrides[get_k8s_client] = lambda: fake
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


class TestAuthentication:
    """Tests for the bearer-token role gate."""

    def test_missing_token_is_401(self, api: TestClient) -> None:
        response = api.get(f"{BASE}/health")

        assert response.status_code == HTTPStatus.UNAUTHORIZED
        assert response.json()["message"] == "Not authenticated"

    def test_invalid_signature_is_401(self, api: TestClient) -> None:
        headers = {"Authorization": f"Bearer {_token(secret='not-the-secret')}"}

        response = api.get(f"{BASE}/health", headers=headers)

        assert response.status_code == HTTPStatus.UNAUTHORIZED

    def test_token_without_subject_is_401(self, api: TestClient) -> None:
        headers = {"Authorization": f"Bearer {_token(sub=None)}"}

        assert api.get(f"{BASE}/health", headers=headers).status_code == HTTPStatus.UNAUTHORIZED

    def test_insufficient_role_is_403(self, api: TestClient) -> None:
        response = api.get(f"{BASE}/health", headers=_auth("viewer"))

        assert response.status_code == HTTPStatus.FORBIDDEN

    @pytest.mark.parametrize("role", ["user", "admin"])
    def test_allowed_roles(self, api: TestClient, role: str) -> None:
        assert api.get(f"{BASE}/health", headers=_auth(role)).status_code == HTTPStatus.OK

    def test_liveness_is_public(self, api: TestClient) -> None:
        assert api.get("/health").json() == {"status": "healthy"}


def test_health_endpoint(api: TestClient) -> None:
    data = api.get(f"{BASE}/health", headers=_auth()).json()

    assert data["overall"] == "Degraded"
    assert data["nodes"]["total"] == 2
    assert data["nodes"]["healthy"] == 1
    assert data["nodes"]["details"][1]["status"] == "NotReady"


def test_resources_endpoint_uses_camel_case(api: TestClient) -> None:
    data = api.get(f"{BASE}/resources", headers=_auth()).json()

    assert data["summary"] == {"totalNamespaces": 2, "totalPods": 2, "totalContainers": 2}
    web = data["byNamespace"][0]
    assert web["namespace"] == "web"
    assert web["podCount"] == 1
    assert web["requestedCpu"] == 0.5
    assert web["requestedMemory"] == 1024 ** 3


def test_top_consumers_endpoint(api: TestClient) -> None:
    data = api.get(f"{BASE}/resources/top", params={"limit": 1}, headers=_auth()).json()

    assert [ns["namespace"] for ns in data["topNamespaces"]] == ["data"]
    assert data["rankingMode"] == "compat"


def test_top_consumers_rejects_bad_limit(api: TestClient) -> None:
    response = api.get(f"{BASE}/resources/top", params={"limit": 0}, headers=_auth())

    assert response.status_code == HTTPStatus.UNPROCESSABLE_ENTITY
    assert response.json()["message"] == "Validation failed"


def test_events_endpoints(api: TestClient) -> None:
    events = api.get(f"{BASE}/events", headers=_auth()).json()
    warnings = api.get(f"{BASE}/events/warnings", headers=_auth()).json()
    recent = api.get(f"{BASE}/events/recent", params={"hours": 2}, headers=_auth()).json()

    assert [e["name"] for e in events["events"]] == ["db.1", "api.1"]
    assert events["events"][0]["involvedObject"]["kind"] == "Pod"
    assert "lastTimestamp" in events["events"][0]
    assert [e["name"] for e in warnings["events"]] == ["api.1"]
    assert recent["count"] == 2
    assert recent["timeRange"] == "Last 2 hour(s)"


def test_logs_endpoint_marks_failed_pods(api: TestClient, fake: FakeK8sClient) -> None:
    response = api.get(f"{BASE}/logs/web", params={"labelSelector": "app=api", "tailLines": 20}, headers=_auth())
    data = response.json()

    assert response.status_code == HTTPStatus.OK
    assert data["podCount"] == 1
    assert data["logs"][0] == {"podName": "api", "namespace": "web", "logs": "boot\nERROR: db unreachable"}
    assert ("list_pods", "web", "app=api") in fake.calls
    assert ("get_pod_log", "web", "api", 20) in fake.calls

    failed = api.get(f"{BASE}/logs/data", headers=_auth()).json()
    assert failed["logs"] == [{"podName": "db", "namespace": "data", "error": "Failed to fetch logs"}]


def test_error_logs_endpoint(api: TestClient) -> None:
    data = api.get(f"{BASE}/logs/web/errors", headers=_auth()).json()

    assert data["podsWithErrors"] == 1
    assert data["errorLogs"][0]["errorCount"] == 1
    assert data["errorLogs"][0]["errors"] == ["ERROR: db unreachable"]


def test_dashboard_endpoint(api: TestClient) -> None:
    data = api.get(f"{BASE}/dashboard", headers=_auth()).json()

    assert data["clusterHealth"]["overall"] == "Degraded"
    assert data["resourceUtilization"]["totalPods"] == 2
    assert data["warnings"]["count"] == 1
    assert data["recentEvents"]["count"] == 2


def test_not_found_is_404(api: TestClient, fake: FakeK8sClient) -> None:
    fake.failures[("list_events", "ghost")] = NotFoundError("namespace ghost introuvable")

    response = api.get(f"{BASE}/events", params={"namespace": "ghost"}, headers=_auth())

    assert response.status_code == HTTPStatus.NOT_FOUND
    body = response.json()
    assert body["statusCode"] == 404
    assert body["path"] == f"{BASE}/events"
    assert body["method"] == "GET"
    assert body["message"] == "namespace ghost introuvable"


def test_collaborator_failure_is_502(api: TestClient, fake: FakeK8sClient) -> None:
    fake.failures["list_pods"] = CollaboratorUnavailableError("API injoignable", upstream_status=500)

    response = api.get(f"{BASE}/logs/web", headers=_auth())

    assert response.status_code == HTTPStatus.BAD_GATEWAY
    assert response.json()["details"] == {"upstreamStatus": 500}


def test_recent_events_accepts_fractional_hours(api: TestClient) -> None:
    data = api.get(f"{BASE}/events/recent", params={"hours": 0.5}, headers=_auth()).json()

    assert [e["name"] for e in data["events"]] == ["db.1", "api.1"]
    assert data["timeRange"] == "Last 0.5 hour(s)"


def test_recent_events_rejects_non_positive_hours(api: TestClient) -> None:
    response = api.get(f"{BASE}/events/recent", params={"hours": 0}, headers=_auth())

    assert response.status_code == HTTPStatus.UNPROCESSABLE_ENTITY


def test_unloadable_kube_config_is_502(monkeypatch: pytest.MonkeyPatch) -> None:
    def fail(*args, **kwargs):
        raise ConfigException("no configuration found")

    monkeypatch.setattr(config, "load_incluster_config", fail)
    monkeypatch.setattr(config, "load_kube_config", fail)
    get_k8s_client.cache_clear()
    try:
        response = TestClient(app).get(f"{BASE}/health", headers=_auth())
    finally:
        get_k8s_client.cache_clear()

    assert response.status_code == HTTPStatus.BAD_GATEWAY
    body = response.json()
    assert body["statusCode"] == 502
    assert body["path"] == f"{BASE}/health"
