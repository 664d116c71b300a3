"""Shared fixtures for the elastiko gateway test suite."""

import os

import httpx
import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

# ---- Environment setup (MUST happen before any api module import) ----
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("GATEWAY_REQUEST_TIMEOUT", "30")


# ── Model factories ──────────────────────────────────────────────────


@pytest.fixture
def make_descriptor():
    """Factory for ConnectionDescriptor instances with sensible defaults."""
    from models import ConnectionDescriptor

    def _factory(**overrides):
        defaults = dict(
            id="conn-1",
            name="local",
            host="es.local",
            port=9200,
        )
        defaults.update(overrides)
        return ConnectionDescriptor(**defaults)

    return _factory


# ── Stub cluster (httpx.MockTransport) ───────────────────────────────


class StubCluster:
    """Replays canned responses per (method, path) and records every request."""

    def __init__(self):
        self.routes = {}
        self.requests = []

    def on(self, method, path, status=200, json=None, text=None, raises=None):
        self.routes[(method, path)] = (status, json, text, raises)
        return self

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"error": "no route"})
        status, body, text, raises = route
        if raises is not None:
            raise raises(f"stubbed {raises.__name__}", request=request)
        if text is not None:
            return httpx.Response(status, text=text)
        return httpx.Response(status, json=body)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def cluster():
    return StubCluster()


@pytest.fixture
def gateway(cluster):
    """ClusterGateway whose shared client talks to the stub cluster."""
    from es_connector import ClusterGateway
    from session_store import ClientProvider

    return ClusterGateway(clients=ClientProvider(transport=httpx.MockTransport(cluster)))


@pytest.fixture
def connected_gateway(gateway, make_descriptor):
    """Gateway with an active session already in the store."""
    gateway.session.set(make_descriptor())
    return gateway


HEALTH_PAYLOAD = {
    "cluster_name": "docker-cluster",
    "status": "green",
    "number_of_nodes": 3,
    "number_of_data_nodes": 2,
    "active_primary_shards": 5,
    "active_shards": 10,
    "relocating_shards": 0,
    "initializing_shards": 1,
    "unassigned_shards": 2,
    "number_of_pending_tasks": 4,
}


@pytest.fixture
def health_payload():
    return dict(HEALTH_PAYLOAD)


# ── FastAPI TestClient with in-memory DB ──────────────────────────────


@pytest.fixture
def test_client(gateway, cluster):
    """FastAPI TestClient with in-memory SQLite and the stub-backed gateway."""
    from fastapi.testclient import TestClient

    from database import get_session
    from main import app, get_gateway

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    SQLModel.metadata.create_all(engine)

    def override_get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_gateway] = lambda: gateway

    client = TestClient(app)
    yield client, gateway, cluster

    app.dependency_overrides.clear()
