"""
Fixtures for API tests: a FastAPI app with the ingestion routers, the test
job store and a mocked dispatcher wired in through dependency overrides.
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from docu_service.api.dependencies.ingestion import (
    get_job_dispatcher,
    get_job_store,
    get_worker_settings,
)
from docu_service.api.routes import health, ingestion, webhooks_worker
from docu_service.auth.gateway import GatewayPrincipalMiddleware
from docu_service.config.worker import WorkerSettings


@pytest.fixture
def worker_settings():
    return WorkerSettings(base_url="http://worker.test/api")


@pytest.fixture
def app(store, mock_dispatcher, worker_settings):
    app = FastAPI()
    app.middleware("http")(GatewayPrincipalMiddleware())
    app.include_router(health.router)
    app.include_router(webhooks_worker.router)
    app.include_router(ingestion.router)

    app.dependency_overrides[get_job_store] = lambda: store
    app.dependency_overrides[get_job_dispatcher] = lambda: mock_dispatcher
    app.dependency_overrides[get_worker_settings] = lambda: worker_settings
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def editor_headers():
    return {"X-Principal-Id": "editor-1", "X-Principal-Role": "editor"}


@pytest.fixture
def viewer_headers():
    return {"X-Principal-Id": "viewer-1", "X-Principal-Role": "viewer"}
