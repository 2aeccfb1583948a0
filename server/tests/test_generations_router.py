from __future__ import annotations

from typing import Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from babygen import main

from babygen.errors import BabyGeneratorError, CredentialMissingError, HttpError, JobNotFoundError, PollingTimeoutError
from babygen.main import app
from babygen.models.schemas import GenerationRequest
from babygen.routers import generations
from babygen.routers.generations import get_credential_store, get_orchestrator
from babygen.services.credentials import InMemoryCredentialStore
from babygen.services.poll_orchestrator import Failure, PollOutcome, Success

BODY = {
    "fatherImage": "https://img.test/dad.jpg?size=large",
    "motherImage": "https://img.test/mom.jpg",
    "gender": "babyGirl",
}


class FakeOrchestrator:
    def __init__(self, outcome: PollOutcome):
        self.outcome = outcome
        self.calls: list[tuple[GenerationRequest, str]] = []

    async def run(self, request: GenerationRequest, api_key: str) -> PollOutcome:
        self.calls.append((request, api_key))
        return self.outcome


@pytest.fixture()
def client_factory():  # noqa: ANN201
    def build(outcome: PollOutcome, stored_key: Optional[str] = "stored-key"):  # noqa: ANN202
        fake = FakeOrchestrator(outcome)
        app.dependency_overrides[get_orchestrator] = lambda: fake
        app.dependency_overrides[get_credential_store] = lambda: InMemoryCredentialStore(stored_key)
        return TestClient(app), fake

    yield build
    app.dependency_overrides.clear()


def test_health() -> None:
    response = TestClient(app).get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_generation_success_uses_stored_key(client_factory) -> None:  # noqa: ANN001
    client, fake = client_factory(Success(result_url="https://cdn.test/baby.png", job_id="job-9", attempts=4))

    response = client.post("/generations", json=BODY)

    assert response.status_code == 200
    assert response.json() == {
        "status": "succeeded",
        "jobId": "job-9",
        "resultUrl": "https://cdn.test/baby.png",
        "attempts": 4,
    }
    ((request, api_key),) = fake.calls
    assert api_key == "stored-key"
    assert request.father_image_url == "https://img.test/dad.jpg"


def test_header_key_overrides_store(client_factory) -> None:  # noqa: ANN001
    client, fake = client_factory(Success(result_url="u", job_id="j", attempts=1))

    client.post("/generations", json=BODY, headers={"x-api-key": "header-key"})

    assert fake.calls[0][1] == "header-key"


@pytest.mark.parametrize(
    ("error", "status_code"),
    [
        (JobNotFoundError("job-9"), 404),
        (PollingTimeoutError("job-9", 30, 3.0), 504),
        (HttpError(500, "boom"), 502),
        (HttpError(403, "forbidden"), 401),
        (HttpError(401, "bad key"), 401),
        (HttpError(429, "slow down"), 502),
    ],
)
def test_generation_failure_maps_to_http_status(client_factory, error: BabyGeneratorError, status_code: int) -> None:  # noqa: ANN001
    client, _ = client_factory(Failure(error=error, job_id="job-9", attempts=30))

    response = client.post("/generations", json=BODY)

    assert response.status_code == status_code
    assert response.json()["detail"] == {"kind": error.kind, "message": error.message, "jobId": "job-9"}


def test_missing_credential_is_unauthorized(client_factory) -> None:  # noqa: ANN001
    client, fake = client_factory(Failure(error=CredentialMissingError()), stored_key=None)

    response = client.post("/generations", json=BODY)

    assert response.status_code == 401
    assert response.json()["detail"]["message"] == "API Key is not configured."
    assert fake.calls[0][1] == ""


def test_local_file_urls_are_rejected_before_running(client_factory) -> None:  # noqa: ANN001
    client, fake = client_factory(Success(result_url="u", job_id="j", attempts=1))

    response = client.post("/generations", json={**BODY, "fatherImage": "file:///tmp/dad.png"})

    assert response.status_code == 422
    assert fake.calls == []


def test_credential_store_treats_blank_as_missing() -> None:
    store = InMemoryCredentialStore("  ")
    assert store.get_api_key() is None
    store.set_api_key(" key ")
    assert store.get_api_key() == "key"


def test_configured_app_runs_through_shared_client(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: list[httpx.Request] = []
    statuses = iter(["pending", "completed"])

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.method == "POST":
            return httpx.Response(200, json={"jobId": "job-77"})
        status = next(statuses)
        return httpx.Response(200, json={"status": status, "result": ["https://cdn.test/baby.png"]})

    shared_clients: list[httpx.AsyncClient] = []

    def build_mock_client() -> httpx.AsyncClient:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        shared_clients.append(client)
        return client

    monkeypatch.setattr(main, "build_http_client", build_mock_client)
    monkeypatch.setattr(generations.settings, "api_base_url", "https://api.test")
    monkeypatch.setattr(generations.settings, "poll_interval", 0.0)
    monkeypatch.setattr(generations.settings, "max_poll_attempts", 5)
    app.dependency_overrides[get_credential_store] = lambda: InMemoryCredentialStore("stored-key")

    try:
        with TestClient(app) as client:
            assert app.state.http_client is shared_clients[0]
            response = client.post("/generations", json=BODY)
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 200
    assert response.json()["resultUrl"] == "https://cdn.test/baby.png"
    assert response.json()["attempts"] == 2
    assert [f"{r.method} {r.url}" for r in seen] == [
        "POST https://api.test/baby-generator",
        "GET https://api.test/baby-generator/job-77",
        "GET https://api.test/baby-generator/job-77",
    ]
    assert all(r.headers["x-api-key"] == "stored-key" for r in seen)
    assert len(shared_clients) == 1
