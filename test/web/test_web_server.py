import pytest
from starlette.testclient import TestClient

from conftest import utc
from versionnumber.core.models import Result
from versionnumber.runner import run_step
from versionnumber.step import VersionNumberStep
from versionnumber.web_server.web_server import VersionNumberWebServer


@pytest.fixture
def populated_store(store):
    step = VersionNumberStep("1.0.${BUILDS_ALL_TIME}")
    run_step(store, step, "web-app", {}, timestamp=utc(2026, 3, 5, 9))
    run_step(store, step, "web-app", {}, timestamp=utc(2026, 3, 5, 10))
    store.set_result("web-app", 1, Result.SUCCESS)
    return store


@pytest.fixture
def client(populated_store):
    server = VersionNumberWebServer(store=populated_store)
    return TestClient(server.get_app())


def test_ping(client):
    response = client.get("/ping")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "versionnumber-web"}


def test_health(client, populated_store):
    data = client.get("/health").json()
    assert data["status"] == "healthy"
    assert data["data_dir"] == str(populated_store.data_dir)


def test_list_jobs(client):
    assert client.get("/jobs").json() == {"jobs": ["web-app"]}


def test_list_jobs_ignores_non_object_history(client, populated_store):
    stray = populated_store.data_dir / "stray" / "builds.json"
    stray.parent.mkdir()
    stray.write_text("[]", encoding="utf-8")

    response = client.get("/jobs")
    assert response.status_code == 200
    assert response.json() == {"jobs": ["web-app"]}


def test_list_builds(client):
    response = client.get("/jobs/web-app/builds")
    assert response.status_code == 200
    builds = response.json()["builds"]
    assert [b["number"] for b in builds] == [1, 2]
    assert builds[0]["result"] == "SUCCESS"
    assert builds[1]["result"] is None
    assert builds[1]["version_number"] == "1.0.2"


def test_get_build(client):
    data = client.get("/jobs/web-app/builds/1").json()
    assert data["job"] == "web-app"
    assert data["version_number"] == "1.0.1"
    assert data["info"]["builds_today"] == 1


def test_get_latest_build(client):
    data = client.get("/jobs/web-app/builds/latest").json()
    assert data["number"] == 2


def test_unknown_job(client):
    response = client.get("/jobs/nope/builds")
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "JOB_NOT_FOUND"


def test_unknown_build(client):
    response = client.get("/jobs/web-app/builds/42")
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "BUILD_NOT_FOUND"


def test_invalid_build_number(client):
    response = client.get("/jobs/web-app/builds/first")
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_BUILD_NUMBER"
