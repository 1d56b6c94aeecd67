"""
HTTP-level tests for the FastAPI app built by `create_app()`.

Covers:
    - POST /shorten success, alias, and every failure status
    - GET /{code} 301 redirect and background click count
    - GET /stats/{code} and GET /health
    - error bodies are {"error": msg}
    - codes that name an app route are never allocated
"""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from main import create_app
from shortlink.errors import BackendError
from shortlink.manager.generator import ALPHABET
from shortlink.manager.validators import RESERVED_CODES, validate_alias
from shortlink.models import UrlMapping
from shortlink.storage.base import InsertResult

URL = "https://example.com/a/b"


# ---------------------------------------------------------------------
# POST /shorten
# ---------------------------------------------------------------------

def test_shorten_generated_code(client, storage):
    resp = client.post("/shorten", json={"longUrl": URL})
    assert resp.status_code == 200
    data = resp.json()
    assert set(data) == {"shortUrl", "shortCode"}
    code = data["shortCode"]
    assert len(code) == 6 and set(code) <= set(ALPHABET)
    assert data["shortUrl"].endswith(f"/{code}")
    assert storage.get_mapping(code).long_url == URL


def test_shorten_with_alias_then_conflict(client, storage):
    first = client.post("/shorten", json={"longUrl": URL, "customAlias": "launch"})
    assert first.status_code == 200
    assert first.json()["shortCode"] == "launch"

    second = client.post("/shorten", json={"longUrl": "https://other.example", "customAlias": "launch"})
    assert second.status_code == 409
    assert second.json() == {"error": "This custom alias is already taken. Please choose another."}
    assert storage.get_mapping("launch").long_url == URL


@pytest.mark.parametrize(
    "body",
    [
        {},
        {"longUrl": ""},
        {"longUrl": "example.com"},
        {"longUrl": "ftp://example.com"},
    ],
)
def test_shorten_invalid_url(client, body):
    resp = client.post("/shorten", json=body)
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid URL"}


@pytest.mark.parametrize("alias", ["ab", "x" * 17, "no spaces", "semi;colon"])
def test_shorten_invalid_alias(client, alias):
    resp = client.post("/shorten", json={"longUrl": URL, "customAlias": alias})
    assert resp.status_code == 400
    assert resp.json()["error"].startswith("Invalid alias")


def test_shorten_malformed_json(client):
    resp = client.post("/shorten", content=b"{not json", headers={"Content-Type": "application/json"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid request: Malformed JSON"}


def test_shorten_missing_body(client):
    resp = client.post("/shorten")
    assert resp.status_code == 400
    assert "Invalid request" in resp.json()["error"]


def test_shorten_wrong_type(client):
    resp = client.post("/shorten", json={"longUrl": 42})
    assert resp.status_code == 400


def test_shorten_exhaustion_returns_try_again(storage, clicks, scripted_generator):
    storage.insert_if_absent(UrlMapping("taken1", "https://other.example"))
    app = create_app(storage=storage, click_recorder=clicks, generator=scripted_generator("taken1"))
    resp = TestClient(app).post("/shorten", json={"longUrl": URL})
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to generate a unique short code. Please try again."}
    assert len(storage) == 1


def test_shorten_backend_failure_is_internal_error(clicks):
    storage = MagicMock()
    storage.insert_if_absent.return_value = InsertResult.backend_failure(RuntimeError("down"))
    app = create_app(storage=storage, click_recorder=clicks)
    resp = TestClient(app).post("/shorten", json={"longUrl": URL})
    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal Server Error"}


# ---------------------------------------------------------------------
# GET /{code}
# ---------------------------------------------------------------------

def test_redirect_is_301_and_counts_click(client, storage, clicks):
    code = client.post("/shorten", json={"longUrl": URL}).json()["shortCode"]

    resp = client.get(f"/{code}", follow_redirects=False)
    assert resp.status_code == 301
    assert resp.headers["location"] == URL

    clicks.shutdown(wait=True)
    assert storage.get_mapping(code).click_count == 1


def test_redirect_unknown_code_is_404(client):
    resp = client.get("/nope42", follow_redirects=False)
    assert resp.status_code == 404
    assert resp.json() == {"error": "URL not found"}


def test_redirect_lookup_failure_is_500(clicks):
    storage = MagicMock()
    storage.get_mapping.side_effect = BackendError()
    resp = TestClient(create_app(storage=storage, click_recorder=clicks)).get("/launch", follow_redirects=False)
    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal Server Error"}


def test_redirect_succeeds_when_increment_fails(client, storage, clicks):
    storage.insert_if_absent(UrlMapping("launch", URL))

    def failing_increment(short_code):
        raise BackendError("throttled")

    storage.increment_click_count = failing_increment
    resp = client.get("/launch", follow_redirects=False)
    assert resp.status_code == 301
    assert resp.headers["location"] == URL


def test_redirect_after_recorder_shutdown_still_301(client, storage, clicks):
    storage.insert_if_absent(UrlMapping("launch", URL))
    clicks.shutdown(wait=True)

    resp = client.get("/launch", follow_redirects=False)
    assert resp.status_code == 301
    assert resp.headers["location"] == URL


# ---------------------------------------------------------------------
# Codes that would be shadowed by the app's own routes
# ---------------------------------------------------------------------

@pytest.mark.parametrize("alias", ["health", "docs", "redoc"])
def test_alias_naming_a_route_is_rejected(client, storage, alias):
    resp = client.post("/shorten", json={"longUrl": URL, "customAlias": alias})
    assert resp.status_code == 400
    assert "reserved" in resp.json()["error"]
    assert storage.get_mapping(alias) is None


def test_every_alias_shaped_route_is_reserved(client):
    # Any single-segment path the app serves must never be handed out as a code.
    for route in client.app.routes:
        segments = route.path.strip("/").split("/")
        if len(segments) == 1 and "{" not in route.path and validate_alias(segments[0]):
            assert segments[0] in RESERVED_CODES, route.path


def test_generated_route_name_is_skipped(storage, clicks, scripted_generator):
    app = create_app(storage=storage, click_recorder=clicks, generator=scripted_generator("health", "fresh1"))
    client = TestClient(app)

    resp = client.post("/shorten", json={"longUrl": URL})
    assert resp.json()["shortCode"] == "fresh1"
    redirect = client.get("/fresh1", follow_redirects=False)
    assert redirect.status_code == 301
    assert client.get("/health").json() == {"status": "ok"}


# ---------------------------------------------------------------------
# GET /stats/{code}, /health
# ---------------------------------------------------------------------

def test_stats_reports_count_without_counting(client, storage, clicks):
    client.post("/shorten", json={"longUrl": URL, "customAlias": "launch"})
    client.get("/launch", follow_redirects=False)
    client.get("/launch", follow_redirects=False)
    clicks.shutdown(wait=True)

    first = client.get("/stats/launch").json()
    second = client.get("/stats/launch").json()
    assert first["shortCode"] == "launch"
    assert first["longUrl"] == URL
    assert first["clickCount"] == 2
    assert "createdAt" in first
    assert second["clickCount"] == 2


def test_stats_unknown_code(client):
    assert client.get("/stats/ghost1").status_code == 404


def test_health_returns_ok(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_module_level_app_uses_memory_backend():
    from main import app
    resp = TestClient(app).get("/health")
    assert resp.status_code == 200
