"""
Integration tests for the /api blueprint.

The app runs on real components (SQLite in tmp_path, filesystem blobs) with
a fake classifier and a manually advanced clock.
"""

import functools
import io
import uuid
from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import pytest
from PIL import Image

from core.components import build_components
from errors import ProviderUnavailable, StorageError
from pipeline.interfaces import ClassificationInterface, ClassificationResult
from pipeline.services import ClassificationService, FilesystemBlobStore
from utils.db import closing_connection
from utils.path_manager import PathManager
from web.services.components_service import reset_components
from web.web_interface import create_web_interface

T0 = datetime(2026, 3, 1, 12, 0, 0, tzinfo=UTC)


class FakeClock:
    def __init__(self, start: datetime = T0):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class FakeClassifier(ClassificationInterface):
    """Validates like the real gateway, answers with a fixed result."""

    def __init__(self):
        self.error = None

    def classify(self, data, mime):
        ClassificationService.validate_image(data, mime)
        if self.error:
            raise self.error
        return ClassificationResult(
            label="Red Fox",
            description="A quick woodland visitor.",
            confidence=0.87,
            tags=["mammal", "forest"],
            raw_json={"content": []},
            model_id=self.get_model_id(),
        )

    def get_model_id(self):
        return "fake-model"


def png_bytes(size=(4, 3)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color=(10, 90, 160)).save(buffer, format="PNG")
    return buffer.getvalue()


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def classifier():
    return FakeClassifier()


@pytest.fixture
def app(tmp_path, clock, classifier):
    storage = tmp_path / "storage"
    config = {
        "OUTPUT_DIR": str(storage),
        "DB_FILENAME": "entries.db",
        "MAX_UPLOAD_MB": 1,
        "HOST": "127.0.0.1",
        "PORT": 4000,
    }
    components = build_components(
        connection_factory=functools.partial(closing_connection, storage / "entries.db"),
        classifier=classifier,
        blob_store=FilesystemBlobStore(PathManager(storage)),
        clock=clock,
    )
    storage.mkdir(parents=True, exist_ok=True)

    with patch("utils.db.connection.get_config", return_value=config), patch(
        "core.health_core.get_config", return_value=config
    ):
        interface = create_web_interface(components=components, config=config)
        app = interface["server"]
        app.config["TESTING"] = True
        yield app

    reset_components()


@pytest.fixture
def client(app):
    return app.test_client()


def upload(client, data=None, filename="fox.png", content_type="image/png"):
    data = png_bytes() if data is None else data
    return client.post(
        "/api/entries",
        data={"image": (io.BytesIO(data), filename, content_type)},
        content_type="multipart/form-data",
    )


def create(client) -> dict:
    response = upload(client)
    assert response.status_code == 201
    return response.get_json()["entry"]


# ---------------------------------------------------------------------------
# Health & settings
# ---------------------------------------------------------------------------


def test_health_reports_model_and_database(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    data = response.get_json()
    assert data["model"] == "fake-model"
    assert data["database"]["connected"] is True
    assert data["status"] in ("ok", "warning")


def test_settings_default_private_and_update(client):
    assert client.get("/api/settings").get_json()["is_public"] is False

    response = client.put("/api/settings", json={"is_public": True})
    assert response.status_code == 200
    assert response.get_json()["is_public"] is True
    assert client.get("/api/settings").get_json()["is_public"] is True


@pytest.mark.parametrize("body", [{}, {"is_public": "yes"}, {"is_public": 1}, ["x"]])
def test_settings_update_rejects_bad_body(client, body):
    response = client.put("/api/settings", json=body)
    assert response.status_code == 400
    assert "error" in response.get_json()


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------


def test_create_entry_returns_detail(client):
    response = upload(client)

    assert response.status_code == 201
    entry = response.get_json()["entry"]
    assert entry["label"] == "Red Fox"
    assert entry["description"] == "A quick woodland visitor."
    assert entry["confidence"] == 0.87
    assert entry["tags"] == ["mammal", "forest"]
    assert entry["shared"] is False
    assert entry["share_url"] is None
    assert entry["deleted_at"] is None
    assert entry["image_url"] == f"/api/entries/{entry['id']}/image"
    assert (entry["image_width"], entry["image_height"]) == (4, 3)


def test_create_without_image_field_is_rejected(client):
    response = client.post(
        "/api/entries", data={"caption": "no file"}, content_type="multipart/form-data"
    )
    assert response.status_code == 400
    assert response.get_json() == {"error": "Missing image field"}


def test_create_with_non_image_is_rejected(client):
    response = upload(client, data=b"plain text", filename="notes.txt", content_type="text/plain")
    assert response.status_code == 400
    assert client.get("/api/entries").get_json() == []


def test_create_with_empty_image_is_rejected(client):
    response = upload(client, data=b"")
    assert response.status_code == 400


def test_oversized_upload_is_rejected(client):
    response = upload(client, data=b"\x00" * (2 * 1024 * 1024))
    assert response.status_code == 413
    assert "error" in response.get_json()


def test_provider_failure_maps_to_502_without_details(client, classifier):
    classifier.error = ProviderUnavailable("Provider unreachable after retry: secret-host:443")

    response = upload(client)

    assert response.status_code == 502
    assert response.get_json() == {"error": "Classification service unavailable"}
    assert client.get("/api/entries").get_json() == []


def test_storage_failure_maps_to_500_without_details(client, app):
    with patch(
        "web.services.entries_service.get_components",
        side_effect=StorageError("database disk image is malformed at /var/data"),
    ):
        response = client.get("/api/entries")

    assert response.status_code == 500
    assert response.get_json() == {"error": "Internal storage error"}


# ---------------------------------------------------------------------------
# Listing & detail
# ---------------------------------------------------------------------------


def test_list_is_newest_first(client, clock):
    first = create(client)
    clock.advance(seconds=1)
    second = create(client)

    ids = [e["id"] for e in client.get("/api/entries").get_json()]
    assert ids == [second["id"], first["id"]]


def test_get_unknown_entry_is_404(client):
    response = client.get(f"/api/entries/{uuid.uuid4()}")
    assert response.status_code == 404
    assert response.get_json() == {"error": "Entry not found"}


def test_malformed_entry_id_is_404(client):
    response = client.get("/api/entries/not-a-uuid")
    assert response.status_code == 404
    assert "error" in response.get_json()


def test_image_route_streams_stored_bytes(client):
    data = png_bytes()
    entry = upload(client, data=data).get_json()["entry"]

    response = client.get(entry["image_url"])
    try:
        assert response.status_code == 200
        assert response.mimetype == "image/png"
        assert response.data == data
    finally:
        response.close()


# ---------------------------------------------------------------------------
# Trash lifecycle
# ---------------------------------------------------------------------------


def test_delete_and_restore_within_window(client, clock):
    entry = create(client)

    response = client.post(f"/api/entries/{entry['id']}/delete")
    assert response.status_code == 200
    body = response.get_json()
    assert body["status"] == "deleted"
    assert body["entry"]["deleted_at"] is not None
    assert client.get("/api/entries").get_json() == []

    # Detail still reachable while in trash
    detail = client.get(f"/api/entries/{entry['id']}").get_json()
    assert detail["deleted_at"] == body["entry"]["deleted_at"]

    clock.advance(minutes=30)
    response = client.post(f"/api/entries/{entry['id']}/restore")
    assert response.status_code == 200
    assert response.get_json()["status"] == "restored"
    assert response.get_json()["entry"]["deleted_at"] is None
    assert [e["id"] for e in client.get("/api/entries").get_json()] == [entry["id"]]


def test_delete_twice_is_idempotent(client, clock):
    entry = create(client)
    first = client.post(f"/api/entries/{entry['id']}/delete").get_json()

    clock.advance(minutes=1)
    second = client.post(f"/api/entries/{entry['id']}/delete")

    assert second.status_code == 200
    assert second.get_json()["entry"]["deleted_at"] == first["entry"]["deleted_at"]


def test_restore_after_window_is_410(client, clock):
    entry = create(client)
    client.post(f"/api/entries/{entry['id']}/delete")

    clock.advance(minutes=90)
    response = client.post(f"/api/entries/{entry['id']}/restore")

    assert response.status_code == 410
    assert response.get_json() == {"error": "Restore window expired"}


def test_restore_active_entry_is_409(client):
    entry = create(client)
    response = client.post(f"/api/entries/{entry['id']}/restore")
    assert response.status_code == 409


def test_restore_after_purge_is_404(client, app, clock):
    entry = create(client)
    client.post(f"/api/entries/{entry['id']}/delete")
    clock.advance(minutes=65)

    from web.services.components_service import get_components

    assert get_components().sweeper.run_once()["purged"] == 1

    assert client.post(f"/api/entries/{entry['id']}/restore").status_code == 404
    assert client.get(f"/api/entries/{entry['id']}").status_code == 404
    assert client.get(entry["image_url"]).status_code == 404


# ---------------------------------------------------------------------------
# Sharing & public listing
# ---------------------------------------------------------------------------


def test_share_enable_lookup_and_disable(client):
    entry = create(client)

    shared = client.post(f"/api/entries/{entry['id']}/share", json={"enable": True}).get_json()
    assert shared["shared"] is True
    token = shared["share_url"].rsplit("/", 1)[-1]

    visitor_view = client.get(f"/api/share/{token}")
    assert visitor_view.status_code == 200
    data = visitor_view.get_json()
    assert data["id"] == entry["id"]
    assert data["label"] == "Red Fox"
    assert "share_url" not in data
    assert "deleted_at" not in data

    unshared = client.post(f"/api/entries/{entry['id']}/share", json={"enable": False})
    assert unshared.get_json()["share_url"] is None
    assert client.get(f"/api/share/{token}").status_code == 404


def test_share_link_of_deleted_entry_is_404(client):
    entry = create(client)
    shared = client.post(f"/api/entries/{entry['id']}/share", json={"enable": True}).get_json()
    token = shared["share_url"].rsplit("/", 1)[-1]

    client.post(f"/api/entries/{entry['id']}/delete")

    assert client.get(f"/api/share/{token}").status_code == 404


@pytest.mark.parametrize("body", [{}, {"enable": "true"}, None])
def test_share_requires_boolean_enable(client, body):
    entry = create(client)
    response = client.post(f"/api/entries/{entry['id']}/share", json=body)
    assert response.status_code == 400


def test_public_listing_is_gated_by_visibility(client):
    kept = create(client)
    deleted = create(client)
    client.post(f"/api/entries/{deleted['id']}/delete")

    response = client.get("/api/public/entries")
    assert response.status_code == 404
    assert response.get_json() == {"error": "Collection not public"}

    client.put("/api/settings", json={"is_public": True})
    response = client.get("/api/public/entries")
    assert response.status_code == 200
    assert [e["id"] for e in response.get_json()] == [kept["id"]]


# ---------------------------------------------------------------------------
# Cross-origin access & response shape
# ---------------------------------------------------------------------------

UI_ORIGIN = "http://localhost:5173"


def test_api_allows_cross_origin_requests(client):
    response = client.get("/api/entries", headers={"Origin": UI_ORIGIN})

    assert response.status_code == 200
    assert response.headers.get("Access-Control-Allow-Origin") in ("*", UI_ORIGIN)


def test_cross_origin_preflight_for_upload(client):
    response = client.options(
        "/api/entries",
        headers={
            "Origin": UI_ORIGIN,
            "Access-Control-Request-Method": "POST",
        },
    )

    assert response.status_code == 200
    assert response.headers.get("Access-Control-Allow-Origin") in ("*", UI_ORIGIN)
    assert "POST" in response.headers.get("Access-Control-Allow-Methods", "")


def test_configured_origins_restrict_cross_origin_access(tmp_path, classifier):
    storage = tmp_path / "restricted"
    config = {
        "MAX_UPLOAD_MB": 1,
        "HOST": "127.0.0.1",
        "PORT": 4000,
        "CORS_ORIGINS": ["https://journal.example.org"],
    }
    components = build_components(
        connection_factory=functools.partial(closing_connection, tmp_path / "r.db"),
        classifier=classifier,
        blob_store=FilesystemBlobStore(PathManager(storage)),
    )
    try:
        client = create_web_interface(components=components, config=config)["server"].test_client()

        allowed = client.get("/api/entries", headers={"Origin": "https://journal.example.org"})
        other = client.get("/api/entries", headers={"Origin": "https://elsewhere.example"})

        assert allowed.headers.get("Access-Control-Allow-Origin") == "https://journal.example.org"
        assert other.headers.get("Access-Control-Allow-Origin") is None
    finally:
        reset_components()


def test_unexpected_error_is_generic_json_500(client):
    with patch(
        "web.services.entries_service.get_components",
        side_effect=RuntimeError("boom in /srv/journal/secret.py"),
    ):
        response = client.get("/api/entries")

    assert response.status_code == 500
    assert response.get_json() == {"error": "Internal error"}
    assert b"secret" not in response.data


def test_detail_keys_keep_declared_order(client):
    entry = create(client)

    response = client.get(f"/api/entries/{entry['id']}")

    keys = list(response.get_json().keys())
    assert keys[:3] == ["id", "created_at", "image_url"]
