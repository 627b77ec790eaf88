"""End-to-end tests for the JSON endpoints."""

import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("DATA_DIR", str(ROOT / "data"))

from ocie_helper import create_app
from ocie_helper.core.errors import StoreError
from ocie_helper.core.gate import AccessGate, site_gate, write_gate
from ocie_helper.db.session import Base, get_db
from ocie_helper.services.blob_store import BlobStore, LocalBlobStore, get_blob_store

SITE_SECRET = "site-secret"
WRITE_SECRET = "write-secret"


class FailingBlobStore(BlobStore):
    def upload_and_publish(self, data, key, content_type):
        raise StoreError("Failed to upload image")


class RecordingBlobStore(BlobStore):
    def __init__(self):
        self.calls = []

    def upload_and_publish(self, data, key, content_type):
        self.calls.append((key, content_type))
        return f"https://cdn.example/equipment/{key}"


@pytest.fixture()
def app(tmp_path):
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    Base.metadata.create_all(bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    blobs = LocalBlobStore(tmp_path / "media")
    application = create_app()
    application.dependency_overrides[get_db] = override_get_db
    application.dependency_overrides[get_blob_store] = lambda: blobs
    application.dependency_overrides[site_gate] = lambda: AccessGate("site", SITE_SECRET)
    application.dependency_overrides[write_gate] = lambda: AccessGate("write", WRITE_SECRET)
    application.state.test_blobs = blobs
    return application


@pytest.fixture()
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def site_client(client):
    assert client.post("/auth/verify-site", json={"passcode": SITE_SECRET}).status_code == 200
    return client


@pytest.fixture()
def writer(site_client):
    assert site_client.post("/auth/verify-write", json={"passcode": WRITE_SECRET}).status_code == 200
    return site_client


def _payload(code="1234", name="BAG,DUFFEL", lin="DA150J/B14729", **extra):
    body = {"lineItemNumbers": lin, "name": name, "partialCode": code}
    body.update(extra)
    return body


# ---- access gates ----

def test_verify_write_accepts_correct_passcode(client):
    res = client.post("/auth/verify-write", json={"passcode": WRITE_SECRET})
    assert res.status_code == 200
    assert res.json() == {"success": True}


def test_verify_write_rejects_wrong_passcode(client):
    res = client.post("/auth/verify-write", json={"passcode": "nope"})
    assert res.status_code == 401
    body = res.json()
    assert body["success"] is False
    assert body["error"] == "Invalid passcode"


def test_verify_requires_passcode_field(client):
    assert client.post("/auth/verify-site", json={}).status_code == 400
    assert client.post("/auth/verify-write", json={"passcode": ""}).status_code == 400


def test_site_secret_does_not_unlock_writes(client):
    assert client.post("/auth/verify-write", json={"passcode": SITE_SECRET}).status_code == 401
    assert client.post("/auth/verify-site", json={"passcode": WRITE_SECRET}).status_code == 401


def test_listing_requires_site_access(client):
    res = client.get("/equipment")
    assert res.status_code == 401
    assert res.json()["code"] == "unauthorized"


def test_adding_requires_write_access(site_client):
    res = site_client.post("/equipment", json=_payload())
    assert res.status_code == 401


# ---- equipment ----

def test_add_and_list_equipment(writer):
    first = writer.post("/equipment", json=_payload("1234", alternateName="Duffel", sizeLabel="L"))
    second = writer.post("/equipment", json=_payload("5678", name="CANTEEN,WATER", lin=["C05001"]))
    assert first.status_code == 200
    assert second.status_code == 200

    body = first.json()
    assert body["success"] is True
    assert body["message"] == "Item added successfully"
    item = body["item"]
    assert item["lineItemNumbers"] == ["DA150J", "B14729"]
    assert item["partialCode"] == "1234"
    assert item["alternateName"] == "Duffel"
    assert item["sizeLabel"] == "L"
    assert item["imageReference"] is None
    assert item["createdAt"]

    listing = writer.get("/equipment")
    assert listing.status_code == 200
    rows = listing.json()
    assert len(rows) == 2
    assert {row["partialCode"] for row in rows} == {"1234", "5678"}
    assert all(row["id"] for row in rows)
    assert {row["id"] for row in rows} == {first.json()["item"]["id"], second.json()["item"]["id"]}


def test_duplicate_code_is_rejected(writer):
    assert writer.post("/equipment", json=_payload("1234")).status_code == 200

    res = writer.post("/equipment", json=_payload("1234", name="SOMETHING ELSE"))
    assert res.status_code == 400
    assert res.json()["error"] == "Item with this NSN already exists"
    assert res.json()["code"] == "duplicate"
    assert len(writer.get("/equipment").json()) == 1


def test_short_code_is_rejected(writer):
    res = writer.post("/equipment", json=_payload("7"))
    assert res.status_code == 400
    assert res.json()["error"] == "invalid code format"


@pytest.mark.parametrize(
    "body",
    [
        {"name": "BAG", "partialCode": "1234"},
        {"lineItemNumbers": "A1", "partialCode": "1234"},
        {"lineItemNumbers": "A1", "name": "BAG"},
        {"lineItemNumbers": " , ", "name": "BAG", "partialCode": "1234"},
    ],
)
def test_missing_fields_are_rejected(writer, body):
    res = writer.post("/equipment", json=body)
    assert res.status_code == 400
    assert res.json()["error"] == "missing required field"


def test_list_failure_returns_generic_error(app, site_client):
    def broken_db():
        raise StoreError("Failed to read data", details="list_all failed")
        yield  # pragma: no cover

    app.dependency_overrides[get_db] = broken_db
    res = site_client.get("/equipment")
    assert res.status_code == 500
    assert res.json()["error"] == "Failed to read data"
    assert res.json()["details"] == "list_all failed"


def test_driver_error_on_list_is_a_generic_500(app, site_client):
    bare_engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    BareSession = sessionmaker(bind=bare_engine, autocommit=False, autoflush=False)

    def tableless_db():
        db = BareSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = tableless_db
    res = site_client.get("/equipment")
    assert res.status_code == 500
    body = res.json()
    assert body == {
        "success": False,
        "code": "store_error",
        "error": "Failed to read data",
        "details": "list_all failed",
    }
    assert "no such table" not in res.text


# ---- upload ----

def test_upload_stores_image_under_code(app, writer):
    res = writer.post(
        "/upload",
        files={"file": ("My Duffel.JPG", b"\xff\xd8jpeg", "image/jpeg")},
        data={"nsn": "1234"},
    )
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert body["filename"] == "1234.jpg"
    assert body["url"] == "/media/equipment/1234.jpg"
    assert (app.state.test_blobs.root / "equipment" / "1234.jpg").read_bytes() == b"\xff\xd8jpeg"


def test_upload_rejects_unsupported_type(writer):
    res = writer.post("/upload", files={"file": ("photo.bmp", b"BM", "image/bmp")}, data={"nsn": "1234"})
    assert res.status_code == 400
    assert res.json()["error"] == "unsupported image type"


def test_upload_requires_file_and_nsn(writer):
    assert writer.post("/upload", data={"nsn": "1234"}).status_code == 400
    assert writer.post("/upload", files={"file": ("photo.png", b"png", "image/png")}).status_code == 400


def test_upload_store_failure_is_500(app, writer):
    app.dependency_overrides[get_blob_store] = lambda: FailingBlobStore()
    res = writer.post("/upload", files={"file": ("photo.png", b"png", "image/png")}, data={"nsn": "1234"})
    assert res.status_code == 500
    assert res.json()["error"] == "Failed to upload image"


def test_responses_carry_request_id(client):
    res = client.post("/auth/verify-site", json={"passcode": SITE_SECRET}, headers={"X-Request-ID": "abc123"})
    assert res.headers["X-Request-ID"] == "abc123"


def test_upload_content_type_comes_from_extension(app, writer):
    recorder = RecordingBlobStore()
    app.dependency_overrides[get_blob_store] = lambda: recorder
    res = writer.post("/upload", files={"file": ("x.png", b"<svg/>", "image/svg+xml")}, data={"nsn": "1234"})
    assert res.status_code == 200
    assert recorder.calls == [("1234.png", "image/png")]
