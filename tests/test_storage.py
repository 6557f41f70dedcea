import time
from urllib.parse import parse_qs, urlparse

import pytest
from httpx import ASGITransport, AsyncClient

from wedsnap.main import app
from wedsnap.seed import SEED_EVENT
from wedsnap.services.storage import PhotoStorage, StorageError, get_storage
from wedsnap.utils.exceptions import AppException

from helpers import JPEG_BYTES, join, upload


@pytest.fixture
def storage(tmp_path) -> PhotoStorage:
    return PhotoStorage(str(tmp_path), "wedding-photos", "test-secret", ["jpg", "jpeg", "png"])


def _query(url: str) -> dict:
    return {k: v[0] for k, v in parse_qs(urlparse(url).query).items()}


def test_build_path_sanitises_filename(storage):
    path = storage.build_path("event", "guest", "../My Photo (1).JPG")
    folder, _, name = path.rpartition("/")

    assert folder == "event/guest"
    assert name.endswith("-My_Photo__1_.JPG")


def test_validate_filename(storage):
    storage.validate_filename("cake.PNG")
    with pytest.raises(AppException) as exc:
        storage.validate_filename("cake.bmp")
    assert exc.value.status_code == 422


def test_upload_and_delete(storage):
    path = storage.build_path("event", "guest", "cake.jpg")
    storage.upload(path, JPEG_BYTES)
    assert storage.exists(path)

    with pytest.raises(StorageError):
        storage.upload(path, JPEG_BYTES)

    storage.delete(path)
    assert not storage.exists(path)
    with pytest.raises(StorageError):
        storage.delete(path)


def test_path_traversal_is_rejected(storage):
    with pytest.raises(StorageError):
        storage.upload("../../outside.jpg", JPEG_BYTES)
    assert storage.exists("../../outside.jpg") is False


def test_signed_url_round_trip(storage):
    url = storage.signed_url("event/guest/1-cake.jpg")
    params = _query(url)

    assert urlparse(url).path == "/api/v1/storage/wedding-photos/event/guest/1-cake.jpg"
    assert storage.verify_signature("event/guest/1-cake.jpg", int(params["expires"]), params["signature"])


def test_signature_rejects_tampering(storage):
    params = _query(storage.signed_url("event/guest/1-cake.jpg"))

    assert not storage.verify_signature("event/guest/2-cake.jpg", int(params["expires"]), params["signature"])
    assert not storage.verify_signature("event/guest/1-cake.jpg", int(params["expires"]) + 60, params["signature"])


def test_signature_expires(storage):
    params = _query(storage.signed_url("event/guest/1-cake.jpg", ttl_seconds=-10))
    assert int(params["expires"]) < int(time.time())
    assert not storage.verify_signature("event/guest/1-cake.jpg", int(params["expires"]), params["signature"])


def test_signature_depends_on_secret(tmp_path, storage):
    other = PhotoStorage(str(tmp_path), "wedding-photos", "another-secret", ["jpg"])
    params = _query(other.signed_url("event/guest/1-cake.jpg"))
    assert not storage.verify_signature("event/guest/1-cake.jpg", int(params["expires"]), params["signature"])


def test_legacy_urls_pass_through(storage):
    legacy = "https://cdn.example.com/wedding-photos/old.jpg"
    assert storage.signed_url(legacy) == legacy


@pytest.mark.asyncio
async def test_serve_signed_object():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        guest = await join(client, SEED_EVENT["event_code"])
        photo = (await upload(client, guest["session_token"])).json()["data"]["photo"]
        response = await client.get(photo["url"])

    assert response.status_code == 200
    assert response.content == JPEG_BYTES


@pytest.mark.asyncio
async def test_serve_rejects_bad_signature():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        guest = await join(client, SEED_EVENT["event_code"])
        photo = (await upload(client, guest["session_token"])).json()["data"]["photo"]
        response = await client.get(photo["url"].replace("signature=", "signature=0"))

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_serve_unknown_bucket():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        guest = await join(client, SEED_EVENT["event_code"])
        photo = (await upload(client, guest["session_token"])).json()["data"]["photo"]
        response = await client.get(photo["url"].replace("/wedding-photos/", "/other-bucket/"))

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_serve_missing_object():
    url = get_storage().signed_url("nobody/nothing/1-missing.jpg")
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get(url)

    assert response.status_code == 404
