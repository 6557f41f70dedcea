import pytest
from httpx import ASGITransport, AsyncClient

from wedsnap.config import settings
from wedsnap.main import app
from wedsnap.seed import SEED_EVENT
from wedsnap.services.storage import PhotoStorage, StorageError, get_storage

from helpers import guest_headers, join, upload


class FailingUploadStorage(PhotoStorage):
    def upload(self, path: str, content: bytes) -> None:
        raise StorageError("bucket unavailable")


async def _remaining(client, guest_token: str) -> dict:
    response = await client.get("/api/v1/guests/me", headers=guest_headers(guest_token))
    return response.json()["data"]["guest"]


@pytest.mark.asyncio
async def test_upload_photo_success():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        guest = await join(client, SEED_EVENT["event_code"], guest_name="May")
        response = await upload(client, guest["session_token"], data={"caption": "Cake time"})

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "success"
    photo = body["data"]["photo"]
    assert photo["guest_name"] == "May"
    assert photo["caption"] == "Cake time"
    assert photo["url"].startswith("/api/v1/storage/wedding-photos/")
    assert body["data"]["guest"]["photos_remaining"] == settings.default_photo_quota - 1
    assert body["data"]["guest"]["has_unlocked_feed"] is True
    assert body["message"] == f"Moment captured! {settings.default_photo_quota - 1} photos remaining."


@pytest.mark.asyncio
async def test_upload_requires_guest_session():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await upload(client, "unknown-token")

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_upload_rejects_non_image():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        guest = await join(client, SEED_EVENT["event_code"])
        response = await upload(client, guest["session_token"], name="notes.txt", content_type="text/plain")
        state = await _remaining(client, guest["session_token"])

    assert response.status_code == 422
    assert state["photos_remaining"] == settings.default_photo_quota
    assert state["has_unlocked_feed"] is False


@pytest.mark.asyncio
async def test_upload_rejects_unsupported_extension():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        guest = await join(client, SEED_EVENT["event_code"])
        response = await upload(client, guest["session_token"], name="photo.heic", content_type="image/heic")

    assert response.status_code == 422
    assert ".heic" in response.json()["message"]


@pytest.mark.asyncio
async def test_upload_too_large(monkeypatch):
    monkeypatch.setattr(settings, "max_photo_size_bytes", 50)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        guest = await join(client, SEED_EVENT["event_code"])
        response = await upload(client, guest["session_token"])

    assert response.status_code == 413


@pytest.mark.asyncio
async def test_upload_caption_too_long():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        guest = await join(client, SEED_EVENT["event_code"])
        response = await upload(client, guest["session_token"], data={"caption": "x" * 151})
        state = await _remaining(client, guest["session_token"])

    assert response.status_code == 422
    assert state["photos_remaining"] == settings.default_photo_quota


@pytest.mark.asyncio
async def test_upload_quota_exhausted(monkeypatch):
    monkeypatch.setattr(settings, "default_photo_quota", 2)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        guest = await join(client, SEED_EVENT["event_code"])
        first = await upload(client, guest["session_token"])
        second = await upload(client, guest["session_token"])
        third = await upload(client, guest["session_token"])
        state = await _remaining(client, guest["session_token"])

    assert first.status_code == 201
    assert second.status_code == 201
    assert third.status_code == 409
    assert third.json()["code"] == "quota_exhausted"
    assert state["photos_remaining"] == 0
    assert state["has_unlocked_feed"] is True


@pytest.mark.asyncio
async def test_storage_failure_leaves_quota_untouched(tmp_path):
    app.dependency_overrides[get_storage] = lambda: FailingUploadStorage(
        str(tmp_path), "wedding-photos", "test-secret", settings.allowed_photo_extensions
    )
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        guest = await join(client, SEED_EVENT["event_code"])
        response = await upload(client, guest["session_token"])
        state = await _remaining(client, guest["session_token"])

    assert response.status_code == 502
    assert state["photos_remaining"] == settings.default_photo_quota
    assert state["has_unlocked_feed"] is False
