import io
import uuid

from httpx import AsyncClient

JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 100


def image_file(name: str = "moment.jpg", content: bytes = JPEG_BYTES, content_type: str = "image/jpeg") -> dict:
    return {"file": (name, io.BytesIO(content), content_type)}


def couple_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def guest_headers(token: str) -> dict:
    return {"X-Guest-Token": token}


async def signup(client: AsyncClient) -> str:
    response = await client.post(
        "/api/v1/auth/signup",
        json={"email": f"couple-{uuid.uuid4().hex[:8]}@example.com", "password": "secret123"},
    )
    return response.json()["data"]["access_token"]


async def create_event(client: AsyncClient, token: str, couple_name: str = "Sarah", partner_name: str = "James") -> dict:
    response = await client.post(
        "/api/v1/events",
        json={"couple_name": couple_name, "partner_name": partner_name, "wedding_date": "2026-06-20"},
        headers=couple_headers(token),
    )
    return response.json()["data"]


async def join(client: AsyncClient, event_code: str, guest_name: str | None = "Aunt May") -> dict:
    response = await client.post(
        "/api/v1/guests/join",
        json={"event_code": event_code, "guest_name": guest_name},
    )
    return response.json()["data"]


async def upload(client: AsyncClient, guest_token: str, **kwargs):
    data = kwargs.pop("data", None)
    return await client.post(
        "/api/v1/photos",
        files=image_file(**kwargs),
        data=data,
        headers=guest_headers(guest_token),
    )
