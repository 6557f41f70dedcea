from typing import Annotated

from pydantic import BaseModel, Field

from wedsnap.schemas.event import EventPublicResponse


class GuestJoin(BaseModel):
    event_code: str = Field(min_length=1)
    guest_name: Annotated[str, Field(max_length=100)] | None = None


class GuestResponse(BaseModel):
    id: str
    wedding_event_id: str
    guest_name: str | None = None
    photos_remaining: int
    has_unlocked_feed: bool
    created_at: str

    model_config = {"from_attributes": True}


class GuestSessionResponse(BaseModel):
    guest: GuestResponse
    event: EventPublicResponse
    session_token: str | None = None
