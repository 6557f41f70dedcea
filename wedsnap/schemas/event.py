from datetime import date
from typing import Annotated

from pydantic import BaseModel, StringConstraints

Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]


class EventCreate(BaseModel):
    couple_name: Name
    partner_name: Name
    wedding_date: date
    cover_image_url: str | None = None


class EventUpdate(BaseModel):
    couple_name: Name | None = None
    partner_name: Name | None = None
    wedding_date: date | None = None
    cover_image_url: str | None = None


class EventResponse(BaseModel):
    id: str
    couple_user_id: str
    couple_name: str
    partner_name: str
    wedding_date: str
    event_code: str
    cover_image_url: str | None = None
    created_at: str
    updated_at: str

    model_config = {"from_attributes": True}


class EventPublicResponse(BaseModel):
    """What anyone holding the event code may see."""

    id: str
    couple_name: str
    partner_name: str
    wedding_date: str
    event_code: str
    cover_image_url: str | None = None

    model_config = {"from_attributes": True}


class EventStats(BaseModel):
    total_guests: int
    total_photos: int
