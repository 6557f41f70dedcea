from typing import Annotated

from pydantic import BaseModel, Field

CAPTION_MAX_LENGTH = 150

Caption = Annotated[str, Field(min_length=1, max_length=CAPTION_MAX_LENGTH)]


class CaptionUpdate(BaseModel):
    caption: Caption | None


class PhotoResponse(BaseModel):
    id: str
    wedding_event_id: str
    guest_id: str
    guest_name: str | None = None
    caption: str | None = None
    captured_at: str

    model_config = {"from_attributes": True}
