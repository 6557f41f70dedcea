import logging
import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from wedsnap.database import get_db
from wedsnap.dependencies import get_current_guest
from wedsnap.models.guest import Guest
from wedsnap.models.wedding_event import WeddingEvent
from wedsnap.schemas.event import EventPublicResponse
from wedsnap.schemas.guest import GuestJoin, GuestResponse, GuestSessionResponse
from wedsnap.services.entitlement import initial_quota
from wedsnap.services.event_codes import normalize_event_code
from wedsnap.utils.exceptions import NotFoundError
from wedsnap.utils.response import success_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/guests", tags=["guests"])


@router.post("/join", status_code=201)
async def join_event(payload: GuestJoin, db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(WeddingEvent).where(WeddingEvent.event_code == normalize_event_code(payload.event_code))
    )
    event = result.scalars().first()
    if event is None:
        raise NotFoundError("Event not found")

    guest = Guest(
        id=str(uuid.uuid4()),
        wedding_event_id=event.id,
        guest_name=(payload.guest_name or "").strip() or None,
        session_token=str(uuid.uuid4()),
        photos_remaining=initial_quota(),
        has_unlocked_feed=False,
        created_at=datetime.now(timezone.utc).isoformat(),
    )
    db.add(guest)
    await db.commit()
    logger.info("Guest %s joined event %s", guest.id, event.id)

    data = GuestSessionResponse(
        guest=GuestResponse.model_validate(guest),
        event=EventPublicResponse.model_validate(event),
        session_token=guest.session_token,
    )
    return success_response(
        data=data.model_dump(),
        message=(
            f"Welcome to {event.couple_name} & {event.partner_name}'s wedding! "
            f"You have {guest.photos_remaining} photos to share."
        ),
    )


@router.get("/me")
async def get_my_session(guest: Guest = Depends(get_current_guest), db: AsyncSession = Depends(get_db)):
    event = await db.get(WeddingEvent, guest.wedding_event_id)
    data = GuestSessionResponse(
        guest=GuestResponse.model_validate(guest),
        event=EventPublicResponse.model_validate(event),
    )
    return success_response(data=data.model_dump(exclude={"session_token"}))
