from fastapi import Depends, Header, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from wedsnap.config import settings
from wedsnap.database import get_db
from wedsnap.models.guest import Guest
from wedsnap.models.user import User
from wedsnap.models.wedding_event import WeddingEvent
from wedsnap.services.security import decode_access_token
from wedsnap.utils.exceptions import ForbiddenError, NotFoundError


async def verify_api_key(x_api_key: str = Header(default="")) -> None:
    if not settings.api_key:
        return
    if x_api_key != settings.api_key:
        raise HTTPException(status_code=403, detail="Invalid or missing API key")


def _bearer_token(authorization: str) -> str:
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return ""
    return token.strip()


async def couple_from_token(db: AsyncSession, token: str) -> User | None:
    if not token:
        return None
    user_id = decode_access_token(token)
    if user_id is None:
        return None
    return await db.get(User, user_id)


async def guest_from_token(db: AsyncSession, token: str) -> Guest | None:
    if not token:
        return None
    result = await db.execute(select(Guest).where(Guest.session_token == token))
    return result.scalars().first()


async def get_current_couple(
    authorization: str = Header(default=""),
    db: AsyncSession = Depends(get_db),
) -> User:
    user = await couple_from_token(db, _bearer_token(authorization))
    if user is None:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def get_current_guest(
    x_guest_token: str = Header(default=""),
    db: AsyncSession = Depends(get_db),
) -> Guest:
    guest = await guest_from_token(db, x_guest_token)
    if guest is None:
        raise HTTPException(status_code=401, detail="Guest session not found, please rejoin")
    return guest


async def get_owned_event(
    event_id: str,
    couple: User = Depends(get_current_couple),
    db: AsyncSession = Depends(get_db),
) -> WeddingEvent:
    event = await db.get(WeddingEvent, event_id)
    if event is None or event.couple_user_id != couple.id:
        raise NotFoundError("Event not found")
    return event


async def authorize_feed(
    db: AsyncSession, event_id: str, couple: User | None, guest: Guest | None
) -> WeddingEvent:
    """Couples see their own event; guests see theirs once they have shared a photo."""
    event = await db.get(WeddingEvent, event_id)
    if event is None:
        raise NotFoundError("Event not found")
    if couple is not None and event.couple_user_id == couple.id:
        return event
    if guest is not None and guest.wedding_event_id == event.id:
        if not guest.has_unlocked_feed:
            raise ForbiddenError("Share a moment to see everyone's photos")
        return event
    raise NotFoundError("Event not found")


async def get_feed_event(
    event_id: str,
    authorization: str = Header(default=""),
    x_guest_token: str = Header(default=""),
    db: AsyncSession = Depends(get_db),
) -> WeddingEvent:
    couple = await couple_from_token(db, _bearer_token(authorization))
    guest = await guest_from_token(db, x_guest_token)
    if couple is None and guest is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return await authorize_feed(db, event_id, couple, guest)
