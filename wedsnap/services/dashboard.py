import io
from urllib.parse import urlencode

import qrcode
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from wedsnap.config import settings
from wedsnap.models.guest import Guest
from wedsnap.models.photo import Photo
from wedsnap.models.wedding_event import WeddingEvent
from wedsnap.schemas.event import EventStats


def join_url(event: WeddingEvent) -> str:
    base = settings.public_base_url.rstrip("/")
    return f"{base}/join?{urlencode({'code': event.event_code})}"


async def event_stats(db: AsyncSession, event_id: str) -> EventStats:
    total_guests = await db.scalar(
        select(func.count()).select_from(Guest).where(Guest.wedding_event_id == event_id)
    )
    total_photos = await db.scalar(
        select(func.count()).select_from(Photo).where(Photo.wedding_event_id == event_id)
    )
    return EventStats(total_guests=total_guests or 0, total_photos=total_photos or 0)


def render_qr_png(data: str) -> bytes:
    qr = qrcode.QRCode(version=1, box_size=10, border=4)
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()
