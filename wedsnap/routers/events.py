import io
import logging
import os
import uuid
import zipfile
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from wedsnap.database import get_db
from wedsnap.dependencies import get_current_couple, get_feed_event, get_owned_event
from wedsnap.models.guest import Guest
from wedsnap.models.photo import Photo
from wedsnap.models.user import User
from wedsnap.models.wedding_event import WeddingEvent
from wedsnap.schemas.event import EventCreate, EventPublicResponse, EventResponse, EventUpdate
from wedsnap.schemas.guest import GuestResponse
from wedsnap.schemas.photo import PhotoResponse
from wedsnap.services.dashboard import event_stats, join_url, render_qr_png
from wedsnap.services.event_codes import generate_event_code, normalize_event_code
from wedsnap.services.feed import render_grid, render_swipe
from wedsnap.services.photos import list_event_photos
from wedsnap.services.realtime import publish_event_deleted
from wedsnap.services.storage import PhotoStorage, get_storage, remove_object
from wedsnap.utils.exceptions import AppException, ConflictError, NotFoundError
from wedsnap.utils.response import success_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/events", tags=["events"])

MAX_CODE_ATTEMPTS = 5


async def _couple_event(db: AsyncSession, couple_id: str) -> WeddingEvent | None:
    result = await db.execute(select(WeddingEvent).where(WeddingEvent.couple_user_id == couple_id))
    return result.scalars().first()


@router.post("", status_code=201)
async def create_event(
    payload: EventCreate,
    couple: User = Depends(get_current_couple),
    db: AsyncSession = Depends(get_db),
):
    couple_id = couple.id
    if await _couple_event(db, couple_id) is not None:
        raise ConflictError("You already have a wedding event")

    # A failed insert is a concurrent create by this couple or a code collision
    for _ in range(MAX_CODE_ATTEMPTS):
        code = generate_event_code(payload.couple_name, payload.partner_name)
        now = datetime.now(timezone.utc).isoformat()
        event = WeddingEvent(
            id=str(uuid.uuid4()),
            couple_user_id=couple_id,
            couple_name=payload.couple_name,
            partner_name=payload.partner_name,
            wedding_date=payload.wedding_date.isoformat(),
            event_code=code,
            cover_image_url=payload.cover_image_url,
            created_at=now,
            updated_at=now,
        )
        db.add(event)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            if await _couple_event(db, couple_id) is not None:
                raise ConflictError("You already have a wedding event")
            logger.warning("Event code %s already taken, regenerating", code)
            continue

        logger.info("Couple %s created event %s (%s)", couple_id, event.id, event.event_code)
        return success_response(
            data=EventResponse.model_validate(event).model_dump(),
            message="Your wedding photo experience is ready.",
        )

    raise AppException("Could not generate a unique event code, please retry", status_code=503)


@router.get("/mine")
async def get_my_event(couple: User = Depends(get_current_couple), db: AsyncSession = Depends(get_db)):
    event = await _couple_event(db, couple.id)
    if event is None:
        raise NotFoundError("No wedding event yet")
    return success_response(data=EventResponse.model_validate(event).model_dump())


@router.get("/mine/dashboard")
async def get_dashboard(couple: User = Depends(get_current_couple), db: AsyncSession = Depends(get_db)):
    event = await _couple_event(db, couple.id)
    if event is None:
        raise NotFoundError("No wedding event yet")
    stats = await event_stats(db, event.id)
    return success_response(data={
        "event": EventResponse.model_validate(event).model_dump(),
        "stats": stats.model_dump(),
        "join_url": join_url(event),
    })


@router.get("/by-code/{event_code}")
async def get_event_by_code(event_code: str, db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(WeddingEvent).where(WeddingEvent.event_code == normalize_event_code(event_code))
    )
    event = result.scalars().first()
    if event is None:
        raise NotFoundError("Event not found")
    return success_response(data=EventPublicResponse.model_validate(event).model_dump())


@router.patch("/{event_id}")
async def update_event(
    payload: EventUpdate,
    event: WeddingEvent = Depends(get_owned_event),
    db: AsyncSession = Depends(get_db),
):
    changes = payload.model_dump(exclude_unset=True)
    for field in ("couple_name", "partner_name"):
        if changes.get(field) is not None:
            setattr(event, field, changes[field])
    if changes.get("wedding_date") is not None:
        event.wedding_date = changes["wedding_date"].isoformat()
    if "cover_image_url" in changes:
        event.cover_image_url = changes["cover_image_url"]
    event.updated_at = datetime.now(timezone.utc).isoformat()

    await db.commit()
    await db.refresh(event)
    return success_response(data=EventResponse.model_validate(event).model_dump())


@router.delete("/{event_id}")
async def delete_event(
    event: WeddingEvent = Depends(get_owned_event),
    db: AsyncSession = Depends(get_db),
    storage: PhotoStorage = Depends(get_storage),
):
    photos = await list_event_photos(db, event.id)
    for photo in photos:
        remove_object(storage, photo.storage_path)

    await db.execute(delete(Photo).where(Photo.wedding_event_id == event.id))
    await db.execute(delete(Guest).where(Guest.wedding_event_id == event.id))
    await db.delete(event)
    await db.commit()
    logger.info("Deleted event %s with %d photos", event.id, len(photos))
    publish_event_deleted(event.id)

    return success_response(data={"id": event.id, "deleted_photos": len(photos)})


@router.get("/{event_id}/guests")
async def list_guests(
    event: WeddingEvent = Depends(get_owned_event),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(Guest).where(Guest.wedding_event_id == event.id).order_by(Guest.created_at.desc())
    )
    guests = result.scalars().all()
    return success_response(data=[GuestResponse.model_validate(g).model_dump() for g in guests])


@router.get("/{event_id}/qr.png")
async def get_qr_code(event: WeddingEvent = Depends(get_owned_event)):
    return Response(content=render_qr_png(join_url(event)), media_type="image/png")


@router.get("/{event_id}/photos")
async def list_photos(
    event: WeddingEvent = Depends(get_feed_event),
    db: AsyncSession = Depends(get_db),
    storage: PhotoStorage = Depends(get_storage),
):
    photos = await list_event_photos(db, event.id)
    data = []
    for p in photos:
        item = PhotoResponse.model_validate(p).model_dump()
        item["url"] = storage.signed_url(p.storage_path)
        data.append(item)
    return success_response(data=data)


@router.get("/{event_id}/feed/grid")
async def grid_feed(
    event: WeddingEvent = Depends(get_feed_event),
    db: AsyncSession = Depends(get_db),
    storage: PhotoStorage = Depends(get_storage),
):
    photos = await list_event_photos(db, event.id)
    return success_response(data=render_grid(photos, storage))


@router.get("/{event_id}/feed/swipe")
async def swipe_feed(
    event: WeddingEvent = Depends(get_feed_event),
    db: AsyncSession = Depends(get_db),
    storage: PhotoStorage = Depends(get_storage),
):
    photos = await list_event_photos(db, event.id)
    return success_response(data=render_swipe(photos, storage))


@router.get("/{event_id}/photos/download")
async def download_photos(
    event: WeddingEvent = Depends(get_owned_event),
    db: AsyncSession = Depends(get_db),
    storage: PhotoStorage = Depends(get_storage),
):
    photos = await list_event_photos(db, event.id)

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for index, photo in enumerate(photos, start=1):
            if not storage.exists(photo.storage_path):
                logger.warning("Skipping missing object %s", photo.storage_path)
                continue
            arcname = f"{index:03d}-{os.path.basename(photo.storage_path)}"
            archive.write(storage.local_path(photo.storage_path), arcname=arcname)

    filename = f"{event.event_code.lower()}-photos.zip"
    return Response(
        content=buffer.getvalue(),
        media_type="application/zip",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
