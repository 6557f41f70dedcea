"""Photo lifecycle: upload, caption, delete, with the guest quota kept in step."""
import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from wedsnap.config import settings
from wedsnap.models.guest import Guest
from wedsnap.models.photo import Photo
from wedsnap.schemas.photo import CAPTION_MAX_LENGTH
from wedsnap.services.entitlement import consume_quota, restore_quota
from wedsnap.services.realtime import DELETE, INSERT, UPDATE, publish_photo_change
from wedsnap.services.storage import PhotoStorage, StorageError, remove_object
from wedsnap.utils.exceptions import AppException, NotFoundError, QuotaExhaustedError

logger = logging.getLogger(__name__)


def validate_caption(caption: str | None) -> None:
    if caption is None:
        return
    if not 1 <= len(caption) <= CAPTION_MAX_LENGTH:
        raise AppException(
            f"Caption must be between 1 and {CAPTION_MAX_LENGTH} characters", status_code=422
        )


async def list_event_photos(db: AsyncSession, event_id: str) -> list[Photo]:
    result = await db.execute(
        select(Photo)
        .where(Photo.wedding_event_id == event_id)
        .order_by(Photo.captured_at.desc(), Photo.id)
    )
    return list(result.scalars().all())


async def upload_photo(
    db: AsyncSession,
    storage: PhotoStorage,
    guest: Guest,
    filename: str,
    content_type: str | None,
    content: bytes,
    caption: str | None = None,
) -> Photo:
    if guest.photos_remaining <= 0:
        raise QuotaExhaustedError()
    if not (content_type or "").startswith("image/"):
        raise AppException("Please select an image file", status_code=422)
    storage.validate_filename(filename)
    if not content:
        raise AppException("Empty file", status_code=422)
    if len(content) > settings.max_photo_size_bytes:
        raise AppException("Photo is too large", status_code=413)
    validate_caption(caption)

    path = storage.build_path(guest.wedding_event_id, guest.id, filename)
    try:
        storage.upload(path, content)
    except StorageError as e:
        logger.error("Upload to storage failed for guest %s: %s", guest.id, e)
        raise AppException("Upload failed, please try again", status_code=502) from e

    photo = Photo(
        id=str(uuid.uuid4()),
        wedding_event_id=guest.wedding_event_id,
        guest_id=guest.id,
        storage_path=path,
        guest_name=guest.guest_name,
        caption=caption,
        captured_at=datetime.now(timezone.utc).isoformat(),
    )
    try:
        db.add(photo)
        if not await consume_quota(db, guest.id):
            raise QuotaExhaustedError()
        await db.commit()
    except Exception:
        await db.rollback()
        remove_object(storage, path)
        raise

    await db.refresh(guest)
    logger.info(
        "Guest %s uploaded photo %s (%d remaining)", guest.id, photo.id, guest.photos_remaining
    )
    publish_photo_change(INSERT, photo, storage.signed_url(path))
    return photo


async def _get_own_photo(db: AsyncSession, guest: Guest, photo_id: str) -> Photo:
    photo = await db.get(Photo, photo_id)
    if photo is None or photo.guest_id != guest.id:
        raise NotFoundError("Photo not found")
    return photo


async def update_caption(
    db: AsyncSession, storage: PhotoStorage, guest: Guest, photo_id: str, caption: str | None
) -> Photo:
    validate_caption(caption)
    photo = await _get_own_photo(db, guest, photo_id)
    photo.caption = caption
    await db.commit()
    await db.refresh(photo)
    publish_photo_change(UPDATE, photo, storage.signed_url(photo.storage_path))
    return photo


async def delete_photo(db: AsyncSession, storage: PhotoStorage, guest: Guest, photo_id: str) -> None:
    photo = await _get_own_photo(db, guest, photo_id)

    # The row goes even when the object could not be removed
    remove_object(storage, photo.storage_path)

    await db.delete(photo)
    await restore_quota(db, guest.id)
    await db.commit()
    await db.refresh(guest)
    logger.info(
        "Guest %s deleted photo %s (%d remaining)", guest.id, photo.id, guest.photos_remaining
    )
    publish_photo_change(DELETE, photo)
