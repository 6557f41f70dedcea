from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from wedsnap.database import get_db
from wedsnap.dependencies import get_current_guest
from wedsnap.models.guest import Guest
from wedsnap.models.photo import Photo
from wedsnap.schemas.guest import GuestResponse
from wedsnap.schemas.photo import CaptionUpdate, PhotoResponse
from wedsnap.services import photos as photo_service
from wedsnap.services.storage import PhotoStorage, get_storage
from wedsnap.utils.response import success_response

router = APIRouter(prefix="/photos", tags=["photos"])


def _photo_data(photo: Photo, storage: PhotoStorage) -> dict:
    data = PhotoResponse.model_validate(photo).model_dump()
    data["url"] = storage.signed_url(photo.storage_path)
    return data


@router.post("", status_code=201)
async def upload_photo(
    file: UploadFile = File(...),
    caption: str | None = Form(default=None),
    guest: Guest = Depends(get_current_guest),
    db: AsyncSession = Depends(get_db),
    storage: PhotoStorage = Depends(get_storage),
):
    content = await file.read()
    photo = await photo_service.upload_photo(
        db,
        storage,
        guest,
        filename=file.filename or "",
        content_type=file.content_type,
        content=content,
        caption=caption,
    )
    return success_response(
        data={
            "photo": _photo_data(photo, storage),
            "guest": GuestResponse.model_validate(guest).model_dump(),
        },
        message=f"Moment captured! {guest.photos_remaining} photos remaining.",
    )


@router.get("/mine")
async def list_my_photos(
    guest: Guest = Depends(get_current_guest),
    db: AsyncSession = Depends(get_db),
    storage: PhotoStorage = Depends(get_storage),
):
    result = await db.execute(
        select(Photo).where(Photo.guest_id == guest.id).order_by(Photo.captured_at.desc())
    )
    return success_response(data=[_photo_data(p, storage) for p in result.scalars().all()])


@router.patch("/{photo_id}")
async def update_caption(
    photo_id: str,
    payload: CaptionUpdate,
    guest: Guest = Depends(get_current_guest),
    db: AsyncSession = Depends(get_db),
    storage: PhotoStorage = Depends(get_storage),
):
    photo = await photo_service.update_caption(db, storage, guest, photo_id, payload.caption)
    return success_response(data=_photo_data(photo, storage))


@router.delete("/{photo_id}")
async def delete_photo(
    photo_id: str,
    guest: Guest = Depends(get_current_guest),
    db: AsyncSession = Depends(get_db),
    storage: PhotoStorage = Depends(get_storage),
):
    await photo_service.delete_photo(db, storage, guest, photo_id)
    return success_response(
        data={"id": photo_id, "guest": GuestResponse.model_validate(guest).model_dump()},
        message=f"Photo deleted. {guest.photos_remaining} photos remaining.",
    )
