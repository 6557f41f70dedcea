from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import FileResponse

from wedsnap.services.storage import PhotoStorage, get_storage

router = APIRouter(prefix="/storage", tags=["storage"])


@router.get("/{bucket}/{path:path}")
async def get_object(
    bucket: str,
    path: str,
    expires: int = Query(...),
    signature: str = Query(...),
    storage: PhotoStorage = Depends(get_storage),
):
    if bucket != storage.bucket:
        raise HTTPException(status_code=404, detail="Bucket not found")
    if not storage.verify_signature(path, expires, signature):
        raise HTTPException(status_code=403, detail="Invalid or expired signature")
    if not storage.exists(path):
        raise HTTPException(status_code=404, detail="Object not found")
    return FileResponse(storage.local_path(path))
