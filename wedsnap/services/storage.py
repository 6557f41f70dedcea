"""Photo bucket on the local filesystem with HMAC-signed read URLs."""
import hashlib
import hmac
import logging
import os
import re
import secrets
import time
from functools import lru_cache
from urllib.parse import quote

from wedsnap.config import settings
from wedsnap.utils.exceptions import AppException

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class StorageError(Exception):
    pass


class PhotoStorage:
    def __init__(self, root: str, bucket: str, secret: str, allowed_extensions: list[str]):
        self.bucket = bucket
        self.bucket_dir = os.path.abspath(os.path.join(root, bucket))
        self._secret = secret.encode("utf-8")
        self.allowed_extensions = {ext.lower() for ext in allowed_extensions}

    @staticmethod
    def extension(filename: str) -> str:
        _, ext = os.path.splitext(filename)
        return ext.lstrip(".").lower()

    def validate_filename(self, filename: str) -> None:
        ext = self.extension(filename)
        if ext not in self.allowed_extensions:
            allowed = ", ".join(sorted(self.allowed_extensions))
            raise AppException(f"Unsupported file type '.{ext}', allowed: {allowed}", status_code=422)

    def build_path(self, event_id: str, guest_id: str, filename: str) -> str:
        name = _UNSAFE_CHARS.sub("_", os.path.basename(filename)) or "photo"
        return f"{event_id}/{guest_id}/{int(time.time() * 1000)}-{secrets.token_hex(3)}-{name}"

    def _resolve(self, path: str) -> str:
        full_path = os.path.abspath(os.path.join(self.bucket_dir, path))
        if not full_path.startswith(self.bucket_dir + os.sep):
            raise StorageError(f"Path escapes bucket: {path}")
        return full_path

    def upload(self, path: str, content: bytes) -> None:
        self.validate_filename(path)
        full_path = self._resolve(path)
        if os.path.exists(full_path):
            raise StorageError(f"Object already exists: {path}")
        try:
            os.makedirs(os.path.dirname(full_path), exist_ok=True)
            with open(full_path, "wb") as f:
                f.write(content)
        except OSError as e:
            raise StorageError(f"Could not write {path}: {e}") from e

    def delete(self, path: str) -> None:
        full_path = self._resolve(path)
        try:
            os.remove(full_path)
        except FileNotFoundError as e:
            raise StorageError(f"Object not found: {path}") from e
        except OSError as e:
            raise StorageError(f"Could not delete {path}: {e}") from e

    def exists(self, path: str) -> bool:
        try:
            return os.path.isfile(self._resolve(path))
        except StorageError:
            return False

    def local_path(self, path: str) -> str:
        return self._resolve(path)

    def _signature(self, path: str, expires: int) -> str:
        return hmac.new(self._secret, f"{path}:{expires}".encode("utf-8"), hashlib.sha256).hexdigest()

    def signed_url(self, path: str, ttl_seconds: int | None = None) -> str:
        if path.startswith(("http://", "https://")):
            return path
        ttl = settings.signed_url_ttl_seconds if ttl_seconds is None else ttl_seconds
        expires = int(time.time()) + ttl
        signature = self._signature(path, expires)
        return f"/api/v1/storage/{self.bucket}/{quote(path)}?expires={expires}&signature={signature}"

    def verify_signature(self, path: str, expires: int, signature: str) -> bool:
        if expires < int(time.time()):
            return False
        return hmac.compare_digest(self._signature(path, expires), signature)


def remove_object(storage: PhotoStorage, path: str) -> None:
    """Delete an object, logging instead of raising when it fails."""
    try:
        storage.delete(path)
    except StorageError as e:
        logger.warning("Storage delete failed, continuing: %s", e)


@lru_cache
def get_storage() -> PhotoStorage:
    return PhotoStorage(
        root=settings.data_dir,
        bucket=settings.storage_bucket,
        secret=settings.secret_key,
        allowed_extensions=settings.allowed_photo_extensions,
    )
