"""
Storage service - image blobs addressed by logical bucket name

Employee photos, signatures, QR codes and ID templates live on the network
image share; business unit logos live in the public asset store. Callers only
name a bucket; the backend behind it is chosen here.
"""
import logging
import os
import re
import shutil
import time
import uuid
from pathlib import Path
from typing import BinaryIO, Dict, Iterable, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile

from app.constants import (
    ALLOWED_IMAGE_EXTENSIONS,
    BUCKET_BUSINESS_UNITS,
    BUCKET_EMPLOYEE_PHOTO,
    BUCKET_ID_TEMPLATES,
    BUCKET_QRCODE,
    BUCKET_SIGNATURE,
)
from app.core.config import settings
from app.services.settings_service import get_network_images_path

logger = logging.getLogger(__name__)

NETWORK_BUCKETS = (BUCKET_EMPLOYEE_PHOTO, BUCKET_SIGNATURE, BUCKET_QRCODE, BUCKET_ID_TEMPLATES)
PUBLIC_BUCKETS = (BUCKET_BUSINESS_UNITS,)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")
# Longest client filename stem kept in a stored name
MAX_STEM_LENGTH = 100


class StorageBackend:
    """Interface for a place blobs can be written to"""

    def write(self, name: str, data: BinaryIO) -> None:
        raise NotImplementedError

    def delete(self, name: str) -> bool:
        raise NotImplementedError

    def exists(self, name: str) -> bool:
        raise NotImplementedError

    def path(self, name: str) -> Path:
        raise NotImplementedError


class LocalDirectoryBackend(StorageBackend):
    """A directory on local disk or on a mounted network share"""

    def __init__(self, root: Path):
        self.root = Path(root)

    def path(self, name: str) -> Path:
        candidate = (self.root / name).resolve()
        root = self.root.resolve()
        if candidate.parent != root:
            raise ValueError(f"Invalid file name: {name!r}")
        return candidate

    def write(self, name: str, data: BinaryIO) -> None:
        target = self.path(name)
        # Directory is created on first use
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "wb") as out:
            shutil.copyfileobj(data, out)

    def delete(self, name: str) -> bool:
        target = self.path(name)
        if not target.exists():
            return False
        target.unlink()
        return True

    def exists(self, name: str) -> bool:
        try:
            return self.path(name).is_file()
        except ValueError:
            return False


def sanitize_filename(name: str) -> str:
    """Filesystem-safe version of a client filename, extension kept in lowercase"""
    base = os.path.basename(name or "").strip()
    stem = _UNSAFE_CHARS.sub("_", os.path.splitext(base)[0])[:MAX_STEM_LENGTH].strip("._") or "upload"
    ext = _UNSAFE_CHARS.sub("", file_extension(base))
    return f"{stem}.{ext}" if ext else stem


def file_extension(name: str) -> str:
    return os.path.splitext(name or "")[1].lstrip(".").lower()


def upload_size(upload: UploadFile) -> int:
    if upload.size is not None:
        return upload.size
    upload.file.seek(0, os.SEEK_END)
    size = upload.file.tell()
    upload.file.seek(0)
    return size


def validate_image(upload: UploadFile, field: str) -> None:
    """
    Reject uploads that are not small images

    Raises:
        HTTPException: 422 naming the offending field
    """
    ext = file_extension(upload.filename)
    content_type = (upload.content_type or "").lower()
    if ext not in ALLOWED_IMAGE_EXTENSIONS or not content_type.startswith("image/"):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={field: f"The {field} must be a file of type: {', '.join(ALLOWED_IMAGE_EXTENSIONS)}."},
        )
    if upload_size(upload) > settings.MAX_UPLOAD_KB * 1024:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={field: f"The {field} may not be greater than {settings.MAX_UPLOAD_KB} kilobytes."},
        )


class BlobStorage:
    """Bucket-addressed file storage"""

    def __init__(self, buckets: Dict[str, StorageBackend]):
        self.buckets = buckets

    def backend(self, bucket: str) -> StorageBackend:
        try:
            return self.buckets[bucket]
        except KeyError:
            raise ValueError(f"Unknown storage bucket: {bucket!r}")

    def save(self, bucket: str, upload: UploadFile, keep_original_name: bool = False) -> str:
        """
        Store an uploaded file and return its generated name

        Args:
            bucket: Target bucket
            upload: Uploaded file
            keep_original_name: Keep the sanitized client filename, prefixed
                with a timestamp and a short random token, instead of a
                fully random name

        Returns:
            Filename inside the bucket
        """
        if keep_original_name:
            name = f"{int(time.time())}_{uuid.uuid4().hex[:8]}_{sanitize_filename(upload.filename)}"
        else:
            name = f"{uuid.uuid4().hex}.{file_extension(upload.filename) or 'bin'}"
        upload.file.seek(0)
        self.backend(bucket).write(name, upload.file)
        logger.info("Stored %s/%s", bucket, name)
        return name

    def delete(self, bucket: str, name: Optional[str]) -> bool:
        """
        Remove a stored file; missing files are ignored

        Removal happens after the owning row change has been committed, so an
        OS error here is logged rather than raised.
        """
        if not name:
            return False
        try:
            removed = self.backend(bucket).delete(name)
        except (OSError, ValueError):
            logger.exception("Failed to delete %s/%s", bucket, name)
            return False
        if removed:
            logger.info("Deleted %s/%s", bucket, name)
        return removed

    def delete_many(self, files: Iterable[Tuple[str, str]]) -> int:
        return sum(1 for bucket, name in files if self.delete(bucket, name))

    def exists(self, bucket: str, name: Optional[str]) -> bool:
        return bool(name) and self.backend(bucket).exists(name)

    def path(self, bucket: str, name: str) -> Path:
        return self.backend(bucket).path(name)

    @staticmethod
    def url(bucket: str, name: Optional[str]) -> Optional[str]:
        if not name:
            return None
        return f"/api/v1/files/{bucket}/{name}"


def get_storage(db: Session) -> BlobStorage:
    """Build the bucket map from the current network path override and settings"""
    network_root = Path(get_network_images_path(db))
    public_root = Path(settings.PUBLIC_STORAGE_PATH)
    buckets: Dict[str, StorageBackend] = {}
    for bucket in NETWORK_BUCKETS:
        buckets[bucket] = LocalDirectoryBackend(network_root / bucket)
    for bucket in PUBLIC_BUCKETS:
        buckets[bucket] = LocalDirectoryBackend(public_root / bucket)
    return BlobStorage(buckets)
