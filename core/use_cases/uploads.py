import mimetypes
import time
from typing import Optional

from config.settings import settings


def validate_image(data: bytes, content_type: Optional[str]) -> None:
    if not content_type or not content_type.startswith("image/"):
        raise ValueError("Please upload an image file")
    if not data:
        raise ValueError("Uploaded file is empty")
    if len(data) > settings.MAX_UPLOAD_BYTES:
        limit_mb = settings.MAX_UPLOAD_BYTES // (1024 * 1024)
        raise ValueError(f"Image size should be less than {limit_mb}MB")


def file_extension(filename: Optional[str], content_type: Optional[str]) -> str:
    if filename and "." in filename:
        ext = filename.rsplit(".", 1)[1].lower()
        if ext.isalnum():
            return ext
    guessed = mimetypes.guess_extension(content_type or "") or ".bin"
    return guessed.lstrip(".")


def timestamp_ms() -> int:
    return int(time.time() * 1000)
