from pathlib import Path

from config.settings import settings
from core.services.object_storage import ObjectStorage


class LocalObjectStorage(ObjectStorage):
    """Buckets are directories under root; files are served from public_url."""

    def __init__(self, root: str, public_url: str):
        self.root = Path(root)
        self.public_url = public_url.rstrip("/")

    def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> str:
        target = (self.root / bucket / path).resolve()
        if self.root.resolve() not in target.parents:
            raise ValueError("Invalid upload path")
        if target.exists():
            raise ValueError("The resource already exists")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        return f"{self.public_url}/{bucket}/{path}"


def build_storage() -> LocalObjectStorage:
    return LocalObjectStorage(settings.STORAGE_DIR, settings.STORAGE_PUBLIC_URL)
