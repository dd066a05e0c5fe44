from abc import ABC, abstractmethod

KYC_BUCKET = "kyc"
RECEIPTS_BUCKET = "deposit-receipts"


class ObjectStorage(ABC):
    @abstractmethod
    def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> str:
        """Stores the object and returns its public URL."""
