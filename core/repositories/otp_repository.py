from abc import ABC, abstractmethod
from typing import Optional, Dict, Any
from core.entities.otp import OtpChallenge


class OtpRepository(ABC):
    @abstractmethod
    def create_challenge(self, email: str, purpose: str, code_hash: str, expires_at: str,
                         payload: Optional[Dict[str, Any]] = None) -> OtpChallenge:...

    @abstractmethod
    def latest_challenge(self, email: str, purpose: str) -> Optional[OtpChallenge]:...

    @abstractmethod
    def register_failed_attempt(self, challenge_id: int) -> OtpChallenge:...

    @abstractmethod
    def consume(self, challenge_id: int) -> bool:...

    @abstractmethod
    def update_payload(self, challenge_id: int, payload: Dict[str, Any]) -> OtpChallenge:...
