from abc import ABC, abstractmethod
from typing import Optional
from core.entities.profile import Profile


class ProfileRepository(ABC):
    @abstractmethod
    def create_profile(self, profile: Profile) -> Profile:...

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[Profile]:...

    @abstractmethod
    def get_by_id(self, user_id: int) -> Optional[Profile]:...

    @abstractmethod
    def update_password(self, user_id: int, password_hash: str) -> Profile:...

    @abstractmethod
    def update_pin(self, user_id: int, pin_hash: str) -> Profile:...
