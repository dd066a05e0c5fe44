from dataclasses import dataclass
from typing import Optional


@dataclass
class Profile:
    id: Optional[int]
    email: str
    password_hash: str
    pin_hash: str
    first_name: str
    last_name: str
    balance_cents: int
    created_at: str
    country: Optional[str] = None
    country_code: Optional[str] = None  # ISO-2, определяется по IP при регистрации
    selfie_url: Optional[str] = None
    doc_url: Optional[str] = None
    is_admin: bool = False
    updated_at: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
