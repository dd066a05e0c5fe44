from dataclasses import dataclass, field
from typing import Optional, Dict, Any

SIGNUP = "signup"
PASSWORD_RESET = "password_reset"


@dataclass
class OtpChallenge:
    id: Optional[int]
    email: str
    purpose: str
    code_hash: str
    expires_at: str
    created_at: str
    attempts: int = 0
    consumed_at: Optional[str] = None
    payload: Dict[str, Any] = field(default_factory=dict)
