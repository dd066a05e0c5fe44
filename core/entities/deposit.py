from dataclasses import dataclass
from typing import Optional

BKASH = "bkash"
BANK = "bank"
GIFT_CARD = "gift_card"

DEPOSIT_TYPES = (BKASH, BANK, GIFT_CARD)
MANUAL_DEPOSIT_TYPES = (BANK, GIFT_CARD)

PENDING = "pending"
APPROVED = "approved"
REJECTED = "rejected"


@dataclass
class Deposit:
    id: Optional[int]
    user_id: int
    deposit_type: str           # bkash | bank | gift_card
    amount_cents: int           # сумма в валюте пользователя
    amount_to_add_cents: int    # сумма к зачислению после конвертации
    status: str
    created_at: str
    bank_id: Optional[int] = None
    receipt_url: Optional[str] = None
    reviewed_at: Optional[str] = None


@dataclass
class AutoDeposit:
    """Incoming bKash payment staged by the back office, claimable once."""
    id: Optional[int]
    amount_cents: int
    last_3_digits: str
    is_processed: bool
    created_at: str
    processed_by: Optional[int] = None
    processed_at: Optional[str] = None
