from dataclasses import dataclass, field
from typing import Optional, Dict, Any

MOBILE_BANKING = "mobile_banking"
BANK_TRANSFER = "bank_transfer"
MOBILE_RECHARGE = "mobile_recharge"
PAY_BILL = "pay_bill"

TRANSACTION_TYPES = (MOBILE_BANKING, BANK_TRANSFER, MOBILE_RECHARGE, PAY_BILL)

PENDING = "pending"
COMPLETED = "completed"
FAILED = "failed"
REJECTED = "rejected"

TRANSACTION_STATUSES = (PENDING, COMPLETED, FAILED, REJECTED)


@dataclass
class Transaction:
    id: Optional[int]
    user_id: int
    type: str               # mobile_banking | bank_transfer | mobile_recharge | pay_bill
    amount_cents: int
    commission_cents: int
    balance_after: int      # баланс после списания
    status: str
    created_at: str
    details: Dict[str, Any] = field(default_factory=dict)
    idempotency_key: Optional[str] = None

    @property
    def total_cents(self) -> int:
        return self.amount_cents + self.commission_cents
