from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any

from core.entities.deposit import Deposit, BKASH, GIFT_CARD
from core.entities.transaction import (
    Transaction, MOBILE_BANKING, BANK_TRANSFER, MOBILE_RECHARGE, PAY_BILL,
)
from core.repositories.ledger_repository import LedgerRepository


@dataclass
class HistoryItem:
    item_type: str          # deposit | transaction
    id: int
    kind: str               # тип транзакции или депозита
    display_type: str
    amount_cents: int
    status: str
    created_at: str
    commission_cents: int = 0
    amount_to_add_cents: Optional[int] = None
    details: Dict[str, Any] = field(default_factory=dict)


def _capitalize(value: str) -> str:
    return value[:1].upper() + value[1:]


def transaction_display_type(tx: Transaction) -> str:
    d = tx.details or {}
    if tx.type == MOBILE_BANKING:
        service = d.get("mfs_service")
        return f"Mobile Banking - {_capitalize(service)}" if service else "Mobile Banking"
    if tx.type == BANK_TRANSFER:
        bank = d.get("bank_name")
        return f"Bank Transfer - {bank}" if bank else "Bank Transfer"
    if tx.type == MOBILE_RECHARGE:
        operator = d.get("operator")
        return f"Mobile Recharge - {_capitalize(operator)}" if operator else "Mobile Recharge"
    if tx.type == PAY_BILL:
        provider = d.get("provider")
        return f"Pay Bill - {provider}" if provider else "Pay Bill"
    if not tx.type:
        return "Transaction"
    return " ".join(_capitalize(word) for word in tx.type.split("_"))


def deposit_display_type(deposit: Deposit) -> str:
    if deposit.deposit_type == BKASH:
        return "bKash Deposit"
    if deposit.deposit_type == GIFT_CARD:
        return "Gift Card Deposit"
    return "Bank Deposit"


def list_history(ledger: LedgerRepository, user_id: int, limit: int = 50, offset: int = 0) -> List[HistoryItem]:
    items = [
        HistoryItem(
            item_type="deposit",
            id=d.id,
            kind=d.deposit_type,
            display_type=deposit_display_type(d),
            amount_cents=d.amount_cents,
            amount_to_add_cents=d.amount_to_add_cents,
            status=d.status,
            created_at=d.created_at,
            details={"receipt_url": d.receipt_url} if d.receipt_url else {},
        )
        for d in ledger.list_deposits(user_id)
    ]
    items.extend(
        HistoryItem(
            item_type="transaction",
            id=tx.id,
            kind=tx.type,
            display_type=transaction_display_type(tx),
            amount_cents=tx.amount_cents,
            commission_cents=tx.commission_cents,
            status=tx.status,
            created_at=tx.created_at,
            details=tx.details,
        )
        for tx in ledger.list_transactions(user_id)
    )
    items.sort(key=lambda item: item.created_at, reverse=True)
    return items[offset:offset + limit]
