from decimal import Decimal
from typing import Annotated, Optional, List, Dict, Any

from fastapi import APIRouter, Depends, Header
from pydantic import BaseModel, Field

from core.entities.profile import Profile
from core.entities.transaction import Transaction
from core.use_cases import transfer_use_cases as transfers
from core.use_cases.history_use_cases import list_history, transaction_display_type
from infrastructure.db.sqlite import SQLiteLedgerRepository, SQLiteProfileRepository
from infrastructure.web.dependencies import (
    get_current_user, get_ledger_repo, get_profile_repo, to_http_error,
)

router = APIRouter(prefix="", tags=["transfers"])

Amount = Annotated[Decimal, Field(gt=0, max_digits=14, decimal_places=2)]


class TransactionResponse(BaseModel):
    id: int
    type: str
    display_type: str
    amount_cents: int
    commission_cents: int
    total_cents: int
    balance_after: int
    status: str
    details: Dict[str, Any]
    created_at: str
    message: str = "Transaction request submitted successfully!"


def transaction_response(tx: Transaction) -> TransactionResponse:
    return TransactionResponse(
        id=tx.id,
        type=tx.type,
        display_type=transaction_display_type(tx),
        amount_cents=tx.amount_cents,
        commission_cents=tx.commission_cents,
        total_cents=tx.total_cents,
        balance_after=tx.balance_after,
        status=tx.status,
        details=tx.details,
        created_at=tx.created_at,
    )


class MobileBankingRequest(BaseModel):
    mfs_service: str
    phone: str
    account_type: str
    amount: Amount
    pin: str


class BankTransferRequest(BaseModel):
    bank_id: str
    account_number: str
    account_name: str
    amount: Amount
    pin: str


class RechargeRequest(BaseModel):
    operator: str
    phone: str
    amount: Amount
    pin: str


class BillRequest(BaseModel):
    bill_type: str
    biller: str
    account_number: str
    amount: Amount
    pin: str


class HistoryItemResponse(BaseModel):
    item_type: str
    id: int
    kind: str
    display_type: str
    amount_cents: int
    commission_cents: int
    amount_to_add_cents: Optional[int] = None
    status: str
    details: Dict[str, Any]
    created_at: str


@router.post("/transfers/mobile-banking", response_model=TransactionResponse, status_code=201)
def mobile_banking(
    payload: MobileBankingRequest,
    idempotency_key: Optional[str] = Header(None),
    current_user: Profile = Depends(get_current_user),
    ledger: SQLiteLedgerRepository = Depends(get_ledger_repo),
    profiles: SQLiteProfileRepository = Depends(get_profile_repo),
):
    try:
        tx = transfers.send_mobile_banking(
            ledger, profiles, current_user,
            mfs_service=payload.mfs_service,
            phone=payload.phone,
            account_type=payload.account_type,
            amount=payload.amount,
            pin=payload.pin,
            idempotency_key=idempotency_key,
        )
    except ValueError as e:
        raise to_http_error(e)
    return transaction_response(tx)


@router.post("/transfers/bank", response_model=TransactionResponse, status_code=201)
def bank_transfer(
    payload: BankTransferRequest,
    idempotency_key: Optional[str] = Header(None),
    current_user: Profile = Depends(get_current_user),
    ledger: SQLiteLedgerRepository = Depends(get_ledger_repo),
    profiles: SQLiteProfileRepository = Depends(get_profile_repo),
):
    try:
        tx = transfers.send_bank_transfer(
            ledger, profiles, current_user,
            bank_id=payload.bank_id,
            account_number=payload.account_number,
            account_name=payload.account_name,
            amount=payload.amount,
            pin=payload.pin,
            idempotency_key=idempotency_key,
        )
    except ValueError as e:
        raise to_http_error(e)
    return transaction_response(tx)


@router.post("/transfers/recharge", response_model=TransactionResponse, status_code=201)
def mobile_recharge(
    payload: RechargeRequest,
    idempotency_key: Optional[str] = Header(None),
    current_user: Profile = Depends(get_current_user),
    ledger: SQLiteLedgerRepository = Depends(get_ledger_repo),
    profiles: SQLiteProfileRepository = Depends(get_profile_repo),
):
    try:
        tx = transfers.recharge_mobile(
            ledger, profiles, current_user,
            operator=payload.operator,
            phone=payload.phone,
            amount=payload.amount,
            pin=payload.pin,
            idempotency_key=idempotency_key,
        )
    except ValueError as e:
        raise to_http_error(e)
    return transaction_response(tx)


@router.post("/transfers/bill", response_model=TransactionResponse, status_code=201)
def bill_payment(
    payload: BillRequest,
    idempotency_key: Optional[str] = Header(None),
    current_user: Profile = Depends(get_current_user),
    ledger: SQLiteLedgerRepository = Depends(get_ledger_repo),
    profiles: SQLiteProfileRepository = Depends(get_profile_repo),
):
    try:
        tx = transfers.pay_bill(
            ledger, profiles, current_user,
            bill_type=payload.bill_type,
            biller=payload.biller,
            account_number=payload.account_number,
            amount=payload.amount,
            pin=payload.pin,
            idempotency_key=idempotency_key,
        )
    except ValueError as e:
        raise to_http_error(e)
    return transaction_response(tx)


@router.get("/transactions", response_model=List[HistoryItemResponse])
def get_transactions(
    limit: int = 50,
    offset: int = 0,
    current_user: Profile = Depends(get_current_user),
    ledger: SQLiteLedgerRepository = Depends(get_ledger_repo),
):
    limit = max(1, min(100, int(limit)))  # пагинация, не хотим возвращать много
    offset = max(0, int(offset))
    items = list_history(ledger, current_user.id, limit=limit, offset=offset)
    return [
        HistoryItemResponse(
            item_type=item.item_type,
            id=item.id,
            kind=item.kind,
            display_type=item.display_type,
            amount_cents=item.amount_cents,
            commission_cents=item.commission_cents,
            amount_to_add_cents=item.amount_to_add_cents,
            status=item.status,
            details=item.details,
            created_at=item.created_at,
        )
        for item in items
    ]
