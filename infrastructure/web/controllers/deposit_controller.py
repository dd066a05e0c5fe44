from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from pydantic import BaseModel, Field

from core.entities.deposit import Deposit, BANK, GIFT_CARD
from core.entities.profile import Profile
from core.services.object_storage import ObjectStorage
from core.use_cases import deposit_use_cases as deposits
from core.use_cases.history_use_cases import deposit_display_type
from infrastructure.db.sqlite import SQLiteLedgerRepository, SQLiteReferenceRepository
from infrastructure.web.dependencies import (
    get_current_user, get_ledger_repo, get_reference_repo, get_storage, to_http_error,
)

router = APIRouter(prefix="/deposits", tags=["deposits"])


class DepositResponse(BaseModel):
    id: int
    deposit_type: str
    display_type: str
    amount_cents: int
    amount_to_add_cents: int
    status: str
    bank_id: Optional[int] = None
    receipt_url: Optional[str] = None
    created_at: str
    message: Optional[str] = None


def deposit_response(deposit: Deposit, message: Optional[str] = None) -> DepositResponse:
    return DepositResponse(
        id=deposit.id,
        deposit_type=deposit.deposit_type,
        display_type=deposit_display_type(deposit),
        amount_cents=deposit.amount_cents,
        amount_to_add_cents=deposit.amount_to_add_cents,
        status=deposit.status,
        bank_id=deposit.bank_id,
        receipt_url=deposit.receipt_url,
        created_at=deposit.created_at,
        message=message,
    )


class BkashDepositRequest(BaseModel):
    amount: Decimal = Field(..., gt=0, max_digits=14, decimal_places=2)
    last_3_digits: str


class MinimumResponse(BaseModel):
    deposit_type: str
    approved_count: int
    minimum_amount: int


@router.get("/minimum", response_model=MinimumResponse)
def deposit_minimum(
    deposit_type: str = BANK,
    current_user: Profile = Depends(get_current_user),
    ledger: SQLiteLedgerRepository = Depends(get_ledger_repo),
):
    try:
        count, minimum = deposits.deposit_minimum(ledger, current_user.id, deposit_type)
    except ValueError as e:
        raise to_http_error(e)
    return MinimumResponse(deposit_type=deposit_type, approved_count=count, minimum_amount=minimum)


@router.post("/bkash", response_model=DepositResponse, status_code=201)
def bkash_deposit(
    payload: BkashDepositRequest,
    current_user: Profile = Depends(get_current_user),
    ledger: SQLiteLedgerRepository = Depends(get_ledger_repo),
    reference: SQLiteReferenceRepository = Depends(get_reference_repo),
):
    try:
        deposit = deposits.claim_bkash_deposit(ledger, reference, current_user,
                                               payload.amount, payload.last_3_digits)
    except ValueError as e:
        raise to_http_error(e)
    return deposit_response(deposit, "Deposit successful! Your balance has been updated.")


def _manual_deposit(deposit_type: str, current_user: Profile, amount: Decimal, receipt: UploadFile,
                    bank_id: Optional[int], ledger: SQLiteLedgerRepository,
                    reference: SQLiteReferenceRepository, storage: ObjectStorage) -> DepositResponse:
    data = receipt.file.read()
    try:
        deposit = deposits.submit_manual_deposit(
            ledger, reference, storage, current_user,
            deposit_type=deposit_type,
            amount=amount,
            receipt=data,
            content_type=receipt.content_type,
            filename=receipt.filename,
            bank_id=bank_id,
        )
    except ValueError as e:
        raise to_http_error(e)
    return deposit_response(
        deposit,
        "Deposit request submitted successfully! Your receipt has been uploaded and is pending review.",
    )


@router.post("/bank", response_model=DepositResponse, status_code=201)
def bank_deposit(
    amount: Decimal = Form(..., gt=0, max_digits=14, decimal_places=2),
    bank_id: int = Form(...),
    receipt: UploadFile = File(...),
    current_user: Profile = Depends(get_current_user),
    ledger: SQLiteLedgerRepository = Depends(get_ledger_repo),
    reference: SQLiteReferenceRepository = Depends(get_reference_repo),
    storage: ObjectStorage = Depends(get_storage),
):
    return _manual_deposit(BANK, current_user, amount, receipt, bank_id, ledger, reference, storage)


@router.post("/gift-card", response_model=DepositResponse, status_code=201)
def gift_card_deposit(
    amount: Decimal = Form(..., gt=0, max_digits=14, decimal_places=2),
    receipt: UploadFile = File(...),
    current_user: Profile = Depends(get_current_user),
    ledger: SQLiteLedgerRepository = Depends(get_ledger_repo),
    reference: SQLiteReferenceRepository = Depends(get_reference_repo),
    storage: ObjectStorage = Depends(get_storage),
):
    return _manual_deposit(GIFT_CARD, current_user, amount, receipt, None, ledger, reference, storage)
