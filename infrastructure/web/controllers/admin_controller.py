from decimal import Decimal

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from config.settings import settings
from core.entities.currency import currency_for_country
from core.entities.profile import Profile
from core.use_cases import backoffice_use_cases as backoffice
from infrastructure.db.sqlite import SQLiteLedgerRepository, SQLiteReferenceRepository
from infrastructure.web.controllers.deposit_controller import DepositResponse, deposit_response
from infrastructure.web.controllers.rate_controller import RateResponse
from infrastructure.web.controllers.transfer_controller import TransactionResponse, transaction_response
from infrastructure.web.dependencies import (
    get_admin_user, get_ledger_repo, get_reference_repo, to_http_error,
)

router = APIRouter(prefix="/admin", tags=["admin"])


class AutoDepositRequest(BaseModel):
    amount: Decimal = Field(..., gt=0, max_digits=14, decimal_places=2)
    last_3_digits: str


class AutoDepositResponse(BaseModel):
    id: int
    amount_cents: int
    last_3_digits: str
    is_processed: bool
    created_at: str


class StatusRequest(BaseModel):
    status: str


class RateRequest(BaseModel):
    original_rate: Decimal = Field(..., gt=0)
    company_rate: Decimal = Field(..., gt=0)


@router.post("/autodeposits", response_model=AutoDepositResponse, status_code=201)
def stage_autodeposit(
    payload: AutoDepositRequest,
    admin: Profile = Depends(get_admin_user),
    ledger: SQLiteLedgerRepository = Depends(get_ledger_repo),
):
    try:
        staged = backoffice.stage_autodeposit(ledger, payload.amount, payload.last_3_digits)
    except ValueError as e:
        raise to_http_error(e)
    return AutoDepositResponse(
        id=staged.id,
        amount_cents=staged.amount_cents,
        last_3_digits=staged.last_3_digits,
        is_processed=staged.is_processed,
        created_at=staged.created_at,
    )


@router.post("/deposits/{deposit_id}/approve", response_model=DepositResponse)
def approve_deposit(
    deposit_id: int,
    admin: Profile = Depends(get_admin_user),
    ledger: SQLiteLedgerRepository = Depends(get_ledger_repo),
):
    try:
        return deposit_response(backoffice.approve_deposit(ledger, deposit_id))
    except ValueError as e:
        raise to_http_error(e)


@router.post("/deposits/{deposit_id}/reject", response_model=DepositResponse)
def reject_deposit(
    deposit_id: int,
    admin: Profile = Depends(get_admin_user),
    ledger: SQLiteLedgerRepository = Depends(get_ledger_repo),
):
    try:
        return deposit_response(backoffice.reject_deposit(ledger, deposit_id))
    except ValueError as e:
        raise to_http_error(e)


@router.post("/transactions/{tx_id}/status", response_model=TransactionResponse)
def set_transaction_status(
    tx_id: int,
    payload: StatusRequest,
    admin: Profile = Depends(get_admin_user),
    ledger: SQLiteLedgerRepository = Depends(get_ledger_repo),
):
    try:
        tx = backoffice.resolve_transaction(ledger, tx_id, payload.status)
    except ValueError as e:
        raise to_http_error(e)
    response = transaction_response(tx)
    response.message = f"Transaction marked {tx.status}"
    return response


@router.put("/rates/{country_code}", response_model=RateResponse)
def put_rate(
    country_code: str,
    payload: RateRequest,
    admin: Profile = Depends(get_admin_user),
    reference: SQLiteReferenceRepository = Depends(get_reference_repo),
):
    try:
        rate = backoffice.set_rate(reference, country_code, payload.original_rate, payload.company_rate)
    except ValueError as e:
        raise to_http_error(e)
    return RateResponse(
        country_code=rate.country_code,
        currency=currency_for_country(rate.country_code, settings.DEFAULT_CURRENCY),
        original_rate=rate.original_rate,
        company_rate=rate.company_rate,
        updated_at=rate.updated_at,
    )
