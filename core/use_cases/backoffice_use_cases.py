import logging
import re
from decimal import Decimal

from core.entities.deposit import AutoDeposit, Deposit
from core.entities.rate import Rate
from core.entities.transaction import Transaction, COMPLETED, FAILED, REJECTED
from core.repositories.ledger_repository import LedgerRepository
from core.repositories.reference_repository import ReferenceRepository
from core.use_cases.pricing import to_cents

logger = logging.getLogger(__name__)

COUNTRY_CODE_RE = re.compile(r"^[A-Z]{2}$")


def stage_autodeposit(ledger: LedgerRepository, amount: Decimal, last_3_digits: str) -> AutoDeposit:
    if amount is None or amount <= 0:
        raise ValueError("Please enter a valid amount")
    if not re.match(r"^\d{3}$", last_3_digits or ""):
        raise ValueError("Please enter the last 3 digits")
    return ledger.stage_autodeposit(to_cents(amount), last_3_digits)


def approve_deposit(ledger: LedgerRepository, deposit_id: int) -> Deposit:
    deposit = ledger.approve_deposit(deposit_id)
    logger.info("Deposit %s approved, credited %s", deposit.id, deposit.amount_to_add_cents)
    return deposit


def reject_deposit(ledger: LedgerRepository, deposit_id: int) -> Deposit:
    deposit = ledger.reject_deposit(deposit_id)
    logger.info("Deposit %s rejected", deposit.id)
    return deposit


def resolve_transaction(ledger: LedgerRepository, tx_id: int, status: str) -> Transaction:
    if status not in (COMPLETED, FAILED, REJECTED):
        raise ValueError("Invalid status")
    # неуспешные операции возвращают сумму вместе с комиссией
    tx = ledger.resolve_transaction(tx_id, status, refund=status in (FAILED, REJECTED))
    logger.info("Transaction %s marked %s", tx.id, status)
    return tx


def set_rate(reference: ReferenceRepository, country_code: str, original_rate: Decimal,
             company_rate: Decimal) -> Rate:
    country_code = (country_code or "").strip().upper()
    if not COUNTRY_CODE_RE.match(country_code):
        raise ValueError("Invalid country code")
    if original_rate <= 0 or company_rate <= 0:
        raise ValueError("Rates must be positive")
    return reference.upsert_rate(country_code, Decimal(original_rate), Decimal(company_rate))
