import logging
import re
from decimal import Decimal
from typing import Optional, Dict, Any

from config.settings import settings
from core.entities import catalog
from core.entities.currency import currency_for_country
from core.entities.profile import Profile
from core.entities.transaction import (
    Transaction, MOBILE_BANKING, BANK_TRANSFER, MOBILE_RECHARGE, PAY_BILL,
)
from core.errors import InsufficientFundsError, NotFoundError
from core.repositories.ledger_repository import LedgerRepository
from core.repositories.profile_repository import ProfileRepository
from core.use_cases.auth_use_cases import verify_pin
from core.use_cases.pricing import settle, is_whole, from_cents

logger = logging.getLogger(__name__)

MFS_MINIMUM = 200
RECHARGE_MINIMUM = 50
BILL_MINIMUM = 100


def _digits(value: str) -> str:
    return re.sub(r"\D", "", value or "")


def _check_amount(amount: Decimal, minimum: int, whole: bool, minimum_message: str) -> None:
    if amount is None or amount <= 0:
        raise ValueError("Please enter a valid amount")
    if amount < minimum:
        raise ValueError(minimum_message)
    if whole and not is_whole(amount):
        raise ValueError("Amount must be a whole number")


def _settle(ledger: LedgerRepository, profiles: ProfileRepository, user: Profile, type: str,
            amount: Decimal, pin: str, details: Dict[str, Any],
            idempotency_key: Optional[str]) -> Transaction:
    verify_pin(user, pin)
    settlement = settle(amount)

    if idempotency_key:
        existing = ledger.find_by_idempotency_key(user.id, idempotency_key)
        if existing is not None:
            if existing.type != type or existing.amount_cents != settlement.amount_cents:
                raise ValueError("Idempotency key was already used for a different transaction")
            logger.info("Replayed %s request for user %s, transaction %s", type, user.id, existing.id)
            return existing

    current = profiles.get_by_id(user.id)
    if current is None:
        raise NotFoundError("User not found")

    if not settlement.covered_by(current.balance_cents):
        currency = currency_for_country(current.country_code, settings.DEFAULT_CURRENCY)
        raise InsufficientFundsError(
            f"Insufficient balance. Your current balance is {from_cents(current.balance_cents)} {currency}. "
            f"Total required: {settlement.total} {currency} "
            f"(including {settlement.commission} {currency} commission). "
            f"Shortfall: {settlement.shortfall(current.balance_cents)} {currency}"
        )

    tx = ledger.debit_and_record(
        user_id=user.id,
        type=type,
        amount_cents=settlement.amount_cents,
        commission_cents=settlement.commission_cents,
        details=details,
        idempotency_key=idempotency_key,
    )
    logger.info("Debited %s for %s transaction %s of user %s",
                settlement.total_cents, type, tx.id, user.id)
    return tx


def send_mobile_banking(ledger: LedgerRepository, profiles: ProfileRepository, user: Profile, *,
                        mfs_service: str, phone: str, account_type: str, amount: Decimal, pin: str,
                        idempotency_key: Optional[str] = None) -> Transaction:
    if mfs_service not in catalog.MFS_SERVICES:
        raise ValueError("Please select a mobile financial service")
    phone = _digits(phone)
    if len(phone) != 11:
        raise ValueError("Please enter a valid 11-digit phone number")
    if account_type not in catalog.MFS_ACCOUNT_TYPES:
        raise ValueError("Please select an account type")
    _check_amount(amount, MFS_MINIMUM, True, f"Minimum amount is {MFS_MINIMUM}")

    return _settle(ledger, profiles, user, MOBILE_BANKING, amount, pin, {
        "mfs_service": mfs_service,
        "account_type": account_type,
        "recipient_account_number": phone,
    }, idempotency_key)


def send_bank_transfer(ledger: LedgerRepository, profiles: ProfileRepository, user: Profile, *,
                       bank_id: str, account_number: str, account_name: str, amount: Decimal, pin: str,
                       idempotency_key: Optional[str] = None) -> Transaction:
    bank = catalog.find_bank(bank_id)
    if bank is None:
        raise ValueError("Please select a bank")
    account_number, account_name = (account_number or "").strip(), (account_name or "").strip()
    if not account_number:
        raise ValueError("Please enter recipient account number")
    if not account_name:
        raise ValueError("Please enter recipient account name")
    currency = currency_for_country(user.country_code, settings.DEFAULT_CURRENCY)
    _check_amount(amount, bank.minimum_transfer, False,
                  f"Minimum transfer amount is {bank.minimum_transfer:,} {currency} for {bank.name}")

    return _settle(ledger, profiles, user, BANK_TRANSFER, amount, pin, {
        "bank_id": bank.id,
        "bank_name": bank.name,
        "recipient_account_number": account_number,
        "recipient_account_name": account_name,
    }, idempotency_key)


def recharge_mobile(ledger: LedgerRepository, profiles: ProfileRepository, user: Profile, *,
                    operator: str, phone: str, amount: Decimal, pin: str,
                    idempotency_key: Optional[str] = None) -> Transaction:
    op = catalog.OPERATORS.get(operator)
    if op is None:
        raise ValueError("Please select an operator")
    phone = _digits(phone)
    if len(phone) != 11 or not phone.startswith("01"):
        raise ValueError("Please enter a valid 11-digit Bangladesh mobile number (starting with 01)")
    if phone[:3] not in op.prefixes:
        raise ValueError(f"Phone number must start with {', '.join(op.prefixes)} for {op.label}")
    _check_amount(amount, RECHARGE_MINIMUM, True, f"Minimum recharge amount is {RECHARGE_MINIMUM}")

    return _settle(ledger, profiles, user, MOBILE_RECHARGE, amount, pin, {
        "operator": op.id,
        "phone": phone,
    }, idempotency_key)


def pay_bill(ledger: LedgerRepository, profiles: ProfileRepository, user: Profile, *,
             bill_type: str, biller: str, account_number: str, amount: Decimal, pin: str,
             idempotency_key: Optional[str] = None) -> Transaction:
    if bill_type not in catalog.BILL_TYPES:
        raise ValueError("Please select a bill type")
    provider = catalog.find_biller(bill_type, biller)
    if provider is None:
        raise ValueError("Please select a provider")
    account_number = (account_number or "").strip()
    if len(account_number) < 3:
        raise ValueError("Please enter a valid account number")
    _check_amount(amount, BILL_MINIMUM, False, f"Minimum bill amount is {BILL_MINIMUM} BDT")

    return _settle(ledger, profiles, user, PAY_BILL, amount, pin, {
        "bill_type": bill_type,
        "provider": provider.label,
        "bill_account_number": account_number,
    }, idempotency_key)
