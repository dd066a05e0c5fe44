import logging
import re
from decimal import Decimal
from typing import Optional, Tuple

from config.settings import settings
from core.entities.currency import currency_for_country
from core.entities.deposit import Deposit, BANK, GIFT_CARD, MANUAL_DEPOSIT_TYPES
from core.entities.profile import Profile
from core.entities.rate import Rate
from core.errors import NotFoundError
from core.repositories.ledger_repository import LedgerRepository
from core.repositories.reference_repository import ReferenceRepository
from core.services.object_storage import ObjectStorage, RECEIPTS_BUCKET
from core.use_cases.pricing import (
    to_cents, is_whole, minimum_deposit, convert_deposit, convert_bkash_deposit,
)
from core.use_cases.uploads import validate_image, file_extension, timestamp_ms

logger = logging.getLogger(__name__)

LAST_DIGITS_RE = re.compile(r"^\d{3}$")


def _rate_for(reference: ReferenceRepository, user: Profile) -> Optional[Rate]:
    if not user.country_code:
        logger.warning("Profile %s has no country, crediting deposit unconverted", user.id)
        return None
    rate = reference.get_rate(user.country_code)
    if rate is None:
        logger.warning("No rate for %s, crediting deposit of profile %s unconverted",
                       user.country_code, user.id)
    return rate


def deposit_minimum(ledger: LedgerRepository, user_id: int, deposit_type: str) -> Tuple[int, int]:
    """Returns (approved deposit count, minimum amount) for the next deposit of that type."""
    if deposit_type not in MANUAL_DEPOSIT_TYPES:
        raise ValueError("Unsupported deposit type")
    count = ledger.count_approved_deposits(user_id, deposit_type)
    return count, minimum_deposit(count)


def claim_bkash_deposit(ledger: LedgerRepository, reference: ReferenceRepository, user: Profile,
                        amount: Decimal, last_3_digits: str) -> Deposit:
    account = reference.find_bkash_account()
    if account is None:
        raise NotFoundError("bKash account information not available")
    if amount is None or amount <= 0:
        raise ValueError("Please enter a valid amount")
    last_3_digits = (last_3_digits or "").strip()
    if not LAST_DIGITS_RE.match(last_3_digits):
        raise ValueError("Please enter the last 3 digits")

    units = convert_bkash_deposit(amount, _rate_for(reference, user))
    deposit = ledger.claim_autodeposit(
        user_id=user.id,
        amount_cents=to_cents(amount),
        last_3_digits=last_3_digits,
        amount_to_add_cents=units * 100,
        bank_id=account.id,
    )
    if deposit is None:
        raise NotFoundError("No matching deposit found. Please verify the amount and last 3 digits.")
    logger.info("bKash deposit %s credited %s to profile %s", deposit.id, units, user.id)
    return deposit


def submit_manual_deposit(ledger: LedgerRepository, reference: ReferenceRepository, storage: ObjectStorage,
                          user: Profile, *, deposit_type: str, amount: Decimal, receipt: bytes,
                          content_type: Optional[str], filename: Optional[str],
                          bank_id: Optional[int] = None) -> Deposit:
    if deposit_type not in MANUAL_DEPOSIT_TYPES:
        raise ValueError("Unsupported deposit type")

    if deposit_type == BANK:
        account = reference.get_payment_account(bank_id) if bank_id is not None else None
        if account is None or account.account_type != BANK or not account.is_active:
            raise ValueError("Please select a bank")
        if user.country_code and account.country and account.country != user.country_code:
            raise ValueError("Please select a bank")
    elif deposit_type == GIFT_CARD:
        bank_id = None

    if not receipt:
        raise ValueError("Please upload a receipt screenshot")
    validate_image(receipt, content_type)

    if amount is None or amount <= 0:
        raise ValueError("Please enter a valid amount")
    if not is_whole(amount):
        raise ValueError("Amount must be a whole number")
    _, minimum = deposit_minimum(ledger, user.id, deposit_type)
    if amount < minimum:
        currency = currency_for_country(user.country_code, settings.DEFAULT_CURRENCY)
        raise ValueError(
            f"Minimum deposit amount is {minimum:,} {currency} based on your previous deposits"
        )

    units = convert_deposit(amount, _rate_for(reference, user))
    path = f"{user.id}/{timestamp_ms()}.{file_extension(filename, content_type)}"
    receipt_url = storage.upload(RECEIPTS_BUCKET, path, receipt, content_type)

    deposit = ledger.create_deposit(
        user_id=user.id,
        deposit_type=deposit_type,
        amount_cents=to_cents(amount),
        amount_to_add_cents=units * 100,
        bank_id=bank_id,
        receipt_url=receipt_url,
    )
    logger.info("%s deposit %s submitted for review by profile %s", deposit_type, deposit.id, user.id)
    return deposit
