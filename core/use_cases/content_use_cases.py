from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, List

from core.entities.content import Offer, PaymentAccount
from core.entities.profile import Profile
from core.errors import NotFoundError
from core.repositories.reference_repository import ReferenceRepository


@dataclass
class ActiveOffer:
    offer: Offer
    seconds_remaining: int


def _parse_timestamp(value: str) -> datetime:
    # fromisoformat до 3.11 не понимает суффикс Z
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def list_active_offers(reference: ReferenceRepository, now: Optional[datetime] = None) -> List[ActiveOffer]:
    now = now or datetime.now(timezone.utc)
    result = []
    for offer in reference.list_offers_ending_after(now.isoformat()):
        end = _parse_timestamp(offer.end_date)
        remaining = (end - now).total_seconds()
        result.append(ActiveOffer(offer=offer, seconds_remaining=max(0, int(remaining))))
    return result


def bkash_account(reference: ReferenceRepository) -> PaymentAccount:
    account = reference.find_bkash_account()
    if account is None:
        raise NotFoundError("No bKash account found. Please contact support.")
    return account


def bank_accounts_for(reference: ReferenceRepository, user: Profile) -> List[PaymentAccount]:
    accounts = reference.list_bank_accounts(user.country_code or None)
    if not accounts:
        raise NotFoundError("No active bank accounts available for your country")
    return accounts
