import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from config.settings import settings
from core.entities.currency import currency_for_country
from core.entities.profile import Profile
from core.entities.rate import Rate
from core.errors import NotFoundError
from core.repositories.reference_repository import ReferenceRepository
from core.services.geo_provider import GeoProvider, GeoLookupError
from core.use_cases.pricing import CENT

logger = logging.getLogger(__name__)


@dataclass
class RateQuote:
    available: bool
    country: Optional[str] = None
    country_code: Optional[str] = None
    currency: Optional[str] = None
    company_rate: Optional[Decimal] = None
    send_amount: Optional[Decimal] = None
    receive_amount: Optional[Decimal] = None


def receive_amount(send_amount: Decimal, company_rate: Decimal) -> Decimal:
    return (Decimal(send_amount) * Decimal(company_rate)).quantize(CENT)


def quote_for_ip(reference: ReferenceRepository, geo: GeoProvider, ip: str, send_amount: Decimal) -> RateQuote:
    """Landing-page quote. Any lookup failure hides the rate instead of guessing one."""
    try:
        location = geo.lookup(ip)
    except GeoLookupError as e:
        logger.warning("Geo lookup failed for rate quote: %s", e)
        return RateQuote(available=False)

    rate = reference.get_rate(location.country_code)
    if rate is None or rate.company_rate <= 0:
        logger.warning("Rate not found for country %s", location.country_code)
        return RateQuote(available=False, country=location.country, country_code=location.country_code,
                         currency=currency_for_country(location.country_code, settings.DEFAULT_CURRENCY))

    return RateQuote(
        available=True,
        country=location.country,
        country_code=location.country_code,
        currency=currency_for_country(location.country_code, settings.DEFAULT_CURRENCY),
        company_rate=rate.company_rate,
        send_amount=Decimal(send_amount),
        receive_amount=receive_amount(send_amount, rate.company_rate),
    )


def rate_for_profile(reference: ReferenceRepository, user: Profile) -> Rate:
    if not user.country_code:
        raise NotFoundError("No country on profile")
    rate = reference.get_rate(user.country_code)
    if rate is None:
        raise NotFoundError(f"Rate not found for {user.country_code}")
    return rate
