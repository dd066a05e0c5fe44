from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from config.settings import settings
from core.entities.currency import currency_for_country
from core.entities.profile import Profile
from core.services.geo_provider import GeoProvider
from core.use_cases import rate_use_cases as rates
from infrastructure.db.sqlite import SQLiteReferenceRepository
from infrastructure.web.dependencies import (
    get_client_ip, get_current_user, get_geo_provider, get_reference_repo, to_http_error,
)

router = APIRouter(prefix="/rates", tags=["rates"])


class QuoteResponse(BaseModel):
    available: bool
    country: Optional[str] = None
    country_code: Optional[str] = None
    currency: Optional[str] = None
    company_rate: Optional[Decimal] = None
    send_amount: Optional[Decimal] = None
    receive_amount: Optional[Decimal] = None


class RateResponse(BaseModel):
    country_code: str
    currency: str
    original_rate: Decimal
    company_rate: Decimal
    updated_at: str


@router.get("/quote", response_model=QuoteResponse)
def rate_quote(
    amount: Decimal = Query(Decimal("100"), gt=0),
    ip: str = Depends(get_client_ip),
    reference: SQLiteReferenceRepository = Depends(get_reference_repo),
    geo: GeoProvider = Depends(get_geo_provider),
):
    quote = rates.quote_for_ip(reference, geo, ip, amount)
    return QuoteResponse(**quote.__dict__)


@router.get("/me", response_model=RateResponse)
def my_rate(
    current_user: Profile = Depends(get_current_user),
    reference: SQLiteReferenceRepository = Depends(get_reference_repo),
):
    try:
        rate = rates.rate_for_profile(reference, current_user)
    except ValueError as e:
        raise to_http_error(e)
    return RateResponse(
        country_code=rate.country_code,
        currency=currency_for_country(rate.country_code, settings.DEFAULT_CURRENCY),
        original_rate=rate.original_rate,
        company_rate=rate.company_rate,
        updated_at=rate.updated_at,
    )
