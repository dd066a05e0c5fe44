from typing import Optional, List

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from config.settings import settings
from core.entities import catalog
from core.entities.content import PaymentAccount
from core.entities.currency import currency_for_country
from core.entities.profile import Profile
from core.use_cases import content_use_cases as content
from infrastructure.db.sqlite import SQLiteReferenceRepository
from infrastructure.web.dependencies import get_current_user, get_reference_repo, to_http_error

router = APIRouter(prefix="", tags=["content"])


class BannerResponse(BaseModel):
    id: int
    image_url: str
    link_url: Optional[str] = None
    sort_order: int


class OfferResponse(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    end_date: str
    seconds_remaining: int


class PaymentAccountResponse(BaseModel):
    id: int
    account_type: str
    account_name: str
    account_number: str
    country: Optional[str] = None
    branch: Optional[str] = None


class CustomerCareResponse(BaseModel):
    method: str
    title: str
    description: str
    value: str
    action: str


class CurrencyResponse(BaseModel):
    country_code: str
    currency: str


def account_response(account: PaymentAccount) -> PaymentAccountResponse:
    return PaymentAccountResponse(
        id=account.id,
        account_type=account.account_type,
        account_name=account.account_name,
        account_number=account.account_number,
        country=account.country,
        branch=account.branch,
    )


@router.get("/catalog/mfs")
def mfs_catalog():
    return {
        "services": [{"id": k, "label": v} for k, v in catalog.MFS_SERVICES.items()],
        "account_types": [{"id": k, "label": v} for k, v in catalog.MFS_ACCOUNT_TYPES.items()],
        "minimum_amount": 200,
    }


@router.get("/catalog/banks")
def bank_catalog():
    return [
        {
            "id": bank.id,
            "name": bank.name,
            "code": bank.code,
            "supports_bkash": bank.supports_bkash,
            "minimum_amount": bank.minimum_transfer,
        }
        for bank in catalog.BANKS
    ]


@router.get("/catalog/operators")
def operator_catalog():
    return [
        {"id": op.id, "label": op.label, "prefixes": list(op.prefixes)}
        for op in catalog.OPERATORS.values()
    ]


@router.get("/catalog/bills")
def bill_catalog():
    return [
        {
            "id": bill_type,
            "label": label,
            "providers": [{"id": b.id, "label": b.label} for b in catalog.BILLERS.get(bill_type, [])],
        }
        for bill_type, label in catalog.BILL_TYPES.items()
    ]


@router.get("/currency/{country_code}", response_model=CurrencyResponse)
def get_currency(country_code: str):
    return CurrencyResponse(
        country_code=country_code.upper(),
        currency=currency_for_country(country_code, settings.DEFAULT_CURRENCY),
    )


@router.get("/banners", response_model=List[BannerResponse])
def get_banners(reference: SQLiteReferenceRepository = Depends(get_reference_repo)):
    return [
        BannerResponse(id=b.id, image_url=b.image_url, link_url=b.link_url, sort_order=b.sort_order)
        for b in reference.list_active_banners()
    ]


@router.get("/offers", response_model=List[OfferResponse])
def get_offers(reference: SQLiteReferenceRepository = Depends(get_reference_repo)):
    return [
        OfferResponse(
            id=item.offer.id,
            title=item.offer.title,
            description=item.offer.description,
            image_url=item.offer.image_url,
            end_date=item.offer.end_date,
            seconds_remaining=item.seconds_remaining,
        )
        for item in content.list_active_offers(reference)
    ]


@router.get("/payment-accounts/bkash", response_model=PaymentAccountResponse)
def get_bkash_account(
    current_user: Profile = Depends(get_current_user),
    reference: SQLiteReferenceRepository = Depends(get_reference_repo),
):
    try:
        return account_response(content.bkash_account(reference))
    except ValueError as e:
        raise to_http_error(e)


@router.get("/payment-accounts/banks", response_model=List[PaymentAccountResponse])
def get_bank_accounts(
    current_user: Profile = Depends(get_current_user),
    reference: SQLiteReferenceRepository = Depends(get_reference_repo),
):
    try:
        accounts = content.bank_accounts_for(reference, current_user)
    except ValueError as e:
        raise to_http_error(e)
    return [account_response(a) for a in accounts]


@router.get("/customer-care", response_model=List[CustomerCareResponse])
def get_customer_care(reference: SQLiteReferenceRepository = Depends(get_reference_repo)):
    contacts = reference.list_customer_care()
    if not contacts:
        raise HTTPException(status_code=404, detail="No contact methods available")
    return [
        CustomerCareResponse(method=c.method, title=c.title, description=c.description,
                             value=c.value, action=c.action)
        for c in contacts
    ]
