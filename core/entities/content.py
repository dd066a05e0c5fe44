from dataclasses import dataclass
from typing import Optional


@dataclass
class Banner:
    id: int
    image_url: str
    link_url: Optional[str]
    is_active: bool
    sort_order: int


@dataclass
class Offer:
    id: int
    title: str
    description: Optional[str]
    image_url: Optional[str]
    end_date: str


@dataclass
class PaymentAccount:
    id: int
    account_type: str       # bkash | bank
    account_name: str
    account_number: str
    country: Optional[str]
    is_active: bool
    branch: Optional[str] = None


@dataclass
class CustomerCareContact:
    id: int
    method: str             # phone | email | chat
    title: str
    description: str
    value: str
    action: str
