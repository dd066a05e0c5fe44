from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional, List
from core.entities.rate import Rate
from core.entities.content import Banner, Offer, PaymentAccount, CustomerCareContact


class ReferenceRepository(ABC):
    @abstractmethod
    def get_rate(self, country_code: str) -> Optional[Rate]:...

    @abstractmethod
    def upsert_rate(self, country_code: str, original_rate: Decimal, company_rate: Decimal) -> Rate:...

    @abstractmethod
    def list_active_banners(self) -> List[Banner]:...

    @abstractmethod
    def list_offers_ending_after(self, moment: str) -> List[Offer]:...

    @abstractmethod
    def find_bkash_account(self) -> Optional[PaymentAccount]:...

    @abstractmethod
    def list_bank_accounts(self, country: Optional[str] = None) -> List[PaymentAccount]:...

    @abstractmethod
    def get_payment_account(self, account_id: int) -> Optional[PaymentAccount]:...

    @abstractmethod
    def list_customer_care(self) -> List[CustomerCareContact]:...
