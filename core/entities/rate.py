from dataclasses import dataclass
from decimal import Decimal


@dataclass
class Rate:
    country_code: str
    original_rate: Decimal
    company_rate: Decimal
    updated_at: str
