from typing import Dict, Optional

COUNTRY_TO_CURRENCY: Dict[str, str] = {
    # Ближний Восток
    "SA": "SAR", "AE": "AED", "KW": "KWD", "QA": "QAR", "BH": "BHD",
    "OM": "OMR", "JO": "JOD", "LB": "LBP", "IQ": "IQD", "YE": "YER",
    # Европа
    "GB": "GBP", "EU": "EUR", "DE": "EUR", "FR": "EUR", "IT": "EUR",
    "ES": "EUR", "NL": "EUR", "BE": "EUR", "AT": "EUR", "CH": "CHF",
    "SE": "SEK", "NO": "NOK", "DK": "DKK", "PL": "PLN", "CZ": "CZK",
    "GR": "EUR", "PT": "EUR", "IE": "EUR", "FI": "EUR",
    # Северная Америка
    "US": "USD", "CA": "CAD", "MX": "MXN",
    # Азия
    "IN": "INR", "PK": "PKR", "BD": "BDT", "MY": "MYR", "SG": "SGD",
    "TH": "THB", "PH": "PHP", "ID": "IDR", "VN": "VND", "CN": "CNY",
    "JP": "JPY", "KR": "KRW",
    # прочие
    "AU": "AUD", "NZ": "NZD", "ZA": "ZAR", "EG": "EGP", "TR": "TRY",
    "RU": "RUB", "BR": "BRL", "AR": "ARS",
}


def currency_for_country(country_code: Optional[str], default: str = "USD") -> str:
    if not country_code:
        return default
    return COUNTRY_TO_CURRENCY.get(country_code.strip().upper(), default)
