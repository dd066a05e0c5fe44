"""Reference lists for the send-money services offered in Bangladesh."""
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class Bank:
    id: str
    name: str
    code: str
    supports_bkash: bool

    @property
    def minimum_transfer(self) -> int:
        return 5000 if self.supports_bkash else 25000


@dataclass(frozen=True)
class Operator:
    id: str
    label: str
    prefixes: Tuple[str, ...]


@dataclass(frozen=True)
class Biller:
    id: str
    label: str


MFS_SERVICES: Dict[str, str] = {
    "bkash": "bKash",
    "nagad": "Nagad",
    "rocket": "Rocket",
    "mcash": "mCash",
    "ucash": "UCash",
    "surecash": "SureCash",
}

MFS_ACCOUNT_TYPES: Dict[str, str] = {
    "agent": "Agent",
    "personal": "Personal",
}

OPERATORS: Dict[str, Operator] = {
    op.id: op
    for op in (
        Operator("grameenphone", "GP", ("017", "013")),
        Operator("robi", "Robi", ("018", "016")),
        Operator("banglalink", "Banglalink", ("019", "014")),
        Operator("teletalk", "Teletalk", ("015",)),
    )
}

BILL_TYPES: Dict[str, str] = {
    "electricity": "Electricity",
    "gas": "Gas",
    "water": "Water",
    "internet": "Internet",
    "tv": "TV/Cable",
}

BILLERS: Dict[str, List[Biller]] = {
    "electricity": [
        Biller("desco", "DESCO"),
        Biller("dpdc", "DPDC"),
        Biller("breb", "BREB"),
        Biller("west-zone", "West Zone Power"),
        Biller("north-zone", "North Zone Power"),
    ],
    "gas": [
        Biller("titas", "Titas Gas"),
        Biller("bakhrabad", "Bakhrabad Gas"),
        Biller("jalalabad", "Jalalabad Gas"),
        Biller("pashchimanchal", "Pashchimanchal Gas"),
    ],
    "water": [
        Biller("dwasa", "DWASA"),
        Biller("cwasa", "CWASA"),
        Biller("kwasa", "KWASA"),
        Biller("rwasa", "RWASA"),
    ],
    "internet": [
        Biller("gp", "Grameenphone"),
        Biller("robi", "Robi"),
        Biller("banglalink", "Banglalink"),
        Biller("teletalk", "Teletalk"),
        Biller("summit", "Summit Communications"),
        Biller("link3", "Link3"),
    ],
    "tv": [
        Biller("akash", "Akash DTH"),
        Biller("d2h", "D2H"),
        Biller("cable", "Cable TV"),
    ],
}

_BANK_ROWS = [
    # государственные
    ("sonali", "Sonali Bank", "SONALI", True),
    ("janata", "Janata Bank", "JANATA", True),
    ("agrani", "Agrani Bank", "AGRANI", True),
    ("rupali", "Rupali Bank", "RUPALI", False),
    ("basic", "BASIC Bank", "BASIC", False),
    ("bdb", "Bangladesh Development Bank", "BDB", False),
    # частные
    ("brac", "BRAC Bank", "BRAC", True),
    ("dbbl", "Dutch-Bangla Bank", "DBBL", True),
    ("city", "City Bank", "CITY", True),
    ("eastern", "Eastern Bank", "EBL", True),
    ("prime", "Prime Bank", "PRIME", True),
    ("mutual", "Mutual Trust Bank", "MTB", True),
    ("islami", "Islami Bank Bangladesh", "IBBL", True),
    ("ific", "IFIC Bank", "IFIC", True),
    ("ucbl", "United Commercial Bank", "UCBL", True),
    ("pubali", "Pubali Bank", "PUBALI", True),
    ("uttara", "Uttara Bank", "UTTARA", False),
    ("dhaka", "Dhaka Bank", "DHAKA", True),
    ("southeast", "Southeast Bank", "SOUTHEAST", True),
    ("one", "One Bank", "ONE", True),
    ("exim", "EXIM Bank", "EXIM", True),
    ("standard", "Standard Bank", "STANDARD", False),
    ("premier", "Premier Bank", "PREMIER", True),
    ("bankasia", "Bank Asia", "BANKASIA", True),
    ("ncc", "NCC Bank", "NCC", True),
    ("jamuna", "Jamuna Bank", "JAMUNA", True),
    ("trust", "Trust Bank", "TRUST", True),
    ("nrb", "NRB Bank", "NRB", False),
    ("nrbcommercial", "NRB Commercial Bank", "NRBCOMM", False),
    ("mercantile", "Mercantile Bank", "MERCANTILE", True),
    ("modhumoti", "Modhumoti Bank", "MODHUMOTI", False),
    ("midland", "Midland Bank", "MIDLAND", False),
    ("meghna", "Meghna Bank", "MEGHNA", False),
    ("shimanto", "Shimanto Bank", "SHIMANTO", False),
    ("union", "Union Bank", "UNION", False),
    ("padma", "Padma Bank", "PADMA", False),
    ("bengal", "Bengal Commercial Bank", "BENGAL", False),
    ("citizens", "Citizens Bank", "CITIZENS", False),
    ("community", "Community Bank Bangladesh", "COMMUNITY", False),
    ("southbangla", "South Bangla Agriculture and Commerce Bank", "SOUTHBANGLA", False),
    # исламские
    ("al-arafah", "Al-Arafah Islami Bank", "ALARAFAH", True),
    ("first-security", "First Security Islami Bank", "FIRSTSECURITY", True),
    ("shahjalal", "Shahjalal Islami Bank", "SHAHJALAL", True),
    ("social-islami", "Social Islami Bank", "SOCIALISLAMI", True),
    ("global-islami", "Global Islami Bank", "GLOBALISLAMI", False),
    ("icb-islami", "ICB Islamic Bank", "ICBISLAMI", False),
    # специализированные
    ("krishi", "Bangladesh Krishi Bank", "KRISHI", False),
    ("rajshahi-krishi", "Rajshahi Krishi Unnayan Bank", "RAJSHAHIKRISHI", False),
    ("probashi", "Probashi Kallyan Bank", "PROBASHI", False),
    # иностранные
    ("hsbc", "HSBC", "HSBC", False),
    ("standard-chartered", "Standard Chartered Bank", "SCB", False),
    ("citibank", "Citibank", "CITIBANK", False),
    ("state-bank-india", "State Bank of India", "SBI", False),
    ("woori", "Woori Bank", "WOORI", False),
    ("bank-alfalah", "Bank Al-Falah", "ALFALAH", False),
    ("habib", "Habib Bank", "HABIB", False),
    ("national-bank-pakistan", "National Bank of Pakistan", "NBP", False),
    ("commercial-bank-ceylon", "Commercial Bank of Ceylon", "CBC", False),
]

BANKS: List[Bank] = sorted((Bank(*row) for row in _BANK_ROWS), key=lambda b: b.name.lower())
_BANKS_BY_ID: Dict[str, Bank] = {bank.id: bank for bank in BANKS}


def find_bank(bank_id: str) -> Optional[Bank]:
    return _BANKS_BY_ID.get(bank_id)


def find_biller(bill_type: str, biller_id: str) -> Optional[Biller]:
    for biller in BILLERS.get(bill_type, []):
        if biller.id == biller_id:
            return biller
    return None
