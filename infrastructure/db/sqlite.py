import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, List, Dict, Any, Iterator
from pathlib import Path
import json
import logging

from core.entities.profile import Profile
from core.entities.transaction import Transaction, PENDING as TX_PENDING
from core.entities.deposit import Deposit, AutoDeposit, BKASH, PENDING, APPROVED, REJECTED
from core.entities.otp import OtpChallenge
from core.entities.rate import Rate
from core.entities.content import Banner, Offer, PaymentAccount, CustomerCareContact
from core.errors import InsufficientFundsError, NotFoundError, OtpError
from core.repositories.profile_repository import ProfileRepository
from core.repositories.ledger_repository import LedgerRepository
from core.repositories.otp_repository import OtpRepository
from core.repositories.reference_repository import ReferenceRepository

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS profiles (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    email TEXT UNIQUE NOT NULL,
    password_hash TEXT NOT NULL,
    pin_hash TEXT NOT NULL,
    first_name TEXT NOT NULL DEFAULT '',
    last_name TEXT NOT NULL DEFAULT '',
    country TEXT,
    country_code TEXT,
    balance_cents INTEGER NOT NULL DEFAULT 0 CHECK (balance_cents >= 0),
    selfie_url TEXT,
    doc_url TEXT,
    is_admin INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    updated_at TEXT
);

CREATE TABLE IF NOT EXISTS transactions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL,
    type TEXT NOT NULL,
    amount_cents INTEGER NOT NULL,
    commission_cents INTEGER NOT NULL DEFAULT 0,
    balance_after INTEGER NOT NULL,
    status TEXT NOT NULL DEFAULT 'pending',
    details TEXT,
    idempotency_key TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT,
    UNIQUE (user_id, idempotency_key),
    FOREIGN KEY(user_id) REFERENCES profiles(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS deposit (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL,
    bank_id INTEGER,
    deposit_type TEXT NOT NULL,
    amount_cents INTEGER NOT NULL,
    amount_to_add_cents INTEGER NOT NULL,
    receipt_url TEXT,
    status TEXT NOT NULL DEFAULT 'pending',
    created_at TEXT NOT NULL,
    reviewed_at TEXT,
    FOREIGN KEY(user_id) REFERENCES profiles(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS autodeposit (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    amount_cents INTEGER NOT NULL,
    last_3_digits TEXT NOT NULL,
    is_processed INTEGER NOT NULL DEFAULT 0,
    processed_by INTEGER,
    processed_at TEXT,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS rates (
    country_code TEXT PRIMARY KEY,
    original_rate TEXT NOT NULL,
    company_rate TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS banners (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    image_url TEXT NOT NULL,
    link_url TEXT,
    is_active INTEGER NOT NULL DEFAULT 1,
    sort_order INTEGER NOT NULL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS offers (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL,
    description TEXT,
    image_url TEXT,
    end_date TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS paymentaccounts (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    account_type TEXT NOT NULL,
    account_name TEXT NOT NULL,
    account_number TEXT NOT NULL,
    branch TEXT,
    country TEXT,
    is_active INTEGER NOT NULL DEFAULT 1
);

CREATE TABLE IF NOT EXISTS customer_care (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    method TEXT NOT NULL,
    title TEXT NOT NULL,
    description TEXT NOT NULL,
    value TEXT NOT NULL,
    action TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS otp_codes (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    email TEXT NOT NULL,
    purpose TEXT NOT NULL,
    code_hash TEXT NOT NULL,
    payload TEXT,
    attempts INTEGER NOT NULL DEFAULT 0,
    expires_at TEXT NOT NULL,
    consumed_at TEXT,
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_otp_email_purpose ON otp_codes(email, purpose);
CREATE INDEX IF NOT EXISTS idx_autodeposit_match ON autodeposit(amount_cents, last_3_digits, is_processed);
"""

DEFAULT_CUSTOMER_CARE = [
    ("phone", "Call Us", "24/7 Customer Support", "+880 1234-567890", "call"),
    ("email", "Email Us", "Send us an email", "support@taptapsend.com", "email"),
    ("chat", "Live Chat", "Chat with our support team", "Available 24/7", "chat"),
]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def connect(db_path: str) -> sqlite3.Connection:
    conn = sqlite3.connect(db_path, check_same_thread=False, isolation_level=None)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def atomic(conn: sqlite3.Connection) -> Iterator[sqlite3.Cursor]:
    """Write transaction that takes the database lock up front."""
    cur = conn.cursor()
    cur.execute("BEGIN IMMEDIATE")
    try:
        yield cur
    except BaseException:
        cur.execute("ROLLBACK")
        raise
    else:
        cur.execute("COMMIT")


def init_db(db_path: str) -> None:
    if db_path != ":memory:" and not db_path.startswith("file:"):
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    conn = connect(db_path)
    try:
        conn.executescript(SCHEMA)
        with atomic(conn) as cur:
            cur.execute("SELECT COUNT(*) FROM customer_care")
            if cur.fetchone()[0] == 0:
                cur.executemany(
                    "INSERT INTO customer_care (method, title, description, value, action) VALUES (?, ?, ?, ?, ?)",
                    DEFAULT_CUSTOMER_CARE,
                )
    finally:
        conn.close()
    logger.info("Database ready at %s", db_path)


class _SQLiteRepository:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self.conn.row_factory = sqlite3.Row
        # транзакциями управляем сами через atomic()
        self.conn.isolation_level = None


class SQLiteProfileRepository(_SQLiteRepository, ProfileRepository):
    def _row_to_profile(self, row: sqlite3.Row) -> Profile:
        return Profile(
            id=row["id"],
            email=row["email"],
            password_hash=row["password_hash"],
            pin_hash=row["pin_hash"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            balance_cents=int(row["balance_cents"]),
            created_at=row["created_at"],
            country=row["country"],
            country_code=row["country_code"],
            selfie_url=row["selfie_url"],
            doc_url=row["doc_url"],
            is_admin=bool(row["is_admin"]),
            updated_at=row["updated_at"],
        )

    def create_profile(self, profile: Profile) -> Profile:
        created_at = profile.created_at or _now()
        with atomic(self.conn) as cur:
            cur.execute(
                """INSERT INTO profiles (email, password_hash, pin_hash, first_name, last_name, country,
                   country_code, balance_cents, selfie_url, doc_url, is_admin, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (profile.email, profile.password_hash, profile.pin_hash, profile.first_name,
                 profile.last_name, profile.country, profile.country_code, int(profile.balance_cents),
                 profile.selfie_url, profile.doc_url, 1 if profile.is_admin else 0,
                 created_at, profile.updated_at or created_at),
            )
            user_id = cur.lastrowid
        user = self.get_by_id(user_id)
        assert user is not None
        return user

    def get_by_email(self, email: str) -> Optional[Profile]:
        cur = self.conn.cursor()
        cur.execute("SELECT * FROM profiles WHERE email = ?", (email,))
        row = cur.fetchone()
        return self._row_to_profile(row) if row else None

    def get_by_id(self, user_id: int) -> Optional[Profile]:
        cur = self.conn.cursor()
        cur.execute("SELECT * FROM profiles WHERE id = ?", (int(user_id),))
        row = cur.fetchone()
        return self._row_to_profile(row) if row else None

    def _update_column(self, user_id: int, column: str, value: Any) -> Profile:
        with atomic(self.conn) as cur:
            cur.execute(
                f"UPDATE profiles SET {column} = ?, updated_at = ? WHERE id = ?",
                (value, _now(), int(user_id)),
            )
            if cur.rowcount == 0:
                raise NotFoundError("User not found")
        user = self.get_by_id(user_id)
        assert user is not None
        return user

    def update_password(self, user_id: int, password_hash: str) -> Profile:
        return self._update_column(user_id, "password_hash", password_hash)

    def update_pin(self, user_id: int, pin_hash: str) -> Profile:
        return self._update_column(user_id, "pin_hash", pin_hash)


class SQLiteLedgerRepository(_SQLiteRepository, LedgerRepository):
    def _row_to_tx(self, row: sqlite3.Row) -> Transaction:
        details: Dict[str, Any] = {}
        if row["details"]:
            try:
                details = json.loads(row["details"])
            except ValueError:
                details = {"raw": row["details"]}
        return Transaction(
            id=row["id"],
            user_id=row["user_id"],
            type=row["type"],
            amount_cents=int(row["amount_cents"]),
            commission_cents=int(row["commission_cents"]),
            balance_after=int(row["balance_after"]),
            status=row["status"],
            created_at=row["created_at"],
            details=details,
            idempotency_key=row["idempotency_key"],
        )

    def _row_to_deposit(self, row: sqlite3.Row) -> Deposit:
        return Deposit(
            id=row["id"],
            user_id=row["user_id"],
            deposit_type=row["deposit_type"],
            amount_cents=int(row["amount_cents"]),
            amount_to_add_cents=int(row["amount_to_add_cents"]),
            status=row["status"],
            created_at=row["created_at"],
            bank_id=row["bank_id"],
            receipt_url=row["receipt_url"],
            reviewed_at=row["reviewed_at"],
        )

    def _row_to_autodeposit(self, row: sqlite3.Row) -> AutoDeposit:
        return AutoDeposit(
            id=row["id"],
            amount_cents=int(row["amount_cents"]),
            last_3_digits=row["last_3_digits"],
            is_processed=bool(row["is_processed"]),
            created_at=row["created_at"],
            processed_by=row["processed_by"],
            processed_at=row["processed_at"],
        )

    @staticmethod
    def _credit(cur: sqlite3.Cursor, user_id: int, delta_cents: int) -> None:
        cur.execute(
            "UPDATE profiles SET balance_cents = balance_cents + ?, updated_at = ? WHERE id = ?",
            (int(delta_cents), _now(), int(user_id)),
        )
        if cur.rowcount == 0:
            raise NotFoundError("User not found")

    # транзакции

    def debit_and_record(self, user_id: int, type: str, amount_cents: int, commission_cents: int,
                         details: Dict[str, Any], idempotency_key: Optional[str] = None) -> Transaction:
        total = int(amount_cents) + int(commission_cents)
        if amount_cents <= 0:
            raise ValueError("amount_cents must be positive")
        try:
            with atomic(self.conn) as cur:
                cur.execute(
                    "UPDATE profiles SET balance_cents = balance_cents - ?, updated_at = ? "
                    "WHERE id = ? AND balance_cents >= ?",
                    (total, _now(), int(user_id), total),
                )
                if cur.rowcount == 0:
                    cur.execute("SELECT 1 FROM profiles WHERE id = ?", (int(user_id),))
                    if cur.fetchone() is None:
                        raise NotFoundError("User not found")
                    raise InsufficientFundsError("Insufficient funds")
                cur.execute("SELECT balance_cents FROM profiles WHERE id = ?", (int(user_id),))
                balance_after = int(cur.fetchone()[0])
                cur.execute(
                    """INSERT INTO transactions (user_id, type, amount_cents, commission_cents, balance_after,
                       status, details, idempotency_key, created_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                    (int(user_id), type, int(amount_cents), int(commission_cents), balance_after, TX_PENDING,
                     json.dumps(details, ensure_ascii=False), idempotency_key, _now()),
                )
                tx_id = cur.lastrowid
        except sqlite3.IntegrityError:
            # параллельный запрос с тем же ключом успел раньше
            if idempotency_key:
                existing = self.find_by_idempotency_key(user_id, idempotency_key)
                if existing is not None:
                    return existing
            raise
        tx = self.get_transaction(tx_id)
        assert tx is not None
        return tx

    def find_by_idempotency_key(self, user_id: int, idempotency_key: str) -> Optional[Transaction]:
        cur = self.conn.cursor()
        cur.execute(
            "SELECT * FROM transactions WHERE user_id = ? AND idempotency_key = ?",
            (int(user_id), idempotency_key),
        )
        row = cur.fetchone()
        return self._row_to_tx(row) if row else None

    def get_transaction(self, tx_id: int) -> Optional[Transaction]:
        cur = self.conn.cursor()
        cur.execute("SELECT * FROM transactions WHERE id = ?", (int(tx_id),))
        row = cur.fetchone()
        return self._row_to_tx(row) if row else None

    def list_transactions(self, user_id: int) -> List[Transaction]:
        cur = self.conn.cursor()
        cur.execute(
            "SELECT * FROM transactions WHERE user_id = ? ORDER BY created_at DESC, id DESC",
            (int(user_id),),
        )
        return [self._row_to_tx(r) for r in cur.fetchall()]

    def resolve_transaction(self, tx_id: int, status: str, refund: bool) -> Transaction:
        with atomic(self.conn) as cur:
            cur.execute("SELECT * FROM transactions WHERE id = ?", (int(tx_id),))
            row = cur.fetchone()
            if row is None:
                raise NotFoundError("Transaction not found")
            if row["status"] != TX_PENDING:
                raise ValueError(f"Transaction is already {row['status']}")
            if refund:
                self._credit(cur, row["user_id"], int(row["amount_cents"]) + int(row["commission_cents"]))
            cur.execute(
                "UPDATE transactions SET status = ?, updated_at = ? WHERE id = ? AND status = ?",
                (status, _now(), int(tx_id), TX_PENDING),
            )
        tx = self.get_transaction(tx_id)
        assert tx is not None
        return tx

    # депозиты

    def count_approved_deposits(self, user_id: int, deposit_type: str) -> int:
        cur = self.conn.cursor()
        cur.execute(
            "SELECT COUNT(*) FROM deposit WHERE user_id = ? AND deposit_type = ? AND status = ?",
            (int(user_id), deposit_type, APPROVED),
        )
        return int(cur.fetchone()[0])

    def create_deposit(self, user_id: int, deposit_type: str, amount_cents: int, amount_to_add_cents: int,
                       bank_id: Optional[int], receipt_url: Optional[str]) -> Deposit:
        with atomic(self.conn) as cur:
            cur.execute(
                """INSERT INTO deposit (user_id, bank_id, deposit_type, amount_cents, amount_to_add_cents,
                   receipt_url, status, created_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
                (int(user_id), bank_id, deposit_type, int(amount_cents), int(amount_to_add_cents),
                 receipt_url, PENDING, _now()),
            )
            deposit_id = cur.lastrowid
        deposit = self.get_deposit(deposit_id)
        assert deposit is not None
        return deposit

    def get_deposit(self, deposit_id: int) -> Optional[Deposit]:
        cur = self.conn.cursor()
        cur.execute("SELECT * FROM deposit WHERE id = ?", (int(deposit_id),))
        row = cur.fetchone()
        return self._row_to_deposit(row) if row else None

    def list_deposits(self, user_id: int) -> List[Deposit]:
        cur = self.conn.cursor()
        cur.execute(
            "SELECT * FROM deposit WHERE user_id = ? ORDER BY created_at DESC, id DESC",
            (int(user_id),),
        )
        return [self._row_to_deposit(r) for r in cur.fetchall()]

    def _review_deposit(self, deposit_id: int, status: str) -> Deposit:
        with atomic(self.conn) as cur:
            cur.execute("SELECT * FROM deposit WHERE id = ?", (int(deposit_id),))
            row = cur.fetchone()
            if row is None:
                raise NotFoundError("Deposit not found")
            if row["status"] != PENDING:
                raise ValueError(f"Deposit is already {row['status']}")
            cur.execute(
                "UPDATE deposit SET status = ?, reviewed_at = ? WHERE id = ? AND status = ?",
                (status, _now(), int(deposit_id), PENDING),
            )
            if status == APPROVED:
                self._credit(cur, row["user_id"], int(row["amount_to_add_cents"]))
        deposit = self.get_deposit(deposit_id)
        assert deposit is not None
        return deposit

    def approve_deposit(self, deposit_id: int) -> Deposit:
        return self._review_deposit(deposit_id, APPROVED)

    def reject_deposit(self, deposit_id: int) -> Deposit:
        return self._review_deposit(deposit_id, REJECTED)

    def stage_autodeposit(self, amount_cents: int, last_3_digits: str) -> AutoDeposit:
        with atomic(self.conn) as cur:
            cur.execute(
                "INSERT INTO autodeposit (amount_cents, last_3_digits, is_processed, created_at) VALUES (?, ?, 0, ?)",
                (int(amount_cents), last_3_digits, _now()),
            )
            row_id = cur.lastrowid
            cur.execute("SELECT * FROM autodeposit WHERE id = ?", (row_id,))
            row = cur.fetchone()
        return self._row_to_autodeposit(row)

    def claim_autodeposit(self, user_id: int, amount_cents: int, last_3_digits: str,
                          amount_to_add_cents: int, bank_id: Optional[int]) -> Optional[Deposit]:
        with atomic(self.conn) as cur:
            cur.execute(
                "SELECT id FROM autodeposit WHERE amount_cents = ? AND last_3_digits = ? AND is_processed = 0 "
                "ORDER BY id LIMIT 1",
                (int(amount_cents), last_3_digits),
            )
            row = cur.fetchone()
            if row is None:
                return None
            now = _now()
            cur.execute(
                "UPDATE autodeposit SET is_processed = 1, processed_by = ?, processed_at = ? "
                "WHERE id = ? AND is_processed = 0",
                (int(user_id), now, row["id"]),
            )
            if cur.rowcount == 0:
                return None
            self._credit(cur, user_id, amount_to_add_cents)
            cur.execute(
                """INSERT INTO deposit (user_id, bank_id, deposit_type, amount_cents, amount_to_add_cents,
                   receipt_url, status, created_at, reviewed_at) VALUES (?, ?, ?, ?, ?, NULL, ?, ?, ?)""",
                (int(user_id), bank_id, BKASH, int(amount_cents), int(amount_to_add_cents), APPROVED, now, now),
            )
            deposit_id = cur.lastrowid
        return self.get_deposit(deposit_id)


class SQLiteOtpRepository(_SQLiteRepository, OtpRepository):
    def _row_to_challenge(self, row: sqlite3.Row) -> OtpChallenge:
        return OtpChallenge(
            id=row["id"],
            email=row["email"],
            purpose=row["purpose"],
            code_hash=row["code_hash"],
            expires_at=row["expires_at"],
            created_at=row["created_at"],
            attempts=int(row["attempts"]),
            consumed_at=row["consumed_at"],
            payload=json.loads(row["payload"]) if row["payload"] else {},
        )

    def create_challenge(self, email: str, purpose: str, code_hash: str, expires_at: str,
                         payload: Optional[Dict[str, Any]] = None) -> OtpChallenge:
        now = _now()
        with atomic(self.conn) as cur:
            # старые коды больше не действуют
            cur.execute(
                "UPDATE otp_codes SET consumed_at = ? WHERE email = ? AND purpose = ? AND consumed_at IS NULL",
                (now, email, purpose),
            )
            cur.execute(
                """INSERT INTO otp_codes (email, purpose, code_hash, payload, attempts, expires_at, created_at)
                   VALUES (?, ?, ?, ?, 0, ?, ?)""",
                (email, purpose, code_hash, json.dumps(payload) if payload else None, expires_at, now),
            )
            row_id = cur.lastrowid
            cur.execute("SELECT * FROM otp_codes WHERE id = ?", (row_id,))
            row = cur.fetchone()
        return self._row_to_challenge(row)

    def latest_challenge(self, email: str, purpose: str) -> Optional[OtpChallenge]:
        cur = self.conn.cursor()
        cur.execute(
            "SELECT * FROM otp_codes WHERE email = ? AND purpose = ? ORDER BY id DESC LIMIT 1",
            (email, purpose),
        )
        row = cur.fetchone()
        return self._row_to_challenge(row) if row else None

    def register_failed_attempt(self, challenge_id: int) -> OtpChallenge:
        with atomic(self.conn) as cur:
            cur.execute("UPDATE otp_codes SET attempts = attempts + 1 WHERE id = ?", (int(challenge_id),))
            cur.execute("SELECT * FROM otp_codes WHERE id = ?", (int(challenge_id),))
            row = cur.fetchone()
        if row is None:
            raise NotFoundError("Verification code not found")
        return self._row_to_challenge(row)

    def consume(self, challenge_id: int) -> bool:
        with atomic(self.conn) as cur:
            cur.execute(
                "UPDATE otp_codes SET consumed_at = ? WHERE id = ? AND consumed_at IS NULL",
                (_now(), int(challenge_id)),
            )
            return cur.rowcount == 1

    def update_payload(self, challenge_id: int, payload: Dict[str, Any]) -> OtpChallenge:
        with atomic(self.conn) as cur:
            cur.execute(
                "UPDATE otp_codes SET payload = ? WHERE id = ? AND consumed_at IS NULL",
                (json.dumps(payload), int(challenge_id)),
            )
            if cur.rowcount == 0:
                raise OtpError("No active verification code. Please request a new one.")
            cur.execute("SELECT * FROM otp_codes WHERE id = ?", (int(challenge_id),))
            row = cur.fetchone()
        return self._row_to_challenge(row)


class SQLiteReferenceRepository(_SQLiteRepository, ReferenceRepository):
    def _row_to_rate(self, row: sqlite3.Row) -> Rate:
        return Rate(
            country_code=row["country_code"],
            original_rate=Decimal(row["original_rate"]),
            company_rate=Decimal(row["company_rate"]),
            updated_at=row["updated_at"],
        )

    def _row_to_account(self, row: sqlite3.Row) -> PaymentAccount:
        return PaymentAccount(
            id=row["id"],
            account_type=row["account_type"],
            account_name=row["account_name"],
            account_number=row["account_number"],
            country=row["country"],
            is_active=bool(row["is_active"]),
            branch=row["branch"],
        )

    def get_rate(self, country_code: str) -> Optional[Rate]:
        cur = self.conn.cursor()
        cur.execute("SELECT * FROM rates WHERE country_code = ?", (country_code.upper(),))
        row = cur.fetchone()
        return self._row_to_rate(row) if row else None

    def upsert_rate(self, country_code: str, original_rate: Decimal, company_rate: Decimal) -> Rate:
        with atomic(self.conn) as cur:
            cur.execute(
                """INSERT INTO rates (country_code, original_rate, company_rate, updated_at) VALUES (?, ?, ?, ?)
                   ON CONFLICT(country_code) DO UPDATE SET original_rate = excluded.original_rate,
                   company_rate = excluded.company_rate, updated_at = excluded.updated_at""",
                (country_code.upper(), str(original_rate), str(company_rate), _now()),
            )
        rate = self.get_rate(country_code)
        assert rate is not None
        return rate

    def list_active_banners(self) -> List[Banner]:
        cur = self.conn.cursor()
        cur.execute("SELECT * FROM banners WHERE is_active = 1 ORDER BY sort_order, id")
        return [
            Banner(id=r["id"], image_url=r["image_url"], link_url=r["link_url"],
                   is_active=bool(r["is_active"]), sort_order=int(r["sort_order"]))
            for r in cur.fetchall()
        ]

    def list_offers_ending_after(self, moment: str) -> List[Offer]:
        cur = self.conn.cursor()
        cur.execute("SELECT * FROM offers WHERE end_date >= ? ORDER BY end_date ASC", (moment,))
        return [
            Offer(id=r["id"], title=r["title"], description=r["description"],
                  image_url=r["image_url"], end_date=r["end_date"])
            for r in cur.fetchall()
        ]

    def find_bkash_account(self) -> Optional[PaymentAccount]:
        cur = self.conn.cursor()
        # сначала активный, иначе любой
        cur.execute(
            "SELECT * FROM paymentaccounts WHERE account_type = 'bkash' ORDER BY is_active DESC, id LIMIT 1"
        )
        row = cur.fetchone()
        return self._row_to_account(row) if row else None

    def list_bank_accounts(self, country: Optional[str] = None) -> List[PaymentAccount]:
        cur = self.conn.cursor()
        if country:
            cur.execute(
                "SELECT * FROM paymentaccounts WHERE account_type = 'bank' AND is_active = 1 AND country = ? "
                "ORDER BY account_name ASC",
                (country,),
            )
        else:
            cur.execute(
                "SELECT * FROM paymentaccounts WHERE account_type = 'bank' AND is_active = 1 ORDER BY account_name ASC"
            )
        return [self._row_to_account(r) for r in cur.fetchall()]

    def get_payment_account(self, account_id: int) -> Optional[PaymentAccount]:
        cur = self.conn.cursor()
        cur.execute("SELECT * FROM paymentaccounts WHERE id = ?", (int(account_id),))
        row = cur.fetchone()
        return self._row_to_account(row) if row else None

    def list_customer_care(self) -> List[CustomerCareContact]:
        cur = self.conn.cursor()
        cur.execute("SELECT * FROM customer_care ORDER BY id")
        return [
            CustomerCareContact(id=r["id"], method=r["method"], title=r["title"],
                                description=r["description"], value=r["value"], action=r["action"])
            for r in cur.fetchall()
        ]
