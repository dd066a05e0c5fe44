import base64
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import pytest
from fastapi.testclient import TestClient

from config.settings import settings
from core.entities.profile import Profile
from core.services.geo_provider import GeoProvider, GeoResult, GeoLookupError
from core.services.object_storage import ObjectStorage
from core.services.otp_sender import OtpSender
from core.use_cases.auth_use_cases import get_secret_hash
from infrastructure.db.sqlite import (
    connect, init_db, SQLiteProfileRepository, SQLiteLedgerRepository, SQLiteOtpRepository,
    SQLiteReferenceRepository,
)
from infrastructure.web.dependencies import (
    create_access_token, get_geo_provider, get_otp_sender, get_storage,
)
from main import app

PASSWORD = "12345678"
PIN = "1234"


class FakeGeoProvider(GeoProvider):
    def __init__(self):
        self.result = GeoResult(ip="203.0.113.7", country="United States", country_code="US")
        self.error: Optional[str] = None
        self.calls: List[str] = []

    def lookup(self, ip: str) -> GeoResult:
        self.calls.append(ip)
        if self.error:
            raise GeoLookupError(self.error)
        return self.result


class RecordingOtpSender(OtpSender):
    def __init__(self):
        self.sent: List[Tuple[str, str, str]] = []

    def send(self, email: str, code: str, purpose: str) -> None:
        self.sent.append((email, code, purpose))

    def last_code(self, email: str) -> str:
        for sent_email, code, _ in reversed(self.sent):
            if sent_email == email:
                return code
        raise AssertionError(f"no code sent to {email}")


class MemoryStorage(ObjectStorage):
    def __init__(self):
        self.objects: Dict[str, bytes] = {}

    def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> str:
        key = f"{bucket}/{path}"
        self.objects[key] = data
        return f"/storage/{key}"


@dataclass
class Services:
    geo: FakeGeoProvider = field(default_factory=FakeGeoProvider)
    otp: RecordingOtpSender = field(default_factory=RecordingOtpSender)
    storage: MemoryStorage = field(default_factory=MemoryStorage)


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    path = str(tmp_path / "test.db")
    monkeypatch.setattr(settings, "DB_PATH", path)
    monkeypatch.setattr(settings, "STORAGE_DIR", str(tmp_path / "storage"))
    # без задержки между повторными кодами
    monkeypatch.setattr(settings, "OTP_RESEND_SECONDS", 0)
    init_db(path)
    return path


@pytest.fixture
def conn(db_path):
    connection = connect(db_path)
    yield connection
    connection.close()


@pytest.fixture
def profiles(conn):
    return SQLiteProfileRepository(conn)


@pytest.fixture
def ledger(conn):
    return SQLiteLedgerRepository(conn)


@pytest.fixture
def otps(conn):
    return SQLiteOtpRepository(conn)


@pytest.fixture
def reference(conn):
    return SQLiteReferenceRepository(conn)


@pytest.fixture
def services():
    return Services()


@pytest.fixture
def client(db_path, services):
    app.dependency_overrides[get_geo_provider] = lambda: services.geo
    app.dependency_overrides[get_otp_sender] = lambda: services.otp
    app.dependency_overrides[get_storage] = lambda: services.storage
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_profile(profiles):
    counter = {"n": 0}

    def _make(balance_cents: int = 100_000, country_code: Optional[str] = "US",
              is_admin: bool = False, email: Optional[str] = None) -> Profile:
        counter["n"] += 1
        return profiles.create_profile(Profile(
            id=None,
            email=email or f"user{counter['n']}@remitmail.com",
            password_hash=get_secret_hash(PASSWORD),
            pin_hash=get_secret_hash(PIN),
            first_name="Rahim",
            last_name="Uddin",
            balance_cents=balance_cents,
            created_at="",
            country="Test",
            country_code=country_code,
            is_admin=is_admin,
        ))

    return _make


def auth_headers(user: Profile) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token({'sub': str(user.id)})}"}


def basic_auth(email: str, password: str) -> Dict[str, str]:
    token = base64.b64encode(f"{email}:{password}".encode()).decode()
    return {"Authorization": f"Basic {token}"}


@pytest.fixture
def user(make_profile):
    return make_profile()


@pytest.fixture
def admin(make_profile):
    return make_profile(is_admin=True, email="ops@remitmail.com")
