import os
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List


def _csv(name: str, default: str) -> List[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass
class Settings:
    SECRET_KEY: str = os.getenv("SECRET_KEY", "dev-secret-change-me")
    ALGORITHM: str = os.getenv("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))
    RESET_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("RESET_TOKEN_EXPIRE_MINUTES", "10"))
    DB_PATH: str = os.getenv("DB_PATH", "./app.db")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS: List[str] = field(
        default_factory=lambda: _csv("CORS_ORIGINS", "http://localhost:5173,http://localhost:8000")
    )

    # деньги
    COMMISSION_RATE: Decimal = Decimal(os.getenv("COMMISSION_RATE", "0.025"))
    SIGNUP_BONUS: Decimal = Decimal(os.getenv("SIGNUP_BONUS", "100.00"))
    DEFAULT_CURRENCY: str = os.getenv("DEFAULT_CURRENCY", "USD")

    # одноразовые коды
    OTP_LENGTH: int = int(os.getenv("OTP_LENGTH", "6"))
    OTP_TTL_SECONDS: int = int(os.getenv("OTP_TTL_SECONDS", "600"))
    OTP_MAX_ATTEMPTS: int = int(os.getenv("OTP_MAX_ATTEMPTS", "5"))
    OTP_RESEND_SECONDS: int = int(os.getenv("OTP_RESEND_SECONDS", "60"))

    # геолокация / VPN
    VPNAPI_KEY: str = os.getenv("VPNAPI_KEY", "")
    VPNAPI_BASE: str = os.getenv("VPNAPI_BASE", "https://vpnapi.io/api")
    GEO_TIMEOUT_SECONDS: float = float(os.getenv("GEO_TIMEOUT_SECONDS", "5"))

    # хранилище файлов
    STORAGE_DIR: str = os.getenv("STORAGE_DIR", "./storage")
    STORAGE_PUBLIC_URL: str = os.getenv("STORAGE_PUBLIC_URL", "/storage")
    MAX_UPLOAD_BYTES: int = int(os.getenv("MAX_UPLOAD_BYTES", str(5 * 1024 * 1024)))

settings = Settings()
