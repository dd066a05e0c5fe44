import sqlite3
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, Header, Request, status
from jose import jwt, JWTError

from config.settings import settings
from core.entities.profile import Profile
from core.errors import (
    AuthError, InsufficientFundsError, InvalidPinError, NotFoundError, VpnBlockedError,
)
from core.services.geo_provider import GeoProvider
from core.services.object_storage import ObjectStorage
from core.services.otp_sender import OtpSender
from infrastructure.db.sqlite import (
    connect, SQLiteProfileRepository, SQLiteLedgerRepository, SQLiteOtpRepository, SQLiteReferenceRepository,
)
from infrastructure.geo.vpnapi_provider import build_geo_provider
from infrastructure.mail.log_sender import LogOtpSender
from infrastructure.storage.local_storage import build_storage

ACCESS_SCOPE = "access"
RESET_SCOPE = "password_reset"


def get_db():
    conn = connect(settings.DB_PATH)
    try:
        yield conn
    finally:
        conn.close()


def get_profile_repo(conn: sqlite3.Connection = Depends(get_db)) -> SQLiteProfileRepository:
    return SQLiteProfileRepository(conn)


def get_ledger_repo(conn: sqlite3.Connection = Depends(get_db)) -> SQLiteLedgerRepository:
    return SQLiteLedgerRepository(conn)


def get_otp_repo(conn: sqlite3.Connection = Depends(get_db)) -> SQLiteOtpRepository:
    return SQLiteOtpRepository(conn)


def get_reference_repo(conn: sqlite3.Connection = Depends(get_db)) -> SQLiteReferenceRepository:
    return SQLiteReferenceRepository(conn)


# внешние сервисы; в тестах подменяются через dependency_overrides
def get_geo_provider() -> GeoProvider:
    return build_geo_provider()


def get_otp_sender() -> OtpSender:
    return LogOtpSender()


def get_storage() -> ObjectStorage:
    return build_storage()


def get_client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else ""


# jwt авторизация
def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    to_encode.setdefault("scope", ACCESS_SCOPE)
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_reset_token(email: str) -> str:
    return create_access_token(
        {"sub": email, "scope": RESET_SCOPE},
        timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES),
    )


def decode_token(token: str, scope: str) -> str:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise AuthError("Could not validate credentials")
    sub = payload.get("sub")
    if sub is None or payload.get("scope") != scope:
        raise AuthError("Could not validate credentials")
    return sub


def get_bearer_token(authorization: Optional[str] = Header(None)) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return authorization.split(" ", 1)[1]


def get_current_user(
    token: str = Depends(get_bearer_token),
    repo: SQLiteProfileRepository = Depends(get_profile_repo),
) -> Profile:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        user_id = int(decode_token(token, ACCESS_SCOPE))
    except (AuthError, ValueError):
        raise credentials_exception

    user = repo.get_by_id(user_id)
    if user is None:
        raise credentials_exception
    return user


def get_admin_user(current_user: Profile = Depends(get_current_user)) -> Profile:
    if not current_user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return current_user


def to_http_error(e: ValueError) -> HTTPException:
    if isinstance(e, InsufficientFundsError):
        return HTTPException(status_code=status.HTTP_402_PAYMENT_REQUIRED, detail=str(e))
    if isinstance(e, (InvalidPinError, VpnBlockedError)):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, AuthError):
        return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
    # OtpError и прочие ошибки валидации
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
