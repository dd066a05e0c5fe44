import hashlib
import hmac
import logging
import re
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from passlib.context import CryptContext

from config.settings import settings
from core.entities.otp import OtpChallenge, SIGNUP, PASSWORD_RESET
from core.entities.profile import Profile
from core.errors import AuthError, InvalidPinError, NotFoundError, OtpError, VpnBlockedError
from core.repositories.otp_repository import OtpRepository
from core.repositories.profile_repository import ProfileRepository
from core.services.geo_provider import GeoProvider, GeoLookupError, GeoResult, VPN_BLOCK_MESSAGE
from core.services.object_storage import ObjectStorage, KYC_BUCKET
from core.services.otp_sender import OtpSender
from core.use_cases.pricing import to_cents
from core.use_cases.uploads import validate_image, file_extension, timestamp_ms

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

PASSWORD_RE = re.compile(r"^\d{8}$")
PIN_RE = re.compile(r"^\d{4}$")
# вид документа -> поле профиля
KYC_KINDS = {"selfie": "selfie_url", "document": "doc_url"}


def get_secret_hash(secret: str) -> str:
    return pwd_context.hash(secret)


def verify_secret(secret: str, secret_hash: str) -> bool:
    return pwd_context.verify(secret, secret_hash)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _hash_code(email: str, code: str) -> str:
    return hmac.new(
        settings.SECRET_KEY.encode("utf-8"), f"{email}:{code}".encode("utf-8"), hashlib.sha256,
    ).hexdigest()


def _generate_code(length: int) -> str:
    return "".join(secrets.choice("0123456789") for _ in range(length))


def validate_pin(pin: str) -> str:
    pin = (pin or "").strip()
    if len(pin) != 4:
        raise ValueError("Please enter the complete 4-digit PIN")
    if not PIN_RE.match(pin):
        raise ValueError("PIN must contain only numbers")
    return pin


def verify_pin(profile: Profile, pin: str) -> None:
    pin = validate_pin(pin)
    if not verify_secret(pin, profile.pin_hash):
        raise InvalidPinError("Invalid PIN. Please try again.")


def _validate_password(password: str) -> None:
    if not password:
        raise ValueError("Password is required")
    if len(password) != 8:
        raise ValueError("Password must be exactly 8 digits")
    if not PASSWORD_RE.match(password):
        raise ValueError("Password must contain only digits")


# одноразовые коды

def issue_otp(otps: OtpRepository, sender: OtpSender, email: str, purpose: str,
              payload: Optional[dict] = None, now: Optional[datetime] = None) -> OtpChallenge:
    now = now or _utcnow()
    latest = otps.latest_challenge(email, purpose)
    if latest is not None and latest.consumed_at is None:
        wait = settings.OTP_RESEND_SECONDS - (now - datetime.fromisoformat(latest.created_at)).total_seconds()
        if wait > 0:
            raise OtpError(f"Please wait {int(wait) + 1} seconds before requesting a new code")

    code = _generate_code(settings.OTP_LENGTH)
    challenge = otps.create_challenge(
        email=email,
        purpose=purpose,
        code_hash=_hash_code(email, code),
        expires_at=(now + timedelta(seconds=settings.OTP_TTL_SECONDS)).isoformat(),
        payload=payload,
    )
    sender.send(email, code, purpose)
    logger.info("Issued %s code for challenge %s", purpose, challenge.id)
    return challenge


def _is_live(challenge: Optional[OtpChallenge], now: datetime) -> bool:
    return (
        challenge is not None
        and challenge.consumed_at is None
        and datetime.fromisoformat(challenge.expires_at) > now
    )


def verify_otp(otps: OtpRepository, email: str, purpose: str, code: str,
               now: Optional[datetime] = None) -> OtpChallenge:
    now = now or _utcnow()
    code = (code or "").strip()
    if len(code) != settings.OTP_LENGTH:
        raise OtpError("Please enter the complete verification code")
    if not code.isdigit():
        raise OtpError("Verification code must contain only numbers")

    challenge = otps.latest_challenge(email, purpose)
    if challenge is None or challenge.consumed_at is not None:
        raise OtpError("No active verification code. Please request a new one.")
    if datetime.fromisoformat(challenge.expires_at) <= now:
        raise OtpError("Verification code has expired. Please request a new one.")
    if challenge.attempts >= settings.OTP_MAX_ATTEMPTS:
        raise OtpError("Too many attempts. Please request a new code.")
    if not hmac.compare_digest(_hash_code(email, code), challenge.code_hash):
        otps.register_failed_attempt(challenge.id)
        logger.warning("Wrong %s code for challenge %s", purpose, challenge.id)
        raise OtpError("Invalid verification code. Please try again.")
    if not otps.consume(challenge.id):
        raise OtpError("No active verification code. Please request a new one.")
    return challenge


# регистрация

def start_signup(profiles: ProfileRepository, otps: OtpRepository, sender: OtpSender,
                 email: str, first_name: str, last_name: str) -> OtpChallenge:
    email = normalize_email(email)
    first_name, last_name = first_name.strip(), last_name.strip()
    if not first_name:
        raise ValueError("First name is required")
    if not last_name:
        raise ValueError("Last name is required")
    if profiles.get_by_email(email) is not None:
        raise ValueError("User with this email already exists")
    return issue_otp(otps, sender, email, SIGNUP,
                     payload={"first_name": first_name, "last_name": last_name})


def upload_kyc_image(otps: OtpRepository, storage: ObjectStorage, email: str, kind: str,
                     data: bytes, content_type: Optional[str], filename: Optional[str]) -> str:
    email = normalize_email(email)
    if kind not in KYC_KINDS:
        raise ValueError("Unknown document kind")
    challenge = otps.latest_challenge(email, SIGNUP)
    if not _is_live(challenge, _utcnow()):
        raise OtpError("Start the signup first to upload documents")
    validate_image(data, content_type)
    folder = hashlib.sha1(email.encode("utf-8")).hexdigest()[:16]
    path = f"{folder}/{kind}_{timestamp_ms()}.{file_extension(filename, content_type)}"
    url = storage.upload(KYC_BUCKET, path, data, content_type or "application/octet-stream")
    # ссылки хранятся на сервере, клиент их не передает
    otps.update_payload(challenge.id, {**challenge.payload, KYC_KINDS[kind]: url})
    return url


def _missing_kyc(challenge: OtpChallenge) -> bool:
    return any(not challenge.payload.get(key) for key in KYC_KINDS.values())


def complete_signup(profiles: ProfileRepository, otps: OtpRepository, geo: GeoProvider, *,
                    email: str, code: str, password: str, pin: str, ip: str) -> Profile:
    email = normalize_email(email)
    _validate_password(password)
    pin = validate_pin(pin)

    # проверка VPN до кода; если сервис недоступен, пропускаем пользователя
    location: Optional[GeoResult] = None
    try:
        location = geo.lookup(ip)
    except GeoLookupError as e:
        logger.warning("Geo lookup failed during signup, continuing: %s", e)
    if location is not None and location.is_blocked:
        logger.info("Blocked signup from %s (vpn/proxy/tor)", ip)
        raise VpnBlockedError(VPN_BLOCK_MESSAGE)

    pending = otps.latest_challenge(email, SIGNUP)
    if _is_live(pending, _utcnow()) and _missing_kyc(pending):
        raise ValueError("Please upload both your selfie and ID document")

    challenge = verify_otp(otps, email, SIGNUP, code)
    if _missing_kyc(challenge):
        raise ValueError("Please upload both your selfie and ID document")
    if profiles.get_by_email(email) is not None:
        raise ValueError("User with this email already exists")

    now = _utcnow().isoformat()
    profile = profiles.create_profile(Profile(
        id=None,
        email=email,
        password_hash=get_secret_hash(password),
        pin_hash=get_secret_hash(pin),
        first_name=challenge.payload.get("first_name", ""),
        last_name=challenge.payload.get("last_name", ""),
        balance_cents=to_cents(settings.SIGNUP_BONUS),
        created_at=now,
        updated_at=now,
        country=location.country if location else None,
        country_code=location.country_code if location else None,
        selfie_url=challenge.payload.get("selfie_url"),
        doc_url=challenge.payload.get("doc_url"),
    ))
    logger.info("Created profile %s", profile.id)
    return profile


def authenticate_user(profiles: ProfileRepository, email: str, password: str) -> Optional[Profile]:
    user = profiles.get_by_email(normalize_email(email))
    if not user:
        return None
    if not verify_secret(password, user.password_hash):
        return None
    return user


# сброс пароля

def start_password_reset(profiles: ProfileRepository, otps: OtpRepository, sender: OtpSender,
                         email: str) -> OtpChallenge:
    email = normalize_email(email)
    if profiles.get_by_email(email) is None:
        raise NotFoundError("No account found for this email")
    return issue_otp(otps, sender, email, PASSWORD_RESET)


def verify_password_reset(otps: OtpRepository, email: str, code: str) -> str:
    email = normalize_email(email)
    verify_otp(otps, email, PASSWORD_RESET, code)
    return email


def reset_password(profiles: ProfileRepository, email: str, new_password: str) -> Profile:
    if not new_password or len(new_password) < 8:
        raise ValueError("Password must be at least 8 characters")
    user = profiles.get_by_email(normalize_email(email))
    if user is None:
        raise AuthError("Session expired. Please start the password reset process again.")
    logger.info("Password reset for profile %s", user.id)
    return profiles.update_password(user.id, get_secret_hash(new_password))


def change_pin(profiles: ProfileRepository, user: Profile, current_pin: str, new_pin: str) -> Profile:
    verify_pin(user, current_pin)
    new_pin = validate_pin(new_pin)
    return profiles.update_pin(user.id, get_secret_hash(new_pin))
