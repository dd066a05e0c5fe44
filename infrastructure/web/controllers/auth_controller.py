from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from pydantic import BaseModel, EmailStr, Field

from config.settings import settings
from core.entities.currency import currency_for_country
from core.entities.profile import Profile
from core.errors import AuthError
from core.use_cases import auth_use_cases as auth
from infrastructure.db.sqlite import SQLiteProfileRepository, SQLiteOtpRepository
from core.services.geo_provider import GeoProvider
from core.services.object_storage import ObjectStorage
from core.services.otp_sender import OtpSender
from infrastructure.web.dependencies import (
    RESET_SCOPE, create_access_token, create_reset_token, decode_token, get_client_ip,
    get_current_user, get_geo_provider, get_otp_repo, get_otp_sender, get_profile_repo,
    get_storage, to_http_error,
)

router = APIRouter(prefix="", tags=["auth"])

basic_security = HTTPBasic()


class ProfileResponse(BaseModel):
    id: int
    email: EmailStr
    first_name: str
    last_name: str
    country: Optional[str] = None
    country_code: Optional[str] = None
    currency: str
    balance_cents: int
    selfie_url: Optional[str] = None
    doc_url: Optional[str] = None
    is_admin: bool
    created_at: str


def profile_response(user: Profile) -> ProfileResponse:
    return ProfileResponse(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        country=user.country,
        country_code=user.country_code,
        currency=currency_for_country(user.country_code, settings.DEFAULT_CURRENCY),
        balance_cents=user.balance_cents,
        selfie_url=user.selfie_url,
        doc_url=user.doc_url,
        is_admin=user.is_admin,
        created_at=user.created_at,
    )


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class MessageResponse(BaseModel):
    message: str


class SignupStartRequest(BaseModel):
    email: EmailStr
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)


class SignupVerifyRequest(BaseModel):
    email: EmailStr
    code: str
    password: str = Field(..., description="8 цифр")
    pin: str = Field(..., description="4 цифры")


class SignupResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    profile: ProfileResponse


class KycUploadResponse(BaseModel):
    url: str


class EmailRequest(BaseModel):
    email: EmailStr


class ResetVerifyRequest(BaseModel):
    email: EmailStr
    code: str


class ResetTokenResponse(BaseModel):
    reset_token: str


class ResetPasswordRequest(BaseModel):
    reset_token: str
    new_password: str


class PinChangeRequest(BaseModel):
    current_pin: str
    new_pin: str


@router.post("/auth/signup/otp", response_model=MessageResponse, status_code=202)
def signup_otp(
    payload: SignupStartRequest,
    profiles: SQLiteProfileRepository = Depends(get_profile_repo),
    otps: SQLiteOtpRepository = Depends(get_otp_repo),
    sender: OtpSender = Depends(get_otp_sender),
):
    try:
        auth.start_signup(profiles, otps, sender, payload.email, payload.first_name, payload.last_name)
    except ValueError as e:
        raise to_http_error(e)
    return MessageResponse(message="Verification code sent")


@router.post("/auth/signup/kyc", response_model=KycUploadResponse, status_code=201)
def signup_kyc(
    email: str = Form(...),
    kind: str = Form(...),
    file: UploadFile = File(...),
    otps: SQLiteOtpRepository = Depends(get_otp_repo),
    storage: ObjectStorage = Depends(get_storage),
):
    data = file.file.read()
    try:
        url = auth.upload_kyc_image(otps, storage, email, kind, data, file.content_type, file.filename)
    except ValueError as e:
        raise to_http_error(e)
    return KycUploadResponse(url=url)


@router.post("/auth/signup/verify", response_model=SignupResponse, status_code=201)
def signup_verify(
    payload: SignupVerifyRequest,
    ip: str = Depends(get_client_ip),
    profiles: SQLiteProfileRepository = Depends(get_profile_repo),
    otps: SQLiteOtpRepository = Depends(get_otp_repo),
    geo: GeoProvider = Depends(get_geo_provider),
):
    try:
        user = auth.complete_signup(
            profiles, otps, geo,
            email=payload.email,
            code=payload.code,
            password=payload.password,
            pin=payload.pin,
            ip=ip,
        )
    except ValueError as e:
        raise to_http_error(e)
    token = create_access_token({"sub": str(user.id)})
    return SignupResponse(access_token=token, profile=profile_response(user))


@router.post("/login", response_model=TokenResponse)
def login(
    credentials: HTTPBasicCredentials = Depends(basic_security),
    repo: SQLiteProfileRepository = Depends(get_profile_repo),
):
    user = auth.authenticate_user(repo, email=credentials.username, password=credentials.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password. Please try again.",
            headers={"WWW-Authenticate": "Basic"},
        )
    token = create_access_token({"sub": str(user.id)})
    return TokenResponse(access_token=token)


@router.get("/me", response_model=ProfileResponse)
def get_profile(current_user: Profile = Depends(get_current_user)):
    return profile_response(current_user)


@router.post("/me/pin", response_model=MessageResponse)
def change_pin(
    payload: PinChangeRequest,
    current_user: Profile = Depends(get_current_user),
    repo: SQLiteProfileRepository = Depends(get_profile_repo),
):
    try:
        auth.change_pin(repo, current_user, payload.current_pin, payload.new_pin)
    except ValueError as e:
        raise to_http_error(e)
    return MessageResponse(message="PIN updated")


@router.post("/auth/password-reset/otp", response_model=MessageResponse, status_code=202)
def password_reset_otp(
    payload: EmailRequest,
    profiles: SQLiteProfileRepository = Depends(get_profile_repo),
    otps: SQLiteOtpRepository = Depends(get_otp_repo),
    sender: OtpSender = Depends(get_otp_sender),
):
    try:
        auth.start_password_reset(profiles, otps, sender, payload.email)
    except ValueError as e:
        raise to_http_error(e)
    return MessageResponse(message="Reset code sent")


@router.post("/auth/password-reset/verify", response_model=ResetTokenResponse)
def password_reset_verify(
    payload: ResetVerifyRequest,
    otps: SQLiteOtpRepository = Depends(get_otp_repo),
):
    try:
        email = auth.verify_password_reset(otps, payload.email, payload.code)
    except ValueError as e:
        raise to_http_error(e)
    return ResetTokenResponse(reset_token=create_reset_token(email))


@router.post("/auth/password-reset", response_model=MessageResponse)
def password_reset(
    payload: ResetPasswordRequest,
    profiles: SQLiteProfileRepository = Depends(get_profile_repo),
):
    try:
        email = decode_token(payload.reset_token, RESET_SCOPE)
    except AuthError:
        raise to_http_error(AuthError("Session expired. Please start the password reset process again."))
    try:
        auth.reset_password(profiles, email, payload.new_password)
    except ValueError as e:
        raise to_http_error(e)
    return MessageResponse(message="Password reset successful! Please sign in with your new password.")
