from conftest import PASSWORD, PIN, auth_headers, basic_auth
from core.services.geo_provider import GeoResult

EMAIL = "nadia@remitmail.com"


def start_signup(client, email=EMAIL):
    return client.post("/auth/signup/otp", json={"email": email, "first_name": "Nadia", "last_name": "Islam"})


def upload_kyc(client, kind, email=EMAIL):
    return client.post(
        "/auth/signup/kyc",
        data={"email": email, "kind": kind},
        files={"file": (f"{kind}.png", b"\x89PNG....", "image/png")},
    )


def start_signup_with_kyc(client, email=EMAIL):
    assert start_signup(client, email).status_code == 202
    assert upload_kyc(client, "selfie", email).status_code == 201
    assert upload_kyc(client, "document", email).status_code == 201


def verify_signup(client, services, email=EMAIL, **overrides):
    payload = {
        "email": email,
        "code": services.otp.last_code(email),
        "password": PASSWORD,
        "pin": PIN,
    }
    payload.update(overrides)
    return client.post("/auth/signup/verify", json=payload)


def test_signup_flow_creates_profile_with_bonus(client, services):
    assert start_signup(client).status_code == 202
    assert services.otp.sent[-1][2] == "signup"

    selfie = upload_kyc(client, "selfie")
    assert selfie.status_code == 201, selfie.text
    selfie_url = selfie.json()["url"]
    assert selfie_url.startswith("/storage/kyc/")
    doc_url = upload_kyc(client, "document").json()["url"]

    resp = verify_signup(client, services)

    assert resp.status_code == 201, resp.text
    body = resp.json()
    profile = body["profile"]
    assert profile["email"] == EMAIL
    assert profile["first_name"] == "Nadia"
    assert profile["balance_cents"] == 10_000
    assert profile["country_code"] == "US"
    assert profile["currency"] == "USD"
    assert profile["selfie_url"] == selfie_url
    assert profile["doc_url"] == doc_url

    me = client.get("/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == 200
    assert me.json()["id"] == profile["id"]


def test_signup_rejects_existing_email(client, make_profile):
    make_profile(email=EMAIL)
    resp = start_signup(client)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "User with this email already exists"


def test_signup_blocked_behind_vpn(client, services, profiles):
    start_signup_with_kyc(client)
    services.geo.result = GeoResult(ip="198.51.100.1", country="Netherlands", country_code="NL", is_vpn=True)

    resp = verify_signup(client, services)

    assert resp.status_code == 403
    assert "VPN" in resp.json()["detail"]
    assert profiles.get_by_email(EMAIL) is None


def test_signup_continues_when_geo_lookup_fails(client, services):
    start_signup_with_kyc(client)
    services.geo.error = "VPN API rate limit exceeded"

    resp = verify_signup(client, services)

    assert resp.status_code == 201
    assert resp.json()["profile"]["country_code"] is None
    assert resp.json()["profile"]["currency"] == "USD"


def test_signup_uses_forwarded_ip(client, services):
    start_signup_with_kyc(client)
    verify_signup_payload = {
        "email": EMAIL, "code": services.otp.last_code(EMAIL), "password": PASSWORD, "pin": PIN,
    }
    client.post("/auth/signup/verify", json=verify_signup_payload,
                headers={"X-Forwarded-For": "192.0.2.10, 10.0.0.1"})
    assert services.geo.calls[-1] == "192.0.2.10"


def test_wrong_code_counts_attempts(client, services, monkeypatch):
    from config.settings import settings
    monkeypatch.setattr(settings, "OTP_MAX_ATTEMPTS", 2)
    start_signup_with_kyc(client)
    good = services.otp.last_code(EMAIL)
    bad = "000000" if good != "000000" else "111111"

    assert verify_signup(client, services, code=bad).status_code == 400
    assert verify_signup(client, services, code=bad).status_code == 400
    locked = verify_signup(client, services, code=good)
    assert locked.status_code == 400
    assert "Too many attempts" in locked.json()["detail"]


def test_code_cannot_be_reused(client, services):
    start_signup_with_kyc(client)
    assert verify_signup(client, services).status_code == 201
    again = verify_signup(client, services)
    assert again.status_code == 400


def test_password_and_pin_format(client, services):
    start_signup(client)
    assert verify_signup(client, services, password="abcdefgh").status_code == 400
    assert verify_signup(client, services, password="1234567").status_code == 400
    assert verify_signup(client, services, pin="12a4").status_code == 400


def test_kyc_upload_requires_started_signup(client):
    resp = client.post(
        "/auth/signup/kyc",
        data={"email": "nobody@remitmail.com", "kind": "document"},
        files={"file": ("doc.png", b"\x89PNG", "image/png")},
    )
    assert resp.status_code == 400


def test_login_with_basic_auth(client, user):
    resp = client.post("/login", headers=basic_auth(user.email, PASSWORD))
    assert resp.status_code == 200
    assert resp.json()["token_type"] == "bearer"

    wrong = client.post("/login", headers=basic_auth(user.email, "00000000"))
    assert wrong.status_code == 401
    assert wrong.json()["detail"] == "Invalid email or password. Please try again."


def test_me_requires_valid_token(client):
    assert client.get("/me").status_code == 401
    assert client.get("/me", headers={"Authorization": "Bearer garbage"}).status_code == 401


def test_password_reset(client, services, user):
    assert client.post("/auth/password-reset/otp", json={"email": user.email}).status_code == 202
    code = services.otp.last_code(user.email)

    verified = client.post("/auth/password-reset/verify", json={"email": user.email, "code": code})
    assert verified.status_code == 200
    reset_token = verified.json()["reset_token"]

    # токен сброса не подходит для API
    assert client.get("/me", headers={"Authorization": f"Bearer {reset_token}"}).status_code == 401

    done = client.post("/auth/password-reset", json={"reset_token": reset_token, "new_password": "87654321"})
    assert done.status_code == 200

    assert client.post("/login", headers=basic_auth(user.email, "87654321")).status_code == 200
    assert client.post("/login", headers=basic_auth(user.email, PASSWORD)).status_code == 401


def test_password_reset_unknown_email(client):
    resp = client.post("/auth/password-reset/otp", json={"email": "ghost@remitmail.com"})
    assert resp.status_code == 404
    assert resp.json()["detail"] == "No account found for this email"


def test_password_reset_with_bad_token(client):
    resp = client.post("/auth/password-reset", json={"reset_token": "nope", "new_password": "87654321"})
    assert resp.status_code == 401


def test_change_pin(client, user):
    headers = auth_headers(user)
    wrong = client.post("/me/pin", json={"current_pin": "0000", "new_pin": "4321"}, headers=headers)
    assert wrong.status_code == 403

    ok = client.post("/me/pin", json={"current_pin": PIN, "new_pin": "4321"}, headers=headers)
    assert ok.status_code == 200

    transfer = client.post("/transfers/recharge", json={
        "operator": "robi", "phone": "01812345678", "amount": "50", "pin": PIN,
    }, headers=headers)
    assert transfer.status_code == 403


def test_signup_requires_both_kyc_images(client, services, profiles):
    start_signup(client)
    upload_kyc(client, "selfie")

    resp = verify_signup(client, services)

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Please upload both your selfie and ID document"
    assert profiles.get_by_email(EMAIL) is None

    # код не сгорел, после загрузки документа регистрация проходит
    upload_kyc(client, "document")
    assert verify_signup(client, services).status_code == 201


def test_signup_ignores_client_supplied_kyc_urls(client, services):
    start_signup_with_kyc(client)

    resp = verify_signup(client, services, selfie_url="http://elsewhere.example/x.png", doc_url=None)

    assert resp.status_code == 201
    profile = resp.json()["profile"]
    assert profile["selfie_url"].startswith("/storage/kyc/")
    assert profile["doc_url"].startswith("/storage/kyc/")


def test_otp_is_stored_keyed(client, services, otps):
    import hashlib
    import hmac
    from config.settings import settings

    start_signup(client)
    code = services.otp.last_code(EMAIL)
    stored = otps.latest_challenge(EMAIL, "signup").code_hash

    assert stored != hashlib.sha256(f"{EMAIL}:{code}".encode()).hexdigest()
    expected = hmac.new(settings.SECRET_KEY.encode(), f"{EMAIL}:{code}".encode(), hashlib.sha256).hexdigest()
    assert stored == expected
