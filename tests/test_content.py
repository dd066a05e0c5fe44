from datetime import datetime, timedelta, timezone
from decimal import Decimal

from conftest import auth_headers
from core.services.geo_provider import GeoResult


def test_quote_uses_caller_country(client, services, reference):
    reference.upsert_rate("SA", Decimal("32.80"), Decimal("32.10"))
    services.geo.result = GeoResult(ip="203.0.113.7", country="Saudi Arabia", country_code="SA")

    resp = client.get("/rates/quote", params={"amount": "100"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["available"] is True
    assert body["currency"] == "SAR"
    assert Decimal(body["receive_amount"]) == Decimal("3210.00")


def test_quote_hidden_when_geo_fails(client, services, reference):
    reference.upsert_rate("US", Decimal("121"), Decimal("119"))
    services.geo.error = "timeout"

    resp = client.get("/rates/quote", params={"amount": "100"})

    assert resp.status_code == 200
    assert resp.json()["available"] is False
    assert resp.json()["company_rate"] is None


def test_quote_hidden_without_rate(client):
    resp = client.get("/rates/quote")
    assert resp.json()["available"] is False
    assert resp.json()["country_code"] == "US"


def test_my_rate(client, make_profile, reference):
    user = make_profile(country_code="GB")
    assert client.get("/rates/me", headers=auth_headers(user)).status_code == 404

    reference.upsert_rate("GB", Decimal("150.20"), Decimal("148.90"))
    resp = client.get("/rates/me", headers=auth_headers(user))
    assert resp.status_code == 200
    assert resp.json()["currency"] == "GBP"
    assert Decimal(resp.json()["company_rate"]) == Decimal("148.90")


def test_currency_lookup(client):
    assert client.get("/currency/sa").json() == {"country_code": "SA", "currency": "SAR"}
    assert client.get("/currency/ZZ").json()["currency"] == "USD"


def test_catalogs(client):
    banks = client.get("/catalog/banks").json()
    names = [b["name"] for b in banks]
    assert names == sorted(names, key=str.lower)
    brac = next(b for b in banks if b["id"] == "brac")
    assert brac["minimum_amount"] == 5000

    operators = {o["id"]: o for o in client.get("/catalog/operators").json()}
    assert operators["teletalk"]["prefixes"] == ["015"]

    bills = {b["id"]: b for b in client.get("/catalog/bills").json()}
    assert [p["id"] for p in bills["water"]["providers"]] == ["dwasa", "cwasa", "kwasa", "rwasa"]

    mfs = client.get("/catalog/mfs").json()
    assert {s["id"] for s in mfs["services"]} >= {"bkash", "nagad", "rocket"}


def test_banners_and_offers(client, conn):
    now = datetime.now(timezone.utc)
    cur = conn.cursor()
    cur.executemany(
        "INSERT INTO banners (image_url, link_url, is_active, sort_order) VALUES (?, ?, ?, ?)",
        [("/b2.png", None, 1, 2), ("/b1.png", "/offers", 1, 1), ("/off.png", None, 0, 0)],
    )
    cur.executemany(
        "INSERT INTO offers (title, description, image_url, end_date) VALUES (?, ?, ?, ?)",
        [
            ("Later", None, None, (now + timedelta(days=2)).isoformat()),
            ("Soon", "Zero fee", None, (now + timedelta(hours=1)).isoformat()),
            ("Gone", None, None, (now - timedelta(hours=1)).isoformat()),
        ],
    )

    banners = client.get("/banners").json()
    assert [b["image_url"] for b in banners] == ["/b1.png", "/b2.png"]

    offers = client.get("/offers").json()
    assert [o["title"] for o in offers] == ["Soon", "Later"]
    assert 0 < offers[0]["seconds_remaining"] <= 3600


def test_payment_accounts(client, conn, make_profile):
    user = make_profile(country_code="US")
    assert client.get("/payment-accounts/bkash", headers=auth_headers(user)).status_code == 404

    cur = conn.cursor()
    cur.executemany(
        "INSERT INTO paymentaccounts (account_type, account_name, account_number, country, is_active) "
        "VALUES (?, ?, ?, ?, ?)",
        [
            ("bkash", "Old bKash", "01711111111", None, 0),
            ("bank", "Wells Fargo", "222", "US", 1),
            ("bank", "Chase", "111", "US", 1),
            ("bank", "Barclays", "333", "GB", 1),
        ],
    )

    # неактивный, но другого нет
    bkash = client.get("/payment-accounts/bkash", headers=auth_headers(user))
    assert bkash.status_code == 200
    assert bkash.json()["account_name"] == "Old bKash"

    banks = client.get("/payment-accounts/banks", headers=auth_headers(user)).json()
    assert [b["account_name"] for b in banks] == ["Chase", "Wells Fargo"]


def test_customer_care_is_seeded(client):
    contacts = client.get("/customer-care").json()
    assert [c["method"] for c in contacts] == ["phone", "email", "chat"]


def test_offer_end_date_with_z_suffix(conn, reference):
    from core.use_cases.content_use_cases import list_active_offers

    now = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
    conn.execute(
        "INSERT INTO offers (title, description, image_url, end_date) VALUES (?, ?, ?, ?)",
        ("Ramadan", None, None, "2026-03-01T13:30:00Z"),
    )
    conn.commit()

    offers = list_active_offers(reference, now=now)

    assert [o.offer.title for o in offers] == ["Ramadan"]
    assert offers[0].seconds_remaining == 5400
