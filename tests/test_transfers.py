from conftest import PIN, auth_headers


def mobile_banking(amount="1000", pin=PIN, **overrides):
    payload = {
        "mfs_service": "bkash",
        "phone": "017-1234-5678",
        "account_type": "personal",
        "amount": amount,
        "pin": pin,
    }
    payload.update(overrides)
    return payload


def test_mobile_banking_debits_amount_and_commission(client, make_profile, profiles):
    user = make_profile(balance_cents=200_000)

    resp = client.post("/transfers/mobile-banking", json=mobile_banking(), headers=auth_headers(user))

    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["type"] == "mobile_banking"
    assert body["status"] == "pending"
    assert body["amount_cents"] == 100_000
    assert body["commission_cents"] == 2_500
    assert body["balance_after"] == 97_500
    assert body["display_type"] == "Mobile Banking - Bkash"
    assert body["details"] == {
        "mfs_service": "bkash",
        "account_type": "personal",
        "recipient_account_number": "01712345678",
    }
    assert profiles.get_by_id(user.id).balance_cents == 97_500


def test_insufficient_balance_leaves_balance_unchanged(client, make_profile, profiles, ledger):
    user = make_profile(balance_cents=100_000)

    resp = client.post("/transfers/mobile-banking", json=mobile_banking(), headers=auth_headers(user))

    assert resp.status_code == 402
    detail = resp.json()["detail"]
    assert "Total required: 1025.00 USD" in detail
    assert "Shortfall: 25.00 USD" in detail
    assert profiles.get_by_id(user.id).balance_cents == 100_000
    assert ledger.list_transactions(user.id) == []


def test_wrong_pin_is_rejected_before_debit(client, make_profile, profiles):
    user = make_profile(balance_cents=200_000)

    resp = client.post("/transfers/mobile-banking", json=mobile_banking(pin="9999"), headers=auth_headers(user))

    assert resp.status_code == 403
    assert resp.json()["detail"] == "Invalid PIN. Please try again."
    assert profiles.get_by_id(user.id).balance_cents == 200_000


def test_pin_must_be_four_digits(client, user):
    resp = client.post("/transfers/mobile-banking", json=mobile_banking(pin="12"), headers=auth_headers(user))
    assert resp.status_code == 400


def test_idempotency_key_replays_the_same_transaction(client, make_profile, profiles, ledger):
    user = make_profile(balance_cents=500_000)
    headers = {**auth_headers(user), "Idempotency-Key": "send-42"}

    first = client.post("/transfers/mobile-banking", json=mobile_banking(), headers=headers)
    second = client.post("/transfers/mobile-banking", json=mobile_banking(), headers=headers)

    assert first.status_code == 201
    assert second.status_code == 201
    assert first.json()["id"] == second.json()["id"]
    assert profiles.get_by_id(user.id).balance_cents == 500_000 - 102_500
    assert len(ledger.list_transactions(user.id)) == 1


def test_idempotency_key_reused_for_different_transfer(client, make_profile, profiles, ledger):
    user = make_profile(balance_cents=500_000)
    headers = {**auth_headers(user), "Idempotency-Key": "send-43"}

    first = client.post("/transfers/mobile-banking", json=mobile_banking(), headers=headers)
    other_amount = client.post("/transfers/mobile-banking", json=mobile_banking(amount="2000"), headers=headers)
    other_type = client.post("/transfers/recharge", json={
        "operator": "grameenphone", "phone": "01712345678", "amount": "1000", "pin": PIN,
    }, headers=headers)

    assert first.status_code == 201
    assert other_amount.status_code == 400
    assert other_amount.json()["detail"] == "Idempotency key was already used for a different transaction"
    assert other_type.status_code == 400
    assert profiles.get_by_id(user.id).balance_cents == 500_000 - 102_500
    assert len(ledger.list_transactions(user.id)) == 1


def test_mobile_banking_validation(client, user):
    headers = auth_headers(user)
    cases = [
        mobile_banking(mfs_service="paypal"),
        mobile_banking(phone="01712"),
        mobile_banking(account_type="business"),
        mobile_banking(amount="150"),
        mobile_banking(amount="250.50"),
    ]
    for payload in cases:
        resp = client.post("/transfers/mobile-banking", json=payload, headers=headers)
        assert resp.status_code == 400, payload


def test_amount_with_too_many_decimals_is_rejected(client, user):
    resp = client.post("/transfers/mobile-banking", json=mobile_banking(amount="250.123"),
                       headers=auth_headers(user))
    assert resp.status_code == 422


def test_bank_transfer_minimum_depends_on_bank(client, make_profile):
    user = make_profile(balance_cents=10_000_000)
    headers = auth_headers(user)
    base = {"account_number": "1234567890", "account_name": "Karim Ahmed", "pin": PIN}

    too_small = client.post("/transfers/bank", json={**base, "bank_id": "brac", "amount": "4999"}, headers=headers)
    assert too_small.status_code == 400
    assert "5,000" in too_small.json()["detail"]

    non_bkash = client.post("/transfers/bank", json={**base, "bank_id": "hsbc", "amount": "5000"}, headers=headers)
    assert non_bkash.status_code == 400
    assert "25,000" in non_bkash.json()["detail"]

    ok = client.post("/transfers/bank", json={**base, "bank_id": "brac", "amount": "5000"}, headers=headers)
    assert ok.status_code == 201, ok.text
    assert ok.json()["details"]["bank_name"] == "BRAC Bank"
    assert ok.json()["display_type"] == "Bank Transfer - BRAC Bank"


def test_bank_transfer_unknown_bank(client, user):
    resp = client.post("/transfers/bank", json={
        "bank_id": "nope", "account_number": "1", "account_name": "A", "amount": "50000", "pin": PIN,
    }, headers=auth_headers(user))
    assert resp.status_code == 400


def test_recharge_checks_operator_prefix(client, user):
    headers = auth_headers(user)
    payload = {"operator": "grameenphone", "phone": "01712345678", "amount": "50", "pin": PIN}

    resp = client.post("/transfers/recharge", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    assert resp.json()["details"] == {"operator": "grameenphone", "phone": "01712345678"}
    assert resp.json()["commission_cents"] == 125

    wrong_prefix = client.post("/transfers/recharge", json={**payload, "phone": "01812345678"}, headers=headers)
    assert wrong_prefix.status_code == 400
    assert "017, 013" in wrong_prefix.json()["detail"]

    not_bd = client.post("/transfers/recharge", json={**payload, "phone": "02712345678"}, headers=headers)
    assert not_bd.status_code == 400


def test_pay_bill(client, user):
    headers = auth_headers(user)
    payload = {"bill_type": "electricity", "biller": "desco", "account_number": "556677",
               "amount": "150.50", "pin": PIN}

    resp = client.post("/transfers/bill", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    assert resp.json()["details"] == {
        "bill_type": "electricity", "provider": "DESCO", "bill_account_number": "556677",
    }

    low = client.post("/transfers/bill", json={**payload, "amount": "99"}, headers=headers)
    assert low.status_code == 400
    assert low.json()["detail"] == "Minimum bill amount is 100 BDT"

    wrong_biller = client.post("/transfers/bill", json={**payload, "biller": "titas"}, headers=headers)
    assert wrong_biller.status_code == 400


def test_transfers_require_auth(client):
    resp = client.post("/transfers/mobile-banking", json=mobile_banking())
    assert resp.status_code == 401


def test_history_merges_deposits_and_transactions(client, make_profile, ledger):
    user = make_profile(balance_cents=500_000)
    ledger.create_deposit(user_id=user.id, deposit_type="gift_card", amount_cents=10_000,
                          amount_to_add_cents=10_000, bank_id=None, receipt_url="/storage/r.png")
    client.post("/transfers/mobile-banking", json=mobile_banking(), headers=auth_headers(user))

    resp = client.get("/transactions", headers=auth_headers(user))

    assert resp.status_code == 200
    items = resp.json()
    assert [i["item_type"] for i in items] == ["transaction", "deposit"]
    assert items[1]["display_type"] == "Gift Card Deposit"

    limited = client.get("/transactions", params={"limit": 1, "offset": 1}, headers=auth_headers(user))
    assert [i["item_type"] for i in limited.json()] == ["deposit"]
