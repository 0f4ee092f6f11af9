"""
Operations API: creation, history, ownership, partial updates and deletion.
"""

from datetime import datetime
from decimal import Decimal

import pytest

from tests.conftest import auth_headers

DEPOSIT = {"operation_type": "deposit", "crypto_currency": "BTC", "crypto_amount": 0.5}

WITHDRAWAL = {
    "operation_type": "sell",
    "crypto_currency": "ETH",
    "crypto_amount": "2.5",
    "fiat_currency": "USD",
    "fiat_amount": "8000.00",
    "payment_method": "bank_card",
    "wallet_address": "4276 0000 1111 2222",
    "status": "pending",
}


@pytest.fixture
def alice(register):
    return register("alice")


@pytest.fixture
def bob(register):
    return register("bob")


def stamp(value):
    # fromisoformat before 3.11 does not read the "Z" suffix
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def create(client, user, payload):
    response = client.post("/operations", json=payload, headers=auth_headers(user["token"]))
    assert response.status_code == 201, response.text
    return response.json()["operation"]


def test_create_deposit_defaults(client, alice):
    operation = create(client, alice, DEPOSIT)

    assert operation["user_id"] == alice["user"]["user_id"]
    assert operation["operation_type"] == "deposit"
    assert operation["crypto_currency"] == "BTC"
    assert Decimal(operation["crypto_amount"]) == Decimal("0.5")
    assert operation["fiat_currency"] is None
    assert operation["fiat_amount"] is None
    assert operation["status"] == "pending"
    assert operation["created_at"] == operation["updated_at"]


def test_create_full_withdrawal(client, alice):
    operation = create(client, alice, WITHDRAWAL)
    assert operation["wallet_address"] == "4276 0000 1111 2222"
    assert Decimal(operation["fiat_amount"]) == Decimal("8000")
    assert operation["payment_method"] == "bank_card"


@pytest.mark.parametrize("missing", ["operation_type", "crypto_currency", "crypto_amount"])
def test_create_requires_type_currency_and_amount(client, alice, missing):
    payload = {k: v for k, v in DEPOSIT.items() if k != missing}
    response = client.post("/operations", json=payload, headers=auth_headers(alice["token"]))
    assert response.status_code == 400
    assert response.json()["error"] == "invalid_input"


def test_create_rejects_bad_values(client, alice):
    headers = auth_headers(alice["token"])
    assert client.post("/operations", json={**DEPOSIT, "crypto_amount": 0}, headers=headers).status_code == 400
    assert client.post("/operations", json={**DEPOSIT, "crypto_amount": "lots"}, headers=headers).status_code == 400
    assert client.post("/operations", json={**DEPOSIT, "status": "teleported"}, headers=headers).status_code == 400
    assert client.post("/operations", json={**DEPOSIT, "fiat_amount": -1}, headers=headers).status_code == 400


def test_create_rejects_values_wider_than_columns(client, alice):
    headers = auth_headers(alice["token"])
    too_wide = [
        {"crypto_amount": "0.123456789123"},
        {"crypto_amount": "1234567890123.5"},
        {"fiat_amount": "10.123"},
        {"fiat_amount": "1234567890123456789.5"},
        {"crypto_currency": "X" * 51},
        {"operation_type": "d" * 51},
        {"fiat_currency": "U" * 51},
        {"payment_method": "p" * 101},
        {"wallet_address": "w" * 256},
        {"status": "s" * 51},
    ]
    for overrides in too_wide:
        response = client.post("/operations", json={**DEPOSIT, **overrides}, headers=headers)
        assert response.status_code == 400, overrides
        assert response.json()["error"] == "invalid_input"

    assert client.get("/operations", headers=headers).json()["count"] == 0


def test_create_accepts_values_at_column_limits(client, alice):
    operation = create(
        client,
        alice,
        {**WITHDRAWAL, "crypto_amount": "0.12345678", "fiat_amount": "10.99", "wallet_address": "w" * 255},
    )
    assert Decimal(operation["crypto_amount"]) == Decimal("0.12345678")
    assert Decimal(operation["fiat_amount"]) == Decimal("10.99")
    assert len(operation["wallet_address"]) == 255


def test_timestamps_carry_utc_offset(client, alice):
    operation = create(client, alice, DEPOSIT)
    for key in ("created_at", "updated_at"):
        assert operation[key].endswith(("Z", "+00:00")), operation[key]
        assert stamp(operation[key]).utcoffset().total_seconds() == 0

    listed = client.get("/operations", headers=auth_headers(alice["token"])).json()["operations"][0]
    assert listed["created_at"] == operation["created_at"]


def test_owner_comes_from_token_not_body(client, alice, bob):
    operation = create(client, alice, {**DEPOSIT, "user_id": bob["user"]["user_id"]})
    assert operation["user_id"] == alice["user"]["user_id"]


def test_unauthenticated_create_does_nothing(client, alice):
    response = client.post("/operations", json=DEPOSIT)
    assert response.status_code == 401

    response = client.post("/operations", json=DEPOSIT, headers=auth_headers("garbage"))
    assert response.status_code == 401

    listing = client.get("/operations", headers=auth_headers(alice["token"])).json()
    assert listing["count"] == 0


def test_list_requires_token(client):
    assert client.get("/operations").status_code == 401


def test_list_newest_first_with_summary(client, alice, bob):
    first = create(client, alice, DEPOSIT)
    second = create(client, alice, DEPOSIT)
    third = create(client, alice, {**WITHDRAWAL, "operation_type": "withdrawal"})
    create(client, bob, DEPOSIT)

    body = client.get("/operations", headers=auth_headers(alice["token"])).json()

    assert body["count"] == 3
    ids = [op["operation_id"] for op in body["operations"]]
    assert ids == [third["operation_id"], second["operation_id"], first["operation_id"]]
    assert body["summary"]["total_operations"] == 3
    assert body["summary"]["by_type"] == {"deposit": 2, "withdrawal": 1}
    assert body["summary"]["by_status"] == {"pending": 3}


def test_get_own_operation(client, alice):
    operation = create(client, alice, DEPOSIT)
    response = client.get(f"/operations/{operation['operation_id']}", headers=auth_headers(alice["token"]))
    assert response.status_code == 200
    assert response.json()["operation"] == operation


def test_foreign_operation_is_not_found(client, alice, bob):
    operation = create(client, alice, DEPOSIT)
    path = f"/operations/{operation['operation_id']}"
    headers = auth_headers(bob["token"])

    for response in (
        client.get(path, headers=headers),
        client.put(path, json={"status": "cancelled"}, headers=headers),
        client.delete(path, headers=headers),
    ):
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    # Untouched for its owner
    still_there = client.get(path, headers=auth_headers(alice["token"])).json()["operation"]
    assert still_there == operation


def test_foreign_and_missing_look_the_same(client, alice, bob):
    operation = create(client, alice, DEPOSIT)
    headers = auth_headers(bob["token"])
    foreign = client.get(f"/operations/{operation['operation_id']}", headers=headers)
    missing = client.get("/operations/999999", headers=headers)
    assert foreign.status_code == missing.status_code == 404
    assert foreign.json() == missing.json()


def test_update_status_only(client, alice):
    operation = create(client, alice, WITHDRAWAL)
    response = client.put(
        f"/operations/{operation['operation_id']}",
        json={"status": "completed"},
        headers=auth_headers(alice["token"]),
    )
    assert response.status_code == 200
    updated = response.json()["operation"]

    assert updated["status"] == "completed"
    for key in ("operation_type", "crypto_currency", "crypto_amount", "fiat_currency",
                "fiat_amount", "payment_method", "wallet_address", "created_at", "user_id"):
        assert updated[key] == operation[key], key
    assert stamp(updated["updated_at"]) > stamp(operation["updated_at"])


def test_update_amount_and_method(client, alice):
    operation = create(client, alice, WITHDRAWAL)
    updated = client.put(
        f"/operations/{operation['operation_id']}",
        json={"crypto_amount": "3.25", "payment_method": "paypal"},
        headers=auth_headers(alice["token"]),
    ).json()["operation"]
    assert Decimal(updated["crypto_amount"]) == Decimal("3.25")
    assert updated["payment_method"] == "paypal"
    assert updated["status"] == "pending"


def test_update_rejects_values_wider_than_columns(client, alice):
    operation = create(client, alice, WITHDRAWAL)
    path = f"/operations/{operation['operation_id']}"
    headers = auth_headers(alice["token"])

    for payload in ({"crypto_amount": "0.123456789123"}, {"fiat_amount": "1.999"}, {"wallet_address": "w" * 256}):
        response = client.put(path, json=payload, headers=headers)
        assert response.status_code == 400, payload

    assert client.get(path, headers=headers).json()["operation"] == operation


def test_update_rejects_unknown_empty_and_null_required(client, alice):
    operation = create(client, alice, DEPOSIT)
    path = f"/operations/{operation['operation_id']}"
    headers = auth_headers(alice["token"])

    for payload in ({"user_id": 42}, {"operation_id": 1}, {}, {"operation_type": None}, {"status": "lost"}):
        response = client.put(path, json=payload, headers=headers)
        assert response.status_code == 400, payload
        assert response.json()["error"] == "invalid_input"

    assert client.get(path, headers=headers).json()["operation"] == operation


def test_delete_returns_last_state(client, alice):
    operation = create(client, alice, DEPOSIT)
    path = f"/operations/{operation['operation_id']}"
    headers = auth_headers(alice["token"])

    response = client.delete(path, headers=headers)
    assert response.status_code == 200
    assert response.json()["operation"] == operation

    assert client.get(path, headers=headers).status_code == 404
    assert client.delete(path, headers=headers).status_code == 404


def test_delete_missing_is_not_found(client, alice):
    response = client.delete("/operations/424242", headers=auth_headers(alice["token"]))
    assert response.status_code == 404


@pytest.mark.parametrize("operation_id", ["99999999999999999999", "2147483648", "0", "-1"])
def test_out_of_range_id_is_not_found(client, alice, operation_id):
    create(client, alice, DEPOSIT)
    path = f"/operations/{operation_id}"
    headers = auth_headers(alice["token"])

    for response in (
        client.get(path, headers=headers),
        client.put(path, json={"status": "cancelled"}, headers=headers),
        client.delete(path, headers=headers),
    ):
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"
