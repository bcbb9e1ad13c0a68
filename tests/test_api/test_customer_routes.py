"""Tests for registration, login and the customer profile."""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import uuid4

import pytest
from httpx import AsyncClient

from tariff_funnel.errors import EmailAlreadyRegisteredError
from tariff_funnel.services.auth import create_access_token
from tariff_funnel.state.customers import CustomerStore
from tariff_funnel.state.manager import DatabaseManager

TEST_PASSWORD = "SecurePass123!"


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.mark.asyncio
async def test_register_returns_customer_and_token(
    test_client: AsyncClient, sample_registration: dict[str, Any]
) -> None:
    response = await test_client.post("/api/v1/auth/register", json=sample_registration)

    assert response.status_code == 201
    body = response.json()
    assert body["erfolg"] is True
    assert body["daten"]["customer"]["email"] == "anna.schmidt@beispiel.de"
    assert body["daten"]["customer"]["newsletter_consent"] is True
    assert "password_hash" not in body["daten"]["customer"]
    assert body["daten"]["token"]


@pytest.mark.asyncio
async def test_register_duplicate_email(
    test_client: AsyncClient, sample_registration: dict[str, Any]
) -> None:
    await test_client.post("/api/v1/auth/register", json=sample_registration)

    duplicate = await test_client.post(
        "/api/v1/auth/register",
        json={**sample_registration, "email": "Anna.Schmidt@beispiel.de"},
    )

    assert duplicate.status_code == 409
    assert duplicate.json()["fehlerCode"] == "EMAIL_ALREADY_REGISTERED"


@pytest.mark.asyncio
async def test_register_password_mismatch(
    test_client: AsyncClient, sample_registration: dict[str, Any]
) -> None:
    response = await test_client.post(
        "/api/v1/auth/register",
        json={**sample_registration, "passwortBestaetigung": "Different123!"},
    )

    assert response.status_code == 400
    messages = [error["nachricht"] for error in response.json()["fehler"]]
    assert "Passwörter stimmen nicht überein" in messages


@pytest.mark.asyncio
@pytest.mark.parametrize(("field", "value"), [("plz", "123"), ("email", "keine-email")])
async def test_register_rejects_invalid_fields(
    test_client: AsyncClient, sample_registration: dict[str, Any], field: str, value: str
) -> None:
    response = await test_client.post(
        "/api/v1/auth/register", json={**sample_registration, field: value}
    )

    assert response.status_code == 400
    assert field in [error["feld"] for error in response.json()["fehler"]]


@pytest.mark.asyncio
async def test_login(test_client: AsyncClient, sample_registration: dict[str, Any]) -> None:
    await test_client.post("/api/v1/auth/register", json=sample_registration)

    response = await test_client.post(
        "/api/v1/auth/login",
        json={"email": "ANNA.SCHMIDT@beispiel.de", "passwort": TEST_PASSWORD},
    )

    assert response.status_code == 200
    assert response.json()["daten"]["customer"]["last_login"] is not None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("email", "password"),
    [
        ("anna.schmidt@beispiel.de", "WrongPass123!"),
        ("niemand@beispiel.de", TEST_PASSWORD),
    ],
)
async def test_login_with_bad_credentials(
    test_client: AsyncClient, sample_registration: dict[str, Any], email: str, password: str
) -> None:
    await test_client.post("/api/v1/auth/register", json=sample_registration)

    response = await test_client.post(
        "/api/v1/auth/login", json={"email": email, "passwort": password}
    )

    assert response.status_code == 401
    assert response.json()["fehlerCode"] == "INVALID_CREDENTIALS"


@pytest.mark.asyncio
async def test_login_to_deactivated_account(
    test_client: AsyncClient, sample_registration: dict[str, Any], database: DatabaseManager
) -> None:
    await test_client.post("/api/v1/auth/register", json=sample_registration)
    async with database.session() as session:
        store = CustomerStore(session)
        record = await store.get_by_email(sample_registration["email"])
        await store.update(record, {"is_active": False})

    response = await test_client.post(
        "/api/v1/auth/login",
        json={"email": sample_registration["email"], "passwort": TEST_PASSWORD},
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_profile_requires_token(test_client: AsyncClient) -> None:
    missing = await test_client.get("/api/v1/kunden/profil")
    garbage = await test_client.get("/api/v1/kunden/profil", headers=bearer("not-a-jwt"))
    expired = await test_client.get(
        "/api/v1/kunden/profil",
        headers=bearer(create_access_token(uuid4(), "x@beispiel.de", timedelta(minutes=-5))),
    )

    assert missing.status_code == 401
    assert missing.json()["fehlerCode"] == "NOT_AUTHENTICATED"
    assert garbage.json()["fehlerCode"] == "TOKEN_INVALID"
    assert expired.json()["fehlerCode"] == "TOKEN_EXPIRED"


@pytest.mark.asyncio
async def test_get_and_update_profile(test_client: AsyncClient, auth_token: str) -> None:
    profile = await test_client.get("/api/v1/kunden/profil", headers=bearer(auth_token))
    assert profile.json()["daten"]["city"] == "Berlin"

    updated = await test_client.put(
        "/api/v1/kunden/profil",
        headers=bearer(auth_token),
        json={"stadt": "Potsdam", "plz": "14467", "marketingEinverstaendnis": True},
    )

    assert updated.status_code == 200
    data = updated.json()["daten"]
    assert data["city"] == "Potsdam"
    assert data["plz"] == "14467"
    assert data["marketing_consent"] is True
    # Untouched fields stay
    assert data["street"] == "Chausseestraße"


@pytest.mark.asyncio
async def test_delete_account_removes_contracts_and_pricing_records(
    test_client: AsyncClient, auth_token: str, database: DatabaseManager
) -> None:
    draft = await test_client.post(
        "/api/v1/vertraege/entwuerfe",
        headers=bearer(auth_token),
        json={"tarifId": "basic", "jahresverbrauch": 3275},
    )
    assert draft.status_code == 201

    deleted = await test_client.delete("/api/v1/kunden/konto-loeschen", headers=bearer(auth_token))
    assert deleted.status_code == 200

    counts = await database.table_counts()
    assert counts["customers"] == 0
    assert counts["contracts"] == 0
    assert counts["pricing_data"] == 0

    again = await test_client.get("/api/v1/kunden/profil", headers=bearer(auth_token))
    assert again.status_code == 404


@pytest.mark.asyncio
async def test_concurrent_registration_with_same_email(
    test_client: AsyncClient, sample_registration: dict[str, Any]
) -> None:
    responses = await asyncio.gather(
        test_client.post("/api/v1/auth/register", json=sample_registration),
        test_client.post("/api/v1/auth/register", json=sample_registration),
    )

    assert sorted(response.status_code for response in responses) == [201, 409]
    conflict = next(response for response in responses if response.status_code == 409)
    assert conflict.json()["fehlerCode"] == "EMAIL_ALREADY_REGISTERED"


@pytest.mark.asyncio
async def test_store_maps_unique_email_violation(
    test_client: AsyncClient, sample_registration: dict[str, Any], database: DatabaseManager
) -> None:
    await test_client.post("/api/v1/auth/register", json=sample_registration)

    with pytest.raises(EmailAlreadyRegisteredError):
        async with database.session() as session:
            await CustomerStore(session).create(
                email="ANNA.SCHMIDT@beispiel.de",
                first_name="Anna",
                last_name="Schmidt",
                street="Chausseestraße",
                house_number="12a",
                plz="10115",
                city="Berlin",
            )

    counts = await database.table_counts()
    assert counts["customers"] == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["vorname", "strasse", "plz", "marketingEinverstaendnis"])
async def test_update_profile_rejects_null(
    test_client: AsyncClient, auth_token: str, field: str
) -> None:
    response = await test_client.put(
        "/api/v1/kunden/profil", headers=bearer(auth_token), json={field: None}
    )

    assert response.status_code == 400
    errors = response.json()["fehler"]
    assert errors[0]["feld"] == field
    assert errors[0]["nachricht"] == "Feld darf nicht leer sein"


@pytest.mark.asyncio
async def test_update_profile_rejects_empty_street(
    test_client: AsyncClient, auth_token: str
) -> None:
    response = await test_client.put(
        "/api/v1/kunden/profil", headers=bearer(auth_token), json={"strasse": ""}
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_deactivated_account_token_is_refused(
    test_client: AsyncClient, auth_token: str, database: DatabaseManager
) -> None:
    async with database.session() as session:
        store = CustomerStore(session)
        record = await store.get_by_email("anna.schmidt@beispiel.de")
        await store.update(record, {"is_active": False})

    response = await test_client.get("/api/v1/kunden/profil", headers=bearer(auth_token))

    assert response.status_code == 403
    assert response.json()["fehlerCode"] == "ACCOUNT_INACTIVE"


@pytest.mark.asyncio
async def test_verify_email(
    test_client: AsyncClient, sample_registration: dict[str, Any]
) -> None:
    registered = await test_client.post("/api/v1/auth/register", json=sample_registration)
    data = registered.json()["daten"]
    assert data["customer"]["is_verified"] is False
    token = data["verification_token"]
    assert token

    verified = await test_client.post("/api/v1/auth/verify-email", json={"token": token})
    assert verified.status_code == 200
    assert verified.json()["daten"]["is_verified"] is True

    reused = await test_client.post("/api/v1/auth/verify-email", json={"token": token})
    assert reused.status_code == 400
    assert reused.json()["fehlerCode"] == "VERIFICATION_TOKEN_INVALID"


@pytest.mark.asyncio
async def test_password_reset_flow(
    test_client: AsyncClient, sample_registration: dict[str, Any]
) -> None:
    await test_client.post("/api/v1/auth/register", json=sample_registration)

    requested = await test_client.post(
        "/api/v1/auth/forgot-password", json={"email": "anna.schmidt@beispiel.de"}
    )
    assert requested.status_code == 200
    ticket = requested.json()["daten"]
    expires_at = datetime.fromisoformat(ticket["expires_at"].replace("Z", "+00:00"))
    remaining = expires_at - datetime.now(timezone.utc)
    assert timedelta(minutes=59) < remaining <= timedelta(minutes=60)

    reset = await test_client.post(
        "/api/v1/auth/reset-password",
        json={"token": ticket["reset_token"], "passwort": "NeuesPass456?"},
    )
    assert reset.status_code == 200

    old_login = await test_client.post(
        "/api/v1/auth/login",
        json={"email": "anna.schmidt@beispiel.de", "passwort": TEST_PASSWORD},
    )
    new_login = await test_client.post(
        "/api/v1/auth/login",
        json={"email": "anna.schmidt@beispiel.de", "passwort": "NeuesPass456?"},
    )
    assert old_login.status_code == 401
    assert new_login.status_code == 200

    # Tokens are single use
    again = await test_client.post(
        "/api/v1/auth/reset-password",
        json={"token": ticket["reset_token"], "passwort": "NochEins789!"},
    )
    assert again.status_code == 400
    assert again.json()["fehlerCode"] == "RESET_TOKEN_INVALID"


@pytest.mark.asyncio
async def test_expired_reset_token_is_rejected(
    test_client: AsyncClient, sample_registration: dict[str, Any], database: DatabaseManager
) -> None:
    await test_client.post("/api/v1/auth/register", json=sample_registration)
    requested = await test_client.post(
        "/api/v1/auth/forgot-password", json={"email": "anna.schmidt@beispiel.de"}
    )
    token = requested.json()["daten"]["reset_token"]

    async with database.session() as session:
        store = CustomerStore(session)
        record = await store.get_by_email("anna.schmidt@beispiel.de")
        await store.update(
            record, {"password_reset_expires": datetime.now(timezone.utc) - timedelta(minutes=1)}
        )

    response = await test_client.post(
        "/api/v1/auth/reset-password", json={"token": token, "passwort": "NeuesPass456?"}
    )

    assert response.status_code == 400
    assert response.json()["fehlerCode"] == "RESET_TOKEN_INVALID"


@pytest.mark.asyncio
async def test_forgot_password_for_unknown_email(test_client: AsyncClient) -> None:
    response = await test_client.post(
        "/api/v1/auth/forgot-password", json={"email": "niemand@beispiel.de"}
    )

    assert response.status_code == 200
    assert response.json()["daten"] == {"reset_token": None, "expires_at": None}


@pytest.mark.asyncio
async def test_reset_password_rejects_weak_password(test_client: AsyncClient) -> None:
    response = await test_client.post(
        "/api/v1/auth/reset-password", json={"token": "abc", "passwort": "schwach"}
    )

    assert response.status_code == 400
    assert "passwort" in [error["feld"] for error in response.json()["fehler"]]


@pytest.mark.asyncio
async def test_energy_profile(test_client: AsyncClient, auth_token: str) -> None:
    missing = await test_client.get("/api/v1/kunden/energie-profil", headers=bearer(auth_token))
    assert missing.status_code == 404
    assert missing.json()["fehlerCode"] == "ENERGY_PROFILE_NOT_FOUND"

    created = await test_client.put(
        "/api/v1/kunden/energie-profil",
        headers=bearer(auth_token),
        json={"annualConsumption": 4200, "householdSize": 3, "hasSolarPanels": True},
    )
    assert created.status_code == 200
    assert created.json()["daten"]["has_solar_panels"] is True
    assert created.json()["daten"]["has_heat_pump"] is False

    updated = await test_client.put(
        "/api/v1/kunden/energie-profil",
        headers=bearer(auth_token),
        json={"hasHeatPump": True, "heatingType": "Wärmepumpe"},
    )
    assert updated.status_code == 200

    loaded = await test_client.get("/api/v1/kunden/energie-profil", headers=bearer(auth_token))
    profile = loaded.json()["daten"]
    assert profile["annual_consumption_kwh"] == 4200
    assert profile["household_size"] == 3
    assert profile["has_solar_panels"] is True
    assert profile["has_heat_pump"] is True
    assert profile["heating_type"] == "Wärmepumpe"


@pytest.mark.asyncio
async def test_energy_profile_rejects_null_flags(
    test_client: AsyncClient, auth_token: str
) -> None:
    response = await test_client.put(
        "/api/v1/kunden/energie-profil",
        headers=bearer(auth_token),
        json={"hasSmartMeter": None},
    )

    assert response.status_code == 400
    assert response.json()["fehler"][0]["feld"] == "hasSmartMeter"
