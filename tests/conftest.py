"""Pytest configuration and fixtures."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-funnel-tests")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_FORMAT", "text")

from datetime import date, timedelta
from decimal import Decimal
from typing import Any, AsyncGenerator, Awaitable, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from tariff_funnel.api.routes import get_database
from tariff_funnel.main import app
from tariff_funnel.models.tariff import Tariff, TariffType
from tariff_funnel.models.voucher import DiscountType, Voucher
from tariff_funnel.state.catalog import CatalogStore
from tariff_funnel.state.manager import DatabaseManager
from tariff_funnel.state.seed import seed_reference_data

TEST_PASSWORD = "SecurePass123!"


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[DatabaseManager, None]:
    """Fresh in-memory database with reference data."""
    manager = DatabaseManager("sqlite+aiosqlite:///:memory:")
    await manager.connect()
    await manager.create_schema()
    await seed_reference_data(manager)
    yield manager
    await manager.disconnect()


@pytest_asyncio.fixture
async def test_client(database: DatabaseManager) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client bound to the test database."""
    app.dependency_overrides[get_database] = lambda: database
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def add_voucher(database: DatabaseManager) -> Callable[..., Awaitable[Voucher]]:
    """Insert a voucher that is valid around today unless told otherwise."""

    async def _add_voucher(
        code: str,
        discount_type: DiscountType = DiscountType.PERCENTAGE,
        discount_value: str = "10",
        applicable_tariff_types: list[TariffType] | None = None,
        start_offset_days: int = -1,
        end_offset_days: int = 30,
        **extra: Any,
    ) -> Voucher:
        today = date.today()
        voucher = Voucher(
            code=code,
            campaign_name=f"Test {code}",
            discount_type=discount_type,
            discount_value=Decimal(discount_value),
            applicable_tariff_types=applicable_tariff_types or [],
            start_date=today + timedelta(days=start_offset_days),
            end_date=today + timedelta(days=end_offset_days),
            **extra,
        )
        async with database.session() as session:
            await CatalogStore(session).upsert_voucher(voucher)
        return voucher

    return _add_voucher


# Sample data fixtures


@pytest.fixture
def sample_tariff() -> Tariff:
    """The basic tariff used by the worked pricing example."""
    return Tariff(
        id="basic",
        name="Enfinitus Basic",
        tariff_type=TariffType.BASIC,
        working_price_ct=Decimal("28.5"),
        base_price_eur=Decimal("9.90"),
        contract_months=24,
    )


@pytest.fixture
def smart_meter_tariff() -> Tariff:
    return Tariff(
        id="dynamic",
        name="Enfinitus Smart Dynamic",
        tariff_type=TariffType.DYNAMIC,
        working_price_ct=Decimal("25.0"),
        base_price_eur=Decimal("9.90"),
        contract_months=1,
        requires_smart_meter=True,
    )


@pytest.fixture
def sample_registration() -> dict[str, Any]:
    """Registration payload as sent by the contract page."""
    return {
        "vorname": "Anna",
        "nachname": "Schmidt",
        "email": "anna.schmidt@beispiel.de",
        "telefon": "+49 30 9876543",
        "strasse": "Chausseestraße",
        "hausnummer": "12a",
        "plz": "10115",
        "stadt": "Berlin",
        "bezirk": "Mitte",
        "passwort": TEST_PASSWORD,
        "passwortBestaetigung": TEST_PASSWORD,
        "agbAkzeptiert": True,
        "datenschutzAkzeptiert": True,
        "marketingEinverstaendnis": False,
        "newsletterEinverstaendnis": True,
    }


@pytest.fixture
def sample_import() -> dict[str, Any]:
    """Payload of the one-shot contracting import."""
    return {
        "funnelId": "enfinitus-website",
        "customer": {
            "firstName": "Jonas",
            "lastName": "Weber",
            "email": "jonas.weber@beispiel.de",
            "phone": "+49 40 1234567",
            "street": "Mönckebergstraße",
            "houseNumber": "7",
            "zipCode": "20095",
            "city": "Hamburg",
            "district": "Hamburg-Altstadt",
            "termsAccepted": True,
            "privacyAccepted": True,
            "marketingConsent": False,
            "newsletterConsent": False,
        },
        "contract": {
            "tariffId": "fix12",
            "estimatedConsumption": 3275,
            "householdSize": 2,
            "desiredStartDate": (date.today() + timedelta(days=30)).isoformat(),
            "sepaMandate": True,
        },
    }


@pytest_asyncio.fixture
async def auth_token(test_client: AsyncClient, sample_registration: dict[str, Any]) -> str:
    """Register the sample customer and return its bearer token."""
    response = await test_client.post("/api/v1/auth/register", json=sample_registration)
    assert response.status_code == 201
    return response.json()["daten"]["token"]
