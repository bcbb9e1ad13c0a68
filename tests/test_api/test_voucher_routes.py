"""Tests for the voucher endpoints."""

from typing import Any, Awaitable, Callable
from uuid import uuid4

import pytest
from httpx import AsyncClient

from tariff_funnel.models.tariff import TariffType
from tariff_funnel.models.voucher import DiscountType, Voucher

AddVoucher = Callable[..., Awaitable[Voucher]]


@pytest.mark.asyncio
async def test_validate_voucher(test_client: AsyncClient, add_voucher: AddVoucher) -> None:
    await add_voucher("GRUENTEST", DiscountType.FIXED, "50", [TariffType.GREEN])

    response = await test_client.post(
        "/api/v1/voucher/validate", json={"voucherCode": "gruentest", "tariffId": "green"}
    )

    assert response.status_code == 200
    result = response.json()["daten"]
    assert result["is_valid"] is True
    assert result["voucher_code"] == "GRUENTEST"
    assert result["discount_type"] == "fixed"
    assert result["discount_value"] == 50.0


@pytest.mark.asyncio
async def test_validate_accepts_tariff_type_names(test_client: AsyncClient, add_voucher: AddVoucher) -> None:
    await add_voucher("FESTPREIS", applicable_tariff_types=[TariffType.FIXED])

    response = await test_client.post(
        "/api/v1/voucher/validate", json={"voucherCode": "FESTPREIS", "tariffId": "standard"}
    )

    assert response.status_code == 200


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("voucher_kwargs", "tariff_id", "expected_code"),
    [
        ({"applicable_tariff_types": [TariffType.GREEN]}, "basic", "VOUCHER_TARIFF_MISMATCH"),
        ({"start_offset_days": 5}, "basic", "VOUCHER_NOT_YET_VALID"),
        ({"start_offset_days": -30, "end_offset_days": -1}, "basic", "VOUCHER_EXPIRED"),
        ({"usage_limit": 2, "used_count": 2}, "basic", "VOUCHER_USAGE_LIMIT_REACHED"),
        ({"is_active": False}, "basic", "VOUCHER_NOT_FOUND"),
    ],
)
async def test_validate_rejections(
    test_client: AsyncClient,
    add_voucher: AddVoucher,
    voucher_kwargs: dict[str, Any],
    tariff_id: str,
    expected_code: str,
) -> None:
    await add_voucher("PRUEFUNG", **voucher_kwargs)

    response = await test_client.post(
        "/api/v1/voucher/validate", json={"voucherCode": "PRUEFUNG", "tariffId": tariff_id}
    )

    assert response.status_code == 400
    assert response.json()["erfolg"] is False
    assert response.json()["fehlerCode"] == expected_code


@pytest.mark.asyncio
async def test_validate_unknown_voucher(test_client: AsyncClient) -> None:
    response = await test_client.post(
        "/api/v1/voucher/validate", json={"voucherCode": "GIBTESNICHT", "tariffId": "basic"}
    )

    assert response.status_code == 400
    assert response.json()["fehlerCode"] == "VOUCHER_NOT_FOUND"


@pytest.mark.asyncio
async def test_validate_unknown_tariff(test_client: AsyncClient, add_voucher: AddVoucher) -> None:
    await add_voucher("TARIFTEST")

    response = await test_client.post(
        "/api/v1/voucher/validate", json={"voucherCode": "TARIFTEST", "tariffId": "platinum"}
    )

    assert response.status_code == 404
    assert response.json()["fehlerCode"] == "TARIFF_NOT_FOUND"


@pytest.mark.asyncio
async def test_apply_welcome_voucher_worked_example(
    test_client: AsyncClient, add_voucher: AddVoucher
) -> None:
    """WELCOME2025 takes 10 percent off 93.03 EUR."""
    await add_voucher(
        "WELCOME2025",
        DiscountType.PERCENTAGE,
        "10",
        [TariffType.FIXED, TariffType.DYNAMIC, TariffType.GREEN],
    )

    response = await test_client.post(
        "/api/v1/voucher/apply",
        json={"voucherCode": "WELCOME2025", "tariff": {"id": "fix12", "monatliche_kosten": 93.03}},
    )

    assert response.status_code == 200
    result = response.json()["daten"]
    assert result["original_monthly_cost"] == 93.03
    assert result["discounted_monthly_cost"] == 83.73
    assert result["savings_per_month"] == 9.30
    assert result["savings_per_year"] == 111.60


@pytest.mark.asyncio
async def test_apply_fixed_voucher_is_not_floored(
    test_client: AsyncClient, add_voucher: AddVoucher
) -> None:
    await add_voucher("GROSS50", DiscountType.FIXED, "50")

    response = await test_client.post(
        "/api/v1/voucher/apply",
        json={"voucherCode": "GROSS50", "tariff": {"id": "basic", "monatliche_kosten": 30}},
    )

    assert response.status_code == 200
    assert response.json()["daten"]["discounted_monthly_cost"] == -20.0


@pytest.mark.asyncio
async def test_track_usage_increments_counter(
    test_client: AsyncClient,
    add_voucher: AddVoucher,
    auth_token: str,
) -> None:
    await add_voucher("ZAEHLER", usage_limit=1)
    profile = await test_client.get(
        "/api/v1/kunden/profil", headers={"Authorization": f"Bearer {auth_token}"}
    )
    customer_id = profile.json()["daten"]["id"]

    tracked = await test_client.post(
        "/api/v1/voucher/track-usage",
        json={
            "voucherCode": "ZAEHLER",
            "customerId": customer_id,
            "tariffId": "basic",
            "originalCost": 87.68,
            "discountedCost": 78.91,
        },
    )
    assert tracked.status_code == 200
    assert tracked.json()["daten"]["used_count"] == 1

    # The limit of one redemption is now used up
    revalidated = await test_client.post(
        "/api/v1/voucher/validate", json={"voucherCode": "ZAEHLER", "tariffId": "basic"}
    )
    assert revalidated.json()["fehlerCode"] == "VOUCHER_USAGE_LIMIT_REACHED"


@pytest.mark.asyncio
async def test_track_usage_for_unknown_customer(test_client: AsyncClient, add_voucher: AddVoucher) -> None:
    await add_voucher("ZAEHLER")

    response = await test_client.post(
        "/api/v1/voucher/track-usage",
        json={
            "voucherCode": "ZAEHLER",
            "customerId": str(uuid4()),
            "tariffId": "basic",
            "originalCost": 87.68,
            "discountedCost": 78.91,
        },
    )

    assert response.status_code == 404
    assert response.json()["fehlerCode"] == "CUSTOMER_NOT_FOUND"


@pytest.mark.asyncio
async def test_list_shows_only_currently_valid_vouchers(
    test_client: AsyncClient, add_voucher: AddVoucher
) -> None:
    await add_voucher("AKTUELL")
    await add_voucher("VORBEI", start_offset_days=-30, end_offset_days=-1)

    response = await test_client.get("/api/v1/voucher/list")

    codes = {voucher["code"] for voucher in response.json()["daten"]}
    assert "AKTUELL" in codes
    assert "VORBEI" not in codes
