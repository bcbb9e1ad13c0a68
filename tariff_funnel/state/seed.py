"""Reference tariffs and vouchers loaded at startup."""

from datetime import date
from decimal import Decimal

from tariff_funnel.models.tariff import Tariff, TariffType
from tariff_funnel.models.voucher import DiscountType, Voucher
from tariff_funnel.state.catalog import CatalogStore
from tariff_funnel.state.manager import DatabaseManager
from tariff_funnel.utils.logging import get_logger

logger = get_logger(__name__)

REFERENCE_TARIFFS = [
    Tariff(
        id="fix12",
        name="Enfinitus Fix12",
        tariff_type=TariffType.FIXED,
        description="12 Monate Preisgarantie",
        working_price_ct=Decimal("32.5"),
        base_price_eur=Decimal("11.90"),
        contract_months=12,
        price_guarantee_months=12,
    ),
    Tariff(
        id="green",
        name="Enfinitus Grün",
        tariff_type=TariffType.GREEN,
        description="100% Ökostrom aus Deutschland",
        working_price_ct=Decimal("33.9"),
        base_price_eur=Decimal("12.90"),
        contract_months=12,
        price_guarantee_months=12,
        green_energy=True,
    ),
    Tariff(
        id="dynamic",
        name="Enfinitus Smart Dynamic",
        tariff_type=TariffType.DYNAMIC,
        description="Stündliche Börsenpreise, monatlich kündbar",
        working_price_ct=Decimal("28.5"),
        base_price_eur=Decimal("14.90"),
        contract_months=1,
        price_guarantee_months=0,
        requires_smart_meter=True,
        solar_optimized=True,
    ),
    Tariff(
        id="basic",
        name="Enfinitus Basic",
        tariff_type=TariffType.BASIC,
        description="Günstiger Grundtarif mit 24 Monaten Laufzeit",
        working_price_ct=Decimal("28.5"),
        base_price_eur=Decimal("9.90"),
        contract_months=24,
        price_guarantee_months=24,
    ),
]

REFERENCE_VOUCHERS = [
    Voucher(
        code="WELCOME2025",
        campaign_name="Willkommen 2025",
        discount_type=DiscountType.PERCENTAGE,
        discount_value=Decimal("10"),
        applicable_tariff_types=[TariffType.FIXED, TariffType.DYNAMIC, TariffType.GREEN],
        start_date=date(2025, 1, 1),
        end_date=date(2025, 12, 31),
        usage_limit=1000,
    ),
    Voucher(
        code="GREEN50",
        campaign_name="Grün sparen",
        discount_type=DiscountType.FIXED,
        discount_value=Decimal("50"),
        applicable_tariff_types=[TariffType.GREEN],
        start_date=date(2025, 1, 1),
        end_date=date(2025, 12, 31),
        usage_limit=500,
    ),
    Voucher(
        code="NEUKUNDE10",
        campaign_name="Neukunden Rabatt",
        discount_type=DiscountType.PERCENTAGE,
        discount_value=Decimal("10"),
        applicable_tariff_types=[TariffType.FIXED, TariffType.DYNAMIC, TariffType.GREEN],
        start_date=date(2025, 1, 1),
        end_date=date(2025, 12, 31),
        usage_limit=100,
    ),
    Voucher(
        code="WINTER2025",
        campaign_name="Winter Aktion",
        discount_type=DiscountType.PERCENTAGE,
        discount_value=Decimal("15"),
        applicable_tariff_types=[TariffType.FIXED, TariffType.DYNAMIC],
        start_date=date(2025, 11, 1),
        end_date=date(2026, 3, 31),
        usage_limit=200,
    ),
]


async def seed_reference_data(database: DatabaseManager) -> None:
    """Upsert the reference tariffs and vouchers. Safe to run repeatedly."""
    async with database.session() as session:
        catalog = CatalogStore(session)
        for tariff in REFERENCE_TARIFFS:
            await catalog.upsert_tariff(tariff)
        for voucher in REFERENCE_VOUCHERS:
            await catalog.upsert_voucher(voucher)

    logger.info(
        "reference_data_seeded",
        tariffs=len(REFERENCE_TARIFFS),
        vouchers=len(REFERENCE_VOUCHERS),
    )
