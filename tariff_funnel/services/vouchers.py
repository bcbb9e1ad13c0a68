"""Voucher validation, application and usage tracking."""

from datetime import date
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from tariff_funnel.config import get_settings
from tariff_funnel.errors import NotFoundError, TariffNotFoundError
from tariff_funnel.models.tariff import TariffType
from tariff_funnel.models.voucher import (
    Voucher,
    VoucherApplyResult,
    VoucherUsageRequest,
    VoucherValidationResult,
)
from tariff_funnel.pricing.discounts import discount_monthly_cost, validate_voucher
from tariff_funnel.state.catalog import CatalogStore
from tariff_funnel.state.customers import CustomerStore
from tariff_funnel.state.manager import DatabaseManager
from tariff_funnel.utils.logging import FunnelLogger, get_logger

logger = get_logger(__name__)


async def resolve_tariff_type(catalog: CatalogStore, tariff_id: str) -> TariffType:
    """Tariff ids and bare tariff type names (``green``, ``standard``) are both accepted."""
    tariff = await catalog.get_tariff(tariff_id)
    if tariff is not None:
        return tariff.tariff_type
    try:
        return TariffType(TariffType.parse(tariff_id))
    except ValueError:
        raise TariffNotFoundError(
            f"Tarif {tariff_id} wurde nicht gefunden", details={"tariff_id": tariff_id}
        )


async def redeem_voucher(
    session: AsyncSession,
    code: str,
    tariff_type: TariffType,
    today: date,
) -> Voucher:
    """Validate a voucher inside an open transaction."""
    catalog = CatalogStore(session)
    return validate_voucher(await catalog.get_voucher(code), code, tariff_type, today)


class VoucherService:
    def __init__(self, database: DatabaseManager):
        self.database = database
        self.settings = get_settings()

    async def validate(
        self, code: str, tariff_id: str, today: date | None = None
    ) -> VoucherValidationResult:
        """Raise VoucherInvalidError unless the code can be redeemed for the tariff today."""
        today = today or date.today()
        async with self.database.session() as session:
            catalog = CatalogStore(session)
            tariff_type = await resolve_tariff_type(catalog, tariff_id)
            voucher = await redeem_voucher(session, code, tariff_type, today)

        logger.info("voucher_validated", voucher_code=voucher.code, tariff_id=tariff_id)
        return VoucherValidationResult(
            voucher_code=voucher.code,
            is_valid=True,
            discount_type=voucher.discount_type,
            discount_value=voucher.discount_value,
            start_date=voucher.start_date,
            end_date=voucher.end_date,
        )

    async def apply(
        self,
        code: str,
        tariff_id: str,
        monthly_cost: Decimal,
        funnel_id: str | None = None,
        today: date | None = None,
    ) -> VoucherApplyResult:
        today = today or date.today()
        async with self.database.session() as session:
            catalog = CatalogStore(session)
            tariff_type = await resolve_tariff_type(catalog, tariff_id)
            voucher = await redeem_voucher(session, code, tariff_type, today)

        applied = discount_monthly_cost(
            voucher, monthly_cost, floor_at_zero=self.settings.floor_discounted_prices
        )
        if applied.discounted_monthly_cost < 0:
            FunnelLogger(funnel_id or self.settings.default_funnel_id).log_discount_warning(
                voucher.code, applied.discounted_monthly_cost, tariff_id=tariff_id
            )

        return VoucherApplyResult(
            voucher_code=voucher.code,
            tariff_id=tariff_id,
            discount_type=voucher.discount_type,
            discount_value=voucher.discount_value,
            original_monthly_cost=applied.original_monthly_cost,
            discounted_monthly_cost=applied.discounted_monthly_cost,
            savings_per_month=applied.savings_per_month,
            savings_per_year=applied.savings_per_year,
        )

    async def track_usage(self, usage: VoucherUsageRequest) -> Voucher:
        async with self.database.session() as session:
            if await CustomerStore(session).get(usage.customer_id) is None:
                raise NotFoundError(
                    f"Kunde {usage.customer_id} wurde nicht gefunden", code="CUSTOMER_NOT_FOUND"
                )
            voucher = await CatalogStore(session).record_voucher_usage(
                usage.voucher_code,
                usage.customer_id,
                usage.tariff_id,
                usage.original_cost,
                usage.discounted_cost,
            )
        if voucher is None:
            raise NotFoundError(
                f"Gutscheincode {usage.voucher_code} ist ungültig", code="VOUCHER_NOT_FOUND"
            )
        return voucher

    async def list_active(self, today: date | None = None) -> list[Voucher]:
        async with self.database.session() as session:
            return await CatalogStore(session).list_active_vouchers(today or date.today())
