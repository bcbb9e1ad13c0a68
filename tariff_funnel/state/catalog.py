"""Tariffs, vouchers and funnel margins."""

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from tariff_funnel.models.tariff import PricingMargin, Tariff, TariffType
from tariff_funnel.models.voucher import Voucher
from tariff_funnel.state.tables import (
    PricingMarginRecord,
    TariffRecord,
    VoucherRecord,
    VoucherUsageRecord,
    utcnow,
)
from tariff_funnel.utils.logging import get_logger

logger = get_logger(__name__)


class CatalogStore:
    """Reference data used for pricing."""

    def __init__(self, session: AsyncSession):
        self.session = session

    # Tariffs

    async def list_tariffs(self, active_only: bool = True) -> list[Tariff]:
        query = select(TariffRecord).order_by(TariffRecord.id)
        if active_only:
            query = query.where(TariffRecord.is_active.is_(True))
        result = await self.session.execute(query)
        return [Tariff.model_validate(record) for record in result.scalars()]

    async def get_tariff(self, tariff_id: str) -> Tariff | None:
        record = await self.session.get(TariffRecord, tariff_id)
        return Tariff.model_validate(record) if record else None

    async def upsert_tariff(self, tariff: Tariff) -> None:
        values = tariff.model_dump()
        values["tariff_type"] = tariff.tariff_type.value
        record = await self.session.get(TariffRecord, tariff.id)
        if record is None:
            self.session.add(TariffRecord(**values))
        else:
            for name, value in values.items():
                setattr(record, name, value)
        await self.session.flush()

    # Vouchers

    async def _voucher_record(self, code: str) -> VoucherRecord | None:
        result = await self.session.execute(
            select(VoucherRecord).where(func.upper(VoucherRecord.code) == code.strip().upper())
        )
        return result.scalar_one_or_none()

    async def get_voucher(self, code: str) -> Voucher | None:
        """Look a voucher up by code, ignoring case."""
        record = await self._voucher_record(code)
        return Voucher.model_validate(record) if record else None

    async def list_active_vouchers(self, today: date) -> list[Voucher]:
        result = await self.session.execute(
            select(VoucherRecord)
            .where(
                VoucherRecord.is_active.is_(True),
                VoucherRecord.start_date <= today,
                VoucherRecord.end_date >= today,
            )
            .order_by(VoucherRecord.code)
        )
        return [Voucher.model_validate(record) for record in result.scalars()]

    async def upsert_voucher(self, voucher: Voucher) -> None:
        values = voucher.model_dump()
        values["discount_type"] = voucher.discount_type.value
        values["applicable_tariff_types"] = [t.value for t in voucher.applicable_tariff_types]
        record = await self._voucher_record(voucher.code)
        if record is None:
            self.session.add(VoucherRecord(**values))
        else:
            # Keep the live usage counter
            values.pop("used_count")
            for name, value in values.items():
                setattr(record, name, value)
        await self.session.flush()

    async def record_voucher_usage(
        self,
        code: str,
        customer_id: UUID | None,
        tariff_id: str,
        original_cost: Decimal,
        discounted_cost: Decimal,
    ) -> Voucher | None:
        """Store one redemption and bump the voucher's usage counter."""
        record = await self._voucher_record(code)
        if record is None:
            return None

        self.session.add(
            VoucherUsageRecord(
                voucher_id=record.id,
                customer_id=customer_id,
                tariff_id=tariff_id,
                original_cost=original_cost,
                discounted_cost=discounted_cost,
            )
        )
        await self.session.execute(
            update(VoucherRecord)
            .where(VoucherRecord.id == record.id)
            .values(used_count=VoucherRecord.used_count + 1)
        )
        await self.session.flush()
        await self.session.refresh(record)

        logger.info("voucher_usage_recorded", voucher_code=record.code, used_count=record.used_count)
        return Voucher.model_validate(record)

    # Margins

    async def get_margins(self, funnel_id: str) -> dict[TariffType, PricingMargin]:
        result = await self.session.execute(
            select(PricingMarginRecord).where(PricingMarginRecord.funnel_id == funnel_id)
        )
        margins = [PricingMargin.model_validate(record) for record in result.scalars()]
        return {margin.tariff_type: margin for margin in margins}

    async def list_margins(self) -> list[PricingMargin]:
        result = await self.session.execute(
            select(PricingMarginRecord).order_by(
                PricingMarginRecord.funnel_id, PricingMarginRecord.tariff_type
            )
        )
        return [PricingMargin.model_validate(record) for record in result.scalars()]

    async def upsert_margin(self, margin: PricingMargin) -> PricingMargin:
        key = (margin.funnel_id, margin.tariff_type.value)
        record = await self.session.get(PricingMarginRecord, key)
        if record is None:
            record = PricingMarginRecord(funnel_id=key[0], tariff_type=key[1])
            self.session.add(record)
        record.margin_working_price_ct = margin.margin_working_price_ct
        record.margin_base_price_eur = margin.margin_base_price_eur
        record.updated_at = utcnow()
        await self.session.flush()

        logger.info("pricing_margin_saved", funnel_id=key[0], tariff_type=key[1])
        return PricingMargin.model_validate(record)
