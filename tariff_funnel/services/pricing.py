"""Pricing use cases: offers for a household, tariff listing and margins."""

import time
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from tariff_funnel.config import get_settings
from tariff_funnel.errors import TariffNotFoundError, VoucherInvalidError
from tariff_funnel.models.pricing import (
    ConsumptionInfo,
    Location,
    PricingRequest,
    PricingResult,
    TariffOffer,
    VoucherRejection,
)
from tariff_funnel.models.tariff import PricingMargin, Tariff
from tariff_funnel.models.voucher import Voucher
from tariff_funnel.pricing import (
    build_offers,
    discount_offer,
    estimate_consumption,
    price_tariff,
    resolve_location,
    select_recommended,
    validate_voucher,
)
from tariff_funnel.state.catalog import CatalogStore
from tariff_funnel.state.manager import DatabaseManager
from tariff_funnel.utils.logging import FunnelLogger, get_logger

logger = get_logger(__name__)


async def quote_tariff(
    session: AsyncSession,
    tariff_id: str,
    consumption_kwh: int,
    funnel_id: str,
    smart_meter: bool = False,
) -> TariffOffer:
    """Price a single active tariff inside an open transaction."""
    catalog = CatalogStore(session)
    tariff = await catalog.get_tariff(tariff_id)
    if tariff is None or not tariff.is_active:
        raise TariffNotFoundError(
            f"Tarif {tariff_id} wurde nicht gefunden", details={"tariff_id": tariff_id}
        )
    margins = await catalog.get_margins(funnel_id)
    return price_tariff(
        tariff, consumption_kwh, margins.get(tariff.tariff_type), smart_meter=smart_meter
    )


class PricingService:
    """Prices every tariff for one household."""

    def __init__(self, database: DatabaseManager):
        self.database = database
        self.settings = get_settings()

    async def calculate(self, request: PricingRequest, today: date | None = None) -> PricingResult:
        """
        Price all matching tariffs for a postal code and household.

        An invalid voucher never fails the request: offers come back
        undiscounted and the rejection reason is attached to the result.
        """
        start = time.time()
        today = today or date.today()
        funnel_id = request.funnel_id or self.settings.default_funnel_id
        funnel_logger = FunnelLogger(funnel_id)

        location = resolve_location(request.plz)

        estimated = request.annual_consumption_kwh is None
        if estimated:
            consumption_kwh = estimate_consumption(
                request.household_size,
                has_ev=request.has_ev,
                has_solar=request.has_solar,
                has_battery=request.has_battery,
            )
        else:
            consumption_kwh = request.annual_consumption_kwh

        async with self.database.session() as session:
            catalog = CatalogStore(session)
            tariffs = await catalog.list_tariffs()
            margins = await catalog.get_margins(funnel_id)
            voucher = await catalog.get_voucher(request.voucher_code) if request.voucher_code else None

        offers = build_offers(
            tariffs,
            consumption_kwh,
            margins,
            smart_meter=request.smart_meter,
            tariff_type=request.tariff_type,
        )
        if not offers:
            raise TariffNotFoundError(
                "Für diese Auswahl ist kein Tarif verfügbar",
                details={"tariff_type": request.tariff_type.value if request.tariff_type else None},
            )

        rejection = None
        if request.voucher_code:
            offers, rejection = self._apply_voucher(
                offers, request, voucher, today, funnel_logger
            )

        result = PricingResult(
            location=location,
            consumption=ConsumptionInfo(
                annual_kwh=consumption_kwh,
                household_size=request.household_size,
                estimated=estimated,
            ),
            offers=offers,
            voucher_rejection=rejection,
        )

        recommended = result.recommended
        funnel_logger.log_step(
            "pricing_calculated",
            duration_ms=(time.time() - start) * 1000,
            plz=request.plz,
            consumption_kwh=consumption_kwh,
            offers=len(offers),
            recommended=recommended.tariff_id if recommended else None,
            voucher_code=request.voucher_code,
        )
        return result

    def _apply_voucher(
        self,
        offers: list[TariffOffer],
        request: PricingRequest,
        voucher: Voucher | None,
        today: date,
        funnel_logger: FunnelLogger,
    ) -> tuple[list[TariffOffer], VoucherRejection | None]:
        code = request.voucher_code
        try:
            voucher = validate_voucher(voucher, code, request.tariff_type, today)
        except VoucherInvalidError as e:
            logger.info("voucher_rejected", voucher_code=code, reason=e.code)
            return offers, VoucherRejection(code=code, reason=e.code, message=e.message)

        discounted = [
            discount_offer(offer, voucher, floor_at_zero=self.settings.floor_discounted_prices)
            for offer in offers
        ]
        if all(offer.voucher is None for offer in discounted):
            return offers, VoucherRejection(
                code=code,
                reason="VOUCHER_TARIFF_MISMATCH",
                message=f"Gutscheincode {code} gilt für keinen der angebotenen Tarife",
            )

        for offer in discounted:
            if offer.voucher is not None and offer.voucher.discounted_monthly_cost < 0:
                funnel_logger.log_discount_warning(
                    code, offer.voucher.discounted_monthly_cost, tariff_id=offer.tariff_id
                )
        return select_recommended(discounted), None

    async def list_tariffs(self) -> list[Tariff]:
        async with self.database.session() as session:
            return await CatalogStore(session).list_tariffs()

    def get_location(self, plz: str) -> Location:
        return resolve_location(plz)

    async def list_margins(self) -> list[PricingMargin]:
        async with self.database.session() as session:
            return await CatalogStore(session).list_margins()

    async def save_margin(self, margin: PricingMargin) -> PricingMargin:
        async with self.database.session() as session:
            return await CatalogStore(session).upsert_margin(margin)
