"""Contract drafts and the one-shot contracting import."""

import calendar
from datetime import date
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from tariff_funnel.config import get_settings
from tariff_funnel.errors import (
    AccountInactiveError,
    FunnelError,
    InvalidCredentialsError,
    NotFoundError,
)
from tariff_funnel.models.contract import (
    ContractDraft,
    ContractDraftRequest,
    ContractImportRequest,
    ContractImportResult,
    ContractStatus,
)
from tariff_funnel.models.customer import Customer
from tariff_funnel.models.pricing import TariffOffer
from tariff_funnel.pricing.discounts import discount_offer
from tariff_funnel.services.auth import hash_password, verify_password
from tariff_funnel.services.customers import customer_not_found
from tariff_funnel.services.pricing import quote_tariff
from tariff_funnel.services.vouchers import redeem_voucher
from tariff_funnel.state.catalog import CatalogStore
from tariff_funnel.state.contracts import ContractStore
from tariff_funnel.state.customers import CustomerStore
from tariff_funnel.state.manager import DatabaseManager
from tariff_funnel.utils.logging import FunnelLogger, get_logger
from tariff_funnel.utils.tracing import FunnelTracer

logger = get_logger(__name__)


def add_months(start: date, months: int) -> date:
    """Calendar month arithmetic, clamped to the last day of the target month."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def snapshot_offer(offer: TariffOffer) -> tuple[dict[str, Any], dict[str, Any]]:
    """Split a priced offer into the stored tariff and cost snapshots."""
    selected_tariff = offer.model_dump(
        mode="json",
        include={"tariff_id", "name", "tariff_type", "contract_months", "prices"},
    )
    estimated_costs = offer.costs.model_dump(mode="json")
    if offer.voucher is not None:
        estimated_costs["voucher"] = offer.voucher.model_dump(mode="json")
    return selected_tariff, estimated_costs


class ContractingService:
    def __init__(self, database: DatabaseManager):
        self.database = database
        self.settings = get_settings()

    async def _write_draft(
        self,
        session: AsyncSession,
        customer_id: UUID,
        plz: str,
        tariff_id: str,
        consumption_kwh: int,
        funnel_id: str,
        *,
        household_size: int | None = None,
        smart_meter: bool = False,
        start_date: date | None = None,
        voucher_code: str | None = None,
        terms_accepted: bool = False,
        today: date,
    ) -> tuple[UUID, ContractDraft]:
        """Price the tariff, then store pricing record and contract draft."""
        offer = await quote_tariff(
            session, tariff_id, consumption_kwh, funnel_id, smart_meter=smart_meter
        )

        if voucher_code:
            voucher = await redeem_voucher(session, voucher_code, offer.tariff_type, today)
            offer = discount_offer(
                offer, voucher, floor_at_zero=self.settings.floor_discounted_prices
            )
            await CatalogStore(session).record_voucher_usage(
                voucher.code,
                customer_id,
                tariff_id,
                offer.voucher.original_monthly_cost,
                offer.voucher.discounted_monthly_cost,
            )

        selected_tariff, estimated_costs = snapshot_offer(offer)
        contracts = ContractStore(session)
        pricing = await contracts.create_pricing_record(
            customer_id=customer_id,
            plz=plz,
            annual_consumption_kwh=consumption_kwh,
            household_size=household_size,
            smart_meter=smart_meter,
            selected_tariff=selected_tariff,
            estimated_costs=estimated_costs,
        )
        draft = await contracts.create_contract(
            customer_id=customer_id,
            tariff_id=tariff_id,
            pricing_id=pricing.id,
            start_date=start_date,
            end_date=add_months(start_date, offer.contract_months) if start_date else None,
            terms_accepted=terms_accepted,
            voucher_code=voucher_code,
        )
        return pricing.id, draft

    async def create_draft(
        self,
        customer_id: UUID,
        request: ContractDraftRequest,
        today: date | None = None,
    ) -> ContractDraft:
        """Pricing record and contract draft for a signed-in customer, in one transaction."""
        today = today or date.today()
        funnel_id = request.funnel_id or self.settings.default_funnel_id

        async with self.database.session() as session:
            customer = await CustomerStore(session).get(customer_id)
            if customer is None:
                raise customer_not_found(customer_id)

            _, draft = await self._write_draft(
                session,
                customer_id,
                request.plz or customer.plz,
                request.tariff_id,
                request.annual_consumption_kwh,
                funnel_id,
                household_size=request.household_size,
                smart_meter=request.smart_meter,
                start_date=request.start_date,
                voucher_code=request.voucher_code,
                terms_accepted=request.terms_accepted,
                today=today,
            )

        FunnelLogger(funnel_id).log_step(
            "contract_draft_created",
            customer_id=str(customer_id),
            contract_number=draft.contract_number,
            tariff_id=draft.tariff_id,
        )
        return draft

    async def import_contract(
        self,
        request: ContractImportRequest,
        today: date | None = None,
    ) -> ContractImportResult:
        """
        Customer, pricing record and contract draft from one payload.

        All writes share one transaction: if any step fails nothing is kept,
        including a customer row created earlier in the same import. An
        existing active customer is reused; a password sent along with an
        existing email must match that account.
        """
        today = today or date.today()
        funnel_id = request.funnel_id or self.settings.default_funnel_id
        funnel_logger = FunnelLogger(funnel_id)
        tracer = FunnelTracer("contract_import")
        data = request.customer
        terms = request.contract

        try:
            async with self.database.session() as session:
                store = CustomerStore(session)

                with tracer.trace_step("customer", email_domain=data.email.split("@")[-1]):
                    record = await store.get_by_email(data.email)
                    customer_created = record is None
                    if record is not None:
                        if not record.is_active:
                            raise AccountInactiveError("Dieses Konto ist deaktiviert")
                        if data.password is not None and not verify_password(
                            data.password, record.password_hash
                        ):
                            raise InvalidCredentialsError("E-Mail oder Passwort ist falsch")
                    else:
                        record = await store.create(
                            email=data.email,
                            password_hash=hash_password(data.password) if data.password else None,
                            first_name=data.first_name,
                            last_name=data.last_name,
                            phone=data.phone,
                            street=data.street,
                            house_number=data.house_number,
                            plz=data.zip_code,
                            city=data.city,
                            district=data.district,
                            terms_accepted=data.terms_accepted,
                            privacy_accepted=data.privacy_accepted,
                            marketing_consent=data.marketing_consent,
                            newsletter_consent=data.newsletter_consent,
                            notes=data.notes,
                        )
                    customer = Customer.model_validate(record)

                with tracer.trace_step("contract", tariff_id=terms.tariff_id):
                    pricing_id, draft = await self._write_draft(
                        session,
                        customer.id,
                        data.zip_code,
                        terms.tariff_id,
                        terms.estimated_consumption,
                        funnel_id,
                        household_size=terms.household_size,
                        smart_meter=terms.smart_meter,
                        start_date=terms.desired_start_date,
                        voucher_code=terms.voucher_code,
                        terms_accepted=data.terms_accepted,
                        today=today,
                    )
        except FunnelError as e:
            funnel_logger.log_error(
                "contract_import",
                e.message,
                code=e.code,
                completed_steps=tracer.completed_steps,
                trace_id=str(tracer.trace_id),
            )
            raise

        funnel_logger.log_step(
            "contract_imported",
            customer_id=str(customer.id),
            customer_created=customer_created,
            contract_number=draft.contract_number,
            trace_id=str(tracer.trace_id),
        )
        return ContractImportResult(
            customer=customer,
            customer_created=customer_created,
            pricing_id=pricing_id,
            contract=draft,
            trace=tracer.get_trace_summary(),
        )

    async def list_contracts(self, customer_id: UUID | None = None) -> list[ContractDraft]:
        async with self.database.session() as session:
            return await ContractStore(session).list_contracts(customer_id)

    async def update_status(
        self,
        contract_id: UUID,
        status: ContractStatus,
        customer_id: UUID | None = None,
    ) -> ContractDraft:
        async with self.database.session() as session:
            draft = await ContractStore(session).update_status(contract_id, status, customer_id)
        if draft is None:
            raise NotFoundError(
                "Vertrag wurde nicht gefunden",
                code="CONTRACT_NOT_FOUND",
                details={"contract_id": str(contract_id)},
            )
        return draft
