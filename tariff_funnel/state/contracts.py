"""Pricing records and contract drafts."""

from datetime import date
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tariff_funnel.models.contract import ContractDraft, ContractStatus
from tariff_funnel.state.tables import ContractRecord, PricingRecord, utcnow
from tariff_funnel.utils.logging import get_logger

logger = get_logger(__name__)


def generate_contract_number(today: date | None = None) -> str:
    """Contract numbers look like ENF-20250115-1A2B3C4D."""
    today = today or date.today()
    return f"ENF-{today:%Y%m%d}-{uuid4().hex[:8].upper()}"


class ContractStore:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_pricing_record(
        self,
        customer_id: UUID,
        plz: str,
        annual_consumption_kwh: int,
        selected_tariff: dict[str, Any],
        estimated_costs: dict[str, Any],
        household_size: int | None = None,
        smart_meter: bool = False,
    ) -> PricingRecord:
        record = PricingRecord(
            customer_id=customer_id,
            plz=plz,
            annual_consumption_kwh=annual_consumption_kwh,
            household_size=household_size,
            smart_meter=smart_meter,
            selected_tariff=selected_tariff,
            estimated_costs=estimated_costs,
        )
        self.session.add(record)
        await self.session.flush()

        logger.info("pricing_record_created", pricing_id=str(record.id), customer_id=str(customer_id))
        return record

    async def create_contract(
        self,
        customer_id: UUID,
        tariff_id: str,
        pricing_id: UUID | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        terms_accepted: bool = False,
        voucher_code: str | None = None,
    ) -> ContractDraft:
        """Insert a contract in status draft."""
        record = ContractRecord(
            customer_id=customer_id,
            pricing_id=pricing_id,
            tariff_id=tariff_id,
            contract_number=generate_contract_number(),
            status=ContractStatus.DRAFT.value,
            start_date=start_date,
            end_date=end_date,
            terms_accepted=terms_accepted,
            voucher_code=voucher_code,
        )
        self.session.add(record)
        await self.session.flush()

        logger.info(
            "contract_draft_created",
            contract_id=str(record.id),
            contract_number=record.contract_number,
            customer_id=str(customer_id),
        )
        return ContractDraft.model_validate(record)

    async def get(self, contract_id: UUID) -> ContractDraft | None:
        record = await self.session.get(ContractRecord, contract_id)
        return ContractDraft.model_validate(record) if record else None

    async def list_contracts(self, customer_id: UUID | None = None) -> list[ContractDraft]:
        """Newest first, optionally for one customer."""
        query = select(ContractRecord).order_by(ContractRecord.created_at.desc())
        if customer_id is not None:
            query = query.where(ContractRecord.customer_id == customer_id)
        result = await self.session.execute(query)
        return [ContractDraft.model_validate(record) for record in result.scalars()]

    async def update_status(
        self,
        contract_id: UUID,
        status: ContractStatus,
        customer_id: UUID | None = None,
    ) -> ContractDraft | None:
        """Set a contract's status. Restricted to one customer's contracts when given."""
        record = await self.session.get(ContractRecord, contract_id)
        if record is None or (customer_id is not None and record.customer_id != customer_id):
            return None

        previous = record.status
        record.status = status.value
        record.updated_at = utcnow()
        await self.session.flush()

        logger.info(
            "contract_status_updated",
            contract_id=str(contract_id),
            previous_status=previous,
            status=status.value,
        )
        return ContractDraft.model_validate(record)
