"""Customer persistence."""

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tariff_funnel.errors import EmailAlreadyRegisteredError
from tariff_funnel.state.tables import CustomerRecord, EnergyProfileRecord, utcnow
from tariff_funnel.utils.logging import get_logger

logger = get_logger(__name__)


class CustomerStore:
    """Reads and writes customer rows inside the caller's transaction."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, customer_id: UUID) -> CustomerRecord | None:
        return await self.session.get(CustomerRecord, customer_id)

    async def get_by_email(self, email: str) -> CustomerRecord | None:
        result = await self.session.execute(
            select(CustomerRecord).where(CustomerRecord.email == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def get_by_verification_token(self, token: str) -> CustomerRecord | None:
        result = await self.session.execute(
            select(CustomerRecord).where(CustomerRecord.verification_token == token)
        )
        return result.scalar_one_or_none()

    async def get_by_reset_token(self, token: str, now: datetime) -> CustomerRecord | None:
        """Customer holding an unexpired password reset token."""
        result = await self.session.execute(
            select(CustomerRecord).where(
                CustomerRecord.password_reset_token == token,
                CustomerRecord.password_reset_expires > now,
            )
        )
        return result.scalar_one_or_none()

    async def create(self, **fields: Any) -> CustomerRecord:
        """
        Insert a customer; the email is stored lower-cased.

        A concurrent insert of the same email surfaces as
        EmailAlreadyRegisteredError once the unique index rejects the row.
        """
        fields["email"] = fields["email"].strip().lower()
        record = CustomerRecord(**fields)
        self.session.add(record)
        try:
            await self.session.flush()
        except IntegrityError:
            logger.info("customer_create_conflict", reason="email_taken")
            raise EmailAlreadyRegisteredError(
                "Ein Konto mit dieser E-Mail-Adresse existiert bereits"
            )

        logger.info("customer_created", customer_id=str(record.id))
        return record

    async def update(self, record: CustomerRecord, changes: dict[str, Any]) -> CustomerRecord:
        for name, value in changes.items():
            setattr(record, name, value)
        record.updated_at = utcnow()
        await self.session.flush()

        logger.info("customer_updated", customer_id=str(record.id), fields=sorted(changes))
        return record

    async def touch_login(self, record: CustomerRecord) -> None:
        record.last_login = utcnow()
        await self.session.flush()

    async def delete(self, customer_id: UUID) -> bool:
        """Delete a customer. Pricing records and contracts go with it."""
        result = await self.session.execute(
            delete(CustomerRecord).where(CustomerRecord.id == customer_id)
        )
        deleted = result.rowcount > 0
        if deleted:
            logger.info("customer_deleted", customer_id=str(customer_id))
        return deleted

    async def get_energy_profile(self, customer_id: UUID) -> EnergyProfileRecord | None:
        return await self.session.get(EnergyProfileRecord, customer_id)

    async def upsert_energy_profile(
        self, customer_id: UUID, changes: dict[str, Any]
    ) -> EnergyProfileRecord:
        """Create the profile on first write, afterwards change only the given fields."""
        record = await self.get_energy_profile(customer_id)
        if record is None:
            record = EnergyProfileRecord(customer_id=customer_id)
            self.session.add(record)
        for name, value in changes.items():
            setattr(record, name, value)
        record.updated_at = utcnow()
        await self.session.flush()

        logger.info("energy_profile_saved", customer_id=str(customer_id), fields=sorted(changes))
        return record
