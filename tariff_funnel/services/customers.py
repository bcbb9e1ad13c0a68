"""Registration, login, account recovery and profile management."""

from datetime import datetime, timedelta, timezone
from uuid import UUID, uuid4

from tariff_funnel.config import get_settings
from tariff_funnel.errors import (
    AccountInactiveError,
    EmailAlreadyRegisteredError,
    FunnelError,
    InvalidCredentialsError,
    NotFoundError,
)
from tariff_funnel.models.customer import (
    AuthResult,
    Customer,
    CustomerRegistration,
    CustomerUpdate,
    EnergyProfile,
    EnergyProfileUpdate,
    LoginRequest,
    PasswordResetRequest,
    PasswordResetTicket,
)
from tariff_funnel.services.auth import create_access_token, hash_password, verify_password
from tariff_funnel.state.customers import CustomerStore
from tariff_funnel.state.manager import DatabaseManager
from tariff_funnel.utils.logging import get_logger

logger = get_logger(__name__)


def customer_not_found(customer_id: UUID) -> NotFoundError:
    return NotFoundError(
        "Kunde wurde nicht gefunden",
        code="CUSTOMER_NOT_FOUND",
        details={"customer_id": str(customer_id)},
    )


class CustomerService:
    def __init__(self, database: DatabaseManager):
        self.database = database
        self.settings = get_settings()

    @property
    def exposes_tokens(self) -> bool:
        """Verification and reset tokens are handed out directly outside production."""
        return self.settings.environment != "production"

    async def register(self, registration: CustomerRegistration) -> AuthResult:
        """Create an account and sign it in."""
        verification_token = uuid4().hex
        async with self.database.session() as session:
            store = CustomerStore(session)
            if await store.get_by_email(registration.email) is not None:
                raise EmailAlreadyRegisteredError(
                    "Ein Konto mit dieser E-Mail-Adresse existiert bereits"
                )

            fields = registration.model_dump(exclude={"password", "password_confirmation"})
            record = await store.create(
                password_hash=hash_password(registration.password),
                verification_token=verification_token,
                **fields,
            )
            customer = Customer.model_validate(record)

        logger.info("customer_registered", customer_id=str(customer.id))
        return AuthResult(
            customer=customer,
            token=create_access_token(customer.id, customer.email),
            verification_token=verification_token if self.exposes_tokens else None,
        )

    async def login(self, credentials: LoginRequest) -> AuthResult:
        async with self.database.session() as session:
            store = CustomerStore(session)
            record = await store.get_by_email(credentials.email)
            if record is None or not verify_password(credentials.password, record.password_hash):
                logger.info("login_failed", reason="invalid_credentials")
                raise InvalidCredentialsError("E-Mail oder Passwort ist falsch")
            if not record.is_active:
                raise AccountInactiveError("Dieses Konto ist deaktiviert")

            await store.touch_login(record)
            customer = Customer.model_validate(record)

        logger.info("customer_logged_in", customer_id=str(customer.id))
        return AuthResult(customer=customer, token=create_access_token(customer.id, customer.email))

    async def ensure_active(self, customer_id: UUID) -> None:
        """Reject tokens of deactivated accounts. Missing accounts are left to the caller."""
        async with self.database.session() as session:
            record = await CustomerStore(session).get(customer_id)
        if record is not None and not record.is_active:
            raise AccountInactiveError("Dieses Konto ist deaktiviert")

    async def verify_email(self, token: str) -> Customer:
        async with self.database.session() as session:
            store = CustomerStore(session)
            record = await store.get_by_verification_token(token)
            if record is None:
                raise FunnelError(
                    "Ungültiger oder abgelaufener Bestätigungslink",
                    code="VERIFICATION_TOKEN_INVALID",
                )
            if record.is_verified:
                raise FunnelError(
                    "E-Mail-Adresse wurde bereits bestätigt", code="EMAIL_ALREADY_VERIFIED"
                )
            record = await store.update(record, {"is_verified": True, "verification_token": None})
            customer = Customer.model_validate(record)

        logger.info("customer_email_verified", customer_id=str(customer.id))
        return customer

    async def request_password_reset(
        self, email: str, now: datetime | None = None
    ) -> PasswordResetTicket:
        """
        Issue a reset token for an active account.

        The answer looks the same for unknown emails so that the endpoint
        does not reveal which addresses are registered.
        """
        now = now or datetime.now(timezone.utc)
        async with self.database.session() as session:
            store = CustomerStore(session)
            record = await store.get_by_email(email)
            if record is None or not record.is_active:
                logger.info("password_reset_skipped", reason="unknown_or_inactive")
                return PasswordResetTicket()

            token = uuid4().hex
            expires_at = now + timedelta(minutes=self.settings.password_reset_expire_minutes)
            await store.update(
                record, {"password_reset_token": token, "password_reset_expires": expires_at}
            )

        logger.info("password_reset_requested", customer_id=str(record.id))
        if not self.exposes_tokens:
            return PasswordResetTicket()
        return PasswordResetTicket(reset_token=token, expires_at=expires_at)

    async def reset_password(
        self, request: PasswordResetRequest, now: datetime | None = None
    ) -> None:
        now = now or datetime.now(timezone.utc)
        async with self.database.session() as session:
            store = CustomerStore(session)
            record = await store.get_by_reset_token(request.token, now)
            if record is None:
                raise FunnelError(
                    "Ungültiger oder abgelaufener Reset-Token", code="RESET_TOKEN_INVALID"
                )
            await store.update(
                record,
                {
                    "password_hash": hash_password(request.password),
                    "password_reset_token": None,
                    "password_reset_expires": None,
                },
            )

        logger.info("password_reset_completed", customer_id=str(record.id))

    async def get_profile(self, customer_id: UUID) -> Customer:
        async with self.database.session() as session:
            record = await CustomerStore(session).get(customer_id)
            if record is None:
                raise customer_not_found(customer_id)
            return Customer.model_validate(record)

    async def update_profile(self, customer_id: UUID, update: CustomerUpdate) -> Customer:
        """Apply the fields that were sent; everything else stays."""
        async with self.database.session() as session:
            store = CustomerStore(session)
            record = await store.get(customer_id)
            if record is None:
                raise customer_not_found(customer_id)
            changes = update.model_dump(exclude_unset=True)
            if changes:
                record = await store.update(record, changes)
            return Customer.model_validate(record)

    async def get_energy_profile(self, customer_id: UUID) -> EnergyProfile:
        async with self.database.session() as session:
            record = await CustomerStore(session).get_energy_profile(customer_id)
        if record is None:
            raise NotFoundError(
                "Es wurde noch kein Energieprofil hinterlegt", code="ENERGY_PROFILE_NOT_FOUND"
            )
        return EnergyProfile.model_validate(record)

    async def update_energy_profile(
        self, customer_id: UUID, update: EnergyProfileUpdate
    ) -> EnergyProfile:
        async with self.database.session() as session:
            store = CustomerStore(session)
            if await store.get(customer_id) is None:
                raise customer_not_found(customer_id)
            record = await store.upsert_energy_profile(
                customer_id, update.model_dump(exclude_unset=True)
            )
            return EnergyProfile.model_validate(record)

    async def delete_account(self, customer_id: UUID) -> None:
        async with self.database.session() as session:
            if not await CustomerStore(session).delete(customer_id):
                raise customer_not_found(customer_id)
