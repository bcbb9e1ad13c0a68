"""API routes of the tariff funnel."""

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from tariff_funnel.errors import InvalidCredentialsError
from tariff_funnel.models.common import PLZ_PATTERN, ApiResponse
from tariff_funnel.models.contract import (
    ContractDraft,
    ContractDraftRequest,
    ContractImportRequest,
    ContractImportResult,
    ContractStatusUpdate,
)
from tariff_funnel.models.customer import (
    AuthResult,
    Customer,
    CustomerRegistration,
    CustomerUpdate,
    EmailVerificationRequest,
    EnergyProfile,
    EnergyProfileUpdate,
    LoginRequest,
    PasswordForgotRequest,
    PasswordResetRequest,
    PasswordResetTicket,
)
from tariff_funnel.models.pricing import Location, PricingRequest, PricingResult
from tariff_funnel.models.tariff import PricingMargin, Tariff
from tariff_funnel.models.voucher import (
    Voucher,
    VoucherApplyRequest,
    VoucherApplyResult,
    VoucherUsageRequest,
    VoucherValidationRequest,
    VoucherValidationResult,
)
from tariff_funnel.services import (
    ContractingService,
    CustomerService,
    PricingService,
    VoucherService,
)
from tariff_funnel.services.auth import decode_access_token
from tariff_funnel.state.manager import DatabaseManager, get_database_manager
from tariff_funnel.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()

bearer_scheme = HTTPBearer(auto_error=False)


# Dependencies


async def get_database() -> DatabaseManager:
    """Get the database manager; tests override this."""
    return await get_database_manager()


async def get_current_customer_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    database: DatabaseManager = Depends(get_database),
) -> UUID:
    """Customer id from the bearer token; deactivated accounts are refused."""
    if credentials is None:
        raise InvalidCredentialsError("Anmeldung erforderlich", code="NOT_AUTHENTICATED")
    customer_id = decode_access_token(credentials.credentials)
    await CustomerService(database).ensure_active(customer_id)
    return customer_id


# Pricing


@router.post("/pricing/berechnen", response_model=ApiResponse[PricingResult])
async def calculate_pricing(
    request: PricingRequest,
    database: DatabaseManager = Depends(get_database),
) -> ApiResponse[PricingResult]:
    """
    Price all tariffs for a postal code.

    Without ``jahresverbrauch`` the consumption is estimated from the
    household size and equipment.
    """
    result = await PricingService(database).calculate(request)
    return ApiResponse(nachricht="Preise erfolgreich berechnet", daten=result)


@router.get("/pricing/tarife", response_model=ApiResponse[list[Tariff]])
async def list_tariffs(
    database: DatabaseManager = Depends(get_database),
) -> ApiResponse[list[Tariff]]:
    tariffs = await PricingService(database).list_tariffs()
    return ApiResponse(nachricht=f"{len(tariffs)} Tarife verfügbar", daten=tariffs)


@router.get("/pricing/standorte/{plz}", response_model=ApiResponse[Location])
async def get_location(
    plz: str = Path(pattern=PLZ_PATTERN),
    database: DatabaseManager = Depends(get_database),
) -> ApiResponse[Location]:
    location = PricingService(database).get_location(plz)
    return ApiResponse(nachricht=f"Belieferung in {location.city} möglich", daten=location)


@router.get("/pricing/ops/margins", response_model=ApiResponse[list[PricingMargin]])
async def list_margins(
    database: DatabaseManager = Depends(get_database),
) -> ApiResponse[list[PricingMargin]]:
    margins = await PricingService(database).list_margins()
    return ApiResponse(nachricht=f"{len(margins)} Margen", daten=margins)


@router.post("/pricing/ops/margins", response_model=ApiResponse[PricingMargin])
async def save_margin(
    margin: PricingMargin,
    database: DatabaseManager = Depends(get_database),
) -> ApiResponse[PricingMargin]:
    saved = await PricingService(database).save_margin(margin)
    return ApiResponse(nachricht="Marge gespeichert", daten=saved)


# Vouchers


@router.post("/voucher/validate", response_model=ApiResponse[VoucherValidationResult])
async def validate_voucher(
    request: VoucherValidationRequest,
    database: DatabaseManager = Depends(get_database),
) -> ApiResponse[VoucherValidationResult]:
    result = await VoucherService(database).validate(request.voucher_code, request.tariff_id)
    return ApiResponse(nachricht="Gutscheincode ist gültig", daten=result)


@router.post("/voucher/apply", response_model=ApiResponse[VoucherApplyResult])
async def apply_voucher(
    request: VoucherApplyRequest,
    database: DatabaseManager = Depends(get_database),
) -> ApiResponse[VoucherApplyResult]:
    result = await VoucherService(database).apply(
        request.voucher_code, request.tariff.id, request.tariff.monthly_cost
    )
    return ApiResponse(nachricht="Gutschein angewendet", daten=result)


@router.post("/voucher/track-usage", response_model=ApiResponse[Voucher])
async def track_voucher_usage(
    request: VoucherUsageRequest,
    database: DatabaseManager = Depends(get_database),
) -> ApiResponse[Voucher]:
    voucher = await VoucherService(database).track_usage(request)
    return ApiResponse(nachricht="Gutscheinnutzung erfasst", daten=voucher)


@router.get("/voucher/list", response_model=ApiResponse[list[Voucher]])
async def list_vouchers(
    database: DatabaseManager = Depends(get_database),
) -> ApiResponse[list[Voucher]]:
    vouchers = await VoucherService(database).list_active()
    return ApiResponse(nachricht=f"{len(vouchers)} aktive Gutscheine", daten=vouchers)


# Authentication


@router.post(
    "/auth/register",
    response_model=ApiResponse[AuthResult],
    status_code=status.HTTP_201_CREATED,
)
async def register(
    registration: CustomerRegistration,
    database: DatabaseManager = Depends(get_database),
) -> ApiResponse[AuthResult]:
    result = await CustomerService(database).register(registration)
    return ApiResponse(nachricht="Registrierung erfolgreich", daten=result)


@router.post("/auth/login", response_model=ApiResponse[AuthResult])
async def login(
    credentials: LoginRequest,
    database: DatabaseManager = Depends(get_database),
) -> ApiResponse[AuthResult]:
    result = await CustomerService(database).login(credentials)
    return ApiResponse(nachricht="Anmeldung erfolgreich", daten=result)


@router.post("/auth/verify-email", response_model=ApiResponse[Customer])
async def verify_email(
    request: EmailVerificationRequest,
    database: DatabaseManager = Depends(get_database),
) -> ApiResponse[Customer]:
    customer = await CustomerService(database).verify_email(request.token)
    return ApiResponse(nachricht="E-Mail-Adresse bestätigt", daten=customer)


@router.post("/auth/forgot-password", response_model=ApiResponse[PasswordResetTicket])
async def forgot_password(
    request: PasswordForgotRequest,
    database: DatabaseManager = Depends(get_database),
) -> ApiResponse[PasswordResetTicket]:
    """Same answer whether or not the address belongs to an account."""
    ticket = await CustomerService(database).request_password_reset(request.email)
    return ApiResponse(
        nachricht="Falls ein Konto existiert, wurde ein Link zum Zurücksetzen versendet",
        daten=ticket,
    )


@router.post("/auth/reset-password", response_model=ApiResponse[None])
async def reset_password(
    request: PasswordResetRequest,
    database: DatabaseManager = Depends(get_database),
) -> ApiResponse[None]:
    await CustomerService(database).reset_password(request)
    return ApiResponse(nachricht="Passwort wurde zurückgesetzt")


# Customer profile


@router.get("/kunden/profil", response_model=ApiResponse[Customer])
async def get_profile(
    customer_id: UUID = Depends(get_current_customer_id),
    database: DatabaseManager = Depends(get_database),
) -> ApiResponse[Customer]:
    customer = await CustomerService(database).get_profile(customer_id)
    return ApiResponse(nachricht="Profil geladen", daten=customer)


@router.put("/kunden/profil", response_model=ApiResponse[Customer])
async def update_profile(
    update: CustomerUpdate,
    customer_id: UUID = Depends(get_current_customer_id),
    database: DatabaseManager = Depends(get_database),
) -> ApiResponse[Customer]:
    customer = await CustomerService(database).update_profile(customer_id, update)
    return ApiResponse(nachricht="Profil aktualisiert", daten=customer)


@router.get("/kunden/energie-profil", response_model=ApiResponse[EnergyProfile])
async def get_energy_profile(
    customer_id: UUID = Depends(get_current_customer_id),
    database: DatabaseManager = Depends(get_database),
) -> ApiResponse[EnergyProfile]:
    profile = await CustomerService(database).get_energy_profile(customer_id)
    return ApiResponse(nachricht="Energieprofil geladen", daten=profile)


@router.put("/kunden/energie-profil", response_model=ApiResponse[EnergyProfile])
async def update_energy_profile(
    update: EnergyProfileUpdate,
    customer_id: UUID = Depends(get_current_customer_id),
    database: DatabaseManager = Depends(get_database),
) -> ApiResponse[EnergyProfile]:
    """Create or partially update the household and equipment data."""
    profile = await CustomerService(database).update_energy_profile(customer_id, update)
    return ApiResponse(nachricht="Energieprofil gespeichert", daten=profile)


@router.delete("/kunden/konto-loeschen", response_model=ApiResponse[None])
async def delete_account(
    customer_id: UUID = Depends(get_current_customer_id),
    database: DatabaseManager = Depends(get_database),
) -> ApiResponse[None]:
    """Delete the account together with its pricing records and contracts."""
    await CustomerService(database).delete_account(customer_id)
    logger.info("account_deleted", customer_id=str(customer_id))
    return ApiResponse(nachricht="Konto gelöscht")


# Contracts


@router.get("/vertraege", response_model=ApiResponse[list[ContractDraft]])
async def list_own_contracts(
    customer_id: UUID = Depends(get_current_customer_id),
    database: DatabaseManager = Depends(get_database),
) -> ApiResponse[list[ContractDraft]]:
    contracts = await ContractingService(database).list_contracts(customer_id)
    return ApiResponse(nachricht=f"{len(contracts)} Verträge", daten=contracts)


@router.post(
    "/vertraege/entwuerfe",
    response_model=ApiResponse[ContractDraft],
    status_code=status.HTTP_201_CREATED,
)
async def create_contract_draft(
    request: ContractDraftRequest,
    customer_id: UUID = Depends(get_current_customer_id),
    database: DatabaseManager = Depends(get_database),
) -> ApiResponse[ContractDraft]:
    draft = await ContractingService(database).create_draft(customer_id, request)
    return ApiResponse(nachricht="Vertragsentwurf erstellt", daten=draft)


@router.patch("/vertraege/{contract_id}/status", response_model=ApiResponse[ContractDraft])
async def update_contract_status(
    contract_id: UUID,
    update: ContractStatusUpdate,
    customer_id: UUID = Depends(get_current_customer_id),
    database: DatabaseManager = Depends(get_database),
) -> ApiResponse[ContractDraft]:
    draft = await ContractingService(database).update_status(
        contract_id, update.status, customer_id=customer_id
    )
    return ApiResponse(nachricht=f"Vertragsstatus auf {draft.status.value} gesetzt", daten=draft)


# Contracting


@router.post(
    "/contracting/import",
    response_model=ApiResponse[ContractImportResult],
    status_code=status.HTTP_201_CREATED,
)
async def import_contract(
    request: ContractImportRequest,
    database: DatabaseManager = Depends(get_database),
) -> ApiResponse[ContractImportResult]:
    """Customer, pricing record and contract draft in one transaction."""
    result = await ContractingService(database).import_contract(request)
    return ApiResponse(nachricht="Vertrag importiert", daten=result)


@router.get("/contracting/ops/contracts", response_model=ApiResponse[list[ContractDraft]])
async def list_contracts(
    customer_id: UUID | None = Query(default=None),
    database: DatabaseManager = Depends(get_database),
) -> ApiResponse[list[ContractDraft]]:
    contracts = await ContractingService(database).list_contracts(customer_id)
    return ApiResponse(nachricht=f"{len(contracts)} Verträge", daten=contracts)


# Internal


@router.get("/internal/database", response_model=ApiResponse[dict[str, Any]])
async def database_status(
    database: DatabaseManager = Depends(get_database),
) -> ApiResponse[dict[str, Any]]:
    """Connectivity and row counts of the backing database."""
    await database.ping()
    counts = await database.table_counts()
    return ApiResponse(
        nachricht="Datenbank erreichbar",
        daten={
            "dialect": database.engine.dialect.name,
            "tables": counts,
        },
    )
