"""HTTP client that walks the funnel the way the web frontend does."""

from dataclasses import dataclass, field
from typing import Any

import httpx

from tariff_funnel.config import get_settings
from tariff_funnel.utils.logging import get_logger

logger = get_logger(__name__)


class FunnelClientError(Exception):
    """A non-success response from the funnel API."""

    def __init__(self, status_code: int, message: str, code: str | None = None, payload: Any = None):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.code = code
        self.payload = payload


@dataclass
class FunnelOutcome:
    """Everything the frontend keeps in its session after the last step."""

    pricing: dict[str, Any]
    offer: dict[str, Any]
    customer: dict[str, Any]
    token: str
    contract: dict[str, Any]
    voucher: dict[str, Any] | None = None
    logged_in_existing: bool = False
    steps: list[str] = field(default_factory=list)


class FunnelClient:
    """
    Async client for the funnel API.

    Pass ``transport`` to talk to an in-process app, e.g.
    ``httpx.ASGITransport(app=app)``.
    """

    def __init__(
        self,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
    ):
        self.base_url = (base_url or get_settings().api_base_url).rstrip("/")
        self._client = httpx.AsyncClient(base_url=self.base_url, transport=transport, timeout=timeout)

    async def __aenter__(self) -> "FunnelClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        token: str | None = None,
        **kwargs: Any,
    ) -> Any:
        headers = {"Authorization": f"Bearer {token}"} if token else None
        response = await self._client.request(method, path, headers=headers, **kwargs)
        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.is_error or not body.get("erfolg", False):
            raise FunnelClientError(
                response.status_code,
                body.get("nachricht", response.reason_phrase),
                code=body.get("fehlerCode"),
                payload=body,
            )
        return body.get("daten")

    async def calculate_pricing(self, pricing_input: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", "/pricing/berechnen", json=pricing_input)

    async def validate_voucher(self, voucher_code: str, tariff_id: str) -> dict[str, Any]:
        return await self._request(
            "POST",
            "/voucher/validate",
            json={"voucherCode": voucher_code, "tariffId": tariff_id},
        )

    async def register(self, registration: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", "/auth/register", json=registration)

    async def login(self, email: str, password: str) -> dict[str, Any]:
        return await self._request(
            "POST", "/auth/login", json={"email": email, "passwort": password}
        )

    async def create_contract_draft(self, token: str, draft: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", "/vertraege/entwuerfe", token=token, json=draft)

    async def run_funnel(
        self,
        pricing_input: dict[str, Any],
        registration: dict[str, Any],
        tariff_id: str | None = None,
        voucher_code: str | None = None,
    ) -> FunnelOutcome:
        """
        Price, optionally validate a voucher, register and draft a contract.

        The chosen tariff defaults to the recommended offer. A voucher that
        fails validation is dropped. An email that is already registered
        triggers exactly one login attempt with the same credentials.
        """
        steps = []
        pricing = await self.calculate_pricing(pricing_input)
        steps.append("pricing")

        offers = pricing["offers"]
        if tariff_id is None:
            offer = next((o for o in offers if o["recommended"]), offers[0])
        else:
            offer = next((o for o in offers if o["tariff_id"] == tariff_id), None)
            if offer is None:
                raise FunnelClientError(404, f"Tarif {tariff_id} ist nicht im Angebot")

        voucher = None
        if voucher_code:
            try:
                voucher = await self.validate_voucher(voucher_code, offer["tariff_id"])
                steps.append("voucher")
            except FunnelClientError as e:
                logger.info("funnel_voucher_dropped", voucher_code=voucher_code, reason=e.code)

        logged_in_existing = False
        try:
            auth = await self.register(registration)
            steps.append("register")
        except FunnelClientError as e:
            if e.status_code != 409:
                raise
            password = registration.get("passwort") or registration["password"]
            auth = await self.login(registration["email"], password)
            logged_in_existing = True
            steps.append("login")

        contract = await self.create_contract_draft(
            auth["token"],
            {
                "tarifId": offer["tariff_id"],
                "jahresverbrauch": pricing["consumption"]["annual_kwh"],
                "haushaltsgroesse": pricing["consumption"]["household_size"],
                "plz": pricing["location"]["plz"],
                "gutscheinCode": voucher["voucher_code"] if voucher else None,
                "agbAkzeptiert": registration.get("agbAkzeptiert", True),
            },
        )
        steps.append("contract")

        logger.info(
            "funnel_completed",
            tariff_id=offer["tariff_id"],
            contract_number=contract["contract_number"],
            steps=steps,
        )
        return FunnelOutcome(
            pricing=pricing,
            offer=offer,
            customer=auth["customer"],
            token=auth["token"],
            contract=contract,
            voucher=voucher,
            logged_in_existing=logged_in_existing,
            steps=steps,
        )
