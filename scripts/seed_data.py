"""Seed reference data and demo customers for the tariff funnel."""

import asyncio

from tariff_funnel.models.customer import CustomerRegistration
from tariff_funnel.models.pricing import PricingRequest
from tariff_funnel.services.customers import CustomerService
from tariff_funnel.services.pricing import PricingService
from tariff_funnel.state.customers import CustomerStore
from tariff_funnel.state.manager import DatabaseManager
from tariff_funnel.state.seed import REFERENCE_TARIFFS, REFERENCE_VOUCHERS, seed_reference_data

DEMO_PASSWORD = "Demo2025!secure"


async def seed_catalog(database: DatabaseManager) -> None:
    """Seed tariffs and vouchers."""
    print("Seeding tariffs and vouchers...")

    await seed_reference_data(database)

    for tariff in REFERENCE_TARIFFS:
        print(f"  ✓ {tariff.name} ({tariff.working_price_ct} ct/kWh, {tariff.base_price_eur} €/Monat)")
    for voucher in REFERENCE_VOUCHERS:
        print(f"  ✓ {voucher.code} ({voucher.discount_type.value} {voucher.discount_value})")

    print("✓ Reference data seeded successfully\n")


async def seed_sample_customers(database: DatabaseManager) -> None:
    """Seed demo customers with the shared demo password."""
    print("Seeding sample customers...")

    customers = [
        CustomerRegistration(
            vorname="Max",
            nachname="Mustermann",
            email="max.mustermann@beispiel.de",
            telefon="+49 30 1234567",
            strasse="Invalidenstraße",
            hausnummer="1",
            plz="10115",
            stadt="Berlin",
            bezirk="Mitte",
            passwort=DEMO_PASSWORD,
            passwortBestaetigung=DEMO_PASSWORD,
            agbAkzeptiert=True,
            datenschutzAkzeptiert=True,
        ),
        CustomerRegistration(
            vorname="Erika",
            nachname="Musterfrau",
            email="erika.musterfrau@beispiel.de",
            strasse="Marienplatz",
            hausnummer="8",
            plz="80331",
            stadt="München",
            passwort=DEMO_PASSWORD,
            passwortBestaetigung=DEMO_PASSWORD,
            agbAkzeptiert=True,
            datenschutzAkzeptiert=True,
            newsletterEinverstaendnis=True,
        ),
    ]

    service = CustomerService(database)
    for registration in customers:
        async with database.session() as session:
            exists = await CustomerStore(session).get_by_email(registration.email)
        if exists:
            print(f"  - {registration.email} already exists")
            continue
        result = await service.register(registration)
        print(f"  ✓ Added {result.customer.first_name} {result.customer.last_name} ({result.customer.plz})")

    print("✓ Sample customers seeded successfully\n")


async def show_sample_quote(database: DatabaseManager) -> None:
    """Print the offers of a two-person household in Berlin."""
    result = await PricingService(database).calculate(PricingRequest(plz="10115", haushaltsgroesse=2))
    print(f"Sample quote for 10115, {result.consumption.annual_kwh} kWh:")
    for offer in result.offers:
        marker = "★" if offer.recommended else " "
        print(f"  {marker} {offer.name}: {offer.costs.monthly_cost} €/Monat")
    print()


async def main() -> None:
    """Run all seed functions."""
    print("\n" + "=" * 50)
    print("  Seeding Tariff Funnel Data")
    print("=" * 50 + "\n")

    database = DatabaseManager()
    await database.create_schema()

    await seed_catalog(database)
    await seed_sample_customers(database)
    await show_sample_quote(database)

    await database.disconnect()

    print("=" * 50)
    print("  ✓ All data seeded successfully!")
    print("=" * 50 + "\n")


if __name__ == "__main__":
    asyncio.run(main())
