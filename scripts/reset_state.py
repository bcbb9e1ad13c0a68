"""Drop and recreate the funnel schema (useful for testing)."""

import asyncio

from tariff_funnel.state.manager import DatabaseManager
from tariff_funnel.state.seed import seed_reference_data


async def reset_all_state() -> None:
    """Drop every table, recreate the schema and reload reference data."""
    database = DatabaseManager()
    print(f"\n⚠️  WARNING: This will delete ALL data in {database.database_url}!")
    response = input("Are you sure? (yes/no): ")

    if response.lower() != "yes":
        print("Cancelled.")
        return

    print("\nResetting state...")

    await database.drop_schema()
    await database.create_schema()
    await seed_reference_data(database)

    await database.disconnect()

    print("✓ Schema recreated and reference data loaded\n")


if __name__ == "__main__":
    asyncio.run(reset_all_state())
