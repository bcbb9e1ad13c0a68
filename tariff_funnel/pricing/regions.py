"""Supplied postal code areas."""

from tariff_funnel.errors import PostalCodeNotSupportedError, PostalCodeUnavailableError
from tariff_funnel.models.pricing import Location

SUPPLY_AREAS: dict[str, Location] = {
    location.plz: location
    for location in [
        Location(plz="10115", city="Berlin", district="Mitte", state="Berlin",
                 network_operator="Stromnetz Berlin"),
        Location(plz="20095", city="Hamburg", district="Hamburg-Altstadt", state="Hamburg",
                 network_operator="Stromnetz Hamburg"),
        Location(plz="80331", city="München", district="Altstadt-Lehel", state="Bayern",
                 network_operator="SWM Infrastruktur"),
        Location(plz="50667", city="Köln", district="Innenstadt", state="NRW",
                 network_operator="Rheinenergie"),
        Location(plz="60311", city="Frankfurt am Main", district="Innenstadt", state="Hessen",
                 network_operator="Mainova"),
        Location(plz="70173", city="Stuttgart", district="Mitte", state="Baden-Württemberg",
                 network_operator="Netze BW"),
        Location(plz="40213", city="Düsseldorf", district="Stadtmitte", state="NRW",
                 network_operator="Stadtwerke Düsseldorf"),
        Location(plz="44135", city="Dortmund", district="Innenstadt-Nord", state="NRW",
                 network_operator="DEW21"),
        Location(plz="45127", city="Essen", district="Stadtkern", state="NRW",
                 network_operator="Westnetz"),
        Location(plz="04109", city="Leipzig", district="Mitte", state="Sachsen",
                 network_operator="Stadtwerke Leipzig"),
        Location(plz="01067", city="Dresden", district="Altstadt", state="Sachsen",
                 network_operator="SachsenNetze"),
        Location(plz="30159", city="Hannover", district="Mitte", state="Niedersachsen",
                 network_operator="Avacon"),
        Location(plz="90402", city="Nürnberg", district="Lorenz", state="Bayern",
                 network_operator="N-ERGIE", available=False,
                 reason="Netzausbau in Planung"),
    ]
}


def lookup_location(plz: str) -> Location | None:
    return SUPPLY_AREAS.get(plz)


def resolve_location(plz: str) -> Location:
    """Return the supply area of a postal code that can be priced."""
    location = lookup_location(plz)
    if location is None:
        raise PostalCodeNotSupportedError(
            f"Für die PLZ {plz} ist leider kein Angebot verfügbar",
            details={"plz": plz},
        )
    if not location.available:
        raise PostalCodeUnavailableError(
            f"In {location.city} ({plz}) ist die Belieferung derzeit nicht möglich",
            details={"plz": plz, "reason": location.reason},
        )
    return location
