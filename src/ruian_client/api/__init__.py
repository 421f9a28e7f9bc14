"""
RUIAN API modul - REST API klient pro adresní registr RUIAN.

Tento modul poskytuje:
- RuianClient: Hlavní klient pro komunikaci s RUIAN REST API
- Modely pro API responses
- Překlad HTTP statusů na výjimky

Použití:
    from ruian_client.api import RuianClient, RuianConfig

    with RuianClient(RuianConfig(api_key="...")) as client:
        result = client.validate({"municipalityName": "Praha", "street": "Dlouhá"})
        regions = client.get_regions()
"""

from ruian_client.api.client import (
    RuianClient,
    RuianConfig,
    close_ruian_client,
    error_for_status,
    get_ruian_client,
    parse_response,
)
from ruian_client.api.models import (
    AddressHierarchy,
    Municipality,
    Place,
    Region,
    Street,
    ValidatedPlace,
    ValidateResult,
    ValidateStatus,
    ValidationWithPlaces,
)

__all__ = [
    "RuianClient",
    "RuianConfig",
    "get_ruian_client",
    "close_ruian_client",
    "error_for_status",
    "parse_response",
    "AddressHierarchy",
    "Municipality",
    "Place",
    "Region",
    "Street",
    "ValidatedPlace",
    "ValidateResult",
    "ValidateStatus",
    "ValidationWithPlaces",
]
