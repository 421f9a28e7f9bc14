"""
RUIAN API Client - klient pro adresní registr RUIAN (ruian.fnx.io).

Poskytuje:
- HTTP komunikaci s RUIAN REST API
- Překlad HTTP statusů na typované výjimky
- Caching odpovědí s TTL (in-memory, SQLite nebo vlastní úložiště)
- Našeptávač obcí a sestavení hierarchie kraj -> obec -> ulice

Použití:
    config = RuianConfig(api_key="...")
    with RuianClient(config) as client:
        # Validace adresy
        result = client.find_address("Praha", street="Dlouhá", cp="14")

        # Našeptávač obcí
        municipalities = client.search_municipalities("Pra")

        # S perzistentní cache
        with RuianClient(config, storage=SQLiteCache("ruian.sqlite")) as client:
            ...
"""

import json
import logging
import os
import re
from typing import Any

import httpx
from pydantic import BaseModel, Field, SecretStr, field_validator

from ruian_client.api.models import (
    AddressHierarchy,
    Municipality,
    Place,
    Region,
    RuianModel,
    Street,
    ValidateResult,
    ValidationWithPlaces,
)
from ruian_client.cache import CacheStorage, MemoryCache, make_cache_key
from ruian_client.exceptions import (
    RuianAPIError,
    RuianAuthError,
    RuianConnectionError,
    RuianError,
    RuianRateLimitError,
    RuianValidationError,
)

logger = logging.getLogger(__name__)

_API_KEY_PATTERN = re.compile(r'(apiKey=)[^&\s"]+')


class ApiKeyRedactingFilter(logging.Filter):
    """Nahradí hodnotu apiKey v URL logovaných httpx za ***."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        if "apiKey=" in message:
            record.msg = _API_KEY_PATTERN.sub(r"\1***", message)
            record.args = ()
        return True


# httpx loguje celou URL requestu na úrovni INFO
logging.getLogger("httpx").addFilter(ApiKeyRedactingFilter())

HTTP_OK = 200
HTTP_UNAUTHORIZED = 401
HTTP_UNPROCESSABLE = 422
HTTP_RATE_LIMIT = 429
HTTP_SERVER_ERROR = 500


def _as_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return val.lower() in ("1", "true", "yes", "on")


class RuianConfig(BaseModel):
    """
    Konfigurace RUIAN klienta.

    Attributes:
        api_key: API klíč z ruian.fnx.io (povinný)
        base_url: Základní URL RUIAN API
        timeout: Timeout pro HTTP requesty (sekundy)
        user_agent: User-Agent header
        cache_enabled: Zapnutí cache odpovědí
        cache_ttl: TTL pro cache (sekundy), 0 = neukládat
    """

    api_key: SecretStr
    base_url: str = "https://ruian.fnx.io/api/v1/ruian"
    timeout: float = 30.0
    user_agent: str = "ruian-client/1.0 (Python httpx)"
    cache_enabled: bool = True
    cache_ttl: int = Field(86400, ge=0)  # 24 hodin

    @field_validator("api_key")
    @classmethod
    def _api_key_not_empty(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value().strip():
            raise ValueError("API key must not be empty")
        return value

    @classmethod
    def from_env(cls) -> "RuianConfig":
        """
        Načte konfiguraci z proměnných prostředí.

        RUIAN_API_KEY (povinná), RUIAN_BASE_URL, RUIAN_CACHE_ENABLED,
        RUIAN_CACHE_TTL.
        """
        values: dict[str, Any] = {}
        if "RUIAN_API_KEY" in os.environ:
            values["api_key"] = os.environ["RUIAN_API_KEY"]
        if "RUIAN_BASE_URL" in os.environ:
            values["base_url"] = os.environ["RUIAN_BASE_URL"]
        if "RUIAN_CACHE_ENABLED" in os.environ:
            values["cache_enabled"] = _as_bool(os.environ["RUIAN_CACHE_ENABLED"], True)
        if "RUIAN_CACHE_TTL" in os.environ:
            values["cache_ttl"] = os.environ["RUIAN_CACHE_TTL"]
        return cls(**values)


# === Response classification ===


def error_for_status(status_code: int) -> RuianError | None:
    """
    Přeloží HTTP status na výjimku.

    Returns:
        None pro 200, jinak instanci odpovídající výjimky (nevyhazuje ji)
    """
    if status_code == HTTP_OK:
        return None
    if status_code == HTTP_UNAUTHORIZED:
        return RuianAuthError()
    if status_code == HTTP_RATE_LIMIT:
        return RuianRateLimitError()
    if status_code == HTTP_UNPROCESSABLE:
        return RuianAPIError.missing_parameters()
    if status_code >= HTTP_SERVER_ERROR:
        return RuianAPIError.server_error()
    return RuianAPIError.unexpected_status(status_code)


def parse_response(status_code: int, body: str) -> dict[str, Any]:
    """
    Zkontroluje status a dekóduje JSON tělo odpovědi.

    Raises:
        RuianAuthError: HTTP 401
        RuianRateLimitError: HTTP 429
        RuianAPIError: Ostatní chybové statusy nebo nevalidní JSON
    """
    error = error_for_status(status_code)
    if error is not None:
        raise error

    try:
        data = json.loads(body)
    except ValueError as e:
        raise RuianAPIError.invalid_json(str(e)) from e

    if not isinstance(data, dict):
        raise RuianAPIError.invalid_json(f"expected JSON object, got {type(data).__name__}")
    return data


class RuianClient:
    """
    Klient pro RUIAN REST API.

    Features:
    - Context manager pro správu HTTP session
    - Cache s TTL přes libovolné CacheStorage úložiště
    - Typované výjimky podle HTTP statusu

    Endpoints:
    - /validate - Validace adresy
    - /build/regions - Kraje
    - /build/municipalities - Obce v kraji
    - /build/streets - Ulice v obci
    - /build/places - Adresní místa na ulici
    """

    CACHE_NAMESPACE = "ruian"
    CACHE_KEY_ALL_MUNICIPALITIES = "all_municipalities"
    MUNICIPALITIES_CACHE_MULTIPLIER = 7
    MIN_SEARCH_LENGTH = 2

    def __init__(
        self,
        config: RuianConfig,
        storage: CacheStorage | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Inicializace klienta.

        Args:
            config: Konfigurace klienta
            storage: Cache úložiště (výchozí MemoryCache)
            transport: Vlastní httpx transport (např. httpx.MockTransport v testech)
        """
        self.config = config
        self._storage: CacheStorage = storage if storage is not None else MemoryCache()
        self._transport = transport
        self._client: httpx.Client | None = None

    def __enter__(self) -> "RuianClient":
        self._ensure_client()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def _ensure_client(self) -> httpx.Client:
        """Zajistí, že HTTP klient je inicializovaný."""
        if self._client is None:
            self._client = httpx.Client(
                base_url=self.config.base_url,
                timeout=httpx.Timeout(self.config.timeout),
                headers={
                    "Accept": "application/json",
                    "User-Agent": self.config.user_agent,
                },
                verify=True,
                follow_redirects=True,
                transport=self._transport,
            )
            logger.info(f"HTTP client initialized: {self.config.base_url}")
        return self._client

    def close(self) -> None:
        """Uzavře HTTP klienta."""
        if self._client is not None:
            self._client.close()
            self._client = None
            logger.info("HTTP client closed")

    # === Core HTTP Methods ===

    def _http_get(self, endpoint: str, params: dict[str, Any]) -> tuple[int, str]:
        """
        Provede GET request a vrátí (status, tělo).

        Chybové statusy nevyhazují výjimku, řeší je až parse_response().

        Raises:
            RuianConnectionError: Při selhání spojení
        """
        client = self._ensure_client()
        query = {k: v for k, v in params.items() if v is not None}
        query["apiKey"] = self.config.api_key.get_secret_value()

        try:
            response = client.get(endpoint, params=query)
        except httpx.RequestError as e:
            logger.warning(f"Request error: {endpoint} ({type(e).__name__})")
            raise RuianConnectionError() from e

        if response.status_code != HTTP_OK:
            logger.warning(f"HTTP error {response.status_code}: {endpoint}")
        return response.status_code, response.text

    def _namespaced(self, key: str) -> str:
        return f"{self.CACHE_NAMESPACE}:{key}"

    def _store(self, key: str, value: Any, ttl: int) -> None:
        if self.config.cache_enabled and ttl > 0:
            self._storage.save(key, value, ttl)
            logger.debug(f"Cache store: {key} (ttl={ttl}s)")

    def _request(self, endpoint: str, params: dict[str, Any]) -> dict[str, Any]:
        """
        Provede API request s cachováním.

        Args:
            endpoint: API endpoint (např. build/regions)
            params: Query parametry (bez apiKey)

        Returns:
            Dekódovaná JSON odpověď
        """
        cache_key = self._namespaced(make_cache_key(endpoint, params))

        if self.config.cache_enabled:
            cached = self._storage.load(cache_key)
            if cached is not None:
                logger.debug(f"Cache hit: {endpoint}")
                return cached

        logger.debug(f"API request: GET {endpoint}")
        status_code, body = self._http_get(endpoint, params)
        data = parse_response(status_code, body)

        self._store(cache_key, data, self.config.cache_ttl)
        return data

    def _get_list(self, endpoint: str, params: dict[str, Any], model: type[RuianModel]) -> list:
        data = self._request(endpoint, params)
        return [model.from_api(item) for item in data.get("data") or []]

    # === Validace ===

    def validate(self, params: dict[str, Any]) -> ValidateResult:
        """
        Zvaliduje adresu a najde odpovídající záznam v RUIAN.

        Args:
            params: Části adresy, např.:
                municipalityName, municipalityId, municipalityPartName,
                municipalityPartId, zip, street, cp, co, ce,
                ruianId (přímé vyhledání adresního místa)

        Returns:
            ValidateResult se stavem a případně nalezenou adresou
        """
        return ValidateResult.from_api(self._request("validate", params))

    def validate_by_ruian_id(self, ruian_id: int) -> ValidateResult:
        """Zvaliduje adresu podle RUIAN kódu adresního místa."""
        return self.validate({"ruianId": ruian_id})

    def find_address(
        self,
        municipality_name: str,
        street: str | None = None,
        cp: str | None = None,
        co: str | None = None,
        zip: int | str | None = None,
    ) -> ValidateResult:
        """
        Najde adresu podle jednotlivých částí.

        Do dotazu se posílají jen vyplněné části.
        """
        params: dict[str, Any] = {"municipalityName": municipality_name}
        optional = {"street": street, "cp": cp, "co": co, "zip": zip}
        params.update({k: v for k, v in optional.items() if v is not None})
        return self.validate(params)

    def validate_with_places(self, params: dict[str, Any]) -> ValidationWithPlaces:
        """
        Zvaliduje adresu a přidá všechna adresní místa na nalezené ulici.

        Pokud nalezená adresa nemá ulici, places je prázdný seznam.
        """
        result = self.validate(params)
        places: list[Place] = []

        if result.place is not None and result.place.street_name is not None:
            places = self.get_places(result.place.municipality_id, result.place.street_name)

        return ValidationWithPlaces(result=result, places=places)

    # === Číselníky ===

    def get_regions(self) -> list[Region]:
        """Vrátí všechny kraje."""
        return self._get_list("build/regions", {}, Region)

    def get_municipalities(self, region_id: str) -> list[Municipality]:
        """Vrátí obce v kraji."""
        return self._get_list("build/municipalities", {"regionId": region_id}, Municipality)

    def get_streets(self, municipality_id: int) -> list[Street]:
        """Vrátí ulice v obci."""
        return self._get_list("build/streets", {"municipalityId": municipality_id}, Street)

    def get_places(self, municipality_id: int, street_name: str) -> list[Place]:
        """Vrátí adresní místa na ulici."""
        params = {"municipalityId": municipality_id, "streetName": street_name}
        return self._get_list("build/places", params, Place)

    def get_all_municipalities(self) -> list[Municipality]:
        """
        Vrátí všechny obce ze všech krajů seřazené podle názvu.

        Seznam se mění zřídka, proto se cachuje 7x déle než ostatní odpovědi.
        Bez cache stojí 1 + počet krajů requestů.
        """
        cache_key = self._namespaced(self.CACHE_KEY_ALL_MUNICIPALITIES)

        if self.config.cache_enabled:
            cached = self._storage.load(cache_key)
            if cached is not None:
                logger.debug("Cache hit: all municipalities")
                return [Municipality.from_api(item) for item in cached]

        regions = self.get_regions()
        municipalities: list[Municipality] = []
        for region in regions:
            municipalities.extend(self.get_municipalities(region.region_id))

        municipalities.sort(key=lambda m: m.municipality_name)
        logger.info(f"Loaded {len(municipalities)} municipalities from {len(regions)} regions")

        self._store(
            cache_key,
            [m.to_api() for m in municipalities],
            self.config.cache_ttl * self.MUNICIPALITIES_CACHE_MULTIPLIER,
        )
        return municipalities

    # === Našeptávač a hierarchie ===

    def search_municipalities(self, query: str, limit: int = 10) -> list[Municipality]:
        """
        Vyhledá obce podle názvu (pro našeptávač).

        Obce, jejichž název dotazem začíná, jsou vždy před obcemi, které
        dotaz jen obsahují.

        Args:
            query: Hledaný text (min. 2 znaky)
            limit: Maximální počet výsledků

        Returns:
            Seznam obcí, prázdný pro příliš krátký dotaz
        """
        if limit < 1:
            raise RuianValidationError(f"Limit musí být kladné číslo: {limit}")

        query = query.strip()
        if len(query) < self.MIN_SEARCH_LENGTH:
            return []

        query_lower = query.lower()
        starts_with: list[Municipality] = []
        contains: list[Municipality] = []

        for municipality in self.get_all_municipalities():
            name_lower = municipality.municipality_name.lower()

            if name_lower.startswith(query_lower):
                starts_with.append(municipality)
                if len(starts_with) >= limit:
                    break
            elif query_lower in name_lower:
                contains.append(municipality)

        return (starts_with + contains)[:limit]

    def get_address_hierarchy(self, municipality_id: int) -> AddressHierarchy:
        """
        Sestaví hierarchii kraj -> obec -> ulice pro danou obec.

        Kraj a obec se berou z validace obce, kraj jen pokud API vrátí
        jeho kód i název. Ulice se načítají vždy.
        """
        result = self.validate({"municipalityId": municipality_id})

        region: Region | None = None
        municipality: Municipality | None = None

        place = result.place
        if place is not None:
            if place.region_id is not None and place.region_name is not None:
                region = Region(region_id=place.region_id, region_name=place.region_name)
            municipality = Municipality(
                municipality_id=place.municipality_id,
                municipality_name=place.municipality_name,
            )

        return AddressHierarchy(
            region=region,
            municipality=municipality,
            streets=self.get_streets(municipality_id),
        )

    # === Utility ===

    def clear_cache(self) -> None:
        """Vymaže všechny záznamy tohoto klienta z cache."""
        self._storage.clear(self.CACHE_NAMESPACE)
        logger.info("Cache cleared")


# === Singleton pattern pro globální klient ===

_global_client: RuianClient | None = None


def get_ruian_client() -> RuianClient:
    """Získá globální klient nakonfigurovaný z proměnných prostředí (singleton)."""
    global _global_client
    if _global_client is None:
        _global_client = RuianClient(RuianConfig.from_env())
    return _global_client


def close_ruian_client() -> None:
    """Uzavře globální klient."""
    global _global_client
    if _global_client:
        _global_client.close()
        _global_client = None
