"""
Pydantic modely pro RUIAN REST API responses.

Modely mapují JSON strukturu z ruian.fnx.io/api/v1/ruian/. Atributy jsou
v snake_case, původní camelCase klíče API slouží jako aliasy.
"""

from enum import Enum
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    model_validator,
)

from ruian_client.exceptions import RuianAPIError


def format_house_number(cp: str | None, co: str | None, ce: str | None) -> str:
    """Složí číslo domu ve tvaru "cp/co", případně "ev.ce"."""
    parts = [cp, co, f"ev.{ce}" if ce is not None else None]
    return "/".join(part for part in parts if part)


class RuianModel(BaseModel):
    """Společný základ: neměnné modely plněné z API slovníků."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )

    @classmethod
    def from_api(cls, data: dict[str, Any]):
        """
        Vytvoří model z dekódované API odpovědi.

        Raises:
            RuianAPIError: Pokud v datech chybí povinné pole nebo má špatný typ
        """
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise RuianAPIError.invalid_payload(
                f"{cls.__name__}: {e.error_count()} validation error(s)"
            ) from e

    def to_api(self) -> dict[str, Any]:
        """Vrátí model v surovém tvaru API (camelCase klíče)."""
        return self.model_dump(by_alias=True, mode="json")


class Region(RuianModel):
    """Kraj."""

    region_id: str = Field(..., alias="regionId", description="Kód kraje")
    region_name: str = Field(..., alias="regionName", description="Název kraje")


class Municipality(RuianModel):
    """Obec."""

    municipality_id: int = Field(..., alias="municipalityId", description="RUIAN kód obce")
    municipality_name: str = Field(..., alias="municipalityName", description="Název obce")


class Street(RuianModel):
    """Ulice, případně část obce bez ulic."""

    street_name: str | None = Field(None, alias="streetName")
    street_less_part_name: str | None = Field(None, alias="streetLessPartName")

    @property
    def display_name(self) -> str:
        """Název ulice, jinak název části obce."""
        return self.street_name or self.street_less_part_name or ""


class Place(RuianModel):
    """Adresní místo na ulici."""

    cp: str | None = Field(None, alias="placeCp", description="Číslo popisné")
    co: str | None = Field(None, alias="placeCo", description="Číslo orientační")
    ce: str | None = Field(None, alias="placeCe", description="Číslo evidenční")
    zip: int = Field(..., alias="placeZip", description="PSČ")
    place_id: int = Field(..., alias="placeId", description="RUIAN kód adresního místa")

    @property
    def formatted_number(self) -> str:
        return format_house_number(self.cp, self.co, self.ce)


class ValidatedPlace(RuianModel):
    """Adresa nalezená validací."""

    confidence: float = Field(0.0, ge=0, le=1, description="Míra shody 0-1")
    region_id: str | None = Field(None, alias="regionId")
    region_name: str | None = Field(None, alias="regionName")
    municipality_id: int = Field(..., alias="municipalityId")
    municipality_name: str = Field(..., alias="municipalityName")
    municipality_part_id: int | None = Field(None, alias="municipalityPartId")
    municipality_part_name: str | None = Field(None, alias="municipalityPartName")
    street_name: str | None = Field(None, alias="streetName")
    cp: str | None = Field(None, description="Číslo popisné")
    co: str | None = Field(None, description="Číslo orientační")
    ce: str | None = Field(None, description="Číslo evidenční")
    zip: int = Field(..., description="PSČ")
    ruian_id: int = Field(
        0,
        validation_alias=AliasChoices("ruianId", "id", "ruian_id"),
        serialization_alias="ruianId",
        description="RUIAN kód adresního místa",
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_null_defaults(cls, data: Any) -> Any:
        # null confidence znamená 0, null ruianId padá na id
        if isinstance(data, dict):
            return {
                k: v
                for k, v in data.items()
                if not (v is None and k in ("confidence", "ruianId", "id"))
            }
        return data

    @property
    def formatted_number(self) -> str:
        return format_house_number(self.cp, self.co, self.ce)

    @property
    def formatted_address(self) -> str:
        """
        Celá adresa na jeden řádek.

        Např. "Dlouhá 14/2b, Praha, 11000" nebo "Lhota, 25, Lhota, 39601"
        pro obce bez ulic.
        """
        parts: list[str] = []
        number = self.formatted_number

        if self.street_name is not None:
            parts.append(f"{self.street_name} {number}".strip())
        elif number:
            parts.append(self.municipality_part_name or self.municipality_name)
            parts.append(number)

        parts.append(self.municipality_name)
        parts.append(str(self.zip) if self.zip else "")

        return ", ".join(part for part in parts if part)


class ValidateStatus(str, Enum):
    """Výsledek validace adresy."""

    MATCH = "MATCH"  # Přesná shoda
    POSSIBLE = "POSSIBLE"  # Pravděpodobná shoda
    NOT_FOUND = "NOT_FOUND"
    ERROR = "ERROR"


class ValidateResult(RuianModel):
    """Odpověď z endpointu validate."""

    status: ValidateStatus
    message: str | None = None
    place: ValidatedPlace | None = None

    def is_match(self) -> bool:
        return self.status is ValidateStatus.MATCH

    def is_possible(self) -> bool:
        return self.status is ValidateStatus.POSSIBLE

    def is_found(self) -> bool:
        return self.status in (ValidateStatus.MATCH, ValidateStatus.POSSIBLE)

    def is_error(self) -> bool:
        return self.status is ValidateStatus.ERROR

    def is_not_found(self) -> bool:
        return self.status is ValidateStatus.NOT_FOUND


class AddressHierarchy(BaseModel):
    """Kraj -> obec -> ulice pro jednu obec."""

    model_config = ConfigDict(frozen=True)

    region: Region | None = None
    municipality: Municipality | None = None
    streets: list[Street] = Field(default_factory=list)


class ValidationWithPlaces(BaseModel):
    """Výsledek validace doplněný o všechna adresní místa na nalezené ulici."""

    model_config = ConfigDict(frozen=True)

    result: ValidateResult
    places: list[Place] = Field(default_factory=list)
