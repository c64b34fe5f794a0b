from __future__ import annotations

import logging
from datetime import date
from enum import Enum
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)


class Hemisphere(str, Enum):
    northern = "Northern"
    southern = "Southern"


class HolidayType(str, Enum):
    public = "public"
    cultural = "cultural"
    religious = "religious"
    seasonal = "seasonal"


class Relevance(str, Enum):
    high = "high"
    medium = "medium"
    low = "low"


class DateFormat(str, Enum):
    day_first = "DD/MM/YYYY"
    month_first = "MM/DD/YYYY"


class TimeFormat(str, Enum):
    twelve_hour = "12h"
    twenty_four_hour = "24h"


class _CatalogModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class Holiday(_CatalogModel):
    date: str = Field(..., description="ISO date YYYY-MM-DD")
    name: str
    description: str = ""
    type: HolidayType
    relevance: Relevance = Relevance.medium

    @field_validator("date")
    @classmethod
    def _iso_date(cls, v: str) -> str:
        v = v.strip()
        if len(v) != 10:
            raise ValueError(f"holiday date must be YYYY-MM-DD, got {v!r}")
        date.fromisoformat(v)
        return v

    def bullet(self) -> str:
        return f"- {self.name} ({self.date}): {self.description}"


class RegionalConfig(_CatalogModel):
    country: str
    country_code: str
    language: str
    timezone: str
    hemisphere: Hemisphere
    date_format: DateFormat
    time_format: TimeFormat
    currency: str
    currency_symbol: str
    holiday_meaning: str = ""
    holidays: tuple[Holiday, ...] = ()
    cultural_notes: tuple[str, ...] = ()
    terminology: Mapping[str, str] = Field(default_factory=dict)

    @field_validator("country_code")
    @classmethod
    def _upper_code(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("country_code must not be empty")
        return v

    @field_validator("terminology")
    @classmethod
    def _read_only_terms(cls, v: Mapping[str, str]) -> Mapping[str, str]:
        # frozen=True stops attribute assignment; the mapping itself must be read-only too.
        return MappingProxyType({str(k).strip().lower(): str(val).strip() for k, val in v.items()})


def _catalog_path() -> Path:
    return Path(__file__).resolve().parent / "data" / "regions.yaml"


@lru_cache(maxsize=1)
def _load_catalog() -> tuple[dict[str, RegionalConfig], dict[str, str], str]:
    path = _catalog_path()
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Regional catalog did not parse to a dict: {path}")

    raw_regions = data.get("regions")
    if not isinstance(raw_regions, dict) or not raw_regions:
        raise ValueError("Regional catalog is missing regions")

    errors: list[str] = []
    regions: dict[str, RegionalConfig] = {}
    for code, raw in raw_regions.items():
        try:
            cfg = RegionalConfig.model_validate(raw)
        except ValueError as e:
            errors.append(f"{code}: {e}")
            continue
        if cfg.country_code != str(code).upper():
            errors.append(f"{code}: country_code {cfg.country_code} does not match its key")
            continue
        regions[cfg.country_code] = cfg

    aliases = {str(k).upper(): str(v).upper() for k, v in (data.get("aliases") or {}).items()}
    for alias, target in aliases.items():
        if target not in regions:
            errors.append(f"alias {alias} points at unknown region {target}")

    default_code = str(data.get("default_region") or "").upper()
    if default_code not in regions:
        errors.append(f"default_region {default_code!r} is not a catalog region")

    if errors:
        msg = "\n".join(f"- {e}" for e in errors)
        raise ValueError(f"Regional catalog validation failed:\n{msg}")

    logger.debug("Loaded regional catalog: %s", ", ".join(regions))
    return regions, aliases, default_code


def default_country_code() -> str:
    return _load_catalog()[2]


def normalize_country_code(country_code: Optional[str]) -> str:
    """Resolve a user-entered code (any case, aliases allowed) to a catalog code.

    Unknown, empty or missing codes resolve to the default region.
    """
    regions, aliases, default_code = _load_catalog()
    code = (country_code or "").strip().upper() if isinstance(country_code, str) else ""
    code = aliases.get(code, code)
    if code in regions:
        return code
    if code:
        logger.debug("Unknown country code %r; using default region %s", country_code, default_code)
    return default_code


def get_config(country_code: Optional[str]) -> RegionalConfig:
    """Look up a region by code. Never raises for unknown input; falls back to the default region."""
    regions = _load_catalog()[0]
    return regions[normalize_country_code(country_code)]


def is_supported(country_code: Optional[str]) -> bool:
    regions, aliases, _ = _load_catalog()
    code = (country_code or "").strip().upper() if isinstance(country_code, str) else ""
    return aliases.get(code, code) in regions


def all_country_codes() -> tuple[str, ...]:
    return tuple(_load_catalog()[0])


def all_configs() -> tuple[RegionalConfig, ...]:
    return tuple(_load_catalog()[0].values())


def describe(config: RegionalConfig) -> dict[str, Any]:
    """Summary used by the `regions` CLI listing."""
    return {
        "country_code": config.country_code,
        "country": config.country,
        "language": config.language,
        "hemisphere": config.hemisphere.value,
        "date_format": config.date_format.value,
        "currency": f"{config.currency} ({config.currency_symbol})",
        "holidays": len(config.holidays),
    }
