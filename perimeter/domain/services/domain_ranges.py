"""Normalization ranges for numeric predictions, by domain and subtype."""

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional, Union

from pydantic import BaseModel, Field, model_validator

logger = logging.getLogger(__name__)

DEFAULT_SUBTYPE = "default"


class NumericRange(BaseModel):
    """Closed interval used to normalize numeric prediction errors."""

    min: float = Field(..., allow_inf_nan=False, description="Lower bound")
    max: float = Field(..., allow_inf_nan=False, description="Upper bound")

    class Config:
        """Pydantic model configuration."""
        frozen = True

    @model_validator(mode="after")
    def _check_bounds(self) -> "NumericRange":
        if self.min > self.max:
            raise ValueError(f"Range min {self.min} exceeds max {self.max}")
        return self

    @property
    def size(self) -> float:
        """Width of the range."""
        return self.max - self.min


UNIVERSAL_RANGE = NumericRange(min=0, max=100)

RangeSpec = Union[NumericRange, Mapping[str, float]]

DEFAULT_DOMAIN_RANGES: Dict[str, Dict[str, RangeSpec]] = {
    "economy": {
        "cpi": {"min": -5, "max": 100},  # CPI, percent
        "exchange": {"min": 0.1, "max": 100},  # exchange rate multiple
        "gdp": {"min": -20, "max": 20},  # GDP growth, percent
        DEFAULT_SUBTYPE: {"min": -50, "max": 100},
    },
    "politics": {
        "election": {"min": 0, "max": 100},
        "approval": {"min": 0, "max": 100},
        DEFAULT_SUBTYPE: {"min": 0, "max": 100},
    },
    "technology": {
        "stock": {"min": 0, "max": 1000},
        "market": {"min": 0, "max": 100},  # market share, percent
        DEFAULT_SUBTYPE: {"min": 0, "max": 100},
    },
    "earthquakes": {
        "magnitude": {"min": 0, "max": 10},
        "depth": {"min": 0, "max": 700},  # km
        DEFAULT_SUBTYPE: {"min": 0, "max": 10},
    },
}


def _key(name: str) -> str:
    return name.strip().lower()


def _as_range(spec: RangeSpec) -> NumericRange:
    if isinstance(spec, NumericRange):
        return spec
    return NumericRange(**spec)


class DomainRangeRegistry:
    """Read-only lookup of normalization ranges.

    The table is plain data: adding a domain or subtype means passing a
    different mapping in, never touching the scoring code.
    """

    def __init__(
        self,
        ranges: Optional[Mapping[str, Mapping[str, RangeSpec]]] = None,
        fallback: NumericRange = UNIVERSAL_RANGE,
    ):
        """Build the registry.

        Args:
            ranges: domain -> subtype -> range; each domain should carry a
                ``default`` subtype. Defaults to the built-in table.
            fallback: Range used for domains absent from the table.
        """
        source = DEFAULT_DOMAIN_RANGES if ranges is None else ranges
        self._ranges: Dict[str, Dict[str, NumericRange]] = {
            _key(domain): {_key(subtype): _as_range(spec) for subtype, spec in subtypes.items()}
            for domain, subtypes in source.items()
        }
        self._fallback = fallback

    def resolve(self, domain: str, subtype: Optional[str] = None) -> NumericRange:
        """Find the range for a domain and optional subtype.

        Falls back to the domain's default range, then to the universal
        fallback when the domain is unknown.
        """
        subtypes = self._ranges.get(_key(domain))
        if subtypes is None:
            return self._fallback

        if subtype and _key(subtype) in subtypes:
            return subtypes[_key(subtype)]
        return subtypes.get(DEFAULT_SUBTYPE, self._fallback)

    @property
    def domains(self) -> Iterable[str]:
        """Domains with a configured range table."""
        return tuple(self._ranges)

    def subtypes(self, domain: str) -> Iterable[str]:
        """Subtypes configured for a domain, excluding the default."""
        return tuple(s for s in self._ranges.get(_key(domain), {}) if s != DEFAULT_SUBTYPE)

    def merged(self, overrides: Mapping[str, Mapping[str, RangeSpec]]) -> "DomainRangeRegistry":
        """Return a new registry with overrides layered on top of this one."""
        combined: Dict[str, Dict[str, RangeSpec]] = {
            domain: dict(subtypes) for domain, subtypes in self._ranges.items()
        }
        for domain, subtypes in overrides.items():
            target = combined.setdefault(_key(domain), {})
            for subtype, spec in subtypes.items():
                target[_key(subtype)] = spec
        return DomainRangeRegistry(combined, fallback=self._fallback)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "DomainRangeRegistry":
        """Built-in table extended with overrides from a JSON file.

        The file maps ``{domain: {subtype: {"min": x, "max": y}}}``.
        """
        with open(path, "r", encoding="utf-8") as f:
            overrides = json.load(f)
        logger.info(f"📐 Loaded domain range overrides for {len(overrides)} domains from {path}")
        return cls().merged(overrides)
