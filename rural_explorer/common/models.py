"""Data models used across the pipeline."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, fields
from decimal import Decimal
from typing import Any, Mapping, Union

from rural_explorer.common.constants import DEFAULT_HEADERS, DEFAULT_PLACEHOLDERS

# One spreadsheet row keyed by header text, exactly as the reader returned it.
RawRow = Mapping[str, Any]


@dataclass(frozen=True)
class TextCell:
    text: str


@dataclass(frozen=True)
class NumberCell:
    value: float


@dataclass(frozen=True)
class FormulaCell:
    formula: str


@dataclass(frozen=True)
class EmptyCell:
    pass


Cell = Union[TextCell, NumberCell, FormulaCell, EmptyCell]

EMPTY = EmptyCell()


def classify_cell(value: Any) -> Cell:
    """Map a raw reader value onto exactly one cell variant.

    Booleans are text, not numbers. A string is a formula when its first
    non-blank character is ``=``. NaN counts as empty.
    """
    if value is None:
        return EMPTY
    if isinstance(value, bool):
        return TextCell(str(value).upper())
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
        if math.isnan(number):
            return EMPTY
        return NumberCell(number)
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return EMPTY
        if stripped.startswith("="):
            return FormulaCell(stripped)
        return TextCell(value)
    return TextCell(str(value))


@dataclass(frozen=True)
class HeaderMap:
    """Logical field name to exact spreadsheet header."""

    address: str = DEFAULT_HEADERS["address"]
    city: str = DEFAULT_HEADERS["city"]
    state: str = DEFAULT_HEADERS["state"]
    price: str = DEFAULT_HEADERS["price"]
    area_size: str = DEFAULT_HEADERS["area_size"]
    category: str = DEFAULT_HEADERS["category"]
    latitude: str = DEFAULT_HEADERS["latitude"]
    longitude: str = DEFAULT_HEADERS["longitude"]
    travel_distance: str = DEFAULT_HEADERS["travel_distance"]
    relevance_score: str = DEFAULT_HEADERS["relevance_score"]
    listing_url: str = DEFAULT_HEADERS["listing_url"]

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, str]) -> "HeaderMap":
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in mapping.items() if key in known})


@dataclass(frozen=True)
class Placeholders:
    address: str = DEFAULT_PLACEHOLDERS["address"]
    category: str = DEFAULT_PLACEHOLDERS["category"]
    url: str = DEFAULT_PLACEHOLDERS["url"]

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, str]) -> "Placeholders":
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in mapping.items() if key in known})


@dataclass(frozen=True)
class PropertyRecord:
    id: int
    address: str
    price: float
    area_size: float
    relevance_score: int
    latitude: float
    longitude: float
    travel_distance: int
    listing_url: str
    category: str

    @property
    def has_coordinates(self) -> bool:
        return math.isfinite(self.latitude) and math.isfinite(self.longitude)

    @property
    def is_retained(self) -> bool:
        return self.price > 0 and self.has_coordinates

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class _Unavailable:
    """Marker for a per-acre price that cannot be computed."""

    _instance: "_Unavailable | None" = None

    def __new__(cls) -> "_Unavailable":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNAVAILABLE"


UNAVAILABLE = _Unavailable()

PricePerArea = Union[int, _Unavailable]


@dataclass(frozen=True)
class DerivedSummary:
    average_price: float
    average_price_per_unit_area: float
    ranked_records: tuple[PropertyRecord, ...]
    top_n: tuple[PropertyRecord, ...]
    narrative_text: str | None
    record_count: int

    @property
    def is_empty(self) -> bool:
        return self.record_count == 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "average_price": self.average_price,
            "average_price_per_unit_area": self.average_price_per_unit_area,
            "ranked_ids": [record.id for record in self.ranked_records],
            "top_n": [record.to_dict() for record in self.top_n],
            "narrative_text": self.narrative_text,
            "record_count": self.record_count,
        }
