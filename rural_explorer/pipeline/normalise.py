"""Normalise raw spreadsheet rows into typed property records."""

from __future__ import annotations

import logging
import math
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Iterable

from rural_explorer.common.constants import MAX_SKIPPED_SAMPLES
from rural_explorer.common.logging import log_event
from rural_explorer.common.models import (
    Cell,
    EmptyCell,
    FormulaCell,
    HeaderMap,
    NumberCell,
    Placeholders,
    PropertyRecord,
    RawRow,
    TextCell,
    classify_cell,
)

DEFAULT_HEADER_MAP = HeaderMap()
DEFAULT_PLACEHOLDERS = Placeholders()

HYPERLINK_RE = re.compile(r'=\s*HYPERLINK\s*\(\s*"([^"]+)"', re.IGNORECASE)
_FLOAT_PREFIX_RE = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_INT_PREFIX_RE = re.compile(r"^\s*[+-]?\d+")
_CELL_TYPES = (TextCell, NumberCell, FormulaCell, EmptyCell)

SKIP_PRICE = "PRICE_MISSING"
SKIP_COORDINATES = "COORDINATES_MISSING"


@dataclass(frozen=True)
class NormalisedRow:
    record: PropertyRecord
    valid: bool
    skip_reason: str | None = None


@dataclass(frozen=True)
class NormaliseResult:
    records: tuple[PropertyRecord, ...]
    raw_row_count: int
    skipped_by_reason: dict[str, int] = field(default_factory=dict)
    skipped_samples: tuple[dict, ...] = ()

    @property
    def skipped_count(self) -> int:
        return sum(self.skipped_by_reason.values())


def _as_cell(value: Any) -> Cell:
    if isinstance(value, _CELL_TYPES):
        return value
    return classify_cell(value)


def parse_float(value: Any) -> float | None:
    """Leading-decimal parse: ``"12.5 ac"`` gives 12.5, ``"1,200"`` gives 1.0."""
    cell = _as_cell(value)
    if isinstance(cell, NumberCell):
        number = cell.value
    elif isinstance(cell, TextCell):
        match = _FLOAT_PREFIX_RE.match(cell.text)
        if match is None:
            return None
        try:
            number = float(match.group(0))
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


def parse_int(value: Any) -> int | None:
    """Leading-integer parse: ``"3.9"`` gives 3, ``"42 mi"`` gives 42."""
    cell = _as_cell(value)
    if isinstance(cell, NumberCell):
        if not math.isfinite(cell.value):
            return None
        return int(cell.value)
    if isinstance(cell, TextCell):
        match = _INT_PREFIX_RE.match(cell.text)
        if match is None:
            return None
        return int(match.group(0))
    return None


def cell_text(value: Any) -> str | None:
    cell = _as_cell(value)
    if isinstance(cell, TextCell):
        text = cell.text.strip()
        return text or None
    if isinstance(cell, NumberCell):
        if cell.value.is_integer():
            return str(int(cell.value))
        return repr(cell.value)
    if isinstance(cell, FormulaCell):
        return cell.formula
    return None


def extract_url(value: Any, placeholder: str = DEFAULT_PLACEHOLDERS.url) -> str:
    """Resolve a listing link from a hyperlink formula or a literal URL."""
    cell = _as_cell(value)
    if isinstance(cell, FormulaCell):
        text = cell.formula
    elif isinstance(cell, TextCell):
        text = cell.text
    else:
        return placeholder

    match = HYPERLINK_RE.search(text)
    if match:
        return match.group(1)
    if text.startswith("http://") or text.startswith("https://"):
        return text
    return placeholder


def _compose_address(address: str, city: str | None, state: str | None) -> str:
    if city and state:
        return f"{address}, {city}, {state}"
    return address


def normalise_row(
    row: RawRow,
    ordinal: int,
    *,
    header_map: HeaderMap = DEFAULT_HEADER_MAP,
    placeholders: Placeholders = DEFAULT_PLACEHOLDERS,
) -> NormalisedRow:
    """Build a candidate record for one row and report whether it is kept.

    Every field falls back to its default independently. Only a missing
    price or missing coordinates mark the row as invalid.
    """
    price = parse_float(row.get(header_map.price)) or 0.0
    area_size = parse_float(row.get(header_map.area_size)) or 0.0
    latitude = parse_float(row.get(header_map.latitude))
    longitude = parse_float(row.get(header_map.longitude))
    travel_distance = parse_int(row.get(header_map.travel_distance)) or 0
    relevance_score = parse_int(row.get(header_map.relevance_score)) or 0

    address = cell_text(row.get(header_map.address)) or placeholders.address
    city = cell_text(row.get(header_map.city))
    state = cell_text(row.get(header_map.state))
    category = cell_text(row.get(header_map.category)) or placeholders.category

    record = PropertyRecord(
        id=ordinal,
        address=_compose_address(address, city, state),
        price=price,
        area_size=area_size,
        relevance_score=relevance_score,
        latitude=math.nan if latitude is None else latitude,
        longitude=math.nan if longitude is None else longitude,
        travel_distance=travel_distance,
        listing_url=extract_url(row.get(header_map.listing_url), placeholder=placeholders.url),
        category=category,
    )

    if record.price <= 0:
        return NormalisedRow(record=record, valid=False, skip_reason=SKIP_PRICE)
    if not record.has_coordinates:
        return NormalisedRow(record=record, valid=False, skip_reason=SKIP_COORDINATES)
    return NormalisedRow(record=record, valid=True)


def normalise_rows(
    rows: Iterable[RawRow],
    *,
    header_map: HeaderMap = DEFAULT_HEADER_MAP,
    placeholders: Placeholders = DEFAULT_PLACEHOLDERS,
    logger: logging.Logger | None = None,
) -> NormaliseResult:
    retained: list[PropertyRecord] = []
    skipped: Counter[str] = Counter()
    samples: list[dict] = []
    raw_row_count = 0

    for ordinal, row in enumerate(rows):
        raw_row_count += 1
        outcome = normalise_row(row, ordinal, header_map=header_map, placeholders=placeholders)
        if outcome.valid:
            retained.append(outcome.record)
            continue

        skipped[outcome.skip_reason] += 1
        if len(samples) < MAX_SKIPPED_SAMPLES:
            samples.append(
                {
                    "ordinal": ordinal,
                    "reason": outcome.skip_reason,
                    "address": outcome.record.address,
                }
            )
        if logger is not None:
            log_event(
                logger,
                f"row {ordinal} skipped: {outcome.skip_reason}",
                level=logging.DEBUG,
                stage="normalise",
                event="ROW_SKIPPED",
                status="skipped",
            )

    return NormaliseResult(
        records=tuple(retained),
        raw_row_count=raw_row_count,
        skipped_by_reason=dict(sorted(skipped.items())),
        skipped_samples=tuple(samples),
    )
