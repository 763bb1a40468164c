"""Market statistics, ranking and narrative over a retained record set."""

from __future__ import annotations

import math
from enum import Enum
from typing import Sequence

from rural_explorer.common.constants import TOP_N
from rural_explorer.common.deterministic import stable_sorted
from rural_explorer.common.models import UNAVAILABLE, DerivedSummary, PricePerArea, PropertyRecord


class AreaPolicy(str, Enum):
    # Zero-acre listings add 0 to the sum and still count in the divisor.
    FOLD_ZERO = "fold_zero"
    # Zero-acre listings are left out of both sum and divisor.
    EXCLUDE_ZERO = "exclude_zero"


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def price_per_unit_area(record: PropertyRecord) -> PricePerArea:
    if record.area_size > 0:
        return round_half_up(record.price / record.area_size)
    return UNAVAILABLE


def average_price(records: Sequence[PropertyRecord]) -> float:
    if not records:
        return 0.0
    return sum(record.price for record in records) / len(records)


def average_price_per_unit_area(
    records: Sequence[PropertyRecord],
    policy: AreaPolicy = AreaPolicy.FOLD_ZERO,
) -> float:
    policy = AreaPolicy(policy)
    if policy is AreaPolicy.EXCLUDE_ZERO:
        with_area = [record for record in records if record.area_size > 0]
        if not with_area:
            return 0.0
        return sum(record.price / record.area_size for record in with_area) / len(with_area)

    if not records:
        return 0.0
    total = sum(
        (record.price / record.area_size) if record.area_size > 0 else 0.0
        for record in records
    )
    return total / len(records)


def rank_records(records: Sequence[PropertyRecord]) -> list[PropertyRecord]:
    return stable_sorted(records, key=lambda record: (-record.relevance_score, record.id))


def format_money(value: float) -> str:
    return f"${round_half_up(value):,}"


def build_narrative(top: PropertyRecord, avg_ppa: float, record_count: int) -> str:
    return (
        f'Market signals prioritise "{top.address}" — LLM score {top.relevance_score}, '
        f"{top.travel_distance} mi out. Average density: {format_money(avg_ppa)}/acre "
        f"across {record_count} listings."
    )


def summarise(
    records: Sequence[PropertyRecord],
    *,
    top_n: int = TOP_N,
    area_policy: AreaPolicy = AreaPolicy.FOLD_ZERO,
) -> DerivedSummary:
    records = tuple(records)
    if not records:
        return DerivedSummary(
            average_price=0.0,
            average_price_per_unit_area=0.0,
            ranked_records=(),
            top_n=(),
            narrative_text=None,
            record_count=0,
        )

    avg_ppa = average_price_per_unit_area(records, area_policy)
    ranked = tuple(rank_records(records))
    return DerivedSummary(
        average_price=average_price(records),
        average_price_per_unit_area=avg_ppa,
        ranked_records=ranked,
        top_n=ranked[: max(top_n, 0)],
        narrative_text=build_narrative(ranked[0], avg_ppa, len(records)),
        record_count=len(records),
    )
