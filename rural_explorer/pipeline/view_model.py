"""Plain-data payloads for the map, chart and listing renderers."""

from __future__ import annotations

from typing import Sequence

from rural_explorer.common.constants import HIGHLIGHT_SCORE
from rural_explorer.common.models import UNAVAILABLE, DerivedSummary, PropertyRecord
from rural_explorer.pipeline.aggregate import format_money, price_per_unit_area

HIGHLIGHT_COLOR = "#10b981"
MUTED_COLOR = "#64748b"
UNAVAILABLE_DISPLAY = "—"
BOUNDS_PADDING = 0.15
MIN_BUBBLE_RADIUS = 4


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,}"


def price_display(record: PropertyRecord) -> str:
    # Up to three decimals, like an en-US locale string.
    return f"${_format_number(round(record.price, 3))}"


def ppa_display(record: PropertyRecord) -> str:
    ppa = price_per_unit_area(record)
    if ppa is UNAVAILABLE:
        return UNAVAILABLE_DISPLAY
    return f"{ppa:,}"


def build_chart_points(records: Sequence[PropertyRecord]) -> list[dict]:
    points = []
    for record in records:
        ppa = price_per_unit_area(record)
        points.append(
            {
                "id": record.id,
                "x": record.travel_distance,
                "y": 0 if ppa is UNAVAILABLE else ppa,
                "r": max(MIN_BUBBLE_RADIUS, record.relevance_score / 8),
                "label": f"{record.address} — {price_display(record)} | {_format_number(record.area_size)} ac",
            }
        )
    return points


def build_map_markers(
    records: Sequence[PropertyRecord],
    *,
    highlight_score: int = HIGHLIGHT_SCORE,
) -> list[dict]:
    return [
        {
            "id": record.id,
            "lat": record.latitude,
            "lng": record.longitude,
            "color": HIGHLIGHT_COLOR if record.relevance_score >= highlight_score else MUTED_COLOR,
            "price_display": price_display(record),
            "address": record.address,
            "area": record.area_size,
            "score": record.relevance_score,
            "url": record.listing_url,
        }
        for record in records
    ]


def build_listing_cards(records: Sequence[PropertyRecord]) -> list[dict]:
    return [
        {
            "id": record.id,
            "score": record.relevance_score,
            "category": record.category,
            "price_display": price_display(record),
            "address": record.address,
            "area": record.area_size,
            "travel_distance": record.travel_distance,
            "ppa_display": ppa_display(record),
            "url": record.listing_url,
            "focus": {"lat": record.latitude, "lng": record.longitude, "zoom": 13},
        }
        for record in records
    ]


def build_sidebar(summary: DerivedSummary) -> dict:
    if summary.is_empty:
        return {
            "average_price": None,
            "average_ppa": None,
            "narrative": None,
            "top_picks": [],
        }

    return {
        "average_price": format_money(summary.average_price),
        "average_ppa": f"{format_money(summary.average_price_per_unit_area)}/ac",
        "narrative": summary.narrative_text,
        "top_picks": [
            {
                "id": record.id,
                "rank": rank,
                "address": record.address,
                "price_display": price_display(record),
                "area": record.area_size,
                "travel_distance": record.travel_distance,
                "score": record.relevance_score,
                "trophy": rank == 0,
            }
            for rank, record in enumerate(summary.top_n)
        ],
    }


def compute_bounds(
    records: Sequence[PropertyRecord],
    padding: float = BOUNDS_PADDING,
) -> tuple[float, float, float, float] | None:
    """Return ``(south, west, north, east)`` padded by a share of the span."""
    if not records:
        return None
    lats = [record.latitude for record in records]
    lngs = [record.longitude for record in records]
    south, north = min(lats), max(lats)
    west, east = min(lngs), max(lngs)
    lat_pad = (north - south) * padding
    lng_pad = (east - west) * padding
    return (south - lat_pad, west - lng_pad, north + lat_pad, east + lng_pad)


def build_view_model(
    records: Sequence[PropertyRecord],
    summary: DerivedSummary,
    *,
    highlight_score: int = HIGHLIGHT_SCORE,
) -> dict:
    bounds = compute_bounds(records)
    return {
        "listing_count_label": f"{len(records)} Strategic Assets",
        "cards": build_listing_cards(records),
        "markers": build_map_markers(records, highlight_score=highlight_score),
        "chart": {
            "x_label": "Drive Distance (mi)",
            "y_label": "$ / Acre",
            "points": build_chart_points(records),
        },
        "sidebar": build_sidebar(summary),
        "bounds": list(bounds) if bounds is not None else None,
    }
