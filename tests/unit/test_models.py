import math
from datetime import date
from decimal import Decimal

from rural_explorer.common.models import (
    EMPTY,
    UNAVAILABLE,
    FormulaCell,
    HeaderMap,
    NumberCell,
    Placeholders,
    PropertyRecord,
    TextCell,
    classify_cell,
)


def test_classify_cell_covers_every_variant():
    assert classify_cell(None) == EMPTY
    assert classify_cell("   ") == EMPTY
    assert classify_cell(float("nan")) == EMPTY
    assert classify_cell(12) == NumberCell(12.0)
    assert classify_cell(Decimal("2.5")) == NumberCell(2.5)
    assert classify_cell(" =HYPERLINK(\"x\")") == FormulaCell('=HYPERLINK("x")')
    assert classify_cell("Farm") == TextCell("Farm")
    assert classify_cell(True) == TextCell("TRUE")
    assert classify_cell(date(2026, 2, 1)) == TextCell("2026-02-01")


def test_header_map_defaults_match_spreadsheet_contract():
    header_map = HeaderMap()
    assert header_map.travel_distance == "Drive Dist (mi)"
    assert header_map.relevance_score == "LLM Score"
    assert header_map.listing_url == "Property URL Link"


def test_header_map_from_mapping_ignores_unknown_fields():
    header_map = HeaderMap.from_mapping({"price": "Cost", "bogus": "x"})
    assert header_map.price == "Cost"
    assert header_map.address == "Address"


def test_placeholders_from_mapping():
    assert Placeholders.from_mapping({"url": "about:blank"}).url == "about:blank"


def test_property_record_retention_rule():
    base = dict(
        id=0,
        address="A",
        price=1.0,
        area_size=0.0,
        relevance_score=0,
        latitude=38.0,
        longitude=-77.0,
        travel_distance=0,
        listing_url="#",
        category="Land",
    )
    assert PropertyRecord(**base).is_retained
    assert not PropertyRecord(**{**base, "price": 0.0}).is_retained
    assert not PropertyRecord(**{**base, "longitude": math.nan}).is_retained


def test_unavailable_is_a_falsy_singleton_distinct_from_zero():
    assert not UNAVAILABLE
    assert UNAVAILABLE != 0
    assert type(UNAVAILABLE)() is UNAVAILABLE
    assert repr(UNAVAILABLE) == "UNAVAILABLE"
