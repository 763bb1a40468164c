import pytest

from rural_explorer.common.models import UNAVAILABLE, PropertyRecord
from rural_explorer.pipeline.aggregate import (
    AreaPolicy,
    average_price,
    average_price_per_unit_area,
    format_money,
    price_per_unit_area,
    rank_records,
    summarise,
)


def _record(record_id: int, *, price: float = 100000, area: float = 10, score: int = 50, distance: int = 20, address: str | None = None):
    return PropertyRecord(
        id=record_id,
        address=address or f"Lot {record_id}",
        price=price,
        area_size=area,
        relevance_score=score,
        latitude=38.0 + record_id / 100,
        longitude=-77.0 - record_id / 100,
        travel_distance=distance,
        listing_url="#",
        category="Land",
    )


def test_average_price_is_arithmetic_mean():
    records = [_record(0, price=100000), _record(1, price=250000), _record(2, price=175000)]
    assert average_price(records) == pytest.approx(175000)


def test_zero_area_records_fold_in_as_zero_contributions():
    records = [_record(0, price=100000, area=0), _record(1, price=200000, area=10)]
    assert average_price_per_unit_area(records) == pytest.approx(10000)


def test_exclude_zero_policy_drops_zero_area_records_from_mean():
    records = [_record(0, price=100000, area=0), _record(1, price=200000, area=10)]
    assert average_price_per_unit_area(records, AreaPolicy.EXCLUDE_ZERO) == pytest.approx(20000)
    assert average_price_per_unit_area([_record(0, area=0)], AreaPolicy.EXCLUDE_ZERO) == 0.0


def test_area_policy_accepts_config_strings():
    records = [_record(0, price=100000, area=0), _record(1, price=200000, area=10)]
    assert average_price_per_unit_area(records, "exclude_zero") == pytest.approx(20000)


def test_ranking_breaks_score_ties_by_ascending_id():
    records = [_record(0, score=70), _record(1, score=95), _record(2, score=95)]
    assert [record.id for record in rank_records(records)] == [1, 2, 0]


def test_ranking_is_a_permutation_and_idempotent():
    records = [_record(i, score=score) for i, score in enumerate([10, 80, 80, 55, 99, 10])]
    first = rank_records(records)
    second = rank_records(list(reversed(records)))

    assert sorted(record.id for record in first) == list(range(6))
    assert first == second
    assert [record.relevance_score for record in first] == [99, 80, 80, 55, 10, 10]


def test_summarise_scenario_with_zero_area():
    summary = summarise([_record(0, price=100000, area=0), _record(1, price=200000, area=10)])
    assert summary.average_price_per_unit_area == pytest.approx(10000)
    assert summary.average_price == pytest.approx(150000)
    assert summary.record_count == 2


def test_summarise_top_n_is_truncated_prefix():
    records = [_record(0, score=10), _record(1, score=90)]
    summary = summarise(records)
    assert [record.id for record in summary.top_n] == [1, 0]

    many = [_record(i, score=i) for i in range(6)]
    assert [record.id for record in summarise(many).top_n] == [5, 4, 3]
    assert [record.id for record in summarise(many, top_n=1).top_n] == [5]


def test_summarise_narrative_names_top_record():
    records = [
        _record(0, price=100000, area=10, score=70, distance=30, address="North Tract"),
        _record(1, price=300000, area=10, score=95, distance=12, address="Blue Ridge Farm"),
    ]
    summary = summarise(records)
    assert summary.narrative_text == (
        'Market signals prioritise "Blue Ridge Farm" — LLM score 95, 12 mi out. '
        "Average density: $20,000/acre across 2 listings."
    )


def test_summarise_empty_collection_has_no_narrative():
    summary = summarise([])
    assert summary.is_empty
    assert summary.average_price == 0.0
    assert summary.average_price_per_unit_area == 0.0
    assert summary.ranked_records == ()
    assert summary.top_n == ()
    assert summary.narrative_text is None


def test_summarise_is_repeatable():
    records = [_record(i, score=score) for i, score in enumerate([70, 95, 95])]
    assert summarise(records) == summarise(records)


def test_per_record_price_per_area_marks_zero_area_unavailable():
    assert price_per_unit_area(_record(0, price=100000, area=3)) == 33333
    assert price_per_unit_area(_record(0, price=5, area=2)) == 3
    assert price_per_unit_area(_record(0, price=100000, area=0)) is UNAVAILABLE
    assert price_per_unit_area(_record(0, price=100000, area=0)) != 0


def test_format_money_groups_thousands():
    assert format_money(123456.5) == "$123,457"
    assert format_money(0) == "$0"


def test_summarise_treats_negative_top_n_as_zero():
    records = [_record(i, score=i) for i in range(3)]
    summary = summarise(records, top_n=-1)
    assert summary.top_n == ()
    assert len(summary.ranked_records) == 3
