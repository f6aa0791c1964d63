from datetime import datetime, timedelta, timezone

import pytest

from src.common.models import Category, FilterSpec, Period
from src.stats.filters import apply_filters, subtract_month


def _dated(make_entry, now):
    today = make_entry(timestamp=now.replace(hour=8))
    yesterday = make_entry(timestamp=now - timedelta(days=1))
    older = make_entry(timestamp=now - timedelta(days=8))
    return today, yesterday, older


def test_identity_filter_returns_input_unchanged(make_entry, now):
    entries = [
        make_entry(Category.SOFT, food="kibble"),
        make_entry(timestamp=now - timedelta(days=400)),
        make_entry(Category.BLOOD, at=(41.9, 12.5)),
    ]
    assert apply_filters(entries, FilterSpec(), now=now) == entries


def test_today_and_week_windows(make_entry, now):
    today, yesterday, older = _dated(make_entry, now)
    entries = [older, yesterday, today]

    assert apply_filters(entries, FilterSpec(period=Period.TODAY), now=now) == [today]
    assert apply_filters(entries, FilterSpec(period=Period.YESTERDAY), now=now) == [yesterday]
    assert apply_filters(entries, FilterSpec(period=Period.WEEK), now=now) == [yesterday, today]
    assert apply_filters(entries, FilterSpec(period=Period.MONTH), now=now) == entries


def test_today_uses_calendar_days_not_rolling_hours(make_entry):
    now = datetime(2025, 3, 15, 0, 30)
    late_yesterday = make_entry(timestamp=datetime(2025, 3, 14, 23, 50))
    early_today = make_entry(timestamp=datetime(2025, 3, 15, 0, 5))

    spec = FilterSpec(period=Period.TODAY)
    assert apply_filters([late_yesterday, early_today], spec, now=now) == [early_today]


def test_week_window_is_not_truncated_to_midnight(make_entry, now):
    inside = make_entry(timestamp=now - timedelta(days=7))
    outside = make_entry(timestamp=now - timedelta(days=7, minutes=1))

    assert apply_filters([inside, outside], FilterSpec(period=Period.WEEK), now=now) == [inside]


def test_month_window_steps_back_one_calendar_month(make_entry, now):
    inside = make_entry(timestamp=datetime(2025, 2, 15, 12, 0))
    outside = make_entry(timestamp=datetime(2025, 2, 15, 11, 59))

    assert apply_filters([inside, outside], FilterSpec(period=Period.MONTH), now=now) == [inside]


@pytest.mark.parametrize(
    "moment, expected",
    [
        (datetime(2025, 3, 31, 9), datetime(2025, 2, 28, 9)),
        (datetime(2024, 3, 31, 9), datetime(2024, 2, 29, 9)),
        (datetime(2025, 1, 10, 9), datetime(2024, 12, 10, 9)),
    ],
)
def test_subtract_month_clamps_day(moment, expected):
    assert subtract_month(moment) == expected


def test_category_and_food_are_anded(make_entry, now):
    soft_kibble = make_entry(Category.SOFT, food="kibble")
    soft_rice = make_entry(Category.SOFT, food="rice")
    healthy_kibble = make_entry(Category.HEALTHY, food="kibble")
    old_soft_kibble = make_entry(Category.SOFT, food="kibble", timestamp=now - timedelta(days=3))
    entries = [soft_kibble, soft_rice, healthy_kibble, old_soft_kibble]

    spec = FilterSpec.parse(period="today", category="soft", food="kibble")
    assert apply_filters(entries, spec, now=now) == [soft_kibble]

    spec = FilterSpec.parse(category="soft")
    assert apply_filters(entries, spec, now=now) == [soft_kibble, soft_rice, old_soft_kibble]


def test_filter_yielding_nothing_is_empty(make_entry, now):
    entries = [make_entry(Category.HEALTHY)]
    assert apply_filters(entries, FilterSpec.parse(category="blood"), now=now) == []
    assert apply_filters([], FilterSpec.parse(period="today"), now=now) == []


def test_aware_timestamps_are_compared_in_local_time(make_entry):
    now = datetime.now()
    aware = make_entry(timestamp=datetime.now(timezone.utc) - timedelta(minutes=5))

    assert apply_filters([aware], FilterSpec(period=Period.WEEK), now=now) == [aware]


def test_filter_spec_parse_all_sentinels():
    spec = FilterSpec.parse("all", "all", "all")
    assert spec.is_identity
    assert FilterSpec.parse(food="  kibble ").food == "kibble"
    with pytest.raises(ValueError):
        FilterSpec.parse(period="fortnight")


def test_food_filter_matches_untrimmed_labels(make_entry, now):
    padded = make_entry(Category.SOFT, food=" kibble ")
    blank = make_entry(Category.SOFT, food="   ")

    assert padded.food == "kibble"
    assert blank.food is None
    assert apply_filters([padded, blank], FilterSpec.parse(food="kibble"), now=now) == [padded]
