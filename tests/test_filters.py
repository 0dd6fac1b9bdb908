from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from conference_schedule.search import FilterPipeline, build_search_index
from conference_schedule.state import FilterState

MONDAY = datetime(2024, 11, 11, 9, 0, tzinfo=timezone.utc)
TUESDAY = datetime(2024, 11, 12, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def scenario(make_session):
    a = make_session(1, start=MONDAY, track="Core", slot_room={"name": "Main Stage"})
    b = make_session(2, start=MONDAY + timedelta(hours=1), track="Core", slot_room={"name": "Stage 2"})
    c = make_session(
        3,
        start=TUESDAY,
        track="Apps",
        slot_room={"name": "Main Stage"},
        speakers=[{"id": "v", "name": "Vitalik"}],
    )
    return a, b, c


def test_default_state_is_identity(scenario) -> None:
    index = build_search_index(scenario)

    assert FilterPipeline().apply(index, FilterState()) == list(scenario)


def test_track_day_and_combined_filters(scenario) -> None:
    a, b, c = scenario
    index = build_search_index(scenario)
    pipeline = FilterPipeline()

    assert pipeline.apply(index, FilterState(track="Core")) == [a, b]
    assert pipeline.apply(index, FilterState(day="Tuesday, Nov 12")) == [c]
    assert pipeline.apply(index, FilterState(track="Core", day="Tuesday, Nov 12")) == []


def test_search_is_case_insensitive_substring(scenario) -> None:
    _, _, c = scenario
    index = build_search_index(scenario)

    assert FilterPipeline().apply(index, FilterState(search_term="VITAL")) == [c]
    assert FilterPipeline().apply(index, FilterState(search_term="nothing like this")) == []


def test_room_filter_excludes_sessions_without_room(scenario, make_session) -> None:
    a, _, c = scenario
    roomless = make_session(4, start=MONDAY)
    index = build_search_index([*scenario, roomless])

    assert FilterPipeline().apply(index, FilterState(room="Main Stage")) == [a, c]


def test_day_label_uses_configured_timezone(make_session) -> None:
    late_monday_utc = make_session(1, start=datetime(2024, 11, 11, 20, 0, tzinfo=timezone.utc))
    index = build_search_index([late_monday_utc])

    utc = FilterPipeline(tz=timezone.utc)
    bangkok = FilterPipeline(tz=timezone(timedelta(hours=7)))

    assert utc.apply(index, FilterState(day="Monday, Nov 11")) == [late_monday_utc]
    assert bangkok.apply(index, FilterState(day="Monday, Nov 11")) == []
    assert bangkok.apply(index, FilterState(day="Tuesday, Nov 12")) == [late_monday_utc]


def test_only_non_default_fields_add_stages() -> None:
    pipeline = FilterPipeline()

    assert pipeline.stages(FilterState()) == []
    assert len(pipeline.stages(FilterState(search_term="x", day="d", track="t", room="r"))) == 4
    assert len(pipeline.stages(FilterState(track="t"))) == 1
