from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from conference_schedule.app import ScheduleEngine
from conference_schedule.errors import FetchFailure
from conference_schedule.state import FilterState

MONDAY = datetime(2024, 11, 11, 9, 0, tzinfo=timezone.utc)
TUESDAY = datetime(2024, 11, 12, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def dataset(make_session):
    return [
        make_session(1, start=MONDAY, track="Core", slot_room={"name": "Main Stage"}),
        make_session(2, start=MONDAY + timedelta(hours=1), track="Core", slot_room={"name": "Stage 2"}),
        make_session(3, start=TUESDAY, track="Apps", slot_room={"name": "Main Stage"}),
    ]


@pytest.fixture
def engine(clock, storage, dataset):
    return ScheduleEngine(
        storage=storage,
        fetcher=lambda: list(dataset),
        tz="UTC",
        clock=clock,
        now=lambda: MONDAY + timedelta(minutes=10),
        debounce_window=100,
    )


def test_first_refresh_installs_without_stats(engine, dataset) -> None:
    assert engine.refresh() is None
    assert engine.sessions == dataset
    assert engine.last_update is None
    assert engine.visible == []

    assert engine.flush() is True
    assert engine.visible == dataset


def test_second_refresh_reports_changes(engine, dataset, make_session) -> None:
    engine.refresh()
    changed = [make_session(1, start=MONDAY, track="Core", description="moved"), dataset[1], make_session(9)]

    stats = engine.refresh(lambda: changed)

    assert (stats.added, stats.modified, stats.unchanged, stats.removed) == (1, 1, 1, 1)
    assert engine.last_update == stats
    assert engine.sessions == changed


def test_failed_fetch_keeps_current_sessions(engine, dataset) -> None:
    engine.refresh()

    def _fail():
        raise FetchFailure("offline")

    assert engine.refresh(_fail) is None
    assert engine.sessions == dataset


def test_overlapping_refresh_is_skipped(engine, dataset) -> None:
    inner = []

    def _fetch():
        inner.append(engine.refresh(lambda: []))
        return dataset

    engine.refresh(_fetch)

    assert inner == [None]
    assert engine.sessions == dataset
    assert not engine.is_refreshing


def test_filter_changes_are_debounced(engine, clock, dataset) -> None:
    engine.refresh()
    engine.flush()

    engine.set_filters(track="Core")
    clock.advance(60)
    engine.set_filters(room="Main Stage")
    clock.advance(60)

    assert engine.tick() is False
    assert engine.visible == dataset

    clock.advance(40)

    assert engine.tick() is True
    assert engine.visible == [dataset[0]]
    assert engine.filter_state == FilterState(track="Core", room="Main Stage")


def test_reset_filters_restores_identity(engine, dataset) -> None:
    engine.refresh()
    engine.set_filters(search_term="talk 3")
    engine.flush()
    assert engine.visible == [dataset[2]]

    engine.reset_filters()
    engine.flush()

    assert engine.filter_state.is_default
    assert engine.visible == dataset


def test_search_index_rebuilt_only_when_list_replaced(engine, make_session) -> None:
    engine.refresh()
    index = engine.search_index()

    assert engine.search_index() is index

    engine.load([make_session(42, title="Fresh")])

    rebuilt = engine.search_index()
    assert rebuilt is not index
    assert [item.session.id for item in rebuilt] == [42]


def test_select_room_switches_to_schedule_view(engine) -> None:
    engine.set_view("bookmarks")

    engine.select_room("Stage 2")

    assert engine.view == "schedule"
    assert engine.filter_state.room == "Stage 2"

    engine.select_track(None)
    assert engine.filter_state.track == "all"


def test_set_view_rejects_unknown_mode(engine) -> None:
    with pytest.raises(ValueError):
        engine.set_view("agenda")


def test_bookmarks_view_ignores_filters(engine, dataset) -> None:
    engine.refresh()
    engine.set_filters(track="Apps")
    engine.flush()
    engine.toggle_bookmark(1)

    schedule = engine.group("schedule")
    bookmarks = engine.group("bookmarks")

    assert [s.id for day in schedule.by_day.values() for s in day] == [3]
    assert [s.id for day in bookmarks.by_day.values() for s in day] == [1]
    assert bookmarks.has_live_session


def test_bookmarks_persist_across_engines(engine, storage, clock) -> None:
    engine.toggle_bookmark(2)

    again = ScheduleEngine(storage=storage, fetcher=lambda: [], clock=clock)

    assert again.is_bookmarked(2)


def test_snapshot_exposes_engine_outputs(engine, dataset) -> None:
    engine.refresh()
    engine.flush()
    engine.toggle_bookmark(3)

    snapshot = engine.snapshot()

    assert snapshot.sessions == dataset
    assert snapshot.visible == dataset
    assert snapshot.bookmarks == [3]
    assert snapshot.view == "schedule"
    assert list(snapshot.groups.by_day) == ["Monday, Nov 11", "Tuesday, Nov 12"]
    assert snapshot.groups.live_session_ids == [1]
    assert snapshot.last_update is None


def test_filter_options_from_all_sessions(engine) -> None:
    engine.refresh()

    options = engine.filter_options()

    assert options.tracks == ["Apps", "Core"]
    assert options.rooms == ["Main Stage", "Stage 2"]
    assert options.days == ["Monday, Nov 11", "Tuesday, Nov 12"]


def test_load_during_tick_keeps_the_new_filter_pass(storage, dataset, make_session) -> None:
    timing = {"now": 0.0, "hook": None}

    def _clock() -> float:
        hook, timing["hook"] = timing["hook"], None
        if hook:
            hook()
        return timing["now"]

    engine = ScheduleEngine(storage=storage, fetcher=lambda: [], tz="UTC", clock=_clock, debounce_window=100)
    engine.load(dataset)
    engine.flush()
    engine.set_filters(track="Apps")
    fresh = [make_session(7, start=MONDAY)]

    timing["now"] = 100.0
    timing["hook"] = lambda: engine.load(fresh)

    assert engine.tick() is False
    assert engine.debouncer.pending is not None

    timing["now"] = 200.0

    assert engine.tick() is True
    assert engine.sessions == fresh
    assert engine.visible == []


def test_drop_stale_filters_resets_missing_selections(engine, dataset, make_session) -> None:
    engine.refresh()
    engine.set_filters(day="Tuesday, Nov 12", track="Apps", room="Stage 2")

    engine.load([make_session(5, start=MONDAY, track="Core", slot_room={"name": "Stage 2"})])
    options = engine.drop_stale_filters()
    engine.flush()

    assert options.tracks == ["Core"]
    assert engine.filter_state == FilterState(room="Stage 2")
    assert [s.id for s in engine.visible] == [5]


def test_drop_stale_filters_keeps_offered_selections(engine) -> None:
    engine.refresh()
    engine.set_filters(track="Core", room="Main Stage")

    engine.drop_stale_filters()

    assert engine.filter_state == FilterState(track="Core", room="Main Stage")
