import logging
import threading
from datetime import datetime, tzinfo
from typing import Callable, Iterable, Optional, Union

from conference_schedule.config import BOOKMARKS_KEY, FILTER_DEBOUNCE_MS, SCHEDULE_TIMEZONE
from conference_schedule.engine import Debouncer, DiffEngine, GroupingEngine, SessionStore, init_logging
from conference_schedule.engine.debounce import monotonic_ms
from conference_schedule.engine.grouping import utc_now
from conference_schedule.engine.store import KeyValueStorage
from conference_schedule.errors import FetchFailure
from conference_schedule.models import FilterOptions, GroupResult, IndexedSession, Session, SessionId, UpdateStats
from conference_schedule.search import FilterPipeline, build_search_index
from conference_schedule.sources import fetch_sessions
from conference_schedule.state import ALL, FilterState, ScheduleSnapshot, ViewMode


ENGINE_LOGGER_NAME = "ScheduleEngine"
init_logging(name=ENGINE_LOGGER_NAME)


class ScheduleEngine:
    """
    Owns the session data, bookmarks, filter selections and view mode,
    and exposes the derived outputs the presentation layer renders.
    """
    def __init__(
        self,
        storage: Optional[KeyValueStorage] = None,
        fetcher: Callable[[], list[Session]] = fetch_sessions,
        tz: Union[tzinfo, str, None] = SCHEDULE_TIMEZONE,
        clock: Callable[[], float] = monotonic_ms,
        now: Callable[[], datetime] = utc_now,
        debounce_window: float = FILTER_DEBOUNCE_MS,
        bookmarks_key: str = BOOKMARKS_KEY,
    ):
        self.fetcher = fetcher
        self.store = SessionStore(storage=storage, bookmarks_key=bookmarks_key)
        self.diff_engine = DiffEngine()
        self.grouping = GroupingEngine(tz=tz, now=now)
        self.pipeline = FilterPipeline(tz=self.grouping.tz)
        self.debouncer = Debouncer(window=debounce_window, clock=clock)

        self.filter_state = FilterState()
        self.view: ViewMode = "schedule"
        self.visible: list[Session] = []
        self.last_update: Optional[UpdateStats] = None
        self._indexed: tuple[list[Session], list[IndexedSession]] = ([], [])
        self._refresh_lock = threading.Lock()

    def log(self, msg):
        logging.getLogger(ENGINE_LOGGER_NAME).info(msg)

    @property
    def sessions(self) -> list[Session]:
        return self.store.sessions

    @property
    def is_refreshing(self) -> bool:
        return self._refresh_lock.locked()

    def refresh(self, fetch: Optional[Callable[[], list[Session]]] = None) -> Optional[UpdateStats]:
        """
        Fetch the sessions and install them.
        Returns the update stats, or None on first load, on a failed fetch,
        or when another refresh is still in flight.
        """
        if not self._refresh_lock.acquire(blocking=False):
            self.log("refresh: skipped, another refresh is in flight")
            return None
        try:
            try:
                new_sessions = (fetch or self.fetcher)()
            except FetchFailure as e:
                logging.getLogger(ENGINE_LOGGER_NAME).warning(f"refresh failed, keeping {len(self.sessions)} sessions: {e}")
                return None
            return self.load(new_sessions)
        finally:
            self._refresh_lock.release()

    def load(self, new_sessions: Iterable[Session]) -> Optional[UpdateStats]:
        """Install a dataset, diffing it against the one held before."""
        new_sessions = list(new_sessions)
        stats = self.diff_engine.diff(self.store.sessions, new_sessions)
        self.store.replace(new_sessions)
        self.last_update = stats
        self._schedule_filter()
        return stats

    def search_index(self) -> list[IndexedSession]:
        """The index for the current session list, rebuilt whenever the list is replaced."""
        source, index = self._indexed
        sessions = self.store.sessions
        if source is not sessions:
            index = build_search_index(sessions)
            self._indexed = (sessions, index)
        return index

    def set_filters(
        self,
        search_term: Optional[str] = None,
        day: Optional[str] = None,
        track: Optional[str] = None,
        room: Optional[str] = None,
    ) -> FilterState:
        """Update the given selections and schedule a debounced pipeline run. None leaves a field as is."""
        changes = {
            k: v for k, v in {"search_term": search_term, "day": day, "track": track, "room": room}.items()
            if v is not None
        }
        self.filter_state = self.filter_state.model_copy(update=changes)
        self._schedule_filter()
        return self.filter_state

    def reset_filters(self) -> FilterState:
        self.filter_state = FilterState()
        self._schedule_filter()
        return self.filter_state

    def select_track(self, track: Optional[str]) -> FilterState:
        self.view = "schedule"
        return self.set_filters(track=track or ALL)

    def select_room(self, room: Optional[str]) -> FilterState:
        self.view = "schedule"
        return self.set_filters(room=room or ALL)

    def set_view(self, view: ViewMode) -> None:
        if view not in ("schedule", "bookmarks"):
            raise ValueError(f"unknown view: {view!r}")
        self.view = view

    def tick(self) -> bool:
        """Run the pending filter pass if its debounce window has elapsed."""
        return self.debouncer.run_due()

    def flush(self) -> bool:
        """Run the pending filter pass now."""
        return self.debouncer.flush()

    def toggle_bookmark(self, session_id: SessionId) -> bool:
        return self.store.toggle_bookmark(session_id)

    def is_bookmarked(self, session_id: SessionId) -> bool:
        return self.store.is_bookmarked(session_id)

    def group(self, mode: Optional[ViewMode] = None, now: Optional[datetime] = None) -> GroupResult:
        mode = mode or self.view
        source = self.visible if mode == "schedule" else self.store.sessions
        return self.grouping.group(source, self.store.bookmarks, mode, now=now)

    def filter_options(self) -> FilterOptions:
        return self.grouping.filter_options(self.store.sessions)

    def drop_stale_filters(self) -> FilterOptions:
        """Reset any day, track or room selection the current sessions no longer offer."""
        options = self.filter_options()
        stale = {
            field: ALL
            for field, offered in (("day", options.days), ("track", options.tracks), ("room", options.rooms))
            if getattr(self.filter_state, field) != ALL and getattr(self.filter_state, field) not in offered
        }
        if stale:
            self.log(f"drop_stale_filters: {sorted(stale)}")
            self.set_filters(**stale)
        return options

    def snapshot(self, now: Optional[datetime] = None) -> ScheduleSnapshot:
        return ScheduleSnapshot(
            sessions=self.store.sessions,
            visible=self.visible,
            filter_state=self.filter_state,
            view=self.view,
            bookmarks=self.store.bookmarks,
            groups=self.group(now=now),
            last_update=self.last_update,
        )

    def _schedule_filter(self) -> None:
        self.debouncer.schedule(self._run_filter)

    def _run_filter(self) -> None:
        self.visible = self.pipeline.apply(self.search_index(), self.filter_state)


if __name__ == "__main__":
    engine = ScheduleEngine()
    engine.refresh()
    engine.flush()
    for day, day_sessions in engine.group().by_day.items():
        print(f"{day}: {len(day_sessions)} sessions")
