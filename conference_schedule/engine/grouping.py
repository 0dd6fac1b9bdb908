from datetime import date, datetime, timezone, tzinfo
from typing import Callable, Collection, Iterable, Optional, Union
from zoneinfo import ZoneInfo

from conference_schedule.engine.component import Component
from conference_schedule.models import FilterOptions, GroupResult, Session, SessionId
from conference_schedule.state import ViewMode


WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def resolve_timezone(tz: Union[tzinfo, str, None]) -> tzinfo:
    if tz is None:
        return timezone.utc
    if isinstance(tz, str):
        if tz.upper() in ("UTC", "Z"):
            return timezone.utc
        return ZoneInfo(tz)
    return tz


def local_day(moment: datetime, tz: tzinfo) -> date:
    return moment.astimezone(tz).date()


def format_day(day: date) -> str:
    """English label such as 'Tuesday, Nov 12', independent of the process locale."""
    return f"{WEEKDAYS[day.weekday()]}, {MONTHS[day.month - 1]} {day.day}"


def day_label(moment: datetime, tz: tzinfo) -> str:
    return format_day(local_day(moment, tz))


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class GroupingEngine(Component):
    """
    Buckets sessions by calendar day in a fixed time zone and flags the live ones.
    """

    def __init__(
        self,
        tz: Union[tzinfo, str, None] = None,
        now: Callable[[], datetime] = utc_now,
        name="GroupingEngine",
    ):
        super().__init__(name)
        self.tz = resolve_timezone(tz)
        self.now = now

    def group(
        self,
        sessions: Iterable[Session],
        bookmarks: Collection[SessionId] = (),
        mode: ViewMode = "schedule",
        now: Optional[datetime] = None,
    ) -> GroupResult:
        """
        Group sessions into day buckets sorted by start time.
        Args:
            sessions: The filtered sessions for "schedule", all sessions for "bookmarks"
            bookmarks: Bookmarked session ids, used in "bookmarks" mode
            mode: "schedule" or "bookmarks"
            now: The instant used for the live check; defaults to the engine clock
        Returns:
            GroupResult with days in calendar order
        """
        if mode == "bookmarks":
            marked = set(bookmarks)
            source = [s for s in sessions if s.id in marked]
        else:
            source = list(sessions)

        moment = now or self.now()
        buckets: dict[date, list[Session]] = {}
        live_ids = []
        for session in source:
            if session.is_live(moment):
                live_ids.append(session.id)
            buckets.setdefault(local_day(session.slot_start, self.tz), []).append(session)

        by_day = {
            format_day(day): sorted(buckets[day], key=lambda s: s.slot_start)
            for day in sorted(buckets)
        }
        return GroupResult(by_day=by_day, has_live_session=bool(live_ids), live_session_ids=live_ids)

    def filter_options(self, sessions: Iterable[Session]) -> FilterOptions:
        """Distinct tracks, rooms and day labels for populating the filter choices."""
        tracks, rooms, days = set(), set(), set()
        for session in sessions:
            if session.track:
                tracks.add(session.track)
            if session.room_name:
                rooms.add(session.room_name)
            days.add(local_day(session.slot_start, self.tz))
        return FilterOptions(
            tracks=sorted(tracks),
            rooms=sorted(rooms),
            days=[format_day(day) for day in sorted(days)],
        )
