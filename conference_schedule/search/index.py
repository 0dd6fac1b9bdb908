from typing import Iterable

from conference_schedule.models import IndexedSession, Session


def session_search_text(session: Session) -> str:
    """One session -> one lower-cased text blob for substring search."""
    parts = [
        session.title.lower(),
        session.description.lower(),
        (session.track or "").lower(),
        " ".join(speaker.name.lower() for speaker in session.speakers),
    ]
    return " ".join(parts)


def build_search_index(sessions: Iterable[Session]) -> list[IndexedSession]:
    """Index every session, keeping input order. Always rebuilt from scratch."""
    return [IndexedSession(session=s, search_text=session_search_text(s)) for s in sessions]
