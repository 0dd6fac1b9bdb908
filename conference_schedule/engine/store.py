import json
from typing import Iterable, Optional, Protocol

from conference_schedule.engine.component import Component
from conference_schedule.errors import PersistenceFailure
from conference_schedule.models import Session, SessionId


class KeyValueStorage(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class SessionStore(Component):
    """
    Holds the current session list and the bookmarked ids.
    The list is only ever swapped as a whole, so readers see either the old or the new dataset.
    """

    def __init__(self, storage: Optional[KeyValueStorage] = None, bookmarks_key: str = "devcon-bookmarked-sessions"):
        super().__init__("SessionStore")
        self._sessions: list[Session] = []
        self._storage = storage
        self._bookmarks_key = bookmarks_key
        # dict keeps insertion order with O(1) membership
        self._bookmarks: dict[SessionId, None] = dict.fromkeys(self._load_bookmarks())

    @property
    def sessions(self) -> list[Session]:
        return self._sessions

    @property
    def bookmarks(self) -> list[SessionId]:
        return list(self._bookmarks)

    def replace(self, new_sessions: Iterable[Session]) -> list[Session]:
        """
        Install a new dataset and return the one it replaces.
        Args:
            new_sessions: The freshly fetched sessions
        Returns:
            The previously held list
        """
        previous = self._sessions
        self._sessions = list(new_sessions)
        self.log(f"replace: {len(previous)} -> {len(self._sessions)} sessions")
        return previous

    def is_bookmarked(self, session_id: SessionId) -> bool:
        return session_id in self._bookmarks

    def toggle_bookmark(self, session_id: SessionId) -> bool:
        """Flip membership of session_id and persist the set. Returns the new membership."""
        bookmarks = dict(self._bookmarks)
        if session_id in bookmarks:
            del bookmarks[session_id]
        else:
            bookmarks[session_id] = None
        self._bookmarks = bookmarks
        self._save_bookmarks()
        return session_id in bookmarks

    def _load_bookmarks(self) -> list[SessionId]:
        if self._storage is None:
            return []
        try:
            raw = self._storage.get(self._bookmarks_key)
        except (PersistenceFailure, OSError) as e:
            self.warn(f"could not read bookmarks: {e}")
            return []
        if not raw:
            return []
        try:
            ids = json.loads(raw)
        except json.JSONDecodeError:
            self.warn("stored bookmarks are not valid JSON, starting empty")
            return []
        if not isinstance(ids, list):
            return []
        return [i for i in ids if isinstance(i, (int, str)) and not isinstance(i, bool)]

    def _save_bookmarks(self) -> None:
        if self._storage is None:
            return
        try:
            self._storage.set(self._bookmarks_key, json.dumps(list(self._bookmarks)))
        except (PersistenceFailure, OSError) as e:
            self.warn(f"could not save bookmarks: {e}")
