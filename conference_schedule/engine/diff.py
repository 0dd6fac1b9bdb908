from typing import Optional, Sequence

from conference_schedule.engine.component import Component
from conference_schedule.models import Session, UpdateStats


class DiffEngine(Component):
    """
    Classifies a freshly fetched dataset against the one it replaces.
    """

    def __init__(self, name="DiffEngine"):
        super().__init__(name)

    def diff(self, old_sessions: Sequence[Session], new_sessions: Sequence[Session]) -> Optional[UpdateStats]:
        """
        Count added, modified, unchanged and removed sessions by id.
        Args:
            old_sessions: The dataset held before the refresh
            new_sessions: The dataset about to be installed
        Returns:
            UpdateStats, or None on first load (nothing held before)
        """
        if not old_sessions:
            return None

        old_by_id = {s.id: s for s in old_sessions}
        stats = UpdateStats()
        seen = set()
        for session in new_sessions:
            seen.add(session.id)
            existing = old_by_id.get(session.id)
            if existing is None:
                stats.added += 1
            elif existing is session or existing.same_content(session):
                stats.unchanged += 1
            else:
                stats.modified += 1
        stats.removed = sum(1 for session_id in old_by_id if session_id not in seen)

        self.log(f"diff: added={stats.added} modified={stats.modified} unchanged={stats.unchanged} removed={stats.removed}")
        return stats
