from pathlib import Path
from typing import Optional

from conference_schedule.config import SCHEDULE_DB_DIR
from conference_schedule.errors import PersistenceFailure


class FileKeyValueStore:
    """
    Minimal key-value storage: one file per key under db_dir (db/<key>.json).
    Used to keep the bookmarked session ids between runs.
    """

    def __init__(self, db_dir: str | Path = SCHEDULE_DB_DIR):
        self.db_dir = Path(db_dir)

    def _ensure_db_dir(self) -> Path:
        self.db_dir.mkdir(parents=True, exist_ok=True)
        return self.db_dir

    def _path(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise PersistenceFailure(f"Invalid storage key: {key!r}")
        return self.db_dir / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        """
        Read the stored value for key.
        Args:
            key: Storage key
        Returns:
            The stored text, or None if nothing was stored yet
        """
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceFailure(f"Could not read {path}: {e}") from e

    def set(self, key: str, value: str) -> None:
        """
        Store value under key, replacing what was there.
        Args:
            key: Storage key
            value: Text to store
        """
        path = self._path(key)
        try:
            self._ensure_db_dir()
            path.write_text(value, encoding="utf-8")
        except OSError as e:
            raise PersistenceFailure(f"Could not write {path}: {e}") from e

