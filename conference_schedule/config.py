import os
from pathlib import Path

from dotenv import load_dotenv


load_dotenv(override=True)

DEFAULT_SESSIONS_API_URL = (
    "https://api.devcon.org/sessions?sort=slot_start&order=asc&event=devcon-7&size=1000"
)

SESSIONS_API_URL = os.environ.get("SESSIONS_API_URL", DEFAULT_SESSIONS_API_URL)
SESSIONS_API_TIMEOUT = float(os.environ.get("SESSIONS_API_TIMEOUT", "15"))
SCHEDULE_TIMEZONE = os.environ.get("SCHEDULE_TIMEZONE", "UTC")
FILTER_DEBOUNCE_MS = float(os.environ.get("FILTER_DEBOUNCE_MS", "100"))
SCHEDULE_DB_DIR = Path(os.environ.get("SCHEDULE_DB_DIR", Path(__file__).resolve().parent.parent / "db"))
BOOKMARKS_KEY = os.environ.get("BOOKMARKS_KEY", "devcon-bookmarked-sessions")
