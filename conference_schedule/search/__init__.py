"""Search index and filter pipeline over the loaded sessions."""

from conference_schedule.search.index import build_search_index, session_search_text
from conference_schedule.search.filters import FilterPipeline

__all__ = [
    "build_search_index",
    "session_search_text",
    "FilterPipeline",
]
