from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from conference_schedule.models import GroupResult, Session, SessionId, UpdateStats


ALL = "all"
ViewMode = Literal["schedule", "bookmarks"]


class FilterState(BaseModel):
    model_config = ConfigDict(frozen=True)

    search_term: str = ""
    day: str = ALL
    track: str = ALL
    room: str = ALL

    @property
    def is_default(self) -> bool:
        return self == FilterState()


class ScheduleSnapshot(BaseModel):
    """Read-only view of the engine handed to the presentation layer."""
    model_config = ConfigDict(frozen=True)

    sessions: list[Session] = Field(default_factory=list)
    visible: list[Session] = Field(default_factory=list)
    filter_state: FilterState = Field(default_factory=FilterState)
    view: ViewMode = "schedule"
    bookmarks: list[SessionId] = Field(default_factory=list)
    groups: GroupResult = Field(default_factory=GroupResult)
    last_update: Optional[UpdateStats] = Field(default=None, description="Stats of the most recent refresh, None after a first load")
