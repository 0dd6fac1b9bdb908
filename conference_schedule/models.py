from datetime import datetime, timezone
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from conference_schedule.messages import (
    ADDED_LINE,
    MODIFIED_LINE,
    NO_CHANGES_LINE,
    REMOVED_LINE,
    UNCHANGED_LINE,
)


SessionId = Union[int, str]


def canonical(value: Any) -> Any:
    """Tag every leaf with its type so 1, 1.0 and True compare as different values."""
    if isinstance(value, dict):
        return {key: canonical(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [canonical(item) for item in value]
    return (type(value).__name__, value)


class Speaker(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    id: SessionId = ""
    name: str = ""
    avatar: Optional[str] = None

    @field_validator("id", "name", mode="before")
    @classmethod
    def none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class Room(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    name: str = ""

    @field_validator("name", mode="before")
    @classmethod
    def none_name_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class Session(BaseModel):
    """
    One scheduled talk as delivered by the sessions API.
    Fields the engine does not know about are kept so they take part in change detection.
    """
    model_config = ConfigDict(frozen=True, extra="allow")

    id: SessionId
    title: str = ""
    description: str = ""
    track: Optional[str] = None
    slot_start: datetime
    slot_end: datetime
    slot_room: Optional[Room] = None
    speakers: list[Speaker] = Field(default_factory=list)
    resources_presentation: Optional[str] = None
    resources_slides: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def default_slot_end(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("slot_end") is None and "slot_start" in data:
            data = {**data, "slot_end": data["slot_start"]}
        return data

    @field_validator("title", "description", mode="before")
    @classmethod
    def none_text_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("speakers", mode="before")
    @classmethod
    def none_speakers_to_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("slot_start", "slot_end")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @model_validator(mode="after")
    def check_slot_order(self) -> "Session":
        if self.slot_end < self.slot_start:
            raise ValueError(f"session {self.id!r} ends before it starts")
        return self

    @property
    def room_name(self) -> Optional[str]:
        return self.slot_room.name if self.slot_room else None

    def content(self) -> dict[str, Any]:
        """Canonical structural content, extra payload fields included."""
        return canonical(self.model_dump())

    def same_content(self, other: "Session") -> bool:
        return self.content() == other.content()

    def is_live(self, now: datetime) -> bool:
        return self.slot_start <= now <= self.slot_end


class IndexedSession(BaseModel):
    model_config = ConfigDict(frozen=True)

    session: Session
    search_text: str


class UpdateStats(BaseModel):
    added: int = 0
    modified: int = 0
    unchanged: int = 0
    removed: int = 0

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.modified or self.removed)

    def summary_lines(self) -> list[str]:
        """Lines shown to the user after a refresh."""
        lines = []
        if self.added:
            lines.append(ADDED_LINE.format(count=self.added))
        if self.modified:
            lines.append(MODIFIED_LINE.format(count=self.modified))
        if self.removed:
            lines.append(REMOVED_LINE.format(count=self.removed))
        if self.unchanged:
            lines.append(UNCHANGED_LINE.format(count=self.unchanged))
        if not self.has_changes:
            lines.append(NO_CHANGES_LINE)
        return lines


class GroupResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    by_day: dict[str, list[Session]] = Field(default_factory=dict)
    has_live_session: bool = False
    live_session_ids: list[SessionId] = Field(default_factory=list)


class FilterOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    tracks: list[str] = Field(default_factory=list)
    rooms: list[str] = Field(default_factory=list)
    days: list[str] = Field(default_factory=list)
