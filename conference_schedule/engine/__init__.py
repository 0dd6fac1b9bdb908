from conference_schedule.engine.component import Component, init_logging
from conference_schedule.engine.store import SessionStore
from conference_schedule.engine.diff import DiffEngine
from conference_schedule.engine.grouping import GroupingEngine, day_label
from conference_schedule.engine.debounce import Debouncer

__all__ = ["Component", "init_logging", "SessionStore", "DiffEngine", "GroupingEngine", "day_label", "Debouncer"]
