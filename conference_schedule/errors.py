class ScheduleError(Exception):
    """Base class for errors raised by the schedule engine and its collaborators."""


class FetchFailure(ScheduleError):
    """The sessions API could not be reached or returned something unusable."""


class PersistenceFailure(ScheduleError):
    """Reading or writing the bookmark storage failed."""
