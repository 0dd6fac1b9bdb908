from datetime import tzinfo
from typing import Callable, Sequence, Union

from conference_schedule.engine.component import Component
from conference_schedule.engine.grouping import day_label, resolve_timezone
from conference_schedule.models import IndexedSession, Session
from conference_schedule.state import ALL, FilterState


Stage = Callable[[IndexedSession], bool]


class FilterPipeline(Component):
    """
    Narrows the indexed sessions by search term, day, track and room, in that order.
    """

    def __init__(self, tz: Union[tzinfo, str, None] = None, name="FilterPipeline"):
        super().__init__(name)
        self.tz = resolve_timezone(tz)

    def stages(self, state: FilterState) -> list[Stage]:
        """Active predicates for state; fields left at their default add no stage."""
        stages: list[Stage] = []
        if state.search_term:
            needle = state.search_term.lower()
            stages.append(lambda item: needle in item.search_text)
        if state.day != ALL:
            stages.append(lambda item: day_label(item.session.slot_start, self.tz) == state.day)
        if state.track != ALL:
            stages.append(lambda item: item.session.track == state.track)
        if state.room != ALL:
            stages.append(lambda item: item.session.room_name == state.room)
        return stages

    def apply(self, indexed: Sequence[IndexedSession], state: FilterState) -> list[Session]:
        """
        Run the filter stages over the index.
        Args:
            indexed: Output of build_search_index
            state: Current filter selections
        Returns:
            The matching sessions in index order
        """
        filtered = list(indexed)
        for stage in self.stages(state):
            if not filtered:
                break
            filtered = [item for item in filtered if stage(item)]
        self.log(f"apply: {len(indexed)} -> {len(filtered)} sessions ({state.model_dump()})")
        return [item.session for item in filtered]
