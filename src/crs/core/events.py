from __future__ import annotations

from collections import Counter
from typing import Callable

from crs.contracts import RosterEvent

RosterEventHandler = Callable[[RosterEvent], None]


class EventBus:
    """Fans roster events out to subscribers and tallies them per lineup."""

    def __init__(self) -> None:
        self._handlers: list[RosterEventHandler] = []
        self._tally: Counter[tuple[str, str]] = Counter()

    def subscribe(self, handler: RosterEventHandler) -> None:
        self._handlers.append(handler)

    def publish(self, event: RosterEvent) -> None:
        self._tally[(event.lineup_id, event.event_type)] += 1
        for handler in self._handlers:
            handler(event)

    def emitted_count(self, event_type: str | None = None, lineup_id: str | None = None) -> int:
        return sum(
            count
            for (lineup, kind), count in self._tally.items()
            if (event_type is None or kind == event_type) and (lineup_id is None or lineup == lineup_id)
        )
