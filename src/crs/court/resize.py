from __future__ import annotations

import logging

from crs.contracts import Player, ResizeResult, RosterState
from crs.core import InvalidOperationError, RosterLimits
from crs.roster.store import RosterStore

logger = logging.getLogger(__name__)


class ResizeReconciler:
    def __init__(self, limits: RosterLimits) -> None:
        self._limits = limits

    def set_active_court_size(self, store: RosterStore, new_size: int) -> ResizeResult:
        if not self._limits.court_size_allowed(new_size):
            raise InvalidOperationError(
                "COURT_SIZE_OUT_OF_BOUNDS",
                f"court size {new_size} outside {self._limits.min_court_size}..{self._limits.max_court_size}",
            )
        state = store.state
        if new_size > state.court_size:
            court, bench_a, bench_b, result = self._grow(state, new_size)
        elif new_size < state.court_size:
            court, bench_a, bench_b, result = self._shrink(state, new_size)
        else:
            return ResizeResult(state.court_size, new_size, [], [], [], state.minimum_protected)
        store.commit(court=court, bench_a=bench_a, bench_b=bench_b, minimum_protected=result.minimum_protected)
        return result

    def _grow(self, state: RosterState, new_size: int):
        court = state.occupants() + [None] * (new_size - state.court_size)
        bench_a = list(state.bench_a.entries)
        bench_b = list(state.bench_b.entries)
        entered: list[Player] = []
        for idx in range(state.court_size, new_size):
            source = bench_a if bench_a else bench_b
            if not source:
                break
            court[idx] = source.pop(0)
            entered.append(court[idx])
        result = ResizeResult(
            old_size=state.court_size,
            new_size=new_size,
            entered=entered,
            displaced=[],
            dropped=[],
            minimum_protected=min(state.minimum_protected, new_size),
        )
        return court, bench_a, bench_b, result

    def _shrink(self, state: RosterState, new_size: int):
        occupants = state.occupants()
        remove_count = state.court_size - new_size
        descending = range(state.court_size - 1, -1, -1)

        # empty slots go first, then non-protected, then protected; highest index first within each tier
        tiers = [
            [i for i in descending if occupants[i] is None],
            [i for i in descending if occupants[i] is not None and not occupants[i].protected],
            [i for i in descending if occupants[i] is not None and occupants[i].protected],
        ]
        chosen: list[int] = []
        for tier in tiers:
            for idx in tier:
                if len(chosen) == remove_count:
                    break
                chosen.append(idx)

        removed = set(chosen)
        court = [p for i, p in enumerate(occupants) if i not in removed]
        displaced = [occupants[i] for i in chosen if occupants[i] is not None]

        bench_a = list(state.bench_a.entries)
        bench_b = list(state.bench_b.entries)
        dropped: list[Player] = []
        for player in displaced:
            if len(bench_a) < state.bench_a.capacity:
                bench_a.append(player)
            elif len(bench_b) < state.bench_b.capacity:
                bench_b.append(player)
            else:
                dropped.append(player)
        if dropped:
            logger.warning(
                "lineup %s: no bench capacity for %d displaced player(s): %s",
                state.lineup_id,
                len(dropped),
                ", ".join(p.display_name for p in dropped),
            )

        result = ResizeResult(
            old_size=state.court_size,
            new_size=new_size,
            entered=[],
            displaced=displaced,
            dropped=dropped,
            minimum_protected=min(state.minimum_protected, new_size),
        )
        return court, bench_a, bench_b, result
