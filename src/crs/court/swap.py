from __future__ import annotations

import logging

from crs.contracts import BenchRef, CourtRef, RosterState, Side, SlotRef, SwapOutcome
from crs.court.quota import is_protected
from crs.roster.store import RosterStore

logger = logging.getLogger(__name__)

SAME_SLOT = "SAME_SLOT"
UNKNOWN_SLOT = "UNKNOWN_SLOT"
EMPTY_BENCH_SLOT = "EMPTY_BENCH_SLOT"
QUOTA_VIOLATION = "QUOTA_VIOLATION"
COURT_EXCHANGE = "COURT_EXCHANGE"
COURT_BENCH_EXCHANGE = "COURT_BENCH_EXCHANGE"
BENCH_EXCHANGE = "BENCH_EXCHANGE"


def _exists(state: RosterState, ref: SlotRef) -> bool:
    if isinstance(ref, CourtRef):
        return 0 <= ref.index < state.court_size
    return 0 <= ref.index < state.bench(ref.side).capacity


def _bench_filled(state: RosterState, ref: BenchRef) -> bool:
    return ref.index < len(state.bench(ref.side).entries)


class SwapValidator:
    """Decides and applies pairwise exchanges. Rejections never touch the store."""

    def evaluate(self, state: RosterState, first: SlotRef, second: SlotRef) -> SwapOutcome:
        if not _exists(state, first) or not _exists(state, second):
            return SwapOutcome(False, UNKNOWN_SLOT, f"no such slot: {first if not _exists(state, first) else second}")
        if first == second:
            return SwapOutcome(True, SAME_SLOT, "slot swapped with itself")

        if isinstance(first, CourtRef) and isinstance(second, CourtRef):
            return SwapOutcome(True, COURT_EXCHANGE, "court positions exchanged")

        if isinstance(first, BenchRef) and isinstance(second, BenchRef):
            if not _bench_filled(state, first) or not _bench_filled(state, second):
                return SwapOutcome(False, EMPTY_BENCH_SLOT, "bench exchanges need two occupied entries")
            return SwapOutcome(True, BENCH_EXCHANGE, "bench entries exchanged")

        court_ref, bench_ref = (first, second) if isinstance(first, CourtRef) else (second, first)
        if not _bench_filled(state, bench_ref):
            return SwapOutcome(False, EMPTY_BENCH_SLOT, "new players join through the add entry point, not a swap")

        leaving = state.court_slots[court_ref.index].occupant
        entering = state.bench(bench_ref.side).entries[bench_ref.index]
        if is_protected(leaving) and not entering.protected:
            if state.protected_on_court() - 1 < state.minimum_protected:
                return SwapOutcome(
                    False,
                    QUOTA_VIOLATION,
                    f"court would drop below {state.minimum_protected} protected player(s)",
                )
        return SwapOutcome(True, COURT_BENCH_EXCHANGE, "court and bench players exchanged")

    def propose(self, store: RosterStore, first: SlotRef, second: SlotRef) -> SwapOutcome:
        state = store.state
        outcome = self.evaluate(state, first, second)
        if not outcome.accepted:
            logger.debug("swap %s <-> %s rejected: %s", first, second, outcome.code)
            return outcome
        if outcome.code == SAME_SLOT:
            return outcome

        court = state.occupants()
        benches = {Side.A: list(state.bench_a.entries), Side.B: list(state.bench_b.entries)}

        if outcome.code == COURT_EXCHANGE:
            court[first.index], court[second.index] = court[second.index], court[first.index]
        elif outcome.code == BENCH_EXCHANGE:
            a, b = benches[first.side], benches[second.side]
            a[first.index], b[second.index] = b[second.index], a[first.index]
        else:
            court_ref, bench_ref = (first, second) if isinstance(first, CourtRef) else (second, first)
            queue = benches[bench_ref.side]
            leaving = court[court_ref.index]
            court[court_ref.index] = queue[bench_ref.index]
            if leaving is None:
                del queue[bench_ref.index]
            else:
                queue[bench_ref.index] = leaving

        store.commit(court=court, bench_a=benches[Side.A], bench_b=benches[Side.B])
        return outcome
