from __future__ import annotations

import logging
from dataclasses import dataclass

from crs.contracts import Direction, Player, QuotaShortfall, RosterState, RotationResult, Side, SideMove
from crs.court.layout import SidePorts, build_rotation_path, resolve_grid, side_ports, substituting_sides
from crs.court.quota import BlockingDecision, QuotaEvaluator, is_protected
from crs.roster.store import RosterStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RotationPlan:
    court: list[Player | None]
    bench_a: list[Player]
    bench_b: list[Player]
    result: RotationResult


class RotationEngine:
    """One rotation step: path lookup, substitution, quota blocking, atomic commit."""

    def __init__(self, quota: QuotaEvaluator | None = None) -> None:
        self._quota = quota or QuotaEvaluator()

    def rotate(self, store: RosterStore, direction: Direction) -> RotationResult:
        plan = self.plan(store.state, direction)
        store.commit(court=plan.court, bench_a=plan.bench_a, bench_b=plan.bench_b)
        return plan.result

    def plan(self, state: RosterState, direction: Direction) -> RotationPlan:
        n = state.court_size
        occupants = state.occupants()
        queues = {Side.A: list(state.bench_a.entries), Side.B: list(state.bench_b.entries)}

        shape = resolve_grid(n)
        path = build_rotation_path(shape, n)
        ports = side_ports(shape, n, direction)
        successors = path.successors(direction)

        entrants: dict[Side, Player] = {}
        for side in substituting_sides(ports):
            queue = queues[side]
            if queue:
                entrants[side] = queue[0] if direction == Direction.FORWARD else queue[-1]

        decision = self._quota.choose_blocking(occupants, ports, entrants, state.minimum_protected)
        if decision.blocked:
            logger.info(
                "lineup %s: blocking exits on side(s) %s to hold %d protected on court",
                state.lineup_id,
                ",".join(s.value for s in sorted(decision.blocked)),
                state.minimum_protected,
            )

        court: list[Player | None] = [None] * n
        claimed: dict[int, Side] = {}
        moves: list[SideMove] = []
        for side, entrant in entrants.items():
            port = ports[side]
            claimed[port.entry] = side
            outgoing = occupants[port.exit]
            if side in decision.blocked:
                court[port.entry] = outgoing
                moves.append(SideMove(side, port.exit, port.entry, outgoing=None, incoming=None, blocked=True))
                continue
            court[port.entry] = entrant
            self._cycle_bench(queues[side], outgoing, direction)
            moves.append(SideMove(side, port.exit, port.entry, outgoing=outgoing, incoming=entrant, blocked=False))

        exits = {ports[side].exit for side in entrants}
        taken = set(claimed)
        for idx in path.order:
            if idx in exits:
                continue
            target = self._advance(idx, successors, claimed, ports, taken, n)
            court[target] = occupants[idx]
            taken.add(target)

        result = RotationResult(
            direction=direction,
            moves=moves,
            protected_before=sum(1 for p in occupants if is_protected(p)),
            protected_after=sum(1 for p in court if is_protected(p)),
            quota_shortfall=self._shortfall(state, decision),
        )
        return RotationPlan(court=court, bench_a=queues[Side.A], bench_b=queues[Side.B], result=result)

    def _advance(
        self,
        idx: int,
        successors: dict[int, int],
        claimed: dict[int, Side],
        ports: dict[Side, SidePorts],
        taken: set[int],
        n: int,
    ) -> int:
        target = successors[idx]
        hops = 0
        # skip-ahead: an entry filled this step sends its would-be occupant past that side's exit
        while target in claimed and hops < n:
            target = successors[ports[claimed[target]].exit]
            hops += 1
        hops = 0
        while target in taken and hops < n:
            target = successors[target]
            hops += 1
        return target

    def _cycle_bench(self, queue: list[Player], outgoing: Player | None, direction: Direction) -> None:
        if direction == Direction.FORWARD:
            queue.pop(0)
            if outgoing is not None:
                queue.append(outgoing)
        else:
            queue.pop()
            if outgoing is not None:
                queue.insert(0, outgoing)

    def _shortfall(self, state: RosterState, decision: BlockingDecision) -> QuotaShortfall | None:
        if decision.satisfied:
            return None
        logger.warning(
            "lineup %s: quota unsatisfiable after blocking (required=%d projected=%d)",
            state.lineup_id,
            decision.required,
            decision.projected,
        )
        return QuotaShortfall(required=decision.required, achieved=decision.projected)
