from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Sequence

from crs.contracts import Player, Side
from crs.court.layout import SidePorts


@dataclass(slots=True, frozen=True)
class BlockingDecision:
    blocked: frozenset[Side]
    projected: int
    required: int

    @property
    def satisfied(self) -> bool:
        return self.projected >= self.required


def is_protected(player: Player | None) -> bool:
    return player is not None and player.protected


class QuotaEvaluator:
    """Projects the on-court protected count for a candidate rotation and picks exits to block."""

    def projected_count(
        self,
        occupants: Sequence[Player | None],
        ports: Mapping[Side, SidePorts],
        entrants: Mapping[Side, Player],
        blocked: frozenset[Side] = frozenset(),
    ) -> int:
        leaving = {ports[side].exit for side in entrants if side not in blocked}
        staying = sum(1 for idx, p in enumerate(occupants) if idx not in leaving and is_protected(p))
        entering = sum(1 for side, p in entrants.items() if side not in blocked and p.protected)
        return staying + entering

    def choose_blocking(
        self,
        occupants: Sequence[Player | None],
        ports: Mapping[Side, SidePorts],
        entrants: Mapping[Side, Player],
        minimum: int,
    ) -> BlockingDecision:
        projected = self.projected_count(occupants, ports, entrants)
        if projected >= minimum:
            return BlockingDecision(frozenset(), projected, minimum)

        protected_exits = [side for side in (Side.A, Side.B) if side in entrants and is_protected(occupants[ports[side].exit])]

        for side in protected_exits:
            alone = frozenset({side})
            count = self.projected_count(occupants, ports, entrants, alone)
            if count >= minimum:
                return BlockingDecision(alone, count, minimum)

        every = frozenset(protected_exits)
        return BlockingDecision(every, self.projected_count(occupants, ports, entrants, every), minimum)
