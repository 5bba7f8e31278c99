from __future__ import annotations

from crs.contracts import BenchQueue, CourtSlot, Player, PlayerRole, RosterState, Side
from crs.core import RosterLimits, new_lineup_id


def build_empty_lineup(limits: RosterLimits, name: str = "Lineup 1", lineup_id: str | None = None) -> RosterState:
    return RosterState(
        lineup_id=lineup_id or new_lineup_id(),
        name=name,
        court_size=limits.default_court_size,
        minimum_protected=limits.default_minimum_protected,
        court_slots=[CourtSlot(position=i) for i in range(limits.default_court_size)],
        bench_a=BenchQueue(Side.A, limits.bench_capacity),
        bench_b=BenchQueue(Side.B, limits.bench_capacity),
    )


def build_default_roster_set(limits: RosterLimits) -> list[RosterState]:
    return [build_empty_lineup(limits, lineup_id="lineup_default")]


def build_demo_lineup(limits: RosterLimits, name: str = "Demo") -> RosterState:
    """A populated lineup for the CLI and smoke runs: two protected starters, two subs per side."""
    state = build_empty_lineup(limits, name=name)
    starters = [
        ("Avery", False, PlayerRole.OUTSIDE_HITTER),
        ("Blake", True, PlayerRole.MIDDLE_BLOCKER),
        ("Casey", False, PlayerRole.OPPOSITE_HITTER),
        ("Devon", True, PlayerRole.SETTER),
        ("Emery", False, PlayerRole.LIBERO),
        ("Finley", False, PlayerRole.OUTSIDE_HITTER),
    ]
    for slot, (display_name, protected, role) in zip(state.court_slots, starters):
        slot.occupant = Player(f"demo_{display_name.lower()}", display_name, protected, role)
    subs = {
        Side.A: [("Gray", True, None), ("Harper", False, PlayerRole.MIDDLE_BLOCKER)],
        Side.B: [("Indy", False, None), ("Jordan", True, PlayerRole.SETTER)],
    }
    for side, entries in subs.items():
        queue = state.bench(side)
        for display_name, protected, role in entries[: queue.capacity]:
            queue.entries.append(Player(f"demo_{display_name.lower()}", display_name, protected, role))
    return state
