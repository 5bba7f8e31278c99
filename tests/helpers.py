from __future__ import annotations

from typing import Sequence

from crs.contracts import ActionRequest, ActionType, BenchQueue, CourtSlot, Player, RosterState, Side
from crs.core import RosterLimits, make_id
from crs.roster import RosterStore


def player(name: str, protected: bool = False) -> Player:
    return Player(player_id=f"p_{name.lower()}", display_name=name, protected=protected)


def make_state(
    court: Sequence[Player | None],
    bench_a: Sequence[Player] = (),
    bench_b: Sequence[Player] = (),
    minimum: int = 0,
    capacity: int = 3,
) -> RosterState:
    return RosterState(
        lineup_id="lineup_test",
        name="Test",
        court_size=len(court),
        minimum_protected=minimum,
        court_slots=[CourtSlot(position=i, occupant=p) for i, p in enumerate(court)],
        bench_a=BenchQueue(Side.A, capacity, list(bench_a)),
        bench_b=BenchQueue(Side.B, capacity, list(bench_b)),
    )


def make_store(
    court: Sequence[Player | None],
    bench_a: Sequence[Player] = (),
    bench_b: Sequence[Player] = (),
    minimum: int = 0,
    limits: RosterLimits | None = None,
) -> RosterStore:
    limits = limits or RosterLimits()
    return RosterStore(make_state(court, bench_a, bench_b, minimum, capacity=limits.bench_capacity), limits)


def names(players: Sequence[Player | None]) -> list[str | None]:
    return [p.display_name if p is not None else None for p in players]


def court_ref(index: int) -> dict:
    return {"kind": "court", "index": index}


def bench_ref(side: str, index: int) -> dict:
    return {"kind": "bench", "side": side, "index": index}


def act(runtime, action_type: ActionType, payload: dict | None = None):
    return runtime.handle_action(ActionRequest(make_id("req"), action_type, payload or {}))


def seed_demo(runtime) -> None:
    result = act(runtime, ActionType.CREATE_LINEUP, {"name": "Demo", "demo": True})
    if not result.success:
        raise RuntimeError(f"seed_demo failed: {result.message}")
