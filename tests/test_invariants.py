from __future__ import annotations

import random
from pathlib import Path

import pytest

from crs.contracts import BenchRef, CourtRef, Direction, Side
from crs.core import InvalidOperationError, RosterLimits
from crs.court import RosterValidator
from crs.session import LineupRuntime


def _random_ref(rng: random.Random, runtime: LineupRuntime):
    state = runtime.active.state
    if rng.random() < 0.6:
        return CourtRef(rng.randrange(0, state.court_size + 1))
    side = rng.choice(list(Side))
    return BenchRef(side, rng.randrange(0, state.bench(side).capacity + 1))


def _step(rng: random.Random, runtime: LineupRuntime, counter: list[int]) -> None:
    op = rng.choice(["rotate", "rotate", "rotate", "resize", "minimum", "assign", "remove", "swap", "drag"])
    if op == "rotate":
        runtime.rotate(rng.choice(list(Direction)))
    elif op == "resize":
        runtime.set_active_court_size(rng.randint(0, runtime.limits.max_court_size + 1))
    elif op == "minimum":
        runtime.set_minimum_protected_count(rng.randint(0, runtime.active.state.court_size + 1))
    elif op == "assign":
        counter[0] += 1
        runtime.assign_player(_random_ref(rng, runtime), display_name=f"P{counter[0]}", protected=rng.random() < 0.4)
    elif op == "remove":
        runtime.remove_player(_random_ref(rng, runtime))
    elif op == "swap":
        runtime.propose_swap(_random_ref(rng, runtime), _random_ref(rng, runtime))
    else:
        source = _random_ref(rng, runtime)
        runtime.begin_drag(source)
        try:
            runtime.preview_drag(_random_ref(rng, runtime))
        except InvalidOperationError:
            runtime.cancel_drag()
            raise
        if rng.random() < 0.5:
            runtime.cancel_drag()
        else:
            runtime.drop(_random_ref(rng, runtime))


@pytest.mark.parametrize("seed", [1, 7, 42, 1234])
def test_random_operation_walk_preserves_roster_invariants(tmp_path: Path, seed: int):
    rng = random.Random(seed)
    runtime = LineupRuntime(root=tmp_path / f"walk_{seed}")
    validator = RosterValidator(runtime.limits)
    counter = [0]

    for _ in range(120):
        state_before = runtime.current_state()
        try:
            _step(rng, runtime, counter)
        except InvalidOperationError:
            assert runtime.current_state() == state_before

        state = runtime.active.state
        validator.validate(state)
        assert not runtime.halted
        assert not runtime.drag_active
        ids = [p.player_id for p in state.all_players()]
        assert len(ids) == len(set(ids))
        assert len(state.court_slots) == state.court_size
        assert 0 <= state.minimum_protected <= state.court_size


@pytest.mark.parametrize("seed", [5, 99])
def test_rotation_walk_keeps_quota_once_met(tmp_path: Path, seed: int):
    rng = random.Random(seed)
    runtime = LineupRuntime(root=tmp_path, limits=RosterLimits(max_court_size=12, bench_capacity=6))
    runtime.set_active_court_size(rng.randint(1, 12))
    state = runtime.active.state
    for idx in range(state.court_size):
        runtime.assign_player(CourtRef(idx), display_name=f"C{idx}", protected=rng.random() < 0.5)
    for side in Side:
        for idx in range(rng.randint(0, 6)):
            runtime.assign_player(BenchRef(side, idx), display_name=f"{side.value}{idx}", protected=rng.random() < 0.3)
    runtime.set_minimum_protected_count(min(runtime.active.state.protected_on_court(), runtime.active.state.court_size))

    minimum = runtime.active.state.minimum_protected
    for _ in range(80):
        runtime.rotate(rng.choice(list(Direction)))
        assert runtime.active.state.protected_on_court() >= minimum
