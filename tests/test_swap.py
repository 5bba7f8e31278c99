from __future__ import annotations

from crs.contracts import BenchRef, CourtRef, Side
from crs.court import SwapValidator
from tests.helpers import make_store, names, player


def _court(protected: set[int] = frozenset()):
    return [player(f"c{i}", i in protected) for i in range(6)]


def test_swap_rejected_when_sole_protected_player_would_leave():
    store = make_store(_court({0}), bench_a=[player("a1")], minimum=1)
    before = store.snapshot()

    outcome = SwapValidator().propose(store, CourtRef(0), BenchRef(Side.A, 0))

    assert not outcome.accepted
    assert outcome.code == "QUOTA_VIOLATION"
    assert store.state == before


def test_protected_for_protected_exchange_is_allowed():
    store = make_store(_court({0}), bench_a=[player("a1", True)], minimum=1)
    outcome = SwapValidator().propose(store, BenchRef(Side.A, 0), CourtRef(0))

    assert outcome.accepted
    assert store.state.occupants()[0].display_name == "a1"
    assert names(store.state.bench_a.entries) == ["c0"]


def test_protected_player_may_leave_when_quota_has_headroom():
    store = make_store(_court({0, 1}), bench_b=[player("b1")], minimum=1)
    outcome = SwapValidator().propose(store, CourtRef(1), BenchRef(Side.B, 0))

    assert outcome.accepted
    assert store.state.protected_on_court() == 1


def test_court_positions_exchange_regardless_of_quota():
    store = make_store(_court({0}), minimum=1)
    outcome = SwapValidator().propose(store, CourtRef(0), CourtRef(4))

    assert outcome.code == "COURT_EXCHANGE"
    assert names(store.state.occupants()) == ["c4", "c1", "c2", "c3", "c0", "c5"]


def test_bench_entries_exchange_across_sides():
    store = make_store(_court(), bench_a=[player("a1"), player("a2")], bench_b=[player("b1")])
    outcome = SwapValidator().propose(store, BenchRef(Side.A, 1), BenchRef(Side.B, 0))

    assert outcome.code == "BENCH_EXCHANGE"
    assert names(store.state.bench_a.entries) == ["a1", "b1"]
    assert names(store.state.bench_b.entries) == ["a2"]


def test_empty_bench_position_cannot_be_swapped():
    store = make_store(_court(), bench_a=[player("a1")])
    before = store.snapshot()

    outcome = SwapValidator().propose(store, CourtRef(0), BenchRef(Side.A, 2))
    assert outcome.code == "EMPTY_BENCH_SLOT"
    bench_outcome = SwapValidator().propose(store, BenchRef(Side.A, 0), BenchRef(Side.B, 0))
    assert bench_outcome.code == "EMPTY_BENCH_SLOT"
    assert store.state == before


def test_unknown_slot_is_rejected():
    store = make_store(_court())
    assert SwapValidator().propose(store, CourtRef(0), CourtRef(9)).code == "UNKNOWN_SLOT"
    assert SwapValidator().propose(store, BenchRef(Side.B, 3), CourtRef(0)).code == "UNKNOWN_SLOT"


def test_same_slot_is_an_accepted_no_op():
    store = make_store(_court())
    before = store.snapshot()
    outcome = SwapValidator().propose(store, CourtRef(2), CourtRef(2))

    assert outcome.accepted and outcome.code == "SAME_SLOT"
    assert store.state == before


def test_empty_court_slot_pulls_bench_player_and_compacts_queue():
    court = _court()
    court[2] = None
    store = make_store(court, bench_a=[player("a1"), player("a2")])
    outcome = SwapValidator().propose(store, CourtRef(2), BenchRef(Side.A, 0))

    assert outcome.accepted
    assert store.state.occupants()[2].display_name == "a1"
    assert names(store.state.bench_a.entries) == ["a2"]


def test_evaluate_never_mutates():
    store = make_store(_court({0}), bench_a=[player("a1")], minimum=0)
    before = store.snapshot()
    outcome = SwapValidator().evaluate(store.state, CourtRef(0), BenchRef(Side.A, 0))

    assert outcome.accepted
    assert store.state == before
