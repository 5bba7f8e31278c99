from __future__ import annotations

import pytest

from crs.core import InvalidOperationError, RosterLimits
from crs.court import ResizeReconciler
from tests.helpers import make_store, names, player


def test_shrink_displaces_non_protected_players_highest_index_first():
    court = [
        player("p0", True),
        player("n1"),
        player("p2", True),
        player("p3", True),
        player("n4"),
        player("p5", True),
    ]
    store = make_store(court, minimum=2)
    result = ResizeReconciler(RosterLimits()).set_active_court_size(store, 4)

    assert names(result.displaced) == ["n4", "n1"]
    assert names(store.state.occupants()) == ["p0", "p2", "p3", "p5"]
    assert names(store.state.bench_a.entries) == ["n4", "n1"]
    assert store.state.court_size == 4
    assert [s.position for s in store.state.court_slots] == [0, 1, 2, 3]


def test_shrink_overflows_into_side_b_when_side_a_is_full():
    court = [player("p0", True), player("n1"), player("p2", True), player("p3", True), player("n4"), player("p5", True)]
    bench_a = [player("a1"), player("a2"), player("a3")]
    store = make_store(court, bench_a=bench_a)
    ResizeReconciler(RosterLimits()).set_active_court_size(store, 4)

    assert names(store.state.bench_a.entries) == ["a1", "a2", "a3"]
    assert names(store.state.bench_b.entries) == ["n4", "n1"]


def test_shrink_removes_empty_slots_before_occupied_ones():
    court = [player("c0"), None, player("c2"), None, player("c4"), player("c5")]
    store = make_store(court)
    result = ResizeReconciler(RosterLimits()).set_active_court_size(store, 4)

    assert result.displaced == []
    assert names(store.state.occupants()) == ["c0", "c2", "c4", "c5"]


def test_shrink_reaches_protected_players_last():
    court = [player("p0", True), player("n1"), player("p2", True)]
    store = make_store(court)
    result = ResizeReconciler(RosterLimits()).set_active_court_size(store, 1)

    assert names(result.displaced) == ["n1", "p2"]
    assert names(store.state.occupants()) == ["p0"]


def test_displaced_players_without_bench_space_are_dropped_and_reported():
    court = [player(f"c{i}") for i in range(6)]
    full_a = [player("a1"), player("a2"), player("a3")]
    full_b = [player("b1"), player("b2"), player("b3")]
    store = make_store(court, bench_a=full_a, bench_b=full_b)
    result = ResizeReconciler(RosterLimits()).set_active_court_size(store, 4)

    assert names(result.dropped) == ["c5", "c4"]
    ids = {p.player_id for p in store.state.all_players()}
    assert "p_c5" not in ids and "p_c4" not in ids


def test_grow_fills_new_slots_from_side_a_then_side_b():
    court = [player(f"c{i}") for i in range(4)]
    store = make_store(court, bench_a=[player("a1")], bench_b=[player("b1"), player("b2")])
    result = ResizeReconciler(RosterLimits()).set_active_court_size(store, 6)

    assert names(result.entered) == ["a1", "b1"]
    assert names(store.state.occupants()) == ["c0", "c1", "c2", "c3", "a1", "b1"]
    assert store.state.bench_a.entries == []
    assert names(store.state.bench_b.entries) == ["b2"]


def test_grow_with_empty_benches_leaves_new_slots_empty():
    store = make_store([player("c0")])
    ResizeReconciler(RosterLimits()).set_active_court_size(store, 3)
    assert names(store.state.occupants()) == ["c0", None, None]


def test_shrink_clamps_minimum_protected():
    store = make_store([player(f"c{i}", True) for i in range(6)], minimum=5)
    result = ResizeReconciler(RosterLimits()).set_active_court_size(store, 4)

    assert result.minimum_protected == 4
    assert store.state.minimum_protected == 4


@pytest.mark.parametrize("size", [0, 7, -1])
def test_out_of_range_size_is_rejected_without_change(size: int):
    store = make_store([player(f"c{i}") for i in range(6)])
    before = store.snapshot()

    with pytest.raises(InvalidOperationError) as ex:
        ResizeReconciler(RosterLimits()).set_active_court_size(store, size)

    assert ex.value.code == "COURT_SIZE_OUT_OF_BOUNDS"
    assert store.state == before


def test_same_size_is_a_no_op():
    store = make_store([player(f"c{i}") for i in range(6)], bench_a=[player("a1")])
    before = store.snapshot()
    result = ResizeReconciler(RosterLimits()).set_active_court_size(store, 6)

    assert result.entered == [] and result.displaced == []
    assert store.state == before
