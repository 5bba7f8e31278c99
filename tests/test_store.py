from __future__ import annotations

import pytest

from crs.contracts import BenchRef, CourtRef, Side, ValidationError
from crs.core import InvalidOperationError, RosterLimits, resolve_limits
from crs.court import RosterValidator
from crs.roster import build_demo_lineup, parse_role, state_from_dict, state_to_dict
from tests.helpers import make_state, make_store, names, player


def test_transaction_cancel_restores_snapshot():
    store = make_store([player("c0"), player("c1")])
    txn = store.transaction()
    txn.begin()
    store.remove_player(CourtRef(0))
    txn.cancel()

    assert names(store.state.occupants()) == ["c0", "c1"]
    assert not txn.active


def test_transaction_commit_keeps_changes():
    store = make_store([player("c0"), player("c1")])
    with store.transaction():
        store.remove_player(CourtRef(0))
    assert names(store.state.occupants()) == [None, "c1"]


def test_transaction_context_cancels_on_error():
    store = make_store([player("c0")])
    with pytest.raises(RuntimeError):
        with store.transaction():
            store.remove_player(CourtRef(0))
            raise RuntimeError("boom")
    assert names(store.state.occupants()) == ["c0"]


def test_transaction_rollback_keeps_snapshot_for_later_restores():
    store = make_store([player("c0"), player("c1")])
    txn = store.transaction()
    txn.begin()
    store.remove_player(CourtRef(0))
    txn.rollback()
    store.remove_player(CourtRef(1))
    txn.rollback()

    assert txn.active
    assert names(store.state.occupants()) == ["c0", "c1"]


def test_transaction_misuse_is_rejected():
    store = make_store([player("c0")])
    txn = store.transaction()
    with pytest.raises(InvalidOperationError) as ex:
        txn.cancel()
    assert ex.value.code == "NO_TRANSACTION"

    txn.begin()
    with pytest.raises(InvalidOperationError) as ex:
        txn.begin()
    assert ex.value.code == "TRANSACTION_ACTIVE"


def test_assign_to_next_free_bench_position_adds_player():
    store = make_store([player("c0")], bench_a=[player("a1")])
    store.assign_player(BenchRef(Side.A, 1), player("a2"))
    assert names(store.state.bench_a.entries) == ["a1", "a2"]

    with pytest.raises(InvalidOperationError) as ex:
        store.assign_player(BenchRef(Side.B, 2), player("b9"))
    assert ex.value.code == "UNKNOWN_SLOT"


def test_full_bench_and_duplicates_are_rejected():
    store = make_store([player("c0")], bench_a=[player("a1"), player("a2"), player("a3")])
    with pytest.raises(InvalidOperationError) as ex:
        store.add_to_bench(Side.A, player("a4"))
    assert ex.value.code == "BENCH_FULL"

    with pytest.raises(InvalidOperationError) as ex:
        store.add_to_bench(Side.B, player("c0"))
    assert ex.value.code == "DUPLICATE_PLAYER"

    with pytest.raises(InvalidOperationError) as ex:
        store.assign_player(CourtRef(0), player("a1"))
    assert ex.value.code == "DUPLICATE_PLAYER"


def test_remove_from_bench_compacts_queue():
    store = make_store([player("c0")], bench_b=[player("b1"), player("b2"), player("b3")])
    removed = store.remove_player(BenchRef(Side.B, 1))

    assert removed.display_name == "b2"
    assert names(store.state.bench_b.entries) == ["b1", "b3"]
    assert store.remove_player(BenchRef(Side.B, 2)) is None


def test_minimum_protected_outside_court_size_is_rejected():
    store = make_store([player("c0"), player("c1")], minimum=1)
    with pytest.raises(InvalidOperationError) as ex:
        store.set_minimum_protected(3)
    assert ex.value.code == "MINIMUM_OUT_OF_RANGE"
    store.set_minimum_protected(2)
    assert store.state.minimum_protected == 2


def test_reset_clears_players_but_keeps_size_and_minimum():
    store = make_store([player("c0"), player("c1")], bench_a=[player("a1")], minimum=1)
    store.reset()

    assert store.state.occupants() == [None, None]
    assert store.state.bench_a.entries == []
    assert (store.state.court_size, store.state.minimum_protected) == (2, 1)


def test_validator_flags_duplicates_and_warns_on_quota():
    dup = player("c0")
    with pytest.raises(ValidationError) as ex:
        RosterValidator(RosterLimits()).validate(make_state([dup, dup]))
    assert ex.value.issues[0].code == "DUPLICATE_PLAYER"

    result = RosterValidator(RosterLimits()).validate(make_state([player("c0")], minimum=1))
    assert result.ok
    assert [i.code for i in result.issues] == ["PROTECTED_QUOTA_UNMET"]


def test_codec_round_trips_demo_lineup_and_rejects_garbage():
    state = build_demo_lineup(RosterLimits())
    assert state_from_dict(state_to_dict(state)) == state

    with pytest.raises(ValidationError) as ex:
        state_from_dict({"format_version": 1, "lineup_id": "x"})
    assert ex.value.issues[0].code == "MALFORMED_STATE"


def test_role_parsing():
    assert parse_role("setter").value == "setter"
    assert parse_role("") is None
    with pytest.raises(InvalidOperationError):
        parse_role("quarterback")


def test_limit_profiles():
    assert resolve_limits("extended").max_court_size == 12
    with pytest.raises(ValueError):
        resolve_limits("beach")
