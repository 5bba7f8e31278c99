from __future__ import annotations

import copy
import logging
from typing import Sequence

from crs.contracts import BenchQueue, BenchRef, CourtRef, CourtSlot, Player, RosterState, Side, SlotRef
from crs.core import InvalidOperationError, RosterLimits

logger = logging.getLogger(__name__)


class RosterTransaction:
    """Single-level snapshot over a RosterStore.

    ``begin`` deep-copies the state, ``cancel`` restores it and ``commit`` discards the copy.
    Used as a context manager it cancels when the body raises.
    """

    def __init__(self, store: RosterStore) -> None:
        self._store = store
        self._snapshot: RosterState | None = None

    @property
    def active(self) -> bool:
        return self._snapshot is not None

    def begin(self) -> None:
        if self._snapshot is not None:
            raise InvalidOperationError("TRANSACTION_ACTIVE", "a snapshot is already held for this lineup")
        self._snapshot = self._store.snapshot()

    def rollback(self) -> None:
        """Restore the snapshot but keep holding it, so the gesture can continue."""
        if self._snapshot is None:
            raise InvalidOperationError("NO_TRANSACTION", "no snapshot to restore")
        self._store.restore(self._snapshot)

    def cancel(self) -> None:
        self.rollback()
        self._snapshot = None

    def commit(self) -> None:
        if self._snapshot is None:
            raise InvalidOperationError("NO_TRANSACTION", "no snapshot to commit")
        self._snapshot = None

    def __enter__(self) -> RosterTransaction:
        self.begin()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.cancel()
        else:
            self.commit()


class RosterStore:
    """Owner of one lineup's RosterState. All occupancy changes go through ``commit``."""

    def __init__(self, state: RosterState, limits: RosterLimits) -> None:
        self._state = state
        self.limits = limits

    @property
    def state(self) -> RosterState:
        # Live reference for the engines; treat as read-only.
        return self._state

    @property
    def lineup_id(self) -> str:
        return self._state.lineup_id

    def snapshot(self) -> RosterState:
        return copy.deepcopy(self._state)

    def restore(self, snapshot: RosterState) -> None:
        self._state = copy.deepcopy(snapshot)

    def transaction(self) -> RosterTransaction:
        return RosterTransaction(self)

    def commit(
        self,
        *,
        court: Sequence[Player | None],
        bench_a: Sequence[Player],
        bench_b: Sequence[Player],
        minimum_protected: int | None = None,
    ) -> None:
        current = self._state
        self._state = RosterState(
            lineup_id=current.lineup_id,
            name=current.name,
            court_size=len(court),
            minimum_protected=current.minimum_protected if minimum_protected is None else minimum_protected,
            court_slots=[CourtSlot(position=i, occupant=p) for i, p in enumerate(court)],
            bench_a=BenchQueue(Side.A, current.bench_a.capacity, list(bench_a)),
            bench_b=BenchQueue(Side.B, current.bench_b.capacity, list(bench_b)),
        )

    def slot_exists(self, ref: SlotRef) -> bool:
        if isinstance(ref, CourtRef):
            return 0 <= ref.index < self._state.court_size
        return 0 <= ref.index < self._state.bench(ref.side).capacity

    def occupant(self, ref: SlotRef) -> Player | None:
        if not self.slot_exists(ref):
            raise InvalidOperationError("UNKNOWN_SLOT", f"slot {ref} does not exist")
        if isinstance(ref, CourtRef):
            return self._state.court_slots[ref.index].occupant
        entries = self._state.bench(ref.side).entries
        return entries[ref.index] if ref.index < len(entries) else None

    def locate(self, player_id: str) -> SlotRef | None:
        for slot in self._state.court_slots:
            if slot.occupant is not None and slot.occupant.player_id == player_id:
                return CourtRef(slot.position)
        for side in Side:
            for idx, player in enumerate(self._state.bench(side).entries):
                if player.player_id == player_id:
                    return BenchRef(side, idx)
        return None

    def set_minimum_protected(self, minimum: int) -> None:
        if not 0 <= minimum <= self._state.court_size:
            raise InvalidOperationError(
                "MINIMUM_OUT_OF_RANGE",
                f"minimum protected count must lie within 0..{self._state.court_size}",
            )
        self._state.minimum_protected = minimum

    def assign_player(self, ref: SlotRef, player: Player) -> Player | None:
        """Place ``player`` at ``ref`` and return whoever it replaced.

        A bench position one past the last entry appends to that queue; this is the
        only way a brand-new player joins a bench.
        """
        elsewhere = self.locate(player.player_id)
        if elsewhere is not None and elsewhere != ref:
            raise InvalidOperationError("DUPLICATE_PLAYER", f"player {player.player_id} already occupies {elsewhere}")

        if isinstance(ref, CourtRef):
            previous = self.occupant(ref)
            self._state.court_slots[ref.index].occupant = player
            return previous

        queue = self._state.bench(ref.side)
        if 0 <= ref.index < len(queue.entries):
            previous = queue.entries[ref.index]
            queue.entries[ref.index] = player
            return previous
        if ref.index == len(queue.entries):
            self.add_to_bench(ref.side, player)
            return None
        raise InvalidOperationError("UNKNOWN_SLOT", f"bench {ref.side.value} has no position {ref.index}; next free position is {len(queue.entries)}")

    def add_to_bench(self, side: Side, player: Player) -> None:
        queue = self._state.bench(side)
        if queue.is_full:
            raise InvalidOperationError("BENCH_FULL", f"bench {side.value} is at capacity {queue.capacity}")
        if self.locate(player.player_id) is not None:
            raise InvalidOperationError("DUPLICATE_PLAYER", f"player {player.player_id} is already on the roster")
        queue.entries.append(player)

    def remove_player(self, ref: SlotRef) -> Player | None:
        previous = self.occupant(ref)
        if previous is None:
            return None
        if isinstance(ref, CourtRef):
            self._state.court_slots[ref.index].occupant = None
        else:
            del self._state.bench(ref.side).entries[ref.index]
        return previous

    def reset(self) -> None:
        for slot in self._state.court_slots:
            slot.occupant = None
        self._state.bench_a.entries.clear()
        self._state.bench_b.entries.clear()
        logger.info("lineup %s reset", self._state.lineup_id)
