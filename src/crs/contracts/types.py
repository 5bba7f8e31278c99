from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Sequence, Union


class Side(str, Enum):
    A = "A"
    B = "B"


class Direction(str, Enum):
    FORWARD = "forward"
    BACKWARD = "backward"


class PlayerRole(str, Enum):
    SETTER = "setter"
    OUTSIDE_HITTER = "outside_hitter"
    OPPOSITE_HITTER = "opposite_hitter"
    LIBERO = "libero"
    MIDDLE_BLOCKER = "middle_blocker"


class ActionType(str, Enum):
    ROTATE = "rotate"
    SET_COURT_SIZE = "set_court_size"
    SET_MIN_PROTECTED = "set_min_protected"
    ASSIGN_PLAYER = "assign_player"
    REMOVE_PLAYER = "remove_player"
    PROPOSE_SWAP = "propose_swap"
    CHECK_SWAP = "check_swap"
    RESET_LINEUP = "reset_lineup"
    BEGIN_DRAG = "begin_drag"
    PREVIEW_DRAG = "preview_drag"
    DROP = "drop"
    CANCEL_DRAG = "cancel_drag"
    GET_STATE = "get_state"
    LIST_LINEUPS = "list_lineups"
    CREATE_LINEUP = "create_lineup"
    SELECT_LINEUP = "select_lineup"


@dataclass(slots=True, frozen=True)
class Player:
    player_id: str
    display_name: str
    protected: bool
    role: PlayerRole | None = None


@dataclass(slots=True, frozen=True)
class CourtRef:
    index: int


@dataclass(slots=True, frozen=True)
class BenchRef:
    side: Side
    index: int


SlotRef = Union[CourtRef, BenchRef]


@dataclass(slots=True)
class CourtSlot:
    position: int
    occupant: Player | None = None


@dataclass(slots=True)
class BenchQueue:
    side: Side
    capacity: int
    entries: list[Player] = field(default_factory=list)

    @property
    def is_full(self) -> bool:
        return len(self.entries) >= self.capacity


@dataclass(slots=True)
class RosterState:
    lineup_id: str
    name: str
    court_size: int
    minimum_protected: int
    court_slots: list[CourtSlot]
    bench_a: BenchQueue
    bench_b: BenchQueue

    def bench(self, side: Side) -> BenchQueue:
        return self.bench_a if side == Side.A else self.bench_b

    def occupants(self) -> list[Player | None]:
        return [slot.occupant for slot in self.court_slots]

    def protected_on_court(self) -> int:
        return sum(1 for p in self.occupants() if p is not None and p.protected)

    def all_players(self) -> list[Player]:
        on_court = [p for p in self.occupants() if p is not None]
        return on_court + list(self.bench_a.entries) + list(self.bench_b.entries)


@dataclass(slots=True)
class QuotaShortfall:
    required: int
    achieved: int


@dataclass(slots=True)
class SideMove:
    side: Side
    exit_slot: int
    entry_slot: int
    outgoing: Player | None
    incoming: Player | None
    blocked: bool


@dataclass(slots=True)
class RotationResult:
    direction: Direction
    moves: list[SideMove]
    protected_before: int
    protected_after: int
    quota_shortfall: QuotaShortfall | None = None

    @property
    def blocked_sides(self) -> list[Side]:
        return [m.side for m in self.moves if m.blocked]

    @property
    def substituted_sides(self) -> list[Side]:
        return [m.side for m in self.moves if not m.blocked]


@dataclass(slots=True)
class ResizeResult:
    old_size: int
    new_size: int
    entered: list[Player]
    displaced: list[Player]
    dropped: list[Player]
    minimum_protected: int


@dataclass(slots=True)
class SwapOutcome:
    accepted: bool
    code: str
    message: str


@dataclass(slots=True)
class ActionRequest:
    request_id: str
    action_type: ActionType | str
    payload: dict[str, Any]


@dataclass(slots=True)
class ActionResult:
    request_id: str
    success: bool
    message: str
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class ValidationIssue:
    code: str
    severity: str
    field_path: str
    entity_id: str
    message: str


@dataclass(slots=True)
class ValidationResult:
    ok: bool
    issues: list[ValidationIssue]


class ValidationError(ValueError):
    def __init__(self, issues: list[ValidationIssue]) -> None:
        message = "; ".join(f"{i.code}:{i.entity_id}:{i.message}" for i in issues)
        super().__init__(message)
        self.issues = issues


@dataclass(slots=True)
class RosterEvent:
    event_id: str
    lineup_id: str
    event_type: str
    summary: str
    created_at: datetime
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class ForensicArtifact:
    artifact_id: str
    timestamp: datetime
    engine_scope: str
    error_code: str
    message: str
    state_snapshot: Mapping[str, Any]
    context: Mapping[str, Any]
    identifiers: Mapping[str, str]
    causal_fragment: Sequence[str]
