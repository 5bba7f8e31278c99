from __future__ import annotations

import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any, Callable, TypeVar

from crs.contracts import (
    ActionRequest,
    ActionResult,
    ActionType,
    BenchRef,
    CourtRef,
    Direction,
    Player,
    ResizeResult,
    RosterEvent,
    RosterState,
    RotationResult,
    Side,
    SlotRef,
    SwapOutcome,
    ValidationError,
)
from crs.core import (
    EngineIntegrityError,
    EventBus,
    InvalidOperationError,
    PersistenceError,
    RosterLimits,
    build_forensic_artifact,
    make_id,
    new_player_id,
    now_utc,
    persist_forensic_artifact,
)
from crs.court import ResizeReconciler, RosterValidator, RotationEngine, SwapValidator, describe_court
from crs.export import ExportService
from crs.persistence import AuthoritativeStore, refresh_analytics
from crs.roster import (
    ROLE_ABBREVIATIONS,
    ROLE_LABELS,
    RosterStore,
    RosterTransaction,
    build_default_roster_set,
    build_demo_lineup,
    build_empty_lineup,
    parse_role,
    state_to_dict,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
EventSpec = tuple[str, str, dict[str, Any]]

TRUE_STRINGS = frozenset({"true", "yes", "1"})
FALSE_STRINGS = frozenset({"false", "no", "0", ""})


class RuntimePaths:
    def __init__(self, root: Path) -> None:
        self.root = root

    @property
    def sqlite_path(self) -> Path:
        return self.root / "data" / "roster.sqlite3"

    @property
    def duckdb_path(self) -> Path:
        return self.root / "data" / "analytics.duckdb"

    @property
    def export_dir(self) -> Path:
        return self.root / "exports"

    @property
    def forensic_dir(self) -> Path:
        return self.root / "forensics"


def slot_ref_from_payload(raw: Any) -> SlotRef:
    if not isinstance(raw, dict):
        raise InvalidOperationError("BAD_SLOT_REF", f"slot reference must be an object, got {raw!r}")
    kind = raw.get("kind")
    try:
        index = int(raw["index"])
        if kind == "court":
            return CourtRef(index)
        if kind == "bench":
            return BenchRef(Side(str(raw["side"]).upper()), index)
    except (KeyError, TypeError, ValueError):
        raise InvalidOperationError("BAD_SLOT_REF", f"malformed slot reference {raw!r}") from None
    raise InvalidOperationError("BAD_SLOT_REF", f"unknown slot kind {kind!r}")


def slot_ref_to_payload(ref: SlotRef) -> dict[str, Any]:
    if isinstance(ref, CourtRef):
        return {"kind": "court", "index": ref.index}
    return {"kind": "bench", "side": ref.side.value, "index": ref.index}


def player_view(player: Player | None) -> dict[str, Any] | None:
    if player is None:
        return None
    return {
        "id": player.player_id,
        "display_name": player.display_name,
        "protected": player.protected,
        "role": player.role.value if player.role else None,
        "role_label": ROLE_LABELS[player.role] if player.role else None,
        "role_abbrev": ROLE_ABBREVIATIONS[player.role] if player.role else None,
    }


class LineupRuntime:
    """Session owner: one roster set, one active lineup, every public roster operation."""

    def __init__(
        self,
        root: Path,
        limits: RosterLimits | None = None,
        store: AuthoritativeStore | None = None,
    ) -> None:
        self.paths = RuntimePaths(root)
        self.limits = limits or RosterLimits()
        self.limits.validate()

        self.event_bus = EventBus()
        self.store = store or AuthoritativeStore(self.paths.sqlite_path)
        self.validator = RosterValidator(self.limits)
        self.rotation = RotationEngine()
        self.resizer = ResizeReconciler(self.limits)
        self.swaps = SwapValidator()

        self.halted = False
        self.last_forensic_path: str | None = None
        self.last_persistence_error: str | None = None
        self._drag: RosterTransaction | None = None
        self._drag_source: SlotRef | None = None
        self.held_lineups: list[str] = []

        self.lineups: list[RosterStore] = [RosterStore(s, self.limits) for s in self._load_roster_set()]
        self.active_index = 0
        self._restore_active_lineup()
        self.event_bus.subscribe(self._record_event)

    @property
    def active(self) -> RosterStore:
        return self.lineups[self.active_index]

    @property
    def drag_active(self) -> bool:
        return self._drag is not None

    # -- read accessors ---------------------------------------------------

    def current_state(self) -> RosterState:
        return self.active.snapshot()

    def roster_set(self) -> list[RosterState]:
        return [lineup.snapshot() for lineup in self.lineups]

    def state_view(self) -> dict[str, Any]:
        state = self.active.state
        on_court = state.protected_on_court()
        return {
            "lineup_id": state.lineup_id,
            "name": state.name,
            "court_size": state.court_size,
            "minimum_protected": state.minimum_protected,
            "protected_on_court": on_court,
            "quota_met": on_court >= state.minimum_protected,
            "layout": describe_court(state.court_size),
            "court": [{"position": s.position, "player": player_view(s.occupant)} for s in state.court_slots],
            "bench_capacity": state.bench_a.capacity,
            "bench_a": [player_view(p) for p in state.bench_a.entries],
            "bench_b": [player_view(p) for p in state.bench_b.entries],
            "drag_active": self.drag_active,
        }

    # -- public operations ------------------------------------------------

    def rotate(self, direction: Direction) -> RotationResult:
        def describe(result: RotationResult) -> EventSpec:
            state = self.active.state
            summary = f"rotated {direction.value}"
            if result.blocked_sides:
                summary += f", blocked {','.join(s.value for s in result.blocked_sides)}"
            return (
                "rotate",
                summary,
                {
                    "direction": direction.value,
                    "moves": [
                        {
                            "side": m.side.value,
                            "incoming": m.incoming.player_id if m.incoming else None,
                            "outgoing": m.outgoing.player_id if m.outgoing else None,
                            "blocked": m.blocked,
                        }
                        for m in result.moves
                    ],
                    "on_court": [p.player_id for p in state.occupants() if p is not None],
                    "on_bench": [p.player_id for p in state.bench_a.entries + state.bench_b.entries],
                    "protected_after": result.protected_after,
                    "quota_shortfall": asdict(result.quota_shortfall) if result.quota_shortfall else None,
                },
            )

        return self._mutate("rotate", lambda store: self.rotation.rotate(store, direction), describe)

    def set_active_court_size(self, size: int) -> ResizeResult:
        def describe(result: ResizeResult) -> EventSpec | None:
            if result.old_size == result.new_size:
                return None
            return (
                "resize",
                f"court size {result.old_size} -> {result.new_size}",
                {
                    "old_size": result.old_size,
                    "new_size": result.new_size,
                    "entered": [p.player_id for p in result.entered],
                    "displaced": [p.player_id for p in result.displaced],
                    "dropped": [p.player_id for p in result.dropped],
                    "minimum_protected": result.minimum_protected,
                },
            )

        return self._mutate("set_court_size", lambda store: self.resizer.set_active_court_size(store, size), describe)

    def set_minimum_protected_count(self, minimum: int) -> int:
        def apply(store: RosterStore) -> int:
            store.set_minimum_protected(minimum)
            return minimum

        return self._mutate("set_minimum", apply, lambda m: ("set_minimum", f"minimum protected set to {m}", {"minimum_protected": m}))

    def assign_player(
        self,
        ref: SlotRef,
        *,
        display_name: str,
        protected: bool,
        role: object = None,
    ) -> Player:
        name = display_name.strip()
        if not name:
            raise InvalidOperationError("BLANK_NAME", "display name must not be blank")
        parsed_role = parse_role(role)

        def apply(store: RosterStore) -> Player:
            existing = None
            # Next free bench position: add_to_bench joins the queue or reports BENCH_FULL.
            if not (isinstance(ref, BenchRef) and ref.index == len(store.state.bench(ref.side).entries)):
                existing = store.occupant(ref)
            player = Player(
                player_id=existing.player_id if existing else new_player_id(),
                display_name=name,
                protected=protected,
                role=parsed_role,
            )
            store.assign_player(ref, player)
            return player

        def describe(player: Player) -> EventSpec:
            return ("assign", f"{player.display_name} saved at {slot_ref_to_payload(ref)}", {"slot": slot_ref_to_payload(ref), "player_id": player.player_id})

        return self._mutate("assign", apply, describe)

    def remove_player(self, ref: SlotRef) -> Player | None:
        def describe(player: Player | None) -> EventSpec | None:
            if player is None:
                return None
            return ("remove", f"{player.display_name} removed", {"slot": slot_ref_to_payload(ref), "player_id": player.player_id})

        return self._mutate("remove", lambda store: store.remove_player(ref), describe)

    def propose_swap(self, first: SlotRef, second: SlotRef) -> SwapOutcome:
        def describe(outcome: SwapOutcome) -> EventSpec | None:
            if not outcome.accepted or first == second:
                return None
            return (
                "swap",
                outcome.message,
                {"first": slot_ref_to_payload(first), "second": slot_ref_to_payload(second), "code": outcome.code},
            )

        return self._mutate("swap", lambda store: self.swaps.propose(store, first, second), describe)

    def swap_is_valid(self, first: SlotRef, second: SlotRef) -> SwapOutcome:
        return self.swaps.evaluate(self.active.state, first, second)

    def reset_lineup(self) -> None:
        self._mutate("reset", lambda store: store.reset(), lambda _: ("reset", "lineup cleared", {}))

    # -- drag gestures ----------------------------------------------------

    def begin_drag(self, source: SlotRef) -> None:
        self._ensure_running()
        if self._drag is not None:
            raise InvalidOperationError("DRAG_IN_PROGRESS", "a drag gesture is already active")
        if self.active.occupant(source) is None:
            raise InvalidOperationError("EMPTY_SOURCE", f"nothing to drag at {source}")
        drag = self.active.transaction()
        drag.begin()
        self._drag = drag
        self._drag_source = source

    def preview_drag(self, target: SlotRef) -> SwapOutcome:
        drag, source = self._require_drag()
        drag.rollback()
        if isinstance(source, CourtRef) and isinstance(target, CourtRef):
            return self.swaps.propose(self.active, source, target)
        return self.swaps.evaluate(self.active.state, source, target)

    def drop(self, target: SlotRef | None) -> SwapOutcome | None:
        drag, source = self._require_drag()
        drag.cancel()
        self._drag = None
        self._drag_source = None
        if target is None:
            return None
        return self.propose_swap(source, target)

    def cancel_drag(self) -> None:
        drag, _ = self._require_drag()
        drag.cancel()
        self._drag = None
        self._drag_source = None

    # -- lineups ----------------------------------------------------------

    def create_lineup(self, name: str, *, demo: bool = False) -> RosterState:
        self._ensure_idle()
        builder = build_demo_lineup if demo else build_empty_lineup
        state = builder(self.limits, name=name.strip() or f"Lineup {len(self.lineups) + 1}")
        self.lineups.append(RosterStore(state, self.limits))
        logger.info("created lineup %s (%s)", state.lineup_id, state.name)
        self.active_index = len(self.lineups) - 1
        self._persist()
        return state

    def select_lineup(self, lineup_id: str) -> RosterState:
        self._ensure_idle()
        for idx, lineup in enumerate(self.lineups):
            if lineup.lineup_id == lineup_id:
                self.active_index = idx
                self._persist()
                return lineup.snapshot()
        raise InvalidOperationError("UNKNOWN_LINEUP", f"no lineup '{lineup_id}'")

    # -- analytics --------------------------------------------------------

    def refresh_analytics(self) -> dict[str, int]:
        return refresh_analytics(self.paths.sqlite_path, self.paths.duckdb_path)

    def export(self) -> list[Path]:
        self.refresh_analytics()
        return ExportService(self.paths.duckdb_path).export_required_datasets(self.paths.export_dir)

    # -- action dispatch --------------------------------------------------

    def handle_action(self, request: ActionRequest) -> ActionResult:
        if self.halted:
            return ActionResult(
                request.request_id,
                False,
                f"runtime halted after integrity failure; forensic={self.last_forensic_path}",
                {"forensic_path": self.last_forensic_path},
            )

        try:
            return self._handle_action_core(request)
        except InvalidOperationError as exc:
            logger.debug("action %s rejected: %s", request.action_type, exc)
            return ActionResult(request.request_id, False, exc.message, {"code": exc.code})
        except EngineIntegrityError as exc:
            if not self.halted:
                self._halt(exc)
            return ActionResult(
                request.request_id,
                False,
                f"integrity failure: {exc.artifact.error_code}",
                {"forensic_path": self.last_forensic_path},
            )
        except Exception as exc:
            artifact = build_forensic_artifact(
                "UNHANDLED_RUNTIME_EXCEPTION",
                str(exc),
                state_snapshot=state_to_dict(self.active.state),
                action=str(request.action_type),
                payload=request.payload,
                lineup_id=self.active.lineup_id,
                request_id=request.request_id,
                causal_fragment=["runtime_dispatch"],
            )
            self._halt(EngineIntegrityError(artifact))
            return ActionResult(
                request.request_id,
                False,
                f"runtime hard-stopped: {exc}",
                {"forensic_path": self.last_forensic_path},
            )

    def _handle_action_core(self, request: ActionRequest) -> ActionResult:
        action = self._normalize_action(request.action_type)
        payload = request.payload

        if action == ActionType.ROTATE:
            try:
                direction = Direction(str(payload.get("direction", Direction.FORWARD.value)))
            except ValueError:
                return ActionResult(request.request_id, False, f"invalid direction '{payload.get('direction')}'", {"code": "BAD_DIRECTION"})
            result = self.rotate(direction)
            data = {"rotation": self._rotation_data(result), "state": self.state_view()}
            return ActionResult(request.request_id, True, f"rotated {direction.value}", data)

        if action == ActionType.SET_COURT_SIZE:
            result = self.set_active_court_size(self._int_field(payload, "size"))
            data = {
                "entered": [p.player_id for p in result.entered],
                "displaced": [p.player_id for p in result.displaced],
                "dropped": [p.player_id for p in result.dropped],
                "state": self.state_view(),
            }
            return ActionResult(request.request_id, True, f"court size {result.new_size}", data)

        if action == ActionType.SET_MIN_PROTECTED:
            minimum = self.set_minimum_protected_count(self._int_field(payload, "minimum"))
            return ActionResult(request.request_id, True, f"minimum protected {minimum}", {"state": self.state_view()})

        if action == ActionType.ASSIGN_PLAYER:
            player = self.assign_player(
                slot_ref_from_payload(payload.get("slot")),
                display_name=str(payload.get("display_name", "")),
                protected=self._bool_field(payload, "protected"),
                role=payload.get("role"),
            )
            return ActionResult(request.request_id, True, f"saved {player.display_name}", {"player": player_view(player), "state": self.state_view()})

        if action == ActionType.REMOVE_PLAYER:
            removed = self.remove_player(slot_ref_from_payload(payload.get("slot")))
            message = f"removed {removed.display_name}" if removed else "slot already empty"
            return ActionResult(request.request_id, True, message, {"player": player_view(removed), "state": self.state_view()})

        if action in {ActionType.PROPOSE_SWAP, ActionType.CHECK_SWAP}:
            first = slot_ref_from_payload(payload.get("first"))
            second = slot_ref_from_payload(payload.get("second"))
            if action == ActionType.CHECK_SWAP:
                outcome = self.swap_is_valid(first, second)
            else:
                outcome = self.propose_swap(first, second)
            return ActionResult(request.request_id, outcome.accepted, outcome.message, {"code": outcome.code, "state": self.state_view()})

        if action == ActionType.RESET_LINEUP:
            self.reset_lineup()
            return ActionResult(request.request_id, True, "lineup reset", {"state": self.state_view()})

        if action == ActionType.BEGIN_DRAG:
            self.begin_drag(slot_ref_from_payload(payload.get("source")))
            return ActionResult(request.request_id, True, "drag started", {"state": self.state_view()})

        if action == ActionType.PREVIEW_DRAG:
            outcome = self.preview_drag(slot_ref_from_payload(payload.get("target")))
            return ActionResult(request.request_id, True, outcome.message, {"valid_target": outcome.accepted, "code": outcome.code, "state": self.state_view()})

        if action == ActionType.DROP:
            raw_target = payload.get("target")
            outcome = self.drop(slot_ref_from_payload(raw_target) if raw_target is not None else None)
            if outcome is None:
                return ActionResult(request.request_id, True, "drag cancelled", {"state": self.state_view()})
            return ActionResult(request.request_id, outcome.accepted, outcome.message, {"code": outcome.code, "state": self.state_view()})

        if action == ActionType.CANCEL_DRAG:
            self.cancel_drag()
            return ActionResult(request.request_id, True, "drag cancelled", {"state": self.state_view()})

        if action == ActionType.GET_STATE:
            return ActionResult(request.request_id, True, "lineup state", {"state": self.state_view()})

        if action == ActionType.LIST_LINEUPS:
            lineups = [
                {
                    "lineup_id": s.lineup_id,
                    "name": s.state.name,
                    "active": idx == self.active_index,
                    "events": self.event_bus.emitted_count(lineup_id=s.lineup_id),
                }
                for idx, s in enumerate(self.lineups)
            ]
            return ActionResult(request.request_id, True, "lineups", {"lineups": lineups, "held": list(self.held_lineups)})

        if action == ActionType.CREATE_LINEUP:
            state = self.create_lineup(str(payload.get("name", "")), demo=self._bool_field(payload, "demo"))
            return ActionResult(request.request_id, True, f"created {state.name}", {"state": self.state_view()})

        if action == ActionType.SELECT_LINEUP:
            state = self.select_lineup(str(payload.get("lineup_id", "")))
            return ActionResult(request.request_id, True, f"selected {state.name}", {"state": self.state_view()})

        return ActionResult(request.request_id, False, f"Unsupported action '{request.action_type}'", {"code": "UNSUPPORTED_ACTION"})

    # -- internals --------------------------------------------------------

    def _mutate(
        self,
        action: str,
        operation: Callable[[RosterStore], T],
        describe: Callable[[T], EventSpec | None],
    ) -> T:
        """Run one all-or-nothing roster mutation, then validate, publish and save.

        Any exception from ``operation`` restores the pre-call state. A state that fails
        validation afterwards is also restored, a forensic artifact is written and the
        runtime halts.
        """
        self._ensure_idle()
        store = self.active
        before = store.snapshot()
        try:
            result = operation(store)
        except Exception:
            store.restore(before)
            raise
        try:
            self.validator.validate(store.state)
        except ValidationError as exc:
            broken = state_to_dict(store.state)
            store.restore(before)
            integrity = EngineIntegrityError(
                build_forensic_artifact(
                    "POST_MUTATION_INVARIANT",
                    str(exc),
                    state_snapshot={"before": state_to_dict(before), "after": broken},
                    action=action,
                    payload={"issues": [asdict(i) for i in exc.issues]},
                    lineup_id=store.lineup_id,
                    request_id="",
                    causal_fragment=[action, "post_mutation_validation"],
                )
            )
            self._halt(integrity)
            raise integrity from exc

        described = describe(result)
        if described is not None:
            event_type, summary, payload = described
            self.event_bus.publish(
                RosterEvent(
                    event_id=make_id("evt"),
                    lineup_id=store.lineup_id,
                    event_type=event_type,
                    summary=summary,
                    created_at=now_utc(),
                    payload=payload,
                )
            )
            self._persist()
        return result

    def _load_roster_set(self) -> list[RosterState]:
        states: list[RosterState] = []
        try:
            self.store.initialize_schema()
            states = self.store.load() or []
        except PersistenceError as exc:
            self.last_persistence_error = str(exc)
            logger.warning("roster load failed, continuing in memory: %s", exc)

        usable: list[RosterState] = []
        for state in states:
            try:
                self.validator.validate(state)
            except ValidationError as exc:
                # Left untouched in the store: saves only rewrite the lineups held in memory.
                self.held_lineups.append(state.lineup_id)
                logger.warning("saved lineup %s is not usable with these limits (%s); leaving it stored", state.lineup_id, exc)
                continue
            usable.append(state)

        if usable:
            return usable
        if "lineup_default" in self.held_lineups:
            return [build_empty_lineup(self.limits)]
        return build_default_roster_set(self.limits)

    def _restore_active_lineup(self) -> None:
        try:
            lineup_id = self.store.load_active_lineup()
        except PersistenceError as exc:
            logger.warning("active lineup not restored: %s", exc)
            return
        for idx, lineup in enumerate(self.lineups):
            if lineup.lineup_id == lineup_id:
                self.active_index = idx
                return

    def _persist(self) -> None:
        try:
            self.store.save([lineup.state for lineup in self.lineups])
            self.store.save_active_lineup(self.active.lineup_id)
        except PersistenceError as exc:
            self.last_persistence_error = str(exc)
            logger.error("roster save failed, in-memory state kept: %s", exc)

    def _record_event(self, event: RosterEvent) -> None:
        try:
            self.store.save_event(event)
        except PersistenceError as exc:
            self.last_persistence_error = str(exc)
            logger.error("event %s not recorded: %s", event.event_id, exc)

    def _halt(self, exc: EngineIntegrityError) -> None:
        self.last_forensic_path = str(persist_forensic_artifact(exc.artifact, self.paths.forensic_dir))
        self.halted = True
        logger.error("runtime halted: %s (forensic=%s)", exc.artifact.error_code, self.last_forensic_path)

    def _ensure_running(self) -> None:
        if self.halted:
            raise InvalidOperationError("RUNTIME_HALTED", f"runtime halted; forensic={self.last_forensic_path}")

    def _ensure_idle(self) -> None:
        self._ensure_running()
        if self._drag is not None:
            raise InvalidOperationError("DRAG_IN_PROGRESS", "finish or cancel the active drag first")

    def _require_drag(self) -> tuple[RosterTransaction, SlotRef]:
        if self._drag is None or self._drag_source is None:
            raise InvalidOperationError("NO_DRAG", "no drag gesture is active")
        return self._drag, self._drag_source

    @staticmethod
    def _rotation_data(result: RotationResult) -> dict[str, Any]:
        return {
            "direction": result.direction.value,
            "blocked_sides": [s.value for s in result.blocked_sides],
            "substituted_sides": [s.value for s in result.substituted_sides],
            "protected_before": result.protected_before,
            "protected_after": result.protected_after,
            "quota_shortfall": asdict(result.quota_shortfall) if result.quota_shortfall else None,
        }

    @staticmethod
    def _int_field(payload: dict[str, Any], key: str) -> int:
        try:
            return int(payload[key])
        except (KeyError, TypeError, ValueError):
            raise InvalidOperationError("BAD_PAYLOAD", f"'{key}' must be an integer") from None

    @staticmethod
    def _bool_field(payload: dict[str, Any], key: str) -> bool:
        value = payload.get(key, False)
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in TRUE_STRINGS | FALSE_STRINGS:
            return value.strip().lower() in TRUE_STRINGS
        if isinstance(value, int) and value in (0, 1):
            return bool(value)
        raise InvalidOperationError("BAD_PAYLOAD", f"'{key}' must be a boolean")

    @staticmethod
    def _normalize_action(action_type: ActionType | str) -> ActionType | str:
        if isinstance(action_type, ActionType):
            return action_type
        try:
            return ActionType(action_type)
        except ValueError:
            return action_type
