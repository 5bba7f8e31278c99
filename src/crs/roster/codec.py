from __future__ import annotations

from typing import Any

from crs.contracts import BenchQueue, CourtSlot, Player, RosterState, Side, ValidationError, ValidationIssue
from crs.roster.roles import parse_role

FORMAT_VERSION = 1


def player_to_dict(player: Player) -> dict[str, Any]:
    return {
        "id": player.player_id,
        "display_name": player.display_name,
        "protected": player.protected,
        "role": player.role.value if player.role else None,
    }


def player_from_dict(raw: dict[str, Any]) -> Player:
    return Player(
        player_id=str(raw["id"]),
        display_name=str(raw["display_name"]),
        protected=bool(raw["protected"]),
        role=parse_role(raw.get("role")),
    )


def state_to_dict(state: RosterState) -> dict[str, Any]:
    return {
        "format_version": FORMAT_VERSION,
        "lineup_id": state.lineup_id,
        "name": state.name,
        "court_size": state.court_size,
        "minimum_protected": state.minimum_protected,
        "court": [player_to_dict(s.occupant) if s.occupant else None for s in state.court_slots],
        "bench_capacity": {"A": state.bench_a.capacity, "B": state.bench_b.capacity},
        "bench_a": [player_to_dict(p) for p in state.bench_a.entries],
        "bench_b": [player_to_dict(p) for p in state.bench_b.entries],
    }


def state_from_dict(raw: dict[str, Any]) -> RosterState:
    try:
        if raw.get("format_version") != FORMAT_VERSION:
            raise ValueError(f"unsupported format_version {raw.get('format_version')!r}")
        capacity = raw["bench_capacity"]
        return RosterState(
            lineup_id=str(raw["lineup_id"]),
            name=str(raw["name"]),
            court_size=int(raw["court_size"]),
            minimum_protected=int(raw["minimum_protected"]),
            court_slots=[
                CourtSlot(position=i, occupant=player_from_dict(p) if p else None)
                for i, p in enumerate(raw["court"])
            ],
            bench_a=BenchQueue(Side.A, int(capacity["A"]), [player_from_dict(p) for p in raw["bench_a"]]),
            bench_b=BenchQueue(Side.B, int(capacity["B"]), [player_from_dict(p) for p in raw["bench_b"]]),
        )
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise ValidationError(
            [
                ValidationIssue(
                    code="MALFORMED_STATE",
                    severity="blocking",
                    field_path="roster_state",
                    entity_id=str(raw.get("lineup_id", "?")) if isinstance(raw, dict) else "?",
                    message=str(exc),
                )
            ]
        ) from exc
