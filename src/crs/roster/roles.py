from __future__ import annotations

from crs.contracts import PlayerRole
from crs.core import InvalidOperationError

ROLE_LABELS: dict[PlayerRole, str] = {
    PlayerRole.SETTER: "Setter",
    PlayerRole.OUTSIDE_HITTER: "Outside Hitter",
    PlayerRole.OPPOSITE_HITTER: "Opposite Hitter",
    PlayerRole.LIBERO: "Libero",
    PlayerRole.MIDDLE_BLOCKER: "Middle Blocker",
}

ROLE_ABBREVIATIONS: dict[PlayerRole, str] = {
    PlayerRole.SETTER: "S",
    PlayerRole.OUTSIDE_HITTER: "OH",
    PlayerRole.OPPOSITE_HITTER: "OP",
    PlayerRole.LIBERO: "L",
    PlayerRole.MIDDLE_BLOCKER: "MB",
}


def parse_role(value: object) -> PlayerRole | None:
    if value is None or value == "":
        return None
    if isinstance(value, PlayerRole):
        return value
    try:
        return PlayerRole(str(value))
    except ValueError:
        raise InvalidOperationError("UNKNOWN_ROLE", f"unknown role '{value}'") from None
