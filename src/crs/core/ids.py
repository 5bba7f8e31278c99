from __future__ import annotations

from datetime import UTC, datetime
from uuid import uuid4


def now_utc() -> datetime:
    return datetime.now(UTC)


def make_id(prefix: str) -> str:
    return f"{prefix}_{uuid4().hex[:12]}"


def new_player_id() -> str:
    return make_id("ply")


def new_lineup_id() -> str:
    return make_id("lineup")
