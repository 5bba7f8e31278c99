from .errors import (
    EngineIntegrityError,
    InvalidOperationError,
    PersistenceError,
    build_forensic_artifact,
    persist_forensic_artifact,
)
from .events import EventBus
from .ids import make_id, new_lineup_id, new_player_id, now_utc
from .limits import RosterLimits, default_limit_profiles, resolve_limits

__all__ = [
    "EngineIntegrityError",
    "EventBus",
    "InvalidOperationError",
    "PersistenceError",
    "RosterLimits",
    "build_forensic_artifact",
    "default_limit_profiles",
    "make_id",
    "new_lineup_id",
    "new_player_id",
    "now_utc",
    "persist_forensic_artifact",
    "resolve_limits",
]
