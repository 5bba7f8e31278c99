from .replay import ReplayHarness
from .runtime import LineupRuntime, RuntimePaths, player_view, slot_ref_from_payload, slot_ref_to_payload

__all__ = [
    "LineupRuntime",
    "ReplayHarness",
    "RuntimePaths",
    "player_view",
    "slot_ref_from_payload",
    "slot_ref_to_payload",
]
