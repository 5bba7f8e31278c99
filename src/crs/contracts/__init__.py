from .types import (
    ActionRequest,
    ActionResult,
    ActionType,
    BenchQueue,
    BenchRef,
    CourtRef,
    CourtSlot,
    Direction,
    ForensicArtifact,
    Player,
    PlayerRole,
    QuotaShortfall,
    ResizeResult,
    RosterEvent,
    RosterState,
    RotationResult,
    Side,
    SideMove,
    SlotRef,
    SwapOutcome,
    ValidationError,
    ValidationIssue,
    ValidationResult,
)

__all__ = [
    "ActionRequest",
    "ActionResult",
    "ActionType",
    "BenchQueue",
    "BenchRef",
    "CourtRef",
    "CourtSlot",
    "Direction",
    "ForensicArtifact",
    "Player",
    "PlayerRole",
    "QuotaShortfall",
    "ResizeResult",
    "RosterEvent",
    "RosterState",
    "RotationResult",
    "Side",
    "SideMove",
    "SlotRef",
    "SwapOutcome",
    "ValidationError",
    "ValidationIssue",
    "ValidationResult",
]
