from .layout import GridShape, RotationPath, SidePorts, build_rotation_path, describe_court, resolve_grid, side_ports
from .quota import BlockingDecision, QuotaEvaluator
from .resize import ResizeReconciler
from .rotation import RotationEngine, RotationPlan
from .swap import SwapValidator
from .validation import RosterValidator

__all__ = [
    "BlockingDecision",
    "GridShape",
    "QuotaEvaluator",
    "ResizeReconciler",
    "RosterValidator",
    "RotationEngine",
    "RotationPath",
    "RotationPlan",
    "SidePorts",
    "SwapValidator",
    "build_rotation_path",
    "describe_court",
    "resolve_grid",
    "side_ports",
]
