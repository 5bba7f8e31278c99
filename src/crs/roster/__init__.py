from .bootstrap import build_default_roster_set, build_demo_lineup, build_empty_lineup
from .codec import state_from_dict, state_to_dict
from .roles import ROLE_ABBREVIATIONS, ROLE_LABELS, parse_role
from .store import RosterStore, RosterTransaction

__all__ = [
    "ROLE_ABBREVIATIONS",
    "ROLE_LABELS",
    "RosterStore",
    "RosterTransaction",
    "build_default_roster_set",
    "build_demo_lineup",
    "build_empty_lineup",
    "parse_role",
    "state_from_dict",
    "state_to_dict",
]
