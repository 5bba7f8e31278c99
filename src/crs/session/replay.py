from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from crs.contracts import ActionRequest
from crs.core import RosterLimits, make_id
from crs.session.runtime import LineupRuntime


@dataclass(slots=True)
class ReplayAction:
    action_type: str
    payload: dict


class ReplayHarness:
    """Records an action script and plays it into two fresh runtimes for comparison."""

    def __init__(self, limits: RosterLimits | None = None) -> None:
        self.limits = limits or RosterLimits()
        self.actions: list[ReplayAction] = []

    def record(self, action_type: str, payload: dict | None = None) -> None:
        self.actions.append(ReplayAction(action_type=action_type, payload=payload or {}))

    def save(self, path: Path) -> None:
        path.write_text(json.dumps({"actions": [{"action_type": a.action_type, "payload": a.payload} for a in self.actions]}, indent=2), encoding="utf-8")

    @staticmethod
    def load(path: Path, limits: RosterLimits | None = None) -> ReplayHarness:
        data = json.loads(path.read_text(encoding="utf-8"))
        harness = ReplayHarness(limits)
        for raw in data["actions"]:
            harness.actions.append(ReplayAction(action_type=raw["action_type"], payload=raw["payload"]))
        return harness

    def replay(self, root: Path) -> tuple[dict, dict]:
        runtime_a = LineupRuntime(root=root / "replay_a", limits=self.limits)
        runtime_b = LineupRuntime(root=root / "replay_b", limits=self.limits)

        for action in self.actions:
            runtime_a.handle_action(ActionRequest(make_id("req"), action.action_type, action.payload))
            runtime_b.handle_action(ActionRequest(make_id("req"), action.action_type, action.payload))

        return self._fingerprint(runtime_a), self._fingerprint(runtime_b)

    def _fingerprint(self, runtime: LineupRuntime) -> dict:
        # Player ids from ASSIGN_PLAYER are random, so compare by display name.
        def names(players) -> list[str | None]:
            return [p.display_name if p is not None else None for p in players]

        states = []
        for state in runtime.roster_set():
            states.append(
                {
                    "name": state.name,
                    "court_size": state.court_size,
                    "minimum_protected": state.minimum_protected,
                    "court": names(state.occupants()),
                    "bench_a": names(state.bench_a.entries),
                    "bench_b": names(state.bench_b.entries),
                }
            )
        return {
            "halted": runtime.halted,
            "active_index": runtime.active_index,
            "events": runtime.event_bus.emitted_count(),
            "lineups": states,
        }
