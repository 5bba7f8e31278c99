from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from crs.contracts import ActionRequest, ActionResult, ActionType
from crs.core import make_id, resolve_limits
from crs.session import LineupRuntime


def _print_state(state: dict) -> None:
    layout = state["layout"]
    print(f"{state['name']} [{state['lineup_id']}] court={state['court_size']} grid={layout['rows']}x{layout['cols']}")
    print(f"protected on court: {state['protected_on_court']} / minimum {state['minimum_protected']}" + ("" if state["quota_met"] else "  (below minimum)"))
    cols = layout["cols"]
    court = state["court"]
    for start in range(0, len(court), cols):
        row = court[start : start + cols]
        print("  " + " | ".join(_cell(slot["player"]) for slot in row))
    for side in ("a", "b"):
        entries = ", ".join(_cell(p) for p in state[f"bench_{side}"]) or "-"
        print(f"bench {side.upper()} ({len(state[f'bench_{side}'])}/{state['bench_capacity']}): {entries}")


def _cell(player: dict | None) -> str:
    if player is None:
        return "(empty)"
    mark = "*" if player["protected"] else ""
    role = f" {player['role_abbrev']}" if player["role_abbrev"] else ""
    return f"{player['display_name']}{mark}{role}"


def _slot(raw: str) -> dict:
    # court:3 or bench:A:1
    parts = raw.split(":")
    if parts[0] == "court" and len(parts) == 2:
        return {"kind": "court", "index": int(parts[1])}
    if parts[0] == "bench" and len(parts) == 3:
        return {"kind": "bench", "side": parts[1], "index": int(parts[2])}
    raise argparse.ArgumentTypeError(f"slot must look like court:N or bench:A:N, got '{raw}'")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Court Rotation: lineup rotation with a protected-player quota")
    parser.add_argument("--root", type=Path, default=Path.cwd(), help="runtime root directory")
    parser.add_argument("--profile", default="standard", help="court size limits profile (standard, recreational, extended)")
    parser.add_argument("--lineup", default=None, help="lineup id to make active; the choice is remembered for later runs")
    parser.add_argument("--log-level", default="WARNING", help="logging level")

    sub = parser.add_subparsers(dest="command")
    sub.add_parser("show", help="print the active lineup")
    sub.add_parser("lineups", help="list lineups in the roster set")

    rotate = sub.add_parser("rotate", help="rotate the active lineup")
    rotate.add_argument("--backward", action="store_true")
    rotate.add_argument("--times", type=int, default=1)

    resize = sub.add_parser("resize", help="change the active court size")
    resize.add_argument("size", type=int)

    minimum = sub.add_parser("min", help="set the minimum protected count")
    minimum.add_argument("minimum", type=int)

    assign = sub.add_parser("assign", help="save a player into a slot")
    assign.add_argument("slot", type=_slot)
    assign.add_argument("name")
    assign.add_argument("--protected", action="store_true")
    assign.add_argument("--role", default=None)

    remove = sub.add_parser("remove", help="clear a slot")
    remove.add_argument("slot", type=_slot)

    swap = sub.add_parser("swap", help="exchange two slots")
    swap.add_argument("first", type=_slot)
    swap.add_argument("second", type=_slot)
    swap.add_argument("--check", action="store_true", help="only report whether the swap is allowed")

    sub.add_parser("reset", help="clear every slot of the active lineup")

    demo = sub.add_parser("demo", help="create a populated demo lineup and make it active")
    demo.add_argument("--name", default="Demo")

    sub.add_parser("history", help="print recent roster events")
    sub.add_parser("export", help="refresh analytics and export CSV/Parquet datasets")
    return parser


def _run(runtime: LineupRuntime, action: ActionType, payload: dict | None = None) -> ActionResult:
    result = runtime.handle_action(ActionRequest(make_id("req"), action, payload or {}))
    if not result.success:
        code = result.data.get("code")
        print(f"rejected: {result.message}" + (f" [{code}]" if code else ""))
    return result


def main() -> None:
    parser = _build_parser()
    args = parser.parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    runtime = LineupRuntime(root=args.root, limits=resolve_limits(args.profile))
    if args.lineup:
        if not _run(runtime, ActionType.SELECT_LINEUP, {"lineup_id": args.lineup}).success:
            return

    command = args.command or "show"
    result: ActionResult | None = None

    if command == "show":
        result = _run(runtime, ActionType.GET_STATE)
    elif command == "lineups":
        listed = _run(runtime, ActionType.LIST_LINEUPS)
        for row in listed.data.get("lineups", []):
            print(f"{'*' if row['active'] else ' '} {row['lineup_id']}: {row['name']}")
        for lineup_id in listed.data.get("held", []):
            print(f"  {lineup_id}: stored, not usable with profile {args.profile}")
        return
    elif command == "rotate":
        direction = "backward" if args.backward else "forward"
        for _ in range(args.times):
            result = _run(runtime, ActionType.ROTATE, {"direction": direction})
            rotation = result.data.get("rotation", {})
            if rotation.get("blocked_sides"):
                print(f"blocked exits: {', '.join(rotation['blocked_sides'])}")
            if rotation.get("quota_shortfall"):
                shortfall = rotation["quota_shortfall"]
                print(f"warning: {shortfall['achieved']} protected on court, {shortfall['required']} required")
    elif command == "resize":
        result = _run(runtime, ActionType.SET_COURT_SIZE, {"size": args.size})
        for player_id in result.data.get("dropped", []):
            print(f"dropped (no bench space): {player_id}")
    elif command == "min":
        result = _run(runtime, ActionType.SET_MIN_PROTECTED, {"minimum": args.minimum})
    elif command == "assign":
        result = _run(
            runtime,
            ActionType.ASSIGN_PLAYER,
            {"slot": args.slot, "display_name": args.name, "protected": args.protected, "role": args.role},
        )
    elif command == "remove":
        result = _run(runtime, ActionType.REMOVE_PLAYER, {"slot": args.slot})
    elif command == "swap":
        action = ActionType.CHECK_SWAP if args.check else ActionType.PROPOSE_SWAP
        result = _run(runtime, action, {"first": args.first, "second": args.second})
        if args.check and result.success:
            print(f"allowed: {result.message}")
            return
    elif command == "reset":
        result = _run(runtime, ActionType.RESET_LINEUP)
    elif command == "demo":
        result = _run(runtime, ActionType.CREATE_LINEUP, {"name": args.name, "demo": True})
    elif command == "history":
        for event in runtime.store.list_events(runtime.active.lineup_id):
            print(f"{event['created_at']} {event['event_type']}: {event['summary']}")
        return
    elif command == "export":
        outputs = runtime.export()
        print("Exported datasets:")
        for p in outputs:
            print(f"- {p}")
        return

    if runtime.last_persistence_error:
        print(f"warning: changes not saved ({runtime.last_persistence_error})")
    if result is not None and "state" in result.data:
        _print_state(result.data["state"])
    elif result is not None and result.success:
        print(json.dumps(result.data, indent=2, default=str))


if __name__ == "__main__":
    main()
