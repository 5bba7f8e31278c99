from __future__ import annotations

from crs.contracts import RosterState, Side, ValidationError, ValidationIssue, ValidationResult
from crs.core import RosterLimits


class RosterValidator:
    def __init__(self, limits: RosterLimits) -> None:
        self._limits = limits

    def validate(self, state: RosterState) -> ValidationResult:
        issues: list[ValidationIssue] = []
        issues.extend(self._validate_court(state))
        issues.extend(self._validate_benches(state))
        issues.extend(self._validate_uniqueness(state))
        issues.extend(self._validate_quota(state))
        return self._finalize(issues)

    def _finalize(self, issues: list[ValidationIssue]) -> ValidationResult:
        ordered = sorted(issues, key=lambda x: (x.severity, x.code, x.entity_id, x.field_path))
        blocking = [i for i in ordered if i.severity == "blocking"]
        if blocking:
            raise ValidationError(blocking)
        return ValidationResult(ok=True, issues=ordered)

    def _validate_court(self, state: RosterState) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []
        if not self._limits.court_size_allowed(state.court_size):
            issues.append(
                ValidationIssue(
                    code="COURT_SIZE_OUT_OF_BOUNDS",
                    severity="blocking",
                    field_path="court_size",
                    entity_id=state.lineup_id,
                    message=f"court size {state.court_size} outside {self._limits.min_court_size}..{self._limits.max_court_size}",
                )
            )
        if len(state.court_slots) != state.court_size:
            issues.append(
                ValidationIssue(
                    code="COURT_SLOT_COUNT_MISMATCH",
                    severity="blocking",
                    field_path="court_slots",
                    entity_id=state.lineup_id,
                    message=f"{len(state.court_slots)} court slots for court size {state.court_size}",
                )
            )
        for idx, slot in enumerate(state.court_slots):
            if slot.position != idx:
                issues.append(
                    ValidationIssue(
                        code="COURT_SLOT_POSITION_MISMATCH",
                        severity="blocking",
                        field_path=f"court_slots[{idx}].position",
                        entity_id=state.lineup_id,
                        message=f"slot at index {idx} reports position {slot.position}",
                    )
                )
        if not 0 <= state.minimum_protected <= state.court_size:
            issues.append(
                ValidationIssue(
                    code="MINIMUM_OUT_OF_RANGE",
                    severity="blocking",
                    field_path="minimum_protected",
                    entity_id=state.lineup_id,
                    message=f"minimum protected {state.minimum_protected} outside 0..{state.court_size}",
                )
            )
        return issues

    def _validate_benches(self, state: RosterState) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []
        for side in Side:
            queue = state.bench(side)
            path = f"bench_{side.value.lower()}"
            if queue.side != side:
                issues.append(
                    ValidationIssue("BENCH_SIDE_MISMATCH", "blocking", f"{path}.side", state.lineup_id, f"bench {side.value} labelled {queue.side}")
                )
            if len(queue.entries) > queue.capacity:
                issues.append(
                    ValidationIssue(
                        "BENCH_OVER_CAPACITY",
                        "blocking",
                        f"{path}.entries",
                        state.lineup_id,
                        f"bench {side.value} holds {len(queue.entries)} of {queue.capacity}",
                    )
                )
            if any(entry is None for entry in queue.entries):
                issues.append(
                    ValidationIssue("BENCH_GAP", "blocking", f"{path}.entries", state.lineup_id, f"bench {side.value} contains an empty placeholder")
                )
        return issues

    def _validate_uniqueness(self, state: RosterState) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []
        seen: set[str] = set()
        for player in state.all_players():
            if player is None:
                continue
            if player.player_id in seen:
                issues.append(
                    ValidationIssue(
                        code="DUPLICATE_PLAYER",
                        severity="blocking",
                        field_path="players",
                        entity_id=player.player_id,
                        message=f"player {player.display_name} occupies more than one slot",
                    )
                )
            seen.add(player.player_id)
        return issues

    def _validate_quota(self, state: RosterState) -> list[ValidationIssue]:
        on_court = state.protected_on_court()
        if on_court >= state.minimum_protected:
            return []
        return [
            ValidationIssue(
                code="PROTECTED_QUOTA_UNMET",
                severity="warning",
                field_path="court_slots",
                entity_id=state.lineup_id,
                message=f"{on_court} protected on court, {state.minimum_protected} required",
            )
        ]
