from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any

from crs.contracts import ForensicArtifact
from crs.core.ids import make_id, now_utc


class InvalidOperationError(ValueError):
    """Raised before any mutation when an operation cannot be applied."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(f"{code}: {message}")
        self.code = code
        self.message = message


class PersistenceError(RuntimeError):
    """The load/save collaborator failed; in-memory state stays authoritative."""


class EngineIntegrityError(RuntimeError):
    def __init__(self, artifact: ForensicArtifact) -> None:
        super().__init__(artifact.message)
        self.artifact = artifact


def build_forensic_artifact(
    error_code: str,
    message: str,
    *,
    state_snapshot: dict[str, Any],
    action: str,
    payload: dict[str, Any],
    lineup_id: str,
    request_id: str,
    causal_fragment: list[str],
) -> ForensicArtifact:
    return ForensicArtifact(
        artifact_id=make_id("forensic"),
        timestamp=now_utc(),
        engine_scope="lineup_runtime",
        error_code=error_code,
        message=message,
        state_snapshot=state_snapshot,
        context={"action": action, "payload": payload},
        identifiers={"lineup_id": lineup_id, "request_id": request_id},
        causal_fragment=causal_fragment,
    )


def persist_forensic_artifact(artifact: ForensicArtifact, output_dir: Path) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / f"{artifact.artifact_id}.json"
    path.write_text(json.dumps(asdict(artifact), default=str, indent=2), encoding="utf-8")
    return path
