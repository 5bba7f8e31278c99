from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any, Sequence

from crs.contracts import RosterEvent, RosterState, ValidationError
from crs.core import PersistenceError, now_utc
from crs.persistence.migrations import MigrationRunner
from crs.roster.codec import state_from_dict, state_to_dict

logger = logging.getLogger(__name__)


class AuthoritativeStore:
    """SQLite-backed load/save collaborator for the roster set and its event log."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def initialize_schema(self) -> None:
        try:
            with self.connect() as conn:
                applied = MigrationRunner(conn).apply()
        except sqlite3.Error as exc:
            raise PersistenceError(f"schema initialization failed: {exc}") from exc
        if applied:
            logger.info("applied roster store migrations %s", applied)

    def load(self) -> list[RosterState] | None:
        """Return the decodable saved lineups, or None when nothing usable is stored.

        Undecodable rows are skipped, not deleted; ``save`` only ever rewrites the rows
        of the lineups it is given.
        """
        try:
            with self.connect() as conn:
                rows = conn.execute("SELECT lineup_id, state_json FROM roster_states ORDER BY ordinal, lineup_id").fetchall()
        except sqlite3.Error as exc:
            raise PersistenceError(f"roster load failed: {exc}") from exc

        states: list[RosterState] = []
        for lineup_id, state_json in rows:
            try:
                states.append(state_from_dict(json.loads(state_json)))
            except (json.JSONDecodeError, ValidationError) as exc:
                logger.warning("stored lineup %s is malformed (%s); skipping it", lineup_id, exc)
        return states or None

    def save(self, states: Sequence[RosterState]) -> None:
        saved_at = now_utc().isoformat()
        try:
            with self.connect() as conn:
                conn.executemany(
                    """
                    INSERT INTO roster_states(lineup_id, ordinal, state_json, saved_at)
                    VALUES (?, (SELECT COALESCE(MAX(ordinal), -1) + 1 FROM roster_states), ?, ?)
                    ON CONFLICT(lineup_id) DO UPDATE SET
                        state_json = excluded.state_json,
                        saved_at = excluded.saved_at
                    """,
                    [(state.lineup_id, json.dumps(state_to_dict(state)), saved_at) for state in states],
                )
        except sqlite3.Error as exc:
            raise PersistenceError(f"roster save failed: {exc}") from exc

    def load_active_lineup(self) -> str | None:
        try:
            with self.connect() as conn:
                row = conn.execute("SELECT value FROM roster_meta WHERE key = 'active_lineup'").fetchone()
        except sqlite3.Error as exc:
            raise PersistenceError(f"active lineup load failed: {exc}") from exc
        return row[0] if row else None

    def save_active_lineup(self, lineup_id: str) -> None:
        try:
            with self.connect() as conn:
                conn.execute(
                    "INSERT INTO roster_meta(key, value) VALUES ('active_lineup', ?) ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                    (lineup_id,),
                )
        except sqlite3.Error as exc:
            raise PersistenceError(f"active lineup save failed: {exc}") from exc

    def save_event(self, event: RosterEvent) -> None:
        created_at = event.created_at.isoformat()
        try:
            with self.connect() as conn:
                conn.execute(
                    """
                    INSERT INTO roster_events(event_id, lineup_id, event_type, summary, payload_json, created_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (event.event_id, event.lineup_id, event.event_type, event.summary, json.dumps(event.payload), created_at),
                )
                for move in event.payload.get("moves", []):
                    conn.execute(
                        """
                        INSERT INTO substitutions(
                            event_id, lineup_id, side, direction, player_in_id, player_out_id, blocked, created_at
                        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                        """,
                        (
                            event.event_id,
                            event.lineup_id,
                            move["side"],
                            event.payload["direction"],
                            move["incoming"],
                            move["outgoing"],
                            int(move["blocked"]),
                            created_at,
                        ),
                    )
                presence = [(pid, 1) for pid in event.payload.get("on_court", [])]
                presence += [(pid, 0) for pid in event.payload.get("on_bench", [])]
                conn.executemany(
                    "INSERT INTO court_presence(event_id, lineup_id, player_id, on_court) VALUES (?, ?, ?, ?)",
                    [(event.event_id, event.lineup_id, pid, flag) for pid, flag in presence],
                )
        except sqlite3.Error as exc:
            raise PersistenceError(f"event save failed: {exc}") from exc

    def list_events(self, lineup_id: str | None = None, limit: int = 50) -> list[dict[str, Any]]:
        query = "SELECT event_id, lineup_id, event_type, summary, payload_json, created_at FROM roster_events"
        params: tuple[Any, ...] = ()
        if lineup_id is not None:
            query += " WHERE lineup_id = ?"
            params = (lineup_id,)
        query += " ORDER BY created_at DESC, rowid DESC LIMIT ?"
        with self.connect() as conn:
            rows = conn.execute(query, params + (limit,)).fetchall()
        return [
            {
                "event_id": r[0],
                "lineup_id": r[1],
                "event_type": r[2],
                "summary": r[3],
                "payload": json.loads(r[4]),
                "created_at": r[5],
            }
            for r in rows
        ]
