from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Any

import duckdb

MART_TABLES = ("mart_roster_events", "mart_substitutions", "mart_player_minutes")


class AnalyticsStore:
    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def connect(self) -> duckdb.DuckDBPyConnection:
        return duckdb.connect(str(self.db_path))

    def initialize_schema(self) -> None:
        with self.connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS mart_roster_events (
                    event_id VARCHAR PRIMARY KEY,
                    lineup_id VARCHAR,
                    event_type VARCHAR,
                    summary VARCHAR,
                    created_at VARCHAR
                );

                CREATE TABLE IF NOT EXISTS mart_substitutions (
                    event_id VARCHAR,
                    lineup_id VARCHAR,
                    side VARCHAR,
                    direction VARCHAR,
                    player_in_id VARCHAR,
                    player_out_id VARCHAR,
                    blocked BOOLEAN,
                    created_at VARCHAR,
                    PRIMARY KEY(event_id, side)
                );

                CREATE TABLE IF NOT EXISTS mart_player_minutes (
                    lineup_id VARCHAR,
                    player_id VARCHAR,
                    rotations_on_court INTEGER,
                    rotations_on_bench INTEGER,
                    PRIMARY KEY(lineup_id, player_id)
                );
                """
            )

    def refresh_from_sqlite(self, sqlite_path: Path) -> dict[str, int]:
        self.initialize_schema()
        with sqlite3.connect(sqlite_path) as sconn, self.connect() as dconn:
            event_rows = sconn.execute(
                "SELECT event_id, lineup_id, event_type, summary, created_at FROM roster_events"
            ).fetchall()
            self._replace_rows(dconn, "mart_roster_events", event_rows)

            sub_rows = [
                (event_id, lineup_id, side, direction, player_in, player_out, bool(blocked), created_at)
                for event_id, lineup_id, side, direction, player_in, player_out, blocked, created_at in sconn.execute(
                    "SELECT event_id, lineup_id, side, direction, player_in_id, player_out_id, blocked, created_at FROM substitutions"
                ).fetchall()
            ]
            self._replace_rows(dconn, "mart_substitutions", sub_rows)

            minutes_rows = sconn.execute(
                """
                SELECT lineup_id,
                       player_id,
                       SUM(CASE WHEN on_court = 1 THEN 1 ELSE 0 END) AS rotations_on_court,
                       SUM(CASE WHEN on_court = 0 THEN 1 ELSE 0 END) AS rotations_on_bench
                FROM court_presence
                GROUP BY lineup_id, player_id
                """
            ).fetchall()
            self._replace_rows(dconn, "mart_player_minutes", minutes_rows)
        return {
            "mart_roster_events": len(event_rows),
            "mart_substitutions": len(sub_rows),
            "mart_player_minutes": len(minutes_rows),
        }

    def player_minutes(self, lineup_id: str) -> list[tuple[str, int, int]]:
        with self.connect() as conn:
            return conn.execute(
                """
                SELECT player_id, rotations_on_court, rotations_on_bench
                FROM mart_player_minutes
                WHERE lineup_id = ?
                ORDER BY rotations_on_court DESC, player_id
                """,
                [lineup_id],
            ).fetchall()

    def _replace_rows(self, conn: Any, table: str, rows: list[tuple]) -> None:
        conn.execute(f"DELETE FROM {table}")
        if not rows:
            return
        values_placeholder = ",".join(["?"] * len(rows[0]))
        conn.executemany(f"INSERT INTO {table} VALUES ({values_placeholder})", rows)
