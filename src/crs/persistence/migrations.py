from __future__ import annotations

import sqlite3

MIGRATIONS: list[tuple[int, str]] = [
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS roster_states (
            lineup_id TEXT PRIMARY KEY,
            ordinal INTEGER NOT NULL,
            state_json TEXT NOT NULL,
            saved_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS roster_events (
            event_id TEXT PRIMARY KEY,
            lineup_id TEXT NOT NULL,
            event_type TEXT NOT NULL,
            summary TEXT NOT NULL,
            payload_json TEXT NOT NULL,
            created_at TEXT NOT NULL
        );

        CREATE INDEX IF NOT EXISTS idx_roster_events_lineup ON roster_events(lineup_id, created_at);
        """,
    ),
    (
        2,
        """
        CREATE TABLE IF NOT EXISTS substitutions (
            event_id TEXT NOT NULL,
            lineup_id TEXT NOT NULL,
            side TEXT NOT NULL,
            direction TEXT NOT NULL,
            player_in_id TEXT,
            player_out_id TEXT,
            blocked INTEGER NOT NULL,
            created_at TEXT NOT NULL,
            PRIMARY KEY (event_id, side),
            FOREIGN KEY (event_id) REFERENCES roster_events(event_id) ON DELETE CASCADE
        );

        CREATE TABLE IF NOT EXISTS court_presence (
            event_id TEXT NOT NULL,
            lineup_id TEXT NOT NULL,
            player_id TEXT NOT NULL,
            on_court INTEGER NOT NULL,
            PRIMARY KEY (event_id, player_id),
            FOREIGN KEY (event_id) REFERENCES roster_events(event_id) ON DELETE CASCADE
        );
        """,
    ),
    (
        3,
        """
        CREATE TABLE IF NOT EXISTS roster_meta (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL
        );
        """,
    ),
]


class MigrationRunner:
    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def apply(self) -> list[int]:
        self.conn.execute("CREATE TABLE IF NOT EXISTS schema_migrations (version INTEGER PRIMARY KEY, applied_at TEXT DEFAULT CURRENT_TIMESTAMP)")
        applied = {
            row[0]
            for row in self.conn.execute("SELECT version FROM schema_migrations").fetchall()
        }
        newly_applied: list[int] = []
        for version, sql in MIGRATIONS:
            if version in applied:
                continue
            self.conn.executescript(sql)
            self.conn.execute("INSERT INTO schema_migrations(version) VALUES (?)", (version,))
            newly_applied.append(version)
        self.conn.commit()
        return newly_applied
