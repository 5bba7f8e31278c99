from __future__ import annotations

import logging
from pathlib import Path

from crs.persistence.duckdb_store import AnalyticsStore

logger = logging.getLogger(__name__)


def refresh_analytics(sqlite_path: Path, duckdb_path: Path) -> dict[str, int]:
    counts = AnalyticsStore(duckdb_path).refresh_from_sqlite(sqlite_path)
    logger.info("analytics refreshed: %s", ", ".join(f"{k}={v}" for k, v in counts.items()))
    return counts
