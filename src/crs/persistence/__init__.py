from .duckdb_store import MART_TABLES, AnalyticsStore
from .etl import refresh_analytics
from .migrations import MigrationRunner
from .sqlite_store import AuthoritativeStore

__all__ = [
    "AnalyticsStore",
    "AuthoritativeStore",
    "MART_TABLES",
    "MigrationRunner",
    "refresh_analytics",
]
