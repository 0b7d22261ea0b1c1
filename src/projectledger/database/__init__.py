"""Database layer for projectledger."""

from projectledger.database.base import Database
from projectledger.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
