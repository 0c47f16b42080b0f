"""The database manager: one SQLite connection serving games, gameservers and tasks."""

from __future__ import annotations

import logging
import sqlite3
from types import TracebackType
from typing import Optional

from .games import GameRepository
from .gameservers import GameserverRepository
from .schema import connect, migrate, seed_games
from .tasks import TaskRepository

log = logging.getLogger(__name__)


class DatabaseManager(GameRepository, GameserverRepository, TaskRepository):
    """Open, migrate and seed a SQLite database and expose its repositories.

    Games, gameservers and scheduled tasks are all reached through this one
    object, which shares a single connection between them.
    """

    def __init__(self, db_path: str) -> None:
        conn = connect(db_path)
        try:
            migrate(conn)
        except Exception:
            log.error("database migration failed")
            conn.close()
            raise
        try:
            seed_games(conn)
        except Exception:
            log.error("failed to seed games")
            conn.close()
            raise
        super().__init__(conn)
        self.db_path = db_path
        log.info("database connected and migrated successfully")

    @property
    def connection(self) -> sqlite3.Connection:
        """The underlying SQLite connection."""
        return self._conn

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    def __enter__(self) -> "DatabaseManager":
        return self

    def __exit__(
        self,
        *args: Optional[BaseException | type[BaseException] | TracebackType],
    ) -> None:
        self.close()