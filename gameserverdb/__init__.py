"""SQLite storage for games, gameservers and their scheduled tasks."""

__version__ = "0.1.0"
__all__ = ["models", "schema", "games", "gameservers", "tasks", "manager"]