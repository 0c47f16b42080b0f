"""Connection setup, schema migration and seed data for the SQLite store."""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime
from typing import Optional

from .models import ConfigVar, DatabaseError, Game, PortMapping

log = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS games (
    id TEXT PRIMARY KEY, name TEXT NOT NULL UNIQUE, slug TEXT NOT NULL DEFAULT '', image TEXT NOT NULL,
    port_mappings TEXT NOT NULL, config_vars TEXT NOT NULL DEFAULT '[]',
    min_memory_mb INTEGER NOT NULL DEFAULT 512, rec_memory_mb INTEGER NOT NULL DEFAULT 2048,
    created_at DATETIME NOT NULL, updated_at DATETIME NOT NULL
);
CREATE TABLE IF NOT EXISTS gameservers (
    id TEXT PRIMARY KEY, name TEXT NOT NULL UNIQUE, game_id TEXT NOT NULL,
    container_id TEXT, status TEXT NOT NULL DEFAULT 'stopped',
    port_mappings TEXT NOT NULL,
    memory_mb INTEGER NOT NULL DEFAULT 1024, cpu_cores REAL NOT NULL DEFAULT 0,
    environment TEXT, volumes TEXT, created_at DATETIME NOT NULL, updated_at DATETIME NOT NULL,
    FOREIGN KEY (game_id) REFERENCES games(id)
);
CREATE TABLE IF NOT EXISTS scheduled_tasks (
    id TEXT PRIMARY KEY, gameserver_id TEXT NOT NULL, name TEXT NOT NULL,
    type TEXT NOT NULL, status TEXT NOT NULL DEFAULT 'active', cron_schedule TEXT NOT NULL,
    created_at DATETIME NOT NULL, updated_at DATETIME NOT NULL,
    last_run DATETIME, next_run DATETIME,
    FOREIGN KEY (gameserver_id) REFERENCES gameservers(id) ON DELETE CASCADE
);
CREATE INDEX IF NOT EXISTS idx_gameservers_status ON gameservers(status);
CREATE INDEX IF NOT EXISTS idx_gameservers_game_id ON gameservers(game_id);
CREATE INDEX IF NOT EXISTS idx_scheduled_tasks_gameserver_id ON scheduled_tasks(gameserver_id);
CREATE INDEX IF NOT EXISTS idx_scheduled_tasks_status ON scheduled_tasks(status);
"""

# Columns added after the first schema; applied to older databases.
_ALTER_QUERIES = (
    "ALTER TABLE gameservers ADD COLUMN memory_mb INTEGER DEFAULT 1024",
    "ALTER TABLE gameservers ADD COLUMN cpu_cores REAL DEFAULT 0",
    "ALTER TABLE gameservers ADD COLUMN max_backups INTEGER DEFAULT 7",
    "ALTER TABLE games ADD COLUMN port_mappings TEXT DEFAULT '[]'",
    "ALTER TABLE gameservers ADD COLUMN port_mappings TEXT DEFAULT '[]'",
    "ALTER TABLE games ADD COLUMN slug TEXT DEFAULT ''",
)

IMAGE_REGISTRY = "registry.example.com/gameservers/"


def _adapt_datetime(value: datetime) -> str:
    return value.isoformat(" ")


def _convert_datetime(raw: bytes) -> datetime:
    return datetime.fromisoformat(raw.decode())


sqlite3.register_adapter(datetime, _adapt_datetime)
sqlite3.register_converter("DATETIME", _convert_datetime)


def connect(db_path: str) -> sqlite3.Connection:
    """Open the database in autocommit mode with foreign keys enforced."""
    log.info("connecting to database %s", db_path)
    try:
        conn = sqlite3.connect(
            db_path, detect_types=sqlite3.PARSE_DECLTYPES, isolation_level=None
        )
    except sqlite3.Error as exc:
        log.error("failed to open database %s: %s", db_path, exc)
        raise DatabaseError("db", "failed to open database", exc) from exc

    for statement, message in (
        ("SELECT 1", "failed to ping database"),
        ("PRAGMA foreign_keys = ON", "failed to enable foreign key constraints"),
    ):
        try:
            conn.execute(statement)
        except sqlite3.Error as exc:
            conn.close()
            log.error("%s: %s", message, exc)
            raise DatabaseError("db", message, exc) from exc

    conn.row_factory = sqlite3.Row
    return conn


def migrate(conn: sqlite3.Connection) -> None:
    """Create the schema and add any columns an older database lacks."""
    try:
        conn.executescript(_SCHEMA)
    except sqlite3.Error as exc:
        raise DatabaseError("db", "failed to create schema", exc) from exc

    for query in _ALTER_QUERIES:
        try:
            conn.execute(query)
        except sqlite3.Error as exc:
            if "duplicate column name" not in str(exc):
                log.warning("failed to add column, may already exist (%s): %s", query, exc)


def _game(
    game_id: str,
    name: str,
    slug: str,
    ports: list[tuple[str, str, int]],
    config_vars: list[ConfigVar],
    min_memory_mb: int,
    rec_memory_mb: int,
    now: datetime,
) -> Game:
    return Game(
        id=game_id,
        name=name,
        slug=slug,
        image=f"{IMAGE_REGISTRY}{game_id}:latest",
        port_mappings=[
            PortMapping(name=port_name, protocol=protocol, container_port=port, host_port=0)
            for port_name, protocol, port in ports
        ],
        config_vars=config_vars,
        min_memory_mb=min_memory_mb,
        rec_memory_mb=rec_memory_mb,
        created_at=now,
        updated_at=now,
    )


def default_games(now: Optional[datetime] = None) -> list[Game]:
    """Return the built-in game templates, stamped with ``now``."""
    now = now or datetime.now()
    join_hint = "Password to join server (leave empty for public)"
    return [
        _game(
            "minecraft", "Minecraft", "minecraft",
            [("game", "tcp", 25565)],
            [
                ConfigVar("MINECRAFT_VERSION", "Minecraft Version", False, "latest",
                          "Server version (latest recommended, or specific version like 1.21.6 for mod compatibility)"),
                ConfigVar("EULA", "Accept Minecraft EULA", True, "true",
                          "You must accept the Minecraft End User License Agreement to run a server"),
                ConfigVar("SERVER_NAME", "Server Name", False, "A Minecraft Server",
                          "The name shown in server lists"),
                ConfigVar("MOTD", "Message of the Day", False, "Welcome to our server!",
                          "Message shown to players when joining"),
                ConfigVar("DIFFICULTY", "Difficulty", False, "normal",
                          "Game difficulty (peaceful, easy, normal, hard)"),
                ConfigVar("GAMEMODE", "Game Mode", False, "survival",
                          "Default game mode (survival, creative, adventure, spectator)"),
            ],
            1024, 3072, now,
        ),
        _game(
            "cs2", "Counter-Strike 2", "counter-strike-2",
            [("game", "tcp", 27015), ("game", "udp", 27015)],
            [
                ConfigVar("HOSTNAME", "Server Name", False, "CS2 Server", "Server hostname shown in browser"),
                ConfigVar("RCON_PASSWORD", "RCON Password", True, "",
                          "Password for remote console access (required)"),
                ConfigVar("SERVER_PASSWORD", "Server Password", False, "", join_hint),
                ConfigVar("MAXPLAYERS", "Max Players", False, "10", "Maximum number of players"),
            ],
            2048, 4096, now,
        ),
        _game(
            "valheim", "Valheim", "valheim",
            [("game", "udp", 2456), ("query", "udp", 2457)],
            [
                ConfigVar("SERVER_NAME", "Server Name", True, "My Valheim Server",
                          "The name of your Valheim server"),
                ConfigVar("WORLD_NAME", "World Name", True, "Dedicated",
                          "The name of the world to create/load"),
                ConfigVar("SERVER_PASSWORD", "Server Password", False, "", join_hint),
                ConfigVar("PUBLIC", "Public Server", False, "true", "Whether to list server publicly"),
            ],
            2048, 4096, now,
        ),
        _game(
            "terraria", "Terraria", "terraria",
            [("game", "tcp", 7777)],
            [
                ConfigVar("WORLD_NAME", "World Name", False, "World", "The name of the Terraria world"),
                ConfigVar("MAX_PLAYERS", "Max Players", False, "8", "Maximum number of players"),
                ConfigVar("SERVER_PASSWORD", "Server Password", False, "", join_hint),
                ConfigVar("DIFFICULTY", "Difficulty", False, "1",
                          "World difficulty (0=Classic, 1=Expert, 2=Master)"),
            ],
            1024, 2048, now,
        ),
        _game(
            "garrysmod", "Garry's Mod", "garrys-mod",
            [("game", "tcp", 27015), ("game", "udp", 27015)],
            [
                ConfigVar("HOSTNAME", "Server Name", False, "Garry's Mod Server",
                          "Server hostname shown in browser"),
                ConfigVar("GAMEMODE", "Game Mode", False, "sandbox",
                          "Game mode to run (sandbox, darkrp, etc.)"),
                ConfigVar("MAP", "Starting Map", False, "gm_flatgrass", "The map to load on server start"),
                ConfigVar("MAXPLAYERS", "Max Players", False, "16", "Maximum number of players"),
                ConfigVar("SERVER_PASSWORD", "Server Password", False, "", join_hint),
            ],
            2048, 4096, now,
        ),
        _game(
            "palworld", "Palworld", "palworld",
            [("game", "udp", 8211)],
            [
                ConfigVar("SERVER_NAME", "Server Name", False, "Palworld Server",
                          "The name of your Palworld server"),
                ConfigVar("MAX_PLAYERS", "Max Players", False, "32", "Maximum number of players"),
                ConfigVar("SERVER_PASSWORD", "Server Password", False, "", join_hint),
                ConfigVar("ADMIN_PASSWORD", "Admin Password", False, "", "Password for admin access"),
            ],
            8192, 16384, now,
        ),
    ]


def _insert_game(conn: sqlite3.Connection, game: Game) -> None:
    try:
        conn.execute(
            "INSERT INTO games (id, name, slug, image, port_mappings, config_vars, min_memory_mb, "
            "rec_memory_mb, created_at, updated_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                game.id,
                game.name,
                game.slug,
                game.image,
                json.dumps([pm.to_dict() for pm in game.port_mappings]),
                json.dumps([cv.to_dict() for cv in game.config_vars]),
                game.min_memory_mb,
                game.rec_memory_mb,
                game.created_at,
                game.updated_at,
            ),
        )
    except sqlite3.Error as exc:
        raise DatabaseError("create_game", f"failed to insert game {game.name}", exc) from exc


def seed_games(conn: sqlite3.Connection) -> int:
    """Insert the default games into an empty games table; return how many were added."""
    (count,) = conn.execute("SELECT COUNT(*) FROM games").fetchone()
    if count > 0:
        return 0

    games = default_games(datetime.now())
    for game in games:
        try:
            _insert_game(conn, game)
        except DatabaseError:
            log.error("failed to seed game %s", game.id)
            raise
    log.info("seeded %d games", len(games))
    return len(games)