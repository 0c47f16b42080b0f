"""Storage of game templates."""

from __future__ import annotations

import json
import sqlite3

from .models import ConfigVar, DatabaseError, Game, PortMapping

_COLUMNS = (
    "id, name, slug, image, port_mappings, config_vars, "
    "min_memory_mb, rec_memory_mb, created_at, updated_at"
)


def _scan_game(row: sqlite3.Row) -> Game:
    try:
        port_mappings = [PortMapping.from_dict(item) for item in json.loads(row["port_mappings"]) or []]
    except (ValueError, TypeError, AttributeError) as exc:
        raise DatabaseError("scan_game", "failed to unmarshal port mappings", exc) from exc
    try:
        config_vars = [ConfigVar.from_dict(item) for item in json.loads(row["config_vars"]) or []]
    except (ValueError, TypeError, AttributeError) as exc:
        raise DatabaseError("scan_game", "failed to unmarshal config vars", exc) from exc

    return Game(
        id=row["id"],
        name=row["name"],
        slug=row["slug"] or "",
        image=row["image"],
        port_mappings=port_mappings,
        config_vars=config_vars,
        min_memory_mb=row["min_memory_mb"],
        rec_memory_mb=row["rec_memory_mb"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class GameRepository:
    """Create, read, update and delete games in the ``games`` table."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def create_game(self, game: Game) -> None:
        try:
            self._conn.execute(
                f"INSERT INTO games ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
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

    def get_game(self, game_id: str) -> Game:
        try:
            row = self._conn.execute(
                f"SELECT {_COLUMNS} FROM games WHERE id = ?", (game_id,)
            ).fetchone()
        except sqlite3.Error as exc:
            raise DatabaseError("get_game", f"failed to query game {game_id}", exc) from exc
        if row is None:
            raise DatabaseError("get_game", f"game {game_id} not found")
        return _scan_game(row)

    def list_games(self) -> list[Game]:
        try:
            rows = self._conn.execute(f"SELECT {_COLUMNS} FROM games ORDER BY name").fetchall()
        except sqlite3.Error as exc:
            raise DatabaseError("list_games", "failed to query games", exc) from exc
        games = []
        for row in rows:
            try:
                games.append(_scan_game(row))
            except DatabaseError as exc:
                raise DatabaseError("list_games", "failed to scan game", exc) from exc
        return games

    def update_game(self, game: Game) -> None:
        try:
            self._conn.execute(
                "UPDATE games SET name = ?, slug = ?, image = ?, port_mappings = ?, "
                "config_vars = ?, updated_at = ? WHERE id = ?",
                (
                    game.name,
                    game.slug,
                    game.image,
                    json.dumps([pm.to_dict() for pm in game.port_mappings]),
                    json.dumps([cv.to_dict() for cv in game.config_vars]),
                    game.updated_at,
                    game.id,
                ),
            )
        except sqlite3.Error as exc:
            raise DatabaseError("update_game", f"failed to update game {game.id}", exc) from exc

    def delete_game(self, game_id: str) -> None:
        try:
            self._conn.execute("DELETE FROM games WHERE id = ?", (game_id,))
        except sqlite3.Error as exc:
            raise DatabaseError("delete_game", f"failed to delete game {game_id}", exc) from exc