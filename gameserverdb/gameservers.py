"""Storage of gameserver instances."""

from __future__ import annotations

import json
import sqlite3
from datetime import datetime
from typing import Any, Optional

from .models import DatabaseError, Gameserver, GameserverStatus, PortMapping

_COLUMNS = (
    "id, name, game_id, container_id, status, port_mappings, memory_mb, cpu_cores, "
    "max_backups, environment, volumes, created_at, updated_at"
)


def _load_list(raw: Optional[str]) -> list[Any]:
    """Decode a JSON array, treating anything unreadable as empty."""
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except ValueError:
        return []
    return value if isinstance(value, list) else []


def _scan_gameserver(row: sqlite3.Row) -> Gameserver:
    return Gameserver(
        id=row["id"],
        name=row["name"],
        game_id=row["game_id"],
        container_id=row["container_id"] or "",
        status=GameserverStatus(row["status"]),
        port_mappings=[
            PortMapping.from_dict(item)
            for item in _load_list(row["port_mappings"])
            if isinstance(item, dict)
        ],
        memory_mb=row["memory_mb"] or 0,
        cpu_cores=float(row["cpu_cores"] or 0),
        max_backups=row["max_backups"] or 0,
        environment=[str(item) for item in _load_list(row["environment"])],
        volumes=[str(item) for item in _load_list(row["volumes"])],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _encoded(server: Gameserver) -> tuple[str, str, str]:
    return (
        json.dumps(list(server.environment)),
        json.dumps(list(server.volumes)),
        json.dumps([pm.to_dict() for pm in server.port_mappings]),
    )


class GameserverRepository:
    """Create, read, update and delete gameservers in the ``gameservers`` table."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def create_gameserver(self, server: Gameserver) -> None:
        env_json, volumes_json, ports_json = _encoded(server)
        try:
            self._conn.execute(
                f"INSERT INTO gameservers ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    server.id,
                    server.name,
                    server.game_id,
                    server.container_id,
                    GameserverStatus(server.status).value,
                    ports_json,
                    server.memory_mb,
                    server.cpu_cores,
                    server.max_backups,
                    env_json,
                    volumes_json,
                    server.created_at,
                    server.updated_at,
                ),
            )
        except sqlite3.Error as exc:
            raise DatabaseError(
                "create_gameserver", f"failed to insert gameserver {server.name}", exc
            ) from exc

    def _fetch_one(self, op: str, where: str, value: str, missing: str, failed: str) -> Gameserver:
        try:
            row = self._conn.execute(
                f"SELECT {_COLUMNS} FROM gameservers WHERE {where} = ?", (value,)
            ).fetchone()
            if row is None:
                raise DatabaseError(op, missing)
            return _scan_gameserver(row)
        except (sqlite3.Error, ValueError) as exc:
            raise DatabaseError(op, failed, exc) from exc

    def get_gameserver(self, server_id: str) -> Gameserver:
        return self._fetch_one(
            "get_gameserver",
            "id",
            server_id,
            f"gameserver {server_id} not found",
            f"failed to query gameserver {server_id}",
        )

    def update_gameserver(self, server: Gameserver) -> None:
        """Store ``server``, stamping its ``updated_at`` with the current time."""
        env_json, volumes_json, ports_json = _encoded(server)
        server.updated_at = datetime.now()
        try:
            cursor = self._conn.execute(
                "UPDATE gameservers SET name = ?, game_id = ?, container_id = ?, status = ?, "
                "port_mappings = ?, memory_mb = ?, cpu_cores = ?, max_backups = ?, "
                "environment = ?, volumes = ?, updated_at = ? WHERE id = ?",
                (
                    server.name,
                    server.game_id,
                    server.container_id,
                    GameserverStatus(server.status).value,
                    ports_json,
                    server.memory_mb,
                    server.cpu_cores,
                    server.max_backups,
                    env_json,
                    volumes_json,
                    server.updated_at,
                    server.id,
                ),
            )
        except sqlite3.Error as exc:
            raise DatabaseError(
                "update_gameserver", f"failed to update gameserver {server.id}", exc
            ) from exc
        if cursor.rowcount == 0:
            raise DatabaseError("update_gameserver", f"gameserver {server.id} not found")

    def delete_gameserver(self, server_id: str) -> None:
        try:
            cursor = self._conn.execute("DELETE FROM gameservers WHERE id = ?", (server_id,))
        except sqlite3.Error as exc:
            raise DatabaseError(
                "delete_gameserver", f"failed to delete gameserver {server_id}", exc
            ) from exc
        if cursor.rowcount == 0:
            raise DatabaseError("delete_gameserver", f"gameserver {server_id} not found")

    def list_gameservers(self) -> list[Gameserver]:
        """Return all gameservers, newest first."""
        try:
            rows = self._conn.execute(
                f"SELECT {_COLUMNS} FROM gameservers ORDER BY created_at DESC"
            ).fetchall()
        except sqlite3.Error as exc:
            raise DatabaseError("list_gameservers", "failed to query gameservers", exc) from exc
        servers = []
        for row in rows:
            try:
                servers.append(_scan_gameserver(row))
            except ValueError as exc:
                raise DatabaseError(
                    "list_gameservers", "failed to scan gameserver row", exc
                ) from exc
        return servers

    def get_gameserver_by_container_id(self, container_id: str) -> Gameserver:
        return self._fetch_one(
            "get_gameserver_by_container",
            "container_id",
            container_id,
            f"gameserver with container {container_id} not found",
            f"failed to query gameserver by container {container_id}",
        )