"""Storage of scheduled tasks."""

from __future__ import annotations

import sqlite3

from .models import DatabaseError, ScheduledTask, TaskStatus, TaskType

_COLUMNS = (
    "id, gameserver_id, name, type, status, cron_schedule, "
    "created_at, updated_at, last_run, next_run"
)


def _scan_task(row: sqlite3.Row) -> ScheduledTask:
    return ScheduledTask(
        id=row["id"],
        gameserver_id=row["gameserver_id"],
        name=row["name"],
        type=TaskType(row["type"]),
        status=TaskStatus(row["status"]),
        cron_schedule=row["cron_schedule"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        last_run=row["last_run"],
        next_run=row["next_run"],
    )


class TaskRepository:
    """Create, read, update and delete rows of the ``scheduled_tasks`` table."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def create_scheduled_task(self, task: ScheduledTask) -> None:
        try:
            self._conn.execute(
                f"INSERT INTO scheduled_tasks ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    task.id,
                    task.gameserver_id,
                    task.name,
                    TaskType(task.type).value,
                    TaskStatus(task.status).value,
                    task.cron_schedule,
                    task.created_at,
                    task.updated_at,
                    task.last_run,
                    task.next_run,
                ),
            )
        except sqlite3.Error as exc:
            raise DatabaseError("create_task", "failed to create scheduled task", exc) from exc

    def get_scheduled_task(self, task_id: str) -> ScheduledTask:
        try:
            row = self._conn.execute(
                f"SELECT {_COLUMNS} FROM scheduled_tasks WHERE id = ?", (task_id,)
            ).fetchone()
            if row is None:
                raise DatabaseError("get_task", f"scheduled task {task_id} not found")
            return _scan_task(row)
        except (sqlite3.Error, ValueError) as exc:
            raise DatabaseError("get_task", f"failed to query scheduled task {task_id}", exc) from exc

    def update_scheduled_task(self, task: ScheduledTask) -> None:
        try:
            cursor = self._conn.execute(
                "UPDATE scheduled_tasks SET name = ?, type = ?, status = ?, cron_schedule = ?, "
                "updated_at = ?, last_run = ?, next_run = ? WHERE id = ?",
                (
                    task.name,
                    TaskType(task.type).value,
                    TaskStatus(task.status).value,
                    task.cron_schedule,
                    task.updated_at,
                    task.last_run,
                    task.next_run,
                    task.id,
                ),
            )
        except sqlite3.Error as exc:
            raise DatabaseError("update_task", "failed to update scheduled task", exc) from exc
        if cursor.rowcount == 0:
            raise DatabaseError("update_task", f"scheduled task {task.id} not found")

    def delete_scheduled_task(self, task_id: str) -> None:
        try:
            cursor = self._conn.execute("DELETE FROM scheduled_tasks WHERE id = ?", (task_id,))
        except sqlite3.Error as exc:
            raise DatabaseError("delete_task", "failed to delete scheduled task", exc) from exc
        if cursor.rowcount == 0:
            raise DatabaseError("delete_task", f"scheduled task {task_id} not found")

    def _list(self, op: str, query: str, params: tuple, what: str) -> list[ScheduledTask]:
        try:
            rows = self._conn.execute(query, params).fetchall()
        except sqlite3.Error as exc:
            raise DatabaseError(op, f"failed to query {what}", exc) from exc
        tasks = []
        for row in rows:
            try:
                tasks.append(_scan_task(row))
            except ValueError as exc:
                raise DatabaseError(op, "failed to scan scheduled task row", exc) from exc
        return tasks

    def list_scheduled_tasks_for_gameserver(self, gameserver_id: str) -> list[ScheduledTask]:
        """Return a gameserver's tasks, newest first."""
        return self._list(
            "list_tasks",
            f"SELECT {_COLUMNS} FROM scheduled_tasks WHERE gameserver_id = ? ORDER BY created_at DESC",
            (gameserver_id,),
            "scheduled tasks",
        )

    def list_active_scheduled_tasks(self) -> list[ScheduledTask]:
        """Return all active tasks, soonest next run first."""
        return self._list(
            "list_active_tasks",
            f"SELECT {_COLUMNS} FROM scheduled_tasks WHERE status = ? ORDER BY next_run ASC",
            (TaskStatus.ACTIVE.value,),
            "active scheduled tasks",
        )