# gameserverdb

SQLite-backed storage for a game server host. It keeps three kinds of record:

- **games**: templates that describe a game's container image, its ports,
  its configuration variables and its memory needs;
- **gameservers**: instances of a game, with their container id, status,
  port mappings, memory and CPU limits, backup limit, environment and volumes;
- **scheduled tasks**: cron-scheduled restarts or backups that belong to a
  gameserver and are deleted along with it.

When a database is opened it is created if needed, migrated, and, if its
games table is empty, seeded with six default games: Minecraft,
Counter-Strike 2, Valheim, Terraria, Garry's Mod and Palworld.

Only the Python standard library is used (`sqlite3`). Python 3.10 or later
is required.

## Installing

```
pip install .
```

## Opening a database

`gameserverdb.manager.DatabaseManager` opens (or creates) the database file,
turns on foreign keys, applies the schema and seeds the default games. Pass
`":memory:"` for a throwaway database. It is a context manager that closes
the connection on exit, and it offers every game, gameserver and task
operation described below on one shared connection:

```python
from gameserverdb.manager import DatabaseManager

with DatabaseManager("gameservers.db") as db:
    for game in db.list_games():          # ordered by name
        print(game.id, game.name, game.image)
```

`db.connection` gives the underlying `sqlite3.Connection`, and `db.close()`
closes it.

For lower-level work, `gameserverdb.schema` provides:

- `connect(db_path)`: opens a connection in autocommit mode with foreign keys
  enabled and rows returned as `sqlite3.Row`;
- `migrate(conn)`: creates the tables and indexes and adds columns an older
  database lacks;
- `seed_games(conn)`: inserts the default games into an empty games table
  and returns how many it added (0 if games were already present);
- `default_games(now)`: returns the default `Game` templates stamped with
  `now` (the current time if `None`).

The repositories below each take such a connection.

## Games

```python
from gameserverdb.schema import connect, migrate, seed_games
from gameserverdb.games import GameRepository

conn = connect("gameservers.db")
migrate(conn)
seed_games(conn)

games = GameRepository(conn)
minecraft = games.get_game("minecraft")
print(minecraft.min_memory_mb, [p.container_port for p in minecraft.port_mappings])
```

`GameRepository` has `create_game`, `get_game`, `list_games`, `update_game`
and `delete_game`. `get_game` raises `DatabaseError` for an unknown id.
Port mappings and configuration variables are stored as JSON.

## Gameservers

```python
from datetime import datetime
from gameserverdb.gameservers import GameserverRepository
from gameserverdb.models import Gameserver, GameserverStatus, PortMapping

servers = GameserverRepository(conn)
now = datetime.now()
server = Gameserver(
    id="mc-1",
    name="Survival",
    game_id="minecraft",
    port_mappings=[PortMapping(name="game", protocol="tcp", container_port=25565, host_port=25565)],
    environment=["EULA=true"],
    memory_mb=4096,
    status=GameserverStatus.STOPPED,
    created_at=now,
    updated_at=now,
)
servers.create_gameserver(server)

server.status = GameserverStatus.RUNNING
servers.update_gameserver(server)        # also sets server.updated_at to now
```

`GameserverRepository` also has `get_gameserver`,
`get_gameserver_by_container_id`, `list_gameservers` (newest first) and
`delete_gameserver`. Looking up, updating or deleting a gameserver that does
not exist raises `DatabaseError`, as does inserting a second gameserver with
a name already taken or with a `game_id` that names no game.

Statuses are the members of `GameserverStatus`: `STARTING`, `RUNNING`,
`STOPPING`, `STOPPED` and `ERROR`.

## Scheduled tasks

```python
from gameserverdb.tasks import TaskRepository
from gameserverdb.models import ScheduledTask, TaskStatus, TaskType

tasks = TaskRepository(conn)
tasks.create_scheduled_task(ScheduledTask(
    id="nightly-backup",
    gameserver_id="mc-1",
    name="Nightly Backup",
    type=TaskType.BACKUP,
    status=TaskStatus.ACTIVE,
    cron_schedule="0 2 * * *",
    created_at=now,
    updated_at=now,
))

active = tasks.list_active_scheduled_tasks()   # ordered by next run
```

`TaskRepository` also has `get_scheduled_task`, `update_scheduled_task`,
`delete_scheduled_task` and `list_scheduled_tasks_for_gameserver` (newest
first). Task ids are supplied by the caller. `last_run` and `next_run` may be
`None`. Deleting a gameserver deletes its tasks.

## Errors

Every failure is raised as `gameserverdb.models.DatabaseError`. It carries
the operation name (`op`), a message (`msg`) and, where there is one, the
underlying exception (`err`); its string form is `op: msg` or `op: msg: err`.

## What this package does not do

It is storage only. It does not create, start or stop containers, allocate
host ports, check a gameserver's environment against a game's required
configuration variables, or run scheduled tasks: a task's cron schedule is
stored as text and its `next_run` is whatever the caller sets. There is no
command-line tool or web interface.

## Running the tests

```
pip install ".[test]"
pytest
```