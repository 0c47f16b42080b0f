import time
from datetime import datetime, timedelta

import pytest

from gameserverdb.gameservers import GameserverRepository
from gameserverdb.models import DatabaseError, Gameserver, GameserverStatus, PortMapping
from gameserverdb.schema import connect, migrate, seed_games


@pytest.fixture
def repo():
    connection = connect(":memory:")
    migrate(connection)
    seed_games(connection)
    yield GameserverRepository(connection)
    connection.close()


def _server(server_id, name, **kwargs):
    kwargs.setdefault("port_mappings", [PortMapping("game", "tcp", 25565, 0)])
    return Gameserver(id=server_id, name=name, game_id=kwargs.pop("game_id", "minecraft"), **kwargs)


def test_port_mappings_round_trip(repo):
    mappings = [
        PortMapping("game", "tcp", 25565, 25565),
        PortMapping("rcon", "tcp", 25575, 25575),
        PortMapping("query", "udp", 25565, 25566),
    ]
    repo.create_gameserver(_server("port-test", "Port Test Server", port_mappings=mappings))
    retrieved = repo.get_gameserver("port-test")
    assert len(retrieved.port_mappings) == 3
    by_name = {pm.name: pm for pm in retrieved.port_mappings}
    assert by_name == {pm.name: pm for pm in mappings}


def test_environment_variables(repo):
    env = [
        "EULA=true",
        "MAX_PLAYERS=20",
        "DIFFICULTY=normal",
        "WHITELIST_ENABLED=false",
        "ONLINE_MODE=true",
    ]
    repo.create_gameserver(_server("env-test", "Environment Test Server", environment=env))
    retrieved = repo.get_gameserver("env-test")
    assert len(retrieved.environment) == 5
    assert set(retrieved.environment) == set(env)


def test_volumes(repo):
    volumes = ["/data/minecraft:/data", "/backups:/backups:ro", "/logs:/logs"]
    repo.create_gameserver(_server("volume-test", "Volume Test Server", volumes=volumes))
    retrieved = repo.get_gameserver("volume-test")
    assert len(retrieved.volumes) == 3
    assert set(retrieved.volumes) == set(volumes)


def test_resource_limits(repo):
    repo.create_gameserver(
        _server("resource-test", "Resource Test Server", memory_mb=4096, cpu_cores=4, max_backups=15)
    )
    retrieved = repo.get_gameserver("resource-test")
    assert retrieved.memory_mb == 4096
    assert retrieved.cpu_cores == 4
    assert retrieved.max_backups == 15


def test_status_updates(repo):
    server = _server("status-test", "Status Test Server")
    repo.create_gameserver(server)
    for status in (
        GameserverStatus.STARTING,
        GameserverStatus.RUNNING,
        GameserverStatus.STOPPING,
        GameserverStatus.STOPPED,
        GameserverStatus.ERROR,
    ):
        server.status = status
        repo.update_gameserver(server)
        assert repo.get_gameserver(server.id).status == status


def test_container_id_update(repo):
    server = _server("container-test", "Container Test Server")
    repo.create_gameserver(server)
    assert repo.get_gameserver(server.id).container_id == ""

    server.container_id = "abc123def456"
    repo.update_gameserver(server)
    assert repo.get_gameserver(server.id).container_id == "abc123def456"

    server.container_id = ""
    repo.update_gameserver(server)
    assert repo.get_gameserver(server.id).container_id == ""


def test_timestamps(repo):
    now = datetime.now()
    server = _server("timestamp-test", "Timestamp Test Server", created_at=now, updated_at=now)
    repo.create_gameserver(server)

    retrieved = repo.get_gameserver(server.id)
    assert abs(retrieved.created_at - now) <= timedelta(seconds=1)
    assert abs(retrieved.updated_at - now) <= timedelta(seconds=1)

    time.sleep(0.01)
    later = datetime.now()
    server.name = "Updated Name"
    server.updated_at = later
    repo.update_gameserver(server)

    updated = repo.get_gameserver(server.id)
    assert abs(updated.created_at - now) <= timedelta(seconds=1)
    assert abs(updated.updated_at - later) <= timedelta(seconds=1)
    assert updated.updated_at >= now
    assert updated.name == "Updated Name"


def test_get_by_container_id(repo):
    repo.create_gameserver(_server("c-1", "Container One", container_id="container-xyz"))
    retrieved = repo.get_gameserver_by_container_id("container-xyz")
    assert retrieved.id == "c-1"
    with pytest.raises(DatabaseError) as info:
        repo.get_gameserver_by_container_id("missing")
    assert info.value.op == "get_gameserver_by_container"


def test_get_non_existent(repo):
    with pytest.raises(DatabaseError) as info:
        repo.get_gameserver("non-existent")
    assert info.value.msg == "gameserver non-existent not found"


def test_update_non_existent(repo):
    with pytest.raises(DatabaseError) as info:
        repo.update_gameserver(_server("non-existent", "Test"))
    assert info.value.op == "update_gameserver"


def test_delete(repo):
    repo.create_gameserver(_server("del", "Delete Me"))
    repo.delete_gameserver("del")
    with pytest.raises(DatabaseError):
        repo.get_gameserver("del")
    with pytest.raises(DatabaseError) as info:
        repo.delete_gameserver("del")
    assert info.value.op == "delete_gameserver"


def test_duplicate_name(repo):
    repo.create_gameserver(_server("1", "dup"))
    with pytest.raises(DatabaseError) as info:
        repo.create_gameserver(_server("2", "dup"))
    assert info.value.op == "create_gameserver"


def test_unknown_game_rejected(repo):
    with pytest.raises(DatabaseError):
        repo.create_gameserver(_server("x", "Unknown", game_id="no-such-game"))


def test_list_newest_first(repo):
    base = datetime(2024, 1, 1, 12, 0, 0)
    for offset, server_id in enumerate(["a", "b", "c"]):
        stamp = base + timedelta(hours=offset)
        repo.create_gameserver(_server(server_id, f"Server {server_id}", created_at=stamp, updated_at=stamp))
    assert [s.id for s in repo.list_gameservers()] == ["c", "b", "a"]


def test_list_empty(repo):
    assert repo.list_gameservers() == []