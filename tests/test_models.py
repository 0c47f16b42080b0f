import json

from gameserverdb.models import (
    ConfigVar,
    DatabaseError,
    Game,
    Gameserver,
    GameserverStatus,
    PortMapping,
    ScheduledTask,
    TaskStatus,
    TaskType,
)


def test_port_mapping_round_trip_through_json():
    mapping = PortMapping(name="query", protocol="udp", container_port=25565, host_port=25566)
    restored = PortMapping.from_dict(json.loads(json.dumps(mapping.to_dict())))
    assert restored == mapping


def test_port_mapping_from_partial_dict_uses_defaults():
    restored = PortMapping.from_dict({"name": "game"})
    assert restored == PortMapping(name="game")


def test_config_var_round_trip_through_json():
    var = ConfigVar(
        name="EULA",
        display_name="Accept Minecraft EULA",
        required=True,
        default="true",
        description="You must accept the Minecraft End User License Agreement to run a server",
    )
    restored = ConfigVar.from_dict(json.loads(json.dumps(var.to_dict())))
    assert restored == var


def test_config_var_from_partial_dict_uses_defaults():
    restored = ConfigVar.from_dict({"name": "MOTD"})
    assert restored == ConfigVar(name="MOTD")
    assert restored.required is False


def test_status_values_match_stored_defaults():
    assert GameserverStatus("stopped") is GameserverStatus.STOPPED
    assert TaskStatus("active") is TaskStatus.ACTIVE


def test_enum_members_compare_equal_to_their_values():
    for status in GameserverStatus:
        assert status == status.value
    for task_type in TaskType:
        assert TaskType(task_type.value) is task_type


def test_gameserver_defaults_are_independent():
    first = Gameserver(id="1", name="a", game_id="minecraft")
    second = Gameserver(id="2", name="b", game_id="minecraft")
    first.environment.append("EULA=true")
    first.port_mappings.append(PortMapping(name="game"))
    assert second.environment == []
    assert second.port_mappings == []
    assert first.status is GameserverStatus.STOPPED


def test_game_defaults_match_schema_defaults():
    game = Game(id="x", name="X", image="img")
    assert game.min_memory_mb == 512
    assert game.rec_memory_mb == 2048
    assert game.config_vars == []


def test_scheduled_task_runs_default_to_none():
    task = ScheduledTask(gameserver_id="gs", name="Daily Backup", type=TaskType.BACKUP, cron_schedule="0 2 * * *")
    assert task.last_run is None
    assert task.next_run is None
    assert task.status is TaskStatus.ACTIVE


def test_database_error_str_includes_parts():
    cause = ValueError("boom")
    error = DatabaseError("create_game", "failed to insert game Minecraft", cause)
    text = str(error)
    assert text.startswith("create_game")
    assert "failed to insert game Minecraft" in text
    assert "boom" in text
    assert error.err is cause


def test_database_error_without_cause():
    error = DatabaseError("get_gameserver", "gameserver x not found")
    assert "gameserver x not found" in str(error)
    assert error.err is None
    assert error.op == "get_gameserver"