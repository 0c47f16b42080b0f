"""Data types stored by the gameserver database."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional


@dataclass
class PortMapping:
    """A container port and the host port it is published on (0 = unassigned)."""

    name: str = ""
    protocol: str = "tcp"
    container_port: int = 0
    host_port: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "protocol": self.protocol,
            "container_port": self.container_port,
            "host_port": self.host_port,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PortMapping":
        return cls(
            name=data.get("name", ""),
            protocol=data.get("protocol", "tcp"),
            container_port=int(data.get("container_port", 0)),
            host_port=int(data.get("host_port", 0)),
        )


@dataclass
class ConfigVar:
    """A configuration variable a game accepts through its environment."""

    name: str
    display_name: str = ""
    required: bool = False
    default: str = ""
    description: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "display_name": self.display_name,
            "required": self.required,
            "default": self.default,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ConfigVar":
        return cls(
            name=data.get("name", ""),
            display_name=data.get("display_name", ""),
            required=bool(data.get("required", False)),
            default=data.get("default", ""),
            description=data.get("description", ""),
        )


@dataclass
class Game:
    """A game template from which gameservers are created."""

    id: str
    name: str
    image: str
    slug: str = ""
    port_mappings: list[PortMapping] = field(default_factory=list)
    config_vars: list[ConfigVar] = field(default_factory=list)
    min_memory_mb: int = 512
    rec_memory_mb: int = 2048
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)


class GameserverStatus(str, Enum):
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"
    ERROR = "error"


@dataclass
class Gameserver:
    """A gameserver instance created from a game."""

    id: str
    name: str
    game_id: str
    container_id: str = ""
    status: GameserverStatus = GameserverStatus.STOPPED
    port_mappings: list[PortMapping] = field(default_factory=list)
    memory_mb: int = 0
    cpu_cores: float = 0.0
    max_backups: int = 0
    environment: list[str] = field(default_factory=list)
    volumes: list[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)
    game_type: str = ""
    image: str = ""
    memory_gb: float = 0.0


class TaskType(str, Enum):
    RESTART = "restart"
    BACKUP = "backup"


class TaskStatus(str, Enum):
    ACTIVE = "active"
    DISABLED = "disabled"


@dataclass
class ScheduledTask:
    """A cron-scheduled action on a gameserver."""

    gameserver_id: str
    name: str
    type: TaskType = TaskType.RESTART
    status: TaskStatus = TaskStatus.ACTIVE
    cron_schedule: str = ""
    id: str = ""
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)
    last_run: Optional[datetime] = None
    next_run: Optional[datetime] = None


class DatabaseError(Exception):
    """Raised when a database operation fails."""

    def __init__(self, op: str, msg: str, err: Optional[BaseException] = None) -> None:
        super().__init__(msg)
        self.op = op
        self.msg = msg
        self.err = err

    def __str__(self) -> str:
        if self.err is not None:
            return f"{self.op}: {self.msg}: {self.err}"
        return f"{self.op}: {self.msg}"