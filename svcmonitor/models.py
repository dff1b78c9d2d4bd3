"""Data objects shared by the probe, resolver and monitor."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class ConfigurationError(ValueError):
    """Raised when the service list or settings are structurally invalid."""


class ServiceState(str, Enum):
    """Outcome of a port probe."""

    RUNNING = "running"
    STOPPED = "stopped"


@dataclass(frozen=True)
class ServiceSpec:
    """A locally deployed service expected to listen on ``port``."""

    name: str
    port: int
    protocol: str
    process_token: str

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise ConfigurationError("service name must be a non-empty string")
        # bool is an int subclass but never a valid port
        if isinstance(self.port, bool) or not isinstance(self.port, int):
            raise ConfigurationError(f"{self.name}: port must be an integer")
        if not 1 <= self.port <= 65535:
            raise ConfigurationError(
                f"{self.name}: port {self.port} is outside 1-65535"
            )
        if not isinstance(self.process_token, str) or not self.process_token:
            raise ConfigurationError(
                f"{self.name}: process_token must be a non-empty string"
            )


@dataclass(frozen=True)
class StatusRecord:
    """Probe and resolve outcomes for one service, reported side by side."""

    service: ServiceSpec
    state: ServiceState
    pid: Optional[int] = None

    @property
    def running(self) -> bool:
        return self.state is ServiceState.RUNNING

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.service.name,
            "port": self.service.port,
            "protocol": self.service.protocol,
            "status": self.state.value,
            "pid": self.pid,
        }


@dataclass(frozen=True)
class Report:
    """All status records of one run, in service declaration order."""

    records: Tuple[StatusRecord, ...]

    @property
    def running_count(self) -> int:
        return sum(1 for record in self.records if record.running)

    @property
    def total(self) -> int:
        return len(self.records)

    @property
    def all_healthy(self) -> bool:
        return self.running_count == self.total

    def to_dict(self) -> Dict[str, Any]:
        return {
            "services": [record.to_dict() for record in self.records],
            "running": self.running_count,
            "total": self.total,
            "all_healthy": self.all_healthy,
        }
