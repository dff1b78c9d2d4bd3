"""Service list and runtime settings."""

import json
import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

from .models import ConfigurationError, ServiceSpec
from .probe import DEFAULT_TIMEOUT

DEFAULT_SERVICES: Tuple[ServiceSpec, ...] = (
    ServiceSpec("Game Service", 9090, "gRPC", "./cmd/game-service"),
    ServiceSpec("API Service", 8080, "HTTP", "./cmd/api-service"),
    ServiceSpec("WebSocket Service", 8081, "WebSocket", "./cmd/websocket-service"),
    ServiceSpec("TCP Service", 8082, "TCP", "./cmd/tcp-service"),
)


def service_from_dict(entry: Mapping[str, Any]) -> ServiceSpec:
    """Build a ServiceSpec from one JSON object.

    ``type`` is accepted for ``protocol``, and ``file`` (a binary under
    ``./cmd``) for ``process_token``.
    """
    if not isinstance(entry, Mapping):
        raise ConfigurationError(f"service entry must be an object, got {entry!r}")
    token = entry.get("process_token")
    if token is None and entry.get("file"):
        token = f"./cmd/{entry['file']}"
    try:
        return ServiceSpec(
            name=entry["name"],
            port=entry["port"],
            protocol=entry.get("protocol", entry.get("type", "TCP")),
            process_token=token,
        )
    except KeyError as exc:
        raise ConfigurationError(f"service entry missing {exc.args[0]!r}") from None


def load_services(path: str) -> Tuple[ServiceSpec, ...]:
    """Load the service list from a JSON file."""
    try:
        with open(path, encoding="utf-8") as fh:
            data = json.load(fh)
    except OSError as exc:
        raise ConfigurationError(f"cannot read service list {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"invalid JSON in {path}: {exc}") from exc

    if isinstance(data, dict):
        data = data.get("services")
    if not isinstance(data, list) or not data:
        raise ConfigurationError(f"{path} does not contain a list of services")
    return tuple(service_from_dict(entry) for entry in data)


@dataclass(frozen=True)
class Settings:
    """Runtime options, normally taken from the environment."""

    host: str = "localhost"
    timeout: float = DEFAULT_TIMEOUT
    resolver: str = "psutil"
    config_path: Optional[str] = None
    webhook_url: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        raw_timeout = env.get("SERVICE_MONITOR_TIMEOUT")
        timeout = DEFAULT_TIMEOUT
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError:
                raise ConfigurationError(
                    f"SERVICE_MONITOR_TIMEOUT must be a number, got {raw_timeout!r}"
                ) from None
        if timeout <= 0:
            raise ConfigurationError("SERVICE_MONITOR_TIMEOUT must be positive")
        return cls(
            host=env.get("SERVICE_MONITOR_HOST") or "localhost",
            timeout=timeout,
            resolver=env.get("SERVICE_MONITOR_RESOLVER") or "psutil",
            config_path=env.get("SERVICE_MONITOR_CONFIG") or None,
            webhook_url=env.get("WEBHOOK_URL") or None,
        )

    def services(self) -> Tuple[ServiceSpec, ...]:
        """Return the configured service list, falling back to the defaults."""
        if self.config_path:
            return load_services(self.config_path)
        return DEFAULT_SERVICES
