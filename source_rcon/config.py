"""Connection settings from environment variables and YAML server files.

A server file names one or more RCON targets::

    servers:
      survival:
        endpoint: "127.0.0.1:25575"
        password: "changeme"
        timeout: 5
      legacy:
        endpoint: "10.0.0.7:27015"
        password: "hunter2"
        lenient: true
"""

from __future__ import annotations

import math
import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import yaml

from .errors import RconConfigError
from .transport.tcp import parse_endpoint

ENV_ENDPOINT = "RCON_ENDPOINT"
ENV_PASSWORD = "RCON_PASSWORD"
ENV_COMMAND = "RCON_COMMAND"
ENV_TIMEOUT = "RCON_TIMEOUT"
ENV_CONFIG = "RCON_CONFIG"

DEFAULT_TIMEOUT = 10.0


@dataclass(frozen=True)
class RconSettings:
    """Everything needed to open an authenticated session.

    Attributes:
        endpoint: Server "host:port".
        password: RCON password.
        timeout: Connection timeout in seconds.
        lenient: Decode packets ignoring their declared size.
    """

    endpoint: str
    password: str
    timeout: float = DEFAULT_TIMEOUT
    lenient: bool = False

    def __post_init__(self) -> None:
        parse_endpoint(self.endpoint)
        if not math.isfinite(self.timeout) or self.timeout <= 0:
            raise RconConfigError(f"Timeout must be positive, got {self.timeout}")


def _parse_timeout(value: Any) -> float:
    if isinstance(value, bool):
        raise RconConfigError(f"Invalid timeout: {value!r}")
    try:
        timeout = float(value)
    except (TypeError, ValueError) as err:
        raise RconConfigError(f"Invalid timeout: {value!r}") from err
    if not math.isfinite(timeout):
        raise RconConfigError(f"Invalid timeout: {value!r}")
    return timeout


def _parse_lenient(name: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise RconConfigError(
            f"Server {name!r} lenient must be true or false, got {value!r}"
        )
    return value


def _load_yaml(path: Path) -> dict[str, Any]:
    """Load YAML file with error handling."""
    if not path.exists():
        raise RconConfigError(f"File not found: {path}")
    try:
        with path.open() as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as err:
        raise RconConfigError(f"Invalid YAML in {path}: {err}") from err
    if not isinstance(data, dict):
        raise RconConfigError(f"Expected a mapping at top level of {path}")
    return data


def _parse_server(name: str, data: Any) -> RconSettings:
    if not isinstance(data, dict):
        raise RconConfigError(f"Server {name!r} must be a mapping")
    for key in ("endpoint", "password"):
        if key not in data:
            raise RconConfigError(f"Server {name!r} is missing {key!r}")
    return RconSettings(
        endpoint=str(data["endpoint"]),
        password=str(data["password"]),
        timeout=_parse_timeout(data.get("timeout", DEFAULT_TIMEOUT)),
        lenient=_parse_lenient(name, data.get("lenient", False)),
    )


def load_servers(path: Path | str) -> dict[str, RconSettings]:
    """Load named server settings from a YAML file.

    Args:
        path: Path to the server file.

    Returns:
        Settings by server name.

    Raises:
        RconConfigError: If the file is missing or malformed.
    """
    path = Path(path)
    servers = _load_yaml(path).get("servers")
    if not isinstance(servers, dict) or not servers:
        raise RconConfigError(f"No servers defined in {path}")
    return {str(name): _parse_server(str(name), entry) for name, entry in servers.items()}


def resolve_settings(
    *,
    endpoint: str | None = None,
    password: str | None = None,
    timeout: float | None = None,
    lenient: bool | None = None,
    config_path: Path | str | None = None,
    server: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> RconSettings:
    """Merge settings: explicit arguments, then server file, then environment."""
    env = os.environ if environ is None else environ
    config_path = config_path or env.get(ENV_CONFIG)

    base: RconSettings | None = None
    if config_path:
        servers = load_servers(config_path)
        if server is None:
            if len(servers) != 1:
                raise RconConfigError(
                    f"Choose a server from {config_path}: {', '.join(sorted(servers))}"
                )
            server = next(iter(servers))
        if server not in servers:
            raise RconConfigError(f"Unknown server {server!r} in {config_path}")
        base = servers[server]
    elif server is not None:
        raise RconConfigError("A server name requires a config file")

    if base is None:
        endpoint = endpoint or env.get(ENV_ENDPOINT)
        password = password if password is not None else env.get(ENV_PASSWORD)
        if not endpoint:
            raise RconConfigError(f"Endpoint is required (--endpoint or {ENV_ENDPOINT})")
        if password is None:
            raise RconConfigError(f"Password is required (--password or {ENV_PASSWORD})")
        if timeout is None:
            timeout = _parse_timeout(env.get(ENV_TIMEOUT, DEFAULT_TIMEOUT))
        return RconSettings(
            endpoint=endpoint,
            password=password,
            timeout=timeout,
            lenient=bool(lenient),
        )

    overrides: dict[str, Any] = {}
    if endpoint:
        overrides["endpoint"] = endpoint
    if password is not None:
        overrides["password"] = password
    if timeout is not None:
        overrides["timeout"] = timeout
    if lenient is not None:
        overrides["lenient"] = lenient
    return replace(base, **overrides)
