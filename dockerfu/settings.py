from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass, field, fields
from typing import Any, Iterable, Mapping

from .errors import ConfigError

ENV_PREFIX = "DOCKERFU_"

MapEntry = tuple[str, str]

DEFAULT_WEB_PORTS = "8080,80,3000"
# Image frozenridge/foo -> foo.frozenridge.co; .../www and .../web also take the root and www.
DEFAULT_PREFIX_MAPS = "frozenridge:frozenridge.co,stridercd:stridercd.com"
DEFAULT_EXCEPTION_MAPS = "frozenridge/gitbackups:gitbackups.com,frozenridge/gitbackups:www.gitbackups.com"
DEFAULT_DOCKER_TCP_PORT = 4243


def parse_maps(raw: str | Iterable[Any]) -> tuple[MapEntry, ...]:
    """Parse `SOURCE:TARGET[,SOURCE:TARGET...]` into ordered pairs.

    A JSON config file may also give a list of `[source, target]` pairs.
    The split is on the last colon so a source may carry a registry port.
    """
    if isinstance(raw, str):
        items: list[Any] = [x.strip() for x in raw.split(",") if x.strip()]
    else:
        items = list(raw)

    out: list[MapEntry] = []
    for item in items:
        if isinstance(item, str):
            source, sep, target = item.rpartition(":")
            if not sep:
                raise ConfigError(f"Invalid map entry {item!r}: expected SOURCE:TARGET")
        elif isinstance(item, (list, tuple)) and len(item) == 2:
            source, target = str(item[0]), str(item[1])
        else:
            raise ConfigError(f"Invalid map entry {item!r}: expected SOURCE:TARGET")
        source, target = source.strip(), target.strip()
        if not source or not target:
            raise ConfigError(f"Invalid map entry {item!r}: empty source or target")
        out.append((source, target))
    return tuple(out)


def parse_web_ports(raw: str | int | Iterable[Any]) -> frozenset[str]:
    if isinstance(raw, int):
        items: list[Any] = [raw]
    elif isinstance(raw, str):
        items = [x.strip() for x in raw.split(",") if x.strip()]
    else:
        items = list(raw)

    ports: set[str] = set()
    for item in items:
        text = str(item).strip()
        if not text.isdigit() or not (0 < int(text) <= 65535):
            raise ConfigError(f"Invalid web port {item!r}")
        ports.add(str(int(text)))
    if not ports:
        raise ConfigError("At least one web port is required")
    return frozenset(ports)


_LOG_LEVELS = {
    "debug": "DEBUG",
    "info": "INFO",
    "warn": "WARNING",
    "warning": "WARNING",
    "error": "ERROR",
    "crit": "CRITICAL",
    "critical": "CRITICAL",
}


def parse_log_level(raw: Any) -> str:
    """`warn` -> `WARNING`; names uvicorn and logging both accept."""
    level = _LOG_LEVELS.get(str(raw).strip().lower())
    if level is None:
        raise ConfigError(f"Invalid log level {raw!r}")
    return level


def _to_bool(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    return str(raw).strip().lower() in {"1", "true", "yes", "y", "on"}


def _to_int(name: str, raw: Any) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid integer for {name}: {raw!r}") from None


def _to_float(name: str, raw: Any) -> float:
    try:
        return float(raw)
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid number for {name}: {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    # Redis (Hipache's routing table)
    redis_host: str = "127.0.0.1"
    redis_port: int = 6376
    redis_url: str | None = None
    redis_socket_timeout: float | None = None

    # Docker: the UNIX socket unless docker_host is set, then TCP.
    docker_socket_path: str = "/var/run/docker.sock"
    docker_host: str | None = None
    docker_port: int | None = None
    docker_timeout: int = 60

    # Routing
    hipache_backend: str = "http://127.0.0.1"
    web_ports: frozenset[str] = field(default_factory=lambda: parse_web_ports(DEFAULT_WEB_PORTS))
    prefix_maps: tuple[MapEntry, ...] = field(default_factory=lambda: parse_maps(DEFAULT_PREFIX_MAPS))
    exception_maps: tuple[MapEntry, ...] = field(default_factory=lambda: parse_maps(DEFAULT_EXCEPTION_MAPS))

    # Behaviour knobs
    write_concurrency: int = 1
    # False skips containers without a web port instead of aborting sync.
    strict_ports: bool = True

    log_level: str = "INFO"

    # HTTP API (`cli.py serve`)
    api_host: str = "127.0.0.1"
    api_port: int = 8000

    @property
    def docker_base_url(self) -> str:
        if self.docker_host:
            port = self.docker_port or DEFAULT_DOCKER_TCP_PORT
            return f"tcp://{self.docker_host}:{port}"
        return f"unix://{self.docker_socket_path}"


_INT_FIELDS = {"redis_port", "docker_port", "docker_timeout", "write_concurrency", "api_port"}
_FLOAT_FIELDS = {"redis_socket_timeout"}
_BOOL_FIELDS = {"strict_ports"}
_OPTIONAL_FIELDS = {"redis_url", "redis_socket_timeout", "docker_host", "docker_port"}
_FIELD_NAMES = {f.name for f in fields(Settings)}

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")


def _normalize_key(key: str) -> str:
    """Accept both `redis_port` and the camelCase `redisPort` used by older config files."""
    return _CAMEL_RE.sub("_", key.strip()).lower().replace("-", "_")


def _coerce(name: str, raw: Any) -> Any:
    if name in _OPTIONAL_FIELDS and (raw is None or raw == ""):
        return None
    if name == "log_level":
        return parse_log_level(raw)
    if name == "web_ports":
        return parse_web_ports(raw)
    if name in {"prefix_maps", "exception_maps"}:
        return parse_maps(raw)
    if name in _INT_FIELDS:
        return _to_int(name, raw)
    if name in _FLOAT_FIELDS:
        return _to_float(name, raw)
    if name in _BOOL_FIELDS:
        return _to_bool(raw)
    return str(raw)


def _read_config_file(path: str) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as fh:
            data = json.load(fh)
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Config file {path} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")
    return data


def _from_env(environ: Mapping[str, str]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key, value in environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        name = key[len(ENV_PREFIX):].lower()
        if name in _FIELD_NAMES:
            out[name] = value
    return out


def load_settings(
    config_file: str | None = None,
    overrides: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Build Settings from defaults < config file < DOCKERFU_* env < overrides.

    `overrides` normally comes from CLI flags; None values are ignored.
    """
    environ = os.environ if environ is None else environ
    raw: dict[str, Any] = {}

    config_file = config_file or environ.get(f"{ENV_PREFIX}CONFIG")
    if config_file:
        for key, value in _read_config_file(config_file).items():
            name = _normalize_key(key)
            if name not in _FIELD_NAMES:
                raise ConfigError(f"Unknown config key {key!r} in {config_file}")
            raw[name] = value

    raw.update(_from_env(environ))
    for key, value in (overrides or {}).items():
        if value is not None:
            raw[key] = value

    values = {name: _coerce(name, value) for name, value in raw.items()}
    settings = Settings(**values)
    if settings.write_concurrency < 1:
        raise ConfigError("write_concurrency must be at least 1")
    return settings
