from __future__ import annotations

from typing import Any

import redis

from .errors import ConfigError, StoreError
from .settings import Settings

FRONTEND_PREFIX = "frontend:"


def frontend_key(routing_key: str) -> str:
    return f"{FRONTEND_PREFIX}{routing_key}"


def connect_redis(settings: Settings) -> redis.Redis:
    """Client for the Hipache Redis; responses are decoded to str."""
    if settings.redis_url:
        try:
            return redis.Redis.from_url(
                settings.redis_url,
                decode_responses=True,
                socket_timeout=settings.redis_socket_timeout,
            )
        except ValueError as e:
            raise ConfigError(f"Invalid redis_url {settings.redis_url!r}: {e}") from e
    return redis.Redis(
        host=settings.redis_host,
        port=settings.redis_port,
        socket_timeout=settings.redis_socket_timeout,
        decode_responses=True,
    )


class RouteStore:
    """Hipache route entries: `frontend:<fqdn>` -> [fqdn, backend]."""

    def __init__(self, client: Any):
        self.client = client

    def write_route(self, key: str, backend: str) -> None:
        """Replace the entry for `key` in one MULTI/EXEC.

        Readers never see the list empty or half-written.
        """
        name = frontend_key(key)
        try:
            pipe = self.client.pipeline(transaction=True)
            pipe.delete(name)
            pipe.rpush(name, key)
            pipe.rpush(name, backend)
            pipe.execute()
        except redis.RedisError as e:
            raise StoreError(f"writing {name}: {e}") from e

    def scan_keys(self, pattern: str = "*") -> list[str]:
        """All keys matching `pattern`.

        The default is unscoped: the Redis instance is assumed to hold only
        Hipache entries.
        """
        try:
            return list(self.client.scan_iter(match=pattern))
        except redis.RedisError as e:
            raise StoreError(f"scanning keys {pattern!r}: {e}") from e

    def read_list(self, key: str) -> list[str]:
        try:
            return list(self.client.lrange(key, 0, -1))
        except redis.RedisError as e:
            raise StoreError(f"reading {key}: {e}") from e

    def close(self) -> None:
        close = getattr(self.client, "close", None)
        if close is not None:
            close()
