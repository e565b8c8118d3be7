from __future__ import annotations

import fnmatch
from typing import Any

import pytest
import redis

from dockerfu.errors import ListError
from dockerfu.models import ContainerDescriptor, PortBinding
from dockerfu.settings import Settings
from dockerfu.store import RouteStore


class FakePipeline:
    """Queues commands and applies them together on execute(), like MULTI/EXEC."""

    def __init__(self, client: "FakeRedis"):
        self.client = client
        self.commands: list[tuple[str, tuple[Any, ...]]] = []

    def delete(self, *names: str) -> "FakePipeline":
        self.commands.append(("delete", names))
        return self

    def rpush(self, name: str, *values: str) -> "FakePipeline":
        self.commands.append(("rpush", (name, *values)))
        return self

    def execute(self) -> list[Any]:
        self.client.executed_transactions += 1
        if self.client.fail_writes_for and any(
            args and args[0] in self.client.fail_writes_for for _, args in self.commands
        ):
            raise redis.ConnectionError("connection reset")
        return [getattr(self.client, name)(*args) for name, args in self.commands]


class FakeRedis:
    """Minimal in-memory stand-in for the redis.Redis list/scan commands used here."""

    def __init__(self) -> None:
        self.lists: dict[str, list[str]] = {}
        self.executed_transactions = 0
        self.fail_writes_for: set[str] = set()
        self.fail_reads = False
        self.closed = False

    def pipeline(self, transaction: bool = True) -> FakePipeline:
        assert transaction is True
        return FakePipeline(self)

    def delete(self, *names: str) -> int:
        return sum(1 for n in names if self.lists.pop(n, None) is not None)

    def rpush(self, name: str, *values: str) -> int:
        self.lists.setdefault(name, []).extend(values)
        return len(self.lists[name])

    def lrange(self, name: str, start: int, end: int) -> list[str]:
        if self.fail_reads:
            raise redis.ConnectionError("connection refused")
        items = self.lists.get(name, [])
        return list(items[start:] if end == -1 else items[start : end + 1])

    def scan_iter(self, match: str | None = None):
        if self.fail_reads:
            raise redis.ConnectionError("connection refused")
        for k in list(self.lists):
            if match is None or fnmatch.fnmatchcase(k, match):
                yield k

    def close(self) -> None:
        self.closed = True


class FakeLister:
    def __init__(self, containers: list[ContainerDescriptor] | None = None, error: Exception | None = None):
        self.containers = list(containers or [])
        self.error = error
        self.calls = 0

    def list(self) -> list[ContainerDescriptor]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.containers)

    def close(self) -> None:
        pass


def container(cid: str, image: str, *ports: tuple[int, int], status: str = "Up 5 minutes") -> ContainerDescriptor:
    """ports are (private, public) pairs; public 0 means unpublished."""
    bindings = tuple(
        PortBinding(private_port=priv, public_port=pub, ip="0.0.0.0" if pub else "") for priv, pub in ports
    )
    return ContainerDescriptor(id=cid, image=image, ports=bindings, status=status)


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def store(fake_redis: FakeRedis) -> RouteStore:
    return RouteStore(fake_redis)


@pytest.fixture
def failing_lister() -> FakeLister:
    return FakeLister(error=ListError("listing containers: daemon not running"))
