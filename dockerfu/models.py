from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class PortBinding:
    private_port: int
    public_port: int = 0  # 0 means not published
    ip: str = ""
    type: str = "tcp"

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> "PortBinding":
        return cls(
            private_port=int(raw.get("PrivatePort") or 0),
            public_port=int(raw.get("PublicPort") or 0),
            ip=str(raw.get("IP") or ""),
            type=str(raw.get("Type") or "tcp"),
        )


@dataclass(frozen=True)
class ContainerDescriptor:
    id: str
    image: str
    ports: tuple[PortBinding, ...] = ()
    status: str = ""
    names: tuple[str, ...] = ()

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> "ContainerDescriptor":
        """Build a descriptor from one entry of Docker's `GET /containers/json`."""
        return cls(
            id=str(raw.get("Id", "")),
            image=str(raw.get("Image", "")),
            ports=tuple(PortBinding.from_api(p) for p in raw.get("Ports") or []),
            status=str(raw.get("Status") or ""),
            names=tuple(raw.get("Names") or ()),
        )


@dataclass(frozen=True)
class RouteOperation:
    key: str
    backend: str
    container_id: str


DOWN = "down"


@dataclass(frozen=True)
class RouteStatus:
    route: str  # store key as enumerated, e.g. frontend:foo.frozenridge.co
    backend: str
    container: str  # container status string or "down"

    @property
    def is_down(self) -> bool:
        return self.container == DOWN


@dataclass
class SyncResult:
    status: str  # ok|idle
    operations: list[RouteOperation] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)  # container ids
