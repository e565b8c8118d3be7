from __future__ import annotations

from typing import Iterable

from .errors import NoWebPortFound
from .models import ContainerDescriptor, PortBinding


def is_web_binding(binding: PortBinding, web_ports: frozenset[str]) -> bool:
    return binding.public_port != 0 and str(binding.private_port) in web_ports


def select_public_port(bindings: Iterable[PortBinding], web_ports: frozenset[str]) -> int | None:
    """Public port of the first published binding whose private port is a web port.

    Binding order decides which port wins when a container exposes several.
    """
    for b in bindings:
        if is_web_binding(b, web_ports):
            return b.public_port
    return None


def require_public_port(container: ContainerDescriptor, web_ports: frozenset[str]) -> int:
    port = select_public_port(container.ports, web_ports)
    if port is None:
        raise NoWebPortFound(container.id)
    return port


def index_by_public_port(
    containers: Iterable[ContainerDescriptor], web_ports: frozenset[str]
) -> dict[int, ContainerDescriptor]:
    """Map public port -> container, using each container's first web binding.

    If two containers claim the same public port the later one wins.
    """
    index: dict[int, ContainerDescriptor] = {}
    for c in containers:
        port = select_public_port(c.ports, web_ports)
        if port is not None:
            index[port] = c
    return index
