from __future__ import annotations

import logging
from typing import Iterable

from rich.table import Table

from .docker_ops import ContainerLister
from .models import DOWN, RouteStatus
from .ports import index_by_public_port
from .settings import Settings
from .store import RouteStore

log = logging.getLogger(__name__)


def backend_port(backend: str) -> int | None:
    """`http://127.0.0.1:9001` -> 9001."""
    _, sep, tail = backend.rpartition(":")
    if not sep or not tail.isdigit():
        return None
    return int(tail)


class RouteInspector:
    """Lists stored routes and marks the ones no live container backs (show)."""

    def __init__(self, settings: Settings, lister: ContainerLister, store: RouteStore):
        self.settings = settings
        self.lister = lister
        self.store = store

    def show(self, pattern: str = "*") -> list[RouteStatus]:
        live = index_by_public_port(self.lister.list(), self.settings.web_ports)

        rows: list[RouteStatus] = []
        for key in self.store.scan_keys(pattern):
            entry = self.store.read_list(key)
            if len(entry) != 2:
                log.warning("route entry %s is not [key, backend]: %r", key, entry)
                rows.append(RouteStatus(route=key, backend="", container=DOWN))
                continue

            backend = entry[1]
            port = backend_port(backend)
            container = live.get(port) if port is not None else None
            rows.append(RouteStatus(route=key, backend=backend, container=container.status if container else DOWN))
        return rows


def render_table(rows: Iterable[RouteStatus]) -> Table:
    table = Table("Route", "Forward", "Container", box=None, pad_edge=False)
    for r in rows:
        status = f"[bold red]{r.container}[/]" if r.is_down else r.container
        table.add_row(r.route, r.backend, status)
    return table
