from __future__ import annotations

import logging
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait

from .docker_ops import ContainerLister
from .errors import NoWebPortFound
from .models import ContainerDescriptor, RouteOperation, SyncResult
from .ports import require_public_port
from .routing import routes_for
from .settings import Settings
from .store import RouteStore

log = logging.getLogger(__name__)


class Reconciler:
    """Rewrites the Hipache routes for every running container (sync).

    Full reconciliation on each call: every derivable key is deleted and
    rewritten. Keys for containers that went away are left alone.
    """

    def __init__(self, settings: Settings, lister: ContainerLister, store: RouteStore):
        self.settings = settings
        self.lister = lister
        self.store = store

    def backend_for(self, port: int) -> str:
        return f"{self.settings.hipache_backend}:{port}"

    def operations_for(self, container: ContainerDescriptor) -> list[RouteOperation]:
        keys = routes_for(container.image, self.settings.exception_maps, self.settings.prefix_maps)
        if not keys:
            return []
        port = require_public_port(container, self.settings.web_ports)
        backend = self.backend_for(port)
        return [RouteOperation(key=k, backend=backend, container_id=container.id) for k in keys]

    def plan(self, containers: list[ContainerDescriptor]) -> tuple[list[RouteOperation], list[str]]:
        """Derive write operations in snapshot order.

        Returns (operations, skipped container ids). Skips only happen with
        strict_ports off; otherwise NoWebPortFound propagates.
        """
        ops: list[RouteOperation] = []
        skipped: list[str] = []
        for c in containers:
            try:
                ops.extend(self.operations_for(c))
            except NoWebPortFound as e:
                if self.settings.strict_ports:
                    raise
                log.warning("skipping container %s: %s", c.id, e)
                skipped.append(c.id)
        return ops, skipped

    def _apply(self, op: RouteOperation) -> None:
        self.store.write_route(op.key, op.backend)
        log.info("mapped %s to %s", op.key, op.backend)

    def execute(self, ops: list[RouteOperation]) -> None:
        workers = min(self.settings.write_concurrency, len(ops))
        if workers <= 1:
            for op in ops:
                self._apply(op)
            return

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="dockerfu-sync") as pool:
            futures = [pool.submit(self._apply, op) for op in ops]
            done, pending = wait(futures, return_when=FIRST_EXCEPTION)
            for f in pending:
                f.cancel()
            # First failure in derivation order wins; whatever is still in flight is ignored.
            for f in futures:
                if f in done and f.exception() is not None:
                    raise f.exception()

    def sync(self) -> SyncResult:
        containers = self.lister.list()
        ops, skipped = self.plan(containers)
        if not ops:
            log.info("no running images found to sync. start some?")
            return SyncResult(status="idle", skipped=skipped)

        self.execute(ops)
        log.info("hipache synced ok (%d routes)", len(ops))
        return SyncResult(status="ok", operations=ops, skipped=skipped)
