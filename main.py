"""HTTP front end for sync and show.

Run with `uvicorn main:app` or `python cli.py serve`. `app` is built from
DOCKERFU_* settings; Redis and Docker are only contacted on the first request.
"""
from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException

from dockerfu import __version__
from dockerfu.api_models import RouteStatusOut, SyncResponse
from dockerfu.docker_ops import ContainerLister, DockerContainerLister
from dockerfu.errors import DockerfuError
from dockerfu.inspector import RouteInspector
from dockerfu.reconciler import Reconciler
from dockerfu.settings import Settings, load_settings
from dockerfu.store import RouteStore, connect_redis

log = logging.getLogger("dockerfu.api")


def create_app(
    settings: Settings | None = None,
    lister: ContainerLister | None = None,
    store: RouteStore | None = None,
) -> FastAPI:
    settings = settings or load_settings()
    lister = lister or DockerContainerLister(settings)
    store = store or RouteStore(connect_redis(settings))

    reconciler = Reconciler(settings, lister, store)
    inspector = RouteInspector(settings, lister, store)

    app = FastAPI(title="dockerfu", version=__version__)

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "healthy"}

    @app.get("/routes", response_model=list[RouteStatusOut])
    def routes() -> list[RouteStatusOut]:
        try:
            rows = inspector.show()
        except DockerfuError as e:
            log.error("show failed: %s", e)
            raise HTTPException(status_code=502, detail=str(e)) from e
        return [RouteStatusOut.from_status(r) for r in rows]

    @app.post("/sync", response_model=SyncResponse)
    def sync() -> SyncResponse:
        try:
            res = reconciler.sync()
        except DockerfuError as e:
            log.error("sync failed: %s", e)
            raise HTTPException(status_code=502, detail=str(e)) from e
        return SyncResponse.from_result(res)

    return app


app = create_app()
