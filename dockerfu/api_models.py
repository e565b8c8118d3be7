from __future__ import annotations

from pydantic import BaseModel, Field

from .models import RouteStatus, SyncResult


class RouteStatusOut(BaseModel):
    route: str = Field(..., description="Store key, e.g. frontend:foo.frozenridge.co")
    backend: str = Field(..., description="scheme://host:port Hipache forwards to")
    container: str = Field(..., description="Container status, or 'down' when nothing live backs the port")

    @classmethod
    def from_status(cls, st: RouteStatus) -> "RouteStatusOut":
        return cls(route=st.route, backend=st.backend, container=st.container)


class RouteOperationOut(BaseModel):
    key: str
    backend: str
    container_id: str


class SyncResponse(BaseModel):
    status: str = Field(..., description="ok|idle")
    routes: list[RouteOperationOut] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list, description="Containers skipped for lack of a web port")

    @classmethod
    def from_result(cls, res: SyncResult) -> "SyncResponse":
        return cls(
            status=res.status,
            routes=[RouteOperationOut(key=o.key, backend=o.backend, container_id=o.container_id) for o in res.operations],
            skipped=list(res.skipped),
        )
