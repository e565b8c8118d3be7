from __future__ import annotations

from typing import Any, Protocol

import docker
from docker.errors import DockerException
from requests.exceptions import RequestException

from .errors import ListError
from .models import ContainerDescriptor
from .settings import Settings


class ContainerLister(Protocol):
    def list(self) -> list[ContainerDescriptor]: ...


def _client(settings: Settings) -> docker.APIClient:
    return docker.APIClient(base_url=settings.docker_base_url, timeout=settings.docker_timeout)


class DockerContainerLister:
    """Point-in-time snapshot of the running containers on one Docker daemon.

    Uses the low-level API so port bindings arrive exactly as Docker lists
    them (PrivatePort, PublicPort, IP), in Docker's order.
    """

    def __init__(self, settings: Settings, client: Any | None = None):
        self.settings = settings
        self._api = client

    @property
    def api(self) -> Any:
        if self._api is None:
            try:
                self._api = _client(self.settings)
            except DockerException as e:
                raise ListError(f"cannot connect to docker at {self.settings.docker_base_url}: {e}") from e
        return self._api

    def list(self) -> list[ContainerDescriptor]:
        try:
            raw = self.api.containers()
        except (DockerException, RequestException) as e:
            raise ListError(f"listing containers: {e}") from e
        return [ContainerDescriptor.from_api(c) for c in raw]

    def close(self) -> None:
        if self._api is not None:
            self._api.close()
