from __future__ import annotations


class DockerfuError(Exception):
    """Base class for failures that end the current command."""


class ConfigError(DockerfuError):
    pass


class NoWebPortFound(DockerfuError):
    def __init__(self, container_id: str):
        super().__init__(f"couldn't find valid public http port for container {container_id}")
        self.container_id = container_id


class StoreError(DockerfuError):
    pass


class ListError(DockerfuError):
    pass
