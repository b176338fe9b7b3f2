"""Single entry point bundling every manager over one API client."""

from typing import Optional

from docker import APIClient

from ..config import DockerConfig
from .container import ContainerExecutor, ContainerManager, DockerClientFactory
from .image import ImageManager
from .network import NetworkManager
from .system import SystemManager
from .volume import VolumeManager


class DockerFacade:
    """All managers sharing one connection.

    Usage:
        docker = DockerFacade()
        for view in docker.images.pull_progress("alpine:3.20"):
            print(view)
    """

    def __init__(
        self, api: Optional[APIClient] = None, config: Optional[DockerConfig] = None
    ):
        self.api = api or DockerClientFactory.create(config)
        self.executor = ContainerExecutor(self.api)
        self.containers = ContainerManager(self.api, self.executor)
        self.images = ImageManager(self.api)
        self.networks = NetworkManager(self.api)
        self.volumes = VolumeManager(self.api)
        self.system = SystemManager(self.api)

    def close(self) -> None:
        self.api.close()

    def __enter__(self) -> "DockerFacade":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
