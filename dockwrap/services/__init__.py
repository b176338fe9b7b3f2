"""Service layer for dockwrap."""

from .container import ContainerExecutor, ContainerManager, DockerClientFactory
from .facade import DockerFacade
from .image import ImageManager
from .network import NetworkManager
from .stream import MessageParser
from .system import SystemManager
from .volume import VolumeManager

__all__ = [
    "ContainerExecutor",
    "ContainerManager",
    "DockerClientFactory",
    "DockerFacade",
    "ImageManager",
    "MessageParser",
    "NetworkManager",
    "SystemManager",
    "VolumeManager",
]
