"""dockwrap - a convenience layer over the Docker Engine API.

Option objects for containers, images, networks and volumes, stdout/stderr
demultiplexing of attached streams, and aggregated pull/push/build
progress.

Usage:
    from dockwrap import DockerFacade

    with DockerFacade() as docker:
        for view in docker.images.pull_progress("alpine:3.20"):
            print(view)
"""

from .config import settings
from .services import (
    ContainerExecutor,
    ContainerManager,
    DockerClientFactory,
    DockerFacade,
    ImageManager,
    MessageParser,
    NetworkManager,
    SystemManager,
    VolumeManager,
)
from .services.stream import (
    demultiplex,
    parse_to_combined_output,
    parse_to_stdout_stderr,
    stream_combined_output,
)

__version__ = "0.1.0"

__all__ = [
    "settings",
    "ContainerExecutor",
    "ContainerManager",
    "DockerClientFactory",
    "DockerFacade",
    "ImageManager",
    "MessageParser",
    "NetworkManager",
    "SystemManager",
    "VolumeManager",
    "demultiplex",
    "parse_to_combined_output",
    "parse_to_stdout_stderr",
    "stream_combined_output",
]
