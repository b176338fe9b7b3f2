"""Container services.

- client.py: builds the low-level API client from settings
- executor.py: exec sessions, interactive and one-shot
- manager.py: create/run, lifecycle, copy in and out, logs, commit
- utils.py: readiness polling and exec socket reads
"""

from .client import DockerClientFactory
from .executor import ContainerExecutor
from .manager import ContainerManager
from .utils import raw_socket, receive_socket_output, wait_for_container_ready

__all__ = [
    "ContainerManager",
    "DockerClientFactory",
    "ContainerExecutor",
    "wait_for_container_ready",
    "receive_socket_output",
    "raw_socket",
]
