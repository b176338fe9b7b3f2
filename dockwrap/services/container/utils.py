"""Shared utilities for container operations."""

import time
from typing import List, Optional

import structlog
from docker import APIClient
from docker.errors import APIError

from ...config import settings

logger = structlog.get_logger(__name__)


def wait_for_container_ready(
    api: APIClient,
    container: str,
    max_wait: Optional[float] = None,
    interval: Optional[float] = None,
    stable_checks_required: int = 3,
) -> bool:
    """Block until inspect reports the container as running several times in a row.

    A container that crashes right after start shows "running" once and
    then flips to "exited"; requiring consecutive hits filters that out.

    Args:
        api: Docker API client
        container: Container name or id
        max_wait: Seconds to poll, settings.container_ready_timeout when None
        interval: Seconds between polls, settings.container_ready_interval when None
        stable_checks_required: Consecutive "running" results needed

    Returns:
        Whether the container was running when polling stopped
    """
    max_wait = max_wait if max_wait is not None else settings.container_ready_timeout
    interval = interval if interval is not None else settings.container_ready_interval
    stable_checks = 0
    total_wait = 0.0

    while total_wait < max_wait:
        if _is_running(api, container):
            stable_checks += 1
            if stable_checks >= stable_checks_required:
                return True
        else:
            stable_checks = 0
        time.sleep(interval)
        total_wait += interval

    # Final check
    return _is_running(api, container)


def _is_running(api: APIClient, container: str) -> bool:
    try:
        state = api.inspect_container(container).get("State") or {}
    except APIError as e:
        logger.debug("Container inspect failed while waiting", container=container, error=str(e))
        return False
    return state.get("Status") == "running"


def raw_socket(sock):
    """Return the underlying socket of an attach/exec response.

    The SDK hands back a ``SocketIO`` wrapper for plain HTTP connections and
    the socket itself for TLS and npipe connections.
    """
    return getattr(sock, "_sock", sock)


def receive_socket_output(
    sock,
    chunk_size: Optional[int] = None,
    timeout_exceptions: tuple = (TimeoutError, OSError),
) -> bytes:
    """Read an exec socket until the peer closes it or a read times out.

    Args:
        sock: Raw socket, see raw_socket
        chunk_size: Bytes per recv, settings.stream_chunk_size when None
        timeout_exceptions: Errors that end the read instead of propagating

    Returns:
        Everything received, still multiplexed unless the exec had a TTY
    """
    size = chunk_size or settings.stream_chunk_size
    received: List[bytes] = []
    while True:
        try:
            data = sock.recv(size)
        except timeout_exceptions:
            break
        if not data:
            break
        received.append(data)
    return b"".join(received)
