"""Command execution in containers."""

import socket
from dataclasses import replace
from typing import Any, Dict, Optional, Tuple

import structlog
from docker import APIClient

from ...config import settings
from ...models.container import ExecConfig, env_list
from ..stream.demux import parse_to_combined_output, parse_to_stdout_stderr
from .utils import raw_socket, receive_socket_output

logger = structlog.get_logger(__name__)


class ContainerExecutor:
    """Runs exec sessions inside containers."""

    def __init__(self, api: APIClient):
        """Initialize executor with an API client.

        Args:
            api: Docker API client
        """
        self._api = api

    def _exec_create(self, container: str, config: ExecConfig) -> str:
        result = self._api.exec_create(
            container,
            config.cmd or settings.exec_default_cmd,
            stdout=True,
            stderr=True,
            stdin=True,
            tty=config.tty,
            privileged=config.privileged,
            user=config.user,
            environment=env_list(config.env),
            workdir=config.working_dir,
        )
        return result["Id"]

    def exec(self, container: str, config: Optional[ExecConfig] = None) -> Tuple[str, Any]:
        """Open an interactive TTY session, like ``docker exec -it <container> bash``.

        The shell defaults to ``settings.exec_default_cmd``; set
        ``config.cmd`` to run something else, e.g. ``["sh"]``.

        Args:
            container: Container name or id
            config: Exec configuration; tty is always enabled

        Returns:
            Tuple of (exec_id, socket). Write to the socket to send input,
            read from it to receive output, and close it when done.
        """
        config = replace(config or ExecConfig(), tty=True)
        exec_id = self._exec_create(container, config)
        sock = self._api.exec_start(exec_id, detach=config.detach, tty=True, socket=True)
        logger.info("Exec session opened", container=container, exec_id=exec_id)
        return exec_id, sock

    def resize(self, exec_id: str, height: int, width: int) -> None:
        """Resize the TTY of an exec session."""
        self._api.exec_resize(exec_id, height=height, width=width)

    def _run_one_shot(self, container: str, cmd: str, config: Optional[ExecConfig]) -> bytes:
        config = config or ExecConfig()
        exec_id = self._exec_create(container, config)
        sock = self._api.exec_start(exec_id, tty=config.tty, socket=True)
        raw = raw_socket(sock)
        try:
            if settings.exec_socket_timeout:
                raw.settimeout(settings.exec_socket_timeout)
            if not cmd.endswith("\n"):
                cmd += "\n"
            raw.sendall((cmd + "exit\n").encode("utf-8"))
            try:
                raw.shutdown(socket.SHUT_WR)
            except OSError as e:
                # "exit" ends the shell without a half-close
                logger.debug("Socket half-close unsupported", exec_id=exec_id, error=str(e))
            output = receive_socket_output(raw)
        finally:
            sock.close()
            if raw is not sock:
                raw.close()
        logger.debug(
            "Exec finished",
            container=container,
            exec_id=exec_id,
            output_bytes=len(output),
        )
        return output

    def exec_one_shot(
        self, container: str, cmd: str, config: Optional[ExecConfig] = None
    ) -> Tuple[str, str]:
        """Run ``cmd`` once in the container's shell.

        The command is written to the shell's stdin followed by ``exit``.

        Returns:
            Tuple of (stdout, stderr)

        Raises:
            StreamDecodeError: The attached stream could not be demultiplexed
        """
        output = self._run_one_shot(container, cmd, config)
        if config is not None and config.tty:
            # TTY sessions are not multiplexed
            return output.decode("utf-8", errors="replace"), ""
        return parse_to_stdout_stderr(output)

    def exec_one_shot_combined(
        self, container: str, cmd: str, config: Optional[ExecConfig] = None
    ) -> str:
        """Run ``cmd`` once and return stdout and stderr combined in arrival order."""
        output = self._run_one_shot(container, cmd, config)
        if config is not None and config.tty:
            return output.decode("utf-8", errors="replace")
        return parse_to_combined_output(output)

    def inspect(self, exec_id: str) -> Dict[str, Any]:
        """Inspect an exec instance, e.g. for its ExitCode."""
        return self._api.exec_inspect(exec_id)
