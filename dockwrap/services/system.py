"""Engine-wide queries and registry login."""

import shutil
import subprocess
from typing import Any, Dict, Tuple

import structlog
from docker import APIClient

from ..config import settings
from ..models.errors import OperationFailedError
from ..models.system import DiskUsageSummary

logger = structlog.get_logger(__name__)


class SystemManager:
    """Daemon information, disk usage and registry credentials."""

    def __init__(self, api: APIClient):
        self._api = api

    def registry_login(self, addr: str, username: str, password: str) -> Dict[str, Any]:
        """Validate credentials against a registry.

        A "Login Succeeded" status means the credentials are valid. The SDK
        keeps them for later pulls and pushes through this client, but the
        daemon host's docker config is not changed; use ``login`` for that.
        """
        result = self._api.login(
            username=username, password=password, registry=addr, reauth=True
        )
        logger.info("Registry login", registry=addr, status=result.get("Status"))
        return result

    def login(self, addr: str, username: str, password: str) -> str:
        """Run ``docker login`` so the CLI config stores the credentials.

        The password is passed on stdin.

        Returns:
            Combined stdout and stderr of the CLI

        Raises:
            OperationFailedError: The docker CLI is missing or the login failed
        """
        binary = shutil.which(settings.docker_binary)
        if binary is None:
            raise OperationFailedError(f"{settings.docker_binary} command is not found")

        proc = subprocess.run(
            [binary, "login", f"--username={username}", "--password-stdin", addr],
            input=password,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            check=False,
        )
        if proc.returncode != 0:
            logger.error("docker login failed", registry=addr, exit_code=proc.returncode)
            raise OperationFailedError(
                f"docker login to {addr} failed: {proc.stdout.strip()}"
            )
        logger.info("docker login succeeded", registry=addr)
        return proc.stdout

    def ping(self) -> bool:
        return self._api.ping()

    def info(self) -> Dict[str, Any]:
        return self._api.info()

    def version(self) -> Dict[str, Any]:
        return self._api.version()

    def disk_usage(self) -> Tuple[Dict[str, Any], DiskUsageSummary]:
        """Disk usage of images, containers and local volumes.

        Returns:
            Tuple of (raw engine response, condensed summary)
        """
        raw = self._api.df()
        return raw, DiskUsageSummary.from_disk_usage(raw)
