"""Docker client factory and initialization."""

from typing import Optional

import docker
import structlog
from docker.errors import DockerException
from docker.utils import kwargs_from_env

from ...config import DockerConfig, settings
from ...models.errors import ServiceUnavailableError

logger = structlog.get_logger(__name__)


class DockerClientFactory:
    """Creates low-level Docker API clients from settings."""

    @staticmethod
    def create(config: Optional[DockerConfig] = None) -> docker.APIClient:
        """Create an API client.

        Uses ``docker_host`` when set, otherwise the standard DOCKER_HOST,
        DOCKER_TLS_VERIFY and DOCKER_CERT_PATH environment variables.
        ``docker_api_version="auto"`` negotiates the version with the daemon.

        Raises:
            ServiceUnavailableError: The client could not be constructed
        """
        config = config or settings.docker
        if config.docker_host:
            kwargs = {"base_url": config.docker_host}
        else:
            kwargs = kwargs_from_env()
        kwargs["version"] = config.docker_api_version
        kwargs["timeout"] = config.docker_timeout

        try:
            client = docker.APIClient(**kwargs)
        except DockerException as e:
            logger.error(
                "Failed to initialize Docker client",
                base_url=kwargs.get("base_url"),
                error=str(e),
            )
            raise ServiceUnavailableError("docker", f"Docker client unavailable: {e}") from e

        logger.debug(
            "Docker client created",
            base_url=client.base_url,
            api_version=client.api_version,
        )
        return client
