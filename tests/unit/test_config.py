"""Unit tests for settings and client construction."""

from unittest.mock import MagicMock, patch

import pytest
from docker.errors import DockerException
from pydantic import ValidationError as PydanticValidationError

from dockwrap.config import DockerConfig, Settings
from dockwrap.models.errors import ErrorType, ServiceUnavailableError
from dockwrap.services.container.client import DockerClientFactory
from dockwrap.services.facade import DockerFacade


class TestSettings:
    """Test settings parsing."""

    def test_defaults(self, monkeypatch):
        for var in ("DOCKER_HOST", "DOCKER_API_VERSION", "EXEC_DEFAULT_CMD", "STREAM_CHUNK_SIZE"):
            monkeypatch.delenv(var, raising=False)
        settings = Settings(_env_file=None)
        assert settings.docker_host is None
        assert settings.docker_api_version == "auto"
        assert settings.exec_default_cmd == ["bash"]
        assert settings.stream_chunk_size == 4096

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("DOCKER_HOST", "tcp://10.0.0.5:2376")
        monkeypatch.setenv("EXEC_DEFAULT_CMD", '["sh", "-l"]')
        monkeypatch.setenv("LOG_LEVEL", "warning")
        settings = Settings(_env_file=None)
        assert settings.docker_host == "tcp://10.0.0.5:2376"
        assert settings.exec_default_cmd == ["sh", "-l"]
        assert settings.log_level == "WARNING"

    def test_empty_exec_cmd_falls_back(self):
        settings = Settings(_env_file=None, exec_default_cmd=[])
        assert settings.exec_default_cmd == ["bash"]

    def test_unknown_log_level(self):
        with pytest.raises(PydanticValidationError):
            Settings(_env_file=None, log_level="loud")

    def test_chunk_size_bounds(self):
        with pytest.raises(PydanticValidationError):
            Settings(_env_file=None, stream_chunk_size=0)

    def test_grouped_views(self):
        settings = Settings(
            _env_file=None, docker_host="unix:///run/docker.sock", log_format="console"
        )
        assert settings.docker.docker_host == "unix:///run/docker.sock"
        assert settings.docker.docker_timeout == settings.docker_timeout
        assert settings.logging.log_format == "console"


class TestDockerClientFactory:
    """Test API client construction."""

    @patch("dockwrap.services.container.client.docker.APIClient")
    def test_explicit_host(self, mock_client_cls):
        config = DockerConfig(docker_host="tcp://10.0.0.5:2375", docker_timeout=30)
        client = DockerClientFactory.create(config)
        assert client is mock_client_cls.return_value
        mock_client_cls.assert_called_once_with(
            base_url="tcp://10.0.0.5:2375", version="auto", timeout=30
        )

    @patch("dockwrap.services.container.client.kwargs_from_env")
    @patch("dockwrap.services.container.client.docker.APIClient")
    def test_environment_host(self, mock_client_cls, mock_from_env, monkeypatch):
        monkeypatch.delenv("DOCKER_HOST", raising=False)
        mock_from_env.return_value = {"base_url": "https://remote:2376", "tls": "tls-config"}
        DockerClientFactory.create(DockerConfig(docker_api_version="1.45"))
        mock_client_cls.assert_called_once_with(
            base_url="https://remote:2376", tls="tls-config", version="1.45", timeout=60
        )

    @patch("dockwrap.services.container.client.docker.APIClient")
    def test_unavailable(self, mock_client_cls):
        mock_client_cls.side_effect = DockerException("Error while fetching server API version")
        with pytest.raises(ServiceUnavailableError) as exc_info:
            DockerClientFactory.create(DockerConfig(docker_host="unix:///nope.sock"))
        assert exc_info.value.error_type == ErrorType.SERVICE_UNAVAILABLE
        assert exc_info.value.to_dict()["error_type"] == "service_unavailable"


class TestDockerFacade:
    """Test the combined entry point."""

    def test_managers_share_client(self, mock_api):
        facade = DockerFacade(api=mock_api)
        assert facade.containers.executor is facade.executor
        assert facade.images._api is mock_api
        assert facade.volumes._api is mock_api

    def test_context_manager_closes(self, mock_api):
        with DockerFacade(api=mock_api) as facade:
            facade.system.ping()
        mock_api.close.assert_called_once()

    @patch("dockwrap.services.facade.DockerClientFactory")
    def test_builds_client_from_config(self, mock_factory):
        mock_factory.create.return_value = MagicMock()
        config = DockerConfig(docker_host="tcp://h:2375")
        facade = DockerFacade(config=config)
        mock_factory.create.assert_called_once_with(config)
        assert facade.api is mock_factory.create.return_value
