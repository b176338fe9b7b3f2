"""Configuration management for dockwrap.

This module provides a single Settings class with flat fields, plus grouped
views over them.

Usage:
    from dockwrap.config import settings

    # Access grouped settings
    settings.docker.docker_host
    settings.logging.log_level

    # Or use flat access
    settings.docker_host
    settings.log_level
"""

from typing import List, Literal, Optional

import structlog
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .docker import DockerConfig
from .logging import LoggingConfig


class Settings(BaseSettings):
    """Library settings with environment variable support.

    Values come from the process environment or a local ``.env`` file.
    ``DOCKER_HOST`` and ``DOCKER_API_VERSION`` map directly onto the
    matching fields, so the usual Docker environment keeps working.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Docker connection
    docker_host: Optional[str] = Field(
        default=None,
        description="Engine URL; falls back to DOCKER_HOST/DOCKER_TLS_VERIFY/DOCKER_CERT_PATH",
    )
    docker_api_version: str = Field(
        default="auto", description="API version, 'auto' negotiates with the daemon"
    )
    docker_timeout: int = Field(default=60, ge=1, le=3600)
    docker_binary: str = Field(
        default="docker", description="docker CLI used for daemon-side registry login"
    )

    # Exec
    exec_default_cmd: List[str] = Field(
        default_factory=lambda: ["bash"],
        description="Shell started by exec sessions when no command is given",
    )
    exec_socket_timeout: Optional[float] = Field(default=None, gt=0)

    # Streams
    stream_chunk_size: int = Field(
        default=4096,
        ge=1,
        le=1048576,
        description="Bytes read per call when demultiplexing a stream",
    )

    # Container readiness polling
    container_ready_timeout: float = Field(default=2.0, gt=0, le=300)
    container_ready_interval: float = Field(default=0.05, gt=0, le=10)

    # Logging
    log_level: str = Field(default="INFO")
    log_format: Literal["json", "console"] = Field(default="json")

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v):
        """Upper-case the level name and reject unknown levels."""
        level = v.upper()
        if level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("exec_default_cmd")
    @classmethod
    def require_exec_cmd(cls, v):
        if not v:
            structlog.get_logger("config").warning(
                "EXEC_DEFAULT_CMD is empty; falling back to bash"
            )
            return ["bash"]
        return v

    @property
    def docker(self) -> DockerConfig:
        """Access Docker configuration group."""
        return DockerConfig(
            docker_host=self.docker_host,
            docker_api_version=self.docker_api_version,
            docker_timeout=self.docker_timeout,
            docker_binary=self.docker_binary,
            exec_default_cmd=self.exec_default_cmd,
            exec_socket_timeout=self.exec_socket_timeout,
            stream_chunk_size=self.stream_chunk_size,
            container_ready_timeout=self.container_ready_timeout,
            container_ready_interval=self.container_ready_interval,
        )

    @property
    def logging(self) -> LoggingConfig:
        """Access logging configuration group."""
        return LoggingConfig(log_level=self.log_level, log_format=self.log_format)


# Global settings instance
settings = Settings()

__all__ = [
    "Settings",
    "settings",
    "DockerConfig",
    "LoggingConfig",
]
