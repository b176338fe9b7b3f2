"""Docker connection configuration."""

from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class DockerConfig(BaseSettings):
    """Docker engine connection and client behaviour settings."""

    docker_host: Optional[str] = Field(default=None, alias="docker_host")
    docker_api_version: str = Field(default="auto", alias="docker_api_version")
    docker_timeout: int = Field(default=60, ge=1, le=3600, alias="docker_timeout")
    docker_binary: str = Field(default="docker", alias="docker_binary")

    exec_default_cmd: List[str] = Field(
        default_factory=lambda: ["bash"], alias="exec_default_cmd"
    )
    exec_socket_timeout: Optional[float] = Field(
        default=None, gt=0, alias="exec_socket_timeout"
    )

    stream_chunk_size: int = Field(
        default=4096, ge=1, le=1048576, alias="stream_chunk_size"
    )

    container_ready_timeout: float = Field(
        default=2.0, gt=0, le=300, alias="container_ready_timeout"
    )
    container_ready_interval: float = Field(
        default=0.05, gt=0, le=10, alias="container_ready_interval"
    )

    class Config:
        env_prefix = ""
        extra = "ignore"
