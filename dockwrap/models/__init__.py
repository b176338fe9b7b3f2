"""Data models for dockwrap."""

from .container import (
    CommitOptions,
    ContainerCreateConfig,
    ContainerListOptions,
    ExecConfig,
    LogsOptions,
    RemoveOptions,
    RestartPolicy,
    parse_port_specs,
)
from .errors import (
    DaemonStreamError,
    DockwrapException,
    ErrorDetail,
    ErrorType,
    OperationFailedError,
    ProgressDecodeError,
    ResourceConflictError,
    ResourceNotFoundError,
    ServiceUnavailableError,
    StreamDecodeError,
    ValidationError,
)
from .image import ImageBuildOptions, ImageListOptions, ImageRemoveOptions, RegistryAuth
from .network import IPNet, NetworkCreateOptions, NetworkDriver, NetworkScope
from .progress import (
    BuildMessage,
    ProgressRecord,
    PullPushMessage,
    iter_json_lines,
    parse_build_message,
    parse_pull_push_message,
)
from .system import ContainerUsage, DiskUsageSummary, ImageUsage, LocalVolumeUsage
from .volume import VolumeCreateOptions

__all__ = [
    # Container options
    "CommitOptions",
    "ContainerCreateConfig",
    "ContainerListOptions",
    "ExecConfig",
    "LogsOptions",
    "RemoveOptions",
    "RestartPolicy",
    "parse_port_specs",
    # Image options
    "ImageBuildOptions",
    "ImageListOptions",
    "ImageRemoveOptions",
    "RegistryAuth",
    # Network options
    "IPNet",
    "NetworkCreateOptions",
    "NetworkDriver",
    "NetworkScope",
    # Volume options
    "VolumeCreateOptions",
    # Progress records
    "BuildMessage",
    "ProgressRecord",
    "PullPushMessage",
    "iter_json_lines",
    "parse_build_message",
    "parse_pull_push_message",
    # Disk usage
    "ContainerUsage",
    "DiskUsageSummary",
    "ImageUsage",
    "LocalVolumeUsage",
    # Errors
    "DaemonStreamError",
    "DockwrapException",
    "ErrorDetail",
    "ErrorType",
    "OperationFailedError",
    "ProgressDecodeError",
    "ResourceConflictError",
    "ResourceNotFoundError",
    "ServiceUnavailableError",
    "StreamDecodeError",
    "ValidationError",
]
