"""Option objects for container operations.

Each dataclass knows how to render itself into the keyword arguments of
the matching ``docker.APIClient`` call.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from docker.utils.ports import split_port

from ..utils.filters import merge_filters

Binds = Union[Dict[str, str], List[str]]
Env = Union[Dict[str, str], List[str]]
LogTime = Union[str, int, datetime]


def env_list(env: Optional[Env]) -> Optional[List[str]]:
    """Render an env mapping as ``KEY=value`` strings."""
    if env is None:
        return None
    if isinstance(env, dict):
        return [f"{k}={v}" for k, v in env.items()]
    return list(env)


@dataclass
class ContainerListOptions:
    """Options for listing containers."""

    all: bool = False
    size: bool = False
    latest: bool = False
    limit: int = -1
    filters: Optional[Dict[str, Any]] = None

    def to_kwargs(self) -> Dict[str, Any]:
        return {
            "all": self.all,
            "size": self.size,
            "latest": self.latest,
            "limit": self.limit,
            "filters": merge_filters(self.filters),
        }


@dataclass
class RemoveOptions:
    """Options for removing a container."""

    remove_volumes: bool = False
    remove_links: bool = False
    force: bool = False

    def to_kwargs(self) -> Dict[str, Any]:
        return {"v": self.remove_volumes, "link": self.remove_links, "force": self.force}


@dataclass
class ExecConfig:
    """Exec instance configuration.

    ``cmd`` defaults to ``settings.exec_default_cmd`` when left empty.
    """

    user: str = ""
    privileged: bool = False
    tty: bool = False
    detach: bool = False
    env: Optional[Env] = None
    working_dir: Optional[str] = None
    cmd: Optional[List[str]] = None


@dataclass
class CommitOptions:
    """Options for committing a container to an image.

    ``changes`` are Dockerfile instructions applied while committing,
    e.g. ``["CMD echo"]``. The container is paused during the commit
    unless ``pause`` is False.
    """

    author: Optional[str] = None
    comment: Optional[str] = None
    changes: Optional[List[str]] = None
    pause: bool = True


def _log_time(value: Optional[LogTime]) -> Optional[Union[str, int]]:
    if isinstance(value, datetime):
        return int(value.timestamp())
    return value


@dataclass
class LogsOptions:
    """Options for fetching container logs.

    Attributes:
        tail: Number of lines to show from the end of the logs, or "all"
        since: Unix timestamp, datetime, or a value the engine accepts
        until: Same as since
    """

    tail: Union[str, int] = "all"
    follow: bool = False
    since: Optional[LogTime] = None
    until: Optional[LogTime] = None
    timestamps: bool = False
    details: bool = False
    stdout: bool = True
    stderr: bool = True

    def to_params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "stdout": int(self.stdout),
            "stderr": int(self.stderr),
            "follow": int(self.follow),
            "timestamps": int(self.timestamps),
            "details": int(self.details),
            "tail": str(self.tail),
        }
        since = _log_time(self.since)
        if since is not None:
            params["since"] = since
        until = _log_time(self.until)
        if until is not None:
            params["until"] = until
        return params


@dataclass
class RestartPolicy:
    """Container restart policy.

    ``name`` is one of "", "no", "always", "unless-stopped", "on-failure".
    ``maximum_retry_count`` only applies to "on-failure".
    """

    name: str = ""
    maximum_retry_count: int = 0

    @classmethod
    def always(cls) -> "RestartPolicy":
        return cls(name="always")

    @classmethod
    def none(cls) -> "RestartPolicy":
        return cls(name="")

    @classmethod
    def unless_stopped(cls) -> "RestartPolicy":
        return cls(name="unless-stopped")

    @classmethod
    def on_failure(cls, retry: int) -> "RestartPolicy":
        return cls(name="on-failure", maximum_retry_count=retry)

    def to_dict(self) -> Dict[str, Any]:
        return {"Name": self.name, "MaximumRetryCount": self.maximum_retry_count}


PortBindings = Dict[str, Any]


def parse_port_specs(specs: Sequence[str]) -> Tuple[List[Tuple[int, str]], PortBindings]:
    """Parse ``[ip:]hostPort:containerPort[/proto]`` strings.

    Ranges such as ``8000-8001:80-81`` are expanded.

    Returns:
        Tuple of (exposed ports as (port, proto) pairs, port bindings keyed
        by "port/proto" suitable for ``create_host_config``)
    """
    exposed: List[Tuple[int, str]] = []
    bindings: PortBindings = {}
    for spec in specs:
        internal, external = split_port(spec)
        if external is None:
            external = [None] * len(internal)
        for container_port, host in zip(internal, external):
            port, _, proto = container_port.partition("/")
            proto = proto or "tcp"
            key = f"{port}/{proto}"
            if (int(port), proto) not in exposed:
                exposed.append((int(port), proto))
            if host is None:
                bindings.setdefault(key, [])
            else:
                bindings.setdefault(key, []).append(host)
    return exposed, {k: (v or None) for k, v in bindings.items()}


@dataclass
class ContainerCreateConfig:
    """Container, host and network configuration for create.

    Attributes:
        env: Mapping, or a list of "KEY=value" strings
        binds: Mapping of host-src (or volume name) to
            "container-dest[:options]", or a list of "host:container[:options]"
        port_bindings: Mapping as accepted by create_host_config, e.g.
            {"80/tcp": 8080}; see parse_port_specs
        cpus: Number of CPUs, fractional values allowed
        memory_limit: Memory limit in bytes
        networks: Network name to endpoint options (aliases, ipv4_address...)
    """

    hostname: Optional[str] = None
    attach_stdin: bool = False
    attach_stdout: bool = False
    attach_stderr: bool = False
    tty: bool = False
    user: Optional[str] = None
    env: Optional[Env] = None
    cmd: Optional[List[str]] = None
    working_dir: Optional[str] = None
    entrypoint: Optional[List[str]] = None
    labels: Optional[Dict[str, str]] = None
    stop_timeout: Optional[int] = None
    exposed_ports: Optional[List[Tuple[int, str]]] = None

    binds: Optional[Binds] = None
    network_mode: Optional[str] = None
    port_bindings: Optional[PortBindings] = None
    restart_policy: Optional[RestartPolicy] = None
    auto_remove: bool = False
    privileged: bool = False
    publish_all_ports: bool = False
    cpus: Optional[float] = None
    memory_limit: Optional[int] = None
    pid_mode: Optional[str] = None

    networks: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    platform: Optional[str] = None

    def with_port_specs(self, specs: Sequence[str]) -> "ContainerCreateConfig":
        """Add exposed ports and bindings parsed from CLI-style specs."""
        exposed, bindings = parse_port_specs(specs)
        self.exposed_ports = (self.exposed_ports or []) + [
            p for p in exposed if p not in (self.exposed_ports or [])
        ]
        self.port_bindings = {**(self.port_bindings or {}), **bindings}
        return self

    def bind_list(self) -> Optional[List[str]]:
        if self.binds is None:
            return None
        if isinstance(self.binds, dict):
            return [f"{src}:{dest}" for src, dest in self.binds.items()]
        return list(self.binds)

    def host_config_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for ``APIClient.create_host_config``."""
        kwargs: Dict[str, Any] = {
            "auto_remove": self.auto_remove,
            "privileged": self.privileged,
            "publish_all_ports": self.publish_all_ports,
        }
        binds = self.bind_list()
        if binds is not None:
            kwargs["binds"] = binds
        if self.network_mode:
            kwargs["network_mode"] = self.network_mode
        if self.port_bindings:
            kwargs["port_bindings"] = self.port_bindings
        if self.restart_policy is not None:
            kwargs["restart_policy"] = self.restart_policy.to_dict()
        if self.cpus is not None:
            kwargs["nano_cpus"] = int(self.cpus * 1e9)
        if self.memory_limit is not None:
            kwargs["mem_limit"] = self.memory_limit
        if self.pid_mode:
            kwargs["pid_mode"] = self.pid_mode
        return kwargs

    def container_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for ``APIClient.create_container``.

        The SDK attaches stdout/stderr unless ``detach`` is set and ties
        AttachStdin to ``stdin_open``, so the attach flags map onto those.
        """
        kwargs: Dict[str, Any] = {
            "command": self.cmd,
            "hostname": self.hostname,
            "user": self.user,
            "environment": env_list(self.env),
            "working_dir": self.working_dir,
            "entrypoint": self.entrypoint,
            "labels": self.labels,
            "tty": self.tty,
            "stdin_open": self.attach_stdin,
            "detach": not (self.attach_stdout or self.attach_stderr),
            "ports": self.exposed_ports,
        }
        if self.stop_timeout is not None:
            kwargs["stop_timeout"] = self.stop_timeout
        if self.platform:
            kwargs["platform"] = self.platform
        return kwargs
