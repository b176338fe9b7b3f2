"""Option objects for network operations."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from docker.types import IPAMConfig, IPAMPool


class NetworkDriver(str, Enum):
    """Built-in network drivers."""

    BRIDGE = "bridge"
    OVERLAY = "overlay"
    IPVLAN = "ipvlan"
    MACVLAN = "macvlan"


class NetworkScope(str, Enum):
    """Network scopes."""

    LOCAL = "local"
    SWARM = "swarm"
    GLOBAL = "global"


@dataclass
class IPNet:
    """Address management for one subnet.

    Attributes:
        subnet: CIDR, e.g. "172.16.0.0/24"
        gateway: IPv4 or IPv6 gateway for the subnet, e.g. "172.16.0.1"
        ip_range: Sub-range containers are allocated from, e.g. "172.16.0.0/25"
    """

    subnet: str
    gateway: Optional[str] = None
    ip_range: Optional[str] = None

    def to_ipam(self) -> IPAMConfig:
        pool = IPAMPool(
            subnet=self.subnet,
            gateway=self.gateway or None,
            iprange=self.ip_range or None,
        )
        return IPAMConfig(pool_configs=[pool])


@dataclass
class NetworkCreateOptions:
    """Options for creating a network."""

    driver: Optional[NetworkDriver] = None
    scope: Optional[NetworkScope] = None
    ip_net: Optional[IPNet] = None
    enable_ipv6: bool = False
    internal: bool = False
    attachable: bool = False
    ingress: bool = False
    options: Optional[Dict[str, str]] = None
    labels: Optional[Dict[str, str]] = None

    def to_kwargs(self) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {
            "enable_ipv6": self.enable_ipv6,
            "internal": self.internal,
            "options": self.options,
            "labels": self.labels,
        }
        if self.driver is not None:
            kwargs["driver"] = NetworkDriver(self.driver).value
        if self.scope is not None:
            kwargs["scope"] = NetworkScope(self.scope).value
        if self.ip_net is not None:
            kwargs["ipam"] = self.ip_net.to_ipam()
        if self.attachable:
            kwargs["attachable"] = True
        if self.ingress:
            kwargs["ingress"] = True
        return kwargs
