"""Option objects for image operations."""

import base64
import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..utils.filters import merge_filters


@dataclass
class ImageListOptions:
    """Options for listing images."""

    all: bool = False
    filters: Optional[Dict[str, Any]] = None

    def to_kwargs(self) -> Dict[str, Any]:
        return {"all": self.all, "filters": merge_filters(self.filters)}


@dataclass
class ImageBuildOptions:
    """Options for building an image.

    Attributes:
        dockerfile: Path relative to the build context, "Dockerfile" when empty
        remove_intermediate: Remove intermediate containers after a
            successful build
        force_remove: Always remove intermediate containers
    """

    tag: Optional[str] = None
    no_cache: bool = False
    network_mode: Optional[str] = None
    remove_intermediate: bool = False
    force_remove: bool = False
    pull_parent: bool = False
    dockerfile: Optional[str] = None
    build_args: Optional[Dict[str, str]] = None
    labels: Optional[Dict[str, str]] = None
    quiet: bool = False

    def with_image_name(self, repo: str, tag: str) -> "ImageBuildOptions":
        self.tag = f"{repo}:{tag}"
        return self

    def to_kwargs(self) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {
            "tag": self.tag,
            "nocache": self.no_cache,
            "rm": self.remove_intermediate or self.force_remove,
            "forcerm": self.force_remove,
            "pull": self.pull_parent,
            "quiet": self.quiet,
            "buildargs": self.build_args,
            "labels": self.labels,
        }
        if self.network_mode:
            kwargs["network_mode"] = self.network_mode
        if self.dockerfile:
            kwargs["dockerfile"] = self.dockerfile
        return kwargs


@dataclass
class RegistryAuth:
    """Registry credentials for pull and push."""

    username: str
    password: str
    server_address: Optional[str] = None

    def to_auth_config(self) -> Dict[str, str]:
        """Auth config dict in the form the SDK expects."""
        config = {"username": self.username, "password": self.password}
        if self.server_address:
            config["serveraddress"] = self.server_address
        return config

    def encode(self) -> str:
        """Base64url encoded ``X-Registry-Auth`` header value."""
        raw = json.dumps(self.to_auth_config()).encode("utf-8")
        return base64.urlsafe_b64encode(raw).decode("ascii")


@dataclass
class ImageRemoveOptions:
    """Options for removing an image.

    Untagged parents are kept unless ``prune_children`` is set.
    """

    force: bool = False
    prune_children: bool = False

    def to_kwargs(self) -> Dict[str, Any]:
        return {"force": self.force, "noprune": not self.prune_children}


def dangling_filter(all_unused: bool) -> Optional[Dict[str, Any]]:
    """Prune filter selecting every unused image rather than dangling ones only."""
    return {"dangling": "false"} if all_unused else None
