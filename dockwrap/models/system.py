"""Disk usage summary models.

Condenses the engine's ``/system/df`` payload into per-image, per-container
and per-volume rows with human readable sizes.
"""

from typing import Any, Dict, List

from pydantic import BaseModel, Field

from ..utils.humanize import human_size

UNTAGGED_IMAGE = "<none>:<none>"


class ImageUsage(BaseModel):
    """Disk usage of one image tag."""

    image_name: str
    size: str
    shared_size: str
    containers: int = 0


class ContainerUsage(BaseModel):
    """Disk usage of one container's writable layer."""

    container_name: str
    image_name: str
    command: str = ""
    local_volumes: int = 0
    size: str
    status: str = ""


class LocalVolumeUsage(BaseModel):
    """Disk usage of one local volume."""

    volume_name: str
    links: int = 0
    size: str


class DiskUsageSummary(BaseModel):
    """Images, containers and local volumes usage."""

    images: List[ImageUsage] = Field(default_factory=list)
    containers: List[ContainerUsage] = Field(default_factory=list)
    local_volumes: List[LocalVolumeUsage] = Field(default_factory=list)

    @classmethod
    def from_disk_usage(cls, df: Dict[str, Any]) -> "DiskUsageSummary":
        """Build a summary from the raw ``df()`` response."""
        return cls(
            images=_image_usage(df.get("Images") or []),
            containers=_container_usage(df.get("Containers") or []),
            local_volumes=_volume_usage(df.get("Volumes") or []),
        )

    def to_json(self) -> str:
        return self.model_dump_json()


def _image_usage(images: List[Dict[str, Any]]) -> List[ImageUsage]:
    rows = []
    for image in images:
        # one row per tag
        for name in image.get("RepoTags") or [UNTAGGED_IMAGE]:
            rows.append(
                ImageUsage(
                    image_name=name,
                    size=human_size(image.get("Size")),
                    shared_size=human_size(image.get("SharedSize")),
                    containers=max(image.get("Containers") or 0, 0),
                )
            )
    return rows


def _container_usage(containers: List[Dict[str, Any]]) -> List[ContainerUsage]:
    rows = []
    for container in containers:
        names = container.get("Names") or [""]
        mounts = container.get("Mounts") or []
        rows.append(
            ContainerUsage(
                container_name=names[0].lstrip("/"),
                image_name=container.get("Image") or "",
                command=container.get("Command") or "",
                local_volumes=sum(1 for m in mounts if m.get("Type") == "volume"),
                size=human_size(container.get("SizeRw")),
                status=container.get("Status") or "",
            )
        )
    return rows


def _volume_usage(volumes: List[Dict[str, Any]]) -> List[LocalVolumeUsage]:
    rows = []
    for volume in volumes:
        usage = volume.get("UsageData") or {}
        rows.append(
            LocalVolumeUsage(
                volume_name=volume.get("Name") or "",
                links=max(usage.get("RefCount") or 0, 0),
                size=human_size(usage.get("Size")),
            )
        )
    return rows
