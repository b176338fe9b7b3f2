"""Option objects for volume operations."""

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class VolumeCreateOptions:
    """Options for creating a volume."""

    driver: Optional[str] = None
    driver_opts: Optional[Dict[str, str]] = None
    labels: Optional[Dict[str, str]] = None

    def to_kwargs(self) -> Dict[str, Any]:
        return {
            "driver": self.driver,
            "driver_opts": self.driver_opts,
            "labels": self.labels,
        }
