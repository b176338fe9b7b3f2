"""Volume management."""

import json
from typing import Any, Dict, Optional, Tuple

import structlog
from docker import APIClient
from docker.errors import NotFound

from ..models.errors import ResourceConflictError
from ..models.volume import VolumeCreateOptions
from ..utils.filters import merge_filters

logger = structlog.get_logger(__name__)


class VolumeManager:
    """Manages volumes."""

    def __init__(self, api: APIClient):
        self._api = api

    def list(self, filters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """List volumes.

        Returns:
            The engine response with "Volumes" and "Warnings"
        """
        return self._api.volumes(filters=merge_filters(filters))

    def inspect(self, volume: str) -> Tuple[Dict[str, Any], str]:
        result = self._api.inspect_volume(volume)
        return result, json.dumps(result)

    def create(self, name: str, options: Optional[VolumeCreateOptions] = None) -> Dict[str, Any]:
        """Create a named volume.

        The engine silently returns an existing volume of the same name;
        this refuses instead.

        Raises:
            ResourceConflictError: A volume with this name already exists
        """
        try:
            self._api.inspect_volume(name)
        except NotFound:
            pass
        else:
            raise ResourceConflictError("volume", name)

        options = options or VolumeCreateOptions()
        result = self._api.create_volume(name, **options.to_kwargs())
        logger.info("Volume created", volume=name, driver=result.get("Driver"))
        return result

    def remove(self, volume: str, force: bool = False) -> None:
        self._api.remove_volume(volume, force=force)
        logger.info("Volume removed", volume=volume, force=force)

    def prune(self, filters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Remove unused local volumes."""
        result = self._api.prune_volumes(filters=merge_filters(filters))
        logger.info(
            "Volumes pruned",
            deleted=len(result.get("VolumesDeleted") or []),
            space_reclaimed=result.get("SpaceReclaimed"),
        )
        return result
