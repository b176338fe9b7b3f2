"""Network management."""

import json
from typing import Any, Dict, List, Optional, Tuple

import structlog
from docker import APIClient

from ..models.network import NetworkCreateOptions, NetworkScope
from ..utils.filters import merge_filters

logger = structlog.get_logger(__name__)


class NetworkManager:
    """Manages networks."""

    def __init__(self, api: APIClient):
        self._api = api

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        return self._api.networks(filters=merge_filters(filters))

    def inspect(
        self,
        target: str,
        verbose: bool = False,
        scope: Optional[NetworkScope] = None,
    ) -> Tuple[Dict[str, Any], str]:
        """Inspect a network by name or id.

        Args:
            verbose: Include service details for swarm networks
            scope: Only match networks of this scope

        Returns:
            Tuple of (decoded details, the same details as JSON text)
        """
        result = self._api.inspect_network(
            target,
            verbose=verbose or None,
            scope=NetworkScope(scope).value if scope else None,
        )
        return result, json.dumps(result)

    def create(self, name: str, options: Optional[NetworkCreateOptions] = None) -> Dict[str, Any]:
        """Create a network.

        Returns:
            The create response, with "Id" and "Warning"
        """
        options = options or NetworkCreateOptions()
        result = self._api.create_network(name, **options.to_kwargs())
        logger.info("Network created", network=name, network_id=result.get("Id", "")[:12])
        if result.get("Warning"):
            logger.warning("Network create warning", network=name, warning=result["Warning"])
        return result

    def remove(self, target: str) -> None:
        self._api.remove_network(target)
        logger.info("Network removed", network=target)

    def prune(self, filters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Remove unused networks."""
        result = self._api.prune_networks(filters=merge_filters(filters))
        logger.info("Networks pruned", deleted=len(result.get("NetworksDeleted") or []))
        return result
