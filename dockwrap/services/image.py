"""Image management."""

import json
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple

import structlog
from docker import APIClient
from docker.utils import parse_repository_tag

from ..models.errors import ResourceNotFoundError, ValidationError
from ..models.image import (
    ImageBuildOptions,
    ImageListOptions,
    ImageRemoveOptions,
    RegistryAuth,
    dangling_filter,
)
from ..models.progress import (
    ProgressRecord,
    iter_json_lines,
    parse_build_message,
    parse_pull_push_message,
)
from ..utils.filters import merge_filters
from .stream.progress import MessageParser

logger = structlog.get_logger(__name__)


def _progress(
    chunks: Iterable[bytes], parse: Callable[[str], ProgressRecord]
) -> Iterator[str]:
    parser = MessageParser()
    for line in iter_json_lines(chunks):
        yield parser.append(parse(line))


class ImageManager:
    """Manages images: listing, transfer, builds and cleanup.

    Pull, push and build return the engine's raw JSON-lines stream; the
    ``*_progress`` variants render it through a MessageParser instead.
    """

    def __init__(self, api: APIClient):
        self._api = api

    def _get_image_by_name(self, name: str) -> Dict[str, Any]:
        images = self.list(ImageListOptions(filters={"reference": name}))
        if not images:
            raise ResourceNotFoundError("image", name)
        return images[0]

    def _resolve(self, target: str) -> str:
        # references with a registry or namespace part are looked up by name
        if "/" in target:
            return self._get_image_by_name(target)["Id"]
        return target

    def list(self, options: Optional[ImageListOptions] = None) -> List[Dict[str, Any]]:
        options = options or ImageListOptions()
        return self._api.images(**options.to_kwargs())

    def inspect(self, target: str) -> Tuple[Dict[str, Any], str]:
        """Inspect an image by name (repo:tag) or id.

        Returns:
            Tuple of (decoded details, the same details as JSON text)

        Raises:
            ResourceNotFoundError: A name containing "/" matched no image
        """
        result = self._api.inspect_image(self._resolve(target))
        return result, json.dumps(result)

    def pull(self, image: str, auth: Optional[RegistryAuth] = None) -> Iterator[bytes]:
        """Start a pull and return the raw progress stream."""
        repository, tag = parse_repository_tag(image)
        logger.info("Pulling image", image=image)
        return self._api.pull(
            repository,
            tag=tag,
            stream=True,
            decode=False,
            auth_config=auth.to_auth_config() if auth else None,
        )

    def push(self, image: str, auth: Optional[RegistryAuth] = None) -> Iterator[bytes]:
        """Start a push and return the raw progress stream."""
        repository, tag = parse_repository_tag(image)
        logger.info("Pushing image", image=image)
        return self._api.push(
            repository,
            tag=tag,
            stream=True,
            decode=False,
            auth_config=auth.to_auth_config() if auth else None,
        )

    def build(self, path: str, options: Optional[ImageBuildOptions] = None) -> Iterator[bytes]:
        """Build an image and return the raw progress stream.

        Args:
            path: Directory holding the Dockerfile and build context

        Raises:
            ValidationError: The Dockerfile does not exist
        """
        options = options or ImageBuildOptions()
        dockerfile = Path(path) / (options.dockerfile or "Dockerfile")
        if not dockerfile.is_file():
            raise ValidationError(f"{dockerfile} does not exist")
        logger.info("Building image", path=path, tag=options.tag)
        return self._api.build(path=path, decode=False, **options.to_kwargs())

    def pull_progress(self, image: str, auth: Optional[RegistryAuth] = None) -> Iterator[str]:
        """Pull and yield the aggregated progress view after every event.

        Raises:
            ProgressDecodeError: The engine sent a line that is not a JSON object
        """
        return _progress(self.pull(image, auth), parse_pull_push_message)

    def push_progress(self, image: str, auth: Optional[RegistryAuth] = None) -> Iterator[str]:
        """Push and yield the aggregated progress view. See pull_progress."""
        return _progress(self.push(image, auth), parse_pull_push_message)

    def build_progress(
        self, path: str, options: Optional[ImageBuildOptions] = None
    ) -> Iterator[str]:
        """Build and yield the aggregated progress view. See pull_progress."""
        return _progress(self.build(path, options), parse_build_message)

    def tag(self, source: str, target: str) -> None:
        repository, tag = parse_repository_tag(target)
        self._api.tag(source, repository, tag=tag)

    def remove(
        self, target: str, options: Optional[ImageRemoveOptions] = None
    ) -> List[Dict[str, Any]]:
        """Remove an image by name or id.

        Returns:
            The Untagged/Deleted items reported by the engine
        """
        options = options or ImageRemoveOptions()
        result = self._api.remove_image(self._resolve(target), **options.to_kwargs())
        logger.info("Image removed", image=target, force=options.force)
        return result

    def prune(
        self, filters: Optional[Dict[str, Any]] = None, all_unused: bool = False
    ) -> Dict[str, Any]:
        """Remove dangling images, or every unused image when ``all_unused``."""
        result = self._api.prune_images(
            filters=merge_filters(dangling_filter(all_unused), filters)
        )
        logger.info(
            "Images pruned",
            deleted=len(result.get("ImagesDeleted") or []),
            space_reclaimed=result.get("SpaceReclaimed"),
        )
        return result

    def save(self, image: str, save_to: str) -> None:
        """Save an image as a tar file."""
        stream = self._api.get_image(image)
        with open(save_to, "wb") as f:
            for chunk in stream:
                f.write(chunk)

    def load(self, load_from: str) -> Iterator[Dict[str, Any]]:
        """Load images from a tar file, yielding the engine's status messages."""
        with open(load_from, "rb") as f:
            yield from self._api.load_image(f)

    def history(self, image: str) -> List[Dict[str, Any]]:
        return self._api.history(image)
