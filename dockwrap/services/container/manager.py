"""Container lifecycle management."""

import json
import os
import shlex
import tarfile
import tempfile
from pathlib import Path
from typing import Any, BinaryIO, Dict, Iterator, List, Optional, Tuple

import structlog
from docker import APIClient
from docker.errors import NotFound
from docker.utils import decode_json_header, parse_repository_tag

from ...models.container import (
    CommitOptions,
    ContainerCreateConfig,
    ContainerListOptions,
    LogsOptions,
    RemoveOptions,
)
from ...models.errors import OperationFailedError, ValidationError
from ...utils.filters import merge_filters
from ..stream.demux import stream_combined_output, stream_text_output
from .executor import ContainerExecutor
from .utils import wait_for_container_ready

logger = structlog.get_logger(__name__)

# os.ModeDir as reported in the container path stat header
MODE_DIR = 1 << 31


class ContainerManager:
    """Manages container lifecycle operations.

    Containers can be referred to by name or id everywhere.
    """

    def __init__(self, api: APIClient, executor: Optional[ContainerExecutor] = None):
        """Initialize the container manager.

        Args:
            api: Docker API client
            executor: Exec helper, created on the same client when omitted
        """
        self._api = api
        self._executor = executor or ContainerExecutor(api)

    @property
    def executor(self) -> ContainerExecutor:
        """Get the container executor."""
        return self._executor

    def list(self, options: Optional[ContainerListOptions] = None) -> List[Dict[str, Any]]:
        """List containers, running ones only unless ``options.all``."""
        options = options or ContainerListOptions()
        return self._api.containers(**options.to_kwargs())

    def inspect(self, container: str) -> Tuple[Dict[str, Any], str]:
        """Inspect a container.

        Returns:
            Tuple of (decoded details, the same details as JSON text)
        """
        result = self._api.inspect_container(container)
        return result, json.dumps(result)

    def start(self, container: str) -> None:
        self._api.start(container)
        logger.info("Container started", container=container)

    def stop(self, container: str, timeout: Optional[int] = None) -> None:
        """Stop a container.

        Args:
            timeout: Seconds to wait before killing it; None uses the
                container's own stop timeout, 0 kills immediately
        """
        self._api.stop(container, timeout=timeout)
        logger.info("Container stopped", container=container, timeout=timeout)

    def restart(self, container: str, timeout: Optional[int] = None) -> None:
        """Restart a container. ``timeout`` as for stop."""
        self._api.restart(container, timeout=timeout)
        logger.info("Container restarted", container=container, timeout=timeout)

    def rename(self, container: str, new_name: str) -> None:
        self._api.rename(container, new_name)

    def remove(self, container: str, options: Optional[RemoveOptions] = None) -> None:
        options = options or RemoveOptions()
        self._api.remove_container(container, **options.to_kwargs())
        logger.info("Container removed", container=container, force=options.force)

    def stats(self, container: str) -> Dict[str, Any]:
        """One-shot resource usage snapshot."""
        return self._api.stats(container, stream=False, one_shot=True)

    def copy_from(
        self, container: str, source_path: str, target_path: str, unpack: bool = False
    ) -> Path:
        """Copy a file or directory out of a container.

        Args:
            container: Container name or id
            source_path: Path inside the container
            target_path: Local directory
            unpack: Extract into target_path instead of saving the archive

        Returns:
            The archive path, ``<target_path>/<name>.tar``, or target_path
            when unpacked
        """
        stream, stat = self._api.get_archive(container, source_path)
        target = Path(target_path)
        if unpack:
            with tempfile.TemporaryFile() as spool:
                for chunk in stream:
                    spool.write(chunk)
                spool.seek(0)
                with tarfile.open(fileobj=spool) as archive:
                    if hasattr(tarfile, "data_filter"):
                        archive.extractall(target, filter="data")
                    else:
                        archive.extractall(target)
            logger.info(
                "Copied from container",
                container=container,
                source=source_path,
                target=str(target),
            )
            return target

        archive_path = target / f"{stat['name']}.tar"
        with open(archive_path, "wb") as f:
            for chunk in stream:
                f.write(chunk)
        logger.info(
            "Copied from container",
            container=container,
            source=source_path,
            target=str(archive_path),
        )
        return archive_path

    def copy_from_raw(self, container: str, path: str) -> Tuple[Iterator[bytes], Dict[str, Any]]:
        """Return the tar archive of ``path`` as a chunk iterator, plus its stat."""
        return self._api.get_archive(container, path)

    def path_stat(self, container: str, path: str) -> Tuple[Optional[Dict[str, Any]], bool]:
        """Stat a path inside a container.

        Returns:
            Tuple of (stat, found). stat is None when the path does not exist.
        """
        res = self._api.head(
            self._api._url("/containers/{0}/archive", container), params={"path": path}
        )
        try:
            self._api._raise_for_status(res)
        except NotFound:
            return None, False
        return decode_json_header(res.headers["X-Docker-Container-Path-Stat"]), True

    def copy_to(self, source_path: str, container: str, target_path: str) -> None:
        """Copy a local file or directory into a container directory.

        target_path is created with ``mkdir -p`` when missing. A directory
        source has its contents copied, a file source is copied by name.

        Raises:
            FileNotFoundError: source_path does not exist
            ValidationError: target_path exists and is not a directory
            OperationFailedError: target_path could not be created
        """
        source = Path(source_path)
        if not source.exists():
            raise FileNotFoundError(source_path)

        stat, found = self.path_stat(container, target_path)
        if not found:
            _, stderr = self._executor.exec_one_shot(
                container, f"mkdir -p {shlex.quote(target_path)}"
            )
            if stderr:
                raise OperationFailedError(
                    f"create directory {target_path} error: {stderr.strip()}"
                )
        elif not stat.get("mode", 0) & MODE_DIR:
            raise ValidationError(f"{target_path} is not a directory")

        with tempfile.TemporaryFile() as data:
            with tarfile.open(fileobj=data, mode="w") as archive:
                if source.is_dir():
                    for entry in sorted(os.listdir(source)):
                        archive.add(str(source / entry), arcname=entry)
                else:
                    archive.add(str(source), arcname=source.name)
            data.seek(0)
            self._api.put_archive(container, target_path, data)
        logger.info(
            "Copied to container",
            container=container,
            source=source_path,
            target=target_path,
        )

    def prune(self, filters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Remove stopped containers."""
        result = self._api.prune_containers(filters=merge_filters(filters))
        logger.info(
            "Containers pruned",
            deleted=len(result.get("ContainersDeleted") or []),
            space_reclaimed=result.get("SpaceReclaimed"),
        )
        return result

    def commit(self, container: str, image: str, options: Optional[CommitOptions] = None) -> str:
        """Create an image from a container.

        The container is paused while committing unless options.pause is False.

        Returns:
            The new image id
        """
        options = options or CommitOptions()
        repository, tag = parse_repository_tag(image)
        result = self._api.commit(
            container,
            repository=repository,
            tag=tag,
            message=options.comment,
            author=options.author,
            pause=options.pause,
            changes=options.changes,
        )
        logger.info("Container committed", container=container, image=image)
        return result["Id"]

    def export(self, container: str, path: str) -> None:
        """Export the container filesystem as a tar file."""
        stream = self._api.export(container)
        with open(path, "wb") as f:
            for chunk in stream:
                f.write(chunk)

    def kill(self, container: str) -> None:
        """Send SIGKILL."""
        self._api.kill(container, signal="SIGKILL")

    def terminate(self, container: str) -> None:
        """Send SIGTERM."""
        self._api.kill(container, signal="SIGTERM")

    def logs(self, container: str, options: Optional[LogsOptions] = None) -> BinaryIO:
        """Open the raw log stream.

        For containers without a TTY the stream is multiplexed; feed it to
        ``stream_combined_output`` or ``demultiplex``. Close it when done.
        """
        options = options or LogsOptions()
        res = self._api._get(
            self._api._url("/containers/{0}/logs", container),
            params=options.to_params(),
            stream=True,
        )
        self._api._raise_for_status(res)
        return res.raw

    def stream_logs(self, container: str, options: Optional[LogsOptions] = None) -> Iterator[str]:
        """Yield decoded log text as it arrives.

        Logs of TTY containers are plain text; all others are demultiplexed.
        """
        tty = self._api.inspect_container(container).get("Config", {}).get("Tty", False)
        raw = self.logs(container, options)
        try:
            if tty:
                yield from stream_text_output(raw)
            else:
                yield from stream_combined_output(raw)
        finally:
            raw.close()

    def pause(self, container: str) -> None:
        self._api.pause(container)

    def unpause(self, container: str) -> None:
        self._api.unpause(container)

    def process(self, container: str) -> Dict[str, Any]:
        """Processes running in the container, as ``ps -ef`` shows them."""
        return self._api.top(container)

    def create(
        self,
        image: str,
        name: str,
        replace: bool = False,
        config: Optional[ContainerCreateConfig] = None,
    ) -> Dict[str, Any]:
        """Create a container.

        Args:
            image: Image reference
            name: Container name
            replace: Force-remove an existing container with this name first
            config: Container, host and network configuration

        Returns:
            The create response, with "Id" and "Warnings"
        """
        config = config or ContainerCreateConfig()
        if replace:
            try:
                self.remove(name, RemoveOptions(force=True))
            except NotFound:
                logger.debug("No container to replace", container=name)

        host_config = self._api.create_host_config(**config.host_config_kwargs())
        networking_config = None
        if config.networks:
            networking_config = self._api.create_networking_config(
                {
                    net: self._api.create_endpoint_config(**endpoint)
                    for net, endpoint in config.networks.items()
                }
            )

        result = self._api.create_container(
            image,
            name=name,
            host_config=host_config,
            networking_config=networking_config,
            **config.container_kwargs(),
        )
        logger.info(
            "Container created",
            container=name,
            image=image,
            container_id=result.get("Id", "")[:12],
        )
        for warning in result.get("Warnings") or []:
            logger.warning("Container create warning", container=name, warning=warning)
        return result

    def run(
        self,
        image: str,
        name: str,
        replace: bool = False,
        config: Optional[ContainerCreateConfig] = None,
        wait_ready: bool = False,
    ) -> Dict[str, Any]:
        """Create a container and start it.

        Args:
            wait_ready: Block until the container is stably running

        Raises:
            OperationFailedError: wait_ready was set and the container did not
                reach the running state
        """
        result = self.create(image, name, replace=replace, config=config)
        self.start(name)
        if wait_ready and not self.wait_until_running(name):
            raise OperationFailedError(f"container {name} did not reach running state")
        return result

    def wait_until_running(self, container: str, max_wait: Optional[float] = None) -> bool:
        """Poll until the container is stably running. See wait_for_container_ready."""
        return wait_for_container_ready(self._api, container, max_wait=max_wait)
