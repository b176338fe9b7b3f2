"""Unit tests for ContainerManager."""

import base64
import io
import json
import tarfile
from unittest.mock import MagicMock, patch

import pytest
from docker.errors import NotFound

from dockwrap.models.container import (
    CommitOptions,
    ContainerCreateConfig,
    ContainerListOptions,
    LogsOptions,
    RemoveOptions,
    RestartPolicy,
)
from dockwrap.models.errors import OperationFailedError, ValidationError
from dockwrap.services.container.manager import MODE_DIR, ContainerManager
from dockwrap.services.stream.demux import StreamType


def path_stat_header(stat):
    return base64.b64encode(json.dumps(stat).encode("utf-8")).decode("ascii")


@pytest.fixture
def executor():
    executor = MagicMock()
    executor.exec_one_shot.return_value = ("", "")
    return executor


@pytest.fixture
def manager(mock_api, executor):
    return ContainerManager(mock_api, executor)


class TestContainerManagerBasics:
    """Test simple pass-through operations."""

    def test_list_defaults(self, manager, mock_api):
        """Test list defaults."""
        manager.list()
        mock_api.containers.assert_called_once_with(
            all=False, size=False, latest=False, limit=-1, filters=None
        )

    def test_list_with_filters(self, manager, mock_api):
        """Test list with filters."""
        manager.list(ContainerListOptions(all=True, filters={"status": "exited"}))
        kwargs = mock_api.containers.call_args.kwargs
        assert kwargs["all"] is True
        assert kwargs["filters"] == {"status": "exited"}

    def test_inspect_returns_dict_and_json(self, manager, mock_api):
        """Test inspect returns dict and json."""
        details, raw = manager.inspect("web")
        assert details["Id"] == "abc123"
        assert json.loads(raw) == details

    def test_stop_passes_timeout(self, manager, mock_api):
        """Test stop passes timeout."""
        manager.stop("web", timeout=0)
        mock_api.stop.assert_called_once_with("web", timeout=0)

    def test_remove_maps_options(self, manager, mock_api):
        """Test remove maps options."""
        manager.remove("web", RemoveOptions(remove_volumes=True, force=True))
        mock_api.remove_container.assert_called_once_with(
            "web", v=True, link=False, force=True
        )

    def test_kill_and_terminate(self, manager, mock_api):
        """Test kill and terminate."""
        manager.kill("web")
        manager.terminate("web")
        assert [c.kwargs["signal"] for c in mock_api.kill.call_args_list] == [
            "SIGKILL",
            "SIGTERM",
        ]

    def test_stats_is_one_shot(self, manager, mock_api):
        """Test stats is one shot."""
        manager.stats("web")
        mock_api.stats.assert_called_once_with("web", stream=False, one_shot=True)

    def test_prune_with_filters(self, manager, mock_api):
        """Test prune with filters."""
        mock_api.prune_containers.return_value = {
            "ContainersDeleted": ["a", "b"],
            "SpaceReclaimed": 10,
        }
        result = manager.prune({"until": "24h"})
        mock_api.prune_containers.assert_called_once_with(filters={"until": "24h"})
        assert result["SpaceReclaimed"] == 10

    def test_commit(self, manager, mock_api):
        """Test commit."""
        mock_api.commit.return_value = {"Id": "sha256:new"}
        image_id = manager.commit(
            "web", "registry:5000/app:v2", CommitOptions(author="me", changes=["CMD echo"])
        )
        assert image_id == "sha256:new"
        mock_api.commit.assert_called_once_with(
            "web",
            repository="registry:5000/app",
            tag="v2",
            message=None,
            author="me",
            pause=True,
            changes=["CMD echo"],
        )


class TestContainerCreate:
    """Test container creation."""

    def test_create_maps_config(self, manager, mock_api):
        """Test create maps config."""
        config = ContainerCreateConfig(
            env={"A": "1"},
            cmd=["sleep", "infinity"],
            cpus=1.5,
            memory_limit=256 * 1024 * 1024,
            restart_policy=RestartPolicy.on_failure(3),
            binds={"/data": "/mnt/data:ro"},
        ).with_port_specs(["127.0.0.1:8080:80"])

        result = manager.create("nginx:latest", "web", config=config)

        assert result["Id"] == "f" * 64
        host_kwargs = mock_api.create_host_config.call_args.kwargs
        assert host_kwargs["nano_cpus"] == 1_500_000_000
        assert host_kwargs["mem_limit"] == 268435456
        assert host_kwargs["restart_policy"] == {"Name": "on-failure", "MaximumRetryCount": 3}
        assert host_kwargs["binds"] == ["/data:/mnt/data:ro"]
        assert host_kwargs["port_bindings"] == {"80/tcp": [("127.0.0.1", "8080")]}

        args, kwargs = mock_api.create_container.call_args
        assert args == ("nginx:latest",)
        assert kwargs["name"] == "web"
        assert kwargs["environment"] == ["A=1"]
        assert kwargs["ports"] == [(80, "tcp")]
        assert kwargs["networking_config"] is None
        assert kwargs["detach"] is True

    def test_create_with_networks(self, manager, mock_api):
        """Test create with networks."""
        mock_api.create_endpoint_config.return_value = {"Aliases": ["db"]}
        mock_api.create_networking_config.return_value = {"EndpointsConfig": {}}
        config = ContainerCreateConfig(networks={"backend": {"aliases": ["db"]}})

        manager.create("postgres", "db", config=config)

        mock_api.create_endpoint_config.assert_called_once_with(aliases=["db"])
        mock_api.create_networking_config.assert_called_once_with(
            {"backend": {"Aliases": ["db"]}}
        )
        assert mock_api.create_container.call_args.kwargs["networking_config"] == {
            "EndpointsConfig": {}
        }

    def test_replace_removes_existing(self, manager, mock_api):
        """Test replace removes existing."""
        manager.create("nginx", "web", replace=True)
        mock_api.remove_container.assert_called_once_with(
            "web", v=False, link=False, force=True
        )
        mock_api.create_container.assert_called_once()

    def test_replace_without_existing(self, manager, mock_api):
        """Test replace without existing."""
        mock_api.remove_container.side_effect = NotFound("No such container: web")
        manager.create("nginx", "web", replace=True)
        mock_api.create_container.assert_called_once()

    def test_no_replace_keeps_existing(self, manager, mock_api):
        """Test no replace keeps existing."""
        manager.create("nginx", "web")
        mock_api.remove_container.assert_not_called()

    @patch("dockwrap.services.container.manager.wait_for_container_ready")
    def test_run_starts_and_waits(self, mock_wait, manager, mock_api):
        """Test run starts and waits."""
        mock_wait.return_value = True
        manager.run("nginx", "web", wait_ready=True)
        mock_api.start.assert_called_once_with("web")
        mock_wait.assert_called_once_with(mock_api, "web", max_wait=None)

    @patch("dockwrap.services.container.manager.wait_for_container_ready")
    def test_run_not_running_raises(self, mock_wait, manager):
        """Test run not running raises."""
        mock_wait.return_value = False
        with pytest.raises(OperationFailedError):
            manager.run("nginx", "web", wait_ready=True)


class TestContainerCopy:
    """Test copying files in and out of containers."""

    def test_path_stat_found(self, manager, mock_api):
        """Test path stat found."""
        stat = {"name": "app", "size": 4096, "mode": MODE_DIR | 0o755}
        mock_api.head.return_value.headers = {
            "X-Docker-Container-Path-Stat": path_stat_header(stat)
        }
        assert manager.path_stat("web", "/app") == (stat, True)
        assert mock_api.head.call_args.kwargs["params"] == {"path": "/app"}

    def test_path_stat_not_found(self, manager, mock_api):
        """Test path stat not found."""
        mock_api._raise_for_status.side_effect = NotFound("not found")
        assert manager.path_stat("web", "/missing") == (None, False)

    def test_copy_to_creates_missing_directory(self, manager, mock_api, executor, tmp_path):
        """Test copy to creates missing directory."""
        source = tmp_path / "hello.txt"
        source.write_text("hi")
        mock_api._raise_for_status.side_effect = [NotFound("not found")]

        manager.copy_to(str(source), "web", "/srv/new dir")

        executor.exec_one_shot.assert_called_once_with("web", "mkdir -p '/srv/new dir'")
        container, target, data = mock_api.put_archive.call_args.args
        assert (container, target) == ("web", "/srv/new dir")

    def test_copy_to_mkdir_failure(self, manager, mock_api, executor, tmp_path):
        """Test copy to mkdir failure."""
        source = tmp_path / "hello.txt"
        source.write_text("hi")
        mock_api._raise_for_status.side_effect = NotFound("not found")
        executor.exec_one_shot.return_value = ("", "mkdir: permission denied\n")

        with pytest.raises(OperationFailedError, match="permission denied"):
            manager.copy_to(str(source), "web", "/root/x")
        mock_api.put_archive.assert_not_called()

    def test_copy_to_target_not_directory(self, manager, mock_api, tmp_path):
        """Test copy to target not directory."""
        source = tmp_path / "hello.txt"
        source.write_text("hi")
        mock_api.head.return_value.headers = {
            "X-Docker-Container-Path-Stat": path_stat_header({"name": "f", "mode": 0o644})
        }

        with pytest.raises(ValidationError, match="is not a directory"):
            manager.copy_to(str(source), "web", "/etc/hosts")
        mock_api.put_archive.assert_not_called()

    def test_copy_to_directory_contents(self, manager, mock_api, tmp_path):
        """Test copy to directory contents."""
        source = tmp_path / "site"
        source.mkdir()
        (source / "index.html").write_text("<h1>hi</h1>")
        (source / "css").mkdir()
        (source / "css" / "main.css").write_text("body {}")
        mock_api.head.return_value.headers = {
            "X-Docker-Container-Path-Stat": path_stat_header({"name": "www", "mode": MODE_DIR})
        }
        captured = {}

        def put_archive(container, path, data):
            captured["names"] = tarfile.open(fileobj=io.BytesIO(data.read())).getnames()
            return True

        mock_api.put_archive.side_effect = put_archive
        manager.copy_to(str(source), "web", "/var/www")

        assert sorted(captured["names"]) == ["css", "css/main.css", "index.html"]

    def test_copy_to_missing_source(self, manager, tmp_path):
        """Test copy to missing source."""
        with pytest.raises(FileNotFoundError):
            manager.copy_to(str(tmp_path / "nope"), "web", "/tmp")

    def _archive(self, name, content):
        buf = io.BytesIO()
        with tarfile.open(fileobj=buf, mode="w") as archive:
            info = tarfile.TarInfo(name)
            info.size = len(content)
            archive.addfile(info, io.BytesIO(content))
        return buf.getvalue()

    def test_copy_from_saves_archive(self, manager, mock_api, tmp_path):
        """Test copy from saves archive."""
        data = self._archive("app.log", b"log line\n")
        mock_api.get_archive.return_value = (iter([data[:100], data[100:]]), {"name": "app.log"})

        path = manager.copy_from("web", "/var/log/app.log", str(tmp_path))

        assert path == tmp_path / "app.log.tar"
        assert path.read_bytes() == data

    def test_copy_from_unpacks(self, manager, mock_api, tmp_path):
        """Test copy from unpacks."""
        data = self._archive("app.log", b"log line\n")
        mock_api.get_archive.return_value = (iter([data]), {"name": "app.log"})

        path = manager.copy_from("web", "/var/log/app.log", str(tmp_path), unpack=True)

        assert path == tmp_path
        assert (tmp_path / "app.log").read_text() == "log line\n"


class TestContainerLogs:
    """Test log streaming."""

    def test_logs_params(self, manager, mock_api):
        """Test logs params."""
        manager.logs("web", LogsOptions(tail=10, follow=True))
        params = mock_api._get.call_args.kwargs["params"]
        assert params["tail"] == "10"
        assert params["follow"] == 1
        assert mock_api._get.call_args.kwargs["stream"] is True

    def test_stream_logs_decodes_and_closes(self, manager, mock_api, multiplexed):
        """Test stream logs decodes and closes."""
        raw = io.BytesIO(
            multiplexed((StreamType.STDOUT, b"started\n"), (StreamType.STDERR, b"oops\n"))
        )
        mock_api._get.return_value.raw = raw

        assert list(manager.stream_logs("web")) == ["started\n", "oops\n"]
        assert raw.closed

    def test_stream_logs_tty_container(self, manager, mock_api):
        """Test stream logs of a TTY container are read as plain text."""
        mock_api.inspect_container.return_value = {"Id": "abc123", "Config": {"Tty": True}}
        raw = io.BytesIO(b"\x1b[32mready\x1b[0m\r\nserving\r\n")
        mock_api._get.return_value.raw = raw

        assert list(manager.stream_logs("web")) == ["\x1b[32mready\x1b[0m\r\n", "serving\r\n"]
        assert raw.closed
