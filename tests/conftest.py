"""Pytest configuration and shared fixtures."""

import os
from unittest.mock import MagicMock

import docker
import pytest

# Set test environment before importing config
os.environ.setdefault("LOG_LEVEL", "DEBUG")
os.environ.setdefault("LOG_FORMAT", "console")

from dockwrap.services.stream.demux import StreamType, encode_frame


@pytest.fixture
def mock_api():
    """Mock low-level Docker API client."""
    api = MagicMock(spec=docker.APIClient)

    api.base_url = "http+docker://localhost"
    api.api_version = "1.45"
    api.containers.return_value = []
    api.images.return_value = []
    api.inspect_container.return_value = {"Id": "abc123", "State": {"Status": "running"}}
    api.create_host_config.side_effect = lambda **kwargs: {"HostConfig": kwargs}
    api.create_container.return_value = {"Id": "f" * 64, "Warnings": []}
    api.exec_create.return_value = {"Id": "exec123"}
    api.put_archive.return_value = True
    api.ping.return_value = True

    return api


@pytest.fixture
def multiplexed():
    """Build a multiplexed stream from (channel, payload) pairs."""

    def _build(*frames):
        return b"".join(encode_frame(channel, payload) for channel, payload in frames)

    return _build


class FakeSocket:
    """Socket double that records sent data and replays a response."""

    def __init__(self, response: bytes, chunk: int = 5):
        self._response = response
        self._chunk = chunk
        self.sent = b""
        self.closed = False
        self.shutdown_called = False
        self.timeout = None

    def sendall(self, data):
        self.sent += data

    def shutdown(self, how):
        self.shutdown_called = True

    def settimeout(self, value):
        self.timeout = value

    def recv(self, size):
        size = min(size, self._chunk)
        data, self._response = self._response[:size], self._response[size:]
        return data

    def close(self):
        self.closed = True


@pytest.fixture
def fake_socket():
    return FakeSocket


@pytest.fixture
def stdout_stderr_frames(multiplexed):
    return multiplexed(
        (StreamType.STDOUT, b"hello\n"),
        (StreamType.STDERR, b"warn\n"),
        (StreamType.STDOUT, b"world\n"),
    )
