"""Demultiplexing of attached stdout/stderr streams.

When a container or exec runs without a TTY the engine multiplexes both
output channels over one connection. Every frame starts with an 8-byte
header::

    [stream_type:1][reserved:3][length:4 big-endian]

followed by ``length`` payload bytes.
"""

import codecs
import struct
from enum import IntEnum
from typing import Iterable, Iterator, List, Tuple, Union

import structlog

from ...config import settings
from ...models.errors import DaemonStreamError, StreamDecodeError

logger = structlog.get_logger(__name__)

HEADER = struct.Struct(">BxxxL")
HEADER_SIZE = HEADER.size

Source = Union[bytes, bytearray, memoryview, Iterable[bytes]]
Frame = Tuple["StreamType", bytes]


class StreamType(IntEnum):
    """Channel indicator in the frame header."""

    STDIN = 0
    STDOUT = 1
    STDERR = 2
    SYSTEMERR = 3


_KNOWN_TYPES = frozenset(t.value for t in StreamType)


def encode_frame(stream_type: int, payload: bytes) -> bytes:
    """Frame ``payload`` for the given channel."""
    return HEADER.pack(int(stream_type), len(payload)) + bytes(payload)


class FrameDecoder:
    """Incremental frame decoder.

    Feed it byte chunks of any size; it returns each frame once all of its
    bytes have arrived and holds on to the incomplete tail.
    """

    def __init__(self):
        self._buffer = bytearray()

    @property
    def pending(self) -> int:
        """Bytes received but not yet part of a complete frame."""
        return len(self._buffer)

    def feed(self, data: bytes) -> List[Frame]:
        """Add ``data`` and return every frame it completes.

        Raises:
            StreamDecodeError: Unknown stream type in a header
            DaemonStreamError: The daemon sent a system error frame
        """
        self._buffer.extend(data)
        frames: List[Frame] = []
        offset = 0
        buffer = self._buffer
        while len(buffer) - offset >= HEADER_SIZE:
            stream_type, length = HEADER.unpack_from(buffer, offset)
            if stream_type not in _KNOWN_TYPES:
                raise StreamDecodeError(f"Unrecognized input header: {stream_type}")
            end = offset + HEADER_SIZE + length
            if len(buffer) < end:
                break
            payload = bytes(buffer[offset + HEADER_SIZE : end])
            offset = end
            if stream_type == StreamType.SYSTEMERR:
                del buffer[:offset]
                raise DaemonStreamError(payload.decode("utf-8", errors="replace"))
            frames.append((StreamType(stream_type), payload))
        del buffer[:offset]
        return frames

    def close(self) -> None:
        """Signal end of input.

        Raises:
            StreamDecodeError: The input ended inside a frame
        """
        pending = len(self._buffer)
        if pending:
            if pending < HEADER_SIZE:
                raise StreamDecodeError(
                    f"short read: got {pending} of {HEADER_SIZE} header bytes"
                )
            raise StreamDecodeError(
                f"short read: stream ended inside a frame ({pending} bytes pending)"
            )


def _iter_chunks(source: Source, chunk_size: int) -> Iterator[bytes]:
    if isinstance(source, (bytes, bytearray, memoryview)):
        yield bytes(source)
        return
    read = getattr(source, "read", None)
    if read is not None:
        while True:
            chunk = read(chunk_size)
            if not chunk:
                return
            yield chunk
    else:
        for chunk in source:
            if chunk:
                yield chunk


def iter_frames(source: Source, chunk_size: int = None) -> Iterator[Frame]:
    """Yield (stream_type, payload) for every frame in ``source``.

    Args:
        source: Bytes, a binary file-like object, or an iterable of byte chunks
        chunk_size: Bytes per read on file-like sources

    Raises:
        StreamDecodeError: Malformed header or truncated input
        DaemonStreamError: The daemon sent a system error frame
    """
    chunk_size = chunk_size or settings.stream_chunk_size
    decoder = FrameDecoder()
    for chunk in _iter_chunks(source, chunk_size):
        yield from decoder.feed(chunk)
    decoder.close()


def demultiplex(source: Source, chunk_size: int = None) -> Tuple[bytes, bytes]:
    """Split a multiplexed stream into (stdout, stderr) bytes.

    Stdin frames are routed to stdout. Order within each channel is kept.
    """
    stdout = bytearray()
    stderr = bytearray()
    for stream_type, payload in iter_frames(source, chunk_size):
        if stream_type == StreamType.STDERR:
            stderr.extend(payload)
        else:
            stdout.extend(payload)
    return bytes(stdout), bytes(stderr)


def parse_to_stdout_stderr(source: Source, chunk_size: int = None) -> Tuple[str, str]:
    """Demultiplex and decode both channels as UTF-8 text."""
    stdout, stderr = demultiplex(source, chunk_size)
    return (
        stdout.decode("utf-8", errors="replace"),
        stderr.decode("utf-8", errors="replace"),
    )


def parse_to_combined_output(source: Source, chunk_size: int = None) -> str:
    """Demultiplex into one text, both channels in arrival order."""
    combined = b"".join(payload for _, payload in iter_frames(source, chunk_size))
    return combined.decode("utf-8", errors="replace")


def _iter_lines(source) -> Iterator[bytes]:
    if isinstance(source, (bytes, bytearray, memoryview)):
        source = [bytes(source)]
    readline = getattr(source, "readline", None)
    if readline is not None:
        while True:
            line = readline()
            if not line:
                return
            yield line
        return
    # iterable of chunks: re-split on newlines
    pending = b""
    for chunk in source:
        pending += chunk
        *lines, pending = pending.split(b"\n")
        for line in lines:
            yield line + b"\n"
    if pending:
        yield pending


def stream_combined_output(source) -> Iterator[str]:
    """Lazily yield combined output text as it arrives.

    The source is read one newline-terminated line at a time. After each
    line every frame completed so far is decoded and the new text, if any,
    is yielded. Nothing is read ahead of the consumer, and closing the
    generator stops reading.

    Args:
        source: Binary file-like object with ``readline`` (e.g. a socket
            ``makefile("rb")`` or an HTTP response), bytes, or an iterable
            of byte chunks

    Raises:
        StreamDecodeError: Malformed header, or the source ended inside a
            frame. Raised after every earlier value has been yielded.
        DaemonStreamError: The daemon sent a system error frame
    """
    decoder = FrameDecoder()
    text = codecs.getincrementaldecoder("utf-8")(errors="replace")
    for line in _iter_lines(source):
        frames = decoder.feed(line)
        chunk = text.decode(b"".join(payload for _, payload in frames))
        if chunk:
            yield chunk
    if decoder.pending:
        logger.warning("Stream ended inside a frame", pending=decoder.pending)
    decoder.close()
    tail = text.decode(b"", final=True)
    if tail:
        yield tail


def stream_text_output(source) -> Iterator[str]:
    """Lazily yield text from a stream that is not multiplexed.

    Containers and exec sessions with a TTY send their output as plain
    bytes without frame headers. Accepts the same sources as
    ``stream_combined_output``.
    """
    text = codecs.getincrementaldecoder("utf-8")(errors="replace")
    for line in _iter_lines(source):
        chunk = text.decode(line)
        if chunk:
            yield chunk
    tail = text.decode(b"", final=True)
    if tail:
        yield tail
