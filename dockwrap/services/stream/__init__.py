"""Stream helpers.

- demux.py: stdout/stderr demultiplexing of attached streams
- progress.py: aggregation of pull/push/build progress messages
"""

from .demux import (
    FrameDecoder,
    StreamType,
    demultiplex,
    encode_frame,
    iter_frames,
    parse_to_combined_output,
    parse_to_stdout_stderr,
    stream_combined_output,
    stream_text_output,
)
from .progress import MessageParser, render_progress

__all__ = [
    "FrameDecoder",
    "StreamType",
    "demultiplex",
    "encode_frame",
    "iter_frames",
    "parse_to_combined_output",
    "parse_to_stdout_stderr",
    "stream_combined_output",
    "stream_text_output",
    "MessageParser",
    "render_progress",
]
