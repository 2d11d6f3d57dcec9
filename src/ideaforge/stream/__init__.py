"""Incremental decoding of streamed chat responses."""

from ideaforge.stream.driver import StreamDriver, run_stream
from ideaforge.stream.frames import Frame, MalformedLine, Sentinel, classify, decode_event, parse_line
from ideaforge.stream.line_buffer import LineBuffer

__all__ = [
    "Frame",
    "LineBuffer",
    "MalformedLine",
    "Sentinel",
    "StreamDriver",
    "classify",
    "decode_event",
    "parse_line",
    "run_stream",
]
