"""Streaming transforms for model output."""

from geo_agent.stream.annotator import annotate_chunk, annotate_stream, build_warning
from geo_agent.stream.closing import ClosingStream

__all__ = ["ClosingStream", "annotate_chunk", "annotate_stream", "build_warning"]
