"""
In-flight validation of streamed model output.

Every chunk of the outbound stream is checked on its own: commands found in
```geogebra blocks are validated, and when any is unknown a warning chunk is
emitted right before the chunk itself. The original bytes always pass through
untouched.

Known boundary case: a fenced block split across two chunks is not seen by
either chunk, so its commands go unchecked. Validation works on exactly one
chunk at a time and carries nothing over to the next.
"""

from typing import AsyncIterable

from geo_agent.commands import extract_commands, validate_commands
from geo_agent.logging import get_logger
from geo_agent.stream.closing import ClosingStream

logger = get_logger("annotator")

def build_warning(errors: list[str]) -> str:
    """Render the warning text injected ahead of a chunk with invalid commands."""
    return (
        "\n\n⚠️ Warning: found the following invalid GeoGebra commands:\n"
        + "\n".join(errors)
        + "\nPlease check that the commands are correct."
    )

def annotate_chunk(chunk: bytes) -> list[bytes]:
    """
    Annotate a single chunk.

    Returns:
        ``[chunk]`` when the chunk has no invalid commands, otherwise
        ``[warning, chunk]``.
    """
    text = chunk.decode("utf-8", errors="replace")
    commands = extract_commands(text)
    if not commands:
        return [chunk]

    result = validate_commands(commands)
    if result.is_valid:
        return [chunk]

    logger.validation("Invalid GeoGebra commands in model output", errors=result.errors)
    return [build_warning(result.errors).encode("utf-8"), chunk]


def annotate_stream(source: AsyncIterable[bytes]) -> ClosingStream:
    """
    Pipe a byte stream through :func:`annotate_chunk`.

    Chunks are pulled one at a time and forwarded in order. Closing the
    returned stream closes the source, even before the first chunk has been
    pulled, so the upstream connection is released on client disconnect or
    cancellation.
    """
    return ClosingStream(source, annotate_chunk)
