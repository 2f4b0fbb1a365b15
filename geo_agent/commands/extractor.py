"""Extraction of GeoGebra commands from fenced blocks in model output."""

import re

# A block opened by ```geogebra on its own line and closed by the next ```.
# An unclosed block never matches.
_FENCE_PATTERN = re.compile(r"```geogebra\n(.*?)```", re.DOTALL)


def extract_commands(text: str) -> list[str]:
    """
    Extract candidate commands from every ```geogebra block in the text.

    Each block is split into lines; lines are stripped and blank ones are
    dropped. Commands from all blocks are returned in document order.

    Args:
        text: Arbitrary text, typically one chunk of model output.

    Returns:
        Command strings, possibly empty.
    """
    commands: list[str] = []
    for match in _FENCE_PATTERN.finditer(text):
        for line in match.group(1).split("\n"):
            line = line.strip()
            if line:
                commands.append(line)
    return commands
