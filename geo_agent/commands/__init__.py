"""GeoGebra command extraction and validation."""

from geo_agent.commands.extractor import extract_commands
from geo_agent.commands.validator import (
    VALID_COMMANDS,
    ValidationResult,
    command_name,
    validate_command,
    validate_commands,
)

__all__ = [
    "VALID_COMMANDS",
    "ValidationResult",
    "command_name",
    "extract_commands",
    "validate_command",
    "validate_commands",
]
