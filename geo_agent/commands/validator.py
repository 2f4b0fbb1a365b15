"""Validation of extracted commands against the GeoGebra vocabulary."""

import re
from dataclasses import dataclass, field
from typing import Iterable


# Known GeoGebra commands. Matching is case-sensitive.
VALID_COMMANDS: frozenset[str] = frozenset({
    # Basic objects
    "Point", "Vector", "Segment", "Line", "Ray", "Circle", "Ellipse",
    "Polygon", "RegularPolygon",
    # Functions and curves
    "Slope", "Function", "Curve", "ParametricCurve", "PolarCurve",
    # Animation and interaction
    "Slider", "StartAnimation", "SetAnimationSpeed",
    "SetConditionToShowObject", "SetTrace", "Locus",
    # Scripting
    "Sequence", "List", "If", "Text", "RunClickScript",
    # Measurement and transformation
    "Intersect", "Midpoint", "Distance", "Angle", "Area", "Perimeter",
    "Length", "Reflect", "Rotate", "Translate", "Dilate",
})

_NAME_DELIMITER = re.compile(r"[(\s,]")


@dataclass
class ValidationResult:
    """Outcome of validating one or more commands."""

    is_valid: bool
    errors: list[str] = field(default_factory=list)


def command_name(command: str) -> str:
    """Return the name part of a command: everything before '(', whitespace or ','."""
    return _NAME_DELIMITER.split(command, maxsplit=1)[0].strip()


def validate_command(command: str) -> ValidationResult:
    """Check a single command against the vocabulary."""
    name = command_name(command)
    if name not in VALID_COMMANDS:
        return ValidationResult(is_valid=False, errors=[f"unknown command: {name}"])
    return ValidationResult(is_valid=True)


def validate_commands(commands: Iterable[str]) -> ValidationResult:
    """
    Validate a batch of commands.

    The batch is valid only if every command is. Errors are kept in input
    order, one per invalid command, duplicates included.
    """
    errors: list[str] = []
    for command in commands:
        errors.extend(validate_command(command).errors)
    return ValidationResult(is_valid=not errors, errors=errors)
