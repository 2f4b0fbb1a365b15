"""
Geo Agent - a GeoGebra-aware chat assistant backend.

This package routes chat requests to interchangeable LLM providers and
checks the GeoGebra commands in the streamed answers before they reach
the user.
"""

from geo_agent.logging import get_logger, configure_logging, StructuredLogger, LogLevel
from geo_agent.exceptions import (
    GeoAgentError,
    MalformedRequestError,
    MissingCredentialError,
    AdapterInitError,
    UpstreamStreamError,
    ConfigStoreError,
    get_user_message,
    get_status_code,
)
from geo_agent.commands import extract_commands, validate_commands, ValidationResult
from geo_agent.stream import annotate_stream
from geo_agent.model import ProviderRouter, build_adapter

__version__ = "0.1.0"
__all__ = [
    # Pipeline
    "extract_commands",
    "validate_commands",
    "ValidationResult",
    "annotate_stream",
    "ProviderRouter",
    "build_adapter",
    # Logging
    "get_logger",
    "configure_logging",
    "StructuredLogger",
    "LogLevel",
    # Exceptions
    "GeoAgentError",
    "MalformedRequestError",
    "MissingCredentialError",
    "AdapterInitError",
    "UpstreamStreamError",
    "ConfigStoreError",
    "get_user_message",
    "get_status_code",
]
