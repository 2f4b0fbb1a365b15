"""
Exception hierarchy for the GeoGebra chat assistant.

Every failure in the chat pipeline maps to one of these classes. Each class
carries the HTTP status it is reported with and a message that is safe to
show to the caller; the exception text itself (with its context) is only
written to the log.

Usage:
    from geo_agent.exceptions import MissingCredentialError

    raise MissingCredentialError(
        "An API key is required. Configure it in settings.",
        model="gpt-4o",
    )
"""

from typing import Any


class GeoAgentError(Exception):
    """
    Base exception for all assistant errors.

    Attributes:
        status_code: HTTP status used when the error reaches a client
        user_message: Caller-facing error description
        context: Additional context for debugging
    """

    status_code: int = 500
    user_message: str = "An error occurred while processing the request"

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.context = context

    def __str__(self) -> str:
        base = super().__str__()
        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{base} ({ctx_str})"
        return base


# ============================================================================
# Client Errors
# ============================================================================

class MalformedRequestError(GeoAgentError):
    """Request body does not parse or has no message list."""
    status_code = 400
    user_message = "Invalid request body: a JSON object with a 'messages' list is required"


class MissingCredentialError(GeoAgentError):
    """
    No API key could be resolved for the selected model.

    The message is remediation text written for the user, so it is
    returned as-is.
    """
    status_code = 400

    @property
    def user_message(self) -> str:
        return self.args[0]


class ConfigStoreError(GeoAgentError):
    """Submitted settings were rejected by the configuration store."""
    status_code = 400

    @property
    def user_message(self) -> str:
        return self.args[0]


# ============================================================================
# Upstream Errors
# ============================================================================

class AdapterInitError(GeoAgentError):
    """Provider adapter could not be constructed."""
    status_code = 500
    user_message = "Model initialization failed, please check the API key and model configuration"


class UpstreamStreamError(GeoAgentError):
    """The streaming chat completion could not be started."""
    status_code = 500
    user_message = "Failed to create chat stream, please check the network connection"


# ============================================================================
# Utility Functions
# ============================================================================

def get_user_message(error: Exception) -> str:
    """
    Get the caller-facing message for an exception.

    Exceptions outside the hierarchy get the generic message so their
    internals never reach the caller.
    """
    if isinstance(error, GeoAgentError):
        return error.user_message
    return GeoAgentError.user_message


def get_status_code(error: Exception) -> int:
    """Get the HTTP status an exception is reported with."""
    if isinstance(error, GeoAgentError):
        return error.status_code
    return 500
