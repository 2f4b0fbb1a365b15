"""Web package for the GeoGebra chat assistant."""

from web.models import ChatRequest, NewCustomModel, ErrorResponse
from web.chat_handler import ChatPipeline, ChatState
from web.config_store import ConfigStore

__all__ = [
    "ChatRequest",
    "NewCustomModel",
    "ErrorResponse",
    "ChatPipeline",
    "ChatState",
    "ConfigStore",
]
