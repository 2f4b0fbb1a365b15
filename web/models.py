"""Pydantic models for API requests/responses."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from geo_agent.model.config import ChatMessage, ConfigSettings


class ChatRequest(BaseModel):
    """Request body for the chat endpoint."""
    model_config = ConfigDict(populate_by_name=True)

    messages: list[ChatMessage]
    config_settings: Optional[ConfigSettings] = Field(default=None, alias="configSettings")


class NewCustomModel(BaseModel):
    """Request body for adding a custom model from a provider preset."""
    model_config = ConfigDict(populate_by_name=True)

    name: str
    provider: str = "openai"
    model_type: str = Field(default="", alias="modelType")
    key: str = ""


class ErrorResponse(BaseModel):
    """Body of every error response."""
    error: str
