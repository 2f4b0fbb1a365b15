"""
GeoGebra Assistant - Main FastAPI Application

This is the main entry point for the chat backend.
All business logic lives in the geo_agent and web packages.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from geo_agent.config import settings
from geo_agent.exceptions import ConfigStoreError
from geo_agent.logging import configure_logging, get_logger
from geo_agent.model import ConfigSettings
from geo_agent.model.catalog import PROVIDER_PRESETS, model_options, new_custom_model
from web.chat_handler import ChatPipeline, error_response
from web.config_store import ConfigStore
from web.models import ErrorResponse, NewCustomModel

logger = get_logger("app")


# ============================================================================
# Application Lifecycle
# ============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown lifecycle."""
    configure_logging(settings.log.level, settings.log.json_format)
    logger.info("GeoGebra Assistant starting", default_model=settings.chat.default_model)
    yield
    logger.info("GeoGebra Assistant stopped")


app = FastAPI(lifespan=lifespan)

pipeline = ChatPipeline()
config_store = ConfigStore()


# ============================================================================
# Chat API
# ============================================================================

@app.post("/api/chat", responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}})
async def chat(request: Request):
    """Stream an annotated model answer for a conversation."""
    body = await request.body()
    return await pipeline.handle(body)


# ============================================================================
# Configuration API
# ============================================================================

@app.get("/api/config")
async def get_config():
    """Get the stored settings."""
    return config_store.get_config().model_dump(mode="json", by_alias=True)


@app.post("/api/config")
async def update_config(config: ConfigSettings):
    """Validate and save settings."""
    try:
        saved = config_store.set_config(config)
    except ConfigStoreError as e:
        return error_response(e)
    return saved.model_dump(mode="json", by_alias=True)


@app.post("/api/config/models")
async def add_custom_model(req: NewCustomModel):
    """Add a custom model pre-filled from its provider preset."""
    model = new_custom_model(req.name, req.provider, req.model_type, req.key)
    try:
        saved = config_store.add_custom_model(model)
    except ConfigStoreError as e:
        return error_response(e)
    return saved.model_dump(mode="json", by_alias=True)


@app.delete("/api/config/models/{name}")
async def delete_custom_model(name: str):
    """Remove a custom model."""
    try:
        saved = config_store.delete_custom_model(name)
    except ConfigStoreError as e:
        return error_response(e)
    return saved.model_dump(mode="json", by_alias=True)


@app.get("/api/models")
async def list_models():
    """List built-in models, provider presets and stored custom models."""
    return {
        "models": model_options(),
        "provider_presets": {
            name: preset.model_dump(include={"domain", "path"})
            for name, preset in PROVIDER_PRESETS.items()
        },
        "custom_models": [m.name for m in config_store.get_config().custom_models],
    }


# ============================================================================
# Status API
# ============================================================================

@app.get("/api/health")
async def health():
    """Liveness probe."""
    return JSONResponse({"status": "ok"})


# ============================================================================
# Main Entry Point
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.server.host, port=settings.server.port)
