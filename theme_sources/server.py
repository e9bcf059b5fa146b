"""
HTTP surface for the theme sources manager.

Lets a separate process issue the same requests as the event channel. Each
HTTP call gets its own correlation id; an error event becomes a 502.

Usage:
    python -m theme_sources serve --port 4100
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Awaitable, Callable

from fastapi import Depends, FastAPI, HTTPException, Request
from pydantic import BaseModel, ConfigDict, Field

from theme_sources import __version__
from theme_sources.channel import ResponseCollector
from theme_sources.manager import ThemeSourcesManager

LOGGER = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class ActivateThemeRequest(BaseModel):
    theme_id: str = Field(alias="themeId")

    model_config = ConfigDict(populate_by_name=True, extra="forbid")


def get_manager(request: Request) -> ThemeSourcesManager:
    return request.app.state.manager


async def dispatch(handler: Callable[..., Awaitable[None]], *args: Any) -> Any:
    """Run one request handler and return its success payload."""
    collector = ResponseCollector()
    request_id = str(uuid.uuid4())
    await handler(collector, request_id, *args)
    response = await collector.wait_for(request_id)
    if response.is_error:
        raise HTTPException(status_code=502, detail=response.payload["message"])
    return response.payload


def create_app(manager: ThemeSourcesManager | None = None) -> FastAPI:
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    app = FastAPI(title="Theme Sources", version=__version__)
    app.state.manager = manager or ThemeSourcesManager.from_config()

    @app.get("/healthz")
    async def healthz() -> dict[str, Any]:
        return {"ok": True}

    @app.get("/config")
    async def app_config(manager: ThemeSourcesManager = Depends(get_manager)) -> dict[str, Any]:
        result = await manager.get_app_config()
        if not result.ok:
            raise HTTPException(status_code=502, detail=result.message)
        return result.value.to_payload()

    @app.get("/themes")
    async def list_themes(manager: ThemeSourcesManager = Depends(get_manager)) -> list[dict[str, Any]]:
        return await dispatch(manager.list_themes)

    @app.get("/themes/active")
    async def active_theme(manager: ThemeSourcesManager = Depends(get_manager)) -> dict[str, Any]:
        return await dispatch(manager.active_theme_info)

    @app.post("/themes/active")
    async def activate_theme(
        body: ActivateThemeRequest,
        manager: ThemeSourcesManager = Depends(get_manager),
    ) -> dict[str, Any]:
        LOGGER.info(f"HTTP activation request for theme '{body.theme_id}'")
        return await dispatch(manager.activate_theme, body.theme_id)

    return app


__all__ = ["ActivateThemeRequest", "create_app", "dispatch", "get_manager"]
