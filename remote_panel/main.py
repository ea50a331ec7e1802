"""FastAPI entry-point for the remote panel."""
from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import uvicorn
from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from .config import Settings, get_settings, resolve_ws_url
from .logging_config import configure_logging
from .session_manager import SessionManager
from .state import PanelEvent

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent / "static"


def create_app(settings: Optional[Settings] = None, manager: Optional[SessionManager] = None) -> FastAPI:
    settings = settings or get_settings()
    manager = manager or SessionManager(settings=settings)
    app = FastAPI(title="remote-panel", version="0.1.0")
    app.state.settings = settings
    app.state.manager = manager
    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

    @app.on_event("startup")
    async def on_startup() -> None:
        await manager.start()

    @app.on_event("shutdown")
    async def on_shutdown() -> None:
        await manager.stop()

    @app.get("/")
    async def index() -> FileResponse:
        return FileResponse(STATIC_DIR / "index.html")

    @app.get("/config")
    async def config() -> JSONResponse:
        return JSONResponse({"wsUrl": resolve_ws_url(settings)})

    @app.get("/healthz")
    async def healthcheck() -> JSONResponse:
        view = manager.view
        return JSONResponse(
            {
                "status": "ok",
                "connection": view.connection.value,
                "recording": view.recording.value,
                "setup_error": view.setup_error,
            }
        )

    @app.websocket("/ws/ui")
    async def ui_socket(ws: WebSocket) -> None:
        await ws.accept()
        queue = manager.register_ui()
        pump = asyncio.create_task(_pump_events(ws, queue), name="ui-event-pump")
        try:
            while True:
                frame = await ws.receive()
                if frame["type"] == "websocket.disconnect":
                    raise WebSocketDisconnect(frame.get("code", 1000))
                text = frame.get("text")
                if text is None:
                    logger.warning("Ignoring non-text frame from panel")
                    continue
                try:
                    message = json.loads(text)
                except json.JSONDecodeError:
                    logger.warning("Invalid JSON from panel: %s", text)
                    continue
                intent = message.get("intent") if isinstance(message, dict) else None
                await manager.handle_intent(intent)
        except WebSocketDisconnect:
            pass
        finally:
            manager.unregister_ui(queue)
            pump.cancel()
            try:
                await pump
            except (asyncio.CancelledError, WebSocketDisconnect, RuntimeError):
                pass

    return app


async def _pump_events(ws: WebSocket, queue: asyncio.Queue[PanelEvent]) -> None:
    while True:
        event = await queue.get()
        await ws.send_json(event.to_dict())


settings: Settings = get_settings()
configure_logging(settings.log_level)
app = create_app(settings)


def run() -> None:
    logger.info("Server is running on http://localhost:%s", settings.port)
    logger.info("Current environment: %s", settings.environment)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
