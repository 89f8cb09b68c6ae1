"""
FastAPI Application Entry Point.

Builds the gateway application: loads settings, constructs both engines
and the services once, creates the audio/uploads directories, mounts them
as static paths and registers the routes.

Usage:
    # Run with uvicorn
    uvicorn tts_gateway.main:app --host 0.0.0.0 --port 3000

    # Or with the configured host/port (PORT env var wins)
    python -m tts_gateway.main
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from tts_gateway import __version__
from tts_gateway.api.routes import router
from tts_gateway.core.config import Settings, load_settings_or_defaults, settings_path
from tts_gateway.core.errors import ConversionError, ErrorCode
from tts_gateway.core.logging import configure_logging, error, exception, get_logger, info, warn
from tts_gateway.services.conversion_service import ConversionService, build_service
from tts_gateway.services.media_service import MediaService, build_media_service

_LOG = get_logger("tts-gateway.main")


def _loop_exception_handler(loop: asyncio.AbstractEventLoop, context: Dict[str, Any]) -> None:
    """Log failures of fire-and-forget tasks instead of letting them vanish."""
    exc = context.get("exception")
    if exc is not None:
        exception(_LOG, "unhandled_task_error", exc, message=context.get("message"))
    else:
        error(_LOG, "unhandled_task_error", message=context.get("message"))


@asynccontextmanager
async def lifespan(app: FastAPI):
    asyncio.get_running_loop().set_exception_handler(_loop_exception_handler)
    info(_LOG, "startup", version=__version__, engines=app.state.conversion_service.engine_names)
    yield
    info(_LOG, "shutdown")


def _load_settings() -> Settings:
    path = settings_path()
    if not Path(path).exists():
        warn(_LOG, "settings_missing", path=path, using="defaults")
    return load_settings_or_defaults(path)


def create_app(
    settings: Optional[Settings] = None,
    conversion_service: Optional[ConversionService] = None,
    media_service: Optional[MediaService] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Settings to use; read from config/settings.yaml (or
            $TTS_GW_SETTINGS) when omitted.
        conversion_service: Prebuilt orchestrator (tests inject fake engines).
        media_service: Prebuilt upload service.

    Returns:
        FastAPI: Configured application instance.
    """
    configure_logging()

    if settings is None:
        settings = _load_settings()
    config = settings.get_gateway_config()

    if conversion_service is None:
        conversion_service = build_service(settings)
    if media_service is None:
        media_service = build_media_service(config)

    # Static mounts need the directories to exist
    conversion_service.artifacts.ensure_dirs()
    media_service.uploads.ensure_dirs()

    app = FastAPI(title="tts-gateway", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.conversion_service = conversion_service
    app.state.media_service = media_service

    @app.exception_handler(ConversionError)
    async def _conversion_error_handler(request: Request, exc: ConversionError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(Exception)
    async def _unhandled_error_handler(request: Request, exc: Exception):
        exception(_LOG, "unhandled_error", exc, path=request.url.path)
        return JSONResponse(
            status_code=500,
            content={
                "ok": False,
                "error": ErrorCode.INTERNAL_ERROR,
                "message": "Internal server error",
            },
        )

    app.include_router(router)
    app.mount(
        config.storage.audio_url_prefix,
        StaticFiles(directory=str(conversion_service.artifacts.directory)),
        name="audio",
    )
    app.mount(
        config.storage.uploads_url_prefix,
        StaticFiles(directory=str(media_service.uploads.directory)),
        name="uploads",
    )

    return app


def run() -> None:
    """Serve with uvicorn on the configured host and port."""
    import uvicorn

    server = app.state.settings.get_gateway_config().server
    uvicorn.run(app, host=server.host, port=server.port)


# Global application instance for ASGI servers (uvicorn, gunicorn, etc.)
app = create_app()


if __name__ == "__main__":
    run()
