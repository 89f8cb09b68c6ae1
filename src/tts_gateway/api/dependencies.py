"""
FastAPI Dependency Providers.

The services are built once by ``main.create_app`` and stored on
``app.state``; these providers hand them to route handlers:

    @router.post("/convert")
    async def convert(service: ConversionService = Depends(get_conversion_service)):
        ...

Tests build an app with their own service (fake engines, temp dirs) and
every route picks it up through the same providers.
"""
from __future__ import annotations

from fastapi import Request

from tts_gateway.services.conversion_service import ConversionService
from tts_gateway.services.media_service import MediaService


def get_conversion_service(request: Request) -> ConversionService:
    return request.app.state.conversion_service


def get_media_service(request: Request) -> MediaService:
    return request.app.state.media_service
