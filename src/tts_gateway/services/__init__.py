"""
tts-gateway Services Layer.

Business logic between the API layer and the engine/storage layer.

Components:
    - conversion_service.py: ConversionService (text -> MP3 artifact)
    - media_service.py: MediaService (transcripts, audio and text uploads)
    - validators.py: Input validation functions
"""
from .conversion_service import (
    ConversionRequest,
    ConversionResult,
    ConversionService,
    build_service,
)
from .media_service import MediaService, SavedFile, build_media_service

__all__ = [
    "ConversionService",
    "ConversionRequest",
    "ConversionResult",
    "build_service",
    "MediaService",
    "SavedFile",
    "build_media_service",
]
