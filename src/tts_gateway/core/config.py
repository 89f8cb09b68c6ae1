"""
Configuration Management for tts-gateway.

This module provides centralized configuration handling with:
    - Default values (Defaults class)
    - Dataclass-based configuration objects
    - YAML file loading with environment variable overrides
    - Validation with meaningful error messages

Configuration Hierarchy (highest priority first):
    1. Environment variables (PORT, TTS_GW_AUDIO_DIR, TTS_GW_EDGE_VOICE, ...)
    2. YAML config file (config/settings.yaml, or $TTS_GW_SETTINGS)
    3. Defaults class values

Example settings.yaml:
    storage:
      audio_dir: public/audio
      uploads_dir: uploads

    engines:
      default: gtts
      edge:
        default_voice: en-US-AriaNeural

    logging:
      level: 2  # NORMAL
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List
import os
import yaml


class ConfigValidationError(Exception):
    """
    Raised when configuration validation fails.

    Thrown when a configuration value is outside acceptable bounds
    or of the wrong type.
    """
    pass


class Defaults:
    """
    Centralized default configuration values.

    Used whenever no override is provided via YAML config or
    environment variables.
    """

    # ─────────────────────────────────────────────────────────────────────────
    # Storage (flat directories, no retention policy)
    # ─────────────────────────────────────────────────────────────────────────
    STORAGE_AUDIO_DIR = "public/audio"      # Generated speech artifacts
    STORAGE_UPLOADS_DIR = "uploads"         # Transient uploads and transcripts
    STORAGE_AUDIO_URL_PREFIX = "/audio"
    STORAGE_UPLOADS_URL_PREFIX = "/uploads"

    # ─────────────────────────────────────────────────────────────────────────
    # Engines
    # ─────────────────────────────────────────────────────────────────────────
    ENGINE_DEFAULT = "gtts"
    GTTS_TLD = "com"                        # Google host used for plain codes
    GTTS_SLOW = False
    EDGE_DEFAULT_VOICE = "en-US-AriaNeural"

    # ─────────────────────────────────────────────────────────────────────────
    # Uploads
    # ─────────────────────────────────────────────────────────────────────────
    UPLOADS_ALLOWED_AUDIO_EXTENSIONS = (".mp3", ".wav", ".ogg", ".m4a", ".webm", ".flac")

    # ─────────────────────────────────────────────────────────────────────────
    # Logging
    # ─────────────────────────────────────────────────────────────────────────
    LOGGING_TEXT_PREVIEW_CHARS = 80
    LOGGING_LEVEL = 2                       # 1=MINIMAL, 2=NORMAL, 3=VERBOSE, 4=DEBUG

    # ─────────────────────────────────────────────────────────────────────────
    # Server
    # ─────────────────────────────────────────────────────────────────────────
    SERVER_HOST = "0.0.0.0"
    SERVER_PORT = 3000


@dataclass
class StorageConfig:
    """
    Filesystem layout for artifacts and uploads.

    Both directories are flat; file names carry a millisecond timestamp.
    """
    audio_dir: str = Defaults.STORAGE_AUDIO_DIR
    uploads_dir: str = Defaults.STORAGE_UPLOADS_DIR
    audio_url_prefix: str = Defaults.STORAGE_AUDIO_URL_PREFIX
    uploads_url_prefix: str = Defaults.STORAGE_UPLOADS_URL_PREFIX


@dataclass
class GttsConfig:
    tld: str = Defaults.GTTS_TLD
    slow: bool = Defaults.GTTS_SLOW


@dataclass
class EdgeConfig:
    default_voice: str = Defaults.EDGE_DEFAULT_VOICE


@dataclass
class EnginesConfig:
    """
    Engine selection defaults.

    ``default`` is only used when a caller omits the engine entirely;
    unrecognized engine names still fall back to gtts.
    """
    default: str = Defaults.ENGINE_DEFAULT
    gtts: GttsConfig = field(default_factory=GttsConfig)
    edge: EdgeConfig = field(default_factory=EdgeConfig)


@dataclass
class UploadsConfig:
    allowed_audio_extensions: List[str] = field(
        default_factory=lambda: list(Defaults.UPLOADS_ALLOWED_AUDIO_EXTENSIONS)
    )


@dataclass
class LoggingConfig:
    """
    Logging configuration.

    Log levels:
        1 = MINIMAL: Startup, shutdown, critical errors only
        2 = NORMAL: Request lifecycle (default)
        3 = VERBOSE: Per-stage timing, detailed flow
        4 = DEBUG: Internal state, full tracing
    """
    text_preview_chars: int = Defaults.LOGGING_TEXT_PREVIEW_CHARS
    level: int = Defaults.LOGGING_LEVEL


@dataclass
class ServerConfig:
    host: str = Defaults.SERVER_HOST
    port: int = Defaults.SERVER_PORT


@dataclass
class GatewayConfig:
    """
    Validated configuration for the gateway.

    Usage:
        settings = load_settings("config/settings.yaml")
        config = GatewayConfig.from_settings(settings)
        print(config.storage.audio_dir)
    """
    storage: StorageConfig = field(default_factory=StorageConfig)
    engines: EnginesConfig = field(default_factory=EnginesConfig)
    uploads: UploadsConfig = field(default_factory=UploadsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

    @classmethod
    def from_settings(cls, settings: "Settings") -> "GatewayConfig":
        """
        Create GatewayConfig from Settings with validation.

        Args:
            settings: Raw Settings object loaded from YAML.

        Returns:
            Validated GatewayConfig instance.

        Raises:
            ConfigValidationError: If any value fails validation.
        """
        raw = settings.raw

        # ─────────────────────────────────────────────────────────────────────
        # Storage configuration (env overrides first)
        # ─────────────────────────────────────────────────────────────────────
        storage_raw = raw.get("storage", {}) or {}
        storage = StorageConfig(
            audio_dir=os.getenv("TTS_GW_AUDIO_DIR")
                or str(storage_raw.get("audio_dir", Defaults.STORAGE_AUDIO_DIR)),
            uploads_dir=os.getenv("TTS_GW_UPLOADS_DIR")
                or str(storage_raw.get("uploads_dir", Defaults.STORAGE_UPLOADS_DIR)),
            audio_url_prefix=str(storage_raw.get("audio_url_prefix", Defaults.STORAGE_AUDIO_URL_PREFIX)),
            uploads_url_prefix=str(storage_raw.get("uploads_url_prefix", Defaults.STORAGE_UPLOADS_URL_PREFIX)),
        )
        cls._validate_non_empty("storage.audio_dir", storage.audio_dir)
        cls._validate_non_empty("storage.uploads_dir", storage.uploads_dir)
        cls._validate_url_prefix("storage.audio_url_prefix", storage.audio_url_prefix)
        cls._validate_url_prefix("storage.uploads_url_prefix", storage.uploads_url_prefix)

        # ─────────────────────────────────────────────────────────────────────
        # Engines configuration
        # ─────────────────────────────────────────────────────────────────────
        engines_raw = raw.get("engines", {}) or {}
        gtts_raw = engines_raw.get("gtts", {}) or {}
        edge_raw = engines_raw.get("edge", {}) or {}
        engines = EnginesConfig(
            default=str(engines_raw.get("default", Defaults.ENGINE_DEFAULT)).strip().lower(),
            gtts=GttsConfig(
                tld=str(gtts_raw.get("tld", Defaults.GTTS_TLD)),
                slow=cls._parse_bool("engines.gtts.slow", gtts_raw.get("slow", Defaults.GTTS_SLOW)),
            ),
            edge=EdgeConfig(
                default_voice=os.getenv("TTS_GW_EDGE_VOICE")
                    or str(edge_raw.get("default_voice", Defaults.EDGE_DEFAULT_VOICE)),
            ),
        )
        cls._validate_non_empty("engines.gtts.tld", engines.gtts.tld)
        cls._validate_non_empty("engines.edge.default_voice", engines.edge.default_voice)

        # ─────────────────────────────────────────────────────────────────────
        # Uploads configuration
        # ─────────────────────────────────────────────────────────────────────
        uploads_raw = raw.get("uploads", {}) or {}
        exts_raw = uploads_raw.get("allowed_audio_extensions", Defaults.UPLOADS_ALLOWED_AUDIO_EXTENSIONS)
        if isinstance(exts_raw, str):
            exts_raw = [e for e in exts_raw.split(",") if e.strip()]
        uploads = UploadsConfig(
            allowed_audio_extensions=[cls._normalize_extension(e) for e in exts_raw],
        )
        if not uploads.allowed_audio_extensions:
            raise ConfigValidationError("uploads.allowed_audio_extensions must not be empty")

        # ─────────────────────────────────────────────────────────────────────
        # Logging configuration
        # ─────────────────────────────────────────────────────────────────────
        logging_raw = raw.get("logging", {}) or {}
        log_level_raw = logging_raw.get("level", Defaults.LOGGING_LEVEL)

        # Handle string log levels (e.g., "INFO", "DEBUG")
        if isinstance(log_level_raw, str):
            level_map = {
                "MINIMAL": 1, "1": 1,
                "NORMAL": 2, "INFO": 2, "2": 2,
                "VERBOSE": 3, "3": 3,
                "DEBUG": 4, "TRACE": 4, "4": 4,
            }
            log_level = level_map.get(log_level_raw.upper(), Defaults.LOGGING_LEVEL)
        else:
            log_level = int(log_level_raw)

        logging_cfg = LoggingConfig(
            text_preview_chars=int(logging_raw.get("text_preview_chars", Defaults.LOGGING_TEXT_PREVIEW_CHARS)),
            level=log_level,
        )
        cls._validate_non_negative("logging.text_preview_chars", logging_cfg.text_preview_chars)
        cls._validate_range("logging.level", logging_cfg.level, 1, 4)

        # ─────────────────────────────────────────────────────────────────────
        # Server configuration (PORT wins, as on most PaaS hosts)
        # ─────────────────────────────────────────────────────────────────────
        server_raw = raw.get("server", {}) or {}
        port_env = os.getenv("PORT")
        try:
            port = int(port_env) if port_env else int(server_raw.get("port", Defaults.SERVER_PORT))
        except ValueError:
            raise ConfigValidationError(f"server.port must be an integer, got {port_env!r}")
        server = ServerConfig(
            host=str(server_raw.get("host", Defaults.SERVER_HOST)),
            port=port,
        )
        cls._validate_range("server.port", server.port, 1, 65535)

        return cls(
            storage=storage,
            engines=engines,
            uploads=uploads,
            logging=logging_cfg,
            server=server,
        )

    @staticmethod
    def _normalize_extension(ext: Any) -> str:
        """Lowercase and dot-prefix an extension (``MP3`` -> ``.mp3``)."""
        e = str(ext).strip().lower()
        return e if e.startswith(".") else f".{e}"

    @staticmethod
    def _parse_bool(name: str, value: Any) -> bool:
        """Accept real booleans and the usual YAML/env spellings."""
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in ("true", "1", "yes", "on"):
            return True
        if text in ("false", "0", "no", "off", ""):
            return False
        raise ConfigValidationError(f"{name} must be a boolean, got {value!r}")

    @staticmethod
    def _validate_non_empty(name: str, value: str) -> None:
        if not value or not value.strip():
            raise ConfigValidationError(f"{name} must not be empty")

    @staticmethod
    def _validate_url_prefix(name: str, value: str) -> None:
        if not value.startswith("/"):
            raise ConfigValidationError(f"{name} must start with '/', got {value!r}")

    @staticmethod
    def _validate_non_negative(name: str, value: int | float) -> None:
        """Validate that a value is non-negative (>= 0)."""
        if value < 0:
            raise ConfigValidationError(f"{name} must be non-negative, got {value}")

    @staticmethod
    def _validate_range(name: str, value: int | float, min_val: int | float, max_val: int | float) -> None:
        """Validate that a value is within a range [min_val, max_val]."""
        if not (min_val <= value <= max_val):
            raise ConfigValidationError(f"{name} must be between {min_val} and {max_val}, got {value}")


@dataclass(frozen=True)
class Settings:
    """
    Immutable settings container loaded from YAML.

    This is the raw settings object before validation. Use
    get_gateway_config() to get a validated GatewayConfig.

    Attributes:
        raw: Dictionary of raw configuration values.
    """
    raw: Dict[str, Any]

    def get_gateway_config(self) -> GatewayConfig:
        """
        Get validated GatewayConfig from these settings.

        Raises:
            ConfigValidationError: If validation fails.
        """
        return GatewayConfig.from_settings(self)


def settings_path() -> str:
    """Settings file location, overridable via TTS_GW_SETTINGS."""
    return os.getenv("TTS_GW_SETTINGS", "config/settings.yaml")


def load_settings(path: str = "config/settings.yaml") -> Settings:
    """
    Load settings from a YAML configuration file.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        Settings object with loaded configuration.

    Raises:
        FileNotFoundError: If the settings file doesn't exist.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"settings file not found: {p.resolve()}")

    with p.open("r", encoding="utf-8") as f:
        raw: Dict[str, Any] = yaml.safe_load(f) or {}

    return Settings(raw=raw)


def load_settings_or_defaults(path: str | None = None) -> Settings:
    """
    Load settings, falling back to an empty (all-defaults) Settings.

    The gateway must boot without a settings file, so a missing file
    is not an error here. Malformed YAML still raises.
    """
    try:
        return load_settings(path or settings_path())
    except FileNotFoundError:
        return Settings(raw={})
