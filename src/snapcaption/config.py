"""
SnapCaption Configuration
=========================

This module handles configuration loading for the capture-and-caption pipeline.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. config.yaml file
    3. Default values (lowest priority)

Environment Variable Mapping:
    SNAPCAPTION_DEVICE_INDEX   -> camera.device_index
    SNAPCAPTION_POLL_INTERVAL_MS -> camera.poll_interval_ms
    SNAPCAPTION_API_URL        -> caption.api_url
    SNAPCAPTION_API_TOKEN      -> caption.api_token
    HF_TOKEN                   -> caption.api_token (fallback)
    SNAPCAPTION_API_TIMEOUT    -> caption.timeout_seconds
    SNAPCAPTION_EXPORT_DIR     -> export.directory
    SNAPCAPTION_LOG_LEVEL      -> logging.level

Example:
    from snapcaption.config import settings

    print(settings.caption.api_url)
    print(settings.camera.device_index)
"""

import os
import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field


logger = logging.getLogger(__name__)


DEFAULT_CAPTION_API_URL = (
    "https://api-inference.huggingface.co/models/Salesforce/blip-image-captioning-base"
)


# =============================================================================
# Configuration Models
# =============================================================================

class AppConfig(BaseModel):
    """Application identification."""

    name: str = Field(default="snapcaption", description="Application name")
    version: str = Field(default="0.1.0", description="Application version")


class CameraConfig(BaseModel):
    """Camera device and preview polling configuration."""

    device_index: int = Field(default=0, ge=0, description="Camera device index")
    width: Optional[int] = Field(
        default=None,
        gt=0,
        description="Requested capture width (None = device default)",
    )
    height: Optional[int] = Field(
        default=None,
        gt=0,
        description="Requested capture height (None = device default)",
    )
    poll_interval_ms: int = Field(
        default=33,
        ge=1,
        description="Preview polling interval in milliseconds (~30 fps)",
    )
    first_frame_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="How long the CLI waits for the first preview frame",
    )


class CodecConfig(BaseModel):
    """Image encoding configuration."""

    caption_format: str = Field(
        default="jpeg",
        description="Format used when sending frames to the caption API",
    )
    jpeg_quality: int = Field(default=95, ge=1, le=100, description="JPEG quality")


class CaptionConfig(BaseModel):
    """Caption inference API configuration."""

    api_url: str = Field(
        default=DEFAULT_CAPTION_API_URL,
        description="Image-captioning inference endpoint",
    )
    api_token: Optional[str] = Field(
        default=None,
        description="Bearer token for the inference endpoint",
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="HTTP timeout per caption attempt",
    )
    retry_on_error_text: bool = Field(
        default=True,
        description="Also retry when a caption merely contains the text 'Error'",
    )


class ExportConfig(BaseModel):
    """Exported capture and caption files."""

    directory: str = Field(default=".", description="Directory for exported files")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="text", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for SnapCaption.

    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """

    app: AppConfig = Field(default_factory=AppConfig)
    camera: CameraConfig = Field(default_factory=CameraConfig)
    codec: CodecConfig = Field(default_factory=CodecConfig)
    caption: CaptionConfig = Field(default_factory=CaptionConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Load configuration from YAML file and environment variables.

    Priority (highest to lowest):
        1. Environment variables
        2. YAML config file
        3. Default values

    Args:
        config_path: Path to config.yaml. If None, searches common locations.

    Returns:
        Settings: Loaded configuration
    """
    if config_path is None:
        search_paths = [
            Path("config.yaml"),
            Path("config.yml"),
            Path(__file__).parent.parent.parent / "config.yaml",
        ]
        for path in search_paths:
            if path.exists():
                config_path = str(path)
                break

    config_data = {}
    if config_path and Path(config_path).exists():
        logger.info(f"Loading config from: {config_path}")
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f) or {}
        # An empty section ("caption:" with nothing under it) loads as None
        for section, value in list(config_data.items()):
            if value is None:
                config_data[section] = {}
    else:
        logger.debug("No config file found, using defaults and environment variables")

    _apply_env_overrides(config_data)

    return Settings.model_validate(config_data)


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""

    # Camera settings
    if env_device := os.environ.get("SNAPCAPTION_DEVICE_INDEX"):
        config_data.setdefault("camera", {})["device_index"] = int(env_device)
    if env_poll := os.environ.get("SNAPCAPTION_POLL_INTERVAL_MS"):
        config_data.setdefault("camera", {})["poll_interval_ms"] = int(env_poll)

    # Caption API settings
    if env_url := os.environ.get("SNAPCAPTION_API_URL"):
        config_data.setdefault("caption", {})["api_url"] = env_url
    if env_token := os.environ.get("SNAPCAPTION_API_TOKEN"):
        config_data.setdefault("caption", {})["api_token"] = env_token
    elif env_token := os.environ.get("HF_TOKEN"):
        caption = config_data.setdefault("caption", {})
        if not caption.get("api_token"):
            caption["api_token"] = env_token
    if env_timeout := os.environ.get("SNAPCAPTION_API_TIMEOUT"):
        config_data.setdefault("caption", {})["timeout_seconds"] = float(env_timeout)

    # Export settings
    if env_dir := os.environ.get("SNAPCAPTION_EXPORT_DIR"):
        config_data.setdefault("export", {})["directory"] = env_dir

    # Logging settings
    if env_log := os.environ.get("SNAPCAPTION_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings."""
    log_level = getattr(logging, settings.logging.level.upper(), logging.INFO)

    if settings.logging.format == "json":
        log_format = '{"time": "%(asctime)s", "level": "%(levelname)s", "module": "%(name)s", "message": "%(message)s"}'
    else:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
    )


# =============================================================================
# Global Settings Instance
# =============================================================================

# Global settings instance - loaded on import
settings = load_config()
