"""Configuration management for the fleet operations service.

Loads and validates YAML configuration with sensible defaults
for the database, OCR engine, scan preprocessing, and HTTP API.
"""

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "FLEETOPS_CONFIG"
DEFAULT_CONFIG_PATH = Path("configs/config.yaml")


class DatabaseConfig(BaseModel):
    """Configuration for the relational store."""

    url: str = "sqlite:///./fleetops.db"
    echo: bool = False


class OCRConfig(BaseModel):
    """Configuration for the Tesseract OCR engine."""

    tesseract_cmd: str | None = None
    default_lang: str = "eng"
    psm: int = 3
    timeout_seconds: float = 30.0
    pdf_dpi: int = 300


class PreprocessingConfig(BaseModel):
    """Configuration for scan cleanup before recognition."""

    upscale_min_side: int = 1700
    denoise_enabled: bool = True
    deskew_enabled: bool = True
    binarize_enabled: bool = False


class APIConfig(BaseModel):
    """Configuration for the HTTP surface."""

    title: str = "Fleet Ops API"
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])


class AppConfig(BaseModel):
    """Top-level application configuration."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    ocr: OCRConfig = Field(default_factory=OCRConfig)
    preprocessing: PreprocessingConfig = Field(default_factory=PreprocessingConfig)
    api: APIConfig = Field(default_factory=APIConfig)
    log_level: str = "INFO"


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file. Defaults to the
            ``FLEETOPS_CONFIG`` environment variable, then configs/config.yaml.

    Returns:
        Validated application configuration.
    """
    if path is None:
        env_path = os.environ.get(CONFIG_ENV_VAR)
        path = Path(env_path) if env_path else DEFAULT_CONFIG_PATH

    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        return AppConfig(**raw)

    logger.info("No config file found at %s, using defaults", path)
    return AppConfig()
