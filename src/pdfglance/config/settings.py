"""Pydantic settings for pdfglance configuration."""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

CONFIG_DIRNAME = ".pdfglance"
CONFIG_FILENAME = "config.yaml"


def get_config_path() -> Path:
    """Location of the optional YAML config file (``~/.pdfglance/config.yaml``).

    The directory is created on first use so the file can be dropped in.
    """
    config_dir = Path.home() / CONFIG_DIRNAME
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir / CONFIG_FILENAME


def _read_config_file(path: Path) -> dict[str, Any]:
    """Top-level mapping of the YAML file, or {} when absent or unusable."""
    if not path.is_file():
        return {}
    try:
        data = yaml.safe_load(path.read_text())
    except (yaml.YAMLError, OSError) as e:
        logger.warning(f"Ignoring unreadable config file {path}: {e}")
        return {}
    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Ignoring config file {path}: expected a mapping, got {type(data).__name__}")
        return {}
    return data


class CacheSettings(BaseModel):
    """Rendered page cache."""

    capacity: int = Field(default=10, ge=1)


class RenderSettings(BaseModel):
    """Page rasterization and background scheduling."""

    width: int = Field(default=1080, gt=0)
    max_in_flight: int = Field(default=2, ge=1)
    buffer_pages: int = Field(default=2, ge=0)  # pages pre-rendered around the viewport
    alpha: bool = True


class ExtractionSettings(BaseModel):
    """Text extraction backend used for search."""

    backend: Literal["pdfplumber", "pymupdf"] = "pdfplumber"


class EditSettings(BaseModel):
    """Redaction output."""

    fill_color: tuple[float, float, float] = (0.0, 0.0, 0.0)
    suffix: str = "_redacted"


class DrawSettings(BaseModel):
    """Freehand stroke overlay."""

    color: tuple[float, float, float] = (1.0, 0.0, 0.0)
    width: float = Field(default=5.0, gt=0)


class CoordinateSettings(BaseModel):
    """Screen <-> PDF coordinate mapping."""

    aspect_correct: bool = False


class Settings(BaseSettings):
    """All pdfglance settings.

    Nested fields are addressed from the environment with a double
    underscore, e.g. ``PDFGLANCE_RENDER__WIDTH=720``.
    """

    model_config = SettingsConfigDict(
        env_prefix="PDFGLANCE_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    cache: CacheSettings = Field(default_factory=CacheSettings)
    render: RenderSettings = Field(default_factory=RenderSettings)
    extraction: ExtractionSettings = Field(default_factory=ExtractionSettings)
    edits: EditSettings = Field(default_factory=EditSettings)
    draw: DrawSettings = Field(default_factory=DrawSettings)
    coords: CoordinateSettings = Field(default_factory=CoordinateSettings)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # File values arrive as init kwargs; the environment wins over them
        return env_settings, init_settings, dotenv_settings, file_secret_settings


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings.

    Precedence, highest first: ``PDFGLANCE_*`` environment variables, the
    YAML config file, built-in defaults.
    """
    return Settings(**_read_config_file(get_config_path()))
