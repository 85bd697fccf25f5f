"""Centralised environment configuration for pdf2img.

This module ensures `.env` loading happens in one place and exposes a
typed snapshot of the engine, blob URL and logging knobs.
Downstream modules call `get_settings()` instead of touching `os.environ`
directly, making it easier to validate values and override behaviour in
tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import os
from pathlib import Path

from dotenv import load_dotenv


_DEFAULT_ENV_PATH = Path(__file__).resolve().parents[2] / ".env"

DEFAULT_ENGINE_MODULE = "fitz"
DEFAULT_BLOB_ORIGIN = "pdf2img"
DEFAULT_LOG_LEVEL = "INFO"


def _coerce_str(value: str | None, default: str) -> str:
    if value is None or not value.strip():
        return default
    return value.strip()


@dataclass(frozen=True)
class EngineSettings:
    module_name: str


@dataclass(frozen=True)
class LoggingSettings:
    console_level: str
    file_path: Path | None


@dataclass(frozen=True)
class Pdf2ImgSettings:
    """Top-level snapshot of configuration values."""

    env_file: Path
    engine: EngineSettings
    blob_origin: str
    logging: LoggingSettings


def _resolve_env_path(env_file: os.PathLike[str] | str | None) -> Path:
    if env_file is None:
        return _DEFAULT_ENV_PATH
    return Path(env_file).resolve()


@lru_cache(maxsize=4)
def _load_settings(env_path: Path) -> Pdf2ImgSettings:
    # Existing environment variables take precedence over `.env` defaults.
    load_dotenv(dotenv_path=env_path, override=False)

    engine = EngineSettings(
        module_name=_coerce_str(os.getenv("PDF2IMG_ENGINE_MODULE"), DEFAULT_ENGINE_MODULE),
    )

    log_file = os.getenv("PDF2IMG_LOG_FILE")
    logging_settings = LoggingSettings(
        console_level=_coerce_str(os.getenv("PDF2IMG_LOG_LEVEL"), DEFAULT_LOG_LEVEL).upper(),
        file_path=Path(log_file).expanduser() if log_file else None,
    )

    return Pdf2ImgSettings(
        env_file=env_path,
        engine=engine,
        blob_origin=_coerce_str(os.getenv("PDF2IMG_BLOB_ORIGIN"), DEFAULT_BLOB_ORIGIN),
        logging=logging_settings,
    )


def get_settings(
    env_file: os.PathLike[str] | str | None = None,
    *,
    reload: bool = False,
) -> Pdf2ImgSettings:
    """Return the cached settings snapshot.

    Args:
        env_file: Optional explicit path to a `.env` file. When omitted the repo
            root `.env` file is used.
        reload: When True the cached snapshot is cleared before loading.
    """
    env_path = _resolve_env_path(env_file)
    if reload:
        _load_settings.cache_clear()
    return _load_settings(env_path)
