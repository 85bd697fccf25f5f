"""Configuration helpers for pdf2img.

Expose `get_settings` as the canonical accessor for environment-driven
configuration. Modules should avoid loading `.env` directly and instead
import from this package to retrieve typed snapshots.
"""

from .settings import Pdf2ImgSettings, get_settings


__all__ = ["Pdf2ImgSettings", "get_settings"]
