"""Lazy-loaded PDF rendering engine and its raster surfaces."""

from .document import EngineHandle, PdfDocument, PdfPage, RenderError, Viewport, WorkerOptions
from .loader import EngineLoader, LoadState, acquire_engine, get_default_loader, shutdown_engine
from .raster import RasterSurface


__all__ = [
    "EngineHandle",
    "EngineLoader",
    "LoadState",
    "PdfDocument",
    "PdfPage",
    "RasterSurface",
    "RenderError",
    "Viewport",
    "WorkerOptions",
    "acquire_engine",
    "get_default_loader",
    "shutdown_engine",
]
