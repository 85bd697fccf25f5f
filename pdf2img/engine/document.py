"""Async wrappers around the PyMuPDF document and page objects.

Every call that touches the engine is dispatched to the handle's render
worker, so parsing and rasterization never block the event loop. Page
counts and page bounds are copied out as plain values on the worker. The
worker has a single thread: PyMuPDF objects must not be used from several
threads at once.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from types import ModuleType
from typing import Any, TypeVar

from PIL import Image

from pdf2img.engine.raster import RasterSurface


T = TypeVar("T")


class RenderError(RuntimeError):
    """Raised when the engine cannot produce the requested page or raster."""


@dataclass(frozen=True)
class WorkerOptions:
    """Where the background render worker runs."""

    max_workers: int = 1
    thread_name_prefix: str = "pdf2img-render"


@dataclass(frozen=True)
class Viewport:
    width: int
    height: int
    scale: float


@dataclass
class EngineHandle:
    """The loaded rendering module together with its configured worker."""

    module: ModuleType
    executor: ThreadPoolExecutor
    worker_options: WorkerOptions

    async def run(self, fn: Callable[..., T], *args: Any) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self.executor, fn, *args)

    async def open_document(self, data: bytes) -> PdfDocument:
        """Parse raw PDF bytes; the engine raises on malformed input."""
        document, page_count = await self.run(self._open, data)
        return PdfDocument(self, document, page_count)

    def _open(self, data: bytes) -> tuple[Any, int]:
        document = self.module.open(stream=data, filetype="pdf")
        return document, int(document.page_count)

    def shutdown(self) -> None:
        self.executor.shutdown(wait=True)


class PdfDocument:
    def __init__(self, engine: EngineHandle, document: Any, page_count: int) -> None:
        self._engine = engine
        self._document = document
        self._page_count = page_count

    @property
    def page_count(self) -> int:
        return self._page_count

    async def get_page(self, page_number: int) -> PdfPage:
        """Return the page at ``page_number`` (1-based)."""
        if not 1 <= page_number <= self._page_count:
            raise RenderError(
                f"Invalid page request: page {page_number} of a {self._page_count}-page document"
            )
        page, bounds = await self._engine.run(self._load_page, page_number - 1)
        return PdfPage(self._engine, page, page_number, bounds)

    def _load_page(self, index: int) -> tuple[Any, tuple[float, float, float, float]]:
        page = self._document.load_page(index)
        rect = page.rect
        return page, (float(rect.x0), float(rect.y0), float(rect.x1), float(rect.y1))

    async def close(self) -> None:
        await self._engine.run(self._document.close)


class PdfPage:
    def __init__(
        self,
        engine: EngineHandle,
        page: Any,
        page_number: int,
        bounds: tuple[float, float, float, float],
    ) -> None:
        self._engine = engine
        self._page = page
        self._bounds = bounds
        self.page_number = page_number

    def get_viewport(self, scale: float) -> Viewport:
        # Rect and Matrix are plain values, safe to use off the worker.
        if scale <= 0:
            raise ValueError(f"Viewport scale must be positive, got {scale}")
        module = self._engine.module
        bounds = (module.Rect(*self._bounds) * module.Matrix(scale, scale)).irect
        return Viewport(width=int(bounds.width), height=int(bounds.height), scale=scale)

    async def render(self, surface: RasterSurface, viewport: Viewport) -> None:
        """Rasterize the page at ``viewport.scale`` and draw it onto ``surface``."""
        image = await self._engine.run(self._rasterize, viewport.scale, surface.antialias_level)
        surface.draw_image(image)

    def _rasterize(self, scale: float, antialias_level: int) -> Image.Image:
        module = self._engine.module
        module.TOOLS.set_aa_level(antialias_level)
        pixmap = self._page.get_pixmap(matrix=module.Matrix(scale, scale), alpha=False)
        if pixmap.width <= 0 or pixmap.height <= 0:
            raise RenderError(f"Page {self.page_number} rendered to an empty raster")
        mode = "RGB" if pixmap.n == 3 else "L"
        return Image.frombytes(mode, (pixmap.width, pixmap.height), pixmap.samples)


__all__ = [
    "EngineHandle",
    "PdfDocument",
    "PdfPage",
    "RenderError",
    "Viewport",
    "WorkerOptions",
]
