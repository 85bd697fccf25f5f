"""Convert the first page of a PDF into a PNG file and a transient blob URL."""

from __future__ import annotations

from dataclasses import dataclass
import re

from pdf2img.conversion.files import BinaryFile
from pdf2img.engine.document import PdfDocument
from pdf2img.engine.loader import EngineLoader, get_default_loader
from pdf2img.engine.raster import RasterSurface
from pdf2img.utils.blob import Blob, BlobUrlRegistry, NamedFile, get_default_registry
from pdf2img.utils.log_utils import logger


# Fixed 4x magnification so the raster is sharp enough for downstream OCR.
RENDER_SCALE = 4
FIRST_PAGE = 1
PNG_MIME_TYPE = "image/png"
PNG_QUALITY = 1.0

BLOB_ERROR = "Failed to create image blob"
CONVERSION_ERROR_PREFIX = "Failed to convert PDF:"

_PDF_SUFFIX = re.compile(r"\.pdf\Z", re.IGNORECASE)


@dataclass(frozen=True)
class PdfConversionResult:
    image_url: str
    file: NamedFile | None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.file is not None and bool(self.image_url)

    @classmethod
    def failure(cls, error: str) -> PdfConversionResult:
        return cls(image_url="", file=None, error=error)


def png_name_for(pdf_name: str) -> str:
    """``invoice.pdf`` -> ``invoice.png``; names without a PDF suffix just gain ``.png``."""
    return f"{_PDF_SUFFIX.sub('', pdf_name)}.png"


def _describe(exc: BaseException) -> str:
    """Message for the error string; an empty message falls back to the class name.

    Passing the empty message through unchanged would yield the bare
    ``"Failed to convert PDF: "``.
    """
    return str(exc) or type(exc).__name__


async def _render_first_page(document: PdfDocument) -> Blob | None:
    page = await document.get_page(FIRST_PAGE)
    viewport = page.get_viewport(scale=RENDER_SCALE)

    surface = RasterSurface(viewport.width, viewport.height)
    surface.image_smoothing_enabled = True
    surface.image_smoothing_quality = "high"

    await page.render(surface, viewport)
    return surface.to_blob(PNG_MIME_TYPE, PNG_QUALITY)


async def convert_pdf_to_image(
    file: BinaryFile,
    *,
    loader: EngineLoader | None = None,
    url_registry: BlobUrlRegistry | None = None,
) -> PdfConversionResult:
    """Render page one of ``file`` to PNG.

    Never raises for conversion problems: load, parse and render failures come
    back as ``error`` on the result. On success the caller owns
    ``result.image_url`` and should release it with ``revoke_object_url``.
    """
    try:
        engine_loader = loader if loader is not None else get_default_loader()
        engine = await engine_loader.acquire()
        data = await file.read()
        document = await engine.open_document(data)
        try:
            blob = await _render_first_page(document)
        finally:
            await document.close()
    except Exception as exc:
        logger.error(f"PDF conversion failed for {file.name!r}: {_describe(exc)}")
        return PdfConversionResult.failure(f"{CONVERSION_ERROR_PREFIX} {_describe(exc)}")

    if blob is None:
        return PdfConversionResult.failure(BLOB_ERROR)

    image_file = NamedFile.from_blob(blob, png_name_for(file.name), type=PNG_MIME_TYPE)
    registry = url_registry if url_registry is not None else get_default_registry()
    return PdfConversionResult(
        image_url=registry.create_object_url(blob),
        file=image_file,
    )


__all__ = [
    "BLOB_ERROR",
    "CONVERSION_ERROR_PREFIX",
    "PdfConversionResult",
    "RENDER_SCALE",
    "convert_pdf_to_image",
    "png_name_for",
]
