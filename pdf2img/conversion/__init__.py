"""First-page PDF to PNG conversion."""

from .converter import (
    BLOB_ERROR,
    CONVERSION_ERROR_PREFIX,
    RENDER_SCALE,
    PdfConversionResult,
    convert_pdf_to_image,
    png_name_for,
)
from .files import BinaryFile, LocalFile


__all__ = [
    "BLOB_ERROR",
    "CONVERSION_ERROR_PREFIX",
    "RENDER_SCALE",
    "BinaryFile",
    "LocalFile",
    "PdfConversionResult",
    "convert_pdf_to_image",
    "png_name_for",
]
