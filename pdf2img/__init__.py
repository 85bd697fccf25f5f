"""Render the first page of a PDF to a PNG file and a transient blob URL."""

from pdf2img.conversion import LocalFile, PdfConversionResult, convert_pdf_to_image
from pdf2img.engine import acquire_engine, shutdown_engine
from pdf2img.utils.blob import NamedFile, resolve_object_url, revoke_object_url


__all__ = [
    "LocalFile",
    "NamedFile",
    "PdfConversionResult",
    "acquire_engine",
    "convert_pdf_to_image",
    "resolve_object_url",
    "revoke_object_url",
    "shutdown_engine",
]
