# Test configuration utilities.
# Ensures the repository root is on sys.path so that 'pdf2img' can be imported
# when running pytest without installing the package.
from __future__ import annotations

import asyncio
from collections.abc import Callable, Generator, Sequence
from pathlib import Path
import sys

import fitz
import pytest


ROOT = Path(__file__).parent.resolve()
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from pdf2img.engine import shutdown_engine  # noqa: E402


PdfFactory = Callable[..., bytes]


def build_pdf(
    page_sizes: Sequence[tuple[float, float]] = ((300, 200),),
    text: str = "Invoice #1",
) -> bytes:
    """Build a PDF in memory with one page per entry in ``page_sizes``."""
    doc = fitz.open()
    try:
        for index, (width, height) in enumerate(page_sizes, start=1):
            page = doc.new_page(width=width, height=height)
            page.insert_text((10, 30), f"{text} page {index}", fontsize=14)
        return doc.tobytes()
    finally:
        doc.close()


@pytest.fixture
def make_pdf() -> PdfFactory:
    return build_pdf


@pytest.fixture(scope="session", autouse=True)
def cleanup_render_worker() -> Generator[None, None, None]:
    """Ensure the process-wide render worker is shut down after tests."""
    yield
    asyncio.run(shutdown_engine())
