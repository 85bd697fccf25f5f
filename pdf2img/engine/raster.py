"""Offscreen raster surfaces used as render targets before PNG encoding."""

from __future__ import annotations

from io import BytesIO

from PIL import Image

from pdf2img.utils.blob import Blob
from pdf2img.utils.log_utils import logger


# Anti-aliasing levels understood by the rendering engine (0 disables it).
SMOOTHING_LEVELS: dict[str, int] = {
    "low": 2,
    "medium": 4,
    "high": 8,
}

_FORMATS_BY_MIME: dict[str, str] = {
    "image/png": "PNG",
}


class RasterSurface:
    """A white RGB pixel buffer plus the smoothing options used to draw on it."""

    def __init__(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Raster surface must have a positive size, got {width}x{height}")
        self._image = Image.new("RGB", (width, height), color="white")
        self.image_smoothing_enabled = False
        self.image_smoothing_quality = "low"

    @property
    def width(self) -> int:
        return self._image.width

    @property
    def height(self) -> int:
        return self._image.height

    @property
    def image(self) -> Image.Image:
        return self._image

    @property
    def antialias_level(self) -> int:
        if not self.image_smoothing_enabled:
            return 0
        return SMOOTHING_LEVELS.get(self.image_smoothing_quality, SMOOTHING_LEVELS["low"])

    def draw_image(self, image: Image.Image) -> None:
        """Composite ``image`` onto the surface at the origin, clipped to its bounds."""
        if image.mode != "RGB":
            image = image.convert("RGB")
        self._image.paste(image, (0, 0))

    def to_blob(self, mime_type: str = "image/png", quality: float = 1.0) -> Blob | None:
        """Encode the surface; returns None when no blob could be produced.

        PNG is lossless, so ``quality`` only has to be within ``[0, 1]``.
        """
        image_format = _FORMATS_BY_MIME.get(mime_type)
        if image_format is None:
            logger.warning(f"Unsupported raster encoding '{mime_type}'")
            return None
        if not 0.0 <= quality <= 1.0:
            logger.warning(f"Encoder quality {quality} outside [0, 1]")
            return None

        buffer = BytesIO()
        try:
            self._image.save(buffer, format=image_format)
        except (OSError, ValueError) as exc:
            logger.warning(f"Failed to encode {self.width}x{self.height} surface: {exc}")
            return None

        data = buffer.getvalue()
        if not data:
            return None
        return Blob(data=data, type=mime_type)


__all__ = ["RasterSurface", "SMOOTHING_LEVELS"]
