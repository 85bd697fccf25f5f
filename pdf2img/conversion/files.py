"""Input file sources accepted by the converter."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

import aiofiles


class BinaryFile(Protocol):
    """Anything with a file name whose full contents can be awaited."""

    @property
    def name(self) -> str: ...

    async def read(self) -> bytes: ...


class LocalFile:
    """A file on disk, read without blocking the event loop."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def name(self) -> str:
        return self._path.name

    @property
    def path(self) -> Path:
        return self._path

    async def read(self) -> bytes:
        async with aiofiles.open(self._path, "rb") as file_obj:
            return await file_obj.read()

    def __repr__(self) -> str:
        return f"LocalFile({str(self._path)!r})"


__all__ = ["BinaryFile", "LocalFile"]
