from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from functools import wraps
from pathlib import Path
from typing import Any, ParamSpec, TypeVar

import aiofiles
import typer  # type: ignore[import]

from pdf2img.conversion import LocalFile, convert_pdf_to_image, png_name_for
from pdf2img.engine import shutdown_engine
from pdf2img.utils.blob import revoke_object_url
from pdf2img.utils.log_utils import logger


app = typer.Typer(
    help="pdf2img command-line interface",
)


_P = ParamSpec("_P")
_T = TypeVar("_T")


def _synchronous(handler: Callable[_P, Coroutine[Any, Any, _T]]) -> Callable[_P, _T]:
    @wraps(handler)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _T:
        try:
            return asyncio.run(handler(*args, **kwargs))
        except KeyboardInterrupt as err:
            logger.info("Interrupted by user")
            raise typer.Exit(code=130) from err

    return wrapper


@app.callback()
def main() -> None:
    """Convert PDF documents to PNG images."""


@app.command("convert")
@_synchronous
async def convert_command(
    input_file: Path = typer.Argument(
        ...,
        help="PDF file whose first page is rendered.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    output_dir: Path | None = typer.Option(
        None,
        "--output-dir",
        help="Destination directory for the PNG (default: next to the input).",
        file_okay=False,
        dir_okay=True,
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Print the output path and exit without rendering.",
    ),
) -> None:
    destination_dir = output_dir or input_file.parent
    destination = destination_dir / png_name_for(input_file.name)

    if dry_run:
        logger.info(f"DRY RUN: {input_file} -> {destination}")
        return

    try:
        result = await convert_pdf_to_image(LocalFile(input_file))
        if not result.ok or result.file is None:
            logger.error(result.error or "Conversion produced no image")
            raise typer.Exit(code=1)

        try:
            destination_dir.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(destination, "wb") as file_obj:
                await file_obj.write(result.file.data)
        finally:
            revoke_object_url(result.image_url)
    finally:
        await shutdown_engine()

    typer.echo(str(destination))


if __name__ == "__main__":  # pragma: no cover
    app()
