"""Lazy, at-most-once loading of the PDF rendering engine.

The engine module is imported only when the first conversion needs it. All
callers that arrive while the import is still running await the same shared
future, so the import and worker set-up happen once per process. A failed
load resets the loader so that a later call can try again.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
import contextlib
from enum import Enum
import importlib
from types import ModuleType

from pdf2img.config import get_settings
from pdf2img.engine.document import EngineHandle, WorkerOptions
from pdf2img.utils.log_utils import logger


DEFAULT_WORKER_OPTIONS = WorkerOptions()


class LoadState(str, Enum):
    UNLOADED = "unloaded"
    LOADING = "loading"
    LOADED = "loaded"


class EngineLoader:
    """Memoizes the engine handle and the in-flight load that produces it."""

    def __init__(
        self,
        module_name: str | None = None,
        *,
        worker_options: WorkerOptions = DEFAULT_WORKER_OPTIONS,
        importer: Callable[[str], ModuleType] = importlib.import_module,
    ) -> None:
        self._module_name = module_name or get_settings().engine.module_name
        self._worker_options = worker_options
        self._importer = importer
        self._engine: EngineHandle | None = None
        self._load_future: asyncio.Future[EngineHandle] | None = None

    @property
    def state(self) -> LoadState:
        if self._engine is not None:
            return LoadState.LOADED
        if self._load_future is not None:
            return LoadState.LOADING
        return LoadState.UNLOADED

    @property
    def module_name(self) -> str:
        return self._module_name

    async def acquire(self) -> EngineHandle:
        """Return the engine handle, loading it on first use."""
        if self._engine is not None:
            return self._engine
        if self._load_future is None:
            self._load_future = asyncio.ensure_future(self._load())
        # A cancelled waiter must not cancel the load other callers share.
        return await asyncio.shield(self._load_future)

    async def _load(self) -> EngineHandle:
        logger.debug(f"Loading rendering engine '{self._module_name}'")
        try:
            module = await asyncio.to_thread(self._importer, self._module_name)
            executor = ThreadPoolExecutor(
                max_workers=self._worker_options.max_workers,
                thread_name_prefix=self._worker_options.thread_name_prefix,
            )
        except BaseException:
            self._load_future = None
            raise
        engine = EngineHandle(
            module=module,
            executor=executor,
            worker_options=self._worker_options,
        )
        self._engine = engine
        self._load_future = None
        logger.info(f"Rendering engine '{self._module_name}' ready")
        return engine

    async def shutdown(self) -> None:
        """Release the render worker and return to the unloaded state.

        A load still in flight is awaited first so that the worker it creates
        is shut down here instead of being published afterwards.
        """
        pending = self._load_future
        if pending is not None:
            # A failed load has already reported to its waiters and left no worker.
            with contextlib.suppress(Exception):
                await asyncio.shield(pending)
        engine, self._engine = self._engine, None
        self._load_future = None
        if engine is not None:
            await asyncio.to_thread(engine.shutdown)


_default_loader: EngineLoader | None = None


def get_default_loader() -> EngineLoader:
    global _default_loader
    if _default_loader is None:
        _default_loader = EngineLoader()
    return _default_loader


async def acquire_engine() -> EngineHandle:
    """Return the process-wide engine handle, loading it at most once."""
    return await get_default_loader().acquire()


async def shutdown_engine() -> None:
    """Close the process-wide render worker, if one was started."""
    if _default_loader is not None:
        await _default_loader.shutdown()


__all__ = [
    "DEFAULT_WORKER_OPTIONS",
    "EngineLoader",
    "LoadState",
    "acquire_engine",
    "get_default_loader",
    "shutdown_engine",
]
