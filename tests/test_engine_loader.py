"""Tests for the lazy engine loader: memoization, failure reset and shutdown."""

from __future__ import annotations

import asyncio
import threading
import time
from types import ModuleType

import pytest

from pdf2img.engine import EngineLoader, LoadState, WorkerOptions


class _CountingImporter:
    """Stand-in for ``importlib.import_module`` that records how often it runs."""

    def __init__(self, *, fail_times: int = 0, delay: float = 0.05) -> None:
        self.calls = 0
        self._fail_times = fail_times
        self._delay = delay
        self._lock = threading.Lock()

    def __call__(self, name: str) -> ModuleType:
        with self._lock:
            self.calls += 1
            attempt = self.calls
        # Keep the load in flight long enough for other callers to pile up.
        time.sleep(self._delay)
        if attempt <= self._fail_times:
            raise ImportError(f"cannot import {name}")
        return ModuleType(name)


@pytest.mark.asyncio
async def test_concurrent_first_calls_import_engine_once() -> None:
    importer = _CountingImporter()
    loader = EngineLoader("fake_engine", importer=importer)
    try:
        handles = await asyncio.gather(*(loader.acquire() for _ in range(5)))

        assert importer.calls == 1
        assert all(handle is handles[0] for handle in handles)
        assert handles[0].module.__name__ == "fake_engine"
        assert loader.state is LoadState.LOADED
    finally:
        await loader.shutdown()


@pytest.mark.asyncio
async def test_loaded_handle_is_returned_without_reimporting() -> None:
    importer = _CountingImporter(delay=0)
    loader = EngineLoader("fake_engine", importer=importer)
    try:
        first = await loader.acquire()
        second = await loader.acquire()

        assert first is second
        assert importer.calls == 1
    finally:
        await loader.shutdown()


@pytest.mark.asyncio
async def test_state_moves_from_unloaded_through_loading_to_loaded() -> None:
    loader = EngineLoader("fake_engine", importer=_CountingImporter())
    try:
        assert loader.state is LoadState.UNLOADED

        task = asyncio.create_task(loader.acquire())
        await asyncio.sleep(0)
        assert loader.state is LoadState.LOADING

        await task
        assert loader.state is LoadState.LOADED
    finally:
        await loader.shutdown()


@pytest.mark.asyncio
async def test_failed_load_rejects_all_waiters_and_allows_retry() -> None:
    importer = _CountingImporter(fail_times=1)
    loader = EngineLoader("flaky_engine", importer=importer)
    try:
        results = await asyncio.gather(
            loader.acquire(), loader.acquire(), return_exceptions=True
        )

        assert importer.calls == 1
        assert all(isinstance(result, ImportError) for result in results)
        assert loader.state is LoadState.UNLOADED

        handle = await loader.acquire()
        assert importer.calls == 2
        assert handle.module.__name__ == "flaky_engine"
        assert loader.state is LoadState.LOADED
    finally:
        await loader.shutdown()


@pytest.mark.asyncio
async def test_cancelled_waiter_does_not_cancel_shared_load() -> None:
    importer = _CountingImporter()
    loader = EngineLoader("fake_engine", importer=importer)
    try:
        cancelled = asyncio.create_task(loader.acquire())
        survivor = asyncio.create_task(loader.acquire())
        await asyncio.sleep(0)

        cancelled.cancel()
        handle = await survivor

        with pytest.raises(asyncio.CancelledError):
            await cancelled
        assert handle.module.__name__ == "fake_engine"
        assert importer.calls == 1
    finally:
        await loader.shutdown()


@pytest.mark.asyncio
async def test_worker_is_configured_from_worker_options() -> None:
    options = WorkerOptions(thread_name_prefix="test-render")
    loader = EngineLoader("fake_engine", worker_options=options, importer=_CountingImporter(delay=0))
    try:
        handle = await loader.acquire()
        thread_name = await handle.run(lambda: threading.current_thread().name)

        assert handle.worker_options is options
        assert thread_name.startswith("test-render")
    finally:
        await loader.shutdown()


@pytest.mark.asyncio
async def test_shutdown_closes_worker_and_resets_state() -> None:
    importer = _CountingImporter(delay=0)
    loader = EngineLoader("fake_engine", importer=importer)
    handle = await loader.acquire()

    await loader.shutdown()

    assert loader.state is LoadState.UNLOADED
    with pytest.raises(RuntimeError):
        handle.executor.submit(lambda: None)

    reloaded = await loader.acquire()
    assert reloaded is not handle
    assert importer.calls == 2
    await loader.shutdown()


@pytest.mark.asyncio
async def test_missing_engine_module_raises_import_error() -> None:
    loader = EngineLoader("pdf2img_missing_engine_module")

    with pytest.raises(ImportError):
        await loader.acquire()
    assert loader.state is LoadState.UNLOADED


@pytest.mark.asyncio
async def test_default_engine_module_is_pymupdf() -> None:
    loader = EngineLoader()
    try:
        handle = await loader.acquire()

        assert loader.module_name == "fitz"
        assert callable(handle.module.open)
    finally:
        await loader.shutdown()


@pytest.mark.asyncio
async def test_shutdown_during_load_releases_the_new_worker() -> None:
    importer = _CountingImporter(delay=0.1)
    loader = EngineLoader("slow_engine", importer=importer)

    task = asyncio.create_task(loader.acquire())
    await asyncio.sleep(0)
    assert loader.state is LoadState.LOADING

    await loader.shutdown()
    handle = await task

    assert loader.state is LoadState.UNLOADED
    with pytest.raises(RuntimeError):
        handle.executor.submit(lambda: None)


@pytest.mark.asyncio
async def test_shutdown_after_failed_load_leaves_loader_unloaded() -> None:
    loader = EngineLoader("flaky_engine", importer=_CountingImporter(fail_times=1))

    task = asyncio.create_task(loader.acquire())
    await asyncio.sleep(0)
    await loader.shutdown()

    with pytest.raises(ImportError):
        await task
    assert loader.state is LoadState.UNLOADED
