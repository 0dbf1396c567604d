# Path: core/recognition/scheduler.py
# Purpose: Dispatch recognition tasks to a bounded pool of reusable OCR engines.
# Layer: core/recognition.
# Details: Lazily builds the pool once, joins every batch, and records failing tasks as skips.

from __future__ import annotations

import logging
import queue
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Union

from core.errors import ExtractionCancelled, RecognitionUnavailableError
from core.models.domain import RecognitionFailure, RecognitionResult, RecognitionTask
from .base import RecognitionEngine
from .cancellation import CancellationToken

logger = logging.getLogger(__name__)

DEFAULT_POOL_SIZE = 2

EngineFactory = Callable[[], RecognitionEngine]
BatchProgress = Callable[[float], None]


@dataclass
class RecognitionBatch:
    """Results of one joined batch, successes in task order."""

    results: List[RecognitionResult] = field(default_factory=list)
    failures: List[RecognitionFailure] = field(default_factory=list)


class RecognitionScheduler:
    """Run recognition tasks concurrently on ``pool_size`` engines.

    Every task borrows exactly one engine for the duration of its call and
    hands it back afterwards, so an engine never serves two tasks at once.
    The pool is created on first use and lives until :meth:`shutdown`.
    """

    def __init__(
        self, engine_factory: EngineFactory, pool_size: int = DEFAULT_POOL_SIZE, language: str = "eng"
    ) -> None:
        if pool_size <= 0:
            raise ValueError("pool_size must be positive.")
        self._engine_factory = engine_factory
        self.pool_size = pool_size
        self.language = language
        self._engines: "queue.Queue[RecognitionEngine]" = queue.Queue()
        self._executor: Optional[ThreadPoolExecutor] = None
        self._lock = threading.Lock()

    @property
    def initialized(self) -> bool:
        return self._executor is not None

    def ensure_initialized(self) -> None:
        """Create the engine pool once; concurrent callers wait for the first one."""

        self._acquire_executor()

    def _acquire_executor(self) -> ThreadPoolExecutor:
        executor = self._executor
        if executor is not None:
            return executor
        with self._lock:
            if self._executor is not None:
                return self._executor
            engines: List[RecognitionEngine] = []
            try:
                for _ in range(self.pool_size):
                    engine = self._engine_factory()
                    engine.ensure_initialized()
                    engines.append(engine)
            except RecognitionUnavailableError:
                self._close_engines(engines)
                raise
            except Exception as exc:  # noqa: BLE001 - surface any start-up failure as unavailability
                self._close_engines(engines)
                raise RecognitionUnavailableError(f"Failed to start OCR engine: {exc}") from exc
            for engine in engines:
                self._engines.put(engine)
            self._executor = ThreadPoolExecutor(max_workers=self.pool_size, thread_name_prefix="ocr-worker")
            logger.info("Recognition pool started with %d workers", self.pool_size)
            return self._executor

    def run(
        self,
        tasks: Iterable[RecognitionTask],
        on_progress: Optional[BatchProgress] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> RecognitionBatch:
        """Recognize every task and wait until all have finished or failed."""

        tasks = list(tasks)
        if not tasks:
            return RecognitionBatch()
        executor = self._acquire_executor()

        total = len(tasks)
        finished = 0
        progress_lock = threading.Lock()

        def report(partial: float) -> None:
            if on_progress is None:
                return
            with progress_lock:
                done = finished
            on_progress(min(1.0, (done + partial) / total))

        futures = {
            executor.submit(self._recognize, task, report, cancel): index for index, task in enumerate(tasks)
        }
        outcomes: List[Union[RecognitionResult, RecognitionFailure, None]] = [None] * total

        for future in as_completed(futures):
            index = futures[future]
            task = tasks[index]
            try:
                outcomes[index] = future.result()
            except ExtractionCancelled:
                outcomes[index] = None
            except Exception as exc:  # noqa: BLE001 - one failed task must not abort the batch
                logger.warning("Skipping %s: %s", task.describe(), exc)
                outcomes[index] = RecognitionFailure(task=task, error=str(exc) or exc.__class__.__name__)
            with progress_lock:
                finished += 1
            report(0.0)

        if cancel is not None:
            cancel.raise_if_cancelled()

        batch = RecognitionBatch()
        for outcome in outcomes:
            if isinstance(outcome, RecognitionResult):
                batch.results.append(outcome)
            elif isinstance(outcome, RecognitionFailure):
                batch.failures.append(outcome)
        logger.debug("Batch finished: %d succeeded, %d skipped", len(batch.results), len(batch.failures))
        return batch

    def _recognize(
        self,
        task: RecognitionTask,
        report: Callable[[float], None],
        cancel: Optional[CancellationToken],
    ) -> RecognitionResult:
        if cancel is not None:
            cancel.raise_if_cancelled()
        engine = self._engines.get()
        try:
            output = engine.recognize(task.image(), self.language, progress=report)
        finally:
            self._engines.put(engine)
        confidence = min(1.0, max(0.0, float(output.confidence or 0.0)))
        return RecognitionResult(task=task, text=(output.text or "").strip(), confidence=confidence)

    def shutdown(self) -> None:
        """Stop the worker threads and release every engine."""

        with self._lock:
            if self._executor is None:
                return
            self._executor.shutdown(wait=True)
            self._executor = None
            engines: List[RecognitionEngine] = []
            while True:
                try:
                    engines.append(self._engines.get_nowait())
                except queue.Empty:
                    break
            self._close_engines(engines)
            logger.info("Recognition pool stopped")

    @staticmethod
    def _close_engines(engines: Iterable[RecognitionEngine]) -> None:
        for engine in engines:
            try:
                engine.close()
            except Exception as exc:  # noqa: BLE001 - best effort release during teardown
                logger.warning("Failed to close %s engine: %s", getattr(engine, "name", "ocr"), exc)

    def __enter__(self) -> "RecognitionScheduler":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()


__all__ = ["DEFAULT_POOL_SIZE", "EngineFactory", "RecognitionBatch", "RecognitionScheduler"]
