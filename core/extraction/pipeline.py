# Path: core/extraction/pipeline.py
# Purpose: Orchestrate variant generation, region detection, concurrent OCR, and aggregation.
# Layer: core/extraction.
# Details: Only recognition runs on the worker pool; every other stage runs on the caller's thread.

from __future__ import annotations

import logging
import queue
import threading
import time
from typing import Any, Iterator, List, Mapping, Optional, Tuple, Union

from core.aggregation.aggregator import aggregate, select_best_result
from core.enhance.variants import ORIGINAL_LABEL, EnhancementRecipe, generate_variants
from core.errors import ExtractionError, LabelScanError
from core.models.domain import ExtractionResult, ImageVariant, RecognitionTask, Region, SourceImage
from core.recognition.cancellation import CancellationToken
from core.recognition.progress import ProgressListener, ProgressTracker
from core.recognition.scheduler import RecognitionScheduler
from core.regions.detector import RegionDetector

logger = logging.getLogger(__name__)

StreamItem = Union[int, ExtractionResult]


class ExtractionPipeline:
    """High-level service turning a product photograph into a cleaned transcript."""

    def __init__(
        self,
        scheduler: RecognitionScheduler,
        region_detector: Optional[RegionDetector] = None,
        recipes: Optional[Mapping[str, EnhancementRecipe]] = None,
    ) -> None:
        self.scheduler = scheduler
        self.region_detector = region_detector or RegionDetector()
        self.recipes = recipes

    def extract(
        self,
        image: SourceImage,
        on_progress: Optional[ProgressListener] = None,
        cancel: Optional[CancellationToken] = None,
    ) -> ExtractionResult:
        """
        Run the full multi-variant extraction.

        External calls:
        - core/enhance/variants.py::generate_variants - builds the enhanced renditions.
        - core/regions/detector.py::RegionDetector.detect - finds candidate text regions.
        - core/recognition/scheduler.py::RecognitionScheduler.run - recognizes variants, then regions.
        - core/aggregation/aggregator.py::aggregate - reconciles everything into one transcript.

        Raises RecognitionUnavailableError when no OCR engine can start and
        ExtractionCancelled when ``cancel`` fires. An image without text yields
        an empty transcript, not an error.
        """

        tracker = ProgressTracker(on_progress)
        tracker.report(0)
        try:
            return self._extract(image, tracker, cancel)
        except LabelScanError:
            raise
        except Exception as exc:  # noqa: BLE001 - surface unexpected failures as one readable error
            logger.exception("Text extraction failed")
            raise ExtractionError(f"Failed to extract text: {exc}") from exc

    def _extract(
        self, image: SourceImage, tracker: ProgressTracker, cancel: Optional[CancellationToken]
    ) -> ExtractionResult:
        started = time.perf_counter()
        self._check_cancelled(cancel)
        self.scheduler.ensure_initialized()

        variants = generate_variants(image, self.recipes)
        tracker.advance("variants", 1.0)
        self._check_cancelled(cancel)

        regions = self.region_detector.detect(image)
        tracker.advance("regions", 1.0)
        self._check_cancelled(cancel)
        logger.debug(
            "Prepared %d variants and %d regions in %.3fs", len(variants), len(regions), time.perf_counter() - started
        )

        variant_tasks = [RecognitionTask(task_id=index, variant=variant) for index, variant in enumerate(variants)]
        variant_batch = self.scheduler.run(variant_tasks, tracker.stage_callback("full_image"), cancel)
        tracker.advance("full_image", 1.0)

        best = select_best_result(variant_batch.results)
        source_variant = best.task.variant if best is not None else variants[0]
        region_tasks = self._region_tasks(source_variant, regions, first_id=len(variant_tasks))
        region_batch = self.scheduler.run(region_tasks, tracker.stage_callback("region_text"), cancel)
        tracker.advance("region_text", 1.0)
        self._check_cancelled(cancel)

        transcript = aggregate(variant_batch.results, region_batch.results, image.height)
        tracker.complete()

        failures = variant_batch.failures + region_batch.failures
        logger.info(
            "Extracted %d characters in %.2fs (%d tasks skipped)",
            len(transcript.text),
            time.perf_counter() - started,
            len(failures),
        )
        return ExtractionResult(
            text=transcript.text,
            regions=transcript.regions,
            best_variant=transcript.best_variant,
            failures=failures,
            progress=tracker.history,
        )

    @staticmethod
    def _region_tasks(variant: ImageVariant, regions: List[Region], first_id: int) -> List[RecognitionTask]:
        return [
            RecognitionTask(task_id=first_id + offset, variant=variant, region=region)
            for offset, region in enumerate(regions)
        ]

    @staticmethod
    def _check_cancelled(cancel: Optional[CancellationToken]) -> None:
        if cancel is not None:
            cancel.raise_if_cancelled()

    def extract_simple(self, image: SourceImage, on_progress: Optional[ProgressListener] = None) -> ExtractionResult:
        """Recognize the unmodified image once, without variants, regions, or cleanup."""

        tracker = ProgressTracker(on_progress, stages={"recognize": (0, 100)})
        tracker.report(0)
        variant = ImageVariant(label=ORIGINAL_LABEL, pixels=image.pixels)
        batch = self.scheduler.run([RecognitionTask(task_id=0, variant=variant)], tracker.stage_callback("recognize"))
        tracker.complete()

        text = batch.results[0].text if batch.results else ""
        return ExtractionResult(
            text=text,
            best_variant=ORIGINAL_LABEL if batch.results else None,
            failures=batch.failures,
            progress=tracker.history,
        )

    def stream(self, image: SourceImage, cancel: Optional[CancellationToken] = None) -> Iterator[StreamItem]:
        """Yield integer progress percentages, then the :class:`ExtractionResult`.

        Extraction runs on a background thread. Errors are re-raised in the
        consumer; closing the generator early cancels the extraction.
        """

        token = cancel or CancellationToken()
        events: "queue.Queue[Tuple[str, Any]]" = queue.Queue()

        def work() -> None:
            try:
                result = self.extract(image, on_progress=lambda value: events.put(("progress", value)), cancel=token)
            except Exception as exc:  # noqa: BLE001 - handed over to the consuming thread
                events.put(("error", exc))
            else:
                events.put(("done", result))

        worker = threading.Thread(target=work, name="extraction", daemon=True)
        worker.start()
        finished = False
        try:
            while True:
                kind, payload = events.get()
                if kind == "progress":
                    yield payload
                    continue
                finished = True
                worker.join()
                if kind == "error":
                    raise payload
                yield payload
                return
        finally:
            if not finished:
                token.cancel()

    def shutdown(self) -> None:
        self.scheduler.shutdown()

    def __enter__(self) -> "ExtractionPipeline":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()


__all__ = ["ExtractionPipeline", "StreamItem"]
