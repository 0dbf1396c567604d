# Path: core/extraction/factory.py
# Purpose: Wire pipeline and catalog components from application settings.
# Layer: core/extraction.
# Details: Keeps scripts and the HTTP API free of construction details.

from __future__ import annotations

from functools import partial
from typing import Optional

from config.settings import AppSettings, DetectionSettings
from core.recognition.scheduler import RecognitionScheduler
from core.recognition.tesseract_engine import TesseractEngine
from core.regions.detector import RegionDetector
from core.regions.object_detection import ObjectDetector, YoloObjectDetector
from core.vector_store.catalog_store import ProductCatalog, get_catalog
from .pipeline import ExtractionPipeline


def build_region_detector(settings: DetectionSettings) -> RegionDetector:
    detector: Optional[ObjectDetector] = None
    if settings.detector == "yolo":
        detector = YoloObjectDetector(model_name=settings.model_name, min_score=settings.min_score)
    return RegionDetector(
        detector=detector,
        grid_size=settings.grid_size,
        variance_threshold=settings.variance_threshold,
        edge_band_fraction=settings.edge_band_fraction,
        min_region_size=settings.min_region_size,
    )


def build_pipeline(settings: Optional[AppSettings] = None) -> ExtractionPipeline:
    """Create an extraction pipeline backed by a Tesseract worker pool."""

    settings = settings or AppSettings()
    engine_factory = partial(
        TesseractEngine,
        tesseract_cmd=settings.ocr.tesseract_cmd,
        psm=settings.ocr.psm,
        timeout_s=settings.ocr.timeout_s,
    )
    scheduler = RecognitionScheduler(engine_factory, pool_size=settings.ocr.pool_size, language=settings.ocr.language)
    return ExtractionPipeline(scheduler=scheduler, region_detector=build_region_detector(settings.detection))


def build_catalog(settings: Optional[AppSettings] = None) -> ProductCatalog:
    """Return the process-wide catalog, replaced by the configured file when one is set."""

    settings = settings or AppSettings()
    catalog = get_catalog()
    if settings.catalog.path is not None:
        catalog.load_file(settings.catalog.path)
    return catalog


__all__ = ["build_catalog", "build_pipeline", "build_region_detector"]
