# Path: core/extraction/__init__.py
# Purpose: Package initializer for the text extraction pipeline.
# Layer: core/extraction.
# Details: Exposes the pipeline and its settings-driven factories.

from .factory import build_catalog, build_pipeline, build_region_detector
from .pipeline import ExtractionPipeline

__all__ = ["ExtractionPipeline", "build_catalog", "build_pipeline", "build_region_detector"]
