# Path: core/regions/__init__.py
# Purpose: Package initializer for text region detection.
# Layer: core/regions.
# Details: Exposes the region detector, merge helpers, and object detector adapters.

from .detector import (
    MIN_REGION_SIZE,
    TEXT_BEARING_CLASSES,
    RegionDetector,
    drop_small_regions,
    merge_regions,
)
from .object_detection import ObjectDetector, YoloObjectDetector

__all__ = [
    "MIN_REGION_SIZE",
    "ObjectDetector",
    "RegionDetector",
    "TEXT_BEARING_CLASSES",
    "YoloObjectDetector",
    "drop_small_regions",
    "merge_regions",
]
