# Path: core/regions/detector.py
# Purpose: Locate rectangular image regions that are likely to contain printed text.
# Layer: core/regions.
# Details: Uses an object detector when available and a grid contrast heuristic otherwise, then merges overlaps.

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

import numpy as np

from core.errors import DetectorUnavailableError
from core.models.domain import Region, SourceImage
from .object_detection import ObjectDetector

logger = logging.getLogger(__name__)

TEXT_BEARING_CLASSES = frozenset(
    {"book", "cell phone", "laptop", "tv", "remote", "keyboard", "mouse", "monitor", "screen"}
)
COARSE_GRID_SIZE = 4
FINE_GRID_SIZE = 8
# Thresholds apply to the standard deviation of cell brightness.
FINE_GRID_VARIANCE_THRESHOLD = 25.0
COARSE_GRID_VARIANCE_THRESHOLD = 40.0
EDGE_BAND_FRACTION = 0.2
MIN_REGION_SIZE = 20
HEURISTIC_LABEL = "potential-text"
HEURISTIC_SCORE = 0.5


def merge_regions(regions: Iterable[Region]) -> List[Region]:
    """Merge overlapping boxes into their union until no two boxes overlap.

    Each merge removes one box, so the loop always terminates.
    """

    merged = list(regions)
    changed = True
    while changed:
        changed = False
        for i in range(len(merged)):
            for j in range(i + 1, len(merged)):
                if merged[i].overlaps(merged[j]):
                    merged[i] = merged[i].union(merged[j])
                    del merged[j]
                    changed = True
                    break
            if changed:
                break
    return merged


def drop_small_regions(regions: Iterable[Region], min_size: int = MIN_REGION_SIZE) -> List[Region]:
    return [region for region in regions if region.width >= min_size and region.height >= min_size]


def brightness_map(pixels: np.ndarray) -> np.ndarray:
    return pixels.astype(np.float32).mean(axis=2)


def grid_contrast_regions(image: SourceImage, grid_size: int, threshold: float) -> List[Region]:
    """Return grid cells whose brightness standard deviation exceeds ``threshold``."""

    cell_width = image.width // grid_size
    cell_height = image.height // grid_size
    if cell_width == 0 or cell_height == 0:
        return []

    brightness = brightness_map(image.pixels)
    regions: List[Region] = []
    for gx in range(grid_size):
        for gy in range(grid_size):
            x = gx * cell_width
            y = gy * cell_height
            cell = brightness[y : y + cell_height, x : x + cell_width]
            if float(cell.std()) > threshold:
                regions.append(
                    Region(x, y, cell_width, cell_height, score=HEURISTIC_SCORE, label=HEURISTIC_LABEL)
                )
    return regions


def edge_band_regions(image: SourceImage, fraction: float = EDGE_BAND_FRACTION) -> List[Region]:
    """Return the top, bottom, left and right bands plus the whole image."""

    width, height = image.width, image.height
    band_h = int(height * fraction)
    band_w = int(width * fraction)
    boxes = [
        (0, 0, width, band_h),
        (0, int(height * (1 - fraction)), width, band_h),
        (0, 0, band_w, height),
        (int(width * (1 - fraction)), 0, band_w, height),
        (0, 0, width, height),
    ]
    regions: List[Region] = []
    for x, y, w, h in boxes:
        clamped = Region(x, y, w, h, score=HEURISTIC_SCORE, label=HEURISTIC_LABEL).clamp(width, height)
        if clamped is not None:
            regions.append(clamped)
    return regions


class RegionDetector:
    """Find text regions for region-level recognition."""

    def __init__(
        self,
        detector: Optional[ObjectDetector] = None,
        grid_size: int = FINE_GRID_SIZE,
        variance_threshold: Optional[float] = None,
        edge_band_fraction: float = EDGE_BAND_FRACTION,
        min_region_size: int = MIN_REGION_SIZE,
        allowed_classes: Iterable[str] = TEXT_BEARING_CLASSES,
    ) -> None:
        if grid_size <= 0:
            raise ValueError("grid_size must be positive.")
        self.detector = detector
        self.grid_size = grid_size
        if variance_threshold is None:
            variance_threshold = (
                FINE_GRID_VARIANCE_THRESHOLD if grid_size >= FINE_GRID_SIZE else COARSE_GRID_VARIANCE_THRESHOLD
            )
        self.variance_threshold = variance_threshold
        self.edge_band_fraction = edge_band_fraction
        self.min_region_size = min_region_size
        self.allowed_classes = frozenset(allowed_classes)

    def detect(self, image: SourceImage) -> List[Region]:
        """Return merged, clamped regions large enough to be worth recognizing."""

        regions = self._detect_objects(image)
        if not regions:
            regions = self.detect_heuristic(image)
        merged = merge_regions(regions)
        kept = drop_small_regions(merged, self.min_region_size)
        logger.debug("Kept %d regions (%d candidates, %d after merge)", len(kept), len(regions), len(merged))
        return kept

    def detect_heuristic(self, image: SourceImage) -> List[Region]:
        regions = grid_contrast_regions(image, self.grid_size, self.variance_threshold)
        regions.extend(edge_band_regions(image, self.edge_band_fraction))
        return regions

    def _detect_objects(self, image: SourceImage) -> List[Region]:
        if self.detector is None:
            return []
        try:
            detections = self.detector.detect(image)
        except DetectorUnavailableError as exc:
            logger.warning("Object detector unavailable, using contrast heuristic: %s", exc)
            return []
        except Exception as exc:  # noqa: BLE001 - detection is optional, fall back to the heuristic
            logger.warning("Object detection failed, using contrast heuristic: %s", exc)
            return []

        regions: List[Region] = []
        for detection in detections:
            if detection.label not in self.allowed_classes:
                continue
            clamped = detection.clamp(image.width, image.height)
            if clamped is not None:
                regions.append(clamped)
        return regions


__all__ = [
    "COARSE_GRID_SIZE",
    "COARSE_GRID_VARIANCE_THRESHOLD",
    "EDGE_BAND_FRACTION",
    "FINE_GRID_SIZE",
    "FINE_GRID_VARIANCE_THRESHOLD",
    "MIN_REGION_SIZE",
    "RegionDetector",
    "TEXT_BEARING_CLASSES",
    "drop_small_regions",
    "edge_band_regions",
    "grid_contrast_regions",
    "merge_regions",
]
