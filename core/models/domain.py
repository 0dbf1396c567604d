# Path: core/models/domain.py
# Purpose: Define domain models shared across enhancement, recognition, aggregation, and matching.
# Layer: core/models.
# Details: Lightweight dataclasses wrap numpy rasters so stages can pass images without re-encoding.

from __future__ import annotations

import io
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import numpy as np
from PIL import Image


def _as_rgb_array(image: Image.Image) -> np.ndarray:
    return np.asarray(image.convert("RGB"), dtype=np.uint8)


@dataclass(frozen=True, eq=False)
class SourceImage:
    """Captured photograph as an immutable RGB raster of shape (height, width, 3)."""

    pixels: np.ndarray

    def __post_init__(self) -> None:
        if self.pixels.ndim != 3 or self.pixels.shape[2] != 3:
            raise ValueError(f"Expected an (H, W, 3) raster, got shape {self.pixels.shape}.")
        if self.pixels.shape[0] == 0 or self.pixels.shape[1] == 0:
            raise ValueError("Source image must not be empty.")
        frozen = np.array(self.pixels, dtype=np.uint8, copy=True)
        frozen.setflags(write=False)
        object.__setattr__(self, "pixels", frozen)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @classmethod
    def from_pil(cls, image: Image.Image) -> "SourceImage":
        return cls(_as_rgb_array(image))

    @classmethod
    def from_bytes(cls, data: bytes) -> "SourceImage":
        """Decode an encoded image (PNG, JPEG, ...) into a source raster."""

        with Image.open(io.BytesIO(data)) as img:
            return cls.from_pil(img)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "SourceImage":
        with Image.open(path) as img:
            return cls.from_pil(img)

    def to_pil(self) -> Image.Image:
        return Image.fromarray(np.array(self.pixels))


@dataclass(frozen=True, eq=False)
class ImageVariant:
    """Enhanced rendition of a source image together with the recipe that produced it."""

    label: str
    pixels: np.ndarray

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    def crop(self, region: "Region") -> np.ndarray:
        """Return a copy of the pixels covered by ``region``."""

        return np.array(self.pixels[region.y : region.y + region.height, region.x : region.x + region.width])

    def to_pil(self) -> Image.Image:
        return Image.fromarray(np.ascontiguousarray(self.pixels))


@dataclass(frozen=True)
class Region:
    """Axis-aligned box likely to contain text, optionally tagged by a detector."""

    x: int
    y: int
    width: int
    height: int
    score: Optional[float] = None
    label: Optional[str] = None

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def vertical_midpoint(self) -> float:
        return self.y + self.height / 2

    def as_bbox(self) -> Tuple[int, int, int, int]:
        return (self.x, self.y, self.width, self.height)

    def clamp(self, image_width: int, image_height: int) -> Optional["Region"]:
        """Clip the box into the image; return None when nothing of it remains inside."""

        x0 = min(max(self.x, 0), image_width)
        y0 = min(max(self.y, 0), image_height)
        x1 = min(max(self.right, 0), image_width)
        y1 = min(max(self.bottom, 0), image_height)
        if x1 <= x0 or y1 <= y0:
            return None
        return Region(x0, y0, x1 - x0, y1 - y0, score=self.score, label=self.label)

    def overlaps(self, other: "Region") -> bool:
        overlap_x = self.x < other.right and self.right > other.x
        overlap_y = self.y < other.bottom and self.bottom > other.y
        return overlap_x and overlap_y

    def union(self, other: "Region") -> "Region":
        x0 = min(self.x, other.x)
        y0 = min(self.y, other.y)
        x1 = max(self.right, other.right)
        y1 = max(self.bottom, other.bottom)
        scores = [s for s in (self.score, other.score) if s is not None]
        label = self.label if self.label == other.label else None
        return Region(x0, y0, x1 - x0, y1 - y0, score=max(scores) if scores else None, label=label)

    def to_dict(self) -> Dict[str, object]:
        return {
            "bbox": list(self.as_bbox()),
            "score": self.score,
            "label": self.label,
        }


@dataclass(frozen=True, eq=False)
class RecognitionTask:
    """One unit of OCR work: a whole variant, or a region cropped out of a variant."""

    task_id: int
    variant: ImageVariant
    region: Optional[Region] = None

    @property
    def is_region(self) -> bool:
        return self.region is not None

    def image(self) -> np.ndarray:
        if self.region is None:
            return self.variant.pixels
        return self.variant.crop(self.region)

    def describe(self) -> str:
        if self.region is None:
            return f"variant '{self.variant.label}'"
        return f"region {self.region.as_bbox()} of variant '{self.variant.label}'"


@dataclass(frozen=True)
class RecognitionOutput:
    """Raw answer of a recognition engine for one image."""

    text: str
    confidence: float = 0.0


@dataclass(frozen=True, eq=False)
class RecognitionResult:
    """Transcript of a finished task with its confidence in [0, 1]."""

    task: RecognitionTask
    text: str
    confidence: float = 0.0

    @property
    def quality(self) -> float:
        """Ranking score only: transcript length times confidence."""

        return len(self.text) * self.confidence


@dataclass(frozen=True, eq=False)
class RecognitionFailure:
    """Task that raised during recognition and was skipped."""

    task: RecognitionTask
    error: str


@dataclass
class AggregatedTranscript:
    """Final transcript plus the pieces that contributed to it."""

    text: str
    regions: List[Region] = field(default_factory=list)
    best_variant: Optional[str] = None


@dataclass
class ExtractionResult:
    """Outcome of one extraction call. Empty text is a valid result, not an error."""

    text: str
    regions: List[Region] = field(default_factory=list)
    best_variant: Optional[str] = None
    failures: List[RecognitionFailure] = field(default_factory=list)
    progress: List[int] = field(default_factory=list)

    @property
    def has_text(self) -> bool:
        return bool(self.text)

    def to_dict(self) -> Dict[str, object]:
        return {
            "text": self.text,
            "regions": [region.to_dict() for region in self.regions],
            "best_variant": self.best_variant,
            "failures": [{"task": failure.task.describe(), "error": failure.error} for failure in self.failures],
        }


@dataclass(frozen=True)
class ProductVector:
    """Reference feature vector of one catalog product."""

    id: str
    name: str
    vector: Tuple[float, ...]
    strength: Optional[str] = None


@dataclass(frozen=True)
class SimilarityMatch:
    """Catalog product paired with its cosine similarity to a query."""

    product: ProductVector
    similarity: float

    def to_dict(self) -> Dict[str, object]:
        return {
            "productId": self.product.id,
            "name": self.product.name,
            "strength": self.product.strength,
            "similarity": self.similarity,
        }
