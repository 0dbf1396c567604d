# Path: core/models/__init__.py
# Purpose: Package initializer for domain model definitions.
# Layer: core/models.
# Details: Exposes dataclasses used across enhancement, recognition, aggregation, and matching layers.

from .domain import (
    AggregatedTranscript,
    ExtractionResult,
    ImageVariant,
    ProductVector,
    RecognitionFailure,
    RecognitionOutput,
    RecognitionResult,
    RecognitionTask,
    Region,
    SimilarityMatch,
    SourceImage,
)

__all__ = [
    "AggregatedTranscript",
    "ExtractionResult",
    "ImageVariant",
    "ProductVector",
    "RecognitionFailure",
    "RecognitionOutput",
    "RecognitionResult",
    "RecognitionTask",
    "Region",
    "SimilarityMatch",
    "SourceImage",
]
