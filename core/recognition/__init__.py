# Path: core/recognition/__init__.py
# Purpose: Package initializer for OCR engines and recognition scheduling.
# Layer: core/recognition.
# Details: Exposes the engine interface, the Tesseract adapter, the worker pool, and progress helpers.

from .base import RecognitionEngine
from .cancellation import CancellationToken
from .progress import STAGES, ProgressTracker
from .scheduler import DEFAULT_POOL_SIZE, RecognitionBatch, RecognitionScheduler
from .tesseract_engine import TesseractEngine

__all__ = [
    "CancellationToken",
    "DEFAULT_POOL_SIZE",
    "ProgressTracker",
    "RecognitionBatch",
    "RecognitionEngine",
    "RecognitionScheduler",
    "STAGES",
    "TesseractEngine",
]
