# Path: core/errors.py
# Purpose: Define the exception hierarchy shared by extraction and catalog services.
# Layer: core.
# Details: Only capability-unavailable and malformed-input errors are meant to reach callers.

from __future__ import annotations


class LabelScanError(Exception):
    """Base class for all errors raised by the labelscan core."""


class ExtractionError(LabelScanError):
    """Text extraction failed as a whole and produced no transcript."""


class RecognitionUnavailableError(ExtractionError):
    """The OCR engine could not be started, so no recognition is possible."""


class ExtractionCancelled(ExtractionError):
    """The caller abandoned an in-flight extraction."""


class DetectorUnavailableError(LabelScanError):
    """The object detector could not be loaded; callers fall back to heuristics."""


class CatalogFormatError(LabelScanError):
    """Catalog data does not have the expected ``vectors``/``products`` shape."""


__all__ = [
    "CatalogFormatError",
    "DetectorUnavailableError",
    "ExtractionCancelled",
    "ExtractionError",
    "LabelScanError",
    "RecognitionUnavailableError",
]
