# Path: core/recognition/base.py
# Purpose: Define the RecognitionEngine interface wrapped by the recognition scheduler.
# Layer: core/recognition.
# Details: Engines only transcribe; enhancement, scheduling, and reconciliation live elsewhere.

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Optional

import numpy as np

from core.models.domain import RecognitionOutput

ProgressCallback = Callable[[float], None]


class RecognitionEngine(ABC):
    """Abstract base class for OCR backends.

    One engine instance serves one pool worker at a time; every ``recognize``
    call must be independent of the previous one.
    """

    name: str

    def ensure_initialized(self) -> None:
        """Prepare the backend; raise RecognitionUnavailableError when it cannot run."""

    @abstractmethod
    def recognize(
        self, image: np.ndarray, language: str = "eng", progress: Optional[ProgressCallback] = None
    ) -> RecognitionOutput:
        """Transcribe an RGB raster and return text with a confidence in [0, 1]."""

    def close(self) -> None:
        """Release backend resources when the pool shuts down."""
