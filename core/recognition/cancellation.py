# Path: core/recognition/cancellation.py
# Purpose: Let callers abandon an in-flight extraction.
# Layer: core/recognition.
# Details: The token is polled between tasks and between pipeline stages; running OCR calls finish normally.

from __future__ import annotations

import threading

from core.errors import ExtractionCancelled


class CancellationToken:
    """Thread-safe flag shared by a caller and one pipeline invocation."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise ExtractionCancelled("Extraction was cancelled by the caller.")


__all__ = ["CancellationToken"]
