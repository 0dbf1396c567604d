# Path: core/recognition/tesseract_engine.py
# Purpose: Provide a RecognitionEngine backed by the Tesseract OCR binary.
# Layer: core/recognition.
# Details: Uses pytesseract word-level data to rebuild lines and a mean word confidence.

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import pytesseract
from PIL import Image

from core.errors import RecognitionUnavailableError
from core.models.domain import RecognitionOutput
from .base import ProgressCallback, RecognitionEngine

logger = logging.getLogger(__name__)


def _normalize_confidence(raw_conf: float) -> Optional[float]:
    # Tesseract reports -1 for non-word rows and 0..100 otherwise.
    if raw_conf < 0:
        return None
    return max(0.0, min(1.0, raw_conf / 100.0))


def _parse_float(value: Any) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def assemble_output(data: Dict[str, List[Any]]) -> RecognitionOutput:
    """Rebuild line text and a mean confidence from ``image_to_data`` dict output."""

    lines: "OrderedDict[Tuple[int, int, int, int], List[str]]" = OrderedDict()
    confidences: List[float] = []

    for i, raw_text in enumerate(data.get("text", [])):
        word = str(raw_text or "").strip()
        if not word:
            continue
        key = (
            int(data["page_num"][i]) if "page_num" in data else 1,
            int(data["block_num"][i]),
            int(data["par_num"][i]),
            int(data["line_num"][i]),
        )
        lines.setdefault(key, []).append(word)

        raw_conf = _parse_float(data["conf"][i])
        conf = _normalize_confidence(raw_conf) if raw_conf is not None else None
        if conf is not None:
            confidences.append(conf)

    text = "\n".join(" ".join(words) for words in lines.values())
    confidence = float(np.mean(confidences)) if confidences else 0.0
    return RecognitionOutput(text=text, confidence=confidence)


class TesseractEngine(RecognitionEngine):
    """Tesseract OCR through pytesseract.

    Each call spawns its own tesseract process, so instances share no state
    between tasks.
    """

    def __init__(
        self, tesseract_cmd: Optional[str] = None, psm: Optional[int] = None, timeout_s: float = 0
    ) -> None:
        self.name = "tesseract"
        self.tesseract_cmd = tesseract_cmd
        self.psm = psm
        self.timeout_s = timeout_s
        self._version: Optional[str] = None

    def ensure_initialized(self) -> None:
        if self._version is not None:
            return
        if self.tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = self.tesseract_cmd
        try:
            self._version = str(pytesseract.get_tesseract_version())
        except (pytesseract.TesseractNotFoundError, OSError) as exc:
            raise RecognitionUnavailableError(
                "Tesseract OCR is not installed or not on PATH; text extraction is unavailable."
            ) from exc
        logger.debug("Tesseract %s ready", self._version)

    def recognize(
        self, image: np.ndarray, language: str = "eng", progress: Optional[ProgressCallback] = None
    ) -> RecognitionOutput:
        self.ensure_initialized()
        if progress is not None:
            progress(0.0)

        config = f"--psm {self.psm}" if self.psm is not None else ""
        data = pytesseract.image_to_data(
            Image.fromarray(np.ascontiguousarray(image)),
            lang=language,
            config=config,
            timeout=self.timeout_s,
            output_type=pytesseract.Output.DICT,
        )
        output = assemble_output(data)

        if progress is not None:
            progress(1.0)
        return output


__all__ = ["TesseractEngine", "assemble_output"]
