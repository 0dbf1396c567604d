# Path: core/regions/object_detection.py
# Purpose: Define the object detection interface used to find text-bearing objects.
# Layer: core/regions.
# Details: Ships a YOLO adapter whose model is loaded lazily, once per process, behind a lock.

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, List, Optional

from core.errors import DetectorUnavailableError
from core.models.domain import Region, SourceImage

logger = logging.getLogger(__name__)


class ObjectDetector(ABC):
    """Abstract base class for detectors returning labelled bounding boxes."""

    name: str

    def ensure_initialized(self) -> None:
        """Load models if needed; raise :class:`DetectorUnavailableError` when impossible."""

    @abstractmethod
    def detect(self, image: SourceImage) -> List[Region]:
        """Return detections as regions carrying ``label`` and ``score``."""


class YoloObjectDetector(ObjectDetector):
    """Detect objects with an Ultralytics YOLO model trained on COCO classes."""

    def __init__(self, model_name: str = "yolov8n.pt", min_score: float = 0.2, device: Optional[str] = None) -> None:
        self.name = "yolo"
        self.model_name = model_name
        self.min_score = min_score
        self.device = device
        self._model: Any = None
        self._lock = threading.Lock()

    def ensure_initialized(self) -> None:
        if self._model is not None:
            return
        with self._lock:
            if self._model is not None:
                return
            try:
                from ultralytics import YOLO  # type: ignore[import]
            except ImportError as exc:  # pragma: no cover - optional runtime dependency
                raise DetectorUnavailableError("ultralytics package is required for YOLO detection.") from exc
            try:
                model = YOLO(self.model_name)
                if self.device:
                    model = model.to(self.device)
            except Exception as exc:  # noqa: BLE001 - any load failure means the capability is missing
                raise DetectorUnavailableError(f"Failed to load YOLO model {self.model_name}: {exc}") from exc
            self._model = model
            logger.info("YOLO model %s loaded", self.model_name)

    def detect(self, image: SourceImage) -> List[Region]:
        self.ensure_initialized()
        predictions = self._model.predict(image.to_pil(), conf=self.min_score, verbose=False)

        regions: List[Region] = []
        for prediction in predictions:
            names = prediction.names if isinstance(getattr(prediction, "names", None), dict) else {}
            boxes = getattr(prediction, "boxes", None)
            if boxes is None:
                continue
            for box in boxes:
                x0, y0, x1, y1 = [float(v) for v in box.xyxy[0].tolist()]
                class_id = int(box.cls[0].item())
                regions.append(
                    Region(
                        x=int(round(x0)),
                        y=int(round(y0)),
                        width=int(round(x1 - x0)),
                        height=int(round(y1 - y0)),
                        score=float(box.conf[0].item()),
                        label=str(names.get(class_id, class_id)),
                    )
                )
        return regions


__all__ = ["ObjectDetector", "YoloObjectDetector"]
