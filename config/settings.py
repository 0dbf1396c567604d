# Path: config/settings.py
# Purpose: Provide typed application configuration models.
# Layer: config.
# Details: Centralizes settings for the OCR pool, region detection thresholds, catalog loading, and logging.

import os
from pathlib import Path
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field

ENV_PREFIX = "LABELSCAN_"


class OcrSettings(BaseModel):
    """Settings describing the OCR backend and its worker pool."""

    language: str = Field(default="eng", description="Tesseract language code(s), e.g. 'eng' or 'eng+swe'.")
    pool_size: int = Field(default=2, ge=1, description="Number of concurrent recognition workers.")
    tesseract_cmd: Optional[str] = Field(default=None, description="Explicit path to the tesseract binary.")
    psm: Optional[int] = Field(default=None, ge=0, le=13, description="Tesseract page segmentation mode.")
    timeout_s: float = Field(default=0, ge=0, description="Per-call OCR timeout in seconds; 0 disables it.")


class DetectionSettings(BaseModel):
    """Settings controlling text region detection."""

    detector: Literal["none", "yolo"] = Field(default="none", description="Object detector used before the heuristic.")
    model_name: str = Field(default="yolov8n.pt", description="Model weights loaded by the YOLO detector.")
    min_score: float = Field(default=0.2, ge=0, le=1, description="Minimum detection confidence.")
    grid_size: int = Field(default=8, ge=1, description="Cells per side of the contrast heuristic grid (4 or 8).")
    fine_variance_threshold: float = Field(default=25.0, description="Brightness deviation threshold for fine grids.")
    coarse_variance_threshold: float = Field(default=40.0, description="Brightness deviation threshold for coarse grids.")
    edge_band_fraction: float = Field(default=0.2, gt=0, lt=1, description="Height/width share of each edge band.")
    min_region_size: int = Field(default=20, ge=1, description="Regions smaller than this in either side are dropped.")

    @property
    def variance_threshold(self) -> float:
        return self.fine_variance_threshold if self.grid_size >= 8 else self.coarse_variance_threshold


class CatalogSettings(BaseModel):
    """Settings controlling the product catalog."""

    path: Optional[Path] = Field(default=None, description="JSON catalog replacing the built-in sample catalog.")
    default_k: int = Field(default=3, ge=1, description="Number of matches returned when none is requested.")


class AppSettings(BaseModel):
    """Top-level application settings shared across services and interfaces."""

    ocr: OcrSettings = Field(default_factory=OcrSettings)
    detection: DetectionSettings = Field(default_factory=DetectionSettings)
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    log_level: str = Field(default="INFO", description="Verbosity level for application logs.")

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "AppSettings":
        """Instantiate settings, applying ``LABELSCAN_*`` environment overrides when present."""

        env = os.environ if environ is None else environ
        payload: Dict[str, Dict[str, Any]] = {"ocr": {}, "detection": {}, "catalog": {}}
        overrides: Dict[str, Any] = {}

        mapping = {
            "OCR_LANGUAGE": ("ocr", "language"),
            "OCR_POOL_SIZE": ("ocr", "pool_size"),
            "TESSERACT_CMD": ("ocr", "tesseract_cmd"),
            "DETECTOR": ("detection", "detector"),
            "GRID_SIZE": ("detection", "grid_size"),
            "CATALOG_PATH": ("catalog", "path"),
        }
        for suffix, (section, key) in mapping.items():
            value = env.get(ENV_PREFIX + suffix)
            if value:
                payload[section][key] = value
        log_level = env.get(ENV_PREFIX + "LOG_LEVEL")
        if log_level:
            overrides["log_level"] = log_level.upper()

        return cls.model_validate({**payload, **overrides})


__all__ = ["AppSettings", "CatalogSettings", "DetectionSettings", "OcrSettings"]
