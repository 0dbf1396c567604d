from pathlib import Path

import pytest
from pydantic import ValidationError

from config.settings import AppSettings, DetectionSettings
from core.extraction.factory import build_catalog, build_region_detector
from core.regions.object_detection import YoloObjectDetector


def test_defaults():
    settings = AppSettings.from_env({})
    assert settings.ocr.language == "eng"
    assert settings.ocr.pool_size == 2
    assert settings.detection.detector == "none"
    assert settings.catalog.path is None
    assert settings.log_level == "INFO"


def test_environment_overrides():
    settings = AppSettings.from_env(
        {
            "LABELSCAN_OCR_LANGUAGE": "eng+swe",
            "LABELSCAN_OCR_POOL_SIZE": "4",
            "LABELSCAN_DETECTOR": "yolo",
            "LABELSCAN_GRID_SIZE": "4",
            "LABELSCAN_CATALOG_PATH": "/tmp/catalog.json",
            "LABELSCAN_LOG_LEVEL": "debug",
        }
    )
    assert settings.ocr.language == "eng+swe"
    assert settings.ocr.pool_size == 4
    assert settings.detection.detector == "yolo"
    assert settings.detection.variance_threshold == 40.0
    assert settings.catalog.path == Path("/tmp/catalog.json")
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize("name, value", [("LABELSCAN_OCR_POOL_SIZE", "0"), ("LABELSCAN_DETECTOR", "ssd")])
def test_invalid_environment_values(name, value):
    with pytest.raises(ValidationError):
        AppSettings.from_env({name: value})


def test_region_detector_from_settings():
    detector = build_region_detector(DetectionSettings(detector="yolo", grid_size=4, min_region_size=10))
    assert isinstance(detector.detector, YoloObjectDetector)
    assert detector.grid_size == 4
    assert detector.variance_threshold == 40.0
    assert detector.min_region_size == 10

    assert build_region_detector(DetectionSettings()).detector is None


def test_build_catalog_loads_configured_file(tmp_path, monkeypatch):
    from core.vector_store import catalog_store

    monkeypatch.setattr(catalog_store, "_catalog", None)
    path = tmp_path / "catalog.json"
    path.write_text('{"vectors": [[1, 0], [0, 1]]}', encoding="utf-8")

    catalog = build_catalog(AppSettings.from_env({"LABELSCAN_CATALOG_PATH": str(path)}))

    assert len(catalog) == 2
    assert catalog is catalog_store.get_catalog()


def test_configure_logging_installs_one_handler():
    import logging

    from config.logging_config import configure_logging

    root = logging.getLogger()
    level = root.level
    try:
        configure_logging("debug")
        configure_logging("warning")
        named = [h for h in root.handlers if h.get_name() == "labelscan"]
        assert len(named) == 1
        assert root.level == logging.WARNING
    finally:
        for handler in [h for h in root.handlers if h.get_name() == "labelscan"]:
            root.removeHandler(handler)
        root.setLevel(level)
