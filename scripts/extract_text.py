# Path: scripts/extract_text.py
# Purpose: CLI tool to extract packaging text from a product photograph.
# Layer: scripts.
# Details: Demonstrates how to wire settings, the recognition pool, and the extraction pipeline together.

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

# Ensure project root is on sys.path when running as a script.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from tqdm import tqdm

from config import AppSettings, configure_logging
from core.errors import ExtractionError
from core.extraction.factory import build_pipeline
from core.models.domain import SourceImage


def main() -> int:
    """Run text extraction over a single image."""

    parser = argparse.ArgumentParser(description="Extract text from a product photo")
    parser.add_argument("image", type=Path, help="Image file to read")
    parser.add_argument("--language", type=str, default=None, help="Tesseract language, e.g. 'eng'")
    parser.add_argument("--workers", type=int, default=None, help="Number of concurrent OCR workers")
    parser.add_argument("--detector", choices=["none", "yolo"], default=None, help="Object detector for text regions")
    parser.add_argument("--simple", action="store_true", help="Recognize the original image once, without variants")
    parser.add_argument("--json", action="store_true", help="Print the full result as JSON")
    args = parser.parse_args()

    settings = AppSettings.from_env()
    if args.language:
        settings.ocr.language = args.language
    if args.workers:
        settings.ocr.pool_size = args.workers
    if args.detector:
        settings.detection.detector = args.detector
    configure_logging(settings.log_level)

    try:
        image = SourceImage.from_path(args.image)
    except OSError as exc:
        print(f"Cannot open {args.image}: {exc}", file=sys.stderr)
        return 2

    with build_pipeline(settings) as pipeline, tqdm(total=100, desc="Extracting text", unit="%") as bar:

        def on_progress(value: int) -> None:
            bar.update(value - bar.n)

        try:
            if args.simple:
                result = pipeline.extract_simple(image, on_progress=on_progress)
            else:
                result = pipeline.extract(image, on_progress=on_progress)
        except ExtractionError as exc:
            print(f"Extraction failed: {exc}", file=sys.stderr)
            return 1

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    elif result.has_text:
        print(result.text)
    else:
        print("No text found.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
