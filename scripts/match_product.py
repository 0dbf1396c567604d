# Path: scripts/match_product.py
# Purpose: Simple CLI to identify a product from a feature vector.
# Layer: scripts.
# Details: Loads the catalog (built-in sample or a JSON file) and prints the nearest products.

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Ensure project root is on sys.path when running as a script.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config import AppSettings, configure_logging
from core.extraction.factory import build_catalog
from core.vector_store.parsing import parse_feature_vector


def main() -> int:
    """Execute a nearest-product query from the command line."""

    parser = argparse.ArgumentParser(description="Find the catalog products closest to a feature vector")
    parser.add_argument("vector", type=str, help="Query vector as JSON, or a path to a JSON file")
    parser.add_argument("--catalog", type=Path, default=None, help="Catalog JSON replacing the sample catalog")
    parser.add_argument("--k", type=int, default=None, help="Number of results to return")
    args = parser.parse_args()

    settings = AppSettings.from_env()
    if args.catalog is not None:
        settings.catalog.path = args.catalog
    configure_logging(settings.log_level)

    raw = args.vector
    candidate = Path(raw)
    if not raw.lstrip().startswith(("[", "{")) and candidate.is_file():
        raw = candidate.read_text(encoding="utf-8")
    vector = parse_feature_vector(raw)
    if vector is None:
        print("Could not parse a numeric feature vector.", file=sys.stderr)
        return 2

    catalog = build_catalog(settings)
    for match in catalog.find_nearest(vector, k=args.k or settings.catalog.default_k):
        strength = f" ({match.product.strength})" if match.product.strength else ""
        print(f"id={match.product.id} name={match.product.name}{strength} similarity={match.similarity:.4f}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
