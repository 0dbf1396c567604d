# Path: core/vector_store/parsing.py
# Purpose: Parse query feature vectors supplied by an external feature extractor.
# Layer: core/vector_store.
# Details: Accepts the catalog-shaped payload, a bare array, or a single-vector object.

from __future__ import annotations

import json
import logging
import math
from typing import Any, List, Optional, Sequence

logger = logging.getLogger(__name__)


def _as_numbers(value: Any) -> Optional[List[float]]:
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence) or not value:
        return None
    if not all(isinstance(item, (int, float)) and not isinstance(item, bool) for item in value):
        return None
    try:
        numbers = [float(item) for item in value]
    except OverflowError:
        return None
    if not all(math.isfinite(number) for number in numbers):
        return None
    return numbers


def parse_feature_vector(value: Any) -> Optional[List[float]]:
    """Extract one query vector from JSON text or decoded JSON.

    Recognised shapes, in order: ``{"vectors": [[...], ...]}`` (first vector
    wins), ``[...]``, and ``{"vector": [...]}``. Returns None otherwise.
    """

    data = value
    if isinstance(value, (str, bytes)):
        try:
            data = json.loads(value)
        except ValueError as exc:
            logger.error("Error parsing feature vector: %s", exc)
            return None

    if isinstance(data, dict):
        vectors = data.get("vectors")
        if isinstance(vectors, list) and vectors:
            return _as_numbers(vectors[0])
        if "vector" in data:
            return _as_numbers(data["vector"])
        return None
    return _as_numbers(data)


__all__ = ["parse_feature_vector"]
