# Path: core/vector_store/catalog_store.py
# Purpose: Provide the in-memory product catalog ranked by cosine similarity.
# Layer: core/vector_store.
# Details: Loads are parsed fully before an atomic swap, so readers never see a half-loaded catalog.

from __future__ import annotations

import json
import logging
import math
import threading
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from core.errors import CatalogFormatError
from core.models.domain import ProductVector, SimilarityMatch
from .base import VectorStore

logger = logging.getLogger(__name__)

DEFAULT_TOP_K = 3

SAMPLE_CATALOG: Dict[str, Any] = {
    "vectors": [
        [0.158, 0.347, 1.045, 0.0, 0.832, 1.605, 1.675, 0.161, 0.0, 0.011, 0.608],
        [0.245, 0.456, 0.987, 0.123, 0.765, 1.432, 1.543, 0.234, 0.098, 0.023, 0.543],
        [0.321, 0.534, 1.123, 0.076, 0.912, 1.765, 1.834, 0.176, 0.045, 0.034, 0.723],
        [0.187, 0.398, 1.076, 0.024, 0.843, 1.621, 1.687, 0.155, 0.012, 0.018, 0.612],
        [0.267, 0.423, 1.034, 0.056, 0.789, 1.598, 1.654, 0.143, 0.032, 0.027, 0.587],
    ],
    "products": [
        {"id": "P001", "name": "Nordic Spirit Mint"},
        {"id": "P002", "name": "LYFT Freeze", "strength": "X-Strong"},
        {"id": "P003", "name": "Zyn Citrus"},
        {"id": "P004", "name": "Skruf Super White"},
        {"id": "P005", "name": "VELO Polar Mint"},
    ],
}


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity over the first ``min(len(a), len(b))`` dimensions.

    Trailing dimensions of the longer vector are ignored. A zero-magnitude
    vector has similarity 0 with everything.
    """

    left = np.asarray(a, dtype=np.float64).ravel()
    right = np.asarray(b, dtype=np.float64).ravel()
    length = min(left.size, right.size)
    if length == 0:
        return 0.0
    left, right = left[:length], right[:length]
    # Rescale so squares of large components cannot overflow; cosine is scale invariant.
    left_scale = float(np.max(np.abs(left)))
    right_scale = float(np.max(np.abs(right)))
    if left_scale == 0.0 or right_scale == 0.0:
        return 0.0
    if not (math.isfinite(left_scale) and math.isfinite(right_scale)):
        return 0.0
    left, right = left / left_scale, right / right_scale

    left_norm = float(np.linalg.norm(left))
    right_norm = float(np.linalg.norm(right))
    if left_norm == 0.0 or right_norm == 0.0:
        return 0.0
    similarity = float(np.dot(left, right)) / (left_norm * right_norm)
    if not math.isfinite(similarity):
        return 0.0
    return max(-1.0, min(1.0, similarity))


def _parse_vector(raw: Any, index: int) -> Tuple[float, ...]:
    if isinstance(raw, (str, bytes)) or not isinstance(raw, Sequence):
        raise CatalogFormatError(f"vectors[{index}] must be an array of numbers.")
    values: List[float] = []
    for value in raw:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise CatalogFormatError(f"vectors[{index}] contains a non-numeric value: {value!r}.")
        try:
            number = float(value)
        except (OverflowError, ValueError) as exc:
            raise CatalogFormatError(f"vectors[{index}] contains an out-of-range value.") from exc
        if not math.isfinite(number):
            raise CatalogFormatError(f"vectors[{index}] contains a non-finite value.")
        values.append(number)
    if not values:
        raise CatalogFormatError(f"vectors[{index}] is empty.")
    return tuple(values)


def parse_catalog(data: Any) -> Tuple[ProductVector, ...]:
    """Validate catalog data and build its products in insertion order.

    Missing ``products[i]`` entries get a synthetic zero-padded id such as ``P001`` and the
    name ``Product {i+1}``.
    """

    if not isinstance(data, Mapping):
        raise CatalogFormatError("Catalog data must be an object with a 'vectors' array.")
    vectors = data.get("vectors")
    if isinstance(vectors, (str, bytes)) or not isinstance(vectors, Sequence):
        raise CatalogFormatError("Catalog data must contain a 'vectors' array.")
    products_meta = data.get("products") or []
    if isinstance(products_meta, (str, bytes)) or not isinstance(products_meta, Sequence):
        raise CatalogFormatError("'products' must be an array when present.")

    products: List[ProductVector] = []
    seen_ids = set()
    for index, raw_vector in enumerate(vectors):
        vector = _parse_vector(raw_vector, index)
        meta = products_meta[index] if index < len(products_meta) else None
        if meta is not None and not isinstance(meta, Mapping):
            raise CatalogFormatError(f"products[{index}] must be an object.")
        meta = meta or {}

        product_id = str(meta.get("id") or f"P{index + 1:03d}")
        if product_id in seen_ids:
            raise CatalogFormatError(f"Duplicate product id {product_id!r}.")
        seen_ids.add(product_id)

        strength = meta.get("strength")
        products.append(
            ProductVector(
                id=product_id,
                name=str(meta.get("name") or f"Product {index + 1}"),
                vector=vector,
                strength=str(strength) if strength is not None else None,
            )
        )
    return tuple(products)


class ProductCatalog(VectorStore):
    """Small in-memory catalog of product vectors searched exhaustively."""

    def __init__(self, products: Iterable[ProductVector] = ()) -> None:
        self.name = "catalog"
        self._products: Tuple[ProductVector, ...] = tuple(products)
        self._lock = threading.Lock()

    @property
    def products(self) -> Tuple[ProductVector, ...]:
        return self._products

    def __len__(self) -> int:
        return len(self._products)

    def load(self, data: Any) -> bool:
        """Replace the catalog with ``data``; malformed data keeps the current catalog."""

        try:
            products = parse_catalog(data)
        except CatalogFormatError as exc:
            logger.error("Failed to load catalog, keeping %d existing products: %s", len(self._products), exc)
            return False

        with self._lock:
            self._products = products
        logger.info("Loaded catalog with %d products", len(products))
        return True

    def load_json(self, text: str) -> bool:
        try:
            data = json.loads(text)
        except ValueError as exc:
            logger.error("Failed to parse catalog JSON: %s", exc)
            return False
        return self.load(data)

    def load_file(self, path: Union[str, Path]) -> bool:
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as exc:
            logger.error("Failed to read catalog file %s: %s", path, exc)
            return False
        return self.load_json(text)

    def find_nearest(self, query: Sequence[float], k: int = DEFAULT_TOP_K) -> List[SimilarityMatch]:
        """Rank every product against ``query``; ties keep catalog order."""

        if k <= 0:
            return []
        try:
            query_array = np.asarray(query, dtype=np.float64).ravel()
        except (OverflowError, TypeError) as exc:
            raise ValueError(f"Query vector must contain only finite numbers: {exc}") from exc
        if not np.all(np.isfinite(query_array)):
            raise ValueError("Query vector must contain only finite numbers.")

        products = self._products
        matches = [
            SimilarityMatch(product=product, similarity=cosine_similarity(query_array, product.vector))
            for product in products
        ]
        matches.sort(key=lambda match: match.similarity, reverse=True)
        return matches[:k]

    def search(self, query: Sequence[float], k: int = DEFAULT_TOP_K) -> List[Tuple[str, float]]:
        return [(match.product.id, match.similarity) for match in self.find_nearest(query, k)]

    def get(self, product_id: str) -> Optional[ProductVector]:
        for product in self._products:
            if product.id == product_id:
                return product
        return None


_catalog: Optional[ProductCatalog] = None
_catalog_lock = threading.Lock()


def get_catalog() -> ProductCatalog:
    """Return the process-wide catalog, seeding it with :data:`SAMPLE_CATALOG` on first use."""

    global _catalog
    if _catalog is None:
        with _catalog_lock:
            if _catalog is None:
                _catalog = ProductCatalog(parse_catalog(SAMPLE_CATALOG))
    return _catalog


__all__ = [
    "DEFAULT_TOP_K",
    "ProductCatalog",
    "SAMPLE_CATALOG",
    "cosine_similarity",
    "get_catalog",
    "parse_catalog",
]
