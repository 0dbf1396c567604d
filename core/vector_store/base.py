# Path: core/vector_store/base.py
# Purpose: Define the VectorStore interface for loading and searching product vectors.
# Layer: core/vector_store.
# Details: Stores are replaced wholesale on load; searches return (id, similarity) pairs.

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, List, Optional, Sequence, Tuple

from core.models.domain import ProductVector


class VectorStore(ABC):
    """Abstract base class for pluggable product vector stores."""

    name: str

    @abstractmethod
    def load(self, data: Any) -> bool:
        """Replace the whole store from structured data; return False and keep the old data on failure."""

    @abstractmethod
    def search(self, query: Sequence[float], k: int) -> List[Tuple[str, float]]:
        """Return up to ``k`` (product id, similarity) pairs, most similar first."""

    @abstractmethod
    def get(self, product_id: str) -> Optional[ProductVector]:
        """Return the stored product for the given identifier if available."""
