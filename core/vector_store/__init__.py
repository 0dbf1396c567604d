# Path: core/vector_store/__init__.py
# Purpose: Package initializer for product vector storage and similarity search.
# Layer: core/vector_store.
# Details: Exposes the VectorStore interface, the product catalog, and query vector parsing.

from .base import VectorStore
from .catalog_store import DEFAULT_TOP_K, SAMPLE_CATALOG, ProductCatalog, cosine_similarity, get_catalog, parse_catalog
from .parsing import parse_feature_vector

__all__ = [
    "DEFAULT_TOP_K",
    "ProductCatalog",
    "SAMPLE_CATALOG",
    "VectorStore",
    "cosine_similarity",
    "get_catalog",
    "parse_catalog",
    "parse_feature_vector",
]
