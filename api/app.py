# Path: api/app.py
# Purpose: Expose a FastAPI application for text extraction and product matching.
# Layer: api.
# Details: Provides health checks plus extract, match, and catalog endpoints delegating to the core services.

from __future__ import annotations

import base64
import binascii
from typing import Any, Dict, Optional

from core.errors import ExtractionError
from core.extraction.pipeline import ExtractionPipeline
from core.models.domain import SourceImage
from core.vector_store.catalog_store import DEFAULT_TOP_K, ProductCatalog, get_catalog
from core.vector_store.parsing import parse_feature_vector


def create_app(pipeline: Optional[ExtractionPipeline] = None, catalog: Optional[ProductCatalog] = None):  # type: ignore[override]
    """Create a FastAPI app instance configured with the provided pipeline and catalog."""

    from fastapi import FastAPI, HTTPException

    app = FastAPI(title="labelscan API", version="0.1.0")
    product_catalog = catalog if catalog is not None else get_catalog()

    @app.get("/health")
    def health() -> Dict[str, Any]:
        """Return a simple health status payload."""

        return {"status": "ok", "catalog_size": len(product_catalog)}

    @app.post("/extract")
    def extract(payload: Dict[str, Any]):
        """Extract text from a base64-encoded image."""

        if pipeline is None:
            raise HTTPException(status_code=500, detail="Extraction pipeline is not configured.")

        encoded = payload.get("image_base64")
        if not isinstance(encoded, str) or not encoded:
            raise HTTPException(status_code=400, detail="'image_base64' is required.")
        if encoded.startswith("data:") and "," in encoded:
            encoded = encoded.split(",", 1)[1]
        try:
            image = SourceImage.from_bytes(base64.b64decode(encoded, validate=True))
        except (binascii.Error, OSError, ValueError) as exc:
            raise HTTPException(status_code=400, detail=f"Invalid image: {exc}") from exc

        try:
            result = pipeline.extract(image)
        except ExtractionError as exc:
            raise HTTPException(status_code=503, detail=str(exc)) from exc
        return result.to_dict()

    @app.post("/match")
    def match(payload: Dict[str, Any]):
        """Rank catalog products against a query vector."""

        vector = parse_feature_vector(payload.get("vector", payload))
        if vector is None:
            raise HTTPException(status_code=400, detail="A numeric query vector is required.")
        try:
            k = int(payload.get("k", DEFAULT_TOP_K))
            matches = product_catalog.find_nearest(vector, k=k)
        except (OverflowError, TypeError, ValueError) as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return {"results": [item.to_dict() for item in matches]}

    @app.post("/catalog")
    def replace_catalog(payload: Dict[str, Any]):
        """Replace the whole catalog; malformed data leaves the current one in place."""

        if not product_catalog.load(payload):
            raise HTTPException(status_code=400, detail="Malformed catalog data; previous catalog kept.")
        return {"status": "ok", "catalog_size": len(product_catalog)}

    return app
